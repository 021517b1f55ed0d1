"""
Identity Pydantic schemas.

Tokens are issued by the identity provider; these schemas only describe
the resolved caller and the logout acknowledgement.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from omnibus.app.models.enums import UserType


class UserResponse(BaseModel):
    """
    Schema for user information response.
    
    Used by GET /auth/me endpoint.
    """
    id: int
    email: str
    username: str
    full_name: str
    phone: Optional[str] = None
    user_type: UserType
    is_active: bool
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class LogoutResponse(BaseModel):
    message: str
    revoked: bool
