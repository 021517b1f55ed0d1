"""
Message schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class MessageCreate(BaseModel):
    receiver_id: int
    booking_id: Optional[int] = None
    content: str = Field(..., min_length=1, max_length=2000)


class MessageResponse(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    booking_id: Optional[int]
    content: str
    is_read: bool
    timestamp: datetime
    
    class Config:
        from_attributes = True


class ConversationResponse(BaseModel):
    other_user_id: int
    messages: List[MessageResponse]
    unread: int
