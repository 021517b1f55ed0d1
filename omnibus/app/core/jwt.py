"""
JWT token utilities.

Tokens are issued by the identity provider in front of this service; the API
only needs to decode them, and to mint them for tooling and tests.
"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from omnibus.app.core.config import settings


def token_claims(user) -> Dict[str, Any]:
    """Claims carried for a user: sub (username), user_id and role."""
    return {"sub": user.username, "user_id": user.id, "role": user.user_type.value}


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode (sub, user_id, role)
        expires_delta: Lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {**data, "exp": datetime.utcnow() + lifetime}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def create_user_token(user, expires_delta: Optional[timedelta] = None) -> str:
    return create_access_token(token_claims(user), expires_delta)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT access token.

    Returns None for a bad signature, a malformed token or an expired one.
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
