"""
Security guards for role-based and ownership-based access control.

Provides dependencies for protecting endpoints.
"""

from typing import List
from fastapi import Depends, HTTPException, status
from omnibus.app.models.enums import UserType
from omnibus.app.core.dependencies import get_current_user


def require_role(allowed_roles: List[UserType]):
    """
    Dependency factory for role-based access control.
    
    Usage:
        @router.post("/bookings/{booking_id}/driver-response")
        async def respond(current_user: dict = Depends(require_role([UserType.DRIVER]))):
            ...
    
    Raises:
        HTTPException 403 if user role is not in allowed_roles
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        try:
            user_role = UserType(current_user.get("role"))
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid role in token"
            )
        
        if user_role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )
        
        return current_user
    
    return role_checker


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """Dependency for admin-only endpoints (reference data maintenance)."""
    if current_user.get("role") != UserType.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    
    return current_user


def is_admin(current_user: dict) -> bool:
    return current_user.get("role") == UserType.ADMIN.value


class OwnershipGuard:
    """
    Ownership guard for passenger- and driver-owned resources.
    
    Usage:
        ownership_guard = OwnershipGuard()
        ownership_guard.enforce(booking.user_id, current_user, "booking")
    """
    
    def enforce(
        self,
        resource_owner_id: int,
        current_user: dict,
        resource_name: str = "resource"
    ):
        """
        Raise 403 unless the caller owns the resource or is an admin.
        """
        if is_admin(current_user):
            return
        if current_user.get("user_id") != resource_owner_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. You do not have permission to access this {resource_name}."
            )
