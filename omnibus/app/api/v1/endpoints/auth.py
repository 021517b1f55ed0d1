"""
Identity API endpoints.

Tokens are issued elsewhere; this API resolves the caller and lets them
revoke the token they are using.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from omnibus.app.db.session import get_db
from omnibus.app.models.user import User
from omnibus.app.schemas.auth import UserResponse, LogoutResponse
from omnibus.app.core.dependencies import get_current_user
from omnibus.app.core.token_revocation import revoke_token
from omnibus.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get current authenticated user information.
    
    Requires valid JWT token in Authorization header.
    
    Raises:
        404: If user not found in database
    """
    user = await db.get(User, current_user["user_id"])
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Revoke the bearer token used for this request.
    
    Later requests with the same token get 401.
    """
    revoked = await revoke_token(current_user["token"], current_user["user_id"])
    
    await log_event(
        db=db,
        action=AuditAction.USER_LOGGED_OUT,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        metadata={"revoked": revoked}
    )
    await db.commit()
    
    return LogoutResponse(
        message="Logged out" if revoked else "Logout could not be recorded",
        revoked=revoked
    )
