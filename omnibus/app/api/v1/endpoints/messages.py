"""
Messaging API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from omnibus.app.db.session import get_db
from omnibus.app.core.dependencies import get_current_user
from omnibus.app.schemas.message import MessageCreate, MessageResponse, ConversationResponse
from omnibus.app.services.messaging import MessageService

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    data: MessageCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Send a message to another user, optionally about a booking."""
    return await MessageService.send(
        db,
        sender_id=current_user["user_id"],
        receiver_id=data.receiver_id,
        content=data.content,
        booking_id=data.booking_id
    )


@router.get("/conversation/{other_user_id}", response_model=ConversationResponse)
async def get_conversation(
    other_user_id: int = Path(..., description="Other participant"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Messages between the caller and another user, oldest first."""
    user_id = current_user["user_id"]
    messages = await MessageService.conversation(db, user_id, other_user_id)
    return ConversationResponse(
        other_user_id=other_user_id,
        messages=[MessageResponse.model_validate(m) for m in messages],
        unread=sum(1 for m in messages if m.receiver_id == user_id and not m.is_read)
    )


@router.patch("/{message_id}/read")
async def mark_message_read(
    message_id: int = Path(...),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Mark a received message as read."""
    success = await MessageService.mark_read(db, message_id, current_user["user_id"])
    if not success:
        raise HTTPException(status_code=404, detail="Message not found")
    
    await db.commit()
    return {"status": "success"}
