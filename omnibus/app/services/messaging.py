"""
Messaging service.

Direct messages between passengers and drivers.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_, or_
from typing import List, Optional

from omnibus.app.core.exceptions import ResourceNotFoundError, BookingValidationError
from omnibus.app.models.booking import Booking
from omnibus.app.models.message import Message
from omnibus.app.models.user import User


class MessageService:

    @staticmethod
    async def send(
        db: AsyncSession,
        sender_id: int,
        receiver_id: int,
        content: str,
        booking_id: Optional[int] = None
    ) -> Message:
        """
        Raises:
            BookingValidationError: Messaging oneself
            ResourceNotFoundError: Unknown receiver or booking
        """
        if sender_id == receiver_id:
            raise BookingValidationError("Cannot send a message to yourself")
        if not await db.get(User, receiver_id):
            raise ResourceNotFoundError("User", receiver_id)
        if booking_id is not None and not await db.get(Booking, booking_id):
            raise ResourceNotFoundError("Booking", booking_id)

        message = Message(
            sender_id=sender_id,
            receiver_id=receiver_id,
            booking_id=booking_id,
            content=content
        )
        db.add(message)
        await db.commit()
        await db.refresh(message)
        return message

    @staticmethod
    async def conversation(db: AsyncSession, user_id: int, other_user_id: int) -> List[Message]:
        """Messages exchanged between two users, oldest first."""
        result = await db.execute(
            select(Message)
            .where(or_(
                and_(Message.sender_id == user_id, Message.receiver_id == other_user_id),
                and_(Message.sender_id == other_user_id, Message.receiver_id == user_id)
            ))
            .order_by(Message.timestamp, Message.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def mark_read(db: AsyncSession, message_id: int, user_id: int) -> bool:
        """Mark a message as read. Only the receiver can do this."""
        stmt = update(Message).where(
            Message.id == message_id,
            Message.receiver_id == user_id
        ).values(is_read=True)
        result = await db.execute(stmt)
        return result.rowcount > 0
