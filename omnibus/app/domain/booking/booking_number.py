"""
Human-readable booking numbers.

The number embeds the creation time in epoch milliseconds (always 13 digits)
followed by the database id, so two bookings can never share a number even
when created in the same millisecond.
"""

import uuid
from datetime import datetime


def generate_booking_number(booking_id: int, created_at: datetime) -> str:
    millis = int(created_at.timestamp() * 1000)
    return f"BK{millis}{booking_id:06d}"


def placeholder_booking_number() -> str:
    """Unique stand-in used until the row id is allocated."""
    return f"TMP-{uuid.uuid4().hex}"
