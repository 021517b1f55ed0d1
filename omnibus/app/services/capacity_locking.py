"""
Capacity locking service.

Serializes capacity-check-and-insert per (schedule_id, travel_date), and
driver responses per booking. Within a process an asyncio.Lock per key orders
concurrent requests; across processes the schedule or booking row is locked
with SELECT ... FOR UPDATE inside the same transaction (a no-op on SQLite,
which serializes writers itself).
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import date
from typing import Dict, Hashable, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from omnibus.app.models.booking import Booking
from omnibus.app.models.schedule import Schedule


class KeyedLock:
    """
    Registry of asyncio locks created on demand and dropped when idle.
    """
    
    def __init__(self):
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._users: Dict[Hashable, int] = {}
    
    @asynccontextmanager
    async def hold(self, key: Hashable):
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]
    
    def active_keys(self) -> int:
        return len(self._locks)


booking_capacity_locks = KeyedLock()
booking_response_locks = KeyedLock()


def capacity_key(schedule_id: int, travel_date: date) -> Tuple[int, str]:
    return (schedule_id, travel_date.isoformat())


async def lock_schedule_row(db: AsyncSession, schedule_id: int) -> Schedule | None:
    """
    Load a schedule with a row lock held until the transaction ends.
    
    Returns:
        The schedule, or None if it does not exist
    """
    result = await db.execute(
        select(Schedule).where(Schedule.id == schedule_id).with_for_update()
    )
    return result.scalar_one_or_none()


async def lock_booking_row(db: AsyncSession, booking_id: int) -> Booking | None:
    """Load a booking with a row lock held until the transaction ends."""
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()
