"""
Capacity Checker.

Computes the seats already committed on a schedule for a travel date and
compares them with the capacity of the schedule's vehicle.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from omnibus.app.core.exceptions import ResourceNotFoundError, CapacityExceededError, BookingValidationError
from omnibus.app.models.booking import Booking
from omnibus.app.models.enums import BookingStatus
from omnibus.app.models.schedule import Schedule
from omnibus.app.models.vehicle import Vehicle

logger = logging.getLogger("omnibus.capacity")

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def weekday_name(travel_date: date) -> str:
    return WEEKDAYS[travel_date.weekday()]


@dataclass(frozen=True)
class CapacityResult:
    ok: bool
    available_seats: int
    committed_seats: int
    capacity: int
    operates_on_date: bool = True


class CapacityChecker:
    
    @staticmethod
    async def committed_seats(db: AsyncSession, schedule_id: int, travel_date: date) -> int:
        """Sum of seats over non-cancelled bookings for the schedule and date."""
        result = await db.execute(
            select(func.coalesce(func.sum(Booking.number_of_seats), 0)).where(
                Booking.schedule_id == schedule_id,
                Booking.travel_date == travel_date,
                Booking.status != BookingStatus.CANCELLED
            )
        )
        return int(result.scalar() or 0)
    
    @staticmethod
    async def check_capacity(
        db: AsyncSession,
        schedule_id: int,
        travel_date: date,
        requested_seats: int,
        schedule: Optional[Schedule] = None
    ) -> CapacityResult:
        """
        Check whether ``requested_seats`` still fit on a schedule.
        
        A travel date on which the schedule does not run yields ok=False with
        no seats available rather than an error.
        
        Args:
            db: Database session
            schedule_id: Schedule to check
            travel_date: Calendar date of the ride
            requested_seats: Seats wanted (>= 1)
            schedule: Already loaded (and possibly row-locked) schedule
            
        Raises:
            ResourceNotFoundError: Schedule or its vehicle missing or inactive
        """
        if requested_seats < 1:
            raise BookingValidationError(
                "At least one seat must be requested",
                details={"requested_seats": requested_seats}
            )
        
        if schedule is None:
            schedule = await db.get(Schedule, schedule_id)
        if not schedule or not schedule.is_active:
            raise ResourceNotFoundError("Schedule", schedule_id)
        
        vehicle = await db.get(Vehicle, schedule.vehicle_id)
        if not vehicle or not vehicle.is_active:
            raise ResourceNotFoundError("Vehicle", schedule.vehicle_id)
        
        committed = await CapacityChecker.committed_seats(db, schedule.id, travel_date)
        
        if not schedule.operates_on(weekday_name(travel_date)):
            return CapacityResult(
                ok=False,
                available_seats=0,
                committed_seats=committed,
                capacity=vehicle.capacity,
                operates_on_date=False
            )
        
        available = max(vehicle.capacity - committed, 0)
        return CapacityResult(
            ok=committed + requested_seats <= vehicle.capacity,
            available_seats=available,
            committed_seats=committed,
            capacity=vehicle.capacity
        )
    
    @staticmethod
    async def ensure_capacity(
        db: AsyncSession,
        schedule: Schedule,
        travel_date: date,
        requested_seats: int
    ) -> CapacityResult:
        """
        Guard form of :meth:`check_capacity` used while creating a booking.
        
        Raises:
            BookingValidationError: The schedule does not run on that weekday
            CapacityExceededError: If the seats do not fit
        """
        result = await CapacityChecker.check_capacity(
            db, schedule.id, travel_date, requested_seats, schedule=schedule
        )
        if not result.operates_on_date:
            raise BookingValidationError(
                f"Schedule does not run on {weekday_name(travel_date)}",
                details={"schedule_id": schedule.id, "travel_date": travel_date.isoformat()}
            )
        if not result.ok:
            logger.info(
                "Capacity rejected schedule=%s date=%s requested=%s available=%s",
                schedule.id, travel_date, requested_seats, result.available_seats
            )
            raise CapacityExceededError(
                schedule_id=schedule.id,
                travel_date=travel_date,
                requested_seats=requested_seats,
                available_seats=result.available_seats
            )
        return result
