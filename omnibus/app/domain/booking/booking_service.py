"""
Booking Lifecycle Manager (Domain Logic).

Creates bookings and drives their status transitions in response to
driver and passenger actions. Every public method runs in the caller's
session and commits on success; on failure nothing is written.
"""

import logging
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from omnibus.app.core.clock import utc_now
from omnibus.app.core.config import settings
from omnibus.app.core.exceptions import (
    ResourceNotFoundError, BookingValidationError, InvalidStateError, InsufficientPermissionsError
)
from omnibus.app.core.guards import is_admin
from omnibus.app.domain.booking.booking_number import generate_booking_number, placeholder_booking_number
from omnibus.app.domain.booking.capacity_checker import CapacityChecker
from omnibus.app.domain.booking.state_machine import (
    DRIVER_RESPONSE_SOURCES, DRIVER_RESPONSE_TARGETS, ensure_transition
)
from omnibus.app.models.booking import Booking
from omnibus.app.models.enums import BookingType, BookingStatus, DriverResponse, PaymentStatus, UserType
from omnibus.app.models.route import Route
from omnibus.app.models.schedule import Schedule
from omnibus.app.models.vehicle import Vehicle
from omnibus.app.schemas.booking import StandardBookingRequest, CustomBookingRequest
from omnibus.app.services.audit import log_event, AuditAction
from omnibus.app.services.capacity_locking import (
    booking_capacity_locks, booking_response_locks, capacity_key, lock_schedule_row, lock_booking_row
)

logger = logging.getLogger("omnibus.bookings")

CENT = Decimal("0.01")


def compute_total_fare(fare_per_seat: Decimal, number_of_seats: int) -> Decimal:
    """seats x fare + fixed service fee, rounded to cents."""
    return (Decimal(fare_per_seat) * number_of_seats + settings.service_fee).quantize(CENT)


def format_coordinates(coords) -> Optional[str]:
    if coords is None:
        return None
    return f"{coords[0]},{coords[1]}"


class BookingService:

    @staticmethod
    async def create_booking(
        db: AsyncSession,
        request: Union[StandardBookingRequest, CustomBookingRequest],
        current_user: dict
    ) -> Booking:
        """
        Create a booking from a standard or custom request.

        Standard requests are capacity-checked and inserted while holding the
        (schedule, travel date) lock; custom requests skip the check and wait
        for a driver in pending_driver_confirmation.

        Raises:
            BookingValidationError: Travel date in the past or unknown stops
            ResourceNotFoundError: Schedule, route or vehicle missing or inactive
            CapacityExceededError: Not enough seats left
        """
        if request.travel_date < utc_now().date():
            raise BookingValidationError(
                "Travel date cannot be in the past",
                details={"travel_date": request.travel_date.isoformat()}
            )

        if isinstance(request, StandardBookingRequest):
            return await BookingService._create_standard(db, request, current_user)
        return await BookingService._create_custom(db, request, current_user)

    @staticmethod
    async def _create_standard(db: AsyncSession, request: StandardBookingRequest, current_user: dict) -> Booking:
        key = capacity_key(request.schedule_id, request.travel_date)

        async with booking_capacity_locks.hold(key):
            try:
                schedule = await lock_schedule_row(db, request.schedule_id)
                if not schedule or not schedule.is_active:
                    raise ResourceNotFoundError("Schedule", request.schedule_id)

                route = await db.get(Route, schedule.route_id)
                if not route or not route.is_active:
                    raise ResourceNotFoundError("Route", schedule.route_id)

                if request.pickup_point not in (route.pickup_points or []):
                    raise BookingValidationError(
                        f"'{request.pickup_point}' is not a pickup point of route {route.name}",
                        details={"allowed": route.pickup_points}
                    )
                if request.dropoff_point not in (route.dropoff_points or []):
                    raise BookingValidationError(
                        f"'{request.dropoff_point}' is not a dropoff point of route {route.name}",
                        details={"allowed": route.dropoff_points}
                    )

                await CapacityChecker.ensure_capacity(
                    db, schedule, request.travel_date, request.number_of_seats
                )

                booking = await BookingService._insert(
                    db,
                    user_id=current_user["user_id"],
                    schedule_id=schedule.id,
                    booking_type=BookingType.STANDARD,
                    pickup_point=request.pickup_point,
                    dropoff_point=request.dropoff_point,
                    number_of_seats=request.number_of_seats,
                    total_fare=compute_total_fare(route.base_fare, request.number_of_seats),
                    payment_method=request.payment_method,
                    status=BookingStatus.CONFIRMED,
                    travel_date=request.travel_date
                )
                await BookingService._audit_created(db, booking, current_user)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "Booking %s created schedule=%s date=%s seats=%s",
            booking.booking_number, booking.schedule_id, booking.travel_date, booking.number_of_seats
        )
        return booking

    @staticmethod
    async def _create_custom(db: AsyncSession, request: CustomBookingRequest, current_user: dict) -> Booking:
        try:
            booking = await BookingService._insert(
                db,
                user_id=current_user["user_id"],
                schedule_id=None,
                booking_type=BookingType.CUSTOM,
                pickup_point=request.custom_pickup_point,
                dropoff_point=request.custom_dropoff_point,
                custom_pickup_point=request.custom_pickup_point,
                custom_dropoff_point=request.custom_dropoff_point,
                pickup_coordinates=format_coordinates(request.pickup_coords),
                dropoff_coordinates=format_coordinates(request.dropoff_coords),
                number_of_seats=request.number_of_seats,
                total_fare=compute_total_fare(request.fare_per_seat, request.number_of_seats),
                payment_method=request.payment_method,
                status=BookingStatus.PENDING_DRIVER_CONFIRMATION,
                travel_date=request.travel_date
            )
            await BookingService._audit_created(db, booking, current_user)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Custom booking %s awaiting driver confirmation", booking.booking_number)
        return booking

    @staticmethod
    async def _insert(db: AsyncSession, **fields) -> Booking:
        created_at = utc_now()
        booking = Booking(
            booking_number=placeholder_booking_number(),
            booking_date=created_at,
            payment_status=PaymentStatus.PENDING,
            **fields
        )
        db.add(booking)
        await db.flush()  # allocates booking.id

        booking.booking_number = generate_booking_number(booking.id, created_at)
        await db.flush()
        return booking

    @staticmethod
    async def _audit_created(db: AsyncSession, booking: Booking, current_user: dict):
        await log_event(
            db=db,
            action=AuditAction.BOOKING_CREATED,
            actor_id=current_user["user_id"],
            actor_username=current_user.get("sub"),
            metadata={
                "booking_id": booking.id,
                "booking_number": booking.booking_number,
                "booking_type": booking.booking_type.value,
                "schedule_id": booking.schedule_id,
                "travel_date": booking.travel_date.isoformat(),
                "seats": booking.number_of_seats
            }
        )

    @staticmethod
    async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
        result = await db.execute(select(Booking).where(Booking.id == booking_id))
        booking = result.scalar_one_or_none()
        if not booking:
            raise ResourceNotFoundError("Booking", booking_id)
        return booking

    @staticmethod
    async def serving_driver_id(db: AsyncSession, booking: Booking) -> Optional[int]:
        """
        Driver responsible for a booking: the owner of the schedule's vehicle,
        or for custom bookings the driver who answered the request.
        """
        if booking.schedule_id is None:
            return booking.responded_by_id
        schedule = await db.get(Schedule, booking.schedule_id)
        if not schedule:
            return None
        vehicle = await db.get(Vehicle, schedule.vehicle_id)
        return vehicle.driver_id if vehicle else None

    @staticmethod
    async def can_view(db: AsyncSession, booking: Booking, current_user: dict) -> bool:
        if is_admin(current_user) or booking.user_id == current_user["user_id"]:
            return True
        if current_user.get("role") != UserType.DRIVER.value:
            return False
        if booking.booking_type == BookingType.CUSTOM and booking.responded_by_id is None:
            return True  # open request, visible to all drivers
        return await BookingService.serving_driver_id(db, booking) == current_user["user_id"]

    @staticmethod
    async def _ensure_serving_driver(db: AsyncSession, booking: Booking, current_user: dict):
        if is_admin(current_user):
            return
        if current_user.get("role") != UserType.DRIVER.value:
            raise InsufficientPermissionsError("Only drivers can act on this booking")

        driver_id = await BookingService.serving_driver_id(db, booking)
        if booking.schedule_id is None and driver_id is None:
            return  # any driver may pick up an unanswered custom request
        if driver_id != current_user["user_id"]:
            raise InsufficientPermissionsError(
                "This booking is not served by you",
                details={"booking_id": booking.id}
            )

    @staticmethod
    def _ensure_owner(booking: Booking, current_user: dict):
        if not is_admin(current_user) and booking.user_id != current_user["user_id"]:
            raise InsufficientPermissionsError(
                "This booking belongs to another passenger",
                details={"booking_id": booking.id}
            )

    @staticmethod
    async def apply_driver_response(
        db: AsyncSession,
        booking_id: int,
        response: DriverResponse,
        current_user: dict,
        alternative_pickup: Optional[str] = None,
        alternative_dropoff: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Booking:
        """
        Record a driver's accept / counter-offer / decline.

        accepted -> confirmed, alternative_offered -> driver_alternative,
        declined -> cancelled. Alternative locations and notes are stored only
        with alternative_offered and cleared otherwise.

        Raises:
            ResourceNotFoundError: Unknown booking
            InvalidStateError: Booking is not awaiting a driver response
            BookingValidationError: alternative_offered without any alternative
        """
        async with booking_response_locks.hold(booking_id):
            try:
                booking = await lock_booking_row(db, booking_id)
                if not booking:
                    raise ResourceNotFoundError("Booking", booking_id)

                if booking.status not in DRIVER_RESPONSE_SOURCES:
                    raise InvalidStateError("booking", booking.status.value, "record a driver response for")

                await BookingService._ensure_serving_driver(db, booking, current_user)

                if response == DriverResponse.ALTERNATIVE_OFFERED:
                    if not alternative_pickup and not alternative_dropoff:
                        raise BookingValidationError(
                            "An alternative pickup or dropoff is required when offering an alternative"
                        )
                else:
                    alternative_pickup = alternative_dropoff = notes = None

                target = DRIVER_RESPONSE_TARGETS[response]
                ensure_transition(booking.status, target, "record a driver response for")
                previous = booking.status

                booking.status = target
                booking.driver_response = response
                booking.responded_by_id = current_user["user_id"]
                booking.alternative_pickup = alternative_pickup
                booking.alternative_dropoff = alternative_dropoff
                booking.driver_notes = notes

                await log_event(
                    db=db,
                    action=AuditAction.DRIVER_RESPONDED,
                    actor_id=current_user["user_id"],
                    actor_username=current_user.get("sub"),
                    metadata={
                        "booking_id": booking.id,
                        "response": response.value,
                        "from_status": previous.value,
                        "to_status": target.value
                    }
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info("Booking %s driver response %s: %s -> %s",
                    booking.id, response.value, previous.value, target.value)
        return booking

    @staticmethod
    async def apply_user_response(
        db: AsyncSession,
        booking_id: int,
        accepted: bool,
        current_user: dict
    ) -> Booking:
        """
        Passenger accepts or rejects a driver's alternative offer.

        Raises:
            ResourceNotFoundError: Unknown booking
            InvalidStateError: Booking is not in driver_alternative
        """
        booking = await BookingService.get_booking(db, booking_id)
        BookingService._ensure_owner(booking, current_user)

        if booking.status != BookingStatus.DRIVER_ALTERNATIVE:
            raise InvalidStateError("booking", booking.status.value, "answer a driver alternative for")

        target = BookingStatus.CONFIRMED if accepted else BookingStatus.CANCELLED
        ensure_transition(booking.status, target, "answer a driver alternative for")
        booking.status = target
        if not accepted:
            BookingService._refund_if_paid(booking)

        await log_event(
            db=db,
            action=AuditAction.PASSENGER_RESPONDED,
            actor_id=current_user["user_id"],
            actor_username=current_user.get("sub"),
            metadata={"booking_id": booking.id, "accepted": accepted, "to_status": target.value}
        )
        await db.commit()
        return booking

    @staticmethod
    def _refund_if_paid(booking: Booking):
        if booking.payment_status == PaymentStatus.PAID:
            booking.payment_status = PaymentStatus.REFUNDED

    @staticmethod
    async def cancel_booking(db: AsyncSession, booking_id: int, current_user: dict) -> Booking:
        """
        Cancel a booking (passenger, serving driver or admin).

        The seats stop counting against capacity immediately.
        """
        booking = await BookingService.get_booking(db, booking_id)

        if booking.user_id != current_user["user_id"] and not is_admin(current_user):
            driver_id = await BookingService.serving_driver_id(db, booking)
            if driver_id is None or driver_id != current_user["user_id"]:
                raise InsufficientPermissionsError(
                    "Only the passenger or the serving driver can cancel this booking",
                    details={"booking_id": booking.id}
                )

        ensure_transition(booking.status, BookingStatus.CANCELLED, "cancel")
        previous = booking.status
        booking.status = BookingStatus.CANCELLED
        BookingService._refund_if_paid(booking)

        await log_event(
            db=db,
            action=AuditAction.BOOKING_CANCELLED,
            actor_id=current_user["user_id"],
            actor_username=current_user.get("sub"),
            metadata={"booking_id": booking.id, "from_status": previous.value}
        )
        await db.commit()

        logger.info("Booking %s cancelled (was %s)", booking.id, previous.value)
        return booking

    @staticmethod
    async def start_trip(db: AsyncSession, booking_id: int, current_user: dict) -> Booking:
        """Serving driver picks the passenger up: confirmed -> in_transit."""
        return await BookingService._driver_transition(
            db, booking_id, current_user, BookingStatus.IN_TRANSIT, "start", AuditAction.TRIP_STARTED
        )

    @staticmethod
    async def complete_trip(db: AsyncSession, booking_id: int, current_user: dict) -> Booking:
        """Serving driver drops the passenger off: in_transit -> completed."""
        return await BookingService._driver_transition(
            db, booking_id, current_user, BookingStatus.COMPLETED, "complete", AuditAction.TRIP_COMPLETED
        )

    @staticmethod
    async def _driver_transition(
        db: AsyncSession,
        booking_id: int,
        current_user: dict,
        target: BookingStatus,
        action: str,
        audit_action: str
    ) -> Booking:
        booking = await BookingService.get_booking(db, booking_id)
        await BookingService._ensure_serving_driver(db, booking, current_user)
        ensure_transition(booking.status, target, action)
        booking.status = target

        await log_event(
            db=db,
            action=audit_action,
            actor_id=current_user["user_id"],
            actor_username=current_user.get("sub"),
            metadata={"booking_id": booking.id}
        )
        await db.commit()
        return booking

    @staticmethod
    async def mark_paid(
        db: AsyncSession,
        booking_id: int,
        current_user: dict,
        payment_method: Optional[str] = None
    ) -> Booking:
        """
        Record payment for a booking. Settlement happens outside this service.

        Raises:
            InvalidStateError: Already paid/refunded, or the booking is cancelled
        """
        booking = await BookingService.get_booking(db, booking_id)
        BookingService._ensure_owner(booking, current_user)

        if booking.status == BookingStatus.CANCELLED:
            raise InvalidStateError("booking", booking.status.value, "pay for")
        if booking.payment_status != PaymentStatus.PENDING:
            raise InvalidStateError("booking payment", booking.payment_status.value, "pay for")

        booking.payment_status = PaymentStatus.PAID
        if payment_method:
            booking.payment_method = payment_method

        await log_event(
            db=db,
            action=AuditAction.BOOKING_PAID,
            actor_id=current_user["user_id"],
            actor_username=current_user.get("sub"),
            metadata={"booking_id": booking.id, "amount": str(booking.total_fare)}
        )
        await db.commit()
        return booking
