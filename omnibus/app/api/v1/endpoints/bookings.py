"""
Booking API endpoints.

Passengers create, pay, cancel and track bookings and answer driver
alternatives. Drivers answer pending requests.
"""

from fastapi import APIRouter, Depends, Path, Body, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from omnibus.app.db.session import get_db
from omnibus.app.core.dependencies import get_current_user
from omnibus.app.core.exceptions import InsufficientPermissionsError
from omnibus.app.core.guards import require_role, OwnershipGuard
from omnibus.app.domain.booking.booking_service import BookingService
from omnibus.app.models.enums import UserType
from omnibus.app.schemas.booking import (
    BookingRequest, BookingWithDetails, BookingListResponse,
    DriverResponseRequest, UserResponseRequest, PaymentRequest
)
from omnibus.app.schemas.tracking import TrackingView
from omnibus.app.services import booking_queries

router = APIRouter(prefix="/bookings", tags=["Bookings"])

ownership_guard = OwnershipGuard()


@router.post("", response_model=BookingWithDetails, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: BookingRequest = Body(...),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Book seats.
    
    ``booking_type`` selects the request shape:
    - standard: schedule, named stops and seats; capacity checked atomically,
      confirmed immediately
    - custom: free-text locations and a quoted fare; waits for a driver
    
    Returns 409 when the schedule has not enough seats left.
    """
    booking = await BookingService.create_booking(db, request, current_user)
    return await booking_queries.get_booking_with_details(db, booking.id)


@router.get("/mine", response_model=BookingListResponse)
async def list_my_bookings(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Caller's bookings with schedule, route, vehicle and driver, newest first."""
    bookings = await booking_queries.get_user_bookings(db, current_user["user_id"])
    return BookingListResponse(bookings=bookings, total=len(bookings))


@router.get("/{booking_id}", response_model=BookingWithDetails)
async def get_booking(
    booking_id: int = Path(..., description="Booking ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Booking details.
    
    Visible to its passenger, its driver and admins.
    """
    booking = await BookingService.get_booking(db, booking_id)
    if not await BookingService.can_view(db, booking, current_user):
        raise InsufficientPermissionsError(
            "You do not have access to this booking",
            details={"booking_id": booking_id}
        )
    return await booking_queries.get_booking_with_details(db, booking_id)


@router.patch("/{booking_id}/driver-response", response_model=BookingWithDetails)
async def respond_as_driver(
    data: DriverResponseRequest,
    booking_id: int = Path(..., description="Booking ID"),
    current_user: dict = Depends(require_role([UserType.DRIVER, UserType.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """
    Accept, decline or offer an alternative (Driver only).
    
    accepted -> confirmed, alternative_offered -> driver_alternative,
    declined -> cancelled.
    """
    booking = await BookingService.apply_driver_response(
        db,
        booking_id,
        data.driver_response,
        current_user,
        alternative_pickup=data.alternative_pickup,
        alternative_dropoff=data.alternative_dropoff,
        notes=data.driver_notes
    )
    return await booking_queries.get_booking_with_details(db, booking.id)


@router.patch("/{booking_id}/user-response", response_model=BookingWithDetails)
async def respond_as_passenger(
    data: UserResponseRequest,
    booking_id: int = Path(..., description="Booking ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Accept or reject a driver's alternative offer."""
    booking = await BookingService.apply_user_response(db, booking_id, data.accepted, current_user)
    return await booking_queries.get_booking_with_details(db, booking.id)


@router.post("/{booking_id}/cancel", response_model=BookingWithDetails)
async def cancel_booking(
    booking_id: int = Path(..., description="Booking ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Cancel a booking.
    
    Seats are released immediately. Paid bookings are marked refunded.
    """
    booking = await BookingService.cancel_booking(db, booking_id, current_user)
    return await booking_queries.get_booking_with_details(db, booking.id)


@router.post("/{booking_id}/pay", response_model=BookingWithDetails)
async def pay_booking(
    data: Optional[PaymentRequest] = Body(None),
    booking_id: int = Path(..., description="Booking ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Record payment for a booking."""
    payment_method = data.payment_method if data else None
    booking = await BookingService.mark_paid(db, booking_id, current_user, payment_method)
    return await booking_queries.get_booking_with_details(db, booking.id)


@router.get("/{booking_id}/tracking", response_model=TrackingView)
async def track_booking(
    booking_id: int = Path(..., description="Booking ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Last known position of the vehicle serving this booking."""
    booking = await BookingService.get_booking(db, booking_id)
    ownership_guard.enforce(booking.user_id, current_user, "booking")
    return await booking_queries.get_tracking_view(db, booking)
