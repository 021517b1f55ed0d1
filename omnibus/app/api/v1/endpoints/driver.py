"""
Driver API endpoints.

Drivers see the bookings on their vehicles, pick up open custom requests,
run trips and report positions.
"""

from fastapi import APIRouter, Depends, Path, Body, status
from sqlalchemy.ext.asyncio import AsyncSession

from omnibus.app.db.session import get_db
from omnibus.app.core.guards import require_role
from omnibus.app.domain.booking.booking_service import BookingService
from omnibus.app.models.enums import UserType
from omnibus.app.schemas.booking import BookingWithDetails, BookingListResponse
from omnibus.app.schemas.tracking import LocationReport, LocationResponse
from omnibus.app.services import booking_queries
from omnibus.app.services.tracking import report_location

router = APIRouter(prefix="/driver", tags=["Driver"])


@router.get("/bookings", response_model=BookingListResponse)
async def list_driver_bookings(
    current_user: dict = Depends(require_role([UserType.DRIVER])),
    db: AsyncSession = Depends(get_db)
):
    """
    Bookings served by the calling driver.
    
    Scheduled bookings on the driver's vehicles plus custom requests the
    driver has answered.
    """
    bookings = await booking_queries.get_driver_bookings(db, current_user["user_id"])
    return BookingListResponse(bookings=bookings, total=len(bookings))


@router.get("/bookings/open", response_model=BookingListResponse)
async def list_open_requests(
    current_user: dict = Depends(require_role([UserType.DRIVER])),
    db: AsyncSession = Depends(get_db)
):
    """Custom requests no driver has answered yet."""
    bookings = await booking_queries.list_open_custom_requests(db)
    return BookingListResponse(bookings=bookings, total=len(bookings))


@router.post("/bookings/{booking_id}/start", response_model=BookingWithDetails)
async def start_trip(
    booking_id: int = Path(..., description="Booking ID"),
    current_user: dict = Depends(require_role([UserType.DRIVER])),
    db: AsyncSession = Depends(get_db)
):
    """Passenger picked up: confirmed -> in_transit."""
    booking = await BookingService.start_trip(db, booking_id, current_user)
    return await booking_queries.get_booking_with_details(db, booking.id)


@router.post("/bookings/{booking_id}/complete", response_model=BookingWithDetails)
async def complete_trip(
    booking_id: int = Path(..., description="Booking ID"),
    current_user: dict = Depends(require_role([UserType.DRIVER])),
    db: AsyncSession = Depends(get_db)
):
    """Passenger dropped off: in_transit -> completed."""
    booking = await BookingService.complete_trip(db, booking_id, current_user)
    return await booking_queries.get_booking_with_details(db, booking.id)


@router.post("/tracking/location", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
async def record_location(
    report: LocationReport = Body(...),
    current_user: dict = Depends(require_role([UserType.DRIVER])),
    db: AsyncSession = Depends(get_db)
):
    """
    Record the position of one of the driver's vehicles.
    
    Creates a breadcrumb; passengers see the latest one.
    """
    return await report_location(db, report, current_user)
