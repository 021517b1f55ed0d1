"""
Vehicle tracking service.

Stores positions reported by drivers. Readers only ever look at the latest
row per vehicle (see booking_queries.get_tracking_view).
"""

from sqlalchemy.ext.asyncio import AsyncSession

from omnibus.app.core.exceptions import ResourceNotFoundError, InsufficientPermissionsError, BookingValidationError
from omnibus.app.core.guards import is_admin
from omnibus.app.models.booking import Booking
from omnibus.app.models.vehicle import Vehicle
from omnibus.app.models.vehicle_location import VehicleLocation
from omnibus.app.schemas.tracking import LocationReport


async def report_location(db: AsyncSession, report: LocationReport, current_user: dict) -> VehicleLocation:
    """
    Record a position for a vehicle owned by the calling driver.

    Raises:
        ResourceNotFoundError: Unknown vehicle or booking
        InsufficientPermissionsError: Vehicle belongs to another driver
    """
    vehicle = await db.get(Vehicle, report.vehicle_id)
    if not vehicle:
        raise ResourceNotFoundError("Vehicle", report.vehicle_id)
    if not is_admin(current_user) and vehicle.driver_id != current_user["user_id"]:
        raise InsufficientPermissionsError(
            "This vehicle is not assigned to you",
            details={"vehicle_id": vehicle.id}
        )

    if report.booking_id is not None:
        booking = await db.get(Booking, report.booking_id)
        if not booking:
            raise ResourceNotFoundError("Booking", report.booking_id)
        if booking.schedule_id is not None:
            raise BookingValidationError(
                "Scheduled bookings are tracked through their vehicle",
                details={"booking_id": booking.id}
            )
        if not is_admin(current_user) and booking.responded_by_id != current_user["user_id"]:
            raise InsufficientPermissionsError(
                "This custom booking was answered by another driver",
                details={"booking_id": booking.id}
            )

    location = VehicleLocation(
        vehicle_id=vehicle.id,
        booking_id=report.booking_id,
        reported_by_id=current_user["user_id"],
        latitude=report.latitude,
        longitude=report.longitude,
        speed_kmh=report.speed_kmh,
        heading=report.heading
    )
    db.add(location)
    await db.commit()
    await db.refresh(location)
    return location
