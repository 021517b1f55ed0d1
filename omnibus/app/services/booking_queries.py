"""
Booking query and enrichment service.

Builds read models that join bookings with their schedule, route, vehicle
and driver. Related rows are batch-loaded per query instead of per booking.
Nothing here flushes or commits.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, func, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from omnibus.app.core.exceptions import ResourceNotFoundError
from omnibus.app.domain.booking.capacity_checker import weekday_name
from omnibus.app.models.booking import Booking
from omnibus.app.models.enums import BookingStatus, BookingType
from omnibus.app.models.route import Route
from omnibus.app.models.schedule import Schedule
from omnibus.app.models.user import User
from omnibus.app.models.vehicle import Vehicle
from omnibus.app.models.vehicle_location import VehicleLocation
from omnibus.app.schemas.booking import BookingResponse, BookingWithDetails
from omnibus.app.schemas.reference import (
    RouteResponse, RouteWithSchedules, ScheduleResponse, ScheduleWithDetails, ScheduleWithVehicle,
    VehicleResponse, VehicleWithDriver, DriverSummary
)
from omnibus.app.schemas.tracking import TrackingView, LocationResponse


async def _load_by_id(db: AsyncSession, model, ids: Iterable[Optional[int]]) -> Dict[int, object]:
    wanted = {i for i in ids if i is not None}
    if not wanted:
        return {}
    result = await db.execute(select(model).where(model.id.in_(wanted)))
    return {row.id: row for row in result.scalars().all()}


def _vehicle_with_driver(vehicle: Optional[Vehicle], drivers: Dict[int, User]) -> Optional[VehicleWithDriver]:
    if vehicle is None:
        return None
    driver = drivers.get(vehicle.driver_id)
    return VehicleWithDriver(
        **VehicleResponse.model_validate(vehicle).model_dump(),
        driver=DriverSummary.model_validate(driver) if driver else None
    )


async def _committed_by_schedule(
    db: AsyncSession,
    schedule_ids: Iterable[int],
    travel_date: date
) -> Dict[int, int]:
    wanted = set(schedule_ids)
    if not wanted:
        return {}
    result = await db.execute(
        select(Booking.schedule_id, func.sum(Booking.number_of_seats))
        .where(
            Booking.schedule_id.in_(wanted),
            Booking.travel_date == travel_date,
            Booking.status != BookingStatus.CANCELLED
        )
        .group_by(Booking.schedule_id)
    )
    return {schedule_id: int(seats or 0) for schedule_id, seats in result.all()}


async def _schedule_details(
    db: AsyncSession,
    schedules: List[Schedule],
    seats_on: Optional[date] = None
) -> Dict[int, ScheduleWithDetails]:
    """Enrich schedules with route, vehicle and driver (and seats left on ``seats_on``)."""
    routes = await _load_by_id(db, Route, (s.route_id for s in schedules))
    vehicles = await _load_by_id(db, Vehicle, (s.vehicle_id for s in schedules))
    drivers = await _load_by_id(db, User, (v.driver_id for v in vehicles.values()))

    committed = {}
    if seats_on is not None:
        committed = await _committed_by_schedule(db, (s.id for s in schedules), seats_on)

    details = {}
    for schedule in schedules:
        vehicle = vehicles.get(schedule.vehicle_id)
        route = routes.get(schedule.route_id)

        seats_available = None
        if seats_on is not None and vehicle is not None:
            seats_available = max(vehicle.capacity - committed.get(schedule.id, 0), 0)

        details[schedule.id] = ScheduleWithDetails(
            **ScheduleResponse.model_validate(schedule).model_dump(),
            vehicle=_vehicle_with_driver(vehicle, drivers),
            route=RouteResponse.model_validate(route) if route else None,
            seats_available=seats_available
        )
    return details


async def _enrich(db: AsyncSession, bookings: List[Booking]) -> List[BookingWithDetails]:
    schedules = await _load_by_id(db, Schedule, (b.schedule_id for b in bookings))
    details = await _schedule_details(db, list(schedules.values()))

    enriched = []
    for booking in bookings:
        enriched.append(BookingWithDetails(
            **BookingResponse.model_validate(booking).model_dump(),
            schedule=details.get(booking.schedule_id) if booking.schedule_id is not None else None
        ))
    return enriched


async def get_booking_with_details(db: AsyncSession, booking_id: int) -> BookingWithDetails:
    """
    Booking with its schedule, route, vehicle and driver.

    Custom bookings come back with ``schedule=None``.

    Raises:
        ResourceNotFoundError: Unknown booking
    """
    booking = await db.get(Booking, booking_id)
    if not booking:
        raise ResourceNotFoundError("Booking", booking_id)
    return (await _enrich(db, [booking]))[0]


async def get_user_bookings(db: AsyncSession, user_id: int) -> List[BookingWithDetails]:
    """All bookings of a passenger, newest first."""
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == user_id)
        .order_by(Booking.booking_date.desc(), Booking.id.desc())
    )
    return await _enrich(db, list(result.scalars().all()))


async def get_driver_bookings(db: AsyncSession, driver_id: int) -> List[BookingWithDetails]:
    """
    Bookings served by a driver: driver -> vehicles -> schedules -> bookings,
    plus custom requests the driver has answered.

    A driver without vehicles only sees the custom requests they answered.
    """
    schedule_ids = (await db.execute(
        select(Schedule.id)
        .join(Vehicle, Vehicle.id == Schedule.vehicle_id)
        .where(Vehicle.driver_id == driver_id)
    )).scalars().all()

    answered_custom = and_(Booking.booking_type == BookingType.CUSTOM, Booking.responded_by_id == driver_id)
    condition = or_(Booking.schedule_id.in_(schedule_ids), answered_custom) if schedule_ids else answered_custom

    result = await db.execute(
        select(Booking).where(condition).order_by(Booking.travel_date, Booking.id)
    )
    return await _enrich(db, list(result.scalars().all()))


async def list_open_custom_requests(db: AsyncSession) -> List[BookingWithDetails]:
    """Custom bookings no driver has answered yet, oldest first."""
    result = await db.execute(
        select(Booking)
        .where(
            Booking.booking_type == BookingType.CUSTOM,
            Booking.status == BookingStatus.PENDING_DRIVER_CONFIRMATION
        )
        .order_by(Booking.booking_date, Booking.id)
    )
    return await _enrich(db, list(result.scalars().all()))


async def list_available_schedules(db: AsyncSession, travel_date: date) -> List[ScheduleWithDetails]:
    """Active schedules running on the weekday of ``travel_date`` with seats left."""
    result = await db.execute(
        select(Schedule)
        .join(Route, Route.id == Schedule.route_id)
        .where(Schedule.is_active.is_(True), Route.is_active.is_(True))
        .order_by(Schedule.departure_time, Schedule.id)
    )
    weekday = weekday_name(travel_date)
    schedules = [s for s in result.scalars().all() if s.operates_on(weekday)]

    details = await _schedule_details(db, schedules, seats_on=travel_date)
    return [details[s.id] for s in schedules]


async def get_route_with_schedules(db: AsyncSession, route_id: int) -> RouteWithSchedules:
    """
    Raises:
        ResourceNotFoundError: Unknown or inactive route
    """
    route = await db.get(Route, route_id)
    if not route or not route.is_active:
        raise ResourceNotFoundError("Route", route_id)

    result = await db.execute(
        select(Schedule)
        .where(Schedule.route_id == route_id, Schedule.is_active.is_(True))
        .order_by(Schedule.departure_time, Schedule.id)
    )
    schedules = list(result.scalars().all())
    vehicles = await _load_by_id(db, Vehicle, (s.vehicle_id for s in schedules))
    drivers = await _load_by_id(db, User, (v.driver_id for v in vehicles.values()))

    return RouteWithSchedules(
        **RouteResponse.model_validate(route).model_dump(),
        schedules=[
            ScheduleWithVehicle(
                **ScheduleResponse.model_validate(s).model_dump(),
                vehicle=_vehicle_with_driver(vehicles.get(s.vehicle_id), drivers)
            )
            for s in schedules
        ]
    )


async def latest_vehicle_location(db: AsyncSession, vehicle_id: int) -> Optional[VehicleLocation]:
    result = await db.execute(
        select(VehicleLocation)
        .where(VehicleLocation.vehicle_id == vehicle_id)
        .order_by(VehicleLocation.recorded_at.desc(), VehicleLocation.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_tracking_view(db: AsyncSession, booking: Booking) -> TrackingView:
    """
    Last known position of the vehicle serving a booking.

    Standard bookings track the schedule's vehicle. Custom bookings track the
    latest position the answering driver reported for this booking.
    """
    vehicle = None
    location = None

    if booking.schedule_id is not None:
        schedule = await db.get(Schedule, booking.schedule_id)
        if schedule:
            vehicle = await db.get(Vehicle, schedule.vehicle_id)
        if vehicle:
            location = await latest_vehicle_location(db, vehicle.id)
    else:
        result = await db.execute(
            select(VehicleLocation)
            .where(VehicleLocation.booking_id == booking.id)
            .order_by(VehicleLocation.recorded_at.desc(), VehicleLocation.id.desc())
            .limit(1)
        )
        location = result.scalar_one_or_none()
        if location:
            vehicle = await db.get(Vehicle, location.vehicle_id)

    return TrackingView(
        booking_id=booking.id,
        booking_number=booking.booking_number,
        status=booking.status,
        vehicle_id=vehicle.id if vehicle else None,
        vehicle_number=vehicle.vehicle_number if vehicle else None,
        pickup_point=booking.display_pickup,
        dropoff_point=booking.display_dropoff,
        pickup_coordinates=booking.pickup_coordinates,
        dropoff_coordinates=booking.dropoff_coordinates,
        location=LocationResponse.model_validate(location) if location else None
    )
