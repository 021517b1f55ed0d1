"""
Reference data service: routes, vehicles and schedules.

Admin maintenance of the network that bookings and subscriptions refer to,
plus the demo data set used for local development.
"""

import logging
from decimal import Decimal
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from omnibus.app.core.exceptions import ResourceNotFoundError, BookingValidationError
from omnibus.app.models.enums import UserType, RouteType
from omnibus.app.models.route import Route
from omnibus.app.models.schedule import Schedule
from omnibus.app.models.user import User
from omnibus.app.models.vehicle import Vehicle
from omnibus.app.schemas.reference import RouteCreate, RouteUpdate, VehicleCreate, ScheduleCreate, ScheduleUpdate
from omnibus.app.services.audit import log_event, AuditAction

logger = logging.getLogger("omnibus.reference")

WEEKDAYS_MON_FRI = ["monday", "tuesday", "wednesday", "thursday", "friday"]


class ReferenceDataService:

    @staticmethod
    async def list_active_routes(db: AsyncSession) -> List[Route]:
        result = await db.execute(
            select(Route).where(Route.is_active.is_(True)).order_by(Route.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def create_route(db: AsyncSession, data: RouteCreate, current_user: dict) -> Route:
        route = Route(**data.model_dump())
        db.add(route)
        await db.flush()

        await log_event(
            db=db,
            action=AuditAction.ROUTE_CREATED,
            actor_id=current_user["user_id"],
            actor_username=current_user.get("sub"),
            metadata={"route_id": route.id, "name": route.name}
        )
        await db.commit()
        await db.refresh(route)
        return route

    @staticmethod
    async def update_route(db: AsyncSession, route_id: int, data: RouteUpdate, current_user: dict) -> Route:
        route = await db.get(Route, route_id)
        if not route:
            raise ResourceNotFoundError("Route", route_id)

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(route, field, value)

        await log_event(
            db=db,
            action=AuditAction.ROUTE_UPDATED,
            actor_id=current_user["user_id"],
            actor_username=current_user.get("sub"),
            metadata={"route_id": route.id, "fields": sorted(changes)}
        )
        await db.commit()
        await db.refresh(route)
        return route

    @staticmethod
    async def create_vehicle(db: AsyncSession, data: VehicleCreate, current_user: dict) -> Vehicle:
        """
        Register a vehicle, optionally assigned to a driver.

        Raises:
            BookingValidationError: Duplicate vehicle number or owner is not a driver
        """
        existing = await db.execute(select(Vehicle.id).where(Vehicle.vehicle_number == data.vehicle_number))
        if existing.scalar_one_or_none() is not None:
            raise BookingValidationError(
                f"Vehicle {data.vehicle_number} already exists",
                details={"vehicle_number": data.vehicle_number}
            )

        if data.driver_id is not None:
            driver = await db.get(User, data.driver_id)
            if not driver:
                raise ResourceNotFoundError("User", data.driver_id)
            if driver.user_type != UserType.DRIVER:
                raise BookingValidationError(
                    "Vehicles can only be assigned to drivers",
                    details={"driver_id": data.driver_id, "user_type": driver.user_type.value}
                )

        vehicle = Vehicle(**data.model_dump())
        db.add(vehicle)
        await db.flush()

        await log_event(
            db=db,
            action=AuditAction.VEHICLE_CREATED,
            actor_id=current_user["user_id"],
            actor_username=current_user.get("sub"),
            metadata={"vehicle_id": vehicle.id, "vehicle_number": vehicle.vehicle_number}
        )
        await db.commit()
        await db.refresh(vehicle)
        return vehicle

    @staticmethod
    async def list_driver_vehicles(db: AsyncSession, driver_id: int) -> List[Vehicle]:
        result = await db.execute(
            select(Vehicle).where(Vehicle.driver_id == driver_id).order_by(Vehicle.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def create_schedule(db: AsyncSession, data: ScheduleCreate, current_user: dict) -> Schedule:
        """
        Raises:
            ResourceNotFoundError: Route or vehicle does not exist
        """
        if not await db.get(Route, data.route_id):
            raise ResourceNotFoundError("Route", data.route_id)
        if not await db.get(Vehicle, data.vehicle_id):
            raise ResourceNotFoundError("Vehicle", data.vehicle_id)

        schedule = Schedule(**data.model_dump())
        db.add(schedule)
        await db.flush()

        await log_event(
            db=db,
            action=AuditAction.SCHEDULE_CREATED,
            actor_id=current_user["user_id"],
            actor_username=current_user.get("sub"),
            metadata={"schedule_id": schedule.id, "route_id": schedule.route_id, "vehicle_id": schedule.vehicle_id}
        )
        await db.commit()
        await db.refresh(schedule)
        return schedule

    @staticmethod
    async def update_schedule(
        db: AsyncSession,
        schedule_id: int,
        data: ScheduleUpdate,
        current_user: dict
    ) -> Schedule:
        schedule = await db.get(Schedule, schedule_id)
        if not schedule:
            raise ResourceNotFoundError("Schedule", schedule_id)

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(schedule, field, value)

        await log_event(
            db=db,
            action=AuditAction.SCHEDULE_UPDATED,
            actor_id=current_user["user_id"],
            actor_username=current_user.get("sub"),
            metadata={"schedule_id": schedule.id, "fields": sorted(changes)}
        )
        await db.commit()
        await db.refresh(schedule)
        return schedule


async def seed_demo_data(db: AsyncSession) -> bool:
    """
    Insert the demo network: one passenger, one driver, two routes,
    two vehicles and two weekday schedules.

    Returns:
        False if the demo driver already exists (nothing is written)
    """
    existing = await db.execute(select(User).where(User.username == "driver_mike"))
    if existing.scalar_one_or_none():
        logger.info("Demo data already present, skipping seeding")
        return False

    passenger = User(
        username="john_doe",
        email="john@example.com",
        full_name="John Doe",
        phone="+1234567890",
        user_type=UserType.PASSENGER
    )
    driver = User(
        username="driver_mike",
        email="mike@example.com",
        full_name="Mike Johnson",
        phone="+1234567891",
        user_type=UserType.DRIVER
    )
    db.add_all([passenger, driver])
    await db.flush()

    university = Route(
        name="City Center → University",
        origin="City Center",
        destination="University",
        pickup_points=["Central Station", "City Hall", "Shopping Mall"],
        dropoff_points=["University Main Gate", "Student Center", "Engineering Building", "Library Complex"],
        base_fare=Decimal("3.50"),
        estimated_duration=25,
        max_seats=35,
        route_type=RouteType.SCHOOL
    )
    tech_park = Route(
        name="Downtown → Tech Park",
        origin="Downtown",
        destination="Tech Park",
        pickup_points=["Downtown Central", "Business District", "Metro Station"],
        dropoff_points=["Tech Park Main", "Innovation Center", "Corporate Plaza"],
        base_fare=Decimal("4.25"),
        estimated_duration=30,
        max_seats=40,
        route_type=RouteType.WORK
    )
    bus_247 = Vehicle(vehicle_number="BUS-247", driver_id=driver.id, capacity=35)
    bus_358 = Vehicle(vehicle_number="BUS-358", driver_id=driver.id, capacity=40)
    db.add_all([university, tech_park, bus_247, bus_358])
    await db.flush()

    db.add_all([
        Schedule(
            route_id=university.id,
            vehicle_id=bus_247.id,
            departure_time="15:30",
            arrival_time="15:55",
            days_of_week=list(WEEKDAYS_MON_FRI)
        ),
        Schedule(
            route_id=tech_park.id,
            vehicle_id=bus_358.id,
            departure_time="15:45",
            arrival_time="16:15",
            days_of_week=list(WEEKDAYS_MON_FRI)
        ),
    ])
    await db.commit()

    logger.info("Seeded demo data: users=%s,%s routes=2 vehicles=2 schedules=2",
                passenger.username, driver.username)
    return True
