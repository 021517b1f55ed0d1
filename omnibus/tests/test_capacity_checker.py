"""
Capacity Checker Tests.

Seat accounting per (schedule, travel date) against vehicle capacity.
"""

import pytest
from datetime import date, timedelta
from sqlalchemy import select, func

from omnibus.app.core.exceptions import ResourceNotFoundError, CapacityExceededError, BookingValidationError
from omnibus.app.domain.booking.capacity_checker import CapacityChecker, weekday_name
from omnibus.app.domain.booking.booking_service import BookingService
from omnibus.app.models.booking import Booking
from omnibus.app.models.route import Route
from omnibus.app.models.schedule import Schedule
from omnibus.app.models.vehicle import Vehicle
from omnibus.app.schemas.booking import StandardBookingRequest
from omnibus.tests.factories import as_user, auth_headers, create_network


def next_weekday(name: str) -> date:
    day = date.today() + timedelta(days=1)
    while weekday_name(day) != name:
        day += timedelta(days=1)
    return day


async def book(db_session, passenger, schedule, travel_date, seats=1):
    request = StandardBookingRequest(
        booking_type="standard",
        schedule_id=schedule.id,
        pickup_point="Central Station",
        dropoff_point="Library Complex",
        number_of_seats=seats,
        travel_date=travel_date
    )
    return await BookingService.create_booking(db_session, request, as_user(passenger))


@pytest.mark.asyncio
async def test_empty_schedule_has_full_capacity(db_session, schedule, travel_date):
    result = await CapacityChecker.check_capacity(db_session, schedule.id, travel_date, 2)

    assert result.ok is True
    assert result.available_seats == 2
    assert result.committed_seats == 0
    assert result.capacity == 2


@pytest.mark.asyncio
async def test_committed_seats_reduce_availability(db_session, passenger, schedule, travel_date):
    await book(db_session, passenger, schedule, travel_date, seats=1)

    fits = await CapacityChecker.check_capacity(db_session, schedule.id, travel_date, 1)
    too_many = await CapacityChecker.check_capacity(db_session, schedule.id, travel_date, 2)

    assert fits.ok is True
    assert fits.available_seats == 1
    assert too_many.ok is False
    assert too_many.available_seats == 1


@pytest.mark.asyncio
async def test_other_dates_do_not_share_seats(db_session, passenger, schedule, travel_date):
    await book(db_session, passenger, schedule, travel_date, seats=2)

    next_day = await CapacityChecker.check_capacity(
        db_session, schedule.id, travel_date + timedelta(days=1), 2
    )
    assert next_day.ok is True
    assert next_day.available_seats == 2


@pytest.mark.asyncio
async def test_cancelled_bookings_release_seats(db_session, passenger, schedule, travel_date):
    booking = await book(db_session, passenger, schedule, travel_date, seats=2)
    assert (await CapacityChecker.check_capacity(db_session, schedule.id, travel_date, 1)).ok is False

    await BookingService.cancel_booking(db_session, booking.id, as_user(passenger))

    result = await CapacityChecker.check_capacity(db_session, schedule.id, travel_date, 2)
    assert result.ok is True
    assert result.committed_seats == 0


@pytest.mark.asyncio
async def test_day_not_operated_is_not_ok(db_session, driver):
    monday_only = await create_network(db_session, driver, days_of_week=["monday"])

    result = await CapacityChecker.check_capacity(db_session, monday_only.id, next_weekday("tuesday"), 1)

    assert result.ok is False
    assert result.available_seats == 0
    assert result.operates_on_date is False


@pytest.mark.asyncio
async def test_booking_on_day_not_operated_is_invalid(db_session, driver):
    monday_only = await create_network(db_session, driver, days_of_week=["monday"])

    with pytest.raises(BookingValidationError) as exc_info:
        await CapacityChecker.ensure_capacity(db_session, monday_only, next_weekday("tuesday"), 1)

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_unknown_schedule_raises_not_found(db_session, travel_date):
    with pytest.raises(ResourceNotFoundError):
        await CapacityChecker.check_capacity(db_session, 4242, travel_date, 1)


@pytest.mark.asyncio
async def test_inactive_schedule_raises_not_found(db_session, schedule, travel_date):
    stored = await db_session.get(Schedule, schedule.id)
    stored.is_active = False
    await db_session.commit()

    with pytest.raises(ResourceNotFoundError):
        await CapacityChecker.check_capacity(db_session, schedule.id, travel_date, 1)


@pytest.mark.asyncio
async def test_inactive_vehicle_raises_not_found(db_session, passenger, schedule, travel_date):
    vehicle = await db_session.get(Vehicle, schedule.vehicle_id)
    vehicle.is_active = False
    await db_session.commit()

    with pytest.raises(ResourceNotFoundError):
        await CapacityChecker.check_capacity(db_session, schedule.id, travel_date, 1)
    with pytest.raises(ResourceNotFoundError):
        await book(db_session, passenger, schedule, travel_date)

    count = await db_session.execute(select(func.count(Booking.id)))
    assert count.scalar() == 0


@pytest.mark.asyncio
async def test_inactive_route_rejects_booking(db_session, passenger, schedule, travel_date):
    route = await db_session.get(Route, schedule.route_id)
    route.is_active = False
    await db_session.commit()

    with pytest.raises(ResourceNotFoundError) as exc_info:
        await book(db_session, passenger, schedule, travel_date)

    assert exc_info.value.status_code == 404
    count = await db_session.execute(select(func.count(Booking.id)))
    assert count.scalar() == 0


@pytest.mark.asyncio
async def test_zero_seats_rejected(db_session, schedule, travel_date):
    with pytest.raises(BookingValidationError):
        await CapacityChecker.check_capacity(db_session, schedule.id, travel_date, 0)


@pytest.mark.asyncio
async def test_ensure_capacity_reports_available_seats(db_session, passenger, schedule, travel_date):
    await book(db_session, passenger, schedule, travel_date, seats=1)

    with pytest.raises(CapacityExceededError) as exc_info:
        await CapacityChecker.ensure_capacity(db_session, schedule, travel_date, 2)

    assert exc_info.value.status_code == 409
    assert exc_info.value.details["available_seats"] == 1
    assert exc_info.value.details["requested_seats"] == 2


@pytest.mark.asyncio
async def test_capacity_endpoint(client, passenger, schedule, travel_date):
    response = await client.get(
        f"/v1/schedules/{schedule.id}/capacity",
        params={"travel_date": travel_date.isoformat(), "seats": 2},
        headers=auth_headers(passenger)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["available_seats"] == 2
    assert body["capacity"] == 2
