"""
Driver API Integration Tests.

Driver booking lists, open custom requests, trips and location reports.
"""

import pytest

from omnibus.app.models.enums import UserType
from omnibus.tests.factories import auth_headers, create_user, standard_payload, custom_payload


@pytest.mark.asyncio
async def test_driver_sees_bookings_on_own_vehicles(client, db_session, passenger, driver, other_driver, schedule, travel_date):
    await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date), headers=auth_headers(passenger)
    )

    own = await client.get("/v1/driver/bookings", headers=auth_headers(driver))
    other = await client.get("/v1/driver/bookings", headers=auth_headers(other_driver))

    assert own.status_code == 200
    assert own.json()["total"] == 1
    assert own.json()["bookings"][0]["schedule"]["vehicle"]["driver"]["id"] == driver.id
    assert other.json() == {"bookings": [], "total": 0}


@pytest.mark.asyncio
async def test_driver_without_vehicles_gets_empty_list(client, db_session):
    newcomer = await create_user(db_session, "new_driver", UserType.DRIVER)

    response = await client.get("/v1/driver/bookings", headers=auth_headers(newcomer))
    assert response.status_code == 200
    assert response.json()["total"] == 0


@pytest.mark.asyncio
async def test_driver_without_vehicles_sees_answered_custom_booking(client, db_session, passenger, travel_date):
    newcomer = await create_user(db_session, "new_driver", UserType.DRIVER)
    created = await client.post("/v1/bookings", json=custom_payload(travel_date), headers=auth_headers(passenger))

    answered = await client.patch(
        f"/v1/bookings/{created.json()['id']}/driver-response",
        json={"driver_response": "accepted"},
        headers=auth_headers(newcomer)
    )
    assert answered.status_code == 200

    mine = await client.get("/v1/driver/bookings", headers=auth_headers(newcomer))
    assert mine.status_code == 200
    assert [b["id"] for b in mine.json()["bookings"]] == [created.json()["id"]]


@pytest.mark.asyncio
async def test_passenger_cannot_list_driver_bookings(client, passenger):
    response = await client.get("/v1/driver/bookings", headers=auth_headers(passenger))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_open_requests_disappear_once_answered(client, passenger, driver, schedule, travel_date):
    created = await client.post("/v1/bookings", json=custom_payload(travel_date), headers=auth_headers(passenger))

    open_before = await client.get("/v1/driver/bookings/open", headers=auth_headers(driver))
    assert [b["id"] for b in open_before.json()["bookings"]] == [created.json()["id"]]

    await client.patch(
        f"/v1/bookings/{created.json()['id']}/driver-response",
        json={"driver_response": "accepted"},
        headers=auth_headers(driver)
    )

    open_after = await client.get("/v1/driver/bookings/open", headers=auth_headers(driver))
    assert open_after.json()["total"] == 0

    mine = await client.get("/v1/driver/bookings", headers=auth_headers(driver))
    assert created.json()["id"] in [b["id"] for b in mine.json()["bookings"]]


@pytest.mark.asyncio
async def test_trip_start_and_complete(client, passenger, driver, schedule, travel_date):
    created = await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date), headers=auth_headers(passenger)
    )
    booking_id = created.json()["id"]

    started = await client.post(f"/v1/driver/bookings/{booking_id}/start", headers=auth_headers(driver))
    assert started.status_code == 200
    assert started.json()["status"] == "in_transit"

    completed = await client.post(f"/v1/driver/bookings/{booking_id}/complete", headers=auth_headers(driver))
    assert completed.status_code == 200
    assert completed.json()["status"] == "completed"


@pytest.mark.asyncio
async def test_tracking_shows_latest_location(client, passenger, driver, schedule, travel_date):
    created = await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date), headers=auth_headers(passenger)
    )
    booking_id = created.json()["id"]

    before = await client.get(f"/v1/bookings/{booking_id}/tracking", headers=auth_headers(passenger))
    assert before.status_code == 200
    assert before.json()["location"] is None
    assert before.json()["vehicle_number"] == "BUS-100"

    for lat in (40.70, 40.71):
        report = await client.post(
            "/v1/driver/tracking/location",
            json={"vehicle_id": schedule.vehicle_id, "latitude": lat, "longitude": -74.0, "speed_kmh": 32.5},
            headers=auth_headers(driver)
        )
        assert report.status_code == 201

    after = await client.get(f"/v1/bookings/{booking_id}/tracking", headers=auth_headers(passenger))
    assert after.json()["location"]["latitude"] == 40.71
    assert after.json()["pickup_point"] == "Central Station"


@pytest.mark.asyncio
async def test_cannot_report_for_someone_elses_vehicle(client, other_driver, schedule):
    response = await client.post(
        "/v1/driver/tracking/location",
        json={"vehicle_id": schedule.vehicle_id, "latitude": 40.7, "longitude": -74.0},
        headers=auth_headers(other_driver)
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_my_vehicles(client, driver, schedule):
    response = await client.get("/v1/vehicles/mine", headers=auth_headers(driver))

    assert response.status_code == 200
    assert [v["vehicle_number"] for v in response.json()] == ["BUS-100"]
