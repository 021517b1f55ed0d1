"""
Booking API Integration Tests.

Exercises the booking endpoints end to end: creation, capacity conflicts,
driver and passenger responses, enrichment and access rules.
"""

import pytest

from omnibus.tests.factories import auth_headers, standard_payload, custom_payload


@pytest.mark.asyncio
async def test_capacity_scenario_end_to_end(client, passenger, other_passenger, schedule, travel_date):
    """
    Capacity 2: A books 2 seats, B's single seat is refused, A cancels,
    B's retry succeeds.
    """
    booking_a = await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date, seats=2), headers=auth_headers(passenger)
    )
    assert booking_a.status_code == 201
    assert booking_a.json()["status"] == "confirmed"

    booking_b = await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date, seats=1), headers=auth_headers(other_passenger)
    )
    assert booking_b.status_code == 409
    assert booking_b.json()["error_code"] == "ERR_CAPACITY_001"
    assert booking_b.json()["details"]["available_seats"] == 0

    cancel = await client.post(
        f"/v1/bookings/{booking_a.json()['id']}/cancel", headers=auth_headers(passenger)
    )
    assert cancel.status_code == 200
    assert cancel.json()["status"] == "cancelled"

    retry = await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date, seats=1), headers=auth_headers(other_passenger)
    )
    assert retry.status_code == 201
    assert retry.json()["status"] == "confirmed"


@pytest.mark.asyncio
async def test_created_booking_is_enriched(client, passenger, driver, schedule, travel_date):
    response = await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date), headers=auth_headers(passenger)
    )

    assert response.status_code == 201
    body = response.json()
    assert body["booking_number"].startswith("BK")
    assert body["total_fare"] == "4.00"
    assert body["schedule"]["route"]["name"] == "City Center → University"
    assert body["schedule"]["vehicle"]["vehicle_number"] == "BUS-100"
    assert body["schedule"]["vehicle"]["driver"]["id"] == driver.id


@pytest.mark.asyncio
async def test_booking_read_is_idempotent(client, passenger, schedule, travel_date):
    created = await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date), headers=auth_headers(passenger)
    )
    booking_id = created.json()["id"]

    first = await client.get(f"/v1/bookings/{booking_id}", headers=auth_headers(passenger))
    second = await client.get(f"/v1/bookings/{booking_id}", headers=auth_headers(passenger))

    assert first.status_code == 200
    assert first.json() == second.json()


@pytest.mark.asyncio
async def test_custom_booking_has_no_schedule(client, passenger, travel_date):
    response = await client.post(
        "/v1/bookings", json=custom_payload(travel_date, seats=3), headers=auth_headers(passenger)
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending_driver_confirmation"
    assert body["schedule"] is None
    assert body["display_pickup"] == "12 Elm Street"
    assert body["display_dropoff"] == "Airport Terminal 2"
    assert body["dropoff_coordinates"] == "40.6413,-73.7781"


@pytest.mark.asyncio
async def test_unknown_booking_type_rejected(client, passenger, travel_date):
    payload = custom_payload(travel_date)
    payload["booking_type"] = "charter"

    response = await client.post("/v1/bookings", json=payload, headers=auth_headers(passenger))
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_standard_booking_without_schedule_rejected(client, passenger, travel_date):
    payload = standard_payload(1, travel_date)
    del payload["schedule_id"]

    response = await client.post("/v1/bookings", json=payload, headers=auth_headers(passenger))
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_invalid_stop_returns_400(client, passenger, schedule, travel_date):
    payload = standard_payload(schedule.id, travel_date)
    payload["dropoff_point"] = "Moon Base"

    response = await client.post("/v1/bookings", json=payload, headers=auth_headers(passenger))
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_VALIDATION_001"


@pytest.mark.asyncio
async def test_alternative_offer_round_trip(client, passenger, driver, travel_date):
    created = await client.post(
        "/v1/bookings", json=custom_payload(travel_date), headers=auth_headers(passenger)
    )
    booking_id = created.json()["id"]

    offer = await client.patch(
        f"/v1/bookings/{booking_id}/driver-response",
        json={"driver_response": "alternative_offered", "alternative_pickup": "Elm & 3rd", "driver_notes": "Detour"},
        headers=auth_headers(driver)
    )
    assert offer.status_code == 200
    assert offer.json()["status"] == "driver_alternative"
    assert offer.json()["alternative_pickup"] == "Elm & 3rd"

    answer = await client.patch(
        f"/v1/bookings/{booking_id}/user-response",
        json={"accepted": True},
        headers=auth_headers(passenger)
    )
    assert answer.status_code == 200
    assert answer.json()["status"] == "confirmed"


@pytest.mark.asyncio
async def test_passenger_cannot_use_driver_response(client, passenger, travel_date):
    created = await client.post(
        "/v1/bookings", json=custom_payload(travel_date), headers=auth_headers(passenger)
    )

    response = await client.patch(
        f"/v1/bookings/{created.json()['id']}/driver-response",
        json={"driver_response": "accepted"},
        headers=auth_headers(passenger)
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_driver_response_on_completed_returns_409(client, passenger, driver, schedule, travel_date):
    created = await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date), headers=auth_headers(passenger)
    )
    booking_id = created.json()["id"]

    await client.post(f"/v1/driver/bookings/{booking_id}/start", headers=auth_headers(driver))
    await client.post(f"/v1/driver/bookings/{booking_id}/complete", headers=auth_headers(driver))

    response = await client.patch(
        f"/v1/bookings/{booking_id}/driver-response",
        json={"driver_response": "declined"},
        headers=auth_headers(driver)
    )
    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_STATE_001"
    assert response.json()["details"]["current_status"] == "completed"


@pytest.mark.asyncio
async def test_missing_booking_returns_404(client, passenger):
    response = await client.get("/v1/bookings/9999", headers=auth_headers(passenger))

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_stranger_cannot_read_booking(client, passenger, other_passenger, schedule, travel_date):
    created = await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date), headers=auth_headers(passenger)
    )

    response = await client.get(f"/v1/bookings/{created.json()['id']}", headers=auth_headers(other_passenger))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_my_bookings(client, passenger, other_passenger, schedule, travel_date):
    await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date), headers=auth_headers(passenger)
    )
    await client.post("/v1/bookings", json=custom_payload(travel_date), headers=auth_headers(passenger))
    await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date), headers=auth_headers(other_passenger)
    )

    response = await client.get("/v1/bookings/mine", headers=auth_headers(passenger))

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert {b["booking_type"] for b in body["bookings"]} == {"standard", "custom"}


@pytest.mark.asyncio
async def test_pay_booking(client, passenger, schedule, travel_date):
    created = await client.post(
        "/v1/bookings", json=standard_payload(schedule.id, travel_date), headers=auth_headers(passenger)
    )

    paid = await client.post(
        f"/v1/bookings/{created.json()['id']}/pay",
        json={"payment_method": "wallet"},
        headers=auth_headers(passenger)
    )
    assert paid.status_code == 200
    assert paid.json()["payment_status"] == "paid"
    assert paid.json()["payment_method"] == "wallet"

    again = await client.post(f"/v1/bookings/{created.json()['id']}/pay", headers=auth_headers(passenger))
    assert again.status_code == 409
