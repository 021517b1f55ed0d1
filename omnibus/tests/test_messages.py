"""
Messaging API tests.
"""

import pytest

from omnibus.tests.factories import auth_headers


@pytest.mark.asyncio
async def test_conversation_between_passenger_and_driver(client, passenger, driver):
    first = await client.post(
        "/v1/messages",
        json={"receiver_id": driver.id, "content": "Running 2 minutes late"},
        headers=auth_headers(passenger)
    )
    assert first.status_code == 201

    reply = await client.post(
        "/v1/messages",
        json={"receiver_id": passenger.id, "content": "No problem, waiting at City Hall"},
        headers=auth_headers(driver)
    )
    assert reply.status_code == 201

    conversation = await client.get(f"/v1/messages/conversation/{driver.id}", headers=auth_headers(passenger))

    assert conversation.status_code == 200
    body = conversation.json()
    assert [m["content"] for m in body["messages"]] == [
        "Running 2 minutes late", "No problem, waiting at City Hall"
    ]
    assert body["unread"] == 1


@pytest.mark.asyncio
async def test_only_receiver_marks_read(client, passenger, driver):
    sent = await client.post(
        "/v1/messages",
        json={"receiver_id": driver.id, "content": "Hello"},
        headers=auth_headers(passenger)
    )
    message_id = sent.json()["id"]

    by_sender = await client.patch(f"/v1/messages/{message_id}/read", headers=auth_headers(passenger))
    assert by_sender.status_code == 404

    by_receiver = await client.patch(f"/v1/messages/{message_id}/read", headers=auth_headers(driver))
    assert by_receiver.status_code == 200

    conversation = await client.get(f"/v1/messages/conversation/{passenger.id}", headers=auth_headers(driver))
    assert conversation.json()["messages"][0]["is_read"] is True


@pytest.mark.asyncio
async def test_message_to_unknown_user(client, passenger):
    response = await client.post(
        "/v1/messages", json={"receiver_id": 4040, "content": "Anyone?"}, headers=auth_headers(passenger)
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_message_to_self_rejected(client, passenger):
    response = await client.post(
        "/v1/messages", json={"receiver_id": passenger.id, "content": "Note to self"}, headers=auth_headers(passenger)
    )
    assert response.status_code == 400
