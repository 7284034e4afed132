"""Tests for guest feedback"""

import pytest
from httpx import AsyncClient


@pytest.fixture
async def completed(client: AsyncClient, customer_headers, admin_headers, tables):
    """A reservation the guest has dined on"""
    created = await client.post(
        "/reservations",
        json={"reservation_date": "2025-12-15", "reservation_time": "19:00", "party_size": 4},
        headers=customer_headers,
    )
    reservation_id = created.json()["id"]
    await client.put(
        f"/reservations/{reservation_id}/approve",
        json={"table_id": str(tables["T4"].id)},
        headers=admin_headers,
    )
    await client.put(f"/reservations/{reservation_id}/complete", headers=admin_headers)
    return created.json()


async def review(client, headers, reservation_id, **overrides):
    payload = {
        "reservation_id": reservation_id,
        "rating": 5,
        "food_quality": 5,
        "service_quality": 4,
        "title": "Lovely evening",
        "review": "The steak was perfect and the staff were attentive.",
        "would_recommend": True,
    }
    payload.update(overrides)
    return await client.post("/feedback", json=payload, headers=headers)


@pytest.mark.asyncio
async def test_submit_feedback(client: AsyncClient, customer, customer_headers, completed):
    response = await review(client, customer_headers, completed["id"])

    assert response.status_code == 201
    data = response.json()
    assert data["rating"] == 5
    assert data["service_quality"] == 4
    assert data["user_id"] == str(customer.id)
    assert data["status"] == "approved"
    assert data["is_public"] is True
    assert data["is_verified"] is True


@pytest.mark.asyncio
async def test_feedback_errors_are_reported_together(client: AsyncClient, customer_headers):
    response = await client.post(
        "/feedback",
        json={"rating": 6, "ambience": "great", "review": "ok"},
        headers=customer_headers,
    )

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["message"] == "Feedback validation failed"
    assert detail["errors"] == [
        "Reservation ID is required for feedback",
        "Rating must be a whole number from 1 to 5",
        "Ambience must be a whole number from 1 to 5",
        "Review must be between 10 and 1000 characters",
    ]


@pytest.mark.asyncio
async def test_feedback_only_after_completion(client: AsyncClient, customer_headers):
    pending = await client.post(
        "/reservations",
        json={"reservation_date": "2025-12-20", "reservation_time": "20:00", "party_size": 2},
        headers=customer_headers,
    )

    response = await review(client, customer_headers, pending.json()["id"])

    assert response.status_code == 409
    assert response.json()["detail"] == "Feedback can only be left for completed reservations"


@pytest.mark.asyncio
async def test_one_review_per_reservation(client: AsyncClient, customer_headers, completed):
    first = await review(client, customer_headers, completed["id"])
    second = await review(client, customer_headers, completed["id"], rating=1)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["detail"] == "Feedback already submitted for this reservation"


@pytest.mark.asyncio
async def test_only_the_guest_may_review(client: AsyncClient, other_headers, admin_headers, completed):
    stranger = await review(client, other_headers, completed["id"])
    admin = await review(client, admin_headers, completed["id"])
    unknown = await review(client, other_headers, "00000000-0000-0000-0000-000000000000")

    assert stranger.status_code == 403
    assert admin.status_code == 403
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_feedback_listings(
    client: AsyncClient, customer_headers, other_headers, staff_headers, admin_headers, completed
):
    created = (await review(client, customer_headers, completed["id"])).json()

    mine = await client.get("/feedback/mine", headers=customer_headers)
    public = await client.get("/feedback/public", headers=other_headers)
    by_reservation = await client.get(f"/feedback/reservation/{completed['id']}", headers=staff_headers)
    stranger = await client.get(f"/feedback/reservation/{completed['id']}", headers=other_headers)
    everything = await client.get("/feedback", headers=admin_headers)
    by_guest = await client.get("/feedback", headers=customer_headers)

    assert [item["id"] for item in mine.json()] == [created["id"]]
    assert [item["id"] for item in public.json()] == [created["id"]]
    assert by_reservation.json()["id"] == created["id"]
    assert stranger.status_code == 403
    assert [item["id"] for item in everything.json()] == [created["id"]]
    assert by_guest.status_code == 403


@pytest.mark.asyncio
async def test_reservation_without_feedback_reads_null(client: AsyncClient, customer_headers, completed):
    response = await client.get(f"/feedback/reservation/{completed['id']}", headers=customer_headers)

    assert response.status_code == 200
    assert response.json() is None


@pytest.mark.asyncio
async def test_admin_reply(client: AsyncClient, customer_headers, admin_user, admin_headers, completed):
    created = (await review(client, customer_headers, completed["id"])).json()

    short = await client.put(
        f"/feedback/{created['id']}/respond", json={"admin_response": "Thanks!"}, headers=admin_headers
    )
    by_guest = await client.put(
        f"/feedback/{created['id']}/respond",
        json={"admin_response": "Replying to myself here"},
        headers=customer_headers,
    )
    reply = await client.put(
        f"/feedback/{created['id']}/respond",
        json={"admin_response": "Thank you, we hope to see you again soon."},
        headers=admin_headers,
    )

    assert short.status_code == 422
    assert by_guest.status_code == 403
    assert reply.status_code == 200
    assert reply.json()["responded_by"] == str(admin_user.id)
    assert reply.json()["responded_at"] is not None


@pytest.mark.asyncio
async def test_moderation_hides_rejected_feedback(
    client: AsyncClient, customer_headers, other_headers, admin_headers, completed
):
    created = (await review(client, customer_headers, completed["id"])).json()

    rejected = await client.put(
        f"/feedback/{created['id']}/moderate",
        json={"status": "rejected", "moderation_note": "Contains personal data"},
        headers=admin_headers,
    )
    public = await client.get("/feedback/public", headers=other_headers)
    hidden = await client.get("/feedback", params={"is_public": False}, headers=admin_headers)

    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["is_public"] is False
    assert rejected.json()["moderation_note"] == "Contains personal data"
    assert public.json() == []
    assert [item["id"] for item in hidden.json()] == [created["id"]]
