"""Tests for the reservation lifecycle endpoints"""

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import IntegrityError
from uuid import uuid4

from app.main import app
from app.models.reservation import Reservation, ReservationStatus
from app.models.table import Table
from app.notifications import get_notifier


class FailingNotifier:
    async def send(self, kind, payload):
        raise RuntimeError("broker unavailable")


async def create_reservation(client, headers, **overrides):
    payload = {
        "reservation_date": "2025-12-15",
        "reservation_time": "19:00",
        "party_size": 4,
    }
    payload.update(overrides)
    return await client.post("/reservations", json=payload, headers=headers)


async def approve(client, headers, reservation_id, table):
    return await client.put(
        f"/reservations/{reservation_id}/approve",
        json={"table_id": str(table.id)},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_create_then_fetch(client: AsyncClient, customer, customer_headers, notifier):
    """A new reservation is pending and reads back unchanged"""
    response = await create_reservation(client, customer_headers)

    assert response.status_code == 201
    created = response.json()
    assert created["status"] == "pending"
    assert created["table_id"] is None
    assert created["customer_email"] == "guest@example.com"
    assert created["customer_name"] == "Ada Guest"
    assert created["duration_minutes"] == 120
    assert created["end_time"] == "21:00"

    fetched = await client.get(f"/reservations/{created['id']}", headers=customer_headers)

    assert fetched.status_code == 200
    data = fetched.json()
    assert data["reservation_date"] == "2025-12-15"
    assert data["reservation_time"] == "19:00"
    assert data["party_size"] == 4
    assert data["status"] == "pending"

    assert notifier.kinds == ["reservation_received"]
    assert notifier.sent[0][1]["customer_phone"] == "+15550001111"


@pytest.mark.asyncio
async def test_create_requires_authentication(client: AsyncClient):
    response = await create_reservation(client, {})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_reports_all_validation_errors(client: AsyncClient, customer_headers):
    response = await client.post(
        "/reservations",
        json={"reservation_date": "2025-02-30", "reservation_time": "25:00", "party_size": 0},
        headers=customer_headers,
    )

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["message"] == "Reservation validation failed"
    assert detail["errors"] == [
        "Reservation time must be in HH:MM format (e.g., 19:30)",
        "Invalid date. Please provide a real calendar date in YYYY-MM-DD format",
        "Party size must be at least 1",
    ]


@pytest.mark.asyncio
async def test_wrong_type_reported_with_missing_fields(client: AsyncClient, customer_headers):
    response = await client.post("/reservations", json={"party_size": "lots"}, headers=customer_headers)

    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == [
        "Missing or invalid reservation_time. Expected string",
        "Missing or invalid reservation_date",
        "Invalid or missing party_size",
    ]


@pytest.mark.asyncio
async def test_duplicate_booking_by_same_owner_conflicts(client: AsyncClient, customer_headers):
    first = await create_reservation(client, customer_headers)
    second = await create_reservation(client, customer_headers, party_size=2)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["detail"] == "You already have a reservation for this date and time"


@pytest.mark.asyncio
async def test_rebooking_after_cancel_is_allowed(client: AsyncClient, customer_headers):
    first = await create_reservation(client, customer_headers)
    await client.put(f"/reservations/{first.json()['id']}/cancel", headers=customer_headers)

    second = await create_reservation(client, customer_headers)

    assert second.status_code == 201


@pytest.mark.asyncio
async def test_different_owners_may_request_same_slot(client: AsyncClient, customer_headers, other_headers):
    first = await create_reservation(client, customer_headers)
    second = await create_reservation(client, other_headers)

    assert first.status_code == 201
    assert second.status_code == 201


@pytest.mark.asyncio
async def test_cancel_twice_conflicts(client: AsyncClient, customer_headers, notifier):
    created = (await create_reservation(client, customer_headers)).json()

    first = await client.put(f"/reservations/{created['id']}/cancel", headers=customer_headers)
    second = await client.put(f"/reservations/{created['id']}/cancel", headers=customer_headers)

    assert first.status_code == 200
    assert first.json()["status"] == "cancelled"
    assert second.status_code == 409
    assert second.json()["detail"] == "Reservation is already cancelled"
    assert notifier.kinds == ["reservation_received", "reservation_cancelled"]


@pytest.mark.asyncio
async def test_non_owner_cannot_update_or_cancel(client: AsyncClient, customer_headers, other_headers):
    created = (await create_reservation(client, customer_headers)).json()

    update = await client.put(
        f"/reservations/{created['id']}", json={"party_size": 2}, headers=other_headers
    )
    cancel = await client.put(f"/reservations/{created['id']}/cancel", headers=other_headers)
    fetch = await client.get(f"/reservations/{created['id']}", headers=other_headers)

    assert update.status_code == 403
    assert cancel.status_code == 403
    assert fetch.status_code == 403


@pytest.mark.asyncio
async def test_staff_is_not_an_authorizer(client: AsyncClient, customer_headers, staff_headers):
    created = (await create_reservation(client, customer_headers)).json()

    response = await client.put(f"/reservations/{created['id']}/cancel", headers=staff_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_owner_and_admin_can_update_and_cancel(client: AsyncClient, customer_headers, admin_headers):
    created = (await create_reservation(client, customer_headers)).json()

    by_owner = await client.put(
        f"/reservations/{created['id']}", json={"party_size": 2}, headers=customer_headers
    )
    by_admin = await client.put(
        f"/reservations/{created['id']}", json={"reservation_time": "20:15"}, headers=admin_headers
    )
    cancelled = await client.put(f"/reservations/{created['id']}/cancel", headers=admin_headers)

    assert by_owner.status_code == 200
    assert by_owner.json()["party_size"] == 2
    assert by_admin.status_code == 200
    assert by_admin.json()["reservation_time"] == "20:15"
    assert by_admin.json()["party_size"] == 2
    assert cancelled.status_code == 200


@pytest.mark.asyncio
async def test_update_revalidates_merged_record(client: AsyncClient, customer_headers):
    created = (await create_reservation(client, customer_headers)).json()

    response = await client.put(
        f"/reservations/{created['id']}",
        json={"reservation_time": "7pm", "party_size": 30},
        headers=customer_headers,
    )

    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == [
        "Reservation time must be in HH:MM format (e.g., 19:30)",
        "Party size cannot exceed 20",
    ]


@pytest.mark.asyncio
async def test_update_onto_own_existing_slot_conflicts(client: AsyncClient, customer_headers):
    await create_reservation(client, customer_headers, reservation_time="18:00")
    second = (await create_reservation(client, customer_headers, reservation_time="21:00")).json()

    response = await client.put(
        f"/reservations/{second['id']}", json={"reservation_time": "18:00"}, headers=customer_headers
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_update_of_cancelled_reservation_conflicts(client: AsyncClient, customer_headers):
    created = (await create_reservation(client, customer_headers)).json()
    await client.put(f"/reservations/{created['id']}/cancel", headers=customer_headers)

    response = await client.put(
        f"/reservations/{created['id']}", json={"party_size": 2}, headers=customer_headers
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_update_cannot_move_onto_booked_table(
    client: AsyncClient, customer_headers, other_headers, admin_headers, tables
):
    early = (await create_reservation(client, customer_headers, reservation_time="17:00")).json()
    late = (await create_reservation(client, other_headers, reservation_time="20:00")).json()
    await approve(client, admin_headers, early["id"], tables["T4"])
    await approve(client, admin_headers, late["id"], tables["T4"])

    # 17:00-19:00 is fine; 17:00 for 4 hours runs into the 20:00 booking
    longer = await client.put(
        f"/reservations/{early['id']}", json={"duration_minutes": 240}, headers=customer_headers
    )

    assert longer.status_code == 409
    assert longer.json()["detail"] == "Time slot not available"


@pytest.mark.asyncio
async def test_update_party_beyond_table_capacity(client: AsyncClient, customer_headers, admin_headers, tables):
    created = (await create_reservation(client, customer_headers)).json()
    await approve(client, admin_headers, created["id"], tables["T4"])

    response = await client.put(
        f"/reservations/{created['id']}", json={"party_size": 6}, headers=customer_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Table capacity (4) is less than party size (6)"


@pytest.mark.asyncio
async def test_approve_assigns_table(client: AsyncClient, customer_headers, admin_headers, tables, notifier):
    created = (await create_reservation(client, customer_headers)).json()

    response = await approve(client, admin_headers, created["id"], tables["T4"])

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "confirmed"
    assert data["table_id"] == str(tables["T4"].id)
    assert notifier.kinds == ["reservation_received", "reservation_confirmed"]
    assert notifier.sent[-1][1]["table_number"] == "T4"


@pytest.mark.asyncio
async def test_approve_requires_admin(client: AsyncClient, customer_headers, staff_headers, tables):
    created = (await create_reservation(client, customer_headers)).json()

    by_owner = await approve(client, customer_headers, created["id"], tables["T4"])
    by_staff = await approve(client, staff_headers, created["id"], tables["T4"])

    assert by_owner.status_code == 403
    assert by_staff.status_code == 403


@pytest.mark.asyncio
async def test_approve_non_pending_conflicts(client: AsyncClient, customer_headers, admin_headers, tables):
    created = (await create_reservation(client, customer_headers)).json()
    await approve(client, admin_headers, created["id"], tables["T4"])

    again = await approve(client, admin_headers, created["id"], tables["T6"])

    assert again.status_code == 409
    assert again.json()["detail"] == "Only pending reservations can be approved"


@pytest.mark.asyncio
async def test_approve_small_table_is_bad_request(client: AsyncClient, customer_headers, admin_headers, tables):
    created = (await create_reservation(client, customer_headers)).json()

    response = await approve(client, admin_headers, created["id"], tables["T2"])

    assert response.status_code == 400
    assert response.json()["detail"] == "Table capacity (2) is less than party size (4)"


@pytest.mark.asyncio
async def test_approve_out_of_service_table_is_bad_request(
    client: AsyncClient, customer_headers, admin_headers, tables
):
    created = (await create_reservation(client, customer_headers)).json()

    response = await approve(client, admin_headers, created["id"], tables["X4"])

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_approve_overlapping_booking_conflicts(
    client: AsyncClient, customer_headers, other_headers, admin_headers, tables
):
    """19:00-21:00 holds the table against a 20:00 request"""
    first = (await create_reservation(client, customer_headers, reservation_time="19:00")).json()
    second = (await create_reservation(client, other_headers, reservation_time="20:00")).json()
    await approve(client, admin_headers, first["id"], tables["T4"])

    clash = await approve(client, admin_headers, second["id"], tables["T4"])
    elsewhere = await approve(client, admin_headers, second["id"], tables["T6"])

    assert clash.status_code == 409
    assert clash.json()["detail"] == "Table is already booked for this time slot"
    assert elsewhere.status_code == 200


@pytest.mark.asyncio
async def test_back_to_back_bookings_share_a_table(
    client: AsyncClient, customer_headers, other_headers, admin_headers, tables
):
    first = (await create_reservation(client, customer_headers, reservation_time="18:00")).json()
    second = (await create_reservation(client, other_headers, reservation_time="20:00")).json()
    await approve(client, admin_headers, first["id"], tables["T4"])

    response = await approve(client, admin_headers, second["id"], tables["T4"])

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_approve_with_bad_ids(client: AsyncClient, customer_headers, admin_headers, tables):
    created = (await create_reservation(client, customer_headers)).json()

    malformed = await client.put(
        f"/reservations/{created['id']}/approve", json={"table_id": "not-a-uuid"}, headers=admin_headers
    )
    unknown = await client.put(
        f"/reservations/{created['id']}/approve", json={"table_id": str(uuid4())}, headers=admin_headers
    )
    missing = await client.put(
        f"/reservations/{uuid4()}/approve", json={"table_id": str(tables['T4'].id)}, headers=admin_headers
    )

    assert malformed.status_code == 400
    assert unknown.status_code == 404
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_reject_pending_only(client: AsyncClient, customer_headers, admin_headers, tables, notifier):
    rejected = (await create_reservation(client, customer_headers, reservation_time="12:00")).json()
    confirmed = (await create_reservation(client, customer_headers, reservation_time="19:00")).json()
    await approve(client, admin_headers, confirmed["id"], tables["T4"])

    ok = await client.put(f"/reservations/{rejected['id']}/reject", headers=admin_headers)
    refused = await client.put(f"/reservations/{confirmed['id']}/reject", headers=admin_headers)

    assert ok.status_code == 200
    assert ok.json()["status"] == "cancelled"
    assert refused.status_code == 409
    assert "reservation_rejected" in notifier.kinds


@pytest.mark.asyncio
async def test_complete_is_terminal(client: AsyncClient, customer_headers, admin_headers, tables):
    created = (await create_reservation(client, customer_headers)).json()
    pending_complete = await client.put(f"/reservations/{created['id']}/complete", headers=admin_headers)
    await approve(client, admin_headers, created["id"], tables["T4"])

    completed = await client.put(f"/reservations/{created['id']}/complete", headers=admin_headers)
    cancel = await client.put(f"/reservations/{created['id']}/cancel", headers=customer_headers)

    assert pending_complete.status_code == 409
    assert completed.status_code == 200
    assert completed.json()["status"] == "completed"
    assert cancel.status_code == 409


@pytest.mark.asyncio
async def test_delete_is_admin_only(client: AsyncClient, customer_headers, admin_headers):
    created = (await create_reservation(client, customer_headers)).json()

    by_owner = await client.delete(f"/reservations/{created['id']}", headers=customer_headers)
    by_admin = await client.delete(f"/reservations/{created['id']}", headers=admin_headers)
    fetch = await client.get(f"/reservations/{created['id']}", headers=admin_headers)

    assert by_owner.status_code == 403
    assert by_admin.status_code == 200
    assert fetch.status_code == 404


@pytest.mark.asyncio
async def test_malformed_reservation_id_is_bad_request(client: AsyncClient, customer_headers):
    response = await client.get("/reservations/12345", headers=customer_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid reservation ID"


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_booking(client: AsyncClient, customer_headers):
    app.dependency_overrides[get_notifier] = lambda: FailingNotifier()

    response = await create_reservation(client, customer_headers)

    assert response.status_code == 201
    assert response.json()["status"] == "pending"


@pytest.mark.asyncio
async def test_listing(client: AsyncClient, customer_headers, other_headers, admin_headers):
    await create_reservation(client, customer_headers, reservation_date="2025-12-15")
    await create_reservation(client, customer_headers, reservation_date="2025-12-20")
    await create_reservation(client, other_headers, reservation_date="2025-12-18")

    mine = await client.get("/reservations/mine", headers=customer_headers)
    everything = await client.get("/reservations", headers=admin_headers)
    forbidden = await client.get("/reservations", headers=customer_headers)
    in_range = await client.get(
        "/reservations/range",
        params={"start_date": "2025-12-16", "end_date": "2025-12-20"},
        headers=admin_headers,
    )

    assert [r["reservation_date"] for r in mine.json()] == ["2025-12-20", "2025-12-15"]
    assert len(everything.json()) == 3
    assert forbidden.status_code == 403
    assert [r["reservation_date"] for r in in_range.json()] == ["2025-12-18", "2025-12-20"]


@pytest.mark.asyncio
async def test_range_rejects_inverted_dates(client: AsyncClient, admin_headers):
    response = await client.get(
        "/reservations/range",
        params={"start_date": "2025-12-20", "end_date": "2025-12-01"},
        headers=admin_headers,
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_availability_returns_exactly_the_free_table(
    client: AsyncClient, test_db, customer_headers, admin_headers
):
    booked_table = Table(id=uuid4(), table_number="A1", capacity=4)
    free_table = Table(id=uuid4(), table_number="A2", capacity=4)
    test_db.add_all([booked_table, free_table])
    await test_db.commit()

    created = (await create_reservation(client, customer_headers)).json()
    await approve(client, admin_headers, created["id"], booked_table)

    response = await client.get(
        "/reservations/availability/check",
        params={"date": "2025-12-15", "time": "19:00", "party_size": 4},
        headers=customer_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_suitable_tables"] == 2
    assert data["booked_tables"] == 1
    assert data["has_availability"] is True
    assert [table["table_number"] for table in data["available_tables"]] == ["A2"]

    tables_only = await client.get(
        "/reservations/available_tables",
        params={"date": "2025-12-15", "time": "19:00", "party_size": 4},
        headers=customer_headers,
    )
    assert [table["id"] for table in tables_only.json()] == [str(free_table.id)]


@pytest.mark.asyncio
async def test_availability_is_read_only(client: AsyncClient, customer_headers, tables):
    await client.get(
        "/reservations/availability/check",
        params={"date": "2025-12-15", "time": "19:00", "party_size": 2},
        headers=customer_headers,
    )

    mine = await client.get("/reservations/mine", headers=customer_headers)

    assert mine.json() == []


@pytest.mark.asyncio
async def test_availability_rejects_bad_input(client: AsyncClient, customer_headers):
    response = await client.get(
        "/reservations/availability/check",
        params={"date": "15-12-2025", "time": "19:00", "party_size": 4},
        headers=customer_headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_store_rejects_double_booked_table_slot(test_db, customer, other_customer, tables):
    """The partial unique index holds even when service checks are bypassed"""
    slot = {
        "table_id": tables["T4"].id,
        "reservation_date": "2025-12-15",
        "reservation_time": "19:00",
        "party_size": 2,
        "status": ReservationStatus.CONFIRMED.value,
    }
    test_db.add(Reservation(user_id=customer.id, customer_name="A", customer_email="a@example.com", **slot))
    await test_db.commit()

    test_db.add(Reservation(user_id=other_customer.id, customer_name="B", customer_email="b@example.com", **slot))
    with pytest.raises(IntegrityError):
        await test_db.commit()
    await test_db.rollback()
