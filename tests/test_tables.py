"""Tests for table inventory endpoints"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_table(client: AsyncClient, admin_headers):
    response = await client.post(
        "/tables",
        json={"table_number": "B1", "capacity": 8, "location": "bar"},
        headers=admin_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["table_number"] == "B1"
    assert data["capacity"] == 8
    assert data["is_available"] is True


@pytest.mark.asyncio
async def test_create_table_requires_admin(client: AsyncClient, customer_headers, staff_headers):
    payload = {"table_number": "B1", "capacity": 8}

    assert (await client.post("/tables", json=payload, headers=customer_headers)).status_code == 403
    assert (await client.post("/tables", json=payload, headers=staff_headers)).status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("capacity", [0, 21])
async def test_capacity_bounds(client: AsyncClient, admin_headers, capacity):
    response = await client.post(
        "/tables", json={"table_number": "B1", "capacity": capacity}, headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Table capacity must be between 1 and 20"


@pytest.mark.asyncio
async def test_duplicate_table_number_conflicts(client: AsyncClient, admin_headers, tables):
    response = await client.post(
        "/tables", json={"table_number": "T4", "capacity": 4}, headers=admin_headers
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_list_tables(client: AsyncClient, customer_headers, tables):
    response = await client.get("/tables", headers=customer_headers)

    assert response.status_code == 200
    assert [table["table_number"] for table in response.json()] == ["T2", "T4", "X4", "T6"]


@pytest.mark.asyncio
async def test_update_table(client: AsyncClient, admin_headers, tables):
    table_id = tables["T6"].id

    renamed = await client.put(
        f"/tables/{table_id}", json={"table_number": "P6", "capacity": 5}, headers=admin_headers
    )
    clash = await client.put(f"/tables/{table_id}", json={"table_number": "T2"}, headers=admin_headers)

    assert renamed.status_code == 200
    assert renamed.json()["table_number"] == "P6"
    assert renamed.json()["capacity"] == 5
    assert clash.status_code == 409


@pytest.mark.asyncio
async def test_take_table_out_of_service(client: AsyncClient, admin_headers, tables):
    response = await client.put(
        f"/tables/{tables['T4'].id}/availability",
        json={"is_available": False},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["is_available"] is False


@pytest.mark.asyncio
async def test_get_missing_table(client: AsyncClient, customer_headers):
    malformed = await client.get("/tables/nope", headers=customer_headers)
    missing = await client.get("/tables/00000000-0000-0000-0000-000000000000", headers=customer_headers)

    assert malformed.status_code == 400
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_table_with_active_booking_conflicts(
    client: AsyncClient, customer_headers, admin_headers, tables
):
    created = await client.post(
        "/reservations",
        json={"reservation_date": "2025-12-15", "reservation_time": "19:00", "party_size": 2},
        headers=customer_headers,
    )
    await client.put(
        f"/reservations/{created.json()['id']}/approve",
        json={"table_id": str(tables["T2"].id)},
        headers=admin_headers,
    )

    blocked = await client.delete(f"/tables/{tables['T2'].id}", headers=admin_headers)
    free = await client.delete(f"/tables/{tables['T6'].id}", headers=admin_headers)

    assert blocked.status_code == 409
    assert free.status_code == 200


@pytest.mark.asyncio
async def test_available_in_hour_range(client: AsyncClient, customer_headers, admin_headers, tables):
    created = await client.post(
        "/reservations",
        json={"reservation_date": "2025-12-15", "reservation_time": "19:30", "party_size": 2},
        headers=customer_headers,
    )
    await client.put(
        f"/reservations/{created.json()['id']}/approve",
        json={"table_id": str(tables["T2"].id)},
        headers=admin_headers,
    )

    overlapping = await client.get(
        "/tables/available",
        params={"date": "2025-12-15", "from_hour": 18, "to_hour": 20},
        headers=customer_headers,
    )
    after = await client.get(
        "/tables/available",
        params={"date": "2025-12-15", "from_hour": 22, "to_hour": 23},
        headers=customer_headers,
    )

    data = overlapping.json()
    assert data["time_range"] == "18:00 - 20:00"
    assert data["total_tables"] == 3
    assert data["booked_tables"] == 1
    assert [table["table_number"] for table in data["available_tables"]] == ["T4", "T6"]
    assert after.json()["available_count"] == 3


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {"date": "2025-12-15", "from_hour": 20, "to_hour": 18},
        {"date": "2025-12-15", "from_hour": 10, "to_hour": 24},
        {"date": "15/12/2025", "from_hour": 10, "to_hour": 12},
    ],
)
async def test_available_rejects_bad_range(client: AsyncClient, customer_headers, params):
    response = await client.get("/tables/available", params=params, headers=customer_headers)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_capacity_cannot_drop_below_booked_party(
    client: AsyncClient, customer_headers, admin_headers, tables
):
    created = await client.post(
        "/reservations",
        json={"reservation_date": "2025-12-15", "reservation_time": "19:00", "party_size": 6},
        headers=customer_headers,
    )
    await client.put(
        f"/reservations/{created.json()['id']}/approve",
        json={"table_id": str(tables["T6"].id)},
        headers=admin_headers,
    )

    shrunk = await client.put(f"/tables/{tables['T6'].id}", json={"capacity": 2}, headers=admin_headers)
    grown = await client.put(f"/tables/{tables['T6'].id}", json={"capacity": 8}, headers=admin_headers)

    assert shrunk.status_code == 409
    assert shrunk.json()["detail"] == "Table has active reservations for parties larger than 2"
    assert grown.status_code == 200
    assert grown.json()["capacity"] == 8

    await client.put(f"/reservations/{created.json()['id']}/cancel", headers=customer_headers)
    after_cancel = await client.put(f"/tables/{tables['T6'].id}", json={"capacity": 2}, headers=admin_headers)

    assert after_cancel.status_code == 200
