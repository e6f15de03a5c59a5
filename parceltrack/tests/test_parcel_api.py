"""
Integration tests for the parcel HTTP endpoints.

Tests the store operations through the API and the error response format.
"""

import pytest
from unittest.mock import AsyncMock, patch

from parceltrack.app.core.exceptions import StorageError
from parceltrack.app.services.parcel_store import ParcelStore

PARCEL_DATA = {
    "client": 1,
    "status": "registered",
    "address": "Saint Petersburg, Nevsky 10",
    "created_at": "2024-03-15T10:30:00Z",
}


async def create_parcel(http_client, **overrides):
    response = await http_client.post("/v1/parcels", json={**PARCEL_DATA, **overrides})
    assert response.status_code == 201
    return response.json()["number"]


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_create_and_get_parcel(client):
    number = await create_parcel(client)

    response = await client.get(f"/v1/parcels/{number}")

    assert response.status_code == 200
    assert response.json() == {**PARCEL_DATA, "number": number}
    assert "X-Correlation-ID" in response.headers


@pytest.mark.asyncio
async def test_create_parcel_defaults_to_registered(client):
    response = await client.post("/v1/parcels", json={"client": 4, "address": "Tver, Sovetskaya 3"})
    assert response.status_code == 201
    number = response.json()["number"]

    status_response = await client.get(f"/v1/parcels/{number}/status")

    assert status_response.json() == {"number": number, "status": "registered"}


@pytest.mark.asyncio
async def test_create_parcel_requires_address(client):
    response = await client.post("/v1/parcels", json={"client": 1})

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_get_unknown_parcel(client):
    response = await client.get("/v1/parcels/999")

    assert response.status_code == 404
    body = response.json()
    assert body["error_code"] == "ERR_NOT_FOUND_001"
    assert body["details"] == {"resource": "Parcel", "id": 999}


@pytest.mark.asyncio
async def test_list_client_parcels(client):
    first = await create_parcel(client, client=10)
    second = await create_parcel(client, client=10, address="Second address")
    await create_parcel(client, client=11)

    response = await client.get("/v1/clients/10/parcels")

    assert response.status_code == 200
    assert sorted(p["number"] for p in response.json()) == sorted([first, second])

    empty = await client.get("/v1/clients/12/parcels")
    assert empty.status_code == 200
    assert empty.json() == []


@pytest.mark.asyncio
async def test_change_address_then_send(client):
    number = await create_parcel(client)

    response = await client.put(f"/v1/parcels/{number}/address", json={"address": "New address"})
    assert response.status_code == 204

    response = await client.put(f"/v1/parcels/{number}/status", json={"status": "sent"})
    assert response.status_code == 204

    response = await client.put(f"/v1/parcels/{number}/address", json={"address": "Too late"})
    assert response.status_code == 409
    body = response.json()
    assert body["error_code"] == "ERR_PARCEL_STATUS_001"
    assert body["details"]["current_status"] == "sent"

    parcel = (await client.get(f"/v1/parcels/{number}")).json()
    assert parcel["address"] == "New address"
    assert parcel["status"] == "sent"


@pytest.mark.asyncio
async def test_delete_parcel(client):
    number = await create_parcel(client)

    response = await client.delete(f"/v1/parcels/{number}")
    assert response.status_code == 204

    response = await client.get(f"/v1/parcels/{number}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cannot_delete_delivered_parcel(client):
    number = await create_parcel(client)
    await client.put(f"/v1/parcels/{number}/status", json={"status": "delivered"})

    response = await client.delete(f"/v1/parcels/{number}")

    assert response.status_code == 409
    assert response.json()["details"]["current_status"] == "delivered"
    assert (await client.get(f"/v1/parcels/{number}")).status_code == 200


@pytest.mark.asyncio
async def test_set_status_of_unknown_parcel(client):
    response = await client.put("/v1/parcels/999/status", json={"status": "sent"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_storage_failure_response(client):
    with patch.object(ParcelStore, "get", AsyncMock(side_effect=StorageError("get", 5, reason="timeout"))):
        response = await client.get("/v1/parcels/5")

    assert response.status_code == 503
    body = response.json()
    assert body["error_code"] == "ERR_STORAGE_001"
    assert body["details"] == {"operation": "get", "id": 5}


@pytest.mark.asyncio
async def test_created_at_offset_survives_round_trip(client):
    number = await create_parcel(client, created_at="2024-03-15T10:30:00+03:00")

    response = await client.get(f"/v1/parcels/{number}")

    assert response.json()["created_at"] == "2024-03-15T07:30:00Z"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_format(client):
    response = await client.get("/v1/nope")

    assert response.status_code == 404
    assert response.json() == {"error_code": "ERR_NOT_FOUND", "message": "Not Found", "details": {}}


@pytest.mark.asyncio
async def test_wrong_method_uses_error_format(client):
    response = await client.post("/v1/parcels/1", json={})

    assert response.status_code == 405
    assert response.json()["error_code"] == "ERR_METHOD_NOT_ALLOWED"
