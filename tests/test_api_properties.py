import pytest

from conftest import LANDLORD, TENANT
from mietlink.core.errors import ExternalServiceFailure
from mietlink.dependencies.auth import get_current_user
from mietlink.main import app
from mietlink.services import gemini

NEW_PROPERTY = {
    "address": "Seefeldstrasse 12, 8008 Zürich",
    "rentChf": "1850.00",
    "noticeMonths": 3,
    "earliestExit": "2025-06-30",
    "keyCount": 3,
}


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["database"] == "up"
    assert "gemini_key_set" in body["config"]


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert (await client.get("/health")).headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_unauthenticated_requests_are_rejected(client):
    app.dependency_overrides.pop(get_current_user)
    response = await client.post("/api/v1/properties", json=NEW_PROPERTY)
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_create_property_with_generated_tasks(client, auth, mock_gemini):
    auth.login(LANDLORD)
    response = await client.post(
        "/api/v1/properties",
        json={**NEW_PROPERTY, "obligations": ["Professional final cleaning", {"title": "Return keys", "days_before_exit": 0}, {"title": ""}]},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["owner_id"] == LANDLORD["user_id"]
    assert len(body["slug"]) == 8
    assert body["tasks_created"] == 2
    assert body["tasks_failed"] == 1

    tasks = (await client.get(f"/api/v1/tasks/{body['id']}")).json()
    assert [t["due_date"] for t in tasks] == ["2025-06-23", "2025-06-30"]


@pytest.mark.asyncio
async def test_property_survives_extraction_failure(client, auth, monkeypatch):
    async def failing(obligations):
        raise ExternalServiceFailure("task generation timed out")

    monkeypatch.setattr("mietlink.services.gemini.generate_tasks", failing)
    auth.login(LANDLORD)
    response = await client.post("/api/v1/properties", json={**NEW_PROPERTY, "obligations": ["Clean everything"]})
    assert response.status_code == 201
    assert response.json()["tasks_created"] == 0
    assert response.json()["tasks_failed"] == 1

    mine = await client.get("/api/v1/properties/my")
    assert [p["slug"] for p in mine.json()] == [response.json()["slug"]]


@pytest.mark.asyncio
async def test_property_lookup_by_slug(client, auth):
    auth.login(LANDLORD)
    created = (await client.post("/api/v1/properties", json=NEW_PROPERTY)).json()

    auth.login(TENANT)
    response = await client.get(f"/api/v1/properties/{created['slug']}")
    assert response.status_code == 200
    assert response.json()["address"] == NEW_PROPERTY["address"]
    assert (await client.get("/api/v1/properties/my")).json() == []

    missing = await client.get("/api/v1/properties/nope1234")
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Property not found", "error": "not_found"}


@pytest.mark.asyncio
async def test_invalid_property_payload(client, auth):
    auth.login(LANDLORD)
    response = await client.post("/api/v1/properties", json={"address": "", "rentChf": "-5"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_out_of_range_offset_does_not_fail_the_listing(client, auth):
    auth.login(LANDLORD)
    response = await client.post(
        "/api/v1/properties",
        json={
            **NEW_PROPERTY,
            "obligations": [
                {"title": "Return keys", "days_before_exit": 0},
                {"title": "Far future", "days_before_exit": 10**6},
            ],
        },
    )
    assert response.status_code == 201
    assert response.json()["tasks_created"] == 1
    assert response.json()["tasks_failed"] == 1


@pytest.mark.asyncio
async def test_open_extractor_circuit_still_creates_the_listing(client, auth):
    gemini.breaker.open()
    auth.login(LANDLORD)
    response = await client.post("/api/v1/properties", json={**NEW_PROPERTY, "obligations": ["Clean everything"]})
    assert response.status_code == 201
    assert response.json()["tasks_created"] == 0
    assert response.json()["tasks_failed"] == 1
