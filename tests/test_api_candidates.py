import pytest

from conftest import LANDLORD, OTHER_TENANT, TENANT
from mietlink.core.errors import ExternalServiceFailure

LETTER = "Guten Tag, ich bin Nichtraucher und arbeite seit fünf Jahren in Zürich."


async def create_listing(client, auth):
    auth.login(LANDLORD)
    response = await client.post(
        "/api/v1/properties",
        json={"address": "Bahnhofstrasse 1, 8001 Zürich", "rent_chf": "2400.00", "earliest_exit": "2025-09-30"},
    )
    assert response.status_code == 201
    return response.json()


async def upload(client, doc_type, filename, content_type="application/pdf", property_id=None):
    data = {"type": doc_type}
    if property_id:
        data["property_id"] = property_id
    return await client.post(
        "/api/v1/documents/upload",
        data=data,
        files={"file": (filename, b"%PDF-1.4 dossier", content_type)},
    )


@pytest.mark.asyncio
async def test_dossier_flow(client, auth, mock_gemini):
    listing = await create_listing(client, auth)

    auth.login(TENANT)
    response = await client.post(
        "/api/v1/candidates",
        json={"propertyId": listing["id"], "coverLetter": LETTER, "tenantScore": 100},
    )
    assert response.status_code == 201
    candidate = response.json()
    # Client-side scores are ignored
    assert candidate["tenant_score"] == 25
    assert candidate["score_tier"] == "incomplete"
    assert candidate["status"] == "dossier_submitted"

    for doc_type in ("identity", "debt_extract", "income_proof"):
        assert (await upload(client, doc_type, f"{doc_type}.pdf")).status_code == 201

    preview = (await client.get(f"/api/v1/candidates/preview/{listing['id']}")).json()
    assert preview["score"] == 85
    assert preview["missing"] == []

    auth.login(LANDLORD)
    ranked = (await client.get(f"/api/v1/candidates/{listing['id']}")).json()
    assert len(ranked) == 1
    assert ranked[0]["tenant_score"] == 85
    assert ranked[0]["score_tier"] == "green"
    assert ranked[0]["status"] == "under_review"

    decision_url = f"/api/v1/candidates/{candidate['id']}/decision"
    accepted = await client.post(decision_url, json={"decision": "accepted"})
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"
    assert (await client.post(decision_url, json={"decision": "accepted"})).status_code == 200

    conflict = await client.post(decision_url, json={"decision": "rejected"})
    assert conflict.status_code == 409
    assert conflict.json()["error"] == "already_decided"


@pytest.mark.asyncio
async def test_duplicate_application(client, auth):
    listing = await create_listing(client, auth)
    auth.login(TENANT)
    body = {"property_id": listing["id"], "cover_letter": LETTER}
    assert (await client.post("/api/v1/candidates", json=body)).status_code == 201

    again = await client.post("/api/v1/candidates", json=body)
    assert again.status_code == 400
    assert again.json()["error"] == "duplicate_application"


@pytest.mark.asyncio
async def test_application_status_must_be_initial(client, auth):
    listing = await create_listing(client, auth)
    auth.login(TENANT)
    response = await client.post(
        "/api/v1/candidates",
        json={"property_id": listing["id"], "cover_letter": LETTER, "status": "accepted"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_only_owner_sees_or_decides(client, auth):
    listing = await create_listing(client, auth)
    auth.login(TENANT)
    candidate = (await client.post("/api/v1/candidates", json={"property_id": listing["id"], "cover_letter": LETTER})).json()

    assert (await client.get(f"/api/v1/candidates/{listing['id']}")).status_code == 403
    response = await client.post(f"/api/v1/candidates/{candidate['id']}/decision", json={"decision": "accepted"})
    assert response.status_code == 403

    auth.login(OTHER_TENANT)
    assert (await client.post(f"/api/v1/candidates/{candidate['id']}/recompute")).status_code == 403

    auth.login(TENANT)
    recomputed = await client.post(f"/api/v1/candidates/{candidate['id']}/recompute")
    assert recomputed.status_code == 200
    assert recomputed.json()["tenant_score"] == 25


@pytest.mark.asyncio
async def test_invalid_decision_value(client, auth):
    listing = await create_listing(client, auth)
    auth.login(TENANT)
    candidate = (await client.post("/api/v1/candidates", json={"property_id": listing["id"], "cover_letter": LETTER})).json()
    auth.login(LANDLORD)
    response = await client.post(f"/api/v1/candidates/{candidate['id']}/decision", json={"decision": "maybe"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_upload_rejects_unknown_type(client, auth):
    auth.login(TENANT)
    response = await upload(client, "selfie", "me.pdf")
    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_upload_for_missing_property(client, auth):
    auth.login(TENANT)
    response = await upload(client, "id", "id.pdf", property_id="5d1c7f0e-8f0a-4a57-9a43-2f4b8f6f9f10")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_image_upload_when_classifier_is_down(client, auth, monkeypatch):
    async def failing(data, mime_type, filename, type_hint):
        raise ExternalServiceFailure("document classification timed out")

    monkeypatch.setattr("mietlink.services.gemini.classify_document", failing)
    auth.login(TENANT)
    response = await upload(client, "id", "id.jpg", content_type="image/jpeg")
    assert response.status_code == 201
    document = response.json()
    assert document["is_valid"] is False
    assert document["confidence"] == 0.0
    assert document["validation_reason"] == "validation unavailable"

    mine = (await client.get("/api/v1/documents/my")).json()
    assert [d["id"] for d in mine] == [document["id"]]


@pytest.mark.asyncio
async def test_image_upload_is_classified(client, auth, mock_gemini):
    auth.login(TENANT)
    response = await upload(client, "permit", "permit.png", content_type="image/png")
    assert response.status_code == 201
    assert response.json()["confidence"] == 0.9
    assert mock_gemini["classify_document"] == ["permit"]
