import uuid
from datetime import datetime

import pytest
from sqlalchemy import update

from mietlink.core.errors import (
    AlreadyDecided,
    DuplicateApplication,
    Forbidden,
    NotFoundError,
    PropertyClosed,
    ValidationError,
)
from mietlink.domain import lifecycle
from mietlink.domain.enums import CandidateStatus, DocumentType, LandlordDecision
from mietlink.domain.scoring import compute_score
from mietlink.domain.validation import ValidationOutcome
from mietlink.models import Candidate
from mietlink.services import candidates, documents, users

LETTER = "Guten Tag, ich interessiere mich sehr für die Wohnung."


def test_decision_rules():
    assert lifecycle.check_decision(None, LandlordDecision.accepted) is True
    assert lifecycle.check_decision("accepted", LandlordDecision.accepted) is False
    with pytest.raises(AlreadyDecided):
        lifecycle.check_decision("accepted", LandlordDecision.rejected)


def test_parse_decision():
    assert lifecycle.parse_decision(" Accepted ") == LandlordDecision.accepted
    with pytest.raises(ValidationError):
        lifecycle.parse_decision("maybe")
    with pytest.raises(ValidationError):
        lifecycle.parse_decision(None)


def test_transitions():
    assert lifecycle.can_transition("dossier_submitted", "under_review")
    assert lifecycle.can_transition("under_review", "rejected")
    assert not lifecycle.can_transition("accepted", "rejected")
    assert not lifecycle.can_transition("under_review", "dossier_submitted")
    assert lifecycle.TERMINAL == {CandidateStatus.accepted, CandidateStatus.rejected}


def test_transition_sources():
    assert lifecycle.sources_of(CandidateStatus.under_review) == ["dossier_submitted"]
    assert lifecycle.sources_of("accepted") == ["dossier_submitted", "under_review"]


def test_check_transition():
    lifecycle.check_transition("under_review", CandidateStatus.accepted)
    with pytest.raises(AlreadyDecided):
        lifecycle.check_transition("rejected", CandidateStatus.accepted)
    with pytest.raises(ValidationError):
        lifecycle.check_transition("under_review", CandidateStatus.dossier_submitted)


def test_closed_property_refuses_applications():
    lifecycle.check_accepting_applications(None)
    with pytest.raises(PropertyClosed):
        lifecycle.check_accepting_applications(datetime(2025, 5, 1))


@pytest.mark.asyncio
async def test_second_application_is_a_duplicate(db, tenant, listing):
    score = compute_score(1, 3)
    candidate = await candidates.create_candidate(db, tenant.id, listing.id, LETTER, score)
    assert candidate.status == "dossier_submitted"
    assert candidate.tenant_score == 25
    assert candidate.score_tier == "incomplete"

    with pytest.raises(DuplicateApplication):
        await candidates.create_candidate(db, tenant.id, listing.id, LETTER, score)


@pytest.mark.asyncio
async def test_application_requires_cover_letter(db, tenant, listing):
    with pytest.raises(ValidationError):
        await candidates.create_candidate(db, tenant.id, listing.id, "  ", compute_score(3, 3))


@pytest.mark.asyncio
async def test_closed_property(db, tenant, listing):
    listing.closed_at = datetime.utcnow()
    await db.commit()
    with pytest.raises(PropertyClosed):
        await candidates.create_candidate(db, tenant.id, listing.id, LETTER, compute_score(3, 3))


@pytest.mark.asyncio
async def test_badge_is_copied_from_the_user(db, tenant, listing):
    tenant.badge_paid_at = datetime.utcnow()
    await db.commit()
    candidate = await candidates.create_candidate(db, tenant.id, listing.id, LETTER, compute_score(3, 3))
    assert candidate.badge_flag is True


@pytest.mark.asyncio
async def test_decide_is_idempotent_and_final(db, tenant, landlord, listing):
    candidate = await candidates.create_candidate(db, tenant.id, listing.id, LETTER, compute_score(3, 3))

    decided = await candidates.decide(db, candidate.id, "accepted", landlord.id)
    assert decided.landlord_decision == "accepted"
    assert decided.status == "accepted"

    again = await candidates.decide(db, candidate.id, "accepted", landlord.id)
    assert again.landlord_decision == "accepted"

    with pytest.raises(AlreadyDecided):
        await candidates.decide(db, candidate.id, "rejected", landlord.id)


@pytest.mark.asyncio
async def test_only_the_owner_decides(db, tenant, listing):
    candidate = await candidates.create_candidate(db, tenant.id, listing.id, LETTER, compute_score(3, 3))
    with pytest.raises(Forbidden):
        await candidates.decide(db, candidate.id, "rejected", tenant.id)


@pytest.mark.asyncio
async def test_unknown_candidate(db, landlord):
    with pytest.raises(NotFoundError):
        await candidates.decide(db, uuid.UUID(int=0), "accepted", landlord.id)


@pytest.mark.asyncio
async def test_owner_listing_moves_dossiers_into_review(db, tenant, landlord, listing):
    other = await users.ensure_user(db, "tenant-2", email="tenant2@example.com")
    await candidates.create_candidate(db, tenant.id, listing.id, LETTER, compute_score(1, 3))
    await candidates.create_candidate(db, other.id, listing.id, LETTER, compute_score(3, 3))

    ranked = await candidates.list_for_property(db, listing.id, landlord.id)

    assert [c.user_id for c in ranked] == ["tenant-2", tenant.id]
    assert {c.status for c in ranked} == {"under_review"}

    with pytest.raises(Forbidden):
        await candidates.list_for_property(db, listing.id, tenant.id)


@pytest.mark.asyncio
async def test_application_identity_is_immutable(db, tenant, listing):
    candidate = await candidates.create_candidate(db, tenant.id, listing.id, LETTER, compute_score(3, 3))
    with pytest.raises(ValueError):
        candidate.user_id = "someone-else"


@pytest.mark.asyncio
async def test_rescoring_keeps_the_landlord_decision(db, tenant, landlord, listing):
    for doc_type in (DocumentType.identity, DocumentType.debt_extract):
        await documents.record_document(db, tenant.id, doc_type, f"{doc_type.value}.pdf", "application/pdf", ValidationOutcome.unchecked())
    score = await candidates.score_application(db, tenant.id, listing.id)
    candidate = await candidates.create_candidate(db, tenant.id, listing.id, LETTER, score)
    await candidates.decide(db, candidate.id, "accepted", landlord.id)

    await documents.record_document(db, tenant.id, DocumentType.income_proof, "lohn.pdf", "application/pdf", ValidationOutcome.unchecked())
    rescored = await candidates.recompute_score(db, candidate.id)

    assert rescored.tenant_score == 85
    assert rescored.landlord_decision == "accepted"
    assert rescored.status == "accepted"


@pytest.mark.asyncio
async def test_decision_recorded_concurrently_wins(db, tenant, landlord, listing):
    candidate = await candidates.create_candidate(db, tenant.id, listing.id, LETTER, compute_score(3, 3))
    # Another request rejects after our copy was loaded; the loaded copy stays undecided
    await db.execute(
        update(Candidate)
        .where(Candidate.id == candidate.id)
        .values(landlord_decision="rejected", status="rejected")
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    assert candidate.landlord_decision is None

    with pytest.raises(AlreadyDecided):
        await candidates.decide(db, candidate.id, "accepted", landlord.id)
    await db.refresh(candidate)
    assert candidate.landlord_decision == "rejected"
    assert candidate.status == "rejected"


@pytest.mark.asyncio
async def test_terminal_status_blocks_a_decision(db, tenant, landlord, listing):
    candidate = await candidates.create_candidate(db, tenant.id, listing.id, LETTER, compute_score(3, 3))
    candidate.status = CandidateStatus.rejected.value
    await db.commit()

    with pytest.raises(AlreadyDecided):
        await candidates.decide(db, candidate.id, "accepted", landlord.id)
    await db.refresh(candidate)
    assert candidate.landlord_decision is None


@pytest.mark.asyncio
async def test_review_leaves_decided_candidates_alone(db, tenant, landlord, listing):
    other = await users.ensure_user(db, "tenant-2", email="tenant2@example.com")
    decided = await candidates.create_candidate(db, tenant.id, listing.id, LETTER, compute_score(3, 3))
    await candidates.create_candidate(db, other.id, listing.id, LETTER, compute_score(1, 3))
    await candidates.decide(db, decided.id, "rejected", landlord.id)

    assert await candidates.mark_under_review(db, listing.id) == 1
    ranked = await candidates.list_for_property(db, listing.id, landlord.id)
    assert {c.user_id: c.status for c in ranked} == {tenant.id: "rejected", "tenant-2": "under_review"}
