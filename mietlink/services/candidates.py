"""Candidate lifecycle: creation, score recomputation, review and landlord decision.

Every write after creation is a targeted UPDATE of the columns the operation
owns, so a re-score racing a landlord decision cannot overwrite the other's
fields.
"""
from datetime import datetime
from functools import lru_cache
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from structlog import get_logger

from mietlink.config import settings
from mietlink.core.errors import DuplicateApplication, NotFoundError, ValidationError
from mietlink.domain import lifecycle
from mietlink.domain.enums import CandidateStatus
from mietlink.domain.scoring import ScoreResult, ScoringPolicy, score_documents
from mietlink.models import Candidate, User
from mietlink.services import documents, events
from mietlink.services.properties import must_get_property, must_own_property

logger = get_logger()


@lru_cache(maxsize=1)
def scoring_policy() -> ScoringPolicy:
    return ScoringPolicy.from_settings(settings)


async def must_get_candidate(db: AsyncSession, candidate_id) -> Candidate:
    candidate = await db.get(Candidate, candidate_id)
    if candidate is None:
        raise NotFoundError("Candidate not found")
    return candidate


async def must_view_candidate(db: AsyncSession, candidate_id, viewer_id: str) -> Candidate:
    """The applicant and the property owner may see a candidate; nobody else."""
    candidate = await must_get_candidate(db, candidate_id)
    if candidate.user_id != viewer_id:
        await must_own_property(db, candidate.property_id, viewer_id)
    return candidate


async def get_for_user_and_property(db: AsyncSession, user_id: str, property_id) -> Optional[Candidate]:
    result = await db.execute(
        select(Candidate).where(Candidate.user_id == user_id, Candidate.property_id == property_id)
    )
    return result.scalar_one_or_none()


async def score_application(
    db: AsyncSession, user_id: str, property_id, policy: Optional[ScoringPolicy] = None
) -> ScoreResult:
    docs = await documents.documents_for_application(db, user_id, property_id)
    return score_documents(docs, policy or scoring_policy())


async def create_candidate(
    db: AsyncSession,
    user_id: str,
    property_id,
    cover_letter: Optional[str],
    score: ScoreResult,
) -> Candidate:
    if not cover_letter or not cover_letter.strip():
        raise ValidationError("A cover letter is required to submit an application")
    prop = await must_get_property(db, property_id)
    lifecycle.check_accepting_applications(prop.closed_at)
    if await get_for_user_and_property(db, user_id, property_id) is not None:
        raise DuplicateApplication("Application already exists")

    user = await db.get(User, user_id)
    candidate = Candidate(
        user_id=user_id,
        property_id=prop.id,
        tenant_score=score.score,
        score_tier=score.status.value,
        score_reason=score.reason,
        status=lifecycle.INITIAL_STATUS.value,
        badge_flag=bool(user is not None and user.has_badge),
        cover_letter=cover_letter.strip(),
    )
    db.add(candidate)
    try:
        await db.flush()
    except IntegrityError:
        # Unique (user_id, property_id) caught a concurrent submission
        await db.rollback()
        raise DuplicateApplication("Application already exists")
    events.emit(
        db,
        "candidate.created",
        prop.id,
        {"candidate_id": str(candidate.id), "user_id": user_id, "score": score.score, "status": score.status.value},
    )
    await db.commit()
    await db.refresh(candidate)
    logger.info(
        "Candidate created",
        candidate_id=str(candidate.id),
        property_id=str(prop.id),
        user_id=user_id,
        score=candidate.tenant_score,
        tier=candidate.score_tier,
    )
    return candidate


async def recompute_score(db: AsyncSession, candidate_id, policy: Optional[ScoringPolicy] = None) -> Candidate:
    """Re-read the candidate's documents and rewrite score, tier and reason only."""
    candidate = await must_get_candidate(db, candidate_id)
    result = await score_application(db, candidate.user_id, candidate.property_id, policy)
    await db.execute(
        update(Candidate)
        .where(Candidate.id == candidate.id)
        .values(
            tenant_score=result.score,
            score_tier=result.status.value,
            score_reason=result.reason,
            updated_at=datetime.utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    events.emit(
        db,
        "candidate.rescored",
        candidate.property_id,
        {"candidate_id": str(candidate.id), **result.as_dict()},
    )
    await db.commit()
    await db.refresh(candidate)
    logger.info("Candidate rescored", candidate_id=str(candidate.id), score=result.score, tier=result.status.value)
    return candidate


async def recompute_for_user(db: AsyncSession, user_id: str, property_id=None) -> List[Candidate]:
    """Re-score the user's applications touched by a new upload.

    A property-less document can count for every application of the user.
    """
    stmt = select(Candidate.id).where(Candidate.user_id == user_id)
    if property_id is not None:
        stmt = stmt.where(Candidate.property_id == property_id)
    ids = list((await db.execute(stmt)).scalars().all())
    return [await recompute_score(db, candidate_id) for candidate_id in ids]


async def decide(db: AsyncSession, candidate_id, decision, actor_id: str) -> Candidate:
    """Record the landlord decision. Repeating the same decision is a no-op."""
    requested = lifecycle.parse_decision(decision)
    candidate = await must_get_candidate(db, candidate_id)
    await must_own_property(db, candidate.property_id, actor_id)
    if not lifecycle.check_decision(candidate.landlord_decision, requested):
        return candidate
    target = lifecycle.status_for_decision(requested)
    lifecycle.check_transition(candidate.status, target)

    result = await db.execute(
        update(Candidate)
        .where(
            Candidate.id == candidate.id,
            Candidate.landlord_decision.is_(None),
            Candidate.status.in_(lifecycle.sources_of(target)),
        )
        .values(landlord_decision=requested.value, status=target.value, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        # Someone decided between our read and our write
        await db.rollback()
        await db.refresh(candidate)
        if lifecycle.check_decision(candidate.landlord_decision, requested):
            lifecycle.check_transition(candidate.status, target)
        return candidate

    events.emit(
        db,
        "candidate.decided",
        candidate.property_id,
        {"candidate_id": str(candidate.id), "decision": requested.value, "actor_id": actor_id},
    )
    await db.commit()
    await db.refresh(candidate)
    logger.info("Candidate decided", candidate_id=str(candidate.id), decision=requested.value, actor_id=actor_id)
    return candidate


async def mark_under_review(db: AsyncSession, property_id) -> int:
    result = await db.execute(
        update(Candidate)
        .where(
            Candidate.property_id == property_id,
            Candidate.status.in_(lifecycle.sources_of(CandidateStatus.under_review)),
        )
        .values(status=CandidateStatus.under_review.value, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        await db.commit()
    return result.rowcount or 0


async def list_for_property(db: AsyncSession, property_id, viewer_id: str) -> List[Candidate]:
    """Candidates ranked by score. Viewing by the owner moves fresh dossiers into review."""
    prop = await must_own_property(db, property_id, viewer_id)
    moved = await mark_under_review(db, prop.id)
    if moved:
        logger.info("Candidates moved to review", property_id=str(prop.id), count=moved)
    result = await db.execute(
        select(Candidate)
        .where(Candidate.property_id == prop.id)
        .order_by(Candidate.tenant_score.desc(), Candidate.created_at.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def store_cover_letter(db: AsyncSession, user_id: str, property_id, text: str) -> bool:
    result = await db.execute(
        update(Candidate)
        .where(Candidate.user_id == user_id, Candidate.property_id == property_id)
        .values(cover_letter=text, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return bool(result.rowcount)


async def top_candidates(db: AsyncSession, property_id, limit: int = 3) -> List[Candidate]:
    result = await db.execute(
        select(Candidate)
        .where(Candidate.property_id == property_id)
        .order_by(Candidate.tenant_score.desc(), Candidate.created_at.asc())
        .limit(limit)
        .options(selectinload(Candidate.user))
    )
    return list(result.scalars().all())
