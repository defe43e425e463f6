from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mietlink.database import get_session
from mietlink.dependencies.auth import Caller, get_caller
from mietlink.schemas.candidate import CandidateCreate, CandidateOut, DecisionRequest, ScorePreview
from mietlink.services import candidates
from mietlink.services.properties import must_get_property

router = APIRouter(prefix="/api/v1", tags=["candidates"])


@router.post("/candidates", response_model=CandidateOut, status_code=201)
async def create_candidate(body: CandidateCreate, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    # tenant_score from the client is ignored; the dossier on file decides
    score = await candidates.score_application(db, caller.id, body.property_id)
    return await candidates.create_candidate(db, caller.id, body.property_id, body.cover_letter, score)


@router.get("/candidates/preview/{property_id}", response_model=ScorePreview)
async def preview_score(property_id: UUID, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    await must_get_property(db, property_id)
    result = await candidates.score_application(db, caller.id, property_id)
    return result.as_dict()


@router.get("/candidates/{property_id}", response_model=List[CandidateOut])
async def list_candidates(property_id: UUID, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    return await candidates.list_for_property(db, property_id, caller.id)


@router.post("/candidates/{candidate_id}/decision", response_model=CandidateOut)
async def decide(candidate_id: UUID, body: DecisionRequest, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    return await candidates.decide(db, candidate_id, body.decision, caller.id)


@router.post("/candidates/{candidate_id}/recompute", response_model=CandidateOut)
async def recompute(candidate_id: UUID, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    candidate = await candidates.must_view_candidate(db, candidate_id, caller.id)
    return await candidates.recompute_score(db, candidate.id)
