from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .common import RequestModel, ResponseModel


class CandidateCreate(RequestModel):
    property_id: UUID
    cover_letter: Optional[str] = None
    # Accepted for compatibility with the web client; the score is always recomputed server-side
    tenant_score: Optional[int] = Field(default=None, ge=0, le=100)
    status: Literal["dossier_submitted"] = "dossier_submitted"


class CandidateOut(ResponseModel):
    id: UUID
    user_id: str
    property_id: UUID
    tenant_score: int
    score_tier: str
    score_reason: Optional[str] = None
    status: str
    landlord_decision: Optional[str] = None
    badge_flag: bool
    cover_letter: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DecisionRequest(RequestModel):
    decision: str


class ScorePreview(BaseModel):
    score: int
    status: str
    reason: str
    valid_required: int
    required_total: int
    missing: List[str] = []
