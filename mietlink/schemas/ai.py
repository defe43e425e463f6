from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .common import RequestModel


class ContractParseRequest(RequestModel):
    text: str = Field(min_length=1)


class ContractParseResponse(BaseModel):
    rent_chf: float
    notice_months: int
    key_count: int
    obligations: List[str] = []


class CoverLetterRequest(RequestModel):
    property_id: Optional[UUID] = None
    user_info: Dict[str, Any] = {}
    property_info: Dict[str, Any] = {}
    language: str = "de"


class CoverLetterResponse(BaseModel):
    text: str
    stored: bool = False


class ExplainScoreRequest(RequestModel):
    candidate_id: UUID


class ExplainScoreResponse(BaseModel):
    reason: str
    source: str  # "ai" or "engine"


class RegieEmailRequest(RequestModel):
    property_id: UUID
    language: str = "de"


class RegieEmailResponse(BaseModel):
    subject: str
    body: str
