from fastapi import APIRouter, Depends, File, UploadFile
from pybreaker import CircuitBreakerError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from mietlink.config import settings
from mietlink.core.errors import ExternalServiceFailure, ValidationError
from mietlink.database import get_session
from mietlink.dependencies.auth import Caller, get_caller
from mietlink.dependencies.rate_limit import rate_limit
from mietlink.schemas.ai import (
    ContractParseRequest,
    ContractParseResponse,
    CoverLetterRequest,
    CoverLetterResponse,
    ExplainScoreRequest,
    ExplainScoreResponse,
    RegieEmailRequest,
    RegieEmailResponse,
)
from mietlink.services import candidates, contract_text, gemini
from mietlink.services.properties import must_own_property
from mietlink.utils.retry import breaker_guard

logger = get_logger()
router = APIRouter(prefix="/api/v1/ai", tags=["ai"], dependencies=[Depends(rate_limit(times=10, seconds=60))])


@router.post("/parse-contract", response_model=ContractParseResponse)
async def parse_contract(body: ContractParseRequest, caller: Caller = Depends(get_caller)):
    with breaker_guard():
        parsed = await gemini.parse_contract(body.text)
    logger.info("Contract parsed", user_id=caller.id, obligations=len(parsed["obligations"]))
    return parsed


@router.post("/parse-contract-file", response_model=ContractParseResponse)
async def parse_contract_file(contract: UploadFile = File(...), caller: Caller = Depends(get_caller)):
    data = await contract.read()
    if not data:
        raise ValidationError("Uploaded contract is empty")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError("Contract exceeds the upload limit")
    text = contract_text.extract_text(data, contract.content_type, contract.filename)
    with breaker_guard():
        parsed = await gemini.parse_contract(text)
    logger.info("Contract file parsed", user_id=caller.id, filename=contract.filename, obligations=len(parsed["obligations"]))
    return parsed


@router.post("/cover-letter", response_model=CoverLetterResponse)
async def cover_letter(body: CoverLetterRequest, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    with breaker_guard():
        text = await gemini.generate_cover_letter(body.user_info, body.property_info, body.language)
    stored = False
    if body.property_id is not None:
        stored = await candidates.store_cover_letter(db, caller.id, body.property_id, text)
    return {"text": text, "stored": stored}


@router.post("/explain-score", response_model=ExplainScoreResponse)
async def explain_score(body: ExplainScoreRequest, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    candidate = await candidates.must_view_candidate(db, body.candidate_id, caller.id)
    result = await candidates.score_application(db, candidate.user_id, candidate.property_id)
    try:
        reason = await gemini.explain_score(
            {
                "score": candidate.tenant_score,
                "status": candidate.score_tier,
                "badge": candidate.badge_flag,
                **result.as_dict(),
            }
        )
    except (ExternalServiceFailure, CircuitBreakerError) as e:
        logger.info("Score explanation falling back to engine reason", candidate_id=str(candidate.id), error=str(e))
        return {"reason": candidate.score_reason or result.reason, "source": "engine"}
    return {"reason": reason, "source": "ai"}


@router.post("/regie-email", response_model=RegieEmailResponse)
async def regie_email(body: RegieEmailRequest, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    prop = await must_own_property(db, body.property_id, caller.id)
    top = await candidates.top_candidates(db, prop.id, limit=3)
    if not top:
        raise ValidationError("No candidates to present yet")
    summary = [
        {
            "name": " ".join(filter(None, [c.user.first_name, c.user.last_name])) if c.user else None,
            "email": c.user.email if c.user else None,
            "score": c.tenant_score,
            "status": c.score_tier,
            "badge": c.badge_flag,
            "decision": c.landlord_decision,
        }
        for c in top
    ]
    with breaker_guard():
        email = await gemini.generate_regie_email(summary, body.language)
    logger.info("Regie email drafted", property_id=str(prop.id), candidates=len(summary))
    return email
