from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from mietlink.config import settings
from mietlink.core.errors import ValidationError
from mietlink.database import get_session
from mietlink.dependencies.auth import Caller, get_caller
from mietlink.dependencies.rate_limit import rate_limit
from mietlink.domain.enums import parse_document_type
from mietlink.schemas.document import DocumentOut
from mietlink.services import candidates, document_validator, documents
from mietlink.services.properties import must_get_property

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["documents"])


@router.post("/documents/upload", response_model=DocumentOut, status_code=201, dependencies=[Depends(rate_limit(times=20, seconds=60))])
async def upload_document(
    file: UploadFile = File(...),
    doc_type: str = Form(..., alias="type"),
    property_id: Optional[UUID] = Form(None),
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_session),
):
    document_type = parse_document_type(doc_type)
    data = await file.read()
    if not data:
        raise ValidationError("Uploaded file is empty")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(f"File exceeds the {settings.MAX_UPLOAD_BYTES // (1024 * 1024)} MB upload limit")
    if property_id is not None:
        await must_get_property(db, property_id)

    outcome = await document_validator.validate_upload(data, file.content_type, file.filename, document_type)
    document = await documents.record_document(
        db,
        caller.id,
        document_type,
        file.filename,
        file.content_type,
        outcome,
        property_id=property_id,
    )
    rescored = await candidates.recompute_for_user(db, caller.id, property_id)
    logger.info("Upload processed", document_id=str(document.id), user_id=caller.id, rescored=len(rescored))
    return document


@router.get("/documents/my", response_model=List[DocumentOut])
async def my_documents(caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    return await documents.list_by_user(db, caller.id)
