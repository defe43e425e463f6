import uuid
from typing import List, Optional
from urllib.parse import quote

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from mietlink.config import settings
from mietlink.domain.enums import DocumentType
from mietlink.domain.validation import ValidationOutcome, clamp_confidence
from mietlink.models import Document

logger = get_logger()


def storage_url(filename: str) -> str:
    # Files are handed to object storage by the upload gateway; only the reference is kept here
    return f"{settings.STORAGE_BASE_URL.rstrip('/')}/{uuid.uuid4()}-{quote(filename or 'document')}"


async def record_document(
    db: AsyncSession,
    user_id: str,
    doc_type: DocumentType,
    filename: str,
    mime_type: Optional[str],
    outcome: ValidationOutcome,
    property_id=None,
) -> Document:
    """Persist one upload. Re-uploads always create a new row."""
    document = Document(
        user_id=user_id,
        property_id=property_id,
        type=doc_type.value,
        url=storage_url(filename),
        filename=filename,
        mime_type=mime_type,
        is_valid=bool(outcome.valid),
        confidence=clamp_confidence(outcome.confidence),
        validation_reason=outcome.reason,
    )
    db.add(document)
    await db.commit()
    await db.refresh(document)
    logger.info(
        "Document recorded",
        document_id=str(document.id),
        user_id=user_id,
        property_id=str(property_id) if property_id else None,
        type=document.type,
        is_valid=document.is_valid,
        confidence=document.confidence,
    )
    return document


async def list_by_user(db: AsyncSession, user_id: str) -> List[Document]:
    result = await db.execute(
        select(Document).where(Document.user_id == user_id).order_by(Document.created_at.desc())
    )
    return list(result.scalars().all())


async def documents_for_application(db: AsyncSession, user_id: str, property_id) -> List[Document]:
    """Documents uploaded for this property plus the user's reusable (property-less) ones."""
    result = await db.execute(
        select(Document)
        .where(
            Document.user_id == user_id,
            or_(Document.property_id == property_id, Document.property_id.is_(None)),
        )
        .order_by(Document.created_at.desc())
    )
    return list(result.scalars().all())
