from datetime import datetime
from typing import Optional
from uuid import UUID

from .common import ResponseModel


class DocumentOut(ResponseModel):
    id: UUID
    user_id: str
    property_id: Optional[UUID] = None
    type: str
    url: str
    filename: Optional[str] = None
    mime_type: Optional[str] = None
    is_valid: bool
    confidence: float
    validation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
