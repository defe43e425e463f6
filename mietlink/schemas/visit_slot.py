from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from .common import RequestModel, ResponseModel


class VisitSlotCreate(RequestModel):
    property_id: UUID
    starts_at: datetime
    duration_min: int = Field(default=30, ge=1, le=480)
    capacity: int = Field(default=1, ge=1, le=500)


class VisitSlotOut(ResponseModel):
    id: UUID
    property_id: UUID
    starts_at: datetime
    duration_min: int
    capacity: int
    seats_left: int
    created_at: Optional[datetime] = None
