from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

from pydantic import Field

from .common import RequestModel, ResponseModel


class PropertyCreate(RequestModel):
    address: str = Field(min_length=1)
    rent_chf: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    notice_months: int = Field(default=3, ge=0, le=24)
    earliest_exit: Optional[date] = None
    key_count: int = Field(default=1, ge=0)
    main_photo_url: Optional[str] = None
    # Free-text obligations from the contract, or already structured {title, days_before_exit}
    obligations: List[Any] = []

    model_config = {
        "json_schema_extra": {
            "example": {
                "address": "Seefeldstrasse 12, 8008 Zürich",
                "rent_chf": "1850.00",
                "notice_months": 3,
                "earliest_exit": "2025-06-30",
                "key_count": 3,
                "obligations": ["Professional final cleaning", "Repaint walls if smoked in"],
            }
        }
    }


class PropertyOut(ResponseModel):
    id: UUID
    owner_id: str
    slug: str
    address: str
    rent_chf: Decimal
    notice_months: Optional[int] = None
    earliest_exit: Optional[date] = None
    key_count: Optional[int] = None
    main_photo_url: Optional[str] = None
    closed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class PropertyCreated(PropertyOut):
    tasks_created: int = 0
    tasks_failed: int = 0
