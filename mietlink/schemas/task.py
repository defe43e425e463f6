from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import Field

from .common import RequestModel, ResponseModel


class TaskGenerateRequest(RequestModel):
    property_id: UUID
    obligations: List[Any]
    earliest_exit: Optional[date] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "property_id": "5d1c7f0e-8f0a-4a57-9a43-2f4b8f6f9f10",
                "obligations": [
                    {"title": "Book final cleaning", "days_before_exit": 14},
                    "Return all keys to the regie",
                ],
                "earliest_exit": "2025-06-30",
            }
        }
    }


class TaskCreate(RequestModel):
    property_id: UUID
    title: str = Field(min_length=1)
    due_date: Optional[date] = None
    mandatory: bool = True


class TaskUpdate(RequestModel):
    status: Optional[str] = None
    title: Optional[str] = None
    due_date: Optional[date] = None
    mandatory: Optional[bool] = None


class TaskOut(ResponseModel):
    id: UUID
    property_id: UUID
    title: str
    due_date: Optional[date] = None
    mandatory: bool
    status: str
    created_at: Optional[datetime] = None


class TaskGenerateResponse(ResponseModel):
    created: List[TaskOut]
    failed: int
    errors: List[Dict[str, Any]] = []
