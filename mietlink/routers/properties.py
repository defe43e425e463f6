from typing import List

from fastapi import APIRouter, Depends
from pybreaker import CircuitBreakerError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from mietlink.core.errors import ExternalServiceFailure
from mietlink.database import get_session
from mietlink.dependencies.auth import Caller, get_caller
from mietlink.schemas.property import PropertyCreate, PropertyCreated, PropertyOut
from mietlink.services import properties, task_planner

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["properties"])


@router.post("/properties", response_model=PropertyCreated, status_code=201)
async def create_property(body: PropertyCreate, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    prop = await properties.create_property(db, caller.id, **body.model_dump(exclude={"obligations"}))
    tasks_created = tasks_failed = 0
    if body.obligations:
        try:
            result = await task_planner.run_task_planning(db, prop.id, body.obligations, prop.earliest_exit)
            tasks_created, tasks_failed = len(result.created), result.failed
        except (ExternalServiceFailure, CircuitBreakerError) as e:
            # The listing stands on its own; the checklist can be generated later
            logger.warning("Task generation skipped for new property", property_id=str(prop.id), error=str(e))
            tasks_failed = len(body.obligations)
    return PropertyCreated(
        **PropertyOut.model_validate(prop).model_dump(),
        tasks_created=tasks_created,
        tasks_failed=tasks_failed,
    )


@router.get("/properties/my", response_model=List[PropertyOut])
async def my_properties(caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    return await properties.list_by_owner(db, caller.id)


@router.get("/properties/{slug}", response_model=PropertyOut)
async def get_property(slug: str, db: AsyncSession = Depends(get_session)):
    return await properties.get_by_slug(db, slug)
