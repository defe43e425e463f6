from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mietlink.database import get_session
from mietlink.dependencies.auth import Caller, get_caller
from mietlink.schemas.task import TaskCreate, TaskGenerateRequest, TaskGenerateResponse, TaskOut, TaskUpdate
from mietlink.services import task_generator, task_planner
from mietlink.services.properties import must_own_property
from mietlink.utils.retry import breaker_guard

router = APIRouter(prefix="/api/v1", tags=["tasks"])


@router.post("/tasks/generate", response_model=TaskGenerateResponse)
async def generate_tasks(body: TaskGenerateRequest, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    prop = await must_own_property(db, body.property_id, caller.id)
    earliest_exit = body.earliest_exit or prop.earliest_exit
    with breaker_guard("task-extractor"):
        result = await task_planner.run_task_planning(db, prop.id, body.obligations, earliest_exit)
    return TaskGenerateResponse(
        created=[TaskOut.model_validate(t) for t in result.created],
        failed=result.failed,
        errors=[f.as_dict() for f in result.failures],
    )


@router.post("/tasks", response_model=TaskOut, status_code=201)
async def create_task(body: TaskCreate, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    prop = await must_own_property(db, body.property_id, caller.id)
    return await task_generator.create_task(db, prop.id, body.title, body.due_date, body.mandatory)


@router.get("/tasks/{property_id}", response_model=List[TaskOut])
async def list_tasks(property_id: UUID, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    prop = await must_own_property(db, property_id, caller.id)
    return await task_generator.list_for_property(db, prop.id)


@router.post("/tasks/{task_id}", response_model=TaskOut)
async def update_task(task_id: UUID, body: TaskUpdate, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    task = await task_generator.must_get_task(db, task_id)
    await must_own_property(db, task.property_id, caller.id)
    return await task_generator.update_task(db, task, **body.model_dump(exclude_unset=True))
