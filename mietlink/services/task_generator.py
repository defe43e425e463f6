from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from mietlink.core.errors import NotFoundError, ValidationError
from mietlink.domain.enums import TaskStatus
from mietlink.domain.tasks import DraftBatch, ItemFailure, build_draft, build_drafts
from mietlink.models import Task
from mietlink.services import events

logger = get_logger()


@dataclass
class GenerationResult:
    created: List[Task] = field(default_factory=list)
    failures: List[ItemFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


async def persist_drafts(db: AsyncSession, property_id, batch: DraftBatch) -> GenerationResult:
    """Insert each draft in its own savepoint so one bad row cannot sink the batch."""
    result = GenerationResult(failures=list(batch.failures))
    for index, draft in batch.drafts:
        task = Task(
            property_id=property_id,
            title=draft.title,
            due_date=draft.due_date,
            mandatory=draft.mandatory,
            status=TaskStatus.pending.value,
        )
        try:
            async with db.begin_nested():
                db.add(task)
        except SQLAlchemyError as e:
            logger.warning("Task insert failed", property_id=str(property_id), index=index, error=str(e))
            result.failures.append(ItemFailure(index, "task could not be saved"))
            continue
        result.created.append(task)

    result.failures.sort(key=lambda f: f.index)
    events.emit(
        db,
        "tasks.generated",
        property_id,
        {"created": len(result.created), "failed": result.failed, "errors": [f.as_dict() for f in result.failures]},
    )
    await db.commit()
    logger.info("Tasks generated", property_id=str(property_id), created=len(result.created), failed=result.failed)
    return result


async def generate_tasks(
    db: AsyncSession, property_id, items: Iterable[Any], earliest_exit: Optional[date]
) -> GenerationResult:
    return await persist_drafts(db, property_id, build_drafts(list(items), earliest_exit))


async def create_task(db: AsyncSession, property_id, title: str, due_date: Optional[date], mandatory: bool = True) -> Task:
    draft = build_draft({"title": title, "days_before_exit": 0}, None)
    task = Task(
        property_id=property_id,
        title=draft.title,
        due_date=due_date,
        mandatory=mandatory,
        status=TaskStatus.pending.value,
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)
    return task


async def list_for_property(db: AsyncSession, property_id) -> List[Task]:
    result = await db.execute(
        select(Task).where(Task.property_id == property_id).order_by(Task.due_date.asc(), Task.created_at.asc())
    )
    return list(result.scalars().all())


async def must_get_task(db: AsyncSession, task_id) -> Task:
    task = await db.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return task


async def update_task(db: AsyncSession, task: Task, **changes) -> Task:
    """Partial update; only status, title, due date and the mandatory flag are writable."""
    values = {}
    if changes.get("status") is not None:
        try:
            values["status"] = TaskStatus(changes["status"]).value
        except ValueError:
            raise ValidationError("status must be 'pending' or 'completed'")
    if changes.get("title") is not None:
        values["title"] = build_draft({"title": changes["title"], "days_before_exit": 0}, None).title
    if "due_date" in changes:
        values["due_date"] = changes["due_date"]
    if changes.get("mandatory") is not None:
        values["mandatory"] = bool(changes["mandatory"])
    if not values:
        raise ValidationError("Nothing to update")
    await db.execute(
        update(Task).where(Task.id == task.id).values(**values).execution_options(synchronize_session=False)
    )
    await db.commit()
    await db.refresh(task)
    logger.info("Task updated", task_id=str(task.id), fields=sorted(values))
    return task
