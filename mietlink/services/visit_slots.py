from datetime import datetime
from typing import List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from mietlink.core.errors import NotFoundError, SlotFull, ValidationError
from mietlink.models import VisitSlot
from mietlink.services import events

logger = get_logger()


async def create_slot(db: AsyncSession, property_id, starts_at: datetime, duration_min: int = 30, capacity: int = 1) -> VisitSlot:
    if capacity < 1:
        raise ValidationError("capacity must be at least 1")
    if duration_min < 1:
        raise ValidationError("duration_min must be at least 1")
    slot = VisitSlot(
        property_id=property_id,
        starts_at=starts_at,
        duration_min=duration_min,
        capacity=capacity,
        seats_left=capacity,
    )
    db.add(slot)
    await db.commit()
    await db.refresh(slot)
    logger.info("Visit slot created", slot_id=str(slot.id), property_id=str(property_id), capacity=capacity)
    return slot


async def list_for_property(db: AsyncSession, property_id) -> List[VisitSlot]:
    result = await db.execute(
        select(VisitSlot).where(VisitSlot.property_id == property_id).order_by(VisitSlot.starts_at.asc())
    )
    return list(result.scalars().all())


async def book_seat(db: AsyncSession, slot_id, user_id: str) -> VisitSlot:
    """Take one seat. The decrement and the floor check happen in a single UPDATE."""
    slot = await db.get(VisitSlot, slot_id)
    if slot is None:
        raise NotFoundError("Visit slot not found")
    result = await db.execute(
        update(VisitSlot)
        .where(VisitSlot.id == slot.id, VisitSlot.seats_left > 0)
        .values(seats_left=VisitSlot.seats_left - 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise SlotFull("This visit slot is fully booked")
    events.emit(db, "visit_slot.booked", slot.property_id, {"slot_id": str(slot.id), "user_id": user_id})
    await db.commit()
    await db.refresh(slot)
    logger.info("Visit slot booked", slot_id=str(slot.id), user_id=user_id, seats_left=slot.seats_left)
    return slot
