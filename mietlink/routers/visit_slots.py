from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mietlink.database import get_session
from mietlink.dependencies.auth import Caller, get_caller
from mietlink.schemas.visit_slot import VisitSlotCreate, VisitSlotOut
from mietlink.services import visit_slots
from mietlink.services.properties import must_get_property, must_own_property

router = APIRouter(prefix="/api/v1", tags=["visit-slots"])


@router.post("/visit-slots", response_model=VisitSlotOut, status_code=201)
async def create_slot(body: VisitSlotCreate, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    prop = await must_own_property(db, body.property_id, caller.id)
    return await visit_slots.create_slot(db, prop.id, body.starts_at, body.duration_min, body.capacity)


@router.get("/visit-slots/{property_id}", response_model=List[VisitSlotOut])
async def list_slots(property_id: UUID, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    prop = await must_get_property(db, property_id)
    return await visit_slots.list_for_property(db, prop.id)


@router.post("/visit-slots/{slot_id}/book", response_model=VisitSlotOut)
async def book_slot(slot_id: UUID, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_session)):
    return await visit_slots.book_seat(db, slot_id, caller.id)
