import uuid
from datetime import datetime

import pytest

from mietlink.core.errors import NotFoundError, SlotFull, ValidationError
from mietlink.services import visit_slots

STARTS = datetime(2025, 5, 10, 17, 30)


@pytest.mark.asyncio
async def test_booking_stops_at_capacity(db, listing):
    slot = await visit_slots.create_slot(db, listing.id, STARTS, capacity=2)
    assert slot.seats_left == 2

    slot = await visit_slots.book_seat(db, slot.id, "tenant-1")
    assert slot.seats_left == 1
    slot = await visit_slots.book_seat(db, slot.id, "tenant-2")
    assert slot.seats_left == 0

    with pytest.raises(SlotFull):
        await visit_slots.book_seat(db, slot.id, "tenant-3")
    await db.refresh(slot)
    assert slot.seats_left == 0


@pytest.mark.asyncio
async def test_slot_needs_a_seat(db, listing):
    with pytest.raises(ValidationError):
        await visit_slots.create_slot(db, listing.id, STARTS, capacity=0)


@pytest.mark.asyncio
async def test_unknown_slot(db):
    with pytest.raises(NotFoundError):
        await visit_slots.book_seat(db, uuid.uuid4(), "tenant-1")


@pytest.mark.asyncio
async def test_slots_are_listed_in_time_order(db, listing):
    await visit_slots.create_slot(db, listing.id, datetime(2025, 5, 12, 18, 0))
    await visit_slots.create_slot(db, listing.id, STARTS)
    slots = await visit_slots.list_for_property(db, listing.id)
    assert [s.starts_at.day for s in slots] == [10, 12]
