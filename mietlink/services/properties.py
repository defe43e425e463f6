import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from mietlink.core.errors import Forbidden, NotFoundError
from mietlink.models import Property
from mietlink.services import events

logger = get_logger()


def new_slug() -> str:
    return uuid.uuid4().hex[:8]


async def create_property(db: AsyncSession, owner_id: str, **fields) -> Property:
    prop = Property(owner_id=owner_id, slug=new_slug(), **fields)
    db.add(prop)
    await db.flush()
    events.emit(db, "property.created", prop.id, {"owner_id": owner_id})
    await db.commit()
    await db.refresh(prop)
    logger.info("Property created", property_id=str(prop.id), owner_id=owner_id, slug=prop.slug)
    return prop


async def must_get_property(db: AsyncSession, property_id) -> Property:
    prop = await db.get(Property, property_id)
    if prop is None:
        raise NotFoundError("Property not found")
    return prop


async def must_own_property(db: AsyncSession, property_id, user_id: str) -> Property:
    prop = await must_get_property(db, property_id)
    if prop.owner_id != user_id:
        raise Forbidden("Only the property owner can do this")
    return prop


async def get_by_slug(db: AsyncSession, slug: str) -> Property:
    result = await db.execute(select(Property).where(Property.slug == slug))
    prop = result.scalar_one_or_none()
    if prop is None:
        raise NotFoundError("Property not found")
    return prop


async def list_by_owner(db: AsyncSession, owner_id: str) -> List[Property]:
    result = await db.execute(
        select(Property).where(Property.owner_id == owner_id).order_by(Property.created_at.desc())
    )
    return list(result.scalars().all())
