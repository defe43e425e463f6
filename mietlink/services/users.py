from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from mietlink.domain.enums import UserRole
from mietlink.models import User

logger = get_logger()


def _role(value: Optional[str]) -> str:
    try:
        return UserRole((value or "").lower()).value
    except ValueError:
        return UserRole.tenant.value


async def ensure_user(db: AsyncSession, user_id: str, email: Optional[str] = None, role: Optional[str] = None) -> User:
    """Return the local row for a verified identity, creating it on first sight."""
    user = await db.get(User, user_id)
    if user is not None:
        return user
    user = User(id=user_id, email=email, role=_role(role))
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Another request created the row first
        await db.rollback()
        user = await db.get(User, user_id)
        if user is None:
            raise
        return user
    logger.info("User registered", user_id=user_id, role=user.role)
    return user
