from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pybreaker import CircuitBreaker, CircuitBreakerError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from mietlink.config import settings
from mietlink.database import get_session
from mietlink.services.users import ensure_user

logger = get_logger()
security = HTTPBearer()
breaker = CircuitBreaker(fail_max=3, reset_timeout=60)


@dataclass(frozen=True)
class Caller:
    """The verified identity every service call is made on behalf of."""

    id: str
    role: str
    email: Optional[str] = None


async def verify_token(token: str) -> dict:
    with breaker.calling():
        async with httpx.AsyncClient(timeout=settings.EXTERNAL_TIMEOUT_SECONDS) as client:
            response = await client.get(
                f"{settings.USER_MANAGEMENT_URL}/auth/verify",
                headers={"Authorization": f"Bearer {token}"},
            )
    # A rejected token is an answer, not an outage
    if response.status_code != 200:
        logger.error("Token verification failed", status_code=response.status_code)
        raise HTTPException(status_code=401, detail="Invalid token")
    return response.json()


async def get_current_user(credentials: HTTPAuthorizationCredentials = Security(security)) -> dict:
    try:
        return await verify_token(credentials.credentials)
    except (httpx.HTTPError, CircuitBreakerError) as e:
        logger.error("User management unreachable", error=str(e))
        raise HTTPException(status_code=503, detail="Authentication service unavailable")


async def get_caller(user: dict = Depends(get_current_user), db: AsyncSession = Depends(get_session)) -> Caller:
    user_id = str(user.get("user_id") or user.get("id") or "")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    role = str(user.get("role") or "tenant").lower()
    await ensure_user(db, user_id, email=user.get("email"), role=role)
    return Caller(id=user_id, role=role, email=user.get("email"))
