from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi_limiter import FastAPILimiter
from redis.asyncio import Redis
from sqlalchemy import text
from structlog import get_logger

from mietlink.config import settings
from mietlink.core.error_handlers import register_error_handlers
from mietlink.core.logging import RequestIDMiddleware, setup_logging
from mietlink.database import AsyncSessionFactory
from mietlink.routers import ai, candidates, documents, properties, tasks, visit_slots

logger = get_logger()

app = FastAPI(title="MietLink Rental Service")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)
register_error_handlers(app)

app.include_router(properties.router)
app.include_router(documents.router)
app.include_router(candidates.router)
app.include_router(tasks.router)
app.include_router(visit_slots.router)
app.include_router(ai.router)


@app.on_event("startup")
async def startup_event():
    setup_logging()
    # Rate limiting is optional; without Redis the limiter dependency steps aside
    if not settings.REDIS_URL:
        return
    try:
        redis = Redis.from_url(settings.REDIS_URL)
        await FastAPILimiter.init(redis)
    except Exception as e:
        logger.warning("Rate limiter disabled, Redis unreachable", error=str(e))


@app.get("/health", tags=["health"])
async def health():
    details = {"status": "ok"}
    try:
        async with AsyncSessionFactory() as session:
            await session.execute(text("SELECT 1"))
        details["database"] = "up"
    except Exception as e:
        details["status"] = "degraded"
        details["database"] = f"down: {str(e)}"
    # Config presence checks (no secrets exposed)
    details["config"] = {
        "db_url_set": bool(settings.DATABASE_URL),
        "redis_url_set": bool(settings.REDIS_URL),
        "gemini_key_set": settings.GEMINI_API_KEY not in (None, "", "your_gemini_key"),
        "user_management_url_set": bool(settings.USER_MANAGEMENT_URL),
        "validation_failure_mode": settings.VALIDATION_FAILURE_MODE,
    }
    return details
