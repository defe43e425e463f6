from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from structlog import get_logger

from mietlink.core.errors import (
    ExternalServiceFailure,
    MietlinkError,
    PersistenceError,
    ValidationError,
)

logger = get_logger()


def _body(exc: MietlinkError) -> dict:
    return {"detail": exc.message, "error": exc.error}


async def mietlink_error_handler(request: Request, exc: MietlinkError):
    if isinstance(exc, ValidationError):
        logger.debug("Request rejected", path=request.url.path, error=exc.error, detail=exc.message)
    elif isinstance(exc, ExternalServiceFailure):
        logger.warning("External service failure", path=request.url.path, service=exc.service, detail=exc.message)
    elif exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, method=request.method, error=exc.error, detail=exc.message)
    else:
        logger.info("Request refused", path=request.url.path, error=exc.error, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content=_body(exc))


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(
        "Database error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=_body(PersistenceError("Database operation failed")))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MietlinkError, mietlink_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
