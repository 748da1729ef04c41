"""Health check endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from docwatch.api.deps import SessionDep
from docwatch.services.email import resolve_backend_name
from docwatch.tasks.queue import queue

logger = logging.getLogger(__name__)

router = APIRouter()


async def ping_redis() -> str:
    redis = queue.redis  # type: ignore[attr-defined]
    if redis is None:
        return "not_initialized"
    await redis.ping()
    return "connected"


@router.get("")
async def health_check():
    """Basic health check - just confirms the service is running."""
    return {"status": "ok"}


@router.get("/db")
async def health_check_db(session: SessionDep):
    """Health check with database connectivity."""
    try:
        await session.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected"}
    except Exception as e:
        logger.error(f"Database health check failed: {e!r}")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": "disconnected"},
        )


@router.get("/ready")
async def readiness_check(session: SessionDep):
    """Readiness check - confirms the token store is reachable.

    Returns 503 when the database is down. Redis only backs the token
    sweeper, so a missing queue degrades the status without failing it.
    """
    errors = {}

    try:
        await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error(f"Database readiness check failed: {e!r}")
        db_status = "disconnected"
        errors["database"] = str(e)

    try:
        redis_status = await ping_redis()
    except Exception as e:
        logger.warning(f"Redis readiness check failed: {e!r}")
        redis_status = "disconnected"

    response = {
        "status": "ok" if redis_status == "connected" else "degraded",
        "database": db_status,
        "redis": redis_status,
        "mail_mode": resolve_backend_name(),
    }

    if errors:
        response["status"] = "error"
        return JSONResponse(status_code=503, content=response)
    return response
