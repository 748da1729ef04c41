"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docwatch.api.middleware import RequestIDMiddleware, RequestLoggingMiddleware
from docwatch.api.router import api_router
from docwatch.config import settings
from docwatch.database import close_db, get_session_context
from docwatch.logging import setup_logging
from docwatch.services.email import email_service
from docwatch.services.errors import StoreUnavailable
from docwatch.services.session import get_session_issuer, get_session_validator
from docwatch.services.workspaces import ensure_default_workspace

setup_logging()
logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking
if settings.sentry_dsn:
    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        send_default_pii=False,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Refuse to start with an unusable signing key
    get_session_issuer()
    get_session_validator()
    # Resolve the mail backend now so the mode shows up in startup logs
    _ = email_service.backend

    # Schema is managed by Alembic; only seed data happens here
    async with get_session_context() as session:
        await ensure_default_workspace(session)

    yield

    await close_db()


app = FastAPI(
    title="DocWatch API",
    description="Document expiration tracking with passwordless sign-in",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug_enabled else None,
    redoc_url="/api/redoc" if settings.debug_enabled else None,
    openapi_url="/api/openapi.json" if settings.debug_enabled else None,
)


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(_request: Request, exc: StoreUnavailable):
    logger.error(f"Token store unavailable: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": "Service temporarily unavailable"},
    )


app.add_middleware(RequestLoggingMiddleware)  # type: ignore[arg-type]

# Added last so it wraps the logging middleware and the ID is set first
app.add_middleware(RequestIDMiddleware)  # type: ignore[arg-type]

# CORS middleware
app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

# Include API router
app.include_router(api_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    from docwatch.logging import get_uvicorn_log_config

    uvicorn.run(
        "docwatch.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_config=get_uvicorn_log_config(),
    )
