"""API middleware for cross-cutting concerns."""

import logging
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Request ID for the request being handled, readable from any log call
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Get the correlation ID of the current request, if any."""
    return request_id_var.get()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID.

    An incoming X-Request-ID header is reused, otherwise a UUID is generated.
    The ID is echoed back in the response headers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_var.set(request_id)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            request_id_var.reset(token)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and timing for each request.

    Only the path is logged. Query strings carry magic link secrets.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"{request.method} {request.url.path} failed after {duration_ms:.1f}ms: {e!r}",
                extra={"duration_ms": duration_ms},
                exc_info=True,
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{request.method} {request.url.path} completed {response.status_code} "
            f"in {duration_ms:.1f}ms",
            extra={"status_code": response.status_code, "duration_ms": duration_ms},
        )
        return response


class RequestContextFilter(logging.Filter):
    """Logging filter that stamps request_id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True
