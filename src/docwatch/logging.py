"""Logging configuration based on environment."""

import logging
import sys

from docwatch.api.middleware import RequestContextFilter
from docwatch.config import settings

# Development format: cleaner
DEV_FORMAT = "%(levelname)s:     [%(request_id)s] %(name)s - %(message)s"

# Production format: full details for debugging
PROD_FORMAT = "%(asctime)s - [%(request_id)s] %(name)s - %(levelname)s - %(message)s"


def get_uvicorn_log_config() -> dict:
    """Get uvicorn log config based on environment."""
    is_dev = settings.is_development

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_context": {"()": "docwatch.api.middleware.RequestContextFilter"},
        },
        "formatters": {
            "default": {
                "()": "uvicorn.logging.DefaultFormatter",
                "fmt": "%(levelprefix)s [%(request_id)s] %(message)s" if is_dev
                else "%(asctime)s %(levelprefix)s [%(request_id)s] %(message)s",
            },
        },
        "handlers": {
            # Access lines are off: uvicorn logs the full request line, query string included
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["request_context"],
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "uvicorn.access": {
                "handlers": [],
                "level": "WARNING",
                "propagate": False,
            },
            "uvicorn.error": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["default"],
            "level": settings.log_level,
        },
    }


def setup_logging() -> None:
    """Configure logging for the application."""
    is_dev = settings.is_development
    log_format = DEV_FORMAT if is_dev else PROD_FORMAT

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(logging.Formatter(log_format))

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        handlers=[handler],
    )

    # Quiet noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)
