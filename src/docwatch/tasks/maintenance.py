"""Maintenance background tasks."""

import logging
from datetime import UTC, datetime
from typing import Any

from docwatch.database import async_session_factory
from docwatch.services.errors import StoreUnavailable
from docwatch.services.sweeper import ExpirySweeper
from docwatch.services.token_store import DatabaseTokenStore

logger = logging.getLogger(__name__)

# Timeout for maintenance tasks (5 minutes)
MAINTENANCE_TIMEOUT_SECONDS = 5 * 60


async def sweep_expired_tokens(ctx: dict[str, Any]) -> dict[str, Any]:
    """Delete magic link tokens whose expiry has passed.

    Runs on the worker's cron schedule and can be queued from the CLI.

    Args:
        ctx: SAQ context

    Returns:
        Dict with the number of removed tokens
    """
    job = ctx.get("job")
    run_id = job.key if job else f"local-sweep-{datetime.now(UTC).isoformat()}"

    sweeper = ExpirySweeper(DatabaseTokenStore(async_session_factory))
    try:
        removed = await sweeper.sweep()
    except StoreUnavailable as e:
        error = f"Token sweep {run_id} failed: {e}"
        logger.exception(error)
        return {"success": False, "error": error}

    return {"success": True, "removed": removed}
