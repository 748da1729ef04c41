"""Removal of expired magic link tokens."""

import logging
from datetime import UTC, datetime

from docwatch.services.token_store import TokenStore

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Deletes tokens that can no longer be redeemed.

    Storage hygiene only: redemption already refuses expired tokens.
    """

    def __init__(self, store: TokenStore):
        self.store = store

    async def sweep(self, now: datetime | None = None) -> int:
        """Remove tokens with expires_at <= now and return how many went."""
        removed = await self.store.delete_expired(now or datetime.now(UTC))
        if removed:
            logger.info(f"Swept {removed} expired magic link token(s)")
        else:
            logger.debug("No expired magic link tokens to sweep")
        return removed
