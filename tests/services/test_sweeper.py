"""Expired token sweeper tests."""

from datetime import UTC, datetime, timedelta

import pytest

from docwatch.services.sweeper import ExpirySweeper
from docwatch.services.token_store import DatabaseTokenStore

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_sweep_removes_only_expired(token_store: DatabaseTokenStore):
    await token_store.put("1" * 64, "a@example.com", T0 - timedelta(seconds=1), issued_at=T0)
    await token_store.put("2" * 64, "b@example.com", T0, issued_at=T0)
    await token_store.put("3" * 64, "c@example.com", T0 + timedelta(seconds=1), issued_at=T0)

    removed = await ExpirySweeper(token_store).sweep(T0)

    assert removed == 2
    assert await token_store.count_pending(T0) == 1
    assert await token_store.take_if_valid("3" * 64, T0) == "c@example.com"


@pytest.mark.asyncio
async def test_sweep_empty_store(token_store: DatabaseTokenStore):
    assert await ExpirySweeper(token_store).sweep(T0) == 0


@pytest.mark.asyncio
async def test_sweep_defaults_to_now(token_store: DatabaseTokenStore):
    now = datetime.now(UTC)
    await token_store.put("4" * 64, "d@example.com", now - timedelta(minutes=1), issued_at=now)
    await token_store.put("5" * 64, "e@example.com", now + timedelta(minutes=10), issued_at=now)

    assert await ExpirySweeper(token_store).sweep() == 1
