"""Token store tests."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from docwatch.models import MagicToken
from docwatch.services.errors import StoreUnavailable
from docwatch.services.magic_link import hash_secret
from docwatch.services.token_store import DatabaseTokenStore, as_utc

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_take_if_valid_returns_identity_once(token_store: DatabaseTokenStore):
    await token_store.put("a" * 64, "user@example.com", NOW + timedelta(minutes=10), issued_at=NOW)

    assert await token_store.take_if_valid("a" * 64, NOW) == "user@example.com"
    assert await token_store.take_if_valid("a" * 64, NOW) is None


@pytest.mark.asyncio
async def test_take_if_valid_unknown_hash(token_store: DatabaseTokenStore):
    assert await token_store.take_if_valid("b" * 64, NOW) is None


@pytest.mark.asyncio
async def test_take_if_valid_expiry_is_exclusive(token_store: DatabaseTokenStore):
    """A token is dead at the exact instant it expires."""
    expires = NOW + timedelta(minutes=10)
    await token_store.put("c" * 64, "user@example.com", expires, issued_at=NOW)

    assert await token_store.take_if_valid("c" * 64, expires) is None
    # An expired record is not consumed by the failed attempt; the sweeper removes it
    assert await token_store.take_if_valid("c" * 64, expires - timedelta(seconds=1)) == "user@example.com"


@pytest.mark.asyncio
async def test_take_if_valid_concurrent_callers(token_store: DatabaseTokenStore):
    """Exactly one of many simultaneous redemptions wins."""
    await token_store.put("d" * 64, "user@example.com", NOW + timedelta(minutes=10), issued_at=NOW)

    results = await asyncio.gather(*(token_store.take_if_valid("d" * 64, NOW) for _ in range(8)))

    assert results.count("user@example.com") == 1
    assert results.count(None) == 7


@pytest.mark.asyncio
async def test_put_stores_hash_not_identity_key(
    token_store: DatabaseTokenStore, session: AsyncSession
):
    token_hash = hash_secret("secret")
    await token_store.put(token_hash, "user@example.com", NOW + timedelta(minutes=10))

    record = await session.get(MagicToken, token_hash)
    assert record is not None
    assert record.identity == "user@example.com"
    assert as_utc(record.expires_at) == NOW + timedelta(minutes=10)


@pytest.mark.asyncio
async def test_delete(token_store: DatabaseTokenStore):
    await token_store.put("e" * 64, "user@example.com", NOW + timedelta(minutes=10), issued_at=NOW)

    assert await token_store.delete("e" * 64) is True
    assert await token_store.delete("e" * 64) is False
    assert await token_store.take_if_valid("e" * 64, NOW) is None


@pytest.mark.asyncio
async def test_delete_expired_and_count_pending(token_store: DatabaseTokenStore):
    await token_store.put("1" * 64, "a@example.com", NOW - timedelta(minutes=1), issued_at=NOW)
    await token_store.put("2" * 64, "b@example.com", NOW, issued_at=NOW)
    await token_store.put("3" * 64, "c@example.com", NOW + timedelta(minutes=1), issued_at=NOW)

    assert await token_store.count_pending(NOW) == 1
    assert await token_store.delete_expired(NOW) == 2
    assert await token_store.delete_expired(NOW) == 0
    assert await token_store.take_if_valid("3" * 64, NOW) == "c@example.com"


@pytest.mark.asyncio
async def test_naive_timestamps_are_utc(token_store: DatabaseTokenStore):
    naive_now = NOW.replace(tzinfo=None)
    await token_store.put("f" * 64, "user@example.com", naive_now + timedelta(minutes=5))

    assert await token_store.count_pending(NOW) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        OperationalError("SELECT 1", {}, Exception("connection refused")),
        DBAPIError("SELECT 1", {}, Exception("connection was closed")),
        PoolTimeoutError("QueuePool limit of size 5 overflow 10 reached"),
        ConnectionRefusedError("connection refused"),
    ],
)
async def test_database_errors_become_store_unavailable(error: Exception):
    def broken_factory():
        raise error

    store = DatabaseTokenStore(broken_factory)  # type: ignore[arg-type]

    with pytest.raises(StoreUnavailable):
        await store.take_if_valid("a" * 64, NOW)
    with pytest.raises(StoreUnavailable):
        await store.delete_expired(NOW)


def test_as_utc_converts_offsets():
    from datetime import timezone

    eastern = datetime(2026, 3, 1, 7, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert as_utc(eastern) == NOW
    assert as_utc(eastern).tzinfo == UTC
