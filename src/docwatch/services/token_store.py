"""Durable storage for pending magic link tokens."""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from sqlalchemy import func
from sqlalchemy.exc import DBAPIError, TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import delete, select

from docwatch.models import MagicToken
from docwatch.services.errors import StoreUnavailable

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Normalize a timestamp to aware UTC; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class TokenStore(ABC):
    """Keyed store of pending magic link tokens.

    Keys are token hashes; raw secrets never reach the store.
    """

    @abstractmethod
    async def put(
        self,
        token_hash: str,
        identity: str,
        expires_at: datetime,
        issued_at: datetime | None = None,
    ) -> None:
        """Insert or replace the record for token_hash."""

    @abstractmethod
    async def take_if_valid(self, token_hash: str, now: datetime) -> str | None:
        """Atomically remove an unexpired record and return its identity.

        Returns None when the record never existed, was already taken, or
        has expires_at <= now. At most one caller may ever receive the
        identity for a given hash.
        """

    @abstractmethod
    async def delete(self, token_hash: str) -> bool:
        """Remove a record regardless of expiry. Returns True if one was removed."""

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Remove every record with expires_at <= now. Returns the count removed."""

    @abstractmethod
    async def count_pending(self, now: datetime) -> int:
        """Number of records still redeemable at now."""


class DatabaseTokenStore(TokenStore):
    """Token store backed by the magic_tokens table.

    Every operation runs in its own transaction so that a consumed or
    swept token is gone for every process sharing the database.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        try:
            async with self._session_factory() as session, session.begin():
                yield session
        except (DBAPIError, PoolTimeoutError, OSError) as e:
            logger.error(f"Token store {operation} failed: {e!r}")
            raise StoreUnavailable() from e

    async def put(
        self,
        token_hash: str,
        identity: str,
        expires_at: datetime,
        issued_at: datetime | None = None,
    ) -> None:
        record = MagicToken(
            token_hash=token_hash,
            identity=identity,
            issued_at=as_utc(issued_at or datetime.now(UTC)),
            expires_at=as_utc(expires_at),
        )
        async with self._transaction("put") as session:
            await session.merge(record)

    async def take_if_valid(self, token_hash: str, now: datetime) -> str | None:
        # Single DELETE ... RETURNING: the row lock makes check-and-delete atomic
        stmt = (
            delete(MagicToken)
            .where(MagicToken.token_hash == token_hash)  # type: ignore[arg-type]
            .where(MagicToken.expires_at > as_utc(now))  # type: ignore[arg-type]
            .returning(MagicToken.identity)  # type: ignore[arg-type]
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("take") as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def delete(self, token_hash: str) -> bool:
        stmt = (
            delete(MagicToken)
            .where(MagicToken.token_hash == token_hash)  # type: ignore[arg-type]
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("delete") as session:
            result = await session.execute(stmt)
            return (result.rowcount or 0) > 0  # type: ignore[attr-defined]

    async def delete_expired(self, now: datetime) -> int:
        stmt = (
            delete(MagicToken)
            .where(MagicToken.expires_at <= as_utc(now))  # type: ignore[arg-type]
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("sweep") as session:
            result = await session.execute(stmt)
            return result.rowcount or 0  # type: ignore[attr-defined]

    async def count_pending(self, now: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(MagicToken)
            .where(MagicToken.expires_at > as_utc(now))  # type: ignore[arg-type]
        )
        async with self._transaction("count") as session:
            result = await session.execute(stmt)
            return result.scalar() or 0
