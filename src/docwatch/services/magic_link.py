"""Magic link issuance and redemption."""

import asyncio
import hashlib
import logging
import re
import secrets
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from urllib.parse import quote

from docwatch.services.email import EmailService
from docwatch.services.errors import (
    DeliveryFailed,
    InvalidIdentity,
    InvalidOrExpiredToken,
    StoreUnavailable,
)
from docwatch.services.token_store import TokenStore

logger = logging.getLogger(__name__)

# Path of the redemption endpoint, relative to the link base URL
VERIFY_PATH = "/api/auth/verify-magic"

# Same response whether or not the address is known
LINK_SENT_MESSAGE = "If the email is valid, a magic login link has been sent."

# 32 random bytes, hex encoded
SECRET_BYTES = 32

EMAIL_PATTERN = re.compile(r"^[a-z0-9._%+-]+@(?P<domain>[a-z0-9.-]+\.[a-z]{2,})$")


def generate_secret() -> str:
    """Generate a 256-bit magic link secret."""
    return secrets.token_hex(SECRET_BYTES)


def hash_secret(secret: str) -> str:
    """One-way digest used as the storage key for a secret."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def normalize_identity(identity: str | None) -> str:
    return (identity or "").strip().lower()


@dataclass(frozen=True)
class LinkRequestAck:
    """Opaque acknowledgement returned for every accepted link request."""

    message: str = LINK_SENT_MESSAGE


@dataclass(frozen=True)
class IssuedLink:
    """A freshly stored magic link. Only the url carries the secret."""

    identity: str
    token_hash: str
    url: str
    expires_at: datetime


class MagicLinkIssuer:
    """Mints, stores and delivers single-use magic links."""

    def __init__(
        self,
        store: TokenStore,
        email_service: EmailService,
        *,
        link_base_url: str,
        ttl: timedelta = timedelta(minutes=10),
        allowed_domains: Iterable[str] = (),
        send_timeout: float = 15.0,
    ):
        self.store = store
        self.email_service = email_service
        self.link_base_url = link_base_url.rstrip("/")
        self.ttl = ttl
        self.allowed_domains = frozenset(d.strip().lower() for d in allowed_domains if d.strip())
        self.send_timeout = send_timeout

    def validate_identity(self, identity: str | None) -> str:
        """Normalize an address and check it against the allowed pattern.

        Raises:
            InvalidIdentity: if the address is malformed or its domain is not allowed
        """
        email = normalize_identity(identity)
        match = EMAIL_PATTERN.match(email)
        if not match:
            raise InvalidIdentity()
        if self.allowed_domains and match.group("domain") not in self.allowed_domains:
            raise InvalidIdentity()
        return email

    def build_url(self, secret: str) -> str:
        return f"{self.link_base_url}{VERIFY_PATH}?token={quote(secret, safe='')}"

    async def mint_link(self, identity: str, now: datetime | None = None) -> IssuedLink:
        """Validate the identity, store a new token and build its link.

        Does not deliver anything; request_link is the user-facing entry point.
        """
        email = self.validate_identity(identity)
        issued_at = now or datetime.now(UTC)
        expires_at = issued_at + self.ttl

        secret = generate_secret()
        token_hash = hash_secret(secret)
        await self.store.put(token_hash, email, expires_at, issued_at=issued_at)

        return IssuedLink(
            identity=email,
            token_hash=token_hash,
            url=self.build_url(secret),
            expires_at=expires_at,
        )

    async def request_link(self, identity: str, now: datetime | None = None) -> LinkRequestAck:
        """Issue a magic link and email it.

        Makes exactly one delivery attempt. If it fails, the stored token is
        removed before DeliveryFailed propagates.

        Raises:
            InvalidIdentity: malformed or disallowed address
            DeliveryFailed: the email could not be sent
            StoreUnavailable: the token store could not be reached
        """
        email = self.validate_identity(identity)
        issued_at = now or datetime.now(UTC)

        # Keep the table bounded
        await self.store.delete_expired(issued_at)

        issued = await self.mint_link(email, now=issued_at)
        expires_minutes = int(self.ttl.total_seconds() // 60)

        try:
            async with asyncio.timeout(self.send_timeout):
                delivered = await self.email_service.send_magic_link(
                    to=email,
                    magic_link=issued.url,
                    expires_minutes=expires_minutes,
                )
        except Exception as e:
            logger.error(f"Magic link delivery to {email} raised: {e!r}")
            await self._rollback(issued)
            raise DeliveryFailed() from e

        if not delivered:
            logger.error(f"Magic link delivery to {email} failed")
            await self._rollback(issued)
            raise DeliveryFailed()

        logger.info(f"Magic link sent to {email}")
        return LinkRequestAck()

    async def _rollback(self, issued: IssuedLink) -> None:
        try:
            await self.store.delete(issued.token_hash)
        except StoreUnavailable:
            # The secret is already discarded, so the orphan row lapses unredeemed at expiry
            logger.exception(
                f"Could not roll back undelivered magic link for {issued.identity}; "
                f"it expires at {issued.expires_at.isoformat()}"
            )


class MagicLinkVerifier:
    """Redeems magic link secrets exactly once."""

    def __init__(self, store: TokenStore):
        self.store = store

    async def consume(self, secret: str | None, now: datetime | None = None) -> str:
        """Consume a presented secret and return the identity it was issued to.

        Raises:
            InvalidOrExpiredToken: for unknown, expired or already-used secrets alike
            StoreUnavailable: the token store could not be reached
        """
        if not secret:
            raise InvalidOrExpiredToken()

        identity = await self.store.take_if_valid(hash_secret(secret), now or datetime.now(UTC))
        if identity is None:
            raise InvalidOrExpiredToken()

        return identity
