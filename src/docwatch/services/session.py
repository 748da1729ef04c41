"""Stateless session credentials signed as JWTs.

Credentials are never stored server side, so one stays valid until its
expiry even after logout; logout only discards the client's copy.
"""

import logging
from datetime import UTC, datetime, timedelta
from functools import lru_cache

from jose import jwt
from jose.constants import ALGORITHMS
from jose.exceptions import JOSEError
from jose.utils import base64url_decode, base64url_encode

from docwatch.config import DEFAULT_SESSION_SECRET, settings
from docwatch.services.errors import SigningUnavailable, Unauthenticated

logger = logging.getLogger(__name__)

MIN_SECRET_LENGTH = 32


def _check_signing_config(secret: str, algorithm: str) -> None:
    if not secret or len(secret) < MIN_SECRET_LENGTH:
        raise SigningUnavailable(
            f"Session secret must be at least {MIN_SECRET_LENGTH} characters"
        )
    if algorithm not in ALGORITHMS.HMAC:
        raise SigningUnavailable(f"Unsupported session algorithm: {algorithm}")


def _has_canonical_signature(credential: str) -> bool:
    """Reject signatures whose base64url text is not the canonical encoding.

    Decoding ignores the spare low bits of the final character, so two
    different strings can carry the same signature bytes.
    """
    try:
        segment = credential.rsplit(".", 1)[-1].encode("ascii")
        return base64url_encode(base64url_decode(segment)) == segment
    except ValueError:
        return False


class SessionIssuer:
    """Signs session credentials for verified identities."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(days=60),
    ):
        _check_signing_config(secret, algorithm)
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime

    def issue(self, identity: str, now: datetime | None = None) -> str:
        """Create a credential for identity expiring one lifetime from now."""
        issued_at = now or datetime.now(UTC)
        payload = {
            "sub": identity,
            "email": identity,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=self.algorithm)
        except JOSEError as e:
            raise SigningUnavailable(f"Failed to sign session: {e}") from e


class SessionValidator:
    """Verifies session credentials. Pure; safe to share across requests."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        _check_signing_config(secret, algorithm)
        self._secret = secret
        self.algorithm = algorithm

    def validate(self, credential: str | None, now: datetime | None = None) -> str:
        """Return the identity for a valid, unexpired credential.

        Raises:
            Unauthenticated: for any failure, without saying which check failed
        """
        if not credential:
            raise Unauthenticated()

        try:
            claims = jwt.decode(
                credential,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JOSEError as e:
            logger.debug(f"Session credential rejected: {e!r}")
            raise Unauthenticated() from e

        if not _has_canonical_signature(credential):
            raise Unauthenticated()

        identity = claims.get("sub")
        expires = claims.get("exp")
        if not isinstance(identity, str) or not identity:
            raise Unauthenticated()
        if isinstance(expires, bool) or not isinstance(expires, int | float):
            raise Unauthenticated()

        moment = now or datetime.now(UTC)
        if not moment.timestamp() < expires:
            raise Unauthenticated()

        return identity


def _configured_secret() -> str:
    if settings.is_production and settings.session_secret == DEFAULT_SESSION_SECRET:
        raise SigningUnavailable("SESSION_SECRET must be set in production")
    return settings.session_secret


@lru_cache
def get_session_issuer() -> SessionIssuer:
    """Process-wide issuer built from settings."""
    return SessionIssuer(
        _configured_secret(),
        algorithm=settings.jwt_algorithm,
        lifetime=timedelta(days=settings.session_expiration_days),
    )


@lru_cache
def get_session_validator() -> SessionValidator:
    """Process-wide validator built from settings."""
    return SessionValidator(_configured_secret(), algorithm=settings.jwt_algorithm)
