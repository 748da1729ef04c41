"""Authentication error taxonomy.

Core auth operations raise these; the HTTP layer maps them to responses.
Messages are deliberately generic so they never reveal which check failed
or whether an identity is known.
"""


class AuthError(Exception):
    """Base class for authentication errors."""

    default_message = "Authentication error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class InvalidIdentity(AuthError):
    """The requested identity is malformed or outside the allowed domains."""

    default_message = "Please use a valid organization email address"


class InvalidOrExpiredToken(AuthError):
    """A magic link could not be redeemed (unknown, expired, or already used)."""

    default_message = "Magic link is invalid or expired"


class DeliveryFailed(AuthError):
    """The magic link email could not be sent. Safe to retry."""

    default_message = "Failed to send magic link email"


class StoreUnavailable(AuthError):
    """The token store could not be reached."""

    default_message = "Token store unavailable"


class SigningUnavailable(AuthError):
    """Session signing is misconfigured. Fatal at startup."""

    default_message = "Session signing key is not configured"


class Unauthenticated(AuthError):
    """A session credential is missing, tampered with, or expired."""

    default_message = "Invalid or expired session"
