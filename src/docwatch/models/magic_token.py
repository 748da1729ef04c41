"""Pending magic link token model."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from docwatch.models.base import utcnow


class MagicToken(SQLModel, table=True):
    """An outstanding magic link, keyed by the SHA-256 digest of its secret.

    The raw secret only ever exists in the emailed link. A row is pending
    until it is consumed or swept; rows are never revived.
    """

    __tablename__ = "magic_tokens"

    token_hash: str = Field(
        primary_key=True, min_length=64, max_length=64, description="Hex SHA-256 of the secret"
    )
    identity: str = Field(index=True, max_length=255, description="Normalized email address")
    issued_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
    )
    expires_at: datetime = Field(
        index=True,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        description="Token is redeemable strictly before this instant",
    )
