"""Tracked document model."""

from datetime import date, datetime

from sqlalchemy import Date
from sqlmodel import Field, SQLModel

from docwatch.models.base import TimestampMixin, generate_nanoid
from docwatch.services.expiration import ExpirationStatus


class Document(TimestampMixin, SQLModel, table=True):
    """A document or license with an expiration date."""

    __tablename__ = "documents"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    name: str = Field(max_length=255)
    description: str = Field(default="")
    expiration_date: date = Field(
        index=True,
        sa_type=Date,  # type: ignore[call-overload]
    )
    workspace_id: str = Field(foreign_key="workspaces.id", index=True, max_length=21)
    created_by: str = Field(max_length=255)


class DocumentCreate(SQLModel):
    """Schema for creating a document."""

    name: str
    description: str
    expiration_date: date
    workspace_id: str


class DocumentUpdate(SQLModel):
    """Schema for updating a document. The expiration date is always resubmitted."""

    name: str | None = None
    description: str | None = None
    expiration_date: date
    workspace_id: str | None = None


class DocumentRead(SQLModel):
    """Schema for reading a document, with its expiration classification."""

    id: str
    name: str
    description: str
    expiration_date: date
    workspace_id: str
    created_by: str
    created_at: datetime
    status: ExpirationStatus
    status_label: str
