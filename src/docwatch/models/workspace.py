"""Workspace model."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from docwatch.models.base import TimestampMixin, generate_nanoid

DEFAULT_WORKSPACE_NAME = "General"


class Workspace(TimestampMixin, SQLModel, table=True):
    """A named group of tracked documents."""

    __tablename__ = "workspaces"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    name: str = Field(max_length=255, index=True)


class WorkspaceCreate(SQLModel):
    """Schema for creating a workspace."""

    name: str = ""


class WorkspaceRead(SQLModel):
    """Schema for reading a workspace."""

    id: str
    name: str
    created_at: datetime
