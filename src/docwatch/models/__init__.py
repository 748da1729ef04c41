"""SQLModel database models."""

from docwatch.models.base import TimestampMixin, generate_nanoid, utcnow
from docwatch.models.document import Document
from docwatch.models.magic_token import MagicToken
from docwatch.models.workspace import DEFAULT_WORKSPACE_NAME, Workspace

__all__ = [
    "DEFAULT_WORKSPACE_NAME",
    "Document",
    "MagicToken",
    "TimestampMixin",
    "Workspace",
    "generate_nanoid",
    "utcnow",
]
