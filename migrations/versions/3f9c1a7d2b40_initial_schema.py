"""initial_schema

Workspaces, tracked documents and pending magic link tokens.

Revision ID: 3f9c1a7d2b40
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f9c1a7d2b40"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "workspaces",
        sa.Column("id", sa.VARCHAR(21), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_workspaces_name", "workspaces", ["name"])

    op.create_table(
        "documents",
        sa.Column("id", sa.VARCHAR(21), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("expiration_date", sa.Date(), nullable=False),
        sa.Column(
            "workspace_id",
            sa.VARCHAR(21),
            sa.ForeignKey("workspaces.id"),
            nullable=False,
        ),
        sa.Column("created_by", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_documents_expiration_date", "documents", ["expiration_date"])
    op.create_index("ix_documents_workspace_id", "documents", ["workspace_id"])

    op.create_table(
        "magic_tokens",
        sa.Column("token_hash", sa.String(64), primary_key=True),
        sa.Column("identity", sa.String(255), nullable=False),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_magic_tokens_identity", "magic_tokens", ["identity"])
    op.create_index("ix_magic_tokens_expires_at", "magic_tokens", ["expires_at"])


def downgrade() -> None:
    op.drop_index("ix_magic_tokens_expires_at", table_name="magic_tokens")
    op.drop_index("ix_magic_tokens_identity", table_name="magic_tokens")
    op.drop_table("magic_tokens")
    op.drop_index("ix_documents_workspace_id", table_name="documents")
    op.drop_index("ix_documents_expiration_date", table_name="documents")
    op.drop_table("documents")
    op.drop_index("ix_workspaces_name", table_name="workspaces")
    op.drop_table("workspaces")
