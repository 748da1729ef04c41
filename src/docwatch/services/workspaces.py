"""Workspace queries shared by the API, CLI and startup."""

import logging

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from docwatch.models import DEFAULT_WORKSPACE_NAME, Document, Workspace

logger = logging.getLogger(__name__)


async def workspace_exists(session: AsyncSession, workspace_id: str) -> bool:
    return await session.get(Workspace, workspace_id) is not None


async def count_documents(session: AsyncSession, workspace_id: str) -> int:
    """Number of documents filed under a workspace."""
    stmt = select(func.count(Document.id)).where(Document.workspace_id == workspace_id)  # type: ignore[arg-type]
    result = await session.execute(stmt)
    return result.scalar() or 0


async def list_workspaces(session: AsyncSession) -> list[Workspace]:
    stmt = select(Workspace).order_by(Workspace.created_at)  # type: ignore[arg-type]
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def ensure_default_workspace(session: AsyncSession) -> Workspace:
    """Return the oldest "General" workspace, creating it if missing."""
    stmt = (
        select(Workspace)
        .where(Workspace.name == DEFAULT_WORKSPACE_NAME)
        .order_by(Workspace.created_at)  # type: ignore[arg-type]
        .limit(1)
    )
    result = await session.execute(stmt)
    workspace = result.scalar_one_or_none()
    if workspace:
        return workspace

    workspace = Workspace(name=DEFAULT_WORKSPACE_NAME)
    session.add(workspace)
    await session.commit()
    await session.refresh(workspace)
    logger.info(f"Created default workspace {workspace.id}")
    return workspace
