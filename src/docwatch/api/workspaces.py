"""Workspace endpoints."""

from fastapi import APIRouter, HTTPException, Response, status

from docwatch.api.deps import CurrentIdentity, SessionDep
from docwatch.models import Workspace
from docwatch.models.workspace import WorkspaceCreate, WorkspaceRead
from docwatch.services import workspaces as workspace_service

router = APIRouter()


@router.get("", response_model=list[WorkspaceRead])
async def list_workspaces(session: SessionDep, _identity: CurrentIdentity):
    """List workspaces, oldest first."""
    workspaces = await workspace_service.list_workspaces(session)
    return [WorkspaceRead.model_validate(w) for w in workspaces]


@router.post("", response_model=WorkspaceRead, status_code=status.HTTP_201_CREATED)
async def create_workspace(
    workspace_in: WorkspaceCreate,
    session: SessionDep,
    _identity: CurrentIdentity,
):
    """Create a workspace."""
    name = workspace_in.name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Workspace name is required",
        )

    workspace = Workspace(name=name)
    session.add(workspace)
    await session.commit()
    await session.refresh(workspace)

    return WorkspaceRead.model_validate(workspace)


@router.delete("/{workspace_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workspace(workspace_id: str, session: SessionDep, _identity: CurrentIdentity):
    """Delete an empty workspace."""
    if await workspace_service.count_documents(session, workspace_id) > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete workspace that contains documents",
        )

    workspace = await session.get(Workspace, workspace_id)
    if not workspace:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Workspace not found",
        )

    await session.delete(workspace)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
