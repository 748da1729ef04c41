"""Workspace endpoint tests."""

from datetime import date

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from docwatch.models import DEFAULT_WORKSPACE_NAME, Document, Workspace
from docwatch.services.workspaces import ensure_default_workspace
from tests.conftest import AuthenticatedClient


@pytest.mark.asyncio
async def test_list_workspaces(authenticated_client: AuthenticatedClient, workspace: Workspace):
    response = await authenticated_client.get("/api/workspaces")
    assert response.status_code == 200
    data = response.json()
    assert [w["id"] for w in data] == [workspace.id]
    assert data[0]["name"] == "Licenses"


@pytest.mark.asyncio
async def test_workspaces_require_auth(client: AsyncClient):
    response = await client.get("/api/workspaces")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_workspace(authenticated_client: AuthenticatedClient):
    response = await authenticated_client.post("/api/workspaces", json={"name": "  Permits  "})
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Permits"
    assert data["id"]


@pytest.mark.asyncio
async def test_create_workspace_requires_name(authenticated_client: AuthenticatedClient):
    response = await authenticated_client.post("/api/workspaces", json={"name": "   "})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_empty_workspace(
    authenticated_client: AuthenticatedClient, workspace: Workspace, session: AsyncSession
):
    response = await authenticated_client.delete(f"/api/workspaces/{workspace.id}")
    assert response.status_code == 204
    assert await session.get(Workspace, workspace.id) is None


@pytest.mark.asyncio
async def test_delete_workspace_with_documents(
    authenticated_client: AuthenticatedClient, workspace: Workspace, session: AsyncSession
):
    session.add(
        Document(
            name="Business license",
            description="City license",
            expiration_date=date(2030, 1, 1),
            workspace_id=workspace.id,
            created_by="tester@example.com",
        )
    )
    await session.commit()

    response = await authenticated_client.delete(f"/api/workspaces/{workspace.id}")
    assert response.status_code == 400
    assert "contains documents" in response.json()["detail"]


@pytest.mark.asyncio
async def test_delete_missing_workspace(authenticated_client: AuthenticatedClient):
    response = await authenticated_client.delete("/api/workspaces/does-not-exist")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_ensure_default_workspace_is_idempotent(session: AsyncSession):
    first = await ensure_default_workspace(session)
    second = await ensure_default_workspace(session)

    assert first.name == DEFAULT_WORKSPACE_NAME
    assert first.id == second.id
