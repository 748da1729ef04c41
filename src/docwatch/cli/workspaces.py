"""Workspace management CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from docwatch.database import get_session_context
from docwatch.models import Workspace
from docwatch.services.workspaces import count_documents, list_workspaces

console = Console()
app = typer.Typer(help="Workspace management commands")


@app.command("list")
def list_all():
    """List workspaces with their document counts."""

    async def _list():
        async with get_session_context() as session:
            workspaces = await list_workspaces(session)

            table = Table(title="Workspaces")
            table.add_column("ID", style="cyan")
            table.add_column("Name", style="green")
            table.add_column("Documents", justify="right")
            table.add_column("Created", style="dim")

            for workspace in workspaces:
                documents = await count_documents(session, workspace.id)
                created = workspace.created_at.strftime("%Y-%m-%d") if workspace.created_at else "-"
                table.add_row(workspace.id, workspace.name, str(documents), created)

            console.print(table)

    asyncio.run(_list())


@app.command("create")
def create(name: str = typer.Argument(..., help="Workspace name")):
    """Create a workspace."""

    async def _create():
        clean = name.strip()
        if not clean:
            console.print("[red]Workspace name is required[/red]")
            raise typer.Exit(1)

        async with get_session_context() as session:
            workspace = Workspace(name=clean)
            session.add(workspace)
            await session.commit()
            await session.refresh(workspace)
            console.print(f"[green]Created workspace:[/green] {workspace.name} ({workspace.id})")

    asyncio.run(_create())
