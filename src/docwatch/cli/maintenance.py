"""Maintenance CLI commands."""

import asyncio

import typer
from rich.console import Console

from docwatch.tasks import queue
from docwatch.tasks.maintenance import MAINTENANCE_TIMEOUT_SECONDS

console = Console()
app = typer.Typer(help="Maintenance and cleanup commands")


@app.command("sweep-tokens")
def sweep_tokens(
    background: bool = typer.Option(False, "--background", "-b", help="Run in background worker"),
):
    """Delete expired magic link tokens.

    The worker already does this on a schedule; this runs a sweep now.
    """

    async def _sweep():
        if background:
            job = await queue.enqueue(
                "sweep_expired_tokens",
                timeout=MAINTENANCE_TIMEOUT_SECONDS,
            )
            console.print(f"[green]Queued token sweep job:[/green] {job.id if job else 'unknown'}")
            return

        from docwatch.tasks.maintenance import sweep_expired_tokens

        console.print("[cyan]Sweeping expired magic link tokens...[/cyan]")
        result = await sweep_expired_tokens(ctx={})

        if not result.get("success"):
            console.print(f"[red]Error:[/red] {result.get('error')}")
            raise typer.Exit(1)

        console.print(f"[green]Removed {result['removed']} expired token(s).[/green]")

    asyncio.run(_sweep())
