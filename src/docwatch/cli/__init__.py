"""CLI commands using Typer."""

import typer

from docwatch.cli.auth import app as auth_app
from docwatch.cli.db import app as db_app
from docwatch.cli.maintenance import app as maintenance_app
from docwatch.cli.workspaces import app as workspaces_app

app = typer.Typer(name="docwatch", help="DocWatch CLI")

# Register sub-apps
app.add_typer(db_app, name="db")
app.add_typer(auth_app, name="auth")
app.add_typer(workspaces_app, name="workspaces")
app.add_typer(maintenance_app, name="maintenance")


@app.command()
def version():
    """Show version information."""
    from docwatch import __version__

    typer.echo(f"DocWatch v{__version__}")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
):
    """Run the API server."""
    import uvicorn

    from docwatch.logging import get_uvicorn_log_config

    uvicorn.run(
        "docwatch.main:app",
        host=host,
        port=port,
        reload=reload,
        log_config=get_uvicorn_log_config(),
    )


@app.command()
def worker(
    concurrency: int = typer.Option(2, help="Number of concurrent tasks"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
):
    """Run the background worker, including the token sweep schedule."""
    import asyncio
    import logging

    from saq import Worker

    from docwatch.logging import setup_logging
    from docwatch.tasks import get_queue_settings

    setup_logging()
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    settings = get_queue_settings()

    typer.echo(f"Starting worker with concurrency={concurrency}")

    async def run_worker():
        w = Worker(
            queue=settings["queue"],
            functions=settings["functions"],
            cron_jobs=settings["cron_jobs"],
            concurrency=concurrency,
            startup=settings.get("startup"),
            shutdown=settings.get("shutdown"),
        )
        await w.start()

    asyncio.run(run_worker())


if __name__ == "__main__":
    app()
