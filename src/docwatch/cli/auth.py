"""Magic link support commands."""

import asyncio
from datetime import UTC, datetime, timedelta

import typer
from rich.console import Console

from docwatch.config import settings
from docwatch.database import async_session_factory
from docwatch.services.email import email_service
from docwatch.services.errors import InvalidIdentity, StoreUnavailable
from docwatch.services.magic_link import MagicLinkIssuer
from docwatch.services.token_store import DatabaseTokenStore

console = Console()
app = typer.Typer(help="Magic link commands")


def build_issuer() -> MagicLinkIssuer:
    return MagicLinkIssuer(
        DatabaseTokenStore(async_session_factory),
        email_service,
        link_base_url=settings.link_base_url,
        ttl=timedelta(minutes=settings.magic_link_expiration_minutes),
        allowed_domains=settings.allowed_email_domains,
        send_timeout=settings.email_send_timeout_seconds,
    )


@app.command("login-url")
def login_url(email: str = typer.Argument(..., help="Address to sign in as")):
    """Mint a magic link without sending it.

    For support cases where mail is not arriving. The link is single-use and
    expires like an emailed one.
    """

    async def _mint():
        try:
            issued = await build_issuer().mint_link(email)
        except InvalidIdentity:
            console.print(f"[red]Not an allowed email address:[/red] {email}")
            raise typer.Exit(1) from None
        except StoreUnavailable as e:
            console.print(f"[red]Token store unavailable:[/red] {e}")
            raise typer.Exit(1) from None

        expires = issued.expires_at.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
        console.print(f"[green]Magic link for {issued.identity}[/green] (expires {expires})")
        # Plain print so the URL is not wrapped
        print(issued.url)

    asyncio.run(_mint())


@app.command("tokens")
def tokens():
    """Show how many magic links are outstanding."""

    async def _count():
        store = DatabaseTokenStore(async_session_factory)
        pending = await store.count_pending(datetime.now(UTC))
        console.print(f"[cyan]{pending}[/cyan] pending magic link(s)")

    asyncio.run(_count())
