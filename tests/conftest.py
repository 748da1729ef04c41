"""Pytest configuration and fixtures."""

import os
import re
import tempfile
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'docwatch-test.db')}"
)
os.environ["ALLOWED_EMAIL_DOMAINS"] = '["example.com", "example.org"]'
os.environ["EMAIL_BACKEND"] = "console"

import pytest
from httpx import ASGITransport, AsyncClient, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from docwatch.api.deps import get_email_service, get_session_factory
from docwatch.database import get_session
from docwatch.main import app
from docwatch.models import Workspace
from docwatch.services.email import EmailBackend, EmailService
from docwatch.services.session import get_session_issuer
from docwatch.services.token_store import DatabaseTokenStore

TEST_IDENTITY = "tester@example.com"


@dataclass
class SentEmail:
    to: str
    subject: str
    html: str
    text: str | None


class RecordingEmailBackend(EmailBackend):
    """Email backend that keeps sent messages in memory.

    Set ``result`` to False or ``error`` to an exception to simulate a
    failed delivery.
    """

    name = "recording"

    def __init__(self):
        self.outbox: list[SentEmail] = []
        self.result = True
        self.error: Exception | None = None

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        if self.error is not None:
            raise self.error
        self.outbox.append(SentEmail(to=to, subject=subject, html=html, text=text))
        return self.result

    @property
    def last_link(self) -> str:
        """The magic link URL from the most recent message."""
        match = re.search(r"https?://\S+verify-magic\?token=[0-9a-f]+", self.outbox[-1].text or "")
        assert match, "no magic link in last email"
        return match.group(0)


def cookie_header(response: Response, name: str) -> str:
    """The raw Set-Cookie header for a cookie name."""
    for header in response.headers.get_list("set-cookie"):
        if header.startswith(f"{name}="):
            return header
    raise AssertionError(f"{name} cookie not set")


def cookie_value(response: Response, name: str) -> str:
    return cookie_header(response, name).split(";", 1)[0].split("=", 1)[1]


@pytest.fixture(autouse=True)
def mock_queue():
    """Mock the SAQ queue to avoid Redis connections in tests."""
    mock_job = MagicMock()
    mock_job.id = "test-job-id"
    mock_job.key = "test-job-key"

    with patch("docwatch.tasks.queue.queue.enqueue", new_callable=AsyncMock) as mock_enqueue:
        mock_enqueue.return_value = mock_job
        yield mock_enqueue


@pytest.fixture
async def test_engine(tmp_path):
    """Create a throwaway SQLite database per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def token_store(session_factory) -> DatabaseTokenStore:
    return DatabaseTokenStore(session_factory)


@pytest.fixture
def email_backend() -> RecordingEmailBackend:
    return RecordingEmailBackend()


@pytest.fixture
def email_service(email_backend: RecordingEmailBackend) -> EmailService:
    return EmailService(backend=email_backend)


@pytest.fixture
async def client(
    session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    email_service: EmailService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_email_service] = lambda: email_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def identity() -> str:
    return TEST_IDENTITY


@pytest.fixture
def session_token(identity: str) -> str:
    """Create a session credential for the test identity."""
    return get_session_issuer().issue(identity)


@pytest.fixture
def auth_headers(session_token: str) -> dict[str, str]:
    """Create authorization headers for the test identity."""
    return {"Authorization": f"Bearer {session_token}"}


@pytest.fixture
async def workspace(session: AsyncSession) -> Workspace:
    """Create a test workspace."""
    workspace = Workspace(name="Licenses")
    session.add(workspace)
    await session.commit()
    await session.refresh(workspace)
    return workspace


# Helper to make authenticated requests
class AuthenticatedClient:
    """Wrapper for AsyncClient with authentication."""

    def __init__(self, client: AsyncClient, headers: dict[str, str]):
        self.client = client
        self.headers = headers

    async def get(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.get(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.post(url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.put(url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.delete(url, **kwargs)


@pytest.fixture
def authenticated_client(client: AsyncClient, auth_headers: dict[str, str]) -> AuthenticatedClient:
    """Create an authenticated test client."""
    return AuthenticatedClient(client, auth_headers)
