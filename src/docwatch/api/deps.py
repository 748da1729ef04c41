"""FastAPI dependencies for dependency injection."""

import logging
from datetime import timedelta
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docwatch.config import settings
from docwatch.database import async_session_factory, get_session
from docwatch.services.email import EmailService, email_service
from docwatch.services.errors import Unauthenticated
from docwatch.services.magic_link import MagicLinkIssuer, MagicLinkVerifier
from docwatch.services.session import (
    SessionIssuer,
    SessionValidator,
    get_session_issuer,
    get_session_validator,
)
from docwatch.services.token_store import DatabaseTokenStore, TokenStore

logger = logging.getLogger(__name__)

# Type alias for database session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for components that manage their own transactions."""
    return async_session_factory


SessionFactoryDep = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]


def get_token_store(session_factory: SessionFactoryDep) -> TokenStore:
    return DatabaseTokenStore(session_factory)


def get_email_service() -> EmailService:
    return email_service


TokenStoreDep = Annotated[TokenStore, Depends(get_token_store)]
EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]


def get_magic_link_issuer(store: TokenStoreDep, mailer: EmailServiceDep) -> MagicLinkIssuer:
    """Issuer wired to the configured store, mail backend and link settings."""
    return MagicLinkIssuer(
        store,
        mailer,
        link_base_url=settings.link_base_url,
        ttl=timedelta(minutes=settings.magic_link_expiration_minutes),
        allowed_domains=settings.allowed_email_domains,
        send_timeout=settings.email_send_timeout_seconds,
    )


def get_magic_link_verifier(store: TokenStoreDep) -> MagicLinkVerifier:
    return MagicLinkVerifier(store)


MagicLinkIssuerDep = Annotated[MagicLinkIssuer, Depends(get_magic_link_issuer)]
MagicLinkVerifierDep = Annotated[MagicLinkVerifier, Depends(get_magic_link_verifier)]
SessionIssuerDep = Annotated[SessionIssuer, Depends(get_session_issuer)]
SessionValidatorDep = Annotated[SessionValidator, Depends(get_session_validator)]

# Browsers carry the session cookie; API clients may send it as a bearer token
session_cookie = APIKeyCookie(name=settings.session_cookie_name, auto_error=False)
bearer = HTTPBearer(auto_error=False)


async def get_current_identity(
    validator: SessionValidatorDep,
    cookie_credential: Annotated[str | None, Depends(session_cookie)],
    bearer_credential: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer)],
) -> str:
    """Get the authenticated identity or raise 401.

    The cookie is tried first, then the bearer token, so a stale cookie does
    not shadow a valid Authorization header.
    """
    candidates = [
        c
        for c in (cookie_credential, bearer_credential.credentials if bearer_credential else None)
        if c
    ]
    if not candidates:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    for credential in candidates:
        try:
            return validator.validate(credential)
        except Unauthenticated:
            logger.debug("Session validation failed")

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired session",
        headers={"WWW-Authenticate": "Bearer"},
    )


# Type alias for protected endpoints
CurrentIdentity = Annotated[str, Depends(get_current_identity)]
