"""Authentication endpoints."""

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, HTTPException, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from docwatch.api.deps import (
    CurrentIdentity,
    MagicLinkIssuerDep,
    MagicLinkVerifierDep,
    SessionIssuerDep,
)
from docwatch.config import settings
from docwatch.services.errors import DeliveryFailed, InvalidIdentity, InvalidOrExpiredToken

logger = logging.getLogger(__name__)

router = APIRouter()


class MagicLinkRequest(BaseModel):
    """Request body for a magic link."""

    email: str = ""


class MagicLinkResponse(BaseModel):
    """Uniform acknowledgement for magic link requests."""

    message: str


class IdentityRead(BaseModel):
    """The authenticated identity."""

    email: str


def set_session_cookie(response: Response, credential: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=credential,
        max_age=settings.session_expiration_days * 24 * 60 * 60,
        path="/",
        httponly=True,
        secure=settings.cookie_secure_enabled,
        samesite=settings.cookie_samesite,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure_enabled,
        samesite=settings.cookie_samesite,
    )


def login_redirect(error: str) -> RedirectResponse:
    return RedirectResponse(
        f"{settings.app_url}/login?{urlencode({'error': error})}",
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.post("/request-magic-link", response_model=MagicLinkResponse)
async def request_magic_link(request: MagicLinkRequest, issuer: MagicLinkIssuerDep):
    """
    Email a single-use sign-in link.

    The response is the same for every acceptable address; only malformed
    addresses and failed deliveries are reported.
    """
    try:
        ack = await issuer.request_link(request.email)
    except InvalidIdentity as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    except DeliveryFailed as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        ) from e

    return MagicLinkResponse(message=ack.message)


@router.get("/verify-magic")
async def verify_magic(
    verifier: MagicLinkVerifierDep,
    session_issuer: SessionIssuerDep,
    token: str | None = None,
):
    """
    Redeem a magic link, set the session cookie and continue to the dashboard.
    """
    if not token:
        return login_redirect("missing_token")

    try:
        identity = await verifier.consume(token)
    except InvalidOrExpiredToken:
        return login_redirect("expired_or_invalid")

    response = RedirectResponse(
        f"{settings.app_url}/dashboard",
        status_code=status.HTTP_303_SEE_OTHER,
    )
    set_session_cookie(response, session_issuer.issue(identity))
    logger.debug(f"Session started for {identity}")
    return response


@router.get("/me", response_model=IdentityRead)
async def get_current_identity_info(identity: CurrentIdentity):
    """Get the signed-in identity."""
    return IdentityRead(email=identity)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout():
    """
    Clear the session cookie.

    Sessions are stateless, so this only removes the client's copy; a copied
    credential stays valid until it expires.
    """
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_session_cookie(response)
    return response
