"""
Authentication routes for Steam sign-in.

These routes play the identity-framework host: they drive the provider
descriptor's authorization, token, userinfo and profile steps in order.
Session issuance is left to whatever sits behind this service.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from steam_openid.auth.provider import ProviderDescriptor
from steam_openid.errors import (
    AssertionRejected,
    ProfileResolutionError,
    UpstreamTransportError,
)
from steam_openid.models import ErrorResponse

logger = logging.getLogger(__name__)


# =============================================================================
# Router Setup
# =============================================================================

auth_router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
)


def get_provider(request: Request) -> ProviderDescriptor:
    """FastAPI dependency returning the descriptor created at startup."""
    provider = getattr(request.app.state, "provider", None)
    if provider is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Steam provider is not configured",
        )
    return provider


# =============================================================================
# Sign-in Endpoint
# =============================================================================

@auth_router.get("/signin/steam", response_class=RedirectResponse)
async def signin(provider: ProviderDescriptor = Depends(get_provider)):
    """
    Start Steam sign-in by redirecting to Steam's OpenID endpoint.

    Returns:
        RedirectResponse to steamcommunity.com with checkid_setup parameters
    """
    return RedirectResponse(url=provider.authorization.redirect_url(), status_code=302)


# =============================================================================
# Callback Endpoint
# =============================================================================

@auth_router.get("/callback/steam")
async def callback(request: Request, provider: ProviderDescriptor = Depends(get_provider)):
    """
    Handle Steam's redirect back after sign-in.

    This endpoint:
    1. Verifies the OpenID assertion (local checks, then check_authentication)
    2. Fetches the player summary for the verified Steam ID
    3. Returns the normalized profile and an opaque bearer credential

    Verification failures of any kind, and Steam being unreachable at either
    call, produce the same 401 body so callers cannot tell a malformed
    assertion from one Steam refused.
    """
    params = dict(request.query_params)

    if params.get("openid.mode") == "cancel":
        logger.info("Steam sign-in cancelled by user")
        return _error_response("AUTHENTICATION_CANCELLED", "Sign-in was cancelled", status.HTTP_401_UNAUTHORIZED)

    try:
        tokens = await provider.token(params)
    except (AssertionRejected, UpstreamTransportError) as e:
        logger.warning(f"Steam sign-in failed: {e.code}", extra={"details": e.details})
        return _error_response("AUTHENTICATION_FAILED", "Authentication failed", status.HTTP_401_UNAUTHORIZED)

    try:
        raw_profile = await provider.userinfo(tokens)
    except UpstreamTransportError as e:
        logger.warning(f"Steam profile lookup unavailable: {e.code}", extra={"details": e.details})
        return _error_response("AUTHENTICATION_FAILED", "Authentication failed", status.HTTP_401_UNAUTHORIZED)
    except ProfileResolutionError as e:
        logger.error(
            f"Steam profile lookup failed for {tokens.steam_id}: {e.message}",
            extra={"steam_id": tokens.steam_id},
        )
        return _error_response(e.code, "Unable to load Steam profile", status.HTTP_502_BAD_GATEWAY)

    profile = provider.profile(raw_profile)

    return {
        "access_token": tokens.access_token,
        "token_type": tokens.token_type,
        "profile": profile.model_dump(),
    }


# =============================================================================
# Provider Metadata
# =============================================================================

@auth_router.get("/providers")
async def providers(provider: ProviderDescriptor = Depends(get_provider)):
    """List the configured provider and its sign-in button style."""
    return {
        provider.id: {
            "id": provider.id,
            "name": provider.name,
            "type": provider.type,
            "signinUrl": "/auth/signin/steam",
            "callbackUrl": provider.config.return_to_url,
            "style": {
                "logo": provider.style.logo,
                "bg": provider.style.bg,
                "text": provider.style.text,
            },
        }
    }


def _error_response(code: str, message: str, status_code: int) -> JSONResponse:
    body = ErrorResponse(error=code, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


__all__ = ["auth_router", "get_provider"]
