"""
Steam provider descriptor.

Bundles the OpenID and profile modules into the four extension points an
identity-framework host calls during sign-in:

1. ``authorization``: where to redirect the browser, and with which parameters
2. ``token``: verify the callback assertion and issue an opaque credential
3. ``userinfo``: fetch the player summary for the credential's Steam ID
4. ``profile``: map the player summary into a normalized profile

The descriptor holds nothing but the immutable provider configuration and an
optional shared HTTP client, so one instance serves every sign-in attempt.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Mapping, Optional, Tuple
from urllib.parse import urlencode

import httpx

from steam_openid.auth.openid import (
    AUTHORIZATION_URL,
    PROVIDER_ID,
    PROVIDER_NAME,
    ProviderConfig,
    build_authorization_params,
    verify_assertion,
)
from steam_openid.auth.profile import fetch_player_summary, map_profile
from steam_openid.errors import ProfileResolutionError, UpstreamTransportError
from steam_openid.models import NormalizedProfile, SteamProfile, TokenSet

logger = logging.getLogger(__name__)


LOGO_URL = (
    "https://raw.githubusercontent.com/Nekonyx/next-auth-steam/"
    "bc574bb62be70993c29f6f54c350bdf64205962a/logo/steam-icon-light.svg"
)


@dataclass(frozen=True)
class ProviderStyle:
    """Sign-in button styling."""
    logo: str = LOGO_URL
    bg: str = "#000"
    text: str = "#fff"


@dataclass(frozen=True)
class AuthorizationRequest:
    """Authorization endpoint and the parameters appended to it."""
    url: str
    params: Dict[str, str]

    def redirect_url(self) -> str:
        return f"{self.url}?{urlencode(self.params)}"


@dataclass(frozen=True)
class ProviderDescriptor:
    """Named provider exposing the host's four sign-in extension points."""
    id: str
    name: str
    type: str
    style: ProviderStyle
    checks: Tuple[str, ...]
    authorization: AuthorizationRequest
    token: Callable[[Mapping[str, str]], Awaitable[TokenSet]]
    userinfo: Callable[[TokenSet], Awaitable[SteamProfile]]
    profile: Callable[[SteamProfile], NormalizedProfile]
    config: ProviderConfig = field(repr=False)


def steam_provider(
    api_key: str,
    callback_url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    allow_minimal_profile: bool = False,
) -> ProviderDescriptor:
    """
    Create the Steam provider descriptor.

    Args:
        api_key: Steam Web API key
        callback_url: Absolute callback base URL, e.g.
            ``https://example.com/api/auth/callback``
        client: Optional shared httpx client used for both Steam calls
        allow_minimal_profile: When True, a failed player summary lookup
            yields a profile holding only the verified Steam ID instead of
            failing the sign-in

    Raises:
        ConfigurationError: If the API key is empty or the callback URL is
            not absolute. No network call is made in that case.
    """
    config = ProviderConfig(api_key=api_key, callback_url=callback_url)

    async def token(params: Mapping[str, str]) -> TokenSet:
        steam_id = await verify_assertion(params, config, client=client)
        return TokenSet(access_token=uuid.uuid4().hex, steam_id=steam_id)

    async def userinfo(tokens: TokenSet) -> SteamProfile:
        try:
            return await fetch_player_summary(tokens.steam_id, config.api_key, client=client)
        except (ProfileResolutionError, UpstreamTransportError) as e:
            if not allow_minimal_profile:
                raise
            logger.warning(
                f"Using minimal profile for {tokens.steam_id}: {e.message}",
                extra={"steam_id": tokens.steam_id},
            )
            return SteamProfile(steamid=tokens.steam_id)

    return ProviderDescriptor(
        id=PROVIDER_ID,
        name=PROVIDER_NAME,
        type="oauth",
        style=ProviderStyle(),
        checks=("none",),
        authorization=AuthorizationRequest(url=AUTHORIZATION_URL, params=build_authorization_params(config)),
        token=token,
        userinfo=userinfo,
        profile=map_profile,
        config=config,
    )


def steam_provider_from_settings(settings, client: Optional[httpx.AsyncClient] = None) -> ProviderDescriptor:
    """Create the Steam provider descriptor from application settings."""
    return steam_provider(
        settings.STEAM_API_KEY,
        settings.STEAM_CALLBACK_URL,
        client=client,
        allow_minimal_profile=settings.ALLOW_MINIMAL_PROFILE,
    )


__all__ = [
    "LOGO_URL",
    "ProviderStyle",
    "AuthorizationRequest",
    "ProviderDescriptor",
    "steam_provider",
    "steam_provider_from_settings",
]
