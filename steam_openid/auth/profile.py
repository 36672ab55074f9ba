"""
Steam player summary lookup and profile mapping.

After sign-in only the 64-bit Steam ID is known. This module fetches the
player summary from the Steam Web API and maps it into the normalized
profile used by the session layer.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from steam_openid.auth.utils import client_scope
from steam_openid.errors import ProfileResolutionError, UpstreamTransportError
from steam_openid.models import NormalizedProfile, SteamProfile

logger = logging.getLogger(__name__)


PLAYER_SUMMARIES_URL = "https://api.steampowered.com/ISteamUser/GetPlayerSummaries/v0002/"

# Steam profiles carry no email; session layers still need one.
EMAIL_DOMAIN = "steamcommunity.com"


def synthesize_email(steam_id: str) -> str:
    """Return the deterministic placeholder address for a Steam ID."""
    return f"{steam_id}@{EMAIL_DOMAIN}"


def map_profile(profile: SteamProfile) -> NormalizedProfile:
    """Map a Steam player summary into a normalized profile."""
    return NormalizedProfile(
        id=profile.steamid,
        name=profile.personaname,
        image=profile.avatarfull,
        email=synthesize_email(profile.steamid),
    )


def _first_player(data: Any) -> Optional[Any]:
    if not isinstance(data, dict):
        return None
    response = data.get("response")
    if not isinstance(response, dict):
        return None
    players = response.get("players")
    if not isinstance(players, list) or not players:
        return None
    return players[0]


async def fetch_player_summary(
    steam_id: str,
    api_key: str,
    client: Optional[httpx.AsyncClient] = None,
) -> SteamProfile:
    """
    Fetch the player summary for one Steam ID.

    Sends a single GET; there is no retry.

    Args:
        steam_id: Verified Steam ID
        api_key: Steam Web API key
        client: Optional shared httpx client

    Returns:
        The parsed player summary

    Raises:
        UpstreamTransportError: If the request fails or returns a
            non-success status
        ProfileResolutionError: If the envelope is malformed, holds no
            player, or holds a player for a different Steam ID
    """
    try:
        async with client_scope(client) as http:
            response = await http.get(
                PLAYER_SUMMARIES_URL,
                params={"key": api_key, "steamids": steam_id},
            )
    except httpx.HTTPError as e:
        # The request URL carries the API key; log the exception type only.
        logger.warning(f"Steam player summary request failed: {type(e).__name__}")
        raise UpstreamTransportError(
            "steam_web_api",
            "player summary request failed",
            details={"steam_id": steam_id, "error_type": type(e).__name__},
        ) from e

    if not response.is_success:
        logger.warning(f"Steam player summary returned HTTP {response.status_code}")
        raise UpstreamTransportError(
            "steam_web_api",
            f"player summary returned HTTP {response.status_code}",
            details={"steam_id": steam_id, "status_code": response.status_code},
        )

    try:
        data = response.json()
    except ValueError as e:
        raise ProfileResolutionError(steam_id, "Steam profile response is not JSON") from e

    player = _first_player(data)
    if player is None:
        logger.warning(f"No Steam profile found for {steam_id}")
        raise ProfileResolutionError(steam_id)

    try:
        profile = SteamProfile.model_validate(player)
    except ValidationError as e:
        raise ProfileResolutionError(
            steam_id,
            "Steam profile record is malformed",
            details={"errors": e.error_count()},
        ) from e

    if profile.steamid != steam_id:
        logger.warning(f"Steam profile lookup for {steam_id} returned {profile.steamid}")
        raise ProfileResolutionError(steam_id, "Steam profile does not match the verified Steam ID")

    return profile


async def resolve_profile(
    steam_id: str,
    api_key: str,
    client: Optional[httpx.AsyncClient] = None,
) -> NormalizedProfile:
    """Fetch and normalize the profile of a verified Steam ID."""
    profile = await fetch_player_summary(steam_id, api_key, client=client)
    return map_profile(profile)


__all__ = [
    "PLAYER_SUMMARIES_URL",
    "EMAIL_DOMAIN",
    "synthesize_email",
    "map_profile",
    "fetch_player_summary",
    "resolve_profile",
]
