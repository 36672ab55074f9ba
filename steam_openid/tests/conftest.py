"""
Shared fixtures for the Steam sign-in tests.

Network calls go through ``httpx.MockTransport`` wrapped in a recorder, so
tests can both script Steam's answers and count how many requests were made.
"""

from typing import Callable, Dict, List, Tuple

import httpx
import pytest

from steam_openid.auth.openid import ProviderConfig

API_KEY = "test-steam-api-key"
CALLBACK_URL = "https://example.com/api/auth/callback"
STEAM_ID = "76561197960287930"
CLAIMED_ID = f"https://steamcommunity.com/openid/id/{STEAM_ID}"


class RecordingTransport:
    """MockTransport handler that records every request it answers."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(api_key=API_KEY, callback_url=CALLBACK_URL)


@pytest.fixture
def assertion_params(provider_config) -> Dict[str, str]:
    """A well-formed id_res callback as Steam sends it."""
    return {
        "openid.ns": "http://specs.openid.net/auth/2.0",
        "openid.mode": "id_res",
        "openid.op_endpoint": "https://steamcommunity.com/openid/login",
        "openid.claimed_id": CLAIMED_ID,
        "openid.identity": CLAIMED_ID,
        "openid.return_to": provider_config.return_to_url,
        "openid.response_nonce": "2024-01-01T00:00:00ZabcDEF123",
        "openid.assoc_handle": "1234567890",
        "openid.signed": "signed,op_endpoint,claimed_id,identity,return_to,response_nonce,assoc_handle",
        "openid.sig": "c2lnbmF0dXJl",
    }


@pytest.fixture
def player_record() -> Dict[str, object]:
    """One GetPlayerSummaries record for STEAM_ID."""
    return {
        "steamid": STEAM_ID,
        "communityvisibilitystate": 3,
        "profilestate": 1,
        "personaname": "Gabe",
        "commentpermission": 1,
        "profileurl": f"https://steamcommunity.com/profiles/{STEAM_ID}/",
        "avatar": "https://avatars.steamstatic.com/abc.jpg",
        "avatarmedium": "https://avatars.steamstatic.com/abc_medium.jpg",
        "avatarfull": "https://avatars.steamstatic.com/abc_full.jpg",
        "avatarhash": "abc",
        "lastlogoff": 1700000000,
        "personastate": 1,
        "primaryclanid": "103582791429521408",
        "timecreated": 1063407589,
        "personastateflags": 0,
        "loccountrycode": "US",
    }


@pytest.fixture
def stub_steam() -> Callable[[Callable[[httpx.Request], httpx.Response]], Tuple[httpx.AsyncClient, RecordingTransport]]:
    """
    Factory returning an httpx client whose requests are answered by ``handler``.

    Usage:
        client, recorder = stub_steam(lambda request: httpx.Response(200, text="is_valid:true"))
    """

    def factory(handler):
        recorder = RecordingTransport(handler)
        client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
        return client, recorder

    return factory
