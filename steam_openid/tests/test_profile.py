"""
Tests for Steam player summary lookup and profile mapping.
"""

import httpx
import pytest

from steam_openid.auth.profile import (
    PLAYER_SUMMARIES_URL,
    fetch_player_summary,
    map_profile,
    resolve_profile,
    synthesize_email,
)
from steam_openid.errors import ProfileResolutionError, UpstreamTransportError
from steam_openid.models import CommunityVisibilityState, PersonaState, SteamProfile

STEAM_ID = "76561197960287930"
API_KEY = "test-steam-api-key"


def _envelope(*players):
    return {"response": {"players": list(players)}}


class TestMapProfile:

    def test_maps_fields(self, player_record):
        profile = map_profile(SteamProfile.model_validate(player_record))

        assert profile.id == STEAM_ID
        assert profile.name == "Gabe"
        assert profile.image == "https://avatars.steamstatic.com/abc_full.jpg"
        assert profile.email == f"{STEAM_ID}@steamcommunity.com"

    @pytest.mark.parametrize("steam_id", ["1", "76561197960287930", "76561198000000000"])
    def test_email_and_id_follow_steam_id_only(self, steam_id):
        profile = map_profile(SteamProfile(steamid=steam_id, personaname="someone@else.org"))

        assert profile.id == steam_id
        assert profile.email == synthesize_email(steam_id) == f"{steam_id}@steamcommunity.com"

    def test_private_profile_maps_with_missing_fields(self):
        profile = map_profile(SteamProfile(steamid=STEAM_ID))

        assert profile.name is None
        assert profile.image is None


class TestSteamProfileModel:

    def test_known_enums_are_parsed(self, player_record):
        profile = SteamProfile.model_validate(player_record)

        assert profile.communityvisibilitystate == CommunityVisibilityState.PUBLIC
        assert profile.personastate == PersonaState.ONLINE
        assert profile.commentpermission == 1

    def test_unknown_fields_and_enum_values_are_tolerated(self, player_record):
        record = {**player_record, "communityvisibilitystate": 2, "personastate": 42, "gameid": "570", "commentpermission": 2}

        profile = SteamProfile.model_validate(record)

        assert profile.communityvisibilitystate == 2
        assert profile.personastate == 42
        assert profile.commentpermission == 2
        assert profile.model_extra["gameid"] == "570"
        assert profile.model_extra["loccountrycode"] == "US"


class TestFetchPlayerSummary:

    @pytest.mark.asyncio
    async def test_sends_key_and_steam_id(self, player_record, stub_steam):
        client, recorder = stub_steam(lambda request: httpx.Response(200, json=_envelope(player_record)))

        profile = await fetch_player_summary(STEAM_ID, API_KEY, client=client)

        assert profile.steamid == STEAM_ID
        request = recorder.requests[0]
        assert request.method == "GET"
        assert f"{request.url.scheme}://{request.url.host}{request.url.path}" == PLAYER_SUMMARIES_URL
        assert request.url.params["key"] == API_KEY
        assert request.url.params["steamids"] == STEAM_ID

    @pytest.mark.asyncio
    async def test_empty_player_list_raises_with_steam_id(self, stub_steam):
        client, _ = stub_steam(lambda request: httpx.Response(200, json=_envelope()))

        with pytest.raises(ProfileResolutionError) as exc_info:
            await fetch_player_summary(STEAM_ID, API_KEY, client=client)

        assert exc_info.value.steam_id == STEAM_ID

    @pytest.mark.parametrize(
        "body",
        [{}, {"response": None}, {"response": {}}, {"response": {"players": "nope"}}, [], "text"],
    )
    @pytest.mark.asyncio
    async def test_malformed_envelope_raises(self, stub_steam, body):
        client, _ = stub_steam(lambda request: httpx.Response(200, json=body))

        with pytest.raises(ProfileResolutionError):
            await fetch_player_summary(STEAM_ID, API_KEY, client=client)

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self, stub_steam):
        client, _ = stub_steam(lambda request: httpx.Response(200, text="<html>Forbidden</html>"))

        with pytest.raises(ProfileResolutionError):
            await fetch_player_summary(STEAM_ID, API_KEY, client=client)

    @pytest.mark.asyncio
    async def test_record_without_steamid_raises(self, stub_steam):
        client, _ = stub_steam(lambda request: httpx.Response(200, json=_envelope({"personaname": "x"})))

        with pytest.raises(ProfileResolutionError):
            await fetch_player_summary(STEAM_ID, API_KEY, client=client)

    @pytest.mark.asyncio
    async def test_record_for_other_steam_id_raises(self, player_record, stub_steam):
        other = {**player_record, "steamid": "76561198000000000"}
        client, _ = stub_steam(lambda request: httpx.Response(200, json=_envelope(other)))

        with pytest.raises(ProfileResolutionError):
            await fetch_player_summary(STEAM_ID, API_KEY, client=client)

    @pytest.mark.asyncio
    async def test_non_success_status_is_transport_error(self, stub_steam):
        client, recorder = stub_steam(lambda request: httpx.Response(403, text="Forbidden"))

        with pytest.raises(UpstreamTransportError) as exc_info:
            await fetch_player_summary(STEAM_ID, API_KEY, client=client)

        assert exc_info.value.details["status_code"] == 403
        assert recorder.call_count == 1

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error_without_leaking_key(self, stub_steam):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client, _ = stub_steam(handler)

        with pytest.raises(UpstreamTransportError) as exc_info:
            await fetch_player_summary(STEAM_ID, API_KEY, client=client)

        assert API_KEY not in str(exc_info.value)
        assert API_KEY not in str(exc_info.value.details)


class TestResolveProfile:

    @pytest.mark.asyncio
    async def test_resolves_normalized_profile(self, player_record, stub_steam):
        client, _ = stub_steam(lambda request: httpx.Response(200, json=_envelope(player_record)))

        profile = await resolve_profile(STEAM_ID, API_KEY, client=client)

        assert profile.id == STEAM_ID
        assert profile.email == f"{STEAM_ID}@steamcommunity.com"

    @pytest.mark.asyncio
    async def test_repeated_resolution_is_identical(self, player_record, stub_steam):
        client, recorder = stub_steam(lambda request: httpx.Response(200, json=_envelope(player_record)))

        first = await resolve_profile(STEAM_ID, API_KEY, client=client)
        second = await resolve_profile(STEAM_ID, API_KEY, client=client)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()
        assert recorder.call_count == 2
