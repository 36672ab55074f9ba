"""
Steam OpenID 2.0 assertion handling.

This module implements the relying-party side of Steam's OpenID sign-in:
- Provider configuration (API key, callback URL, derived realm and return_to)
- Building the checkid_setup redirect parameters
- Structural validation of the callback parameters
- Re-verification of the assertion with Steam (check_authentication)
- Extracting the 64-bit Steam ID from the claimed identifier

Steam's assertions are not verified cryptographically by the relying party.
The only proof of authenticity is Steam answering ``is_valid:true`` to a
check_authentication request carrying the exact same parameters, so that
round trip must never be skipped.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional
from urllib.parse import urlsplit

import httpx

from steam_openid.auth.utils import client_scope, parse_key_value_form
from steam_openid.errors import AssertionRejected, ConfigurationError, UpstreamTransportError

logger = logging.getLogger(__name__)


# =============================================================================
# Protocol Constants
# =============================================================================

PROVIDER_ID = "steam"
PROVIDER_NAME = "Steam"

AUTHORIZATION_URL = "https://steamcommunity.com/openid/login"

OPENID_NS = "http://specs.openid.net/auth/2.0"
IDENTIFIER_SELECT = "http://specs.openid.net/auth/2.0/identifier_select"
IDENTITY_URL_PREFIX = "https://steamcommunity.com/openid/id/"

MODE_CHECKID_SETUP = "checkid_setup"
MODE_CHECK_AUTHENTICATION = "check_authentication"

IDENTIFIER_PATTERN = re.compile(r"https?://steamcommunity\.com/openid/id/([0-9]+)", re.ASCII)

_DEFAULT_PORTS = {"http": 80, "https": 443}


# =============================================================================
# Provider Configuration
# =============================================================================

@dataclass(frozen=True)
class ProviderConfig:
    """
    Immutable Steam provider configuration.

    ``realm`` is the origin of the callback URL and ``return_to_url`` is the
    callback URL followed by ``/steam``. Both are computed once here and
    reused for every sign-in attempt.

    Raises:
        ConfigurationError: If the API key is empty, or the callback URL is
            not an absolute http(s) URL or carries a query string or fragment
    """

    api_key: str = field(repr=False)
    callback_url: str
    realm: str = field(init=False)
    return_to_url: str = field(init=False)

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigurationError(
                "Steam API key is missing. "
                "Get one at https://steamcommunity.com/dev/apikey"
            )

        object.__setattr__(self, "realm", _origin_of(self.callback_url))

        if "?" in self.callback_url or "#" in self.callback_url:
            raise ConfigurationError(
                f"Invalid callback URL: {self.callback_url}. "
                "It must not carry a query string or fragment"
            )

        # Drop a single trailing slash so return_to still begins with callback_url
        base = self.callback_url[:-1] if self.callback_url.endswith("/") else self.callback_url
        object.__setattr__(self, "return_to_url", f"{base}/{PROVIDER_ID}")


def _origin_of(url: str) -> str:
    """
    Return the origin (scheme, host and non-default port) of an absolute URL.

    Raises:
        ConfigurationError: If the URL is not an absolute http(s) URL
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as e:
        raise ConfigurationError(f"Invalid callback URL: {url}", details={"error": str(e)}) from e

    scheme = parts.scheme.lower()
    host = parts.hostname
    if scheme not in _DEFAULT_PORTS or not host:
        raise ConfigurationError(
            f"Invalid callback URL: {url}. Expected an absolute http(s) URL"
        )

    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        host = f"{host}:{port}"
    return f"{scheme}://{host}"


# =============================================================================
# Identifier Pattern Matcher
# =============================================================================

def extract_steam_id(claimed_id: Optional[str]) -> Optional[str]:
    """
    Extract the numeric Steam ID from a claimed identifier URL.

    Args:
        claimed_id: Value of ``openid.claimed_id``

    Returns:
        The decimal Steam ID, or None if the URL does not match
        ``http(s)://steamcommunity.com/openid/id/<digits>`` exactly.

    Example:
        >>> extract_steam_id("https://steamcommunity.com/openid/id/76561197960287930")
        '76561197960287930'
    """
    if not claimed_id:
        return None

    match = IDENTIFIER_PATTERN.fullmatch(claimed_id)
    if not match:
        return None
    return match.group(1)


# =============================================================================
# Authorization Request Builder
# =============================================================================

def build_authorization_params(config: ProviderConfig) -> Dict[str, str]:
    """
    Build the checkid_setup parameters for Steam's OpenID endpoint.

    The identity is not known yet, so both identity fields carry the
    identifier_select sentinel and Steam picks the account.
    """
    return {
        "openid.mode": MODE_CHECKID_SETUP,
        "openid.ns": OPENID_NS,
        "openid.identity": IDENTIFIER_SELECT,
        "openid.claimed_id": IDENTIFIER_SELECT,
        "openid.return_to": config.return_to_url,
        "openid.realm": config.realm,
    }


# =============================================================================
# Assertion Parameter Validator
# =============================================================================

def validate_assertion_params(params: Mapping[str, str], return_to_url: str) -> bool:
    """
    Check the callback parameters before spending a round trip on them.

    All of the following must hold:
    1. ``openid.op_endpoint`` is Steam's login endpoint
    2. ``openid.ns`` is the OpenID 2.0 namespace
    3. ``openid.claimed_id`` starts with the Steam identity URL prefix
    4. ``openid.identity`` starts with the same prefix
    5. ``openid.return_to`` equals this deployment's return_to URL

    Args:
        params: Query parameters received on the callback
        return_to_url: Expected return_to for this configuration

    Returns:
        True if every check passes
    """
    checks = (
        ("op_endpoint", params.get("openid.op_endpoint") == AUTHORIZATION_URL),
        ("ns", params.get("openid.ns") == OPENID_NS),
        ("claimed_id", (params.get("openid.claimed_id") or "").startswith(IDENTITY_URL_PREFIX)),
        ("identity", (params.get("openid.identity") or "").startswith(IDENTITY_URL_PREFIX)),
        ("return_to", params.get("openid.return_to") == return_to_url),
    )

    for name, passed in checks:
        if not passed:
            logger.warning(f"Rejected OpenID assertion: unexpected openid.{name}")
            return False

    return True


# =============================================================================
# Re-verification Client
# =============================================================================

def build_check_authentication_params(params: Mapping[str, str]) -> Dict[str, str]:
    """
    Copy the callback parameters with the mode switched to check_authentication.

    The input mapping is left untouched.
    """
    payload = {key: value for key, value in params.items() if key != "openid.mode"}
    payload["openid.mode"] = MODE_CHECK_AUTHENTICATION
    return payload


def is_valid_response(body: str) -> bool:
    """Return True if a check_authentication response body says ``is_valid:true``."""
    return parse_key_value_form(body).get("is_valid", "").lower() == "true"


async def check_authentication(
    params: Mapping[str, str],
    client: Optional[httpx.AsyncClient] = None,
) -> bool:
    """
    Ask Steam to confirm that it issued this assertion.

    Sends one form-encoded POST to the login endpoint. There is no retry:
    a failed round trip is reported as a failure, never as a confirmation.

    Returns:
        True if Steam answered ``is_valid:true``

    Raises:
        UpstreamTransportError: If the request fails or Steam returns a
            non-success status
    """
    payload = build_check_authentication_params(params)

    try:
        async with client_scope(client) as http:
            response = await http.post(
                AUTHORIZATION_URL,
                data=payload,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
    except httpx.HTTPError as e:
        logger.warning(f"Steam check_authentication request failed: {e}")
        raise UpstreamTransportError(
            "steam_openid",
            "check_authentication request failed",
            details={"http_error": str(e)},
        ) from e

    if not response.is_success:
        logger.warning(f"Steam check_authentication returned HTTP {response.status_code}")
        raise UpstreamTransportError(
            "steam_openid",
            f"check_authentication returned HTTP {response.status_code}",
            details={"status_code": response.status_code},
        )

    return is_valid_response(response.text)


async def verify_assertion(
    params: Mapping[str, str],
    config: ProviderConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Verify a Steam OpenID assertion and return the authenticated Steam ID.

    This function:
    1. Validates the callback parameters locally (no network on failure)
    2. Re-submits them to Steam with mode=check_authentication
    3. Extracts the Steam ID from ``openid.claimed_id`` once Steam confirms

    The ID comes from the claimed identifier rather than from Steam's reply,
    because check_authentication does not echo the identity back.

    Args:
        params: Query parameters received on the callback
        config: Provider configuration
        client: Optional shared httpx client

    Returns:
        The verified Steam ID (decimal string)

    Raises:
        AssertionRejected: If validation fails, Steam says the assertion is
            not valid, or the claimed identifier is malformed
        UpstreamTransportError: If the re-verification request fails
    """
    if not validate_assertion_params(params, config.return_to_url):
        raise AssertionRejected(details={"stage": "validation"})

    if not await check_authentication(params, client=client):
        logger.warning("Steam did not confirm the OpenID assertion")
        raise AssertionRejected(details={"stage": "check_authentication"})

    steam_id = extract_steam_id(params.get("openid.claimed_id"))
    if steam_id is None:
        logger.warning("Confirmed OpenID assertion has a malformed claimed_id")
        raise AssertionRejected(details={"stage": "claimed_id"})

    logger.info(f"Verified Steam OpenID assertion for {steam_id}", extra={"steam_id": steam_id})
    return steam_id


__all__ = [
    "PROVIDER_ID",
    "PROVIDER_NAME",
    "AUTHORIZATION_URL",
    "OPENID_NS",
    "IDENTIFIER_SELECT",
    "IDENTITY_URL_PREFIX",
    "ProviderConfig",
    "extract_steam_id",
    "build_authorization_params",
    "validate_assertion_params",
    "build_check_authentication_params",
    "is_valid_response",
    "check_authentication",
    "verify_assertion",
]
