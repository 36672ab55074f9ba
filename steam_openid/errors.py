"""
Error types for the Steam OpenID sign-in flow.

Every failure the core can produce is one of these:
- ConfigurationError: bad API key or callback URL, raised at setup
- AssertionRejected: callback parameters failed local checks, or Steam
  refused to confirm the assertion
- UpstreamTransportError: a call to Steam failed in transport or returned
  a non-success status
- ProfileResolutionError: the identity is verified but its player summary
  could not be resolved
"""

from typing import Any, Dict, Optional

from steam_openid.models import ErrorResponse


class SteamAuthError(Exception):
    """Base exception for the Steam sign-in core."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to the public error body. Details are never included."""
        return ErrorResponse(error=self.code, message=self.message)


class ConfigurationError(SteamAuthError):
    """Provider configuration is missing or invalid."""

    def __init__(self, message: str = "Invalid provider configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class AssertionRejected(SteamAuthError):
    """The OpenID assertion did not authenticate the user."""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_FAILED", message, details)


class UpstreamTransportError(SteamAuthError):
    """A request to Steam failed or returned a non-success status."""

    def __init__(self, service: str, message: str = "Upstream request failed", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("UPSTREAM_TRANSPORT_ERROR", f"{service}: {message}", details)


class ProfileResolutionError(SteamAuthError):
    """
    The player summary for a verified Steam ID could not be resolved.

    The verified ``steam_id`` stays available so the caller can still decide
    to grant a minimal session.
    """

    def __init__(self, steam_id: str, message: str = "Steam profile not found", details: Optional[Dict[str, Any]] = None):
        self.steam_id = steam_id
        super().__init__("PROFILE_RESOLUTION_ERROR", message, details)


__all__ = [
    "SteamAuthError",
    "ConfigurationError",
    "AssertionRejected",
    "UpstreamTransportError",
    "ProfileResolutionError",
]
