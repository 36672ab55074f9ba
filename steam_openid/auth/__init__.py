"""
Authentication Package

This package implements sign-in through Steam's OpenID 2.0 endpoint and
resolves the verified Steam ID into a user profile via the Steam Web API.

Modules:
- openid: provider configuration, redirect parameters, assertion
  validation and check_authentication re-verification
- profile: player summary lookup and profile mapping
- provider: the provider descriptor handed to the host
- routes: HTTP endpoints (/auth/signin/steam, /auth/callback/steam)
- utils: httpx client scoping and key-value form parsing

The authentication flow:
1. Client is redirected to Steam via /auth/signin/steam
2. User signs in on steamcommunity.com
3. Steam redirects back to /auth/callback/steam with the assertion
4. Service checks the assertion locally, then asks Steam to confirm it
5. Service fetches the player summary and returns the normalized profile
"""

from .provider import ProviderDescriptor, steam_provider, steam_provider_from_settings
from .routes import auth_router

__all__ = [
    "auth_router",
    "ProviderDescriptor",
    "steam_provider",
    "steam_provider_from_settings",
]
