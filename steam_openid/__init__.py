"""
Steam OpenID Sign-in Service
============================

Signs users in through Steam's OpenID 2.0 endpoint and resolves the verified
Steam ID into a profile through the Steam Web API.

Packages:
    - auth: OpenID assertion handling, profile lookup, provider descriptor, routes

Modules:
    - config: environment settings
    - errors: error types raised by the sign-in core
    - models: Steam player summary and normalized profile models
    - main: FastAPI application factory
"""

__version__ = "1.0.0"
