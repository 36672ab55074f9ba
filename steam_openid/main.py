"""
FastAPI Application Factory
===========================

Entry point for the Steam sign-in service.

Routers:
    - /auth/*   : Steam sign-in redirect, OpenID callback, provider metadata
    - /health   : Health check endpoint

Environment Variables Required:
    - STEAM_API_KEY: Steam Web API key
    - STEAM_CALLBACK_URL: Absolute callback base URL (e.g. "https://example.com/api/auth/callback")

Optional:
    - ALLOW_MINIMAL_PROFILE: Sign in without a player summary when the lookup fails (default: false)
    - HTTP_TIMEOUT_SECONDS: Timeout for calls to Steam (default: 10)
    - ALLOWED_ORIGINS: Comma-separated CORS origins
    - LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        uvicorn steam_openid.main:create_app --factory --reload --port 8080

    Production:
        uvicorn steam_openid.main:create_app --factory --host 0.0.0.0 --port 8080 --workers 4
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Dict, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from steam_openid import __version__
from steam_openid.auth import auth_router, steam_provider_from_settings
from steam_openid.config import Settings, get_settings, validate_configuration
from steam_openid.errors import ConfigurationError, SteamAuthError
from steam_openid.models import HealthResponse


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup tasks:
        - Validate configuration
        - Open the shared httpx client used for calls to Steam
        - Build the Steam provider descriptor

    Shutdown tasks:
        - Close the shared httpx client
    """
    settings: Settings = app.state.settings

    setup_logging(settings.LOG_LEVEL)
    logger = logging.getLogger("steam_openid.main")

    status = validate_configuration(settings)
    for warning in status["warnings"]:
        logger.warning(f"Configuration warning: {warning}")
    if not status["valid"]:
        raise ConfigurationError("Invalid configuration", details={"errors": status["errors"]})

    http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
    app.state.http_client = http_client
    try:
        app.state.provider = steam_provider_from_settings(settings, client=http_client)

        logger.info(
            "Steam sign-in service started",
            extra={
                "realm": app.state.provider.config.realm,
                "return_to": app.state.provider.config.return_to_url,
                "allow_minimal_profile": settings.ALLOW_MINIMAL_PROFILE,
            }
        )

        yield

        logger.info("Shutting down Steam sign-in service")
    finally:
        await http_client.aclose()
        app.state.provider = None


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory function.

    Args:
        settings: Settings to use; loaded from the environment when omitted

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Steam Sign-in Service",
        description="Steam OpenID 2.0 sign-in with Steam Web API profile lookup",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.provider = None

    if settings.allowed_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins_list,
            allow_credentials=True,
            allow_methods=["GET", "OPTIONS"],
            allow_headers=["*"],
        )

    app.include_router(auth_router)

    @app.get("/health", tags=["System"], response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        return HealthResponse(status="ok", service="steam-openid")

    @app.get("/", tags=["System"])
    async def root() -> Dict[str, object]:
        return {
            "service": "steam-openid",
            "version": __version__,
            "endpoints": {
                "health": "/health",
                "signin": "/auth/signin/steam",
                "callback": "/auth/callback/steam",
                "providers": "/auth/providers",
            },
        }

    @app.exception_handler(SteamAuthError)
    async def steam_auth_error_handler(request: Request, exc: SteamAuthError) -> JSONResponse:
        logging.getLogger("steam_openid.main").error(
            f"Unhandled sign-in error: {exc.code}",
            extra={"path": request.url.path, "details": exc.details},
        )
        return JSONResponse(status_code=500, content=exc.to_response().model_dump(mode="json"))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Log unhandled errors and return a standardized error response.
        """
        logging.getLogger("steam_openid.main").error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__
            },
            exc_info=True
        )

        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
            }
        )

    return app


if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "steam_openid.main:create_app",
        factory=True,
        host=settings.SERVICE_HOST,
        port=settings.SERVICE_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
