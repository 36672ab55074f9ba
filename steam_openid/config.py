"""
Configuration module for the Steam sign-in service.

This module uses Pydantic Settings to load and validate environment variables
for the Steam Web API key, the OpenID callback URL, outbound HTTP behaviour
and the server itself.

Environment variables are loaded from .env file or system environment.
"""

from functools import lru_cache
from typing import List, Optional
from urllib.parse import urlsplit

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    # =========================================================================
    # Steam Configuration
    # =========================================================================

    STEAM_API_KEY: str = Field(
        ...,
        description="Steam Web API key (https://steamcommunity.com/dev/apikey)",
        min_length=1,
    )

    STEAM_CALLBACK_URL: str = Field(
        ...,
        description="Absolute callback base URL (e.g., https://example.com/api/auth/callback)",
        min_length=1,
    )

    # =========================================================================
    # Sign-in Policy
    # =========================================================================

    ALLOW_MINIMAL_PROFILE: bool = Field(
        default=False,
        description="Sign the user in with a minimal profile when the player summary lookup fails",
    )

    # =========================================================================
    # Outbound HTTP
    # =========================================================================

    HTTP_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Timeout for calls to Steam made through the shared client",
        ge=1,
        le=120,
    )

    # =========================================================================
    # Server Configuration
    # =========================================================================

    SERVICE_HOST: str = Field(default="0.0.0.0", description="Host to bind the server")

    SERVICE_PORT: int = Field(default=8080, description="Port to bind the server", ge=1, le=65535)

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    ALLOWED_ORIGINS: Optional[str] = Field(
        None,
        description="Comma-separated list of allowed CORS origins (leave empty for no CORS)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def allowed_origins_list(self) -> List[str]:
        """
        Parse and return ALLOWED_ORIGINS as a list.

        Returns:
            List of allowed origin URLs, or empty list if not configured.
        """
        if not self.ALLOWED_ORIGINS:
            return []

        return [
            origin.strip()
            for origin in self.ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("STEAM_CALLBACK_URL")
    @classmethod
    def validate_callback_url(cls, v: str) -> str:
        """
        Validate that the callback URL is an absolute http(s) URL.

        Raises:
            ValueError: If the URL has no scheme or host
        """
        parts = urlsplit(v.strip())
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ValueError(
                f"Invalid callback URL: '{v}'. "
                "Expected an absolute URL such as 'https://example.com/api/auth/callback'"
            )
        return v.strip()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}, got: {v}")
        return v.upper()


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    Raises:
        ValidationError: If required environment variables are missing
                        or invalid.
    """
    return Settings()


# =============================================================================
# Configuration Helpers
# =============================================================================

def validate_configuration(settings: Settings) -> dict:
    """
    Validate critical configuration settings and return a status report.

    Called during application startup.

    Example:
        >>> status = validate_configuration(get_settings())
        >>> if not status["valid"]:
        ...     print(status["errors"])
    """
    errors = []
    warnings = []

    if not settings.STEAM_API_KEY.strip():
        errors.append("STEAM_API_KEY is blank")

    callback = urlsplit(settings.STEAM_CALLBACK_URL)
    if callback.scheme != "https":
        warnings.append("STEAM_CALLBACK_URL is not HTTPS")
    if callback.hostname in ("localhost", "127.0.0.1"):
        warnings.append("STEAM_CALLBACK_URL points to localhost (Steam cannot reach it from other machines)")
    if callback.query or callback.fragment:
        errors.append("STEAM_CALLBACK_URL must not carry a query string or fragment")

    if settings.ALLOW_MINIMAL_PROFILE:
        warnings.append("ALLOW_MINIMAL_PROFILE is on; users may be signed in without a Steam profile")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }
