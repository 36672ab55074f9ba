"""
Data Models Module

Pydantic models shared by the sign-in core and the HTTP host:
- Steam player summary (raw profile) and its enums
- Normalized profile handed to the session layer
- Token-exchange credential
- Health and error response bodies
"""

from datetime import datetime
from enum import IntEnum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ============================================================================
# Steam Player Summary
# ============================================================================

class CommunityVisibilityState(IntEnum):
    """Visibility of a user's Steam community profile."""
    PRIVATE = 1
    PUBLIC = 3


class PersonaState(IntEnum):
    """A user's current presence state."""
    OFFLINE = 0
    ONLINE = 1
    BUSY = 2
    AWAY = 3
    SNOOZE = 4
    LOOKING_TO_TRADE = 5
    LOOKING_TO_PLAY = 6


class SteamProfile(BaseModel):
    """
    One record from ``GetPlayerSummaries``.

    Only ``steamid`` is guaranteed; private profiles omit most of the rest.
    Unknown fields are kept as extras so new upstream fields never break
    parsing. Enum fields fall back to the raw integer for values the enum
    does not know.

    See: https://developer.valvesoftware.com/wiki/Steam_Web_API#GetPlayerSummaries
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    steamid: str = Field(..., description="64-bit Steam ID as a decimal string", min_length=1)
    personaname: Optional[str] = Field(None, description="Display name")
    profileurl: Optional[str] = Field(None, description="Community profile URL")
    avatar: Optional[str] = Field(None, description="32x32 avatar URL")
    avatarmedium: Optional[str] = Field(None, description="64x64 avatar URL")
    avatarfull: Optional[str] = Field(None, description="184x184 avatar URL")
    avatarhash: Optional[str] = None
    communityvisibilitystate: Optional[Union[CommunityVisibilityState, int]] = None
    profilestate: Optional[int] = Field(None, description="1 when the user has a community profile")
    personastate: Optional[Union[PersonaState, int]] = None
    personastateflags: Optional[int] = None
    lastlogoff: Optional[int] = Field(None, description="Unix time of last logoff")
    primaryclanid: Optional[str] = None
    timecreated: Optional[int] = Field(None, description="Unix time of account creation")
    commentpermission: Optional[int] = Field(None, description="Comment permission flag (1 when comments are allowed)")


# ============================================================================
# Authentication Models
# ============================================================================

class NormalizedProfile(BaseModel):
    """User record handed to the session layer after sign-in."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Verified Steam ID")
    name: Optional[str] = Field(None, description="Display name")
    image: Optional[str] = Field(None, description="Avatar URL")
    email: EmailStr = Field(..., description="Synthesized address, <steam id>@steamcommunity.com")


class TokenSet(BaseModel):
    """Opaque credential produced by the token-exchange step."""
    access_token: str = Field(..., description="Opaque bearer credential")
    token_type: str = Field(default="Bearer", description="Token type")
    steam_id: str = Field(..., description="Verified Steam ID carried to the userinfo step")


# ============================================================================
# Health Check Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standardized error response model."""
    error: str = Field(..., description="Error type or code")
    message: str = Field(..., description="Human-readable error message")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
