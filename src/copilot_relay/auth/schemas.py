"""
Pydantic models for token acquisition results.

A silent acquisition either yields an ``AccessToken`` or an
``Unauthenticated`` value explaining why none is available. Callers branch
on the type instead of testing for an empty string.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Default scope of the Power Platform API that fronts Copilot Studio agents
POWER_PLATFORM_SCOPE = "https://api.powerplatform.com/.default"


class AccessToken(BaseModel):
    """Bearer token acquired for the Power Platform scope."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(
        ...,
        description="Raw access token",
        min_length=1,
        repr=False
    )
    expires_in: Optional[int] = Field(
        default=None,
        description="Seconds until the token expires"
    )
    account: Optional[str] = Field(
        default=None,
        description="Username of the cached account the token was issued for"
    )

class Unauthenticated(BaseModel):
    """No token could be acquired without user interaction."""

    model_config = ConfigDict(frozen=True)

    reason: str = Field(
        ...,
        description="Why silent acquisition did not produce a token"
    )

TokenResult = Union[AccessToken, Unauthenticated]
