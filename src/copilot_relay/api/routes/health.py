"""Liveness endpoint."""
import os
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from copilot_relay.api.dependencies import AppSettings

_started_at = time.monotonic()

router = APIRouter()


class HealthResponse(BaseModel):
    status: str = Field("alive", description="Always 'alive' while the process serves requests")
    version: str = Field(..., description="Relay version")
    uptime_seconds: float = Field(..., description="Seconds since the process started")
    token_cache_present: bool = Field(
        ...,
        description="Whether a persisted token cache exists; false until someone signs in",
    )
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health(settings: AppSettings) -> HealthResponse:
    """Report that the process is up. Neither the agent nor the identity service is contacted."""
    return HealthResponse(
        version=settings.app_version,
        uptime_seconds=round(time.monotonic() - _started_at, 2),
        token_cache_present=os.path.exists(settings.token_cache_path),
    )
