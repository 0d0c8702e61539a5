"""Error response schemas and error codes."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """
    Standard error codes for API responses.

    Error codes are categorized by HTTP status code ranges:
    - 4xx: Client errors
    - 5xx: Server errors
    """

    # ===== Validation Errors (400) =====
    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed (400)"""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request format or content is invalid (400)"""

    INVALID_AUTH_HEADER = "INVALID_AUTH_HEADER"
    """Authorization header is not of the form 'Bearer <token>' (400)"""

    # ===== Authentication Errors (401) =====
    UNAUTHORIZED = "UNAUTHORIZED"
    """Authentication required (401)"""

    TOKEN_UNAVAILABLE = "TOKEN_UNAVAILABLE"
    """No service-managed token could be acquired silently (401)"""

    # ===== Server Errors (500) =====
    INTERNAL_ERROR = "INTERNAL_ERROR"
    """Internal server error (500)"""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Service configuration is incomplete (500)"""

    # ===== Bad Gateway (502) =====
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    """Call to the remote agent service failed (502)"""


class ErrorResponse(BaseModel):
    """
    Body returned for every error.

    ``error`` is always a plain human-readable string.
    """

    error: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Missing Authorization header"]
    )
    error_code: ErrorCode = Field(
        ...,
        description="Machine-readable error code"
    )
    request_id: Optional[str] = Field(
        default=None,
        description="Request ID for tracing"
    )
    details: Optional[dict[str, Any]] = Field(
        default=None,
        description="Additional context (omitted in production for 5xx errors)"
    )
