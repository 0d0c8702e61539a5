"""
Errors the relay reports to HTTP callers.

Each class fixes its HTTP status, machine-readable code and default message
as class attributes; the handlers in ``api.middleware.errors`` render them.
Token acquisition failures are not exceptions (see ``auth.schemas``), except
when the route must refuse the request because no token is available.

Usage:
    raise MissingAuthorizationHeader()
    raise RelayTransportFailure(details={"stage": "start"})
"""

from typing import Any, Optional
from copilot_relay.api.schemas.errors import ErrorCode

class AppError(Exception):
    """Base class; subclasses override ``status_code``, ``error_code`` and ``default_message``."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        """
        Args:
            message: Overrides ``default_message``
            details: Extra context rendered under ``details`` in the error body
        """
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(status_code={self.status_code}, "
            f"message={self.message!r}, details={self.details!r})"
        )


# ========================================
# Authentication Errors (401)
# ========================================

class AuthError(AppError):
    """Base class for authentication errors."""

    status_code = 401
    error_code = ErrorCode.UNAUTHORIZED
    default_message = "Authentication required"

class MissingAuthorizationHeader(AuthError):
    """No Authorization header on a delegated-identity request."""

    default_message = "Missing Authorization header"

class ServiceTokenUnavailable(AuthError):
    """Silent acquisition of the service-managed token failed."""

    error_code = ErrorCode.TOKEN_UNAVAILABLE
    default_message = "No cached account available for silent token acquisition"

# ========================================
# Validation Errors (400)
# ========================================

class InvalidRequest(AppError):
    """Request format or content is invalid."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST
    default_message = "Invalid request"

class InvalidAuthorizationHeader(InvalidRequest):
    """Authorization header is present but not 'Bearer <token>'."""

    error_code = ErrorCode.INVALID_AUTH_HEADER
    default_message = "Invalid Authorization header format"

class EmptyRequestBody(InvalidRequest):
    """Request arrived without a JSON body."""

    default_message = "Request Body is empty"

class EmptyQuery(InvalidRequest):
    """Query text is missing or empty."""

    default_message = "Query must not be empty"

# ========================================
# Configuration Errors (500)
# ========================================

class ConfigurationError(AppError):
    """Service configuration is incomplete or invalid."""

    status_code = 500
    error_code = ErrorCode.CONFIGURATION_ERROR
    default_message = "Service configuration is invalid"

# ========================================
# External Service Errors (502)
# ========================================

class RelayTransportFailure(AppError):
    """Starting or continuing a conversation with the remote agent failed."""

    status_code = 502
    error_code = ErrorCode.EXTERNAL_SERVICE_ERROR
    default_message = "Conversation with the remote agent failed"
