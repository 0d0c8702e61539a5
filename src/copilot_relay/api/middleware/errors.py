"""
Error handlers for the relay application.

Every error body has the shape::

    {"error": "<message>", "error_code": "<CODE>", "request_id": "<uuid>"}

plus an optional ``details`` object, which is dropped for 5xx responses in
production.
"""

from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from copilot_relay.api.schemas.errors import ErrorCode, ErrorResponse
from copilot_relay.config.settings import Settings, get_settings
from copilot_relay.domain.exceptions import AppError
from copilot_relay.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def error_response(
    request: Request,
    status_code: int,
    error_code: ErrorCode,
    message: str,
    details: Optional[dict[str, Any]] = None,
    hide_details: bool = False,
) -> JSONResponse:
    """Build the JSON error response for ``request``."""
    body = ErrorResponse(
        error=message,
        error_code=error_code,
        request_id=getattr(request.state, "request_id", None),
        details=None if hide_details else (details or None),
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


def _log_error(request: Request, error: Exception, status_code: int) -> None:
    """Server errors are logged with traceback, auth failures as warnings."""
    context = {
        "method": request.method,
        "status_code": status_code,
        "error_type": type(error).__name__,
    }
    if status_code >= 500:
        logger.error(f"Relay error: {error}", exc_info=error, **context)
    elif status_code == 401:
        logger.warning(f"Rejected request: {error}", **context)
    else:
        logger.info(f"Bad request: {error}", **context)


def register_error_handlers(app: FastAPI, settings: Optional[Settings] = None) -> None:
    """
    Install the error handlers on ``app``.

    Args:
        app: FastAPI application instance
        settings: Application settings (defaults to get_settings())
    """
    settings = settings or get_settings()

    def hide(status_code: int) -> bool:
        return settings.is_production and status_code >= 500

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        _log_error(request, exc, exc.status_code)
        return error_response(
            request,
            exc.status_code,
            exc.error_code,
            exc.message,
            details=exc.details,
            hide_details=hide(exc.status_code),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Malformed bodies are reported as 400, not FastAPI's default 422."""
        _log_error(request, exc, status.HTTP_400_BAD_REQUEST)
        fields = [
            ".".join(str(part) for part in error.get("loc", ()))
            for error in exc.errors()
        ]
        return error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            details={"fields": fields},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        _log_error(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR)
        return error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorCode.INTERNAL_ERROR,
            "Server error",
            details={"exception_type": type(exc).__name__},
            hide_details=hide(status.HTTP_500_INTERNAL_SERVER_ERROR),
        )
