"""
Per-request id for log correlation.

The id is bound into structlog's context variables for the duration of the
request, so every log line emitted while relaying a turn carries it.
"""
import time
import uuid
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

logger = structlog.get_logger(__name__)


def is_valid_uuid(value: str) -> bool:
    """Return True if ``value`` is a canonical UUID4 string."""
    try:
        parsed = uuid.UUID(value, version=4)
    except (ValueError, AttributeError):
        return False
    return str(parsed) == value


def resolve_request_id(incoming: Optional[str]) -> str:
    """Reuse the caller's request id when it is a UUID4, otherwise mint one."""
    if incoming and is_valid_uuid(incoming):
        return incoming
    if incoming:
        logger.warning("Ignoring malformed request id", received=incoming)
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id.

    The id is stored on ``request.state`` for the error handlers, bound into
    the logging context, and echoed in the ``X-Request-ID`` response header.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        started = time.perf_counter()

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            path=request.url.path,
        ):
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
