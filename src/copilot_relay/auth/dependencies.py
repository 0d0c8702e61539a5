"""
FastAPI dependencies for the delegated-identity flow.

The caller's bearer token is forwarded to the agent as-is; it is not
validated here.

Usage:
    >>> from fastapi import Depends, APIRouter
    >>> from copilot_relay.auth.dependencies import get_bearer_token
    >>>
    >>> @router.post("/invoke")
    >>> async def invoke(token: str = Depends(get_bearer_token)):
    ...     ...
"""

from typing import Optional

from fastapi import Header

from copilot_relay.domain.exceptions import (
    InvalidAuthorizationHeader,
    MissingAuthorizationHeader,
)


def parse_bearer_token(authorization: Optional[str]) -> str:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header value.

    The header must be exactly two space-separated parts, the first being
    ``Bearer``, the second non-empty.

    Args:
        authorization: Raw Authorization header value

    Returns:
        The token

    Raises:
        MissingAuthorizationHeader: If the header is absent or empty (401)
        InvalidAuthorizationHeader: If the header is not of the expected form (400)

    Example:
        >>> parse_bearer_token("Bearer eyJhbGciOi...")
        'eyJhbGciOi...'
    """
    if not authorization:
        raise MissingAuthorizationHeader()

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise InvalidAuthorizationHeader()

    return parts[1]


def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """Dependency returning the caller's bearer token."""
    return parse_bearer_token(authorization)
