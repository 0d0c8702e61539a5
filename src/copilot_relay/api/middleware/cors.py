"""CORS policy for browser callers of the relay."""
from urllib.parse import urlparse

from copilot_relay.config.settings import Settings
from copilot_relay.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def _check_origin(origin: str) -> None:
    parsed = urlparse(origin)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(
            f"Invalid CORS origin {origin!r}: expected scheme and host, "
            "e.g. 'http://localhost:3000'"
        )


def get_cors_middleware_config(settings: Settings) -> dict:
    """
    Build ``CORSMiddleware`` keyword arguments from settings.

    Any origin is allowed by default. Explicit origins must be full URLs.

    Raises:
        ValueError: If a configured origin is not a URL
    """
    origins = list(settings.cors_origins)
    if "*" in origins and settings.is_production:
        logger.warning("CORS allows any origin in production; set CORS_ORIGINS to restrict callers")

    for origin in origins:
        if origin != "*":
            _check_origin(origin)

    return {
        "allow_origins": origins,
        "allow_credentials": settings.cors_allow_credentials,
        "allow_methods": settings.cors_allow_methods,
        "allow_headers": settings.cors_allow_headers,
        "max_age": settings.cors_max_age,
    }
