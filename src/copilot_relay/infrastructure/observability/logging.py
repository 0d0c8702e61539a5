"""
Structured logging configuration.

Use `get_logger(__name__)` from this module, not print().

Bearer tokens and the serialized MSAL cache must never reach a log sink, so a
redaction processor runs before rendering.
"""
import logging
from typing import Any, Optional
import structlog
from copilot_relay.config.settings import get_settings


REDACTED = "****"

# Key fragments whose string values are redacted (case-insensitive)
SENSITIVE_KEYS = (
    "token",
    "auth",
    "secret",
    "password",
    "bearer",
    "blob",
)


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(fragment in lowered for fragment in SENSITIVE_KEYS)


def redact(value: Any, key: str = "") -> Any:
    """
    Return ``value`` with sensitive strings replaced.

    Dicts and lists are walked; a string is replaced when the key it is stored
    under looks sensitive. Empty strings are left as they are.

    Example:
        >>> redact({"access_token": "eyJ0", "conversation_id": "c1"})
        {'access_token': '****', 'conversation_id': 'c1'}
    """
    if isinstance(value, dict):
        return {k: redact(v, str(k)) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact(item, key) for item in value]
    if isinstance(value, str) and value and is_sensitive_key(key):
        return REDACTED
    return value


def redact_processor(logger_obj: Any, method_name: str, event_dict: dict) -> dict:
    """Structlog processor redacting keyword fields; the event message is kept."""
    return {
        key: value if key == "event" else redact(value, key)
        for key, value in event_dict.items()
    }


def configure_logging() -> None:
    """
    Configure structlog and the standard library logging used by msal.

    Log lines carry the bound request context (see RequestIDMiddleware), an
    ISO timestamp and the level, and are rendered as JSON or, for local
    development, as colored console output.
    """
    settings = get_settings()

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_processor,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(settings.log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s %(message)s")
    logging.getLogger("msal").setLevel(settings.msal_log_level)


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Get a structured logger.

    Usage:
        >>> logger = get_logger(__name__)
        >>> logger.info("Conversation started", conversation_id="abc")
    """
    return structlog.get_logger(name)
