"""
Token provider factory.

This module builds the process-wide token provider from application settings.
"""

from copilot_relay.config.settings import Settings
from copilot_relay.infrastructure.observability.logging import get_logger
from ..token_cache import FileTokenCacheStore, ITokenCacheStore
from .base import ITokenProvider
from .azure_ad import AzureADTokenProvider

logger = get_logger(__name__)


def create_token_provider(
    settings: Settings,
    cache_store: ITokenCacheStore | None = None,
) -> ITokenProvider:
    """
    Create the service-managed token provider.

    Args:
        settings: Application settings
        cache_store: Token cache store (defaults to a file store at settings.token_cache_path)

    Returns:
        Azure AD token provider bound to the cache store
    """
    if cache_store is None:
        cache_store = FileTokenCacheStore(settings.token_cache_path)

    logger.info(
        "Creating Azure AD token provider",
        cache_store=repr(cache_store),
    )
    return AzureADTokenProvider(
        cache_store,
        authority_host=settings.authority_host,
    )


__all__ = [
    "ITokenProvider",
    "AzureADTokenProvider",
    "create_token_provider",
]
