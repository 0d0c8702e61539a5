"""
Azure Active Directory token provider.

This module acquires Power Platform tokens silently through an MSAL public
client whose token cache is persisted by an injected ``ITokenCacheStore``.
Interactive and device-code flows are not attempted.
"""

from typing import Any, Callable, Optional

import msal

from copilot_relay.domain.exceptions import ConfigurationError
from copilot_relay.domain.models import ConnectionSettings
from copilot_relay.infrastructure.observability.logging import get_logger
from ..exceptions import TokenCacheError
from ..schemas import (
    POWER_PLATFORM_SCOPE,
    AccessToken,
    TokenResult,
    Unauthenticated,
)
from ..token_cache import ITokenCacheStore
from .base import ITokenProvider

logger = get_logger(__name__)


class AzureADTokenProvider(ITokenProvider):
    """
    Azure Active Directory token provider.

    Each acquisition runs one cycle under the store lock: load the persisted
    blob into a fresh ``msal.SerializableTokenCache``, try the first cached
    account silently, then persist the cache if MSAL changed it.
    """

    def __init__(
        self,
        cache_store: ITokenCacheStore,
        *,
        authority_host: str = "https://login.microsoftonline.com",
        scopes: Optional[list[str]] = None,
        app_factory: Callable[..., Any] = msal.PublicClientApplication,
    ) -> None:
        """
        Initialize Azure AD token provider.

        Args:
            cache_store: Persistent store for the serialized MSAL cache
            authority_host: Login host, tenant is appended per request
            scopes: Scopes to request (defaults to the Power Platform scope)
            app_factory: MSAL public client class (injectable for tests)
        """
        self.cache_store = cache_store
        self.authority_host = authority_host.rstrip("/")
        self.scopes = scopes or [POWER_PLATFORM_SCOPE]
        self._app_factory = app_factory

    def validate_configuration(self, settings: ConnectionSettings) -> None:
        """
        Validate the identity part of the connection settings.

        Raises:
            ConfigurationError: If tenant_id or app_client_id is missing
        """
        missing_fields = settings.missing_identity_fields()
        if missing_fields:
            raise ConfigurationError(
                "Azure AD configuration is incomplete",
                details={"missing_fields": missing_fields},
            )

    def acquire_token(self, settings: ConnectionSettings) -> TokenResult:
        self.validate_configuration(settings)

        with self.cache_store.lock():
            cache = msal.SerializableTokenCache()
            self._before_cache_access(cache)
            try:
                return self._acquire_silent(settings, cache)
            finally:
                self._after_cache_access(cache)

    def _before_cache_access(self, cache: msal.SerializableTokenCache) -> None:
        """
        Seed the MSAL cache from the store.

        An unreadable store counts as empty. A blob MSAL cannot parse is
        removed so later acquisitions do not trip over it again.
        """
        try:
            blob = self.cache_store.load()
        except TokenCacheError as e:
            logger.warning("Token cache unreadable, starting empty", error=str(e))
            return

        if not blob:
            return

        try:
            cache.deserialize(blob)
        except ValueError as e:
            logger.warning("Token cache corrupt, discarding it", error=str(e))
            try:
                self.cache_store.clear()
            except TokenCacheError as clear_error:
                logger.warning("Failed to discard token cache", error=str(clear_error))

    def _after_cache_access(self, cache: msal.SerializableTokenCache) -> None:
        """Persist the MSAL cache only when MSAL reports a change."""
        if not cache.has_state_changed:
            return

        try:
            self.cache_store.save(cache.serialize())
        except TokenCacheError as e:
            # The token already acquired stays valid; only the next silent call suffers
            logger.warning("Failed to persist token cache", error=str(e))

    def _acquire_silent(
        self,
        settings: ConnectionSettings,
        cache: msal.SerializableTokenCache,
    ) -> TokenResult:
        try:
            app = self._app_factory(
                client_id=settings.app_client_id,
                authority=f"{self.authority_host}/{settings.tenant_id}",
                token_cache=cache,
                enable_pii_log=False,
            )

            accounts = app.get_accounts()
            if not accounts:
                logger.info("No cached accounts for silent token acquisition")
                return Unauthenticated(reason="No cached account available")

            account = accounts[0]
            result = app.acquire_token_silent(self.scopes, account=account)

            if not result or "access_token" not in result:
                error_description = (result or {}).get(
                    "error_description",
                    (result or {}).get("error", "Silent acquisition returned no token"),
                )
                logger.warning(
                    "Silent token acquisition failed",
                    error=error_description,
                )
                return Unauthenticated(reason=error_description)

            logger.info(
                "Token acquired silently",
                username=account.get("username"),
            )
            return AccessToken(
                value=result["access_token"],
                expires_in=result.get("expires_in"),
                account=account.get("username"),
            )

        except Exception as e:
            logger.error("Error acquiring token silently", error=str(e), exc_info=True)
            return Unauthenticated(reason=f"Token acquisition failed: {e}")

    def get_provider_name(self) -> str:
        """Get provider name."""
        return "azure_ad"
