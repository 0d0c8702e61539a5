"""
Abstract base class for token providers.

A token provider obtains a bearer token for the Copilot Studio agent on behalf
of the service itself, without prompting anyone.
"""

from abc import ABC, abstractmethod

from starlette.concurrency import run_in_threadpool

from copilot_relay.domain.models import ConnectionSettings
from ..schemas import TokenResult


class ITokenProvider(ABC):
    """
    Abstract base class for token providers.

    Implementations must never raise for authentication failures; they report
    them as ``Unauthenticated`` so the caller decides how to proceed.
    """

    @abstractmethod
    def acquire_token(self, settings: ConnectionSettings) -> TokenResult:
        """
        Acquire a token silently.

        Args:
            settings: Connection settings identifying tenant and app

        Returns:
            AccessToken on success, Unauthenticated otherwise

        Raises:
            ConfigurationError: If the settings lack the identity fields
        """
        pass

    async def acquire_token_async(self, settings: ConnectionSettings) -> TokenResult:
        """Run ``acquire_token`` in a worker thread so the event loop is not blocked."""
        return await run_in_threadpool(self.acquire_token, settings)

    @abstractmethod
    def get_provider_name(self) -> str:
        """
        Get the name of this token provider.

        Returns:
            Provider name (e.g., 'azure_ad')
        """
        pass

    def __str__(self) -> str:
        """Return string representation of the provider."""
        return f"{self.__class__.__name__}(provider={self.get_provider_name()})"

    def __repr__(self) -> str:
        """Return detailed string representation of the provider."""
        return self.__str__()
