"""
Construction of Copilot Studio client handles.

The factory binds connection settings and a bearer token into a client. It
does not validate the token; the agent service rejects calls made with an
invalid one. Whether the token came from the service-managed provider or from
the caller's Authorization header is decided by the route, not here.
"""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from typing import Any, AsyncIterable, Callable, Optional, Protocol

from copilot_relay.domain.exceptions import ConfigurationError
from copilot_relay.domain.models import ConnectionSettings
from copilot_relay.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

CLIENT_DISTRIBUTION = "microsoft-agents-copilotstudio-client"


class AgentClient(Protocol):
    """Client handle bound to one agent and one bearer token."""

    def start_conversation(
        self, emit_start_conversation_event: bool = True
    ) -> AsyncIterable[Any]:
        ...

    def ask_question(
        self, question: str, conversation_id: Optional[str] = None
    ) -> AsyncIterable[Any]:
        ...


ClientBuilder = Callable[[ConnectionSettings, str], AgentClient]


def client_library_version() -> str:
    """Installed version of the Copilot Studio client library."""
    try:
        return version(CLIENT_DISTRIBUTION)
    except PackageNotFoundError:
        return "unknown"


def build_copilot_client(settings: ConnectionSettings, token: str) -> AgentClient:
    """
    Build a ``CopilotClient`` from the Microsoft Agents SDK.

    Raises:
        ConfigurationError: If ``cloud`` or ``copilot_agent_type`` is not a
            value the client library recognizes
    """
    from microsoft_agents.copilotstudio.client import (
        AgentType,
        ConnectionSettings as CopilotConnectionSettings,
        CopilotClient,
        PowerPlatformCloud,
    )

    try:
        cloud = PowerPlatformCloud(settings.cloud) if settings.cloud else None
        agent_type = (
            AgentType(settings.copilot_agent_type)
            if settings.copilot_agent_type
            else None
        )
    except ValueError as e:
        raise ConfigurationError(
            "Unrecognized Copilot Studio cloud or agent type",
            details={"cloud": settings.cloud, "copilot_agent_type": settings.copilot_agent_type},
        ) from e

    library_settings = CopilotConnectionSettings(
        environment_id=settings.environment_id,
        agent_identifier=settings.agent_identifier,
        cloud=cloud,
        copilot_agent_type=agent_type,
        custom_power_platform_cloud=settings.custom_power_platform_cloud,
    )
    return CopilotClient(library_settings, token)


class AgentClientFactory:
    """Creates one client handle per request."""

    def __init__(self, builder: Optional[ClientBuilder] = None) -> None:
        """
        Args:
            builder: Callable taking (settings, token) and returning a client.
                Defaults to the Copilot Studio client library.
        """
        self._builder = builder or build_copilot_client

    def create_client(self, settings: ConnectionSettings, token: str) -> AgentClient:
        client = self._builder(settings, token)
        logger.info(
            "Copilot Studio client created",
            client_version=client_library_version(),
            settings=settings.model_dump(),
        )
        return client
