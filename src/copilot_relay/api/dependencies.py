from functools import lru_cache
from typing import Annotated
from fastapi import Depends

from copilot_relay.agent.client import AgentClientFactory
from copilot_relay.agent.relay import ConversationRelay
from copilot_relay.auth.dependencies import get_bearer_token
from copilot_relay.auth.providers import ITokenProvider, create_token_provider
from copilot_relay.config.settings import Settings, get_settings


@lru_cache
def get_token_provider() -> ITokenProvider:
    """Process-wide token provider; its cache store lock must be shared by all requests."""
    return create_token_provider(get_settings())


@lru_cache
def get_client_factory() -> AgentClientFactory:
    return AgentClientFactory()


@lru_cache
def get_relay() -> ConversationRelay:
    return ConversationRelay()


# Type aliases for clean injection
AppSettings = Annotated[Settings, Depends(get_settings)]
TokenProvider = Annotated[ITokenProvider, Depends(get_token_provider)]
ClientFactory = Annotated[AgentClientFactory, Depends(get_client_factory)]
Relay = Annotated[ConversationRelay, Depends(get_relay)]
BearerToken = Annotated[str, Depends(get_bearer_token)]
