"""Copilot Studio client construction and the conversation relay."""

from copilot_relay.agent.client import AgentClient, AgentClientFactory
from copilot_relay.agent.events import (
    ConversationEvent,
    EndOfConversationEvent,
    MessageEvent,
    OtherEvent,
    SuggestedAction,
    aggregate,
)
from copilot_relay.agent.relay import ConversationRelay, ConversationStart

__all__ = [
    "AgentClient",
    "AgentClientFactory",
    "ConversationEvent",
    "EndOfConversationEvent",
    "MessageEvent",
    "OtherEvent",
    "SuggestedAction",
    "aggregate",
    "ConversationRelay",
    "ConversationStart",
]
