"""
Conversation relay between HTTP callers and a Copilot Studio agent.

The relay is stateless: the conversation id issued on start is returned to
the caller, who must echo it on later turns. No retries are attempted; any
failure talking to the agent surfaces as ``RelayTransportFailure``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterable, Optional

from copilot_relay.agent.client import AgentClient
from copilot_relay.agent.events import ConversationEvent, aggregate, event_from_activity
from copilot_relay.domain.exceptions import RelayTransportFailure
from copilot_relay.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConversationStart:
    """Outcome of opening a conversation."""
    conversation_id: str
    events: tuple[ConversationEvent, ...]


def _conversation_id_of(activity: Any) -> Optional[str]:
    conversation = getattr(activity, "conversation", None)
    return getattr(conversation, "id", None) or None


async def _collect(activities: AsyncIterable[Any]) -> list[Any]:
    return [activity async for activity in activities]


class ConversationRelay:
    """Starts conversations and forwards single questions to an agent."""

    async def start_conversation(self, client: AgentClient) -> ConversationStart:
        """
        Open a new conversation, asking the agent to emit its welcome events.

        Returns:
            The agent-issued conversation id and the initial events

        Raises:
            RelayTransportFailure: If the agent call fails or no conversation id is issued
        """
        try:
            activities = await _collect(
                client.start_conversation(emit_start_conversation_event=True)
            )
        except Exception as e:
            logger.error("Failed to start conversation", error=str(e), exc_info=True)
            raise RelayTransportFailure(
                "Failed to start conversation with the agent",
                details={"stage": "start"},
            ) from e

        conversation_id = next(
            (cid for cid in map(_conversation_id_of, activities) if cid),
            None,
        )
        if conversation_id is None:
            raise RelayTransportFailure(
                "Agent did not issue a conversation id",
                details={"stage": "start", "activity_count": len(activities)},
            )

        logger.info(
            "Conversation started",
            conversation_id=conversation_id,
            activity_count=len(activities),
        )
        return ConversationStart(
            conversation_id=conversation_id,
            events=tuple(event_from_activity(activity) for activity in activities),
        )

    async def ask_question(
        self,
        client: AgentClient,
        conversation_id: Optional[str],
        query: Optional[str],
    ) -> Optional[str]:
        """
        Send one query and aggregate the agent's reply.

        An absent or empty query is a no-op: None is returned and the agent
        is not contacted.

        Raises:
            RelayTransportFailure: If the agent call fails
        """
        if not query:
            return None

        try:
            activities = await _collect(client.ask_question(query, conversation_id))
        except Exception as e:
            logger.error(
                "Failed to ask question",
                conversation_id=conversation_id,
                error=str(e),
                exc_info=True,
            )
            raise RelayTransportFailure(
                "Failed to continue conversation with the agent",
                details={"stage": "ask", "conversation_id": conversation_id},
            ) from e

        events = [event_from_activity(activity) for activity in activities]
        logger.info(
            "Agent replied",
            conversation_id=conversation_id,
            event_count=len(events),
        )
        return aggregate(events)
