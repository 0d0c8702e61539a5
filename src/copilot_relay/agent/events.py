"""
Conversation events and the reply aggregator.

Raw activities from the Copilot Studio client are converted once, at the
boundary, into tagged events. Optional activity fields (text, suggested
actions) are resolved there so the aggregator never has to check for them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

# Activity type names as they appear on the wire
MESSAGE = "message"
END_OF_CONVERSATION = "endOfConversation"


@dataclass(frozen=True)
class SuggestedAction:
    """Follow-up option proposed by the agent."""
    value: str


@dataclass(frozen=True)
class MessageEvent:
    """Agent message, possibly with suggested actions."""
    text: str
    actions: tuple[SuggestedAction, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EndOfConversationEvent:
    """Agent ended the conversation; may carry trailing text."""
    text: str


@dataclass(frozen=True)
class OtherEvent:
    """Any other activity (typing, event, trace, ...). Ignored by the aggregator."""
    kind: Optional[str]


ConversationEvent = Union[MessageEvent, EndOfConversationEvent, OtherEvent]


def _activity_kind(activity: Any) -> Optional[str]:
    kind = getattr(activity, "type", None)
    # ActivityTypes members are str enums; compare on their value
    return getattr(kind, "value", kind)


def _render(value: Any) -> str:
    return "" if value is None else str(value)


def event_from_activity(activity: Any) -> ConversationEvent:
    """
    Convert one activity into a tagged event.

    Args:
        activity: Activity object from the client library (or any object
            exposing ``type``, ``text`` and ``suggested_actions``)

    Returns:
        The matching ConversationEvent variant
    """
    kind = _activity_kind(activity)

    if kind == MESSAGE:
        suggested = getattr(activity, "suggested_actions", None)
        actions = getattr(suggested, "actions", None) or []
        return MessageEvent(
            text=_render(getattr(activity, "text", None)),
            actions=tuple(
                SuggestedAction(value=_render(getattr(action, "value", None)))
                for action in actions
            ),
        )

    if kind == END_OF_CONVERSATION:
        return EndOfConversationEvent(text=_render(getattr(activity, "text", None)))

    return OtherEvent(kind=kind)


def render_event(event: ConversationEvent) -> str:
    """Render the contribution of a single event to the aggregated reply."""
    if isinstance(event, MessageEvent):
        return f"\n{event.text}" + "".join(action.value for action in event.actions)
    if isinstance(event, EndOfConversationEvent):
        return f"\n{event.text}"
    return ""


def aggregate(events: Iterable[ConversationEvent]) -> str:
    """
    Fold events into one reply, preserving delivery order.

    Every message and end-of-conversation event contributes a newline plus its
    text; a message's suggested action values follow its text directly, with
    no separator. Other events contribute nothing.

    Example:
        >>> aggregate([MessageEvent("hi there", (SuggestedAction("Yes"),))])
        '\\nhi thereYes'
    """
    return "".join(render_event(event) for event in events)
