from typing import Optional

from fastapi import APIRouter, Body
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from copilot_relay.agent.client import AgentClient
from copilot_relay.agent.relay import ConversationRelay
from copilot_relay.api.dependencies import (
    AppSettings,
    BearerToken,
    ClientFactory,
    Relay,
    TokenProvider,
)
from copilot_relay.auth.providers import ITokenProvider
from copilot_relay.auth.schemas import Unauthenticated
from copilot_relay.domain.exceptions import (
    EmptyQuery,
    EmptyRequestBody,
    ServiceTokenUnavailable,
)
from copilot_relay.domain.models import ConnectionSettings
from copilot_relay.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class QueryRequest(BaseModel):
    """Request body carrying one user query."""

    query: Optional[str] = Field(
        None,
        description="The question to send to the agent",
        examples=["What are your opening hours?"]
    )


class ContinueRequest(QueryRequest):
    """Request body for a follow-up turn."""

    model_config = ConfigDict(populate_by_name=True)

    conversation_id: Optional[str] = Field(
        None,
        alias="conversationId",
        description="Conversation id returned by /start",
    )


class ConversationResponse(BaseModel):
    """Aggregated agent reply plus the conversation id to echo on later turns."""

    message: Optional[str] = Field(
        None,
        description="Aggregated agent reply, null when no query was sent"
    )
    conversation_id: str = Field(
        ...,
        serialization_alias="conversationId",
        description="Agent-issued conversation id"
    )


# ============================================================================
# Helpers
# ============================================================================


async def _service_token(provider: ITokenProvider, connection: ConnectionSettings) -> str:
    result = await provider.acquire_token_async(connection)
    if isinstance(result, Unauthenticated):
        raise ServiceTokenUnavailable(details={"reason": result.reason})
    return result.value


async def _start_and_ask(
    relay: ConversationRelay,
    client: AgentClient,
    query: Optional[str],
) -> ConversationResponse:
    started = await relay.start_conversation(client)
    message = await relay.ask_question(client, started.conversation_id, query)
    return ConversationResponse(message=message, conversation_id=started.conversation_id)


# ============================================================================
# Conversation Routes
# ============================================================================


@router.post(
    "/start",
    response_model=ConversationResponse,
    summary="Start a conversation",
    description="""
    Start a new conversation using the service-managed token, ask the query
    and return the aggregated reply with the new conversation id.
    """,
    responses={
        401: {"description": "No service-managed token could be acquired silently"},
        502: {"description": "The agent service call failed"},
    },
)
async def start_conversation(
    settings: AppSettings,
    provider: TokenProvider,
    factory: ClientFactory,
    relay: Relay,
    request: Optional[QueryRequest] = Body(None),
) -> ConversationResponse:
    connection = settings.connection_settings()
    token = await _service_token(provider, connection)
    client = factory.create_client(connection, token)
    return await _start_and_ask(relay, client, request.query if request else None)


@router.post(
    "/continue",
    response_class=PlainTextResponse,
    summary="Continue a conversation",
    description="""
    Ask a follow-up query on the conversation id returned by `/start`.

    Returns the aggregated reply as plain text. If either field is missing or
    empty the request is a no-op and the body is empty.

    Note: a fresh session is opened before the question is sent; the supplied
    conversation id is used only for the question itself.
    """,
    responses={
        401: {"description": "No service-managed token could be acquired silently"},
        502: {"description": "The agent service call failed"},
    },
)
async def continue_conversation(
    settings: AppSettings,
    provider: TokenProvider,
    factory: ClientFactory,
    relay: Relay,
    request: Optional[ContinueRequest] = Body(None),
) -> PlainTextResponse:
    query = request.query if request else None
    conversation_id = request.conversation_id if request else None

    if not query or not conversation_id:
        logger.info("Continue request without query or conversation id, nothing to do")
        return PlainTextResponse("")

    connection = settings.connection_settings()
    token = await _service_token(provider, connection)
    client = factory.create_client(connection, token)

    await relay.start_conversation(client)
    response = await relay.ask_question(client, conversation_id, query)
    return PlainTextResponse(response or "")


@router.post(
    "/invoke",
    response_model=ConversationResponse,
    summary="Start a conversation with the caller's token",
    description="""
    Same as `/start`, but the agent is called with the token supplied in
    `Authorization: Bearer <token>` instead of the service-managed one.
    """,
    responses={
        400: {"description": "Malformed Authorization header, empty body or empty query"},
        401: {"description": "Missing Authorization header"},
        502: {"description": "The agent service call failed"},
    },
)
async def invoke(
    token: BearerToken,
    settings: AppSettings,
    factory: ClientFactory,
    relay: Relay,
    request: Optional[QueryRequest] = Body(None),
) -> ConversationResponse:
    if request is None:
        raise EmptyRequestBody()
    if not request.query:
        raise EmptyQuery()

    connection = settings.connection_settings()
    client = factory.create_client(connection, token)
    return await _start_and_ask(relay, client, request.query)
