# tests/conftest.py
"""
Main pytest configuration and shared fixtures for all tests.

This module provides:
- Settings override for the test environment
- FastAPI app and async HTTP client
- Test doubles for the token provider, token cache store and agent client
- Helpers for building activities as the client library yields them
"""

from types import SimpleNamespace
from typing import Any, AsyncGenerator, Optional

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from copilot_relay.agent.client import AgentClientFactory
from copilot_relay.api.app import create_app
from copilot_relay.api.dependencies import (
    get_client_factory,
    get_relay,
    get_token_provider,
)
from copilot_relay.agent.relay import ConversationRelay
from copilot_relay.auth.providers.base import ITokenProvider
from copilot_relay.auth.schemas import AccessToken, TokenResult
from copilot_relay.auth.token_cache import ITokenCacheStore
from copilot_relay.config.settings import Settings, get_settings
from copilot_relay.domain.models import ConnectionSettings


# ============================================================================
# Activities
# ============================================================================


def make_activity(
    type: str,
    text: Optional[str] = None,
    actions: Optional[list[Any]] = None,
    conversation_id: Optional[str] = None,
) -> SimpleNamespace:
    """
    Build an object shaped like a Copilot Studio activity.

    Usage:
        make_activity("message", "hi there", actions=["Yes"], conversation_id="conv-1")
    """
    return SimpleNamespace(
        type=type,
        text=text,
        suggested_actions=(
            SimpleNamespace(actions=[SimpleNamespace(value=value) for value in actions])
            if actions is not None
            else None
        ),
        conversation=SimpleNamespace(id=conversation_id) if conversation_id else None,
    )


# ============================================================================
# Test Doubles
# ============================================================================


class FakeAgentClient:
    """Agent client double recording every call."""

    def __init__(
        self,
        start_activities: Optional[list[Any]] = None,
        reply_activities: Optional[list[Any]] = None,
        start_error: Optional[Exception] = None,
        ask_error: Optional[Exception] = None,
    ) -> None:
        self.start_activities = start_activities if start_activities is not None else [
            make_activity("event", conversation_id="conv-1"),
            make_activity("message", "Welcome!", actions=["Help"], conversation_id="conv-1"),
        ]
        self.reply_activities = reply_activities or []
        self.start_error = start_error
        self.ask_error = ask_error
        self.start_calls: list[bool] = []
        self.questions: list[tuple[str, Optional[str]]] = []

    async def start_conversation(self, emit_start_conversation_event: bool = True):
        self.start_calls.append(emit_start_conversation_event)
        if self.start_error:
            raise self.start_error
        for activity in self.start_activities:
            yield activity

    async def ask_question(self, question: str, conversation_id: Optional[str] = None):
        self.questions.append((question, conversation_id))
        if self.ask_error:
            raise self.ask_error
        for activity in self.reply_activities:
            yield activity


class RecordingClientBuilder:
    """Client builder for AgentClientFactory that hands out one fake client."""

    def __init__(self, client: FakeAgentClient) -> None:
        self.client = client
        self.calls: list[tuple[ConnectionSettings, str]] = []

    def __call__(self, settings: ConnectionSettings, token: str) -> FakeAgentClient:
        self.calls.append((settings, token))
        return self.client


class FakeTokenProvider(ITokenProvider):
    """Token provider returning a fixed result."""

    def __init__(self, result: TokenResult) -> None:
        self.result = result
        self.calls: list[ConnectionSettings] = []

    def acquire_token(self, settings: ConnectionSettings) -> TokenResult:
        self.calls.append(settings)
        return self.result

    def get_provider_name(self) -> str:
        return "fake"


class InMemoryTokenCacheStore(ITokenCacheStore):
    """Token cache store keeping the blob in memory."""

    def __init__(self, blob: Optional[str] = None) -> None:
        self.blob = blob
        self.saved: list[str] = []

    def load(self) -> Optional[str]:
        return self.blob

    def save(self, blob: str) -> None:
        self.saved.append(blob)
        self.blob = blob

    def clear(self) -> None:
        self.blob = None


# ============================================================================
# Settings and Configuration
# ============================================================================


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """
    Test settings with a complete connection configuration.

    The token cache lives in the test's temporary directory.
    """
    return Settings(
        app_name="Copilot Relay Test",
        app_version="0.1.0-test",
        environment="local",
        debug=True,
        tenant_id="tenant-123",
        app_client_id="client-123",
        environment_id="env-123",
        agent_identifier="cr123_agent",
        token_cache_path=str(tmp_path / "tokencache.json"),
        log_level=40,  # ERROR level to reduce noise in tests
    )


@pytest.fixture
def connection_settings(test_settings: Settings) -> ConnectionSettings:
    return test_settings.connection_settings()


# ============================================================================
# Doubles
# ============================================================================


@pytest.fixture
def agent_client() -> FakeAgentClient:
    """Fake agent replying with one message carrying a suggested action."""
    return FakeAgentClient(
        reply_activities=[
            make_activity("typing"),
            make_activity("message", "hi there", actions=["Yes"], conversation_id="conv-1"),
        ]
    )


@pytest.fixture
def client_builder(agent_client: FakeAgentClient) -> RecordingClientBuilder:
    return RecordingClientBuilder(agent_client)


@pytest.fixture
def token_provider() -> FakeTokenProvider:
    return FakeTokenProvider(AccessToken(value="service-token"))


# ============================================================================
# FastAPI Application and Client
# ============================================================================


@pytest.fixture
def app(
    test_settings: Settings,
    token_provider: FakeTokenProvider,
    client_builder: RecordingClientBuilder,
) -> FastAPI:
    """
    Create FastAPI application for testing.

    Settings, token provider and client factory are replaced by test doubles;
    the conversation relay is the real one.
    """
    application = create_app(test_settings)
    application.dependency_overrides[get_settings] = lambda: test_settings
    application.dependency_overrides[get_token_provider] = lambda: token_provider
    application.dependency_overrides[get_client_factory] = (
        lambda: AgentClientFactory(builder=client_builder)
    )
    application.dependency_overrides[get_relay] = ConversationRelay
    return application


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for testing FastAPI endpoints.

    Usage:
        async def test_endpoint(async_client):
            response = await async_client.post("/start", json={"query": "hello"})
            assert response.status_code == 200
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers() -> dict:
    """Delegated-identity headers for /invoke."""
    return {"Authorization": "Bearer caller-token"}
