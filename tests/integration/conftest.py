"""Integration test fixtures.

This module provides shared fixtures for integration tests including:
- Route/handler tests with stubbed dependencies (shallow app setup)
- Real chat graphs driven by the scripted model
"""

from collections.abc import AsyncIterator, Callable, Generator
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from langchain_core.tools import BaseTool

from agentic_chat_stream.agents.chat.agent import ChatAgentBuilder
from agentic_chat_stream.agents.chat.routes import chat_router, chats_router
from agentic_chat_stream.platform.agent.config import AgentConfig, AgentIdentity, LlmConfig
from agentic_chat_stream.platform.agent.langgraph import LangGraphChatAgent
from agentic_chat_stream.platform.agent.messages import (
    ConversationState,
    Message,
    Role,
    StreamEvent,
    TokenDelta,
    TurnComplete,
)
from agentic_chat_stream.platform.database.store import InMemoryChatStore
from agentic_chat_stream.platform.security.auth import Unauthorized
from agentic_chat_stream.platform.server.health import HealthCheck
from agentic_chat_stream.platform.server.routes import root as root_router

# =============================================================================
# Agent Fixtures
# =============================================================================


@pytest.fixture
def build_chat_agent(stub_agent_identity: AgentIdentity) -> Callable[..., Any]:
    """Factory building a real chat graph around a scripted model.

    Example:
        agent = await build_chat_agent(model, [search_tool], max_reasoning_steps=2)
    """

    async def build(
        model: Any,
        tools: list[BaseTool] | None = None,
        **config: Any,
    ) -> LangGraphChatAgent:
        builder = ChatAgentBuilder(
            agent_config=AgentConfig(**config),
            llm_config=LlmConfig(model=model.model_name),
            mcp_configs=[],
            identity=stub_agent_identity,
            tool_fetcher=AsyncMock(return_value=list(tools or [])),
            llm=model,
        )
        return await builder.build()

    return build


def conversation_of(*contents: str, thread_id: str = "chat-1") -> ConversationState:
    """Alternate user/assistant messages, starting and ending with the user."""
    conversation = ConversationState(thread_id=thread_id)
    for index, content in enumerate(contents):
        role = Role.USER if index % 2 == 0 else Role.ASSISTANT
        conversation.append(Message(role=role, content=content))
    return conversation


@pytest.fixture
def stub_agent(stub_agent_identity: AgentIdentity) -> Mock:
    """Create a stub agent that streams a canned two-token reply.

    This is a stub (not a mock) because it primarily provides predetermined
    events. The conversations it receives are kept in ``seen``.
    """
    agent = Mock()
    agent.identity = stub_agent_identity
    agent.name = stub_agent_identity.name
    agent.slug = stub_agent_identity.slug
    agent.seen = []

    async def run_stream(conversation: ConversationState) -> AsyncIterator[StreamEvent]:
        agent.seen.append(list(conversation.messages))
        yield TokenDelta("Hel")
        yield TokenDelta("lo")
        conversation.append(Message(role=Role.ASSISTANT, content="Hello"))
        yield TurnComplete()

    agent.run_stream = run_stream
    return agent


@pytest.fixture
def failing_agent(stub_agent_identity: AgentIdentity) -> Mock:
    """Create a stub agent whose model fails after the first token."""
    agent = Mock()
    agent.identity = stub_agent_identity
    agent.slug = stub_agent_identity.slug

    async def run_stream(conversation: ConversationState) -> AsyncIterator[StreamEvent]:
        yield TokenDelta("Par")
        raise RuntimeError("upstream model unavailable")

    agent.run_stream = run_stream
    return agent


# =============================================================================
# FastAPI App Fixtures (Shallow - no middleware, minimal lifespan)
# =============================================================================


class StubTokenVerifier:
    """Accepts a fixed set of opaque tokens instead of signed JWTs."""

    tokens = {"alice-token": "alice", "bob-token": "bob"}

    async def verify(self, token: str) -> str:
        try:
            return self.tokens[token]
        except KeyError as e:
            raise Unauthorized("unknown token") from e


@pytest.fixture
def stub_settings() -> Mock:
    """Create stub settings with canned configuration values."""
    settings = Mock()
    settings.chat.stream_buffer_size = 16
    return settings


@pytest.fixture
def test_app(stub_agent: Mock, memory_store: InMemoryChatStore, stub_settings: Mock) -> FastAPI:
    """Create a minimal test FastAPI app for integration tests.

    This is intentionally SHALLOW - no middleware, no full lifespan.
    Tests route handlers and their interaction with dependencies.
    """
    app = FastAPI()

    app.state.agents = {ChatAgentBuilder: stub_agent}
    app.state.chat_store = memory_store
    app.state.settings = stub_settings
    app.state.token_verifier = StubTokenVerifier()

    app.include_router(root_router)
    app.include_router(chat_router)
    app.include_router(chats_router)

    return app


@pytest.fixture
def client(test_app: FastAPI) -> TestClient:
    """Create a test client for the test app.

    No context manager needed since we're not using lifespan.
    """
    return TestClient(test_app)


@pytest.fixture
def alice() -> dict[str, str]:
    return {"Authorization": "Bearer alice-token"}


@pytest.fixture
def bob() -> dict[str, str]:
    return {"Authorization": "Bearer bob-token"}


@pytest.fixture
def client_with_health_enabled(test_app: FastAPI) -> Generator[TestClient]:
    """Create a test client with health checks enabled."""
    HealthCheck.enable()
    yield TestClient(test_app)
    HealthCheck.disable()


@pytest.fixture
def client_with_health_disabled(test_app: FastAPI) -> Generator[TestClient]:
    """Create a test client with health checks disabled."""
    HealthCheck.disable()
    yield TestClient(test_app)


@pytest.fixture
def make_conversation() -> Callable[..., ConversationState]:
    return conversation_of
