"""Shared test fixtures.

This module provides fakes used by unit and integration tests:
- A scripted streaming chat model (no network, deterministic chunks)
- Canned LangChain tools, including a failing one
- An in-memory chat store
"""

import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest
from langchain_core.messages import AIMessageChunk, BaseMessage
from langchain_core.tools import BaseTool, StructuredTool

from agentic_chat_stream.platform.agent.config import AgentIdentity
from agentic_chat_stream.platform.database.store import InMemoryChatStore

type Turn = list[AIMessageChunk] | Exception


class Turns:
    """Builders for scripted model turns."""

    @staticmethod
    def text(*parts: str, input_tokens: int = 10, output_tokens: int = 5) -> list[AIMessageChunk]:
        chunks = [AIMessageChunk(content=part) for part in parts]
        chunks.append(
            AIMessageChunk(
                content="",
                usage_metadata={
                    "input_tokens": input_tokens,
                    "output_tokens": output_tokens,
                    "total_tokens": input_tokens + output_tokens,
                },
            )
        )
        return chunks

    @staticmethod
    def tool_calls(*calls: tuple[str, dict[str, Any], str], text: str = "") -> list[AIMessageChunk]:
        chunks = [AIMessageChunk(content=text)] if text else []
        chunks.append(
            AIMessageChunk(
                content="",
                tool_call_chunks=[
                    {"name": name, "args": json.dumps(args), "id": call_id, "index": index}
                    for index, (name, args, call_id) in enumerate(calls)
                ],
            )
        )
        return chunks


class ScriptedChatModel:
    """Fake streaming chat model replaying one scripted turn per call.

    This is a fake (not a mock): it behaves like a streaming model and
    records the histories it was called with.
    """

    model_name = "fake-model"

    def __init__(self, turns: list[Turn]):
        self.turns = list(turns)
        self.calls: list[list[BaseMessage]] = []
        self.bound_tools: list[BaseTool] = []

    def bind_tools(self, tools: list[BaseTool]) -> "ScriptedChatModel":
        self.bound_tools = list(tools)
        return self

    async def astream(self, input: Any, config: Any = None, **kwargs: Any) -> AsyncIterator[AIMessageChunk]:
        self.calls.append(list(input))
        if not self.turns:
            raise AssertionError("model called more times than scripted")
        turn = self.turns.pop(0)
        if isinstance(turn, Exception):
            raise turn
        for chunk in turn:
            yield chunk


@pytest.fixture
def turns() -> type[Turns]:
    return Turns


@pytest.fixture
def scripted_model() -> Callable[..., ScriptedChatModel]:
    """Factory for a ScriptedChatModel replaying the given turns."""

    def make(*script: Turn) -> ScriptedChatModel:
        return ScriptedChatModel(list(script))

    return make


@pytest.fixture
def search_tool() -> StructuredTool:
    """A tool returning a structured payload."""

    async def search(query: str) -> dict[str, Any]:
        return {"query": query, "results": ["first", "second"]}

    return StructuredTool.from_function(
        coroutine=search,
        name="search",
        description="Search the web",
    )


@pytest.fixture
def clock_tool() -> StructuredTool:
    """A tool returning plain text."""

    async def clock(timezone: str = "UTC") -> str:
        return f"12:00 {timezone}"

    return StructuredTool.from_function(
        coroutine=clock,
        name="clock",
        description="Tell the time",
    )


@pytest.fixture
def failing_tool() -> StructuredTool:
    """A tool that always raises."""

    async def explode(reason: str) -> str:
        raise RuntimeError(f"backend unavailable: {reason}")

    return StructuredTool.from_function(
        coroutine=explode,
        name="explode",
        description="Always fails",
    )


@pytest.fixture
def stub_agent_identity() -> AgentIdentity:
    """Create a stub agent identity with canned test data."""
    return AgentIdentity(
        name="Test Agent",
        slug="test-agent",
        description="A test agent for integration tests",
    )


@pytest.fixture
def memory_store() -> InMemoryChatStore:
    return InMemoryChatStore()
