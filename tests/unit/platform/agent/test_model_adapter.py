"""Unit tests for the model invocation adapter."""

import pytest
from langchain_core.messages import AIMessage, AIMessageChunk, HumanMessage

from agentic_chat_stream.platform.agent.exceptions import AgentInvocationError, ModelInvocationError
from agentic_chat_stream.platform.agent.messages import TokenDelta
from agentic_chat_stream.platform.agent.model import AssistantTurn, ModelInvocationAdapter, chunk_text


async def _collect(adapter: ModelInvocationAdapter, history=None) -> list:
    return [event async for event in adapter.stream(history or [HumanMessage(content="hi")])]


class TestChunkText:
    """Tests for chunk_text."""

    def test_string_content(self):
        assert chunk_text(AIMessageChunk(content="Hello")) == "Hello"

    def test_text_blocks_are_joined(self):
        chunk = AIMessageChunk(content=[{"type": "text", "text": "He"}, {"type": "text", "text": "llo"}])
        assert chunk_text(chunk) == "Hello"

    def test_non_text_blocks_are_ignored(self):
        chunk = AIMessageChunk(
            content=[{"type": "tool_use", "id": "c1", "input": {}}, {"type": "text", "text": "x"}]
        )
        assert chunk_text(chunk) == "x"


class TestModelInvocationAdapter:
    """Tests for ModelInvocationAdapter.stream."""

    async def test_yields_token_deltas_then_assistant_turn(self, scripted_model, turns):
        adapter = ModelInvocationAdapter(scripted_model(turns.text("Hel", "lo")))
        events = await _collect(adapter)

        assert events[:2] == [TokenDelta("Hel"), TokenDelta("lo")]
        assert isinstance(events[-1], AssistantTurn)
        assert isinstance(events[-1].message, AIMessage)
        assert events[-1].message.content == "Hello"
        assert len(events) == 3

    async def test_empty_chunks_produce_no_delta(self, scripted_model, turns):
        adapter = ModelInvocationAdapter(scripted_model(turns.text("", "a", "")))
        events = await _collect(adapter)
        assert [e for e in events if isinstance(e, TokenDelta)] == [TokenDelta("a")]

    async def test_tool_calls_are_aggregated(self, scripted_model, turns):
        model = scripted_model(turns.tool_calls(("search", {"query": "x"}, "call_1"), text="Let me check"))
        events = await _collect(ModelInvocationAdapter(model))

        message = events[-1].message
        assert message.tool_calls[0]["name"] == "search"
        assert message.tool_calls[0]["args"] == {"query": "x"}
        assert message.tool_calls[0]["id"] == "call_1"
        assert events[0] == TokenDelta("Let me check")

    async def test_tools_are_bound_once(self, scripted_model, turns, search_tool):
        model = scripted_model(turns.text("ok"))
        ModelInvocationAdapter(model, [search_tool])
        assert model.bound_tools == [search_tool]

    async def test_usage_metadata_survives(self, scripted_model, turns):
        events = await _collect(ModelInvocationAdapter(scripted_model(turns.text("ok", input_tokens=7))))
        assert events[-1].message.usage_metadata["input_tokens"] == 7

    async def test_backend_failure_is_wrapped(self, scripted_model):
        adapter = ModelInvocationAdapter(scripted_model(ConnectionError("proxy down")))

        with pytest.raises(ModelInvocationError) as exc_info:
            await _collect(adapter)

        assert isinstance(exc_info.value, AgentInvocationError)
        assert "proxy down" in str(exc_info.value)
        assert exc_info.value.model_name == "fake-model"

    async def test_no_output_is_an_error(self, scripted_model):
        with pytest.raises(ModelInvocationError):
            await _collect(ModelInvocationAdapter(scripted_model([])))

    async def test_history_is_passed_through(self, scripted_model, turns):
        model = scripted_model(turns.text("ok"))
        history = [HumanMessage(content="first"), HumanMessage(content="second")]
        await _collect(ModelInvocationAdapter(model), history)
        assert model.calls == [history]
