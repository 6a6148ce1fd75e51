"""Unit tests for LangGraph integration helpers.

This module tests pure helpers in langgraph.py:
- LangGraphMCPTools: name prefixing and args schema building
- LangGraphMessageParser: conversion between LangChain and framework-agnostic messages
- serialize_tool_output
"""

from unittest.mock import MagicMock

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from agentic_chat_stream.platform.agent.langgraph import (
    LangGraphMCPTools,
    LangGraphMessageParser,
    serialize_tool_output,
)
from agentic_chat_stream.platform.agent.messages import Message, Role, ToolCallRequest


class TestLangGraphMCPToolsPrefixedName:
    """Tests for _prefixed_name method."""

    def test_no_prefix(self):
        """Without tool_prefix, only mcp_ prefix is added."""
        tools = LangGraphMCPTools(mcp_client=MagicMock(), tool_prefix=None)
        assert tools._prefixed_name("search") == "mcp_search"

    def test_with_prefix(self):
        """With tool_prefix, both prefixes are applied."""
        tools = LangGraphMCPTools(mcp_client=MagicMock(), tool_prefix="web")
        assert tools._prefixed_name("search") == "mcp_web_search"


class TestLangGraphMCPToolsBuildArgsSchema:
    """Tests for _build_args_schema class method."""

    def test_schema_without_properties(self):
        """Schema without properties returns None."""
        mock_tool = MagicMock()
        mock_tool.inputSchema = {"type": "object"}
        assert LangGraphMCPTools._build_args_schema(mock_tool) is None

    def test_required_and_optional_fields(self):
        """Required fields stay required, optional fields default to None."""
        mock_tool = MagicMock()
        mock_tool.name = "web-search"
        mock_tool.inputSchema = {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query"},
                "limit": {"type": "integer"},
            },
            "required": ["query"],
        }

        schema = LangGraphMCPTools._build_args_schema(mock_tool)
        assert schema is not None
        instance = schema(query="python")
        assert instance.query == "python"
        assert instance.limit is None


class TestLangGraphMCPToolsFetchAll:
    async def test_no_servers_means_no_tools(self):
        assert await LangGraphMCPTools.fetch_all([]) == []


class TestLangGraphMessageParserToLangchain:
    """Tests for to_langchain."""

    def test_user_and_system(self):
        parser = LangGraphMessageParser()
        assert isinstance(parser.to_langchain(Message(role=Role.USER, content="hi")), HumanMessage)
        assert isinstance(parser.to_langchain(Message(role=Role.SYSTEM, content="sys")), SystemMessage)

    def test_assistant_keeps_tool_calls(self):
        parser = LangGraphMessageParser()
        message = Message(
            role=Role.ASSISTANT,
            content="",
            tool_calls=(ToolCallRequest("search", {"query": "x"}, "call_1"),),
        )
        converted = parser.to_langchain(message)

        assert isinstance(converted, AIMessage)
        assert converted.tool_calls[0]["name"] == "search"
        assert converted.tool_calls[0]["args"] == {"query": "x"}
        assert converted.tool_calls[0]["id"] == "call_1"

    def test_tool_message(self):
        parser = LangGraphMessageParser()
        converted = parser.to_langchain(
            Message(role=Role.TOOL, content="result", tool_call_id="call_1", name="search")
        )
        assert isinstance(converted, ToolMessage)
        assert converted.tool_call_id == "call_1"
        assert converted.name == "search"


class TestLangGraphMessageParserToMessage:
    """Tests for to_message."""

    def test_roles(self):
        parser = LangGraphMessageParser()
        assert parser.to_message(SystemMessage(content="s")).role == Role.SYSTEM
        assert parser.to_message(HumanMessage(content="h")).role == Role.USER
        assert parser.to_message(AIMessage(content="a")).role == Role.ASSISTANT
        assert parser.to_message(ToolMessage(content="t", tool_call_id="1")).role == Role.TOOL

    def test_tool_calls_in_request_order(self):
        parser = LangGraphMessageParser()
        message = parser.to_message(
            AIMessage(
                content="",
                tool_calls=[
                    {"id": "c1", "name": "search", "args": {"query": "a"}},
                    {"id": "c2", "name": "clock", "args": {}},
                ],
            )
        )
        assert [tc.call_id for tc in message.tool_calls] == ["c1", "c2"]
        assert message.has_pending_tool_calls

    def test_list_content_is_flattened(self):
        parser = LangGraphMessageParser()
        message = parser.to_message(
            AIMessage(content=[{"type": "text", "text": "Hel"}, {"type": "text", "text": "lo"}])
        )
        assert message.content == "Hello"

    def test_cache_mark_is_reported(self):
        parser = LangGraphMessageParser()
        marked = HumanMessage(
            content=[{"type": "text", "text": "hi", "cache_control": {"type": "ephemeral"}}]
        )
        assert parser.to_message(marked).cache_marked is True
        assert parser.to_message(HumanMessage(content="hi")).cache_marked is False


class TestSerializeToolOutput:
    def test_strings_pass_through(self):
        assert serialize_tool_output("12:00 UTC") == "12:00 UTC"

    def test_structured_output_is_json(self):
        assert serialize_tool_output({"results": [1, 2]}) == '{"results": [1, 2]}'

    def test_unserializable_values_use_str(self):
        class Opaque:
            def __str__(self) -> str:
                return "opaque"

        assert serialize_tool_output({"value": Opaque()}) == '{"value": "opaque"}'
