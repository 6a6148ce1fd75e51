"""LangGraph integration components.

This module provides LangGraph-specific implementations including:
- LangGraphMCPTools: Converts MCP tools to LangChain StructuredTools
- LangGraphMessageParser: Converts between LangChain messages and framework-agnostic types
- LangGraphChatAgent: A runnable streaming agent that implements the Agent protocol
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage
from langchain_core.tools import BaseTool, StructuredTool
from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.checkpoint.memory import InMemorySaver
from langgraph.graph import StateGraph
from mcp.types import Tool as MCPTool
from opentelemetry import trace
from pydantic import Field, create_model

from agentic_chat_stream.platform.agent.config import AgentConfig, AgentIdentity, MCPConfig
from agentic_chat_stream.platform.agent.history import is_cache_marked
from agentic_chat_stream.platform.agent.mcp import MCPClient
from agentic_chat_stream.platform.agent.messages import (
    ConversationState,
    Message,
    Role,
    StreamEvent,
    ToolCallRequest,
    TurnComplete,
)
from agentic_chat_stream.platform.agent.metrics import AgentMetricsLabels, collect_agent_metrics
from agentic_chat_stream.platform.agent.protocol import Agent

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# Type alias for tool fetcher functions (injectable dependency)
type ToolFetcher = Callable[[Sequence[MCPConfig]], Awaitable[list[BaseTool]]]


class LangGraphMCPTools:
    """Adapter that converts MCP tools to LangChain StructuredTools.

    This class fetches tools from an MCP server and converts them to
    LangChain-compatible StructuredTools the agent's tool adapter can execute.
    """

    def __init__(self, mcp_client: MCPClient, tool_prefix: str | None = None) -> None:
        """Initialize with an MCP client.

        Args:
            mcp_client: Configured MCPClient for tool discovery and execution
            tool_prefix: Optional prefix to add after 'mcp_' for collision avoidance
                         between multiple MCP servers. Final format: mcp_<prefix>_<name>
        """
        self.mcp_client = mcp_client
        self.tool_prefix = tool_prefix

    @classmethod
    def from_config(cls, config: MCPConfig) -> "LangGraphMCPTools":
        """Create a LangGraphMCPTools instance from an MCPConfig."""
        mcp_client = MCPClient(
            server_url=config.server_url,
            headers=config.headers,
            timeout=config.timeout,
            sse_read_timeout=config.sse_read_timeout,
            read_timeout=config.read_timeout,
        )
        return cls(mcp_client, config.tool_prefix)

    async def convert_tools(self) -> list[StructuredTool]:
        """Convert the server's MCP tools to LangChain StructuredTools."""
        tools = await self.mcp_client.list_tools()
        return [self._to_langchain_tool(tool) for tool in tools if tool.inputSchema]

    def _prefixed_name(self, name: str) -> str:
        """Apply mcp_ prefix and optional tool prefix to tool name.

        Returns:
            Prefixed name: mcp_<name> or mcp_<tool_prefix>_<name>
        """
        if self.tool_prefix:
            return f"mcp_{self.tool_prefix}_{name}"
        return f"mcp_{name}"

    def _to_langchain_tool(self, mcp_tool: MCPTool) -> StructuredTool:
        """Convert a single MCP tool to a LangChain StructuredTool.

        The tool coroutine returns the parsed MCP payload as-is so structured
        output reaches the client unchanged.
        """
        # MCP calls use the original name, LangChain sees the prefixed one
        original_name = mcp_tool.name
        prefixed_name = self._prefixed_name(original_name)

        async def invoke(**kwargs: Any) -> Any:
            result = await self.mcp_client.call_tool(original_name, kwargs)
            if result is None:
                return "No result"
            return result

        args_schema = self._build_args_schema(mcp_tool)
        tool_kwargs: dict[str, Any] = {
            "name": prefixed_name,
            "description": mcp_tool.description or f"MCP tool: {original_name}",
            "coroutine": invoke,
        }
        if args_schema is not None:
            tool_kwargs["args_schema"] = args_schema

        return StructuredTool(**tool_kwargs)

    @staticmethod
    def _json_type_to_python(json_type: str) -> type:
        """Convert JSON schema type string to Python type, defaulting to str."""
        return {
            "string": str,
            "integer": int,
            "number": float,
            "boolean": bool,
            "object": dict,
            "array": list,
        }.get(json_type, str)

    @classmethod
    def _build_args_schema(cls, mcp_tool: MCPTool) -> type | None:
        """Build a Pydantic model from an MCP tool's input schema.

        Returns:
            Dynamically created Pydantic model class, or None if schema is invalid/empty
        """
        schema = mcp_tool.inputSchema
        if not schema:
            return None

        if not isinstance(schema, dict) or "properties" not in schema:
            logger.warning(
                "Invalid tool schema for '%s': expected dict with 'properties' key, "
                "got %s. Tool will not have argument validation.",
                mcp_tool.name,
                type(schema).__name__,
            )
            return None

        properties = schema.get("properties", {})
        required = set(schema.get("required", []))

        if not properties:
            return None

        fields = {}
        for name, info in properties.items():
            field_type = cls._json_type_to_python(info.get("type", "string"))
            description = info.get("description", "")
            default = info.get("default", ...)

            if name not in required and default == ...:
                default = None
                field_type = field_type | None

            if default == ...:
                fields[name] = (field_type, Field(description=description))
            else:
                fields[name] = (
                    field_type,
                    Field(default=default, description=description),
                )

        model_name = f"{mcp_tool.name.replace('-', '_').title()}Args"
        return create_model(model_name, **fields)  # type: ignore

    @classmethod
    async def fetch_all(cls, configs: Sequence[MCPConfig]) -> list[BaseTool]:
        """Fetch tools from multiple MCP servers concurrently.

        Raises:
            ExceptionGroup: If any MCP server fails to respond
            ValueError: If tool name collision is detected across MCP servers
        """
        if not configs:
            return []

        async def fetch_from_config(config: MCPConfig) -> list[StructuredTool]:
            return await cls.from_config(config).convert_tools()

        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(fetch_from_config(config)) for config in configs]

        tools: list[BaseTool] = []
        seen: dict[str, str] = {}  # tool_name -> server_url
        for config, task in zip(configs, tasks):
            for tool in task.result():
                if tool.name in seen:
                    raise ValueError(
                        f"Tool name collision: '{tool.name}' from {config.server_url} "
                        f"conflicts with {seen[tool.name]}. "
                        f"Set tool_prefix on one or both MCPConfigs."
                    )
                seen[tool.name] = config.server_url
                tools.append(tool)
        return tools


class LangGraphMessageParser:
    """Parser between LangChain messages and framework-agnostic Messages."""

    def to_langchain(self, message: Message) -> BaseMessage:
        """Convert a framework-agnostic Message to a LangChain message."""
        match message.role:
            case Role.SYSTEM:
                return SystemMessage(content=message.content)
            case Role.USER:
                return HumanMessage(content=message.content)
            case Role.ASSISTANT:
                return AIMessage(
                    content=message.content,
                    tool_calls=[
                        {"name": tc.tool_name, "args": tc.arguments, "id": tc.call_id}
                        for tc in message.tool_calls
                    ],
                )
            case Role.TOOL:
                return ToolMessage(
                    content=message.content,
                    tool_call_id=message.tool_call_id or "",
                    name=message.name,
                )
        raise ValueError(f"Unsupported role: {message.role}")

    def to_message(self, msg: BaseMessage) -> Message:
        """Convert a LangChain message to a framework-agnostic Message."""
        role = self._get_role(msg)
        tool_calls: tuple[ToolCallRequest, ...] = ()
        if isinstance(msg, AIMessage):
            tool_calls = tuple(self.tool_call_requests(msg))

        return Message(
            role=role,
            content=self._extract_content(msg),
            tool_calls=tool_calls,
            tool_call_id=getattr(msg, "tool_call_id", None),
            name=msg.name,
            cache_marked=is_cache_marked(msg),
        )

    @staticmethod
    def tool_call_requests(msg: AIMessage) -> list[ToolCallRequest]:
        """Tool calls requested by an assistant message, in request order."""
        return [
            ToolCallRequest(
                tool_name=tc.get("name", ""),
                arguments=tc.get("args", {}),
                call_id=tc.get("id") or "",
            )
            for tc in msg.tool_calls
        ]

    @staticmethod
    def _get_role(msg: BaseMessage) -> Role:
        if isinstance(msg, SystemMessage):
            return Role.SYSTEM
        elif isinstance(msg, HumanMessage):
            return Role.USER
        elif isinstance(msg, AIMessage):
            return Role.ASSISTANT
        else:
            # ToolMessage or other
            return Role.TOOL

    @staticmethod
    def _extract_content(msg: BaseMessage) -> str:
        content = msg.content
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            text_parts = [p.get("text", "") if isinstance(p, dict) else str(p) for p in content]
            return "".join(text_parts)
        return str(content)


def serialize_tool_output(output: Any) -> str:
    """Render a tool output as message text, JSON-encoding structured payloads."""
    if isinstance(output, str):
        return output
    return json.dumps(output, default=str)


class LangGraphChatAgent(Agent):
    """A configured, runnable LangGraph chat agent.

    Every run compiles the workflow against a fresh in-memory checkpointer,
    so no conversation state outlives the request that produced it.
    """

    def __init__(
        self,
        workflow: StateGraph,
        identity: AgentIdentity,
        config: AgentConfig,
        message_parser: LangGraphMessageParser | None = None,
        checkpointer_factory: Callable[[], BaseCheckpointSaver] = InMemorySaver,
        tools: list[BaseTool] | None = None,
    ) -> None:
        """Initialize the agent.

        Args:
            workflow: Uncompiled agent graph
            identity: Agent identity information
            config: Agent behavior configuration
            message_parser: Optional custom message parser
            checkpointer_factory: Creates the request-scoped checkpointer
            tools: Tools available to the agent
        """
        self._workflow = workflow
        self._identity = identity
        self._config = config
        self._message_parser = message_parser or LangGraphMessageParser()
        self._checkpointer_factory = checkpointer_factory
        self._tools = tools or []

    @property
    def identity(self) -> AgentIdentity:
        return self._identity

    @property
    def name(self) -> str:
        return self._identity.name

    @property
    def slug(self) -> str:
        return self._identity.slug

    @property
    def tools(self) -> list[BaseTool]:
        """Tools available to this agent."""
        return self._tools

    def _initial_state(self, conversation: ConversationState) -> dict[str, Any]:
        return {
            "messages": [self._message_parser.to_langchain(m) for m in conversation.messages],
            "reasoning_steps": 0,
        }

    async def run_stream(self, conversation: ConversationState) -> AsyncIterator[StreamEvent]:
        """Run the agent loop over a conversation, streaming its events.

        Messages produced by each completed step are appended to
        ``conversation`` as the run progresses.

        Args:
            conversation: History plus the new user message; owned by this run

        Yields:
            TokenDelta, ToolStarted and ToolFinished events in production order,
            then exactly one TurnComplete

        Raises:
            AgentInvocationError: If the model or a tool fails
            GraphRecursionError: If the loop exceeds the recursion limit
        """
        graph = self._workflow.compile(checkpointer=self._checkpointer_factory())
        config = {
            "configurable": {"thread_id": conversation.thread_id},
            "recursion_limit": self._config.recursion_limit,
        }

        with tracer.start_as_current_span(self.name):
            async with collect_agent_metrics(AgentMetricsLabels(self.slug)):
                async for mode, chunk in graph.astream(
                    self._initial_state(conversation),
                    config=config,  # type: ignore[arg-type]
                    stream_mode=["custom", "updates"],
                ):
                    if mode == "custom":
                        yield chunk
                        continue
                    for node_name, update in chunk.items():
                        if not isinstance(update, dict):
                            continue
                        for msg in update.get("messages", []):
                            conversation.append(self._message_parser.to_message(msg))
                        logger.debug(
                            f"Node '{node_name}' finished, {len(conversation.messages)} messages"
                        )

        yield TurnComplete()
