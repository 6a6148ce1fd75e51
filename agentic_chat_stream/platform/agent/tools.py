"""Tool invocation adapter.

Exposes the configured LangChain tools behind a uniform
``ToolCallRequest -> ToolResult`` contract, with per-call metrics.
"""

import logging
from collections.abc import Sequence

from langchain_core.tools import BaseTool

from agentic_chat_stream.platform.agent.exceptions import ToolInvocationError, UnknownToolError
from agentic_chat_stream.platform.agent.messages import ToolCallRequest, ToolResult
from agentic_chat_stream.platform.agent.metrics import ToolMetricsLabels, collect_tool_metrics

logger = logging.getLogger(__name__)


class ToolInvocationAdapter:
    """Looks tools up by name and executes them one request at a time."""

    def __init__(self, tools: Sequence[BaseTool], agent_slug: str = "") -> None:
        """Initialize with the available tools.

        Args:
            tools: Tools the agent may call
            agent_slug: The agent's slug for metrics labeling

        Raises:
            ValueError: If two tools share a name
        """
        self._tools: dict[str, BaseTool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Tool name collision: '{tool.name}' is registered twice")
            self._tools[tool.name] = tool
        self.agent_slug = agent_slug

    @property
    def tools(self) -> list[BaseTool]:
        return list(self._tools.values())

    async def invoke(self, request: ToolCallRequest) -> ToolResult:
        """Execute a single tool call.

        Args:
            request: Tool name, arguments and call id requested by the model

        Returns:
            ToolResult carrying the tool's output

        Raises:
            UnknownToolError: If no tool with the requested name exists
            ToolInvocationError: If the tool raises
        """
        tool = self._tools.get(request.tool_name)
        if tool is None:
            raise UnknownToolError(request.tool_name, call_id=request.call_id)

        # Extract proxy tool name when using MCP Proxy's execute-tool
        proxy_tool_name = ""
        if "execute-tool" in request.tool_name:
            proxy_tool_name = str(request.arguments.get("tool_name", ""))

        labels = ToolMetricsLabels(self.agent_slug, request.tool_name, proxy_tool_name)
        logger.info(f"Invoking tool '{request.tool_name}' (call {request.call_id})")
        try:
            async with collect_tool_metrics(labels):
                output = await tool.ainvoke(request.arguments)
        except Exception as e:
            raise ToolInvocationError(
                str(e), tool_name=request.tool_name, call_id=request.call_id
            ) from e

        return ToolResult(call_id=request.call_id, output=output)
