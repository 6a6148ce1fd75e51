"""Tools node: executes the tool calls of the last assistant message."""

import logging
from typing import Any

from langchain_core.messages import AIMessage, ToolMessage
from langgraph.config import get_stream_writer

from agentic_chat_stream.agents.chat.state import ChatAgentState
from agentic_chat_stream.platform.agent.langgraph import LangGraphMessageParser, serialize_tool_output
from agentic_chat_stream.platform.agent.messages import ToolFinished, ToolStarted
from agentic_chat_stream.platform.agent.tools import ToolInvocationAdapter

from .base import Node

logger = logging.getLogger(__name__)


class ToolsNode(Node):
    """Node that runs requested tools sequentially, in request order.

    Each call is bracketed by ToolStarted and ToolFinished events. A failing
    tool aborts the run; its error propagates out of the graph.
    """

    def __init__(self, tools: ToolInvocationAdapter):
        self.tools = tools

    async def __call__(self, state: ChatAgentState) -> dict[str, Any]:
        write = get_stream_writer()
        last = state["messages"][-1]
        if not isinstance(last, AIMessage):
            raise ValueError(f"Tools node reached after {type(last).__name__}, expected AIMessage")

        results: list[ToolMessage] = []
        for request in LangGraphMessageParser.tool_call_requests(last):
            write(ToolStarted(name=request.tool_name, input=request.arguments))
            result = await self.tools.invoke(request)
            write(ToolFinished(name=request.tool_name, output=result.output))
            results.append(
                ToolMessage(
                    content=serialize_tool_output(result.output),
                    tool_call_id=result.call_id,
                    name=request.tool_name,
                )
            )
        return {"messages": results}
