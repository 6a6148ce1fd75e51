"""Conditional routing between the agent and tools nodes."""

from typing import Literal

from langchain_core.messages import AIMessage, ToolMessage
from langgraph.graph import END

from agentic_chat_stream.agents.chat.state import ChatAgentState


def route_after_step(state: ChatAgentState) -> Literal["agent", "tools", "__end__"]:
    """Pick the next node from the last message in state.

    An assistant message with tool calls goes to the tools node, tool results
    go back to the agent, anything else ends the run.
    """
    messages = state.get("messages", [])
    if not messages:
        return END
    last = messages[-1]
    if isinstance(last, AIMessage) and last.tool_calls:
        return "tools"
    if isinstance(last, ToolMessage):
        return "agent"
    return END
