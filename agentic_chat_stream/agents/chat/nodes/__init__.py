"""LangGraph nodes."""

from agentic_chat_stream.agents.chat.nodes.agent import AgentNode
from agentic_chat_stream.agents.chat.nodes.base import Node
from agentic_chat_stream.agents.chat.nodes.routing import route_after_step
from agentic_chat_stream.agents.chat.nodes.tools import ToolsNode

__all__ = [
    "AgentNode",
    "Node",
    "ToolsNode",
    "route_after_step",
]
