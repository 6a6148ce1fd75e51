"""Agent infrastructure module.

This module provides the core abstractions and integrations for building agents:
- Agent protocol definition and message/event types
- Configuration dataclasses
- History windowing and cache annotation
- Model and tool invocation adapters
- LangGraph integration and the MCP tool client
- Agent-specific metrics
"""

from agentic_chat_stream.platform.agent.config import (
    AgentConfig,
    AgentIdentity,
    LlmConfig,
    MCPConfig,
)
from agentic_chat_stream.platform.agent.exceptions import (
    AgentInvocationError,
    ModelInvocationError,
    ToolInvocationError,
)
from agentic_chat_stream.platform.agent.history import HistoryPolicy
from agentic_chat_stream.platform.agent.langgraph import LangGraphChatAgent, LangGraphMCPTools
from agentic_chat_stream.platform.agent.mcp import MCPClient
from agentic_chat_stream.platform.agent.messages import (
    ConversationState,
    Message,
    Role,
    StreamEvent,
    TokenDelta,
    ToolCallRequest,
    ToolFinished,
    ToolResult,
    ToolStarted,
    TurnComplete,
)
from agentic_chat_stream.platform.agent.model import ModelInvocationAdapter
from agentic_chat_stream.platform.agent.protocol import Agent
from agentic_chat_stream.platform.agent.tools import ToolInvocationAdapter

__all__ = [
    "Agent",
    "AgentConfig",
    "AgentIdentity",
    "LlmConfig",
    "MCPConfig",
    "AgentInvocationError",
    "ModelInvocationError",
    "ToolInvocationError",
    "HistoryPolicy",
    "ModelInvocationAdapter",
    "ToolInvocationAdapter",
    "ConversationState",
    "Message",
    "Role",
    "StreamEvent",
    "TokenDelta",
    "ToolCallRequest",
    "ToolFinished",
    "ToolResult",
    "ToolStarted",
    "TurnComplete",
    "LangGraphChatAgent",
    "LangGraphMCPTools",
    "MCPClient",
]
