"""Service infrastructure module.

This module provides the core infrastructure the chat agent is built on:
- Agent protocol, message and stream event types
- LangGraph integration and the MCP tool client
- Streaming protocol, bounded sink and event translation
- FastAPI server, authentication, persistence and observability
"""

from agentic_chat_stream.platform.agent.config import (
    AgentConfig,
    AgentIdentity,
    LlmConfig,
    MCPConfig,
)
from agentic_chat_stream.platform.agent.langgraph import (
    LangGraphChatAgent,
    LangGraphMCPTools,
)
from agentic_chat_stream.platform.agent.mcp import MCPClient
from agentic_chat_stream.platform.agent.messages import (
    ConversationState,
    Message,
    StreamEvent,
)
from agentic_chat_stream.platform.agent.protocol import Agent
from agentic_chat_stream.platform.settings import Settings

__all__ = [
    # Core protocols
    "Agent",
    # Configuration
    "AgentConfig",
    "AgentIdentity",
    "LlmConfig",
    "MCPConfig",
    "Settings",
    # LangGraph integration
    "LangGraphChatAgent",
    "LangGraphMCPTools",
    # MCP
    "MCPClient",
    # Message types
    "ConversationState",
    "Message",
    "StreamEvent",
]
