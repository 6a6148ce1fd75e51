"""Configuration dataclasses for agent components.

This module provides immutable configuration objects for LLM clients,
MCP servers, and agent behavior settings.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LlmConfig:
    """Configuration for language model clients.

    Attributes:
        model: Model identifier (e.g., "litellm_proxy/anthropic/claude-3-5-sonnet-20241022")
        api_key: API key for the LLM provider
        base_url: Base URL for the API (e.g., LiteLLM proxy URL)
        temperature: Sampling temperature (0.0 to 1.0)
        max_tokens: Maximum tokens generated per call
    """

    model: str
    api_key: str | None = None
    base_url: str | None = None
    temperature: float = 0.7
    max_tokens: int = 4096


@dataclass(frozen=True)
class MCPConfig:
    """Configuration for MCP (Model Context Protocol) clients.

    Attributes:
        server_url: URL of the MCP server endpoint
        tool_prefix: Optional prefix for tool names to avoid collisions with multiple MCP servers.
                     All MCP tools get 'mcp_' prefix; this adds: mcp_<tool_prefix>_<name>
        headers: Optional HTTP headers to include in requests
        timeout: Connection timeout in seconds (default: 60.0)
        sse_read_timeout: SSE stream read timeout in seconds (default: 300.0)
        read_timeout: General read timeout in seconds (default: 120.0)
    """

    server_url: str
    tool_prefix: str | None = None
    headers: dict[str, str] | None = None
    timeout: float = 60.0
    sse_read_timeout: float = 300.0
    read_timeout: float = 120.0


@dataclass(frozen=True)
class AgentConfig:
    """Configuration for agent behavior.

    Attributes:
        max_reasoning_steps: Model calls allowed before a final answer is forced
        recursion_limit: LangGraph recursion limit, a hard backstop for the loop
        max_context_messages: Number of messages kept when windowing history
    """

    max_reasoning_steps: int = 15
    recursion_limit: int = 50
    max_context_messages: int = 10


@dataclass(frozen=True)
class AgentIdentity:
    """Identity information for an agent.

    Attributes:
        name: Human-readable display name for the agent
        description: Brief description of the agent's capabilities
        slug: URL-safe identifier used in metrics and tracing
    """

    name: str
    description: str
    slug: str
