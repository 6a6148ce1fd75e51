"""LangGraph chat agent builder module.

This module provides the builder class for constructing the streaming chat
agent: a two-node graph alternating model calls and tool execution, with
tools discovered from MCP servers.
"""

from typing import Self

from langchain_core.tools import BaseTool
from langgraph.graph import END, START, StateGraph

from agentic_chat_stream.agents.chat.nodes import AgentNode, ToolsNode, route_after_step
from agentic_chat_stream.agents.chat.prompt import build_system_prompt
from agentic_chat_stream.agents.chat.state import ChatAgentState
from agentic_chat_stream.platform.agent.config import (
    AgentConfig,
    AgentIdentity,
    LlmConfig,
    MCPConfig,
)
from agentic_chat_stream.platform.agent.history import HistoryPolicy
from agentic_chat_stream.platform.agent.langgraph import (
    LangGraphChatAgent,
    LangGraphMCPTools,
    ToolFetcher,
)
from agentic_chat_stream.platform.agent.llm_client import LlmClient
from agentic_chat_stream.platform.agent.model import ModelInvocationAdapter, StreamingChatModel
from agentic_chat_stream.platform.agent.tools import ToolInvocationAdapter
from agentic_chat_stream.platform.settings import ChatSettings, LitellmSettings

_ROUTES = {"agent": "agent", "tools": "tools", END: END}


class ChatAgentBuilder:
    """Builder for the LangGraph-based chat agent.

    This builder assembles all components needed for the chat agent:
    - LLM client with tool bindings behind the model adapter
    - MCP tools behind the tool adapter (supports multiple servers)
    - History policy applied before every model call
    - Agent and tools nodes wired with conditional routing
    """

    SLUG = "chat"

    def __init__(
        self,
        agent_config: AgentConfig,
        llm_config: LlmConfig,
        mcp_configs: list[MCPConfig],
        identity: AgentIdentity,
        tool_fetcher: ToolFetcher | None = None,
        llm: StreamingChatModel | None = None,
        extra_tools: list[BaseTool] | None = None,
        system_prompt: str | None = None,
    ) -> None:
        """Initialize the builder with configuration.

        Args:
            agent_config: Configuration for agent behavior (steps, window, limits)
            llm_config: Configuration for the LLM client
            mcp_configs: List of MCP server configurations for tool discovery
            identity: Agent identity (name, description, slug)
            tool_fetcher: Optional callable for fetching tools from MCP configs.
                Defaults to LangGraphMCPTools.fetch_all. Inject for testing.
            llm: Optional pre-built chat model. Defaults to an LlmClient
                built from ``llm_config``. Inject for testing.
            extra_tools: Tools added alongside the discovered MCP tools
            system_prompt: Optional system prompt override
        """
        self.agent_config = agent_config
        self.llm_config = llm_config
        self.mcp_configs = mcp_configs
        self.identity = identity
        self._fetch_tools = tool_fetcher or LangGraphMCPTools.fetch_all
        self._llm = llm
        self.extra_tools = extra_tools or []
        self.system_prompt = system_prompt or build_system_prompt()

    def _build_llm(self) -> StreamingChatModel:
        if self._llm is not None:
            return self._llm
        return LlmClient(
            agent_slug=self.identity.slug,
            model_name=self.llm_config.model,
            api_key=self.llm_config.api_key,
            api_base=self.llm_config.base_url,
            temperature=self.llm_config.temperature,
            max_tokens=self.llm_config.max_tokens,
        )

    async def build(self) -> LangGraphChatAgent:
        """Build and return a configured LangGraphChatAgent.

        Returns:
            A fully configured agent; each run compiles the graph against a
            fresh in-memory checkpointer.

        Raises:
            ValueError: If two tools share a name
        """
        all_tools = await self._fetch_tools(self.mcp_configs)
        all_tools = [*all_tools, *self.extra_tools]

        model = ModelInvocationAdapter(self._build_llm(), all_tools)
        tool_adapter = ToolInvocationAdapter(all_tools, self.identity.slug)
        history_policy = HistoryPolicy(self.agent_config.max_context_messages)

        agent_node = AgentNode(model, history_policy, self.agent_config, self.system_prompt)
        tools_node = ToolsNode(tool_adapter)

        workflow = StateGraph(ChatAgentState)  # type: ignore[bad-specialization]

        workflow.add_node("agent", agent_node)  # type: ignore
        workflow.add_node("tools", tools_node)  # type: ignore

        workflow.add_edge(START, "agent")  # type: ignore
        workflow.add_conditional_edges("agent", route_after_step, _ROUTES)  # type: ignore
        workflow.add_conditional_edges("tools", route_after_step, _ROUTES)  # type: ignore

        return LangGraphChatAgent(
            workflow=workflow,
            identity=self.identity,
            config=self.agent_config,
            tools=tool_adapter.tools,
        )

    @classmethod
    def default_builder(
        cls,
        litellm: LitellmSettings,
        chat: ChatSettings,
        mcp_configs: list[MCPConfig],
        identity: AgentIdentity | None = None,
    ) -> Self:
        """Create a builder from application settings.

        Args:
            litellm: LiteLLM proxy settings
            chat: Agent loop and history limits
            mcp_configs: List of MCP server configurations for tool discovery
            identity: Optional agent identity. Defaults to the chat agent.

        Returns:
            A configured ChatAgentBuilder instance.
        """
        default_identity = AgentIdentity(
            name="Chat",
            description="A conversational assistant that can call tools while it answers",
            slug=cls.SLUG,
        )
        return cls(
            agent_config=AgentConfig(
                max_reasoning_steps=chat.max_reasoning_steps,
                recursion_limit=chat.recursion_limit,
                max_context_messages=chat.max_context_messages,
            ),
            llm_config=LlmConfig(
                model=litellm.model,
                base_url=litellm.proxy_api_base,
                api_key=litellm.proxy_api_key,
                temperature=chat.temperature,
                max_tokens=chat.max_tokens,
            ),
            mcp_configs=mcp_configs,
            identity=identity or default_identity,
        )
