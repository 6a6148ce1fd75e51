"""LangGraph state definition for the chat agent."""

from agentic_chat_stream.platform.agent.state import BaseAgentState


class ChatAgentState(BaseAgentState):
    """LangGraph state for the chat agent.

    Inherits from BaseAgentState and adds:
        reasoning_steps: Number of model calls made in the current run
    """

    reasoning_steps: int
