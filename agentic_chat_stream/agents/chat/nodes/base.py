"""Base protocol for chat agent nodes."""

from typing import Any, Protocol, runtime_checkable

from agentic_chat_stream.agents.chat.state import ChatAgentState


@runtime_checkable
class Node(Protocol):
    """Protocol for agent graph nodes.

    Nodes are callable objects that read ChatAgentState and return a partial
    state update. Stream events are written through the graph's stream writer.
    """

    async def __call__(self, state: ChatAgentState) -> dict[str, Any]: ...
