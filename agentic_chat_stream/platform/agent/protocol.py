"""Agent protocol definitions.

This module defines the framework-agnostic Agent protocol that all agent
implementations must satisfy, enabling interchangeable agent backends.
"""

from collections.abc import AsyncIterator
from typing import Protocol

from agentic_chat_stream.platform.agent.config import AgentIdentity
from agentic_chat_stream.platform.agent.messages import ConversationState, StreamEvent


class Agent(Protocol):
    """Protocol for a streaming chat agent."""

    @property
    def identity(self) -> AgentIdentity:
        """The identity of the agent."""
        ...

    @property
    def name(self) -> str:
        """The name of the agent."""
        ...

    @property
    def slug(self) -> str:
        """The slug of the agent."""
        ...

    def run_stream(self, conversation: ConversationState) -> AsyncIterator[StreamEvent]:
        """Run the agent loop over a conversation and stream its events.

        Args:
            conversation: Request-scoped history ending with the new user message.
                Messages produced by the run are appended to it.

        Yields:
            StreamEvent objects in the order they were produced, ending with
            TurnComplete on success. Failures are raised, not yielded.
        """
        ...
