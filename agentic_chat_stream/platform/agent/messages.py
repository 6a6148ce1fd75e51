"""Framework-agnostic message, conversation and stream event types.

These types are used across all implementations and define the common
vocabulary for agent execution. The stream events are the closed set the
agent loop emits; raw provider events are decoded into them exactly once, in
the model adapter.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class Role(StrEnum):
    """Author of a message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class ToolCallRequest:
    """A tool invocation requested by the model.

    Attributes:
        tool_name: Name of the tool to invoke
        arguments: Structured arguments for the tool
        call_id: Opaque identifier linking the request to its result
    """

    tool_name: str
    arguments: dict[str, Any]
    call_id: str


@dataclass(frozen=True)
class ToolResult:
    """Output of a single tool invocation.

    Attributes:
        call_id: Identifier of the ToolCallRequest this result answers
        output: Structured tool output
    """

    call_id: str
    output: Any


@dataclass(frozen=True)
class Message:
    """Framework-agnostic message representation.

    Attributes:
        role: Message author
        content: Message text content (empty for pure tool-call messages)
        tool_calls: Tool calls requested by an assistant message, in order
        tool_call_id: ID of the tool call this message responds to (for tool messages)
        name: Tool name (for tool messages)
        cache_marked: Whether the message carries a cache breakpoint
    """

    role: Role
    content: str
    tool_calls: tuple[ToolCallRequest, ...] = ()
    tool_call_id: str | None = None
    name: str | None = None
    cache_marked: bool = False

    @property
    def has_pending_tool_calls(self) -> bool:
        return self.role == Role.ASSISTANT and bool(self.tool_calls)


@dataclass
class ConversationState:
    """Request-scoped conversation owned by one agent run.

    Messages are append-only and follow causal turn order: a tool message
    may only follow an assistant message with tool calls, or another tool
    message answering the same batch.
    """

    thread_id: str
    messages: list[Message] = field(default_factory=list)

    def append(self, message: Message) -> None:
        """Append a message, enforcing causal turn order.

        Raises:
            ValueError: If a tool message does not follow a tool-calling turn
        """
        if message.role == Role.TOOL:
            previous = self.messages[-1] if self.messages else None
            if previous is None or not (
                previous.has_pending_tool_calls or previous.role == Role.TOOL
            ):
                raise ValueError(
                    "A tool message must follow an assistant message with tool calls"
                )
        self.messages.append(message)

    def snapshot(self) -> tuple[Message, ...]:
        """Immutable view of the messages appended so far."""
        return tuple(self.messages)

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None

    def final_response(self) -> str:
        """Content of the last assistant message that requested no tools."""
        for message in reversed(self.messages):
            if message.role == Role.ASSISTANT and not message.tool_calls:
                return message.content
        return ""


@dataclass(frozen=True)
class TokenDelta:
    """Incremental text produced by the model."""

    text: str


@dataclass(frozen=True)
class ToolStarted:
    """Emitted immediately before a tool executes."""

    name: str
    input: Any


@dataclass(frozen=True)
class ToolFinished:
    """Emitted immediately after a tool returns."""

    name: str
    output: Any


@dataclass(frozen=True)
class TurnComplete:
    """Emitted once when the agent loop reaches its terminal state."""


type StreamEvent = TokenDelta | ToolStarted | ToolFinished | TurnComplete
