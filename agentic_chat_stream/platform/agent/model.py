"""Model invocation adapter.

Wraps a streaming chat model behind a ``history -> events`` contract. Raw
provider chunks are decoded here, once, into ``TokenDelta`` events followed by
a single ``AssistantTurn`` carrying the finalized assistant message.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, Self

from langchain_core.messages import AIMessage, BaseMessage, BaseMessageChunk, message_chunk_to_message
from langchain_core.tools import BaseTool

from agentic_chat_stream.platform.agent.exceptions import ModelInvocationError
from agentic_chat_stream.platform.agent.messages import TokenDelta

logger = logging.getLogger(__name__)


class StreamingChatModel(Protocol):
    """The subset of the LLM client the adapter relies on."""

    @property
    def model_name(self) -> str: ...

    def bind_tools(self, tools: list[BaseTool]) -> Self: ...

    def astream(self, input: Any, config: Any = None, **kwargs: Any) -> AsyncIterator[BaseMessageChunk]: ...


@dataclass(frozen=True)
class AssistantTurn:
    """The finalized assistant message closing one model call."""

    message: AIMessage


type ModelEvent = TokenDelta | AssistantTurn


def chunk_text(chunk: BaseMessageChunk) -> str:
    """Extract the text carried by a streamed chunk.

    Providers send either a plain string or a list of content blocks; only
    text blocks contribute (tool-use argument deltas are ignored).
    """
    content = chunk.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type", "text") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class ModelInvocationAdapter:
    """Streams model output for a prepared history."""

    def __init__(self, llm: StreamingChatModel, tools: Sequence[BaseTool] = ()) -> None:
        """Initialize the adapter.

        Args:
            llm: Streaming chat model client
            tools: Tools the model may request; bound once up front
        """
        self._llm = llm
        self._llm_with_tools = llm.bind_tools(list(tools)) if tools else llm

    @property
    def model_name(self) -> str:
        return self._llm.model_name

    async def stream(self, history: Sequence[BaseMessage]) -> AsyncIterator[ModelEvent]:
        """Invoke the model and yield decoded events.

        Args:
            history: Windowed, cache-annotated messages to send

        Yields:
            TokenDelta for each non-empty text chunk, then one AssistantTurn

        Raises:
            ModelInvocationError: If the backend fails or produces no output
        """
        aggregate: BaseMessageChunk | None = None
        try:
            async for chunk in self._llm_with_tools.astream(list(history)):
                aggregate = chunk if aggregate is None else aggregate + chunk
                text = chunk_text(chunk)
                if text:
                    yield TokenDelta(text)
        except ModelInvocationError:
            raise
        except Exception as e:
            raise ModelInvocationError(str(e), model_name=self.model_name) from e

        if aggregate is None:
            raise ModelInvocationError("model returned no output", model_name=self.model_name)

        message = message_chunk_to_message(aggregate)
        if not isinstance(message, AIMessage):
            raise ModelInvocationError(
                f"unexpected message type {type(message).__name__}",
                model_name=self.model_name,
            )
        logger.debug(f"Model turn finished with {len(message.tool_calls)} tool call(s)")
        yield AssistantTurn(message)
