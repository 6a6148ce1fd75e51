"""Translate internal agent events into the client streaming protocol."""

import logging
from collections.abc import AsyncIterable

from pydantic import BaseModel

from agentic_chat_stream.platform.agent.messages import (
    StreamEvent,
    TokenDelta,
    ToolFinished,
    ToolStarted,
    TurnComplete,
)
from agentic_chat_stream.platform.streaming.protocol import (
    Connected,
    Done,
    Error,
    Token,
    ToolEnd,
    ToolStart,
)
from agentic_chat_stream.platform.streaming.sink import EventSink

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Stream processing failed"


def translate(event: StreamEvent) -> BaseModel | None:
    """Map one internal event to its outbound event.

    Returns:
        The outbound event, or None for an empty token delta
    """
    match event:
        case TokenDelta(text=text):
            return Token(token=text) if text else None
        case ToolStarted(name=name, input=tool_input):
            return ToolStart(tool=name, input=tool_input)
        case ToolFinished(name=name, output=output):
            return ToolEnd(tool=name, output=output)
        case TurnComplete():
            return Done()
    raise TypeError(f"Unknown stream event: {event!r}")


def error_message(error: BaseException) -> str:
    return str(error) or DEFAULT_ERROR_MESSAGE


class EventStreamTranslator:
    """Writes the outbound protocol for one request into its sink."""

    def __init__(self, sink: EventSink) -> None:
        self.sink = sink
        self._connected = False
        self._terminated = False

    @property
    def terminated(self) -> bool:
        """Whether a done or error event has been written."""
        return self._terminated

    async def connected(self) -> None:
        """Write the connection confirmation; only the first call writes."""
        if self._connected:
            return
        self._connected = True
        await self.sink.write(Connected())

    async def fail(self, error: BaseException) -> None:
        """Write the terminal error event unless the stream already ended."""
        if self._terminated:
            logger.warning(f"Suppressing error after stream termination: {error}")
            return
        self._terminated = True
        await self.sink.write(Error(error=error_message(error)))

    async def pump(self, events: AsyncIterable[StreamEvent]) -> bool:
        """Translate and write events in arrival order.

        A failure raised by the event source becomes a single error event
        and ends the translation.

        Returns:
            True if the source completed and ``done`` was written
        """
        try:
            async for event in events:
                outbound = translate(event)
                if outbound is None:
                    continue
                if self._terminated:
                    logger.warning(f"Ignoring '{outbound.type}' event after stream termination")
                    continue
                if isinstance(outbound, Done):
                    self._terminated = True
                await self.sink.write(outbound)
        except Exception as e:
            logger.exception("Error in agent stream")
            await self.fail(e)
            return False
        return self._terminated
