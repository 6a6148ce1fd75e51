"""Unit tests for the event translator."""

from collections.abc import AsyncIterator

import pytest

from agentic_chat_stream.platform.agent.messages import (
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
from agentic_chat_stream.platform.streaming.translator import (
    DEFAULT_ERROR_MESSAGE,
    EventStreamTranslator,
    translate,
)


async def _events(*events, error: Exception | None = None) -> AsyncIterator:
    for event in events:
        yield event
    if error is not None:
        raise error


async def _written(sink: EventSink) -> list:
    sink.close()
    return [event async for event in sink]


class TestTranslate:
    """Tests for the one-to-one event mapping."""

    def test_token_delta(self):
        assert translate(TokenDelta(text="Hel")) == Token(token="Hel")

    def test_empty_token_delta_is_dropped(self):
        assert translate(TokenDelta(text="")) is None

    def test_tool_started(self):
        event = ToolStarted(name="search", input={"query": "x"})
        assert translate(event) == ToolStart(tool="search", input={"query": "x"})

    def test_tool_finished(self):
        event = ToolFinished(name="search", output=["a", "b"])
        assert translate(event) == ToolEnd(tool="search", output=["a", "b"])

    def test_turn_complete(self):
        assert translate(TurnComplete()) == Done()

    def test_unknown_event_raises(self):
        with pytest.raises(TypeError):
            translate("not-an-event")  # type: ignore[arg-type]


class TestEventStreamTranslator:
    """Tests for EventStreamTranslator."""

    async def test_connected_written_once(self):
        sink = EventSink()
        translator = EventStreamTranslator(sink)

        await translator.connected()
        await translator.connected()

        assert await _written(sink) == [Connected()]

    async def test_pump_writes_in_order_and_completes(self):
        sink = EventSink()
        translator = EventStreamTranslator(sink)

        completed = await translator.pump(
            _events(
                TokenDelta(text="Hi"),
                TokenDelta(text=""),
                ToolStarted(name="clock", input={}),
                ToolFinished(name="clock", output="12:00"),
                TokenDelta(text="!"),
                TurnComplete(),
            )
        )

        assert completed is True
        assert translator.terminated
        assert await _written(sink) == [
            Token(token="Hi"),
            ToolStart(tool="clock", input={}),
            ToolEnd(tool="clock", output="12:00"),
            Token(token="!"),
            Done(),
        ]

    async def test_source_error_becomes_single_error_event(self):
        sink = EventSink()
        translator = EventStreamTranslator(sink)

        completed = await translator.pump(
            _events(TokenDelta(text="partial"), error=RuntimeError("model exploded"))
        )

        assert completed is False
        assert await _written(sink) == [Token(token="partial"), Error(error="model exploded")]

    async def test_events_after_done_are_ignored(self):
        sink = EventSink()
        translator = EventStreamTranslator(sink)

        await translator.pump(_events(TurnComplete(), TokenDelta(text="late")))

        assert await _written(sink) == [Done()]

    async def test_fail_after_done_is_suppressed(self):
        sink = EventSink()
        translator = EventStreamTranslator(sink)

        await translator.pump(_events(TurnComplete()))
        await translator.fail(RuntimeError("too late"))

        assert await _written(sink) == [Done()]

    async def test_fail_uses_default_message_for_blank_error(self):
        sink = EventSink()
        translator = EventStreamTranslator(sink)

        await translator.fail(RuntimeError())

        assert await _written(sink) == [Error(error=DEFAULT_ERROR_MESSAGE)]

    async def test_source_ending_without_completion_is_not_done(self):
        sink = EventSink()
        translator = EventStreamTranslator(sink)

        completed = await translator.pump(_events(TokenDelta(text="x")))

        assert completed is False
        assert not translator.terminated
