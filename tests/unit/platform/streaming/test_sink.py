"""Unit tests for EventSink."""

import asyncio

import pytest

from agentic_chat_stream.platform.streaming.protocol import Connected, Done, Token
from agentic_chat_stream.platform.streaming.sink import EventSink


async def _drain(sink: EventSink) -> list:
    return [event async for event in sink]


class TestEventSink:
    """Tests for the bounded event sink."""

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            EventSink(0)

    async def test_preserves_fifo_order(self):
        sink = EventSink(8)
        events = [Connected(), Token(token="a"), Token(token="b"), Done()]
        for event in events:
            assert await sink.write(event) is True
        sink.close()

        assert await _drain(sink) == events

    async def test_full_buffer_suspends_writer(self):
        sink = EventSink(1)
        await sink.write(Token(token="a"))

        blocked = asyncio.create_task(sink.write(Token(token="b")))
        await asyncio.sleep(0)
        assert not blocked.done()
        assert sink.pending() == 1

        consumer = sink.__aiter__()
        assert await anext(consumer) == Token(token="a")
        assert await blocked is True
        assert await anext(consumer) == Token(token="b")

    async def test_close_is_idempotent(self):
        sink = EventSink(4)
        assert sink.close() is True
        assert sink.close() is False
        assert sink.closed

    async def test_write_after_close_is_discarded(self):
        sink = EventSink(4)
        sink.close()

        assert await sink.write(Token(token="late")) is False
        assert await _drain(sink) == []

    async def test_buffered_events_are_drained_after_close(self):
        sink = EventSink(2)
        await sink.write(Token(token="a"))
        await sink.write(Done())
        # Buffer is full, so the close marker cannot be enqueued
        sink.close()

        assert await _drain(sink) == [Token(token="a"), Done()]

    async def test_consumer_waits_for_producer(self):
        sink = EventSink(4)

        async def produce():
            await asyncio.sleep(0.01)
            await sink.write(Connected())
            sink.close()

        producer = asyncio.create_task(produce())
        assert await _drain(sink) == [Connected()]
        await producer
