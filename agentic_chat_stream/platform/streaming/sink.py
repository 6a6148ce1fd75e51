"""Bounded single-producer/single-consumer event sink.

The sink sits between the event translator and the HTTP response body. A
full buffer suspends the writer instead of dropping events; once closed,
further writes are ignored because nobody is left to read them.
"""

import asyncio
import logging
from collections.abc import AsyncIterator

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1024

_CLOSED = object()


class EventSink:
    """Backpressured FIFO of outbound events for one request."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._queue: asyncio.Queue[BaseModel | object] = asyncio.Queue(maxsize=capacity)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def capacity(self) -> int:
        return self._queue.maxsize

    def pending(self) -> int:
        """Number of events buffered and not yet consumed."""
        return self._queue.qsize()

    async def write(self, event: BaseModel) -> bool:
        """Enqueue an event, waiting while the buffer is full.

        Returns:
            False if the sink was already closed and the event was discarded
        """
        if self._closed:
            logger.debug(f"Dropping '{getattr(event, 'type', event)}' event: sink is closed")
            return False
        await self._queue.put(event)
        return True

    def close(self) -> bool:
        """Close the sink; the consumer drains what is buffered and stops.

        Returns:
            True on the call that closed the sink, False if it was already closed
        """
        if self._closed:
            return False
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            # The consumer stops once it drains the buffer and sees the flag
            pass
        return True

    async def __aiter__(self) -> AsyncIterator[BaseModel]:
        while True:
            if self._closed and self._queue.empty():
                return
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item  # type: ignore[misc]
