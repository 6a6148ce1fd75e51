"""Request orchestration for one streaming chat turn.

One request runs as a producer task (persistence, agent loop, translation)
writing into a bounded sink, and a consumer (the response body) draining the
sink as SSE lines. The sink is closed exactly once whatever way the request
ends, and a client disconnect cancels the producer.
"""

import asyncio
import logging
from collections.abc import AsyncIterator

import structlog

from agentic_chat_stream.agents.chat.schemas import ChatStreamRequest
from agentic_chat_stream.platform.agent.exceptions import AgentInvocationError
from agentic_chat_stream.platform.agent.messages import (
    ConversationState,
    Message,
    Role,
    StreamEvent,
    TurnComplete,
)
from agentic_chat_stream.platform.agent.protocol import Agent
from agentic_chat_stream.platform.database.store import ChatStore
from agentic_chat_stream.platform.streaming.protocol import encode_event
from agentic_chat_stream.platform.streaming.sink import DEFAULT_CAPACITY, EventSink
from agentic_chat_stream.platform.streaming.translator import EventStreamTranslator

logger = logging.getLogger(__name__)


def build_conversation(request: ChatStreamRequest) -> ConversationState:
    """Client-held history followed by the new user message."""
    conversation = ConversationState(thread_id=request.chat_id)
    for message in request.messages:
        conversation.append(Message(role=Role(message.role), content=message.content))
    conversation.append(Message(role=Role.USER, content=request.new_message))
    return conversation


class ChatStreamOrchestrator:
    """Drives one chat turn from validated request to closed stream."""

    def __init__(self, agent: Agent, store: ChatStore, buffer_size: int = DEFAULT_CAPACITY):
        self.agent = agent
        self.store = store
        self.buffer_size = buffer_size

    async def _persist_reply(
        self,
        events: AsyncIterator[StreamEvent],
        conversation: ConversationState,
    ) -> AsyncIterator[StreamEvent]:
        """Pass events through, storing the final reply before completion."""
        async for event in events:
            if isinstance(event, TurnComplete):
                reply = conversation.final_response()
                if reply:
                    await self.store.append(conversation.thread_id, Role.ASSISTANT, reply)
                else:
                    logger.warning(f"Chat {conversation.thread_id} finished without a reply")
            yield event

    async def run(self, request: ChatStreamRequest, sink: EventSink) -> None:
        """Produce the full outbound event sequence for one turn into ``sink``.

        The sink is closed when this returns, raises, or is cancelled.
        """
        translator = EventStreamTranslator(sink)
        try:
            # The producer task runs in its own context copy
            structlog.contextvars.bind_contextvars(chat_id=request.chat_id)
            await translator.connected()
            await self.store.append(request.chat_id, Role.USER, request.new_message)
            conversation = build_conversation(request)
            completed = await translator.pump(
                self._persist_reply(self.agent.run_stream(conversation), conversation)
            )
            if not completed and not translator.terminated:
                await translator.fail(AgentInvocationError("agent stream ended without completion"))
            logger.info(
                f"Chat {request.chat_id} turn {'completed' if completed else 'failed'} "
                f"with {len(conversation.messages)} messages"
            )
        except Exception as e:
            logger.exception(f"Error in chat stream for chat {request.chat_id}")
            await translator.fail(e)
        finally:
            sink.close()

    async def stream(self, request: ChatStreamRequest) -> AsyncIterator[str]:
        """Yield the SSE-encoded events of one turn.

        Leaving the iteration early (client disconnect) cancels the producer.
        """
        sink = EventSink(self.buffer_size)
        producer = asyncio.create_task(self.run(request, sink))
        try:
            async for event in sink:
                yield encode_event(event)
        finally:
            if not producer.done():
                logger.info(f"Client left chat {request.chat_id}, cancelling the turn")
                producer.cancel()
            await asyncio.wait({producer})
            sink.close()
