"""Chat HTTP endpoints.

This module provides the streaming chat endpoint and the endpoints for
creating chats and reading their stored messages. Every endpoint requires a
bearer token and only exposes chats owned by the caller.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from agentic_chat_stream.agents.chat.agent import ChatAgentBuilder
from agentic_chat_stream.agents.chat.orchestrator import ChatStreamOrchestrator
from agentic_chat_stream.agents.chat.schemas import (
    ChatResponse,
    ChatStreamRequest,
    CreateChatRequest,
    StoredMessageResponse,
)
from agentic_chat_stream.platform.agent.protocol import Agent
from agentic_chat_stream.platform.database.store import Chat, ChatStore, StoredMessage
from agentic_chat_stream.platform.server.dependencies.agents import get_agent
from agentic_chat_stream.platform.server.dependencies.auth import get_current_user_id
from agentic_chat_stream.platform.server.dependencies.settings import get_chat_settings
from agentic_chat_stream.platform.server.dependencies.store import get_chat_store
from agentic_chat_stream.platform.settings import ChatSettings

logger = logging.getLogger(__name__)

chat_router = APIRouter(prefix="/api/chat", tags=["chat"])
chats_router = APIRouter(prefix="/chats", tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable proxy buffering
}


def get_orchestrator(
    agent: Agent = Depends(get_agent(ChatAgentBuilder)),
    store: ChatStore = Depends(get_chat_store),
    chat_settings: ChatSettings = Depends(get_chat_settings),
) -> ChatStreamOrchestrator:
    return ChatStreamOrchestrator(agent, store, chat_settings.stream_buffer_size)


def _message_response(message: StoredMessage) -> StoredMessageResponse:
    return StoredMessageResponse(
        id=message.id,
        chat_id=message.chat_id,
        role=str(message.role),
        content=message.content,
        created_at=message.created_at,
    )


async def get_owned_chat(chat_id: str, user_id: str, store: ChatStore) -> Chat:
    """Load a chat owned by ``user_id``.

    Raises:
        HTTPException: 404 if the chat does not exist or belongs to someone else
    """
    chat = await store.get_chat(chat_id)
    if chat is None or chat.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")
    return chat


@chat_router.post("/stream")
async def stream_handler(
    payload: ChatStreamRequest,
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_chat_store),
    orchestrator: ChatStreamOrchestrator = Depends(get_orchestrator),
):
    """Run one chat turn and stream it as Server-Sent Events.

    Authentication, body validation and chat ownership are checked before the
    stream opens; afterwards every failure is reported as an ``error`` event.

    Returns:
        StreamingResponse emitting ``connected``, then tokens and tool events,
        then exactly one of ``done`` or ``error``
    """
    await get_owned_chat(payload.chat_id, user_id, store)
    logger.info(f"Streaming turn for chat {payload.chat_id} ({len(payload.messages)} prior messages)")
    return StreamingResponse(
        orchestrator.stream(payload),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@chats_router.post("", status_code=status.HTTP_201_CREATED, response_model=ChatResponse)
async def create_chat(
    payload: CreateChatRequest,
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_chat_store),
):
    chat = await store.create_chat(user_id, payload.title)
    return ChatResponse(id=chat.id, title=chat.title, created_at=chat.created_at)


@chats_router.get("", response_model=list[ChatResponse])
async def list_chats(
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_chat_store),
):
    """List the caller's chats, newest first."""
    chats = await store.list_chats(user_id)
    return [ChatResponse(id=c.id, title=c.title, created_at=c.created_at) for c in chats]


@chats_router.get("/{chat_id}/messages", response_model=list[StoredMessageResponse])
async def list_messages(
    chat_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_chat_store),
):
    """List the stored messages of one of the caller's chats, oldest first."""
    await get_owned_chat(chat_id, user_id, store)
    messages = await store.list_messages(chat_id)
    return [_message_response(m) for m in messages]


@chats_router.get("/{chat_id}/messages/last", response_model=StoredMessageResponse | None)
async def last_message(
    chat_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_chat_store),
):
    """Return the latest stored message of one of the caller's chats, or null if it is empty."""
    await get_owned_chat(chat_id, user_id, store)
    message = await store.last_message(chat_id)
    return _message_response(message) if message else None
