"""Chat store dependency for FastAPI routes."""

from fastapi import Request

from agentic_chat_stream.platform.database.store import ChatStore


def get_chat_store(request: Request) -> ChatStore:
    """Get the chat store selected at startup (SQL or in-memory)."""
    return request.app.state.chat_store
