"""Database repositories for data access abstraction."""

from agentic_chat_stream.platform.database.repositories.chats import ChatRepository

__all__ = [
    "ChatRepository",
]
