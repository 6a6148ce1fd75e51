"""Database infrastructure module.

This module provides chat persistence:
- Database engine management
- Chat store contract with SQL and in-memory implementations
- Setup/teardown during the application lifespan
"""

from agentic_chat_stream.platform.database.engine import DbEngine
from agentic_chat_stream.platform.database.repositories import ChatRepository
from agentic_chat_stream.platform.database.setup import close_db, setup_db
from agentic_chat_stream.platform.database.store import (
    Chat,
    ChatNotFoundError,
    ChatStore,
    InMemoryChatStore,
    StoredMessage,
)

__all__ = [
    "Chat",
    "ChatNotFoundError",
    "ChatRepository",
    "ChatStore",
    "DbEngine",
    "InMemoryChatStore",
    "StoredMessage",
    "setup_db",
    "close_db",
]
