"""Chat persistence contract and the in-memory implementation.

The SQL-backed implementation lives in ``repositories.chats``; both satisfy
``ChatStore`` so routes and the orchestrator never know which one is active.
"""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from agentic_chat_stream.platform.agent.messages import Role

PERSISTED_ROLES = frozenset({Role.USER, Role.ASSISTANT})


class ChatNotFoundError(LookupError):
    """Raised when a message targets a chat that does not exist."""

    def __init__(self, chat_id: str):
        self.chat_id = chat_id
        super().__init__(f"Chat '{chat_id}' not found")


@dataclass(frozen=True)
class Chat:
    """A chat owned by one user."""

    id: str
    user_id: str
    title: str
    created_at: datetime


@dataclass(frozen=True)
class StoredMessage:
    """A persisted user or assistant message."""

    id: str
    chat_id: str
    role: Role
    content: str
    created_at: datetime


class ChatStore(Protocol):
    """Persistence operations used by the chat routes and orchestrator."""

    async def create_chat(self, user_id: str, title: str) -> Chat: ...

    async def get_chat(self, chat_id: str) -> Chat | None: ...

    async def list_chats(self, user_id: str) -> list[Chat]:
        """Chats owned by ``user_id``, newest first."""
        ...

    async def append(self, chat_id: str, role: Role, content: str) -> StoredMessage: ...

    async def list_messages(self, chat_id: str) -> list[StoredMessage]:
        """Messages of a chat, oldest first."""
        ...

    async def last_message(self, chat_id: str) -> StoredMessage | None:
        """Most recent message of a chat, or None if it has none."""
        ...


def check_role(role: Role) -> Role:
    """Validate that a role may be persisted.

    Raises:
        ValueError: For system and tool roles
    """
    role = Role(role)
    if role not in PERSISTED_ROLES:
        raise ValueError(f"Role '{role}' cannot be persisted")
    return role


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(UTC)


class InMemoryChatStore:
    """Process-local chat store for local runs and tests.

    All state lives in dicts mutated from the event loop thread only.
    """

    def __init__(self) -> None:
        self._chats: dict[str, Chat] = {}
        self._messages: dict[str, list[StoredMessage]] = {}

    async def create_chat(self, user_id: str, title: str) -> Chat:
        chat = Chat(id=new_id(), user_id=user_id, title=title, created_at=utc_now())
        self._chats[chat.id] = chat
        self._messages[chat.id] = []
        return chat

    async def get_chat(self, chat_id: str) -> Chat | None:
        return self._chats.get(chat_id)

    async def list_chats(self, user_id: str) -> list[Chat]:
        # dicts keep insertion order, so reversing gives newest first
        return [chat for chat in reversed(self._chats.values()) if chat.user_id == user_id]

    async def append(self, chat_id: str, role: Role, content: str) -> StoredMessage:
        if chat_id not in self._chats:
            raise ChatNotFoundError(chat_id)
        message = StoredMessage(
            id=new_id(),
            chat_id=chat_id,
            role=check_role(role),
            content=content,
            created_at=utc_now(),
        )
        self._messages[chat_id].append(message)
        return message

    async def list_messages(self, chat_id: str) -> list[StoredMessage]:
        return list(self._messages.get(chat_id, []))

    async def last_message(self, chat_id: str) -> StoredMessage | None:
        stored = self._messages.get(chat_id)
        return stored[-1] if stored else None
