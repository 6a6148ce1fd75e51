"""Chat repository backed by PostgreSQL.

Provides the ``ChatStore`` operations over the ``chats`` and ``messages``
tables using SQLAlchemy Core statements.
"""

import logging

import sqlalchemy as sa

from agentic_chat_stream.platform.agent.messages import Role
from agentic_chat_stream.platform.database.engine import DbEngine
from agentic_chat_stream.platform.database.store import (
    Chat,
    ChatNotFoundError,
    StoredMessage,
    check_role,
    new_id,
    utc_now,
)
from agentic_chat_stream.platform.database.tables import chats, messages

logger = logging.getLogger(__name__)


class ChatRepository:
    """Repository for chats and their messages.

    Each operation runs in its own transaction.
    """

    def __init__(self, db_engine: DbEngine) -> None:
        self._db = db_engine

    async def create_chat(self, user_id: str, title: str) -> Chat:
        chat = Chat(id=new_id(), user_id=user_id, title=title, created_at=utc_now())
        async with self._db.transaction() as conn:
            await conn.execute(
                sa.insert(chats).values(
                    id=chat.id,
                    user_id=chat.user_id,
                    title=chat.title,
                    created_at=chat.created_at,
                )
            )
        logger.info(f"Created chat {chat.id}")
        return chat

    async def get_chat(self, chat_id: str) -> Chat | None:
        query = sa.select(chats).where(chats.c.id == chat_id)
        async with self._db.transaction() as conn:
            row = (await conn.execute(query)).mappings().first()
        return self._to_chat(row) if row else None

    async def list_chats(self, user_id: str) -> list[Chat]:
        query = (
            sa.select(chats)
            .where(chats.c.user_id == user_id)
            .order_by(chats.c.created_at.desc())
        )
        async with self._db.transaction() as conn:
            rows = (await conn.execute(query)).mappings().all()
        return [self._to_chat(row) for row in rows]

    async def append(self, chat_id: str, role: Role, content: str) -> StoredMessage:
        message = StoredMessage(
            id=new_id(),
            chat_id=chat_id,
            role=check_role(role),
            content=content,
            created_at=utc_now(),
        )
        async with self._db.transaction() as conn:
            exists = await conn.execute(sa.select(chats.c.id).where(chats.c.id == chat_id))
            if exists.first() is None:
                raise ChatNotFoundError(chat_id)
            await conn.execute(
                sa.insert(messages).values(
                    id=message.id,
                    chat_id=message.chat_id,
                    role=str(message.role),
                    content=message.content,
                    created_at=message.created_at,
                )
            )
        return message

    async def list_messages(self, chat_id: str) -> list[StoredMessage]:
        query = (
            sa.select(messages)
            .where(messages.c.chat_id == chat_id)
            .order_by(messages.c.seq.asc())
        )
        async with self._db.transaction() as conn:
            rows = (await conn.execute(query)).mappings().all()
        return [self._to_message(row) for row in rows]

    async def last_message(self, chat_id: str) -> StoredMessage | None:
        query = (
            sa.select(messages)
            .where(messages.c.chat_id == chat_id)
            .order_by(messages.c.seq.desc())
            .limit(1)
        )
        async with self._db.transaction() as conn:
            row = (await conn.execute(query)).mappings().first()
        return self._to_message(row) if row else None

    @staticmethod
    def _to_message(row) -> StoredMessage:
        return StoredMessage(
            id=row["id"],
            chat_id=row["chat_id"],
            role=Role(row["role"]),
            content=row["content"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _to_chat(row) -> Chat:
        return Chat(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            created_at=row["created_at"],
        )
