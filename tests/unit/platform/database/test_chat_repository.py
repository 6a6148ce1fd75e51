"""Unit tests for ChatRepository.

The database is replaced by a fake engine whose transaction yields a mocked
connection, so these tests check statement flow and row mapping only.
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock

import pytest

from agentic_chat_stream.platform.agent.messages import Role
from agentic_chat_stream.platform.database.repositories import ChatRepository
from agentic_chat_stream.platform.database.store import ChatNotFoundError

CREATED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _result(first=None, rows=()) -> Mock:
    result = Mock()
    result.first = Mock(return_value=first)
    result.mappings.return_value.first.return_value = first
    result.mappings.return_value.all.return_value = list(rows)
    return result


@pytest.fixture
def conn() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def fake_db(conn: AsyncMock) -> Mock:
    """Create a fake database engine whose transactions share one connection."""
    db = Mock()

    @asynccontextmanager
    async def fake_transaction():
        yield conn

    db.transaction = fake_transaction
    return db


class TestChatRepository:
    """Tests for ChatRepository."""

    async def test_create_chat_inserts_one_row(self, fake_db, conn):
        chat = await ChatRepository(fake_db).create_chat("alice", "Trip")

        assert chat.user_id == "alice"
        assert chat.title == "Trip"
        conn.execute.assert_awaited_once()

    async def test_get_chat_maps_row(self, fake_db, conn):
        row = {"id": "c1", "user_id": "alice", "title": "Trip", "created_at": CREATED_AT}
        conn.execute.return_value = _result(first=row)

        chat = await ChatRepository(fake_db).get_chat("c1")

        assert chat is not None
        assert (chat.id, chat.user_id, chat.created_at) == ("c1", "alice", CREATED_AT)

    async def test_get_missing_chat_returns_none(self, fake_db, conn):
        conn.execute.return_value = _result(first=None)

        assert await ChatRepository(fake_db).get_chat("missing") is None

    async def test_append_to_missing_chat_raises(self, fake_db, conn):
        conn.execute.return_value = _result(first=None)

        with pytest.raises(ChatNotFoundError):
            await ChatRepository(fake_db).append("missing", Role.USER, "hi")
        conn.execute.assert_awaited_once()

    async def test_append_inserts_after_existence_check(self, fake_db, conn):
        conn.execute.side_effect = [_result(first=("c1",)), _result()]

        message = await ChatRepository(fake_db).append("c1", Role.ASSISTANT, "line\nbreak")

        assert conn.execute.await_count == 2
        assert message.role == Role.ASSISTANT
        assert message.content == "line\nbreak"

    async def test_append_rejects_tool_role_without_touching_db(self, fake_db, conn):
        with pytest.raises(ValueError):
            await ChatRepository(fake_db).append("c1", Role.TOOL, "result")
        conn.execute.assert_not_awaited()

    async def test_list_messages_maps_roles(self, fake_db, conn):
        rows = [
            {"id": "m1", "chat_id": "c1", "role": "user", "content": "hi", "created_at": CREATED_AT},
            {"id": "m2", "chat_id": "c1", "role": "assistant", "content": "hello", "created_at": CREATED_AT},
        ]
        conn.execute.return_value = _result(rows=rows)

        messages = await ChatRepository(fake_db).list_messages("c1")

        assert [(m.id, m.role) for m in messages] == [("m1", Role.USER), ("m2", Role.ASSISTANT)]

    async def test_last_message_maps_row(self, fake_db, conn):
        row = {"id": "m2", "chat_id": "c1", "role": "assistant", "content": "hello", "created_at": CREATED_AT}
        conn.execute.return_value = _result(first=row)

        message = await ChatRepository(fake_db).last_message("c1")

        assert (message.id, message.role, message.content) == ("m2", Role.ASSISTANT, "hello")

    async def test_last_message_of_empty_chat_is_none(self, fake_db, conn):
        conn.execute.return_value = _result(first=None)

        assert await ChatRepository(fake_db).last_message("c1") is None
