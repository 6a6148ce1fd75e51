"""Chat store setup and teardown functions.

This module provides functions for initializing and closing the chat store
during FastAPI application lifecycle. Without database settings the
in-memory store is used.
"""

import logging

from fastapi import FastAPI

from agentic_chat_stream.platform.constants import SERVICE_NAME

from .engine import DbEngine
from .repositories import ChatRepository
from .store import InMemoryChatStore
from .tables import metadata

logger = logging.getLogger(__name__)


async def setup_db(app: FastAPI) -> None:
    db_settings = app.state.settings.chat_db
    app.state.db_engine = None

    if db_settings is None:
        logger.warning("No chat database configured, using the in-memory chat store")
        app.state.chat_store = InMemoryChatStore()
        return

    logger.info("Setting up chat database...")
    db_engine = DbEngine(instance_name="Chat", app_name=SERVICE_NAME, pool_size=5)
    engine = await db_engine.connect(**db_settings.model_dump())
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    app.state.db_engine = db_engine
    app.state.chat_store = ChatRepository(db_engine)
    logger.info("Chat database setup complete")


async def close_db(app: FastAPI) -> None:
    db_engine = getattr(app.state, "db_engine", None)
    if db_engine is not None:
        logger.info("Closing chat database...")
        await db_engine.disconnect()
    app.state.db_engine = None
    app.state.chat_store = None
