"""Infrastructure routes mounted on every deployment, without authentication."""

from fastapi import APIRouter

from agentic_chat_stream.platform.server.routes.base import base_router

root = APIRouter()
root.include_router(base_router)
