from fastapi import Request

from agentic_chat_stream.platform.settings import ChatSettings, Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_chat_settings(request: Request) -> ChatSettings:
    """Agent loop and streaming limits of the running app."""
    return get_settings(request).chat
