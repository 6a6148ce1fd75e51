"""agentic-chat-stream - A streaming, tool-augmented chat agent service with LangGraph orchestration and MCP tool integration."""

from .platform.server.app import create_app
from .platform.settings import Settings


def app():
    """Create the FastAPI application instance."""
    settings = Settings()  # type: ignore[call-arg]
    return create_app(settings)
