"""HTTP server infrastructure module.

This module provides the FastAPI application factory and HTTP-related utilities:
- Application factory and lifespan
- Platform route handlers
- FastAPI dependencies
- Health checks
"""

from agentic_chat_stream.platform.server.app import create_app
from agentic_chat_stream.platform.server.health import HealthCheck

__all__ = [
    "create_app",
    "HealthCheck",
]
