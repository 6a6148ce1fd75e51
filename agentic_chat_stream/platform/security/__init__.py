"""Request authentication."""

from agentic_chat_stream.platform.security.auth import TokenVerifier, Unauthorized

__all__ = [
    "TokenVerifier",
    "Unauthorized",
]
