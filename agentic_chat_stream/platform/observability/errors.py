"""Bugsnag error reporting.

Errors reach Bugsnag through a handler on the root logger, so a failed chat
turn logged with ``logger.exception`` is reported once, tagged with the
request's correlation ID and chat ID.
"""

import logging

import bugsnag
import structlog
from bugsnag.handlers import BugsnagHandler

from agentic_chat_stream.platform.constants import SERVICE_VERSION
from agentic_chat_stream.platform.observability.logging import correlation_id_ctx


def add_request_context(event: bugsnag.Event) -> None:
    """Attach the correlation and chat IDs bound for the current request."""
    context = structlog.contextvars.get_contextvars()
    chat_id = context.get("chat_id")
    if chat_id:
        event.context = f"chat:{chat_id}"
    event.add_tab(
        "request",
        {"correlation_id": correlation_id_ctx.get(), "chat_id": chat_id},
    )


async def initialize_bugsnag(api_key: str, release_stage: str) -> None:
    """Configure Bugsnag and report ERROR-level log records.

    No-op when ``release_stage`` is "local".
    """
    if release_stage == "local":
        return
    bugsnag.configure(
        api_key=api_key,
        release_stage=release_stage,
        app_version=SERVICE_VERSION,
        auto_notify=True,
    )
    bugsnag.before_notify(add_request_context)

    handler = BugsnagHandler()
    handler.setLevel(logging.ERROR)
    logging.getLogger().addHandler(handler)
