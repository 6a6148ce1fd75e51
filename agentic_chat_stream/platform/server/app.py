"""FastAPI application factory and server configuration.

This module creates and configures the FastAPI application with all middleware,
routes, and lifecycle management.
"""

import asyncio
import logging
import os
import signal
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from agentic_chat_stream.agents.chat.agent import ChatAgentBuilder
from agentic_chat_stream.agents.chat.routes import chat_router, chats_router
from agentic_chat_stream.platform.agent.config import MCPConfig
from agentic_chat_stream.platform.database.setup import close_db, setup_db
from agentic_chat_stream.platform.observability import errors as bugsnag
from agentic_chat_stream.platform.observability.logging import configure_logging
from agentic_chat_stream.platform.observability.metrics import prometheus_middleware
from agentic_chat_stream.platform.security.auth import TokenVerifier, http_jwks_fetcher
from agentic_chat_stream.platform.server.health import HealthCheck
from agentic_chat_stream.platform.server.middlewares import CorrelationIdMiddleware
from agentic_chat_stream.platform.server.routes import root as root_router
from agentic_chat_stream.platform.settings import Settings

logger = logging.getLogger(__name__)


def mcp_configs_from_settings(settings: Settings) -> list[MCPConfig]:
    return [
        MCPConfig(
            server_url=server.url,
            tool_prefix=server.prefix,
            timeout=server.timeout,
            sse_read_timeout=server.sse_read_timeout,
            read_timeout=server.read_timeout,
        )
        for server in settings.tools_mcp
    ]


async def build_agents(settings: Settings) -> dict[type, object]:
    """Build every agent once; routes look them up by builder class."""
    builder = ChatAgentBuilder.default_builder(
        litellm=settings.litellm,
        chat=settings.chat,
        mcp_configs=mcp_configs_from_settings(settings),
    )
    agent = await builder.build()
    logger.info(f"Agent '{agent.slug}' ready with {len(agent.tools)} tool(s)")
    return {ChatAgentBuilder: agent}


def lifespan_closure(settings):
    @asynccontextmanager
    async def lifespan(app):
        """
        Use this to initialize all of the singleton dependencies and shared
        objects.  i.e. db, reporters, bugsnag, etc
        """
        if settings.bugsnag.release_stage in ["production", "development"]:
            signal_handler = SignalHandler(app)
            signal_handler.register_signal_handler()
        await bugsnag.initialize_bugsnag(
            settings.bugsnag.api_key,
            settings.bugsnag.release_stage,
        )

        # Configure structured logging (JSON in prod/dev, console in local)
        if settings.app_http.log_json is not None:
            json_output = settings.app_http.log_json
        else:
            json_output = settings.bugsnag.release_stage != "local"
        configure_logging(settings.app_http.log_level, json_output=json_output)

        # Store settings in app.state for setup_db and route dependencies
        app.state.settings = settings

        # Shared HTTP client, used for the signing key set
        app.state.http_client = httpx.AsyncClient(
            timeout=30.0,
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
        )
        app.state.token_verifier = TokenVerifier(
            settings.auth,
            http_jwks_fetcher(app.state.http_client, settings.auth.jwks_url),
        )

        await setup_db(app)

        app.state.agents = await build_agents(settings)

        HealthCheck.enable()
        try:
            yield
        finally:
            HealthCheck.disable()
            await app.state.http_client.aclose()
            await close_db(app)

    return lifespan


def create_app(settings: Settings):
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings instance

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(lifespan=lifespan_closure(settings))
    app.add_middleware(CorrelationIdMiddleware)
    app.middleware("http")(prometheus_middleware)

    # Include platform routes (health, info, metrics)
    app.include_router(root_router)

    # Include chat routes
    app.include_router(chat_router)
    app.include_router(chats_router)

    return app


class SignalHandler:
    def __init__(self, app: FastAPI):
        self.app = app

    async def handle_exit(self):
        """
        Handle the exit of the server
        Do NOT use FastAPI @app.on_event("shutdown") or lifespan
        The problem with this method is, it is invoked *after* server
        stops accepting request, so it does not give us any time to
        drain requests in progress and DNS cache to refresh
        """
        HealthCheck.disable()
        for _ in range(20):
            logger.info("Shutting down...")
            await asyncio.sleep(1)

        await self.app.state.http_client.aclose()
        await close_db(self.app)

        # stop service successfully
        os.kill(os.getpid(), signal.SIGUSR1)

    def signal_handler(self):
        asyncio.create_task(self.handle_exit())

    def register_signal_handler(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in [signal.SIGINT, signal.SIGTERM]:
            loop.add_signal_handler(sig, self.signal_handler)
