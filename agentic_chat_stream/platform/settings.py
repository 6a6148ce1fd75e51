"""Application settings and configuration.

This module provides Pydantic settings classes for application configuration,
loaded from environment variables with support for nested configuration.
"""

import logging

import pydantic_settings
from pydantic import BaseModel, Field, field_validator


class DBConnectionSettings(BaseModel):
    host: str
    port: int
    user: str
    password: str
    database: str
    echo: bool = False


class AppHTTPSettings(BaseModel):
    host: str = Field("0.0.0.0")
    port: int = Field(8000)
    log_level: str = Field("INFO")
    log_json: bool | None = Field(
        None, description="Override log format: True=JSON, False=console, None=auto"
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v):
        v_upper = v.upper()
        if v_upper not in logging._nameToLevel:
            raise ValueError(f'invalid value "{v}"')
        return v_upper


class BugsnagSettings(BaseModel):
    api_key: str = Field("")
    release_stage: str = Field("local")

    @field_validator("release_stage")
    @classmethod
    def _validate_bugsnag_release_stage(cls, v):
        if v not in ["development", "production", "local"]:
            raise ValueError(f'invalid bugsnag release stage "{v}"')
        return v


class LitellmSettings(BaseModel):
    proxy_api_base: str
    proxy_api_key: str
    model: str = Field("litellm_proxy/anthropic/claude-3-5-sonnet-20241022")


class AuthSettings(BaseModel):
    """Bearer token verification settings.

    Attributes:
        jwks_url: URL of the identity provider's JSON Web Key Set
        issuer: Expected ``iss`` claim (not checked when empty)
        audience: Expected ``aud`` claim (not checked when None)
        algorithms: Accepted signing algorithms
        jwks_cache_seconds: How long a fetched key set is reused
    """

    jwks_url: str
    issuer: str = ""
    audience: str | None = None
    algorithms: list[str] = ["RS256"]
    jwks_cache_seconds: float = 300.0


class ChatSettings(BaseModel):
    """Agent loop and streaming limits.

    Attributes:
        max_context_messages: Window size (in messages) sent to the model
        max_reasoning_steps: Model calls allowed before a final answer is forced
        recursion_limit: LangGraph super-step limit for one run
        stream_buffer_size: Capacity of the per-request outbound event buffer
        temperature: Sampling temperature
        max_tokens: Maximum tokens generated per model call
    """

    max_context_messages: int = Field(10, ge=1)
    max_reasoning_steps: int = Field(15, ge=1)
    recursion_limit: int = Field(50, ge=2)
    stream_buffer_size: int = Field(1024, ge=1)
    temperature: float = Field(0.7, ge=0.0, le=1.0)
    max_tokens: int = Field(4096, ge=1)


class MCPServerSettings(BaseModel):
    """Configuration for a single MCP server.

    Attributes:
        url: URL of the MCP server endpoint
        prefix: Optional prefix for tool names to avoid collisions
        timeout: Connection timeout in seconds
        sse_read_timeout: SSE stream read timeout in seconds
        read_timeout: General read timeout in seconds
    """

    url: str
    prefix: str | None = None
    timeout: float = 60.0
    sse_read_timeout: float = 300.0
    read_timeout: float = 120.0


class Settings(pydantic_settings.BaseSettings):
    model_config = pydantic_settings.SettingsConfigDict(env_nested_delimiter="__")

    app_http: AppHTTPSettings = AppHTTPSettings()
    bugsnag: BugsnagSettings = BugsnagSettings()

    # LiteLLM configuration
    litellm: LitellmSettings

    # Bearer token verification
    auth: AuthSettings

    # Chat storage; the in-memory store is used when unset
    chat_db: DBConnectionSettings | None = None

    # Agent loop configuration
    chat: ChatSettings = ChatSettings()

    # MCP servers providing the agent's tools.
    # Example: TOOLS_MCP='[{"url":"http://tools:8000/mcp","prefix":"web"}]'
    tools_mcp: list[MCPServerSettings] = []
