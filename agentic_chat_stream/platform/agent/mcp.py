"""MCP client used as the agent's tool backend.

Connects to StreamableHTTP MCP servers to discover tools and execute them.
``LangGraphMCPTools`` turns the discovered tools into LangChain tools.

Usage:
    client = MCPClient("http://localhost:8000/mcp")
    tools = await client.list_tools()
    result = await client.call_tool("search", {"q": "python"})
"""

import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

import httpx
from mcp.client.session import ClientSession
from mcp.client.streamable_http import streamable_http_client
from mcp.types import CallToolResult
from mcp.types import Tool as MCPTool
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, stop_after_delay, wait_fixed

from agentic_chat_stream.platform.constants import USER_AGENT


class MCPClientError(Exception):
    """MCP client error."""


class MCPToolError(MCPClientError):
    """The MCP server executed the tool and reported a failure."""


class MCPClient:
    """MCP client for StreamableHTTP servers.

    Transport failures are retried; failures reported by the tool itself are
    raised immediately as MCPToolError.
    """

    def __init__(
        self,
        server_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 60.0,
        sse_read_timeout: float = 300.0,
        read_timeout: float = 120.0,
    ) -> None:
        """Initialize the MCP client.

        Args:
            server_url: URL of the MCP server endpoint
            headers: Optional HTTP headers to include in requests
            timeout: Connection timeout in seconds (default: 60.0)
            sse_read_timeout: SSE stream read timeout in seconds (default: 300.0)
            read_timeout: General read timeout in seconds (default: 120.0)
        """
        self.server_url = server_url
        self._headers = (headers or {}) | {"user-agent": USER_AGENT}
        self.timeout = timeout
        self.sse_read_timeout = sse_read_timeout
        self.read_timeout = timedelta(seconds=read_timeout)

    def __repr__(self) -> str:
        """Obfuscate sensitive fields in string representation."""
        return (
            f"MCPClient(server_url={self.server_url!r}, "
            f"headers=<obfuscated>, "
            f"timeout={self.timeout}, "
            f"read_timeout={self.read_timeout})"
        )

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[ClientSession]:
        """Open an initialized MCP session over a fresh HTTP client."""
        http_client = httpx.AsyncClient(
            headers=self._headers,
            timeout=httpx.Timeout(
                connect=self.timeout,
                read=self.sse_read_timeout,
                write=self.timeout,
                pool=self.timeout,
            ),
        )
        async with http_client:
            async with streamable_http_client(
                url=self.server_url,
                http_client=http_client,
            ) as (read_stream, write_stream, _):
                async with ClientSession(
                    read_stream,
                    write_stream,
                    read_timeout_seconds=self.read_timeout,
                ) as session:
                    await session.initialize()
                    yield session

    @retry(
        wait=wait_fixed(2),
        stop=(stop_after_attempt(3) | stop_after_delay(10)),
        reraise=True,
    )
    async def list_tools(self) -> list[MCPTool]:
        """Fetch available tools from the MCP server.

        Returns:
            List of MCPTool definitions available on the server

        Raises:
            MCPClientError: If tool listing fails after retries
        """
        try:
            async with self._session() as session:
                response = await session.list_tools()
                return response.tools
        except Exception as e:
            raise MCPClientError(f"Failed to list tools from {self.server_url}: {e}") from e

    @retry(
        wait=wait_fixed(2),
        stop=(stop_after_attempt(3) | stop_after_delay(10)),
        retry=retry_if_not_exception_type(MCPToolError),
        reraise=True,
    )
    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        """Call a tool on the MCP server and return the parsed response.

        Args:
            name: Name of the tool to invoke
            arguments: Dictionary of arguments to pass to the tool

        Returns:
            Parsed tool result (JSON decoded if possible, otherwise raw text)

        Raises:
            MCPToolError: If the server reports the tool call as failed
            MCPClientError: If the call cannot be completed after retries
        """
        try:
            async with self._session() as session:
                result = await session.call_tool(name, arguments)
        except Exception as e:
            raise MCPClientError(f"Failed to call tool '{name}': {e}") from e

        parsed = self.parse_result(result)
        if result.isError:
            raise MCPToolError(f"Tool '{name}' reported an error: {parsed}")
        return parsed

    @classmethod
    def parse_result(cls, result: CallToolResult) -> Any:
        """Parse a tool result, attempting JSON decode of each content item.

        Returns:
            Single item if one result, list if multiple, None if empty
        """
        if not result.content:
            return None
        if len(result.content) == 1:
            return cls._parse_content(result.content[0])
        return [cls._parse_content(item) for item in result.content]

    @staticmethod
    def _parse_content(content: Any) -> Any:
        text = getattr(content, "text", None) or str(content)
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text
