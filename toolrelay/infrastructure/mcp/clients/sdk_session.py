"""
MCP sessions backed by the official MCP Python SDK.

Supports two transports:
- local: stdio subprocess (mcp.client.stdio)
- remote: streamable HTTP (mcp.client.streamable_http)

The SDK transports are anyio context managers whose cancel scopes must be
entered and exited by the same task. Each MCPSDKSession therefore owns a
runner task that opens the transport, initializes the ClientSession and
holds both open until close() is called.
"""

import asyncio
import contextlib
import logging
import os
from contextlib import AsyncExitStack
from datetime import timedelta
from typing import Any

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from mcp.client.streamable_http import streamablehttp_client

from toolrelay.domain.model.mcp.tool import ContentPart, ToolDescriptor, content_part_from_dict
from toolrelay.infrastructure.mcp.config import McpLocalConfig, McpRemoteConfig

logger = logging.getLogger(__name__)


def _to_dict(item: Any) -> dict[str, Any]:
    if hasattr(item, "model_dump"):
        return item.model_dump(exclude_none=True)
    if isinstance(item, dict):
        return item
    return {"type": "unknown", "value": str(item)}


def convert_tools(tools: list[Any]) -> list[ToolDescriptor]:
    """Convert SDK Tool models (or dicts) into ToolDescriptors."""
    return [ToolDescriptor.from_dict(_to_dict(tool)) for tool in tools]


def convert_content(content: list[Any]) -> list[ContentPart]:
    """Convert SDK content models (or dicts) into content parts."""
    return [content_part_from_dict(_to_dict(item)) for item in content]


class MCPSDKSession:
    """An MCP session over the SDK ClientSession."""

    def __init__(self, server_name: str, config: McpLocalConfig | McpRemoteConfig) -> None:
        self.server_name = server_name
        self.config = config
        self._session: ClientSession | None = None
        self._ready: asyncio.Future[None] | None = None
        self._closing = asyncio.Event()
        self._runner: asyncio.Task[None] | None = None

    @property
    def is_connected(self) -> bool:
        """Check if the session is open."""
        return self._session is not None and self._runner is not None and not self._runner.done()

    async def start(self) -> None:
        """
        Open the transport and perform the MCP initialization handshake.

        Raises:
            Exception: Whatever the transport or handshake raised
        """
        if self._runner is not None:
            return

        self._ready = asyncio.get_running_loop().create_future()
        self._runner = asyncio.create_task(self._run(), name=f"mcp-session-{self.server_name}")
        try:
            await asyncio.shield(self._ready)
        except BaseException:
            # Failed or cancelled handshake: the runner winds down on its own
            self._closing.set()
            self._runner.cancel()
            self._runner = None
            raise

    async def _run(self) -> None:
        assert self._ready is not None
        try:
            async with AsyncExitStack() as stack:
                read_stream, write_stream = await stack.enter_async_context(self._open_streams())
                session = await stack.enter_async_context(
                    ClientSession(
                        read_stream,
                        write_stream,
                        read_timeout_seconds=timedelta(seconds=self.config.timeout_seconds),
                    )
                )
                init_result = await session.initialize()
                logger.info(
                    f"MCP server {self.server_name} initialized: {init_result.serverInfo}"
                )
                self._session = session
                self._ready.set_result(None)
                await self._closing.wait()
        except Exception as e:
            if not self._ready.done():
                self._ready.set_exception(e)
            else:
                logger.warning(f"MCP session {self.server_name} ended with error: {e}")
        finally:
            self._session = None
            if not self._ready.done():
                self._ready.cancel()

    @contextlib.asynccontextmanager
    async def _open_streams(self):
        config = self.config
        if isinstance(config, McpLocalConfig):
            env = {**os.environ, **config.environment} if config.environment else None
            params = StdioServerParameters(
                command=config.command[0],
                args=config.command[1:],
                env=env,
                cwd=config.cwd,
            )
            logger.info(f"Starting MCP server {self.server_name}: {' '.join(config.command)}")
            async with stdio_client(params) as (read_stream, write_stream):
                yield read_stream, write_stream
        else:
            logger.info(f"Connecting to MCP server {self.server_name} at {config.url}")
            async with streamablehttp_client(
                config.url,
                headers=config.headers,
                timeout=timedelta(seconds=config.timeout_seconds),
            ) as (read_stream, write_stream, _):
                yield read_stream, write_stream

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError(f"MCP session {self.server_name} is not connected")
        return self._session

    async def list_tools(self) -> list[ToolDescriptor]:
        """List all available tools."""
        result = await self._require_session().list_tools()
        return convert_tools(result.tools)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> list[ContentPart]:
        """Call a tool on the server."""
        result = await self._require_session().call_tool(name, arguments)
        if result.isError:
            logger.warning(f"Tool {name} on MCP server {self.server_name} reported an error")
        return convert_content(result.content)

    async def ping(self) -> bool:
        """Send a ping request to check connection health."""
        if not self.is_connected:
            return False
        try:
            await self._require_session().send_ping()
            return True
        except Exception as e:
            logger.error(f"Ping failed: {e}")
            return False

    async def close(self) -> None:
        """Close the session and stop the transport."""
        runner = self._runner
        if runner is None:
            return
        self._closing.set()
        try:
            await asyncio.wait_for(asyncio.shield(runner), timeout=self.config.timeout_seconds)
        except TimeoutError:
            runner.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await runner
        finally:
            self._runner = None
            self._session = None
        logger.info(f"MCP session {self.server_name} closed")


class MCPSDKConnector:
    """Opens MCPSDKSessions for configured servers."""

    def __init__(self, server_configs: dict[str, McpLocalConfig | McpRemoteConfig]) -> None:
        """
        Initialize the connector.

        Args:
            server_configs: Server name -> validated configuration
        """
        self.server_configs = server_configs

    def server_names(self, include_disabled: bool = False) -> list[str]:
        """Get configured server names."""
        return [
            name
            for name, config in self.server_configs.items()
            if include_disabled or config.enabled
        ]

    def timeout_for(self, server_name: str) -> float | None:
        config = self.server_configs.get(server_name)
        return config.timeout_seconds if config is not None else None

    async def connect(self, server_name: str) -> MCPSDKSession:
        config = self.server_configs.get(server_name)
        if config is None:
            raise ValueError(f"MCP server not configured: {server_name}")
        if not config.enabled:
            raise ValueError(f"MCP server is disabled: {server_name}")

        session = MCPSDKSession(server_name, config)
        await session.start()
        return session
