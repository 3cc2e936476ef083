"""
MCP Tool Manager.

Wires the connection state store, session registry, tool registry,
invocation bridge and refresh orchestrator together and exposes the API
used by the agent layer.
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable, Iterable, Iterator
from types import TracebackType

from toolrelay.configuration.config import Settings, get_settings
from toolrelay.domain.model.mcp.connection import ConnectionState
from toolrelay.domain.model.mcp.tool import ToolDescriptor, ToolResult
from toolrelay.domain.ports.mcp.session_port import MCPConnectorPort
from toolrelay.infrastructure.agent.errors import MCPConnectionError
from toolrelay.infrastructure.agent.mcp.bridge import MCPToolInvocationBridge
from toolrelay.infrastructure.agent.mcp.refresh import MCPToolRefresher
from toolrelay.infrastructure.agent.mcp.session_registry import MCPSessionRegistry
from toolrelay.infrastructure.agent.mcp.state_store import ConnectionStateStore, StateListener
from toolrelay.infrastructure.agent.mcp.tool_registry import MCPToolRegistry

logger = logging.getLogger(__name__)


class MCPToolManager:
    """
    Entry point for MCP tools.

    Features:
    - Concurrent initialization of configured servers
    - Tool listing grouped by server
    - Tool invocation with lazy session renewal
    - Optional periodic tool refresh in the background
    """

    def __init__(
        self,
        connector: MCPConnectorPort,
        refresh_interval_seconds: float = 0,
    ) -> None:
        """
        Initialize the manager.

        Args:
            connector: Transport collaborator that opens sessions
            refresh_interval_seconds: Interval of the background refresh, 0 disables it
        """
        self.connector = connector
        self.refresh_interval_seconds = refresh_interval_seconds

        self.states = ConnectionStateStore()
        self.tools = MCPToolRegistry()
        self.sessions = MCPSessionRegistry(connector, self.states)
        self.bridge = MCPToolInvocationBridge(self.sessions)
        self.refresher = MCPToolRefresher(self.sessions, self.tools, self.states)

        self._refresh_task: asyncio.Task | None = None
        self._running = False

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "MCPToolManager":
        """Create a manager for the servers configured in settings."""
        from toolrelay.infrastructure.mcp.clients.sdk_session import MCPSDKConnector

        settings = settings or get_settings()
        connector = MCPSDKConnector(settings.load_server_configs())
        return cls(connector, refresh_interval_seconds=settings.mcp_refresh_interval)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def initialize(self, server_names: Iterable[str] | None = None) -> dict[str, ConnectionState]:
        """
        Connect to servers and load their tools.

        Servers are initialized concurrently; a server that fails is left
        in ERROR state and does not affect the others.

        Args:
            server_names: Servers to initialize, defaults to every enabled
                server the connector knows about

        Returns:
            Resulting connection state per server
        """
        if server_names is None:
            server_names = self.connector.server_names()
        names = list(server_names)

        await asyncio.gather(*(self._initialize_server(name) for name in names))
        logger.info(f"Initialized {len(names)} MCP servers")
        return {name: self.states.get(name) for name in names}

    async def _initialize_server(self, name: str) -> None:
        try:
            await self.sessions.get_or_renew(name)
        except MCPConnectionError as e:
            logger.error(f"Failed to initialize MCP server {name}: {e}")
            return
        await self.refresher.refresh_tools(name)

    async def start(self) -> None:
        """Start the background tool refresh, if an interval is configured."""
        if self._running:
            return

        self._running = True
        if self.refresh_interval_seconds > 0:
            self._refresh_task = asyncio.create_task(self._run_refresh_loop())
        logger.info("MCP tool manager started")

    async def stop(self) -> None:
        """Stop the background refresh and close all sessions."""
        self._running = False

        if self._refresh_task:
            self._refresh_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._refresh_task
            self._refresh_task = None

        await self.sessions.close_all()
        logger.info("MCP tool manager stopped")

    async def __aenter__(self) -> "MCPToolManager":
        await self.initialize()
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()

    async def _run_refresh_loop(self) -> None:
        """Background task for periodic tool refresh."""
        while self._running:
            try:
                await asyncio.sleep(self.refresh_interval_seconds)
                await self.refresher.refresh_all()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in tool refresh loop: {e}")

    # =========================================================================
    # Public API
    # =========================================================================

    def list_all_tools_by_server(self) -> Iterator[tuple[str, tuple[ToolDescriptor, ...]]]:
        """Iterate (server name, tools) pairs for every server with tools."""
        return self.tools.get_all()

    async def invoke_tool(
        self,
        server_name: str,
        tool_name: str,
        args_json: str | bytes,
        timeout: float | None = None,
    ) -> ToolResult:
        """
        Invoke a tool.

        Raises:
            ArgumentParseError: If args_json is not a JSON object
            MCPConnectionError: If no session could be obtained
            InvocationError: If the remote call failed
        """
        return await self.bridge.run_tool(server_name, tool_name, args_json, timeout=timeout)

    async def refresh_tools(self, server_name: str) -> None:
        """Refresh the tools of a server; errors are recorded in its state."""
        await self.refresher.refresh_tools(server_name)

    def get_connection_state(self, server_name: str) -> ConnectionState:
        """Get the connection state of a server."""
        return self.states.get(server_name)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for connection state changes."""
        return self.states.subscribe(listener)
