"""
MCP tool refresh.

Re-lists the tools of a server with a tracked session, mirrors them into
the tool registry and records the outcome in the connection state store.
Refresh never raises: failures only show up as the server's ERROR state.
"""

import asyncio
import logging
from dataclasses import replace

from toolrelay.domain.model.mcp.connection import ConnectionCounts, ConnectionStatus
from toolrelay.infrastructure.agent.errors import ListingError
from toolrelay.infrastructure.agent.mcp.session_registry import MCPSessionRegistry
from toolrelay.infrastructure.agent.mcp.state_store import ConnectionStateStore
from toolrelay.infrastructure.agent.mcp.tool_registry import MCPToolRegistry

logger = logging.getLogger(__name__)


class MCPToolRefresher:
    """Keeps the tool registry in sync with connected servers."""

    def __init__(
        self,
        sessions: MCPSessionRegistry,
        tools: MCPToolRegistry,
        states: ConnectionStateStore,
    ) -> None:
        self._sessions = sessions
        self._tools = tools
        self._states = states

    async def refresh_tools(self, server_name: str) -> None:
        """
        Refresh the tool list of one server.

        Args:
            server_name: Server to refresh; must have been connected before
        """
        session = self._sessions.get(server_name)
        if session is None:
            logger.warning(f"refresh tools: no session for MCP server {server_name}")
            return

        # Always list: an empty tools capability object does not mean "no tools"
        try:
            tools = await asyncio.wait_for(
                session.list_tools(), timeout=self._sessions.timeout_for(server_name)
            )
        except Exception as e:
            error = ListingError(
                f"Failed to list tools from MCP server {server_name}: {e}",
                server_name=server_name,
                cause=e,
            )
            logger.error(str(error))
            self._states.update(
                server_name, ConnectionStatus.ERROR, error=error, counts=ConnectionCounts()
            )
            return

        self._tools.update_tools(server_name, tools)

        prev = self._states.get(server_name)
        counts = replace(prev.counts, tools=len(tools))
        self._states.update(
            server_name, ConnectionStatus.CONNECTED, session=session, counts=counts
        )
        logger.info(f"Synced {len(tools)} tools from MCP server {server_name}")

    async def refresh_all(self) -> None:
        """Refresh every server with a tracked session concurrently."""
        names = self._sessions.names()
        if not names:
            return
        await asyncio.gather(*(self.refresh_tools(name) for name in names))
