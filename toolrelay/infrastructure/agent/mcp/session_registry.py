"""
MCP Session Registry.

Keeps one live session per MCP server and (re)establishes it on demand.
At most one (re)connection is in flight per server name: concurrent
callers for the same name share the same renewal task, callers for other
names are not blocked.
"""

import asyncio
import logging
from functools import partial

from toolrelay.domain.model.mcp.connection import ConnectionCounts, ConnectionStatus
from toolrelay.domain.ports.mcp.session_port import MCPConnectorPort, MCPSessionPort
from toolrelay.infrastructure.agent.errors import MCPConnectionError
from toolrelay.infrastructure.agent.mcp.state_store import ConnectionStateStore

logger = logging.getLogger(__name__)


class MCPSessionRegistry:
    """
    Registry of live MCP sessions.

    Features:
    - Lazy connection on first use
    - Ping-based staleness check before reusing a cached session
    - Single-flight renewal per server name
    - Connection state transitions recorded in the ConnectionStateStore
    """

    def __init__(self, connector: MCPConnectorPort, states: ConnectionStateStore) -> None:
        """
        Initialize the session registry.

        Args:
            connector: Transport collaborator that opens new sessions
            states: Shared connection state store
        """
        self._connector = connector
        self._states = states
        self._sessions: dict[str, MCPSessionPort] = {}
        self._stale: set[str] = set()
        self._inflight: dict[str, asyncio.Task[MCPSessionPort]] = {}

    def get(self, name: str) -> MCPSessionPort | None:
        """Get the tracked session of a server without any I/O."""
        return self._sessions.get(name)

    def names(self) -> list[str]:
        """Get names of all servers with a tracked session."""
        return list(self._sessions.keys())

    def mark_stale(self, name: str) -> None:
        """Force the next get_or_renew() for this server to reconnect."""
        if name in self._sessions:
            self._stale.add(name)

    async def get_or_renew(self, name: str) -> MCPSessionPort:
        """
        Get a usable session, connecting or reconnecting if needed.

        Args:
            name: Server name

        Returns:
            A live session

        Raises:
            MCPConnectionError: If the session could not be established
        """
        return await self._single_flight(name, force=False)

    async def connect(self, name: str) -> MCPSessionPort:
        """
        Establish a fresh session, replacing any tracked one.

        Joins an in-flight renewal for the same server if there is one.
        """
        return await self._single_flight(name, force=True)

    def timeout_for(self, name: str) -> float | None:
        """Get the request timeout of a server in seconds."""
        return self._connector.timeout_for(name)

    async def close(self, name: str) -> None:
        """
        Close and forget the session of a server.

        An in-flight connection is cancelled and awaited first, so the
        server always ends up DISCONNECTED.
        """
        task = self._inflight.get(name)
        if task is not None:
            task.cancel()
            # Does not raise for the task's outcome, only for our own cancellation
            await asyncio.wait({task})

        session = self._sessions.pop(name, None)
        self._stale.discard(name)
        if session is None and task is None:
            return

        if session is not None:
            await self._close_session(name, session)
        counts = self._states.get(name).counts
        self._states.update(name, ConnectionStatus.DISCONNECTED, counts=counts)
        logger.info(f"Closed MCP session: {name}")

    async def close_all(self) -> None:
        """Close every tracked session."""
        for name in set(self._sessions) | set(self._inflight):
            await self.close(name)

    async def _single_flight(self, name: str, force: bool) -> MCPSessionPort:
        task = self._inflight.get(name)
        initiator = task is None
        if task is None:
            task = asyncio.create_task(self._renew(name, force), name=f"mcp-renew-{name}")
            self._inflight[name] = task
            task.add_done_callback(partial(self._clear_inflight, name))
        else:
            logger.debug(f"Joining in-flight connection to MCP server {name}")

        try:
            # asyncio.wait never cancels the task when this caller is cancelled
            await asyncio.wait({task})
        except asyncio.CancelledError:
            if initiator and not task.done():
                logger.info(f"Cancelling in-flight connection to MCP server {name}")
                task.cancel()
            raise

        if task.cancelled():
            raise MCPConnectionError(
                f"Connection to MCP server {name} was cancelled", server_name=name
            )
        return task.result()

    def _clear_inflight(self, name: str, task: asyncio.Task) -> None:
        if self._inflight.get(name) is task:
            del self._inflight[name]
        if not task.cancelled():
            # Mark the exception retrieved even if every waiter went away
            task.exception()

    async def _renew(self, name: str, force: bool) -> MCPSessionPort:
        counts = self._states.get(name).counts
        session = self._sessions.get(name)

        if session is not None and not force and name not in self._stale:
            if await self._is_alive(name, session):
                return session

        self._states.update(name, ConnectionStatus.CONNECTING, counts=counts)

        if session is not None:
            logger.info(f"Replacing stale session for MCP server {name}")
            self._sessions.pop(name, None)
            self._stale.discard(name)
            try:
                await self._close_session(name, session)
            except asyncio.CancelledError:
                self._record_cancelled(name, counts)
                raise

        new_session = await self._open_session(name, counts)

        self._sessions[name] = new_session
        self._states.update(
            name, ConnectionStatus.CONNECTED, session=new_session, counts=counts
        )
        logger.info(f"Connected to MCP server: {name}")
        return new_session

    async def _open_session(self, name: str, counts: ConnectionCounts) -> MCPSessionPort:
        timeout = self._connector.timeout_for(name)
        try:
            return await asyncio.wait_for(self._connector.connect(name), timeout=timeout)
        except asyncio.CancelledError:
            self._record_cancelled(name, counts)
            raise
        except TimeoutError as e:
            error = MCPConnectionError(
                f"Timed out connecting to MCP server {name} after {timeout}s",
                server_name=name,
                cause=e,
            )
            logger.error(str(error))
            self._states.update(name, ConnectionStatus.ERROR, error=error, counts=counts)
            raise error from e
        except Exception as e:
            error = MCPConnectionError(
                f"Failed to connect to MCP server {name}: {e}", server_name=name, cause=e
            )
            logger.error(str(error))
            self._states.update(name, ConnectionStatus.ERROR, error=error, counts=counts)
            raise error from e

    def _record_cancelled(self, name: str, counts: ConnectionCounts) -> None:
        error = MCPConnectionError(
            f"Connection to MCP server {name} was cancelled", server_name=name
        )
        self._states.update(name, ConnectionStatus.ERROR, error=error, counts=counts)

    async def _is_alive(self, name: str, session: MCPSessionPort) -> bool:
        try:
            alive = await asyncio.wait_for(
                session.ping(), timeout=self._connector.timeout_for(name)
            )
        except Exception as e:
            logger.warning(f"Ping failed for MCP server {name}: {e}")
            return False

        if not alive:
            logger.warning(f"MCP server {name} did not answer ping")
        return bool(alive)

    async def _close_session(self, name: str, session: MCPSessionPort) -> None:
        try:
            await session.close()
        except Exception as e:
            logger.error(f"Error closing session for MCP server {name}: {e}")
