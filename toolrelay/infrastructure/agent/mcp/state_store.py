"""
Connection state store for MCP servers.

Holds the current ConnectionState per server name. Each get/update is
atomic; callers that want to keep a field (typically counts) read the
current state and write a new one.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any

from toolrelay.domain.model.mcp.connection import (
    ConnectionCounts,
    ConnectionState,
    ConnectionStatus,
)

logger = logging.getLogger(__name__)

# Called with (server_name, new_state) after every update
StateListener = Callable[[str, ConnectionState], None]


class ConnectionStateStore:
    """
    Thread-safe mapping of server name to ConnectionState.

    Entries are created on first update and are never removed.
    """

    def __init__(self) -> None:
        self._states: dict[str, ConnectionState] = {}
        self._listeners: list[StateListener] = []
        self._lock = threading.Lock()

    def get(self, name: str) -> ConnectionState:
        """
        Get the state of a server.

        Args:
            name: Server name

        Returns:
            The current state, or a DISCONNECTED state if the server is unknown
        """
        with self._lock:
            state = self._states.get(name)
        return state if state is not None else ConnectionState.disconnected()

    def update(
        self,
        name: str,
        status: ConnectionStatus,
        error: BaseException | None = None,
        session: Any | None = None,
        counts: ConnectionCounts | None = None,
    ) -> ConnectionState:
        """
        Replace the state of a server.

        Args:
            name: Server name
            status: New lifecycle status
            error: Error value, required for ERROR and forbidden otherwise
            session: Session reference, required for CONNECTED and forbidden otherwise
            counts: Counters to record (defaults to zero counts)

        Returns:
            The stored state

        Raises:
            ValueError: If error or session does not match the status
        """
        state = ConnectionState(
            status=status,
            error=error,
            session=session,
            counts=counts or ConnectionCounts(),
        )
        with self._lock:
            self._states[name] = state
            listeners = list(self._listeners)

        logger.debug(f"MCP server {name} state -> {status.value} (tools={state.counts.tools})")

        for listener in listeners:
            try:
                listener(name, state)
            except Exception as e:
                logger.error(f"State listener failed for server {name}: {e}")

        return state

    def snapshot(self) -> dict[str, ConnectionState]:
        """Get a copy of all tracked states."""
        with self._lock:
            return dict(self._states)

    def names(self) -> list[str]:
        """Get names of all tracked servers."""
        with self._lock:
            return list(self._states.keys())

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener for state changes.

        Args:
            listener: Callable invoked with (server_name, state) after each update

        Returns:
            A callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
