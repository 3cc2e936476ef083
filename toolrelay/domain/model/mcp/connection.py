"""
MCP Connection Domain Models.

Defines connection status and the per-server state value object tracked by
the connection state store.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ConnectionStatus(str, Enum):
    """MCP connection lifecycle status."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"

    @property
    def is_active(self) -> bool:
        """Check if connection is in an active state."""
        return self in (ConnectionStatus.CONNECTED, ConnectionStatus.CONNECTING)


@dataclass(frozen=True)
class ConnectionCounts:
    """Advisory counters for a server."""

    tools: int = 0


@dataclass(frozen=True)
class ConnectionState:
    """
    Connection state of one MCP server.

    ``error`` is set exactly for ERROR and ``session`` exactly for CONNECTED.
    ``counts`` is valid in every status and carries the last known value.
    """

    status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    error: BaseException | None = None
    session: Any | None = None
    counts: ConnectionCounts = field(default_factory=ConnectionCounts)
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC), compare=False)

    def __post_init__(self) -> None:
        if (self.status == ConnectionStatus.ERROR) != (self.error is not None):
            raise ValueError("error must be set if and only if status is ERROR")
        if (self.status == ConnectionStatus.CONNECTED) != (self.session is not None):
            raise ValueError("session must be set if and only if status is CONNECTED")

    @property
    def is_connected(self) -> bool:
        """Check if currently connected."""
        return self.status == ConnectionStatus.CONNECTED

    @classmethod
    def disconnected(cls, counts: ConnectionCounts | None = None) -> "ConnectionState":
        return cls(status=ConnectionStatus.DISCONNECTED, counts=counts or ConnectionCounts())

    @classmethod
    def connecting(cls, counts: ConnectionCounts | None = None) -> "ConnectionState":
        return cls(status=ConnectionStatus.CONNECTING, counts=counts or ConnectionCounts())

    @classmethod
    def connected(
        cls, session: Any, counts: ConnectionCounts | None = None
    ) -> "ConnectionState":
        return cls(
            status=ConnectionStatus.CONNECTED,
            session=session,
            counts=counts or ConnectionCounts(),
        )

    @classmethod
    def failed(
        cls, error: BaseException, counts: ConnectionCounts | None = None
    ) -> "ConnectionState":
        return cls(status=ConnectionStatus.ERROR, error=error, counts=counts or ConnectionCounts())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "status": self.status.value,
            "error": str(self.error) if self.error is not None else None,
            "has_session": self.session is not None,
            "counts": {"tools": self.counts.tools},
            "updated_at": self.updated_at.isoformat(),
        }
