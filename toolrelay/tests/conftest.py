"""Pytest configuration and shared fixtures for testing."""

import asyncio
from typing import Any

import pytest

from toolrelay.domain.model.mcp.tool import ToolDescriptor
from toolrelay.infrastructure.agent.mcp.state_store import ConnectionStateStore


class FakeSession:
    """In-memory MCP session."""

    def __init__(
        self,
        tools: list[ToolDescriptor] | None = None,
        content: list[Any] | None = None,
        alive: bool = True,
    ) -> None:
        self.tools = list(tools or [])
        self.content = list(content or [])
        self.alive = alive
        self.closed = False
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.list_error: Exception | None = None
        self.call_error: Exception | None = None
        self.ping_error: Exception | None = None

    async def list_tools(self) -> list[ToolDescriptor]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.tools)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> list[Any]:
        self.calls.append((name, arguments))
        if self.call_error is not None:
            raise self.call_error
        return list(self.content)

    async def ping(self) -> bool:
        if self.ping_error is not None:
            raise self.ping_error
        return self.alive and not self.closed

    async def close(self) -> None:
        self.closed = True


class FakeConnector:
    """Connector handing out queued FakeSessions per server name."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout
        self.sessions: dict[str, list[FakeSession]] = {}
        self.errors: dict[str, Exception] = {}
        self.connect_calls: list[str] = []
        self.cancelled: list[str] = []
        self.gate: asyncio.Event | None = None
        self.names: list[str] = []

    def queue(self, name: str, *sessions: FakeSession) -> None:
        self.sessions.setdefault(name, []).extend(sessions)

    def server_names(self) -> list[str]:
        return list(self.names)

    def timeout_for(self, server_name: str) -> float | None:
        return self.timeout

    async def connect(self, server_name: str) -> FakeSession:
        self.connect_calls.append(server_name)
        try:
            if self.gate is not None:
                await self.gate.wait()
        except asyncio.CancelledError:
            self.cancelled.append(server_name)
            raise

        if server_name in self.errors:
            raise self.errors[server_name]

        queued = self.sessions.get(server_name)
        if queued:
            return queued.pop(0)
        return FakeSession()


@pytest.fixture
def make_session():
    """Factory for FakeSession instances."""
    return FakeSession


@pytest.fixture
def connector():
    """Create a FakeConnector with no timeout."""
    return FakeConnector()


@pytest.fixture
def states():
    """Create an empty connection state store."""
    return ConnectionStateStore()


@pytest.fixture
def sample_tools():
    """Two tool descriptors in server order."""
    return [
        ToolDescriptor(name="fetch", description="Fetch a URL", input_schema={"type": "object"}),
        ToolDescriptor(name="search", description="Search the web"),
    ]
