"""Unit tests for MCPToolRefresher."""

import asyncio
import logging

import pytest

from toolrelay.domain.model.mcp.connection import ConnectionCounts, ConnectionStatus
from toolrelay.infrastructure.agent.errors import ListingError
from toolrelay.infrastructure.agent.mcp.refresh import MCPToolRefresher
from toolrelay.infrastructure.agent.mcp.session_registry import MCPSessionRegistry
from toolrelay.infrastructure.agent.mcp.tool_registry import MCPToolRegistry


@pytest.fixture
def sessions(connector, states):
    return MCPSessionRegistry(connector, states)


@pytest.fixture
def tools():
    return MCPToolRegistry()


@pytest.fixture
def refresher(sessions, tools, states):
    return MCPToolRefresher(sessions, tools, states)


@pytest.mark.unit
class TestRefreshTools:
    """Test single-server refresh."""

    @pytest.mark.asyncio
    async def test_without_session_changes_nothing(self, refresher, tools, states, caplog):
        """Test that a server never connected is only logged."""
        with caplog.at_level(logging.WARNING):
            await refresher.refresh_tools("web")

        assert "no session" in caplog.text
        assert "web" not in states.names()
        assert tools.get("web") is None

    @pytest.mark.asyncio
    async def test_without_session_keeps_recorded_state(self, refresher, states):
        error = RuntimeError("earlier failure")
        states.update("web", ConnectionStatus.ERROR, error=error, counts=ConnectionCounts(3))
        before = states.get("web")

        await refresher.refresh_tools("web")

        assert states.get("web") == before
        assert states.get("web").error is error

    @pytest.mark.asyncio
    async def test_success(
        self, refresher, sessions, tools, states, connector, make_session, sample_tools
    ):
        session = make_session(tools=sample_tools)
        connector.queue("web", session)
        await sessions.get_or_renew("web")

        await refresher.refresh_tools("web")

        assert [tool.name for tool in tools.get("web")] == ["fetch", "search"]
        state = states.get("web")
        assert state.status == ConnectionStatus.CONNECTED
        assert state.session is session
        assert state.counts.tools == 2

    @pytest.mark.asyncio
    async def test_empty_listing_removes_server(
        self, refresher, sessions, tools, states, connector, make_session, sample_tools
    ):
        """Test that a server with no tools disappears from the registry."""
        session = make_session(tools=sample_tools)
        connector.queue("web", session)
        await sessions.get_or_renew("web")
        await refresher.refresh_tools("web")

        session.tools = []
        await refresher.refresh_tools("web")

        assert "web" not in tools
        assert states.get("web").status == ConnectionStatus.CONNECTED
        assert states.get("web").counts.tools == 0

    @pytest.mark.asyncio
    async def test_listing_failure(
        self, refresher, sessions, tools, states, connector, make_session, sample_tools
    ):
        """Test that a listing failure is recorded as ERROR with zero tools."""
        session = make_session(tools=sample_tools)
        connector.queue("web", session)
        await sessions.get_or_renew("web")
        await refresher.refresh_tools("web")

        session.list_error = RuntimeError("method not found")
        await refresher.refresh_tools("web")

        state = states.get("web")
        assert state.status == ConnectionStatus.ERROR
        assert isinstance(state.error, ListingError)
        assert state.session is None
        assert state.counts.tools == 0
        # The registry keeps the last good list
        assert len(tools.get("web")) == 2

    @pytest.mark.asyncio
    async def test_listing_timeout(self, refresher, sessions, states, connector, make_session):
        """Test that a hanging tools/list is bounded by the server timeout."""
        session = make_session()

        async def hang():
            await asyncio.sleep(10)

        session.list_tools = hang
        connector.timeout = 0.01
        connector.queue("web", session)
        await sessions.get_or_renew("web")

        await asyncio.wait_for(refresher.refresh_tools("web"), timeout=1)

        state = states.get("web")
        assert state.status == ConnectionStatus.ERROR
        assert isinstance(state.error, ListingError)
        assert isinstance(state.error.cause, TimeoutError)


@pytest.mark.unit
class TestRefreshAll:
    """Test refresh of every tracked server."""

    @pytest.mark.asyncio
    async def test_refresh_all(
        self, refresher, sessions, tools, connector, make_session, sample_tools
    ):
        connector.queue("a", make_session(tools=sample_tools))
        connector.queue("b", make_session(tools=sample_tools[:1]))
        await sessions.get_or_renew("a")
        await sessions.get_or_renew("b")

        await refresher.refresh_all()

        assert len(tools.get("a")) == 2
        assert len(tools.get("b")) == 1

    @pytest.mark.asyncio
    async def test_refresh_all_without_sessions(self, refresher, tools):
        await refresher.refresh_all()

        assert len(tools) == 0
