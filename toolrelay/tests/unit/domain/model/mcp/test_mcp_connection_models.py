"""Unit tests for MCP connection domain models."""

import pytest

from toolrelay.domain.model.mcp.connection import (
    ConnectionCounts,
    ConnectionState,
    ConnectionStatus,
)


@pytest.mark.unit
class TestConnectionStatus:
    """Test ConnectionStatus enum."""

    def test_values(self):
        assert ConnectionStatus.DISCONNECTED.value == "disconnected"
        assert ConnectionStatus.CONNECTING.value == "connecting"
        assert ConnectionStatus.CONNECTED.value == "connected"
        assert ConnectionStatus.ERROR.value == "error"

    def test_is_active(self):
        assert ConnectionStatus.CONNECTED.is_active
        assert ConnectionStatus.CONNECTING.is_active
        assert not ConnectionStatus.DISCONNECTED.is_active
        assert not ConnectionStatus.ERROR.is_active


@pytest.mark.unit
class TestConnectionState:
    """Test ConnectionState field consistency."""

    def test_default_is_disconnected(self):
        state = ConnectionState()

        assert state.status == ConnectionStatus.DISCONNECTED
        assert state.error is None
        assert state.session is None
        assert state.counts.tools == 0

    def test_error_requires_error_status(self):
        """Test that an error value is rejected outside ERROR."""
        with pytest.raises(ValueError):
            ConnectionState(status=ConnectionStatus.CONNECTED, error=RuntimeError("x"))

    def test_error_status_requires_error(self):
        with pytest.raises(ValueError):
            ConnectionState(status=ConnectionStatus.ERROR)

    def test_session_only_when_connected(self):
        """Test that a session reference is rejected outside CONNECTED."""
        with pytest.raises(ValueError):
            ConnectionState(status=ConnectionStatus.CONNECTING, session=object())

    def test_connected_requires_session(self):
        """Test that CONNECTED without a session reference is rejected."""
        with pytest.raises(ValueError):
            ConnectionState(status=ConnectionStatus.CONNECTED)
        with pytest.raises(ValueError):
            ConnectionState.connected(None)

    def test_failed_keeps_counts(self):
        error = RuntimeError("boom")

        state = ConnectionState.failed(error, ConnectionCounts(tools=3))

        assert state.status == ConnectionStatus.ERROR
        assert state.error is error
        assert state.counts.tools == 3

    def test_connected(self):
        session = object()

        state = ConnectionState.connected(session, ConnectionCounts(tools=2))

        assert state.is_connected
        assert state.session is session

    def test_to_dict(self):
        state = ConnectionState.failed(RuntimeError("boom"))

        data = state.to_dict()

        assert data["status"] == "error"
        assert data["error"] == "boom"
        assert data["has_session"] is False
        assert data["counts"] == {"tools": 0}
        assert "updated_at" in data
