"""Unit tests for ConnectionStateStore."""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from toolrelay.domain.model.mcp.connection import ConnectionCounts, ConnectionStatus
from toolrelay.infrastructure.agent.mcp.state_store import ConnectionStateStore


@pytest.mark.unit
class TestConnectionStateStore:
    """Test connection state bookkeeping."""

    def test_unknown_server_is_disconnected(self, states):
        """Test that an unknown name yields the default state."""
        state = states.get("missing")

        assert state.status == ConnectionStatus.DISCONNECTED
        assert state.counts.tools == 0
        assert "missing" not in states.names()

    def test_update_replaces_state(self, states):
        session = object()

        states.update("a", ConnectionStatus.CONNECTING)
        states.update("a", ConnectionStatus.CONNECTED, session=session, counts=ConnectionCounts(4))

        state = states.get("a")
        assert state.status == ConnectionStatus.CONNECTED
        assert state.session is session
        assert state.counts.tools == 4

    def test_session_rejected_for_non_connected(self, states):
        """Test that a session with a non-CONNECTED status is rejected."""
        with pytest.raises(ValueError):
            states.update("a", ConnectionStatus.DISCONNECTED, session=object())

        assert "a" not in states.names()

    def test_connected_requires_session(self, states):
        with pytest.raises(ValueError):
            states.update("a", ConnectionStatus.CONNECTED)

    def test_error_recorded(self, states):
        error = RuntimeError("boom")

        states.update("a", ConnectionStatus.ERROR, error=error)

        assert states.get("a").error is error

    def test_snapshot_is_a_copy(self, states):
        states.update("a", ConnectionStatus.CONNECTING)

        snapshot = states.snapshot()
        states.update("b", ConnectionStatus.CONNECTING)

        assert list(snapshot) == ["a"]
        assert sorted(states.names()) == ["a", "b"]

    def test_listener_notified(self, states):
        """Test that listeners receive every update."""
        seen = []
        states.subscribe(lambda name, state: seen.append((name, state.status)))

        states.update("a", ConnectionStatus.CONNECTING)
        states.update("a", ConnectionStatus.CONNECTED, session=object())

        assert seen == [
            ("a", ConnectionStatus.CONNECTING),
            ("a", ConnectionStatus.CONNECTED),
        ]

    def test_unsubscribe(self, states):
        seen = []
        unsubscribe = states.subscribe(lambda name, state: seen.append(name))

        unsubscribe()
        states.update("a", ConnectionStatus.CONNECTING)

        assert seen == []

    def test_failing_listener_does_not_break_update(self, states, caplog):
        """Test that a raising listener is logged and others still run."""
        seen = []

        def broken(name, state):
            raise RuntimeError("listener broke")

        states.subscribe(broken)
        states.subscribe(lambda name, state: seen.append(name))

        with caplog.at_level(logging.ERROR):
            states.update("a", ConnectionStatus.CONNECTING)

        assert seen == ["a"]
        assert states.get("a").status == ConnectionStatus.CONNECTING
        assert "listener broke" in caplog.text

    def test_concurrent_updates(self):
        """Test that concurrent writers leave one consistent state per server."""
        store = ConnectionStateStore()

        def write(i):
            store.update(
                f"s{i % 4}", ConnectionStatus.CONNECTED, session=object(), counts=ConnectionCounts(i)
            )

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(write, range(200)))

        assert sorted(store.names()) == ["s0", "s1", "s2", "s3"]
        for name in store.names():
            state = store.get(name)
            assert state.status == ConnectionStatus.CONNECTED
            assert state.counts.tools % 4 == int(name[1:])
