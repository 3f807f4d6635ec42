"""Tests for the observer WebSocket ConnectionManager."""

import asyncio

import pytest

from teamwatch.broadcast.websocket import ConnectionManager


class MockWebSocket:
    """Mock WebSocket for testing."""

    def __init__(self, should_fail: bool = False):
        self.should_fail = should_fail
        self.accepted = False
        self.closed = False
        self.close_code: int | None = None
        self.close_reason: str | None = None
        self.sent_messages: list = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, message: dict) -> None:
        if self.should_fail:
            raise Exception("WebSocket connection failed")
        self.sent_messages.append(message)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed = True
        self.close_code = code
        self.close_reason = reason


@pytest.fixture
def manager() -> ConnectionManager:
    """Create a fresh ConnectionManager for each test."""
    return ConnectionManager()


@pytest.fixture
def mock_websocket() -> MockWebSocket:
    return MockWebSocket()


@pytest.fixture
def failing_websocket() -> MockWebSocket:
    """Create a mock websocket that fails on send."""
    return MockWebSocket(should_fail=True)


class TestConnectionManagerInit:
    def test_init_creates_empty_connections(self, manager: ConnectionManager) -> None:
        assert manager._connections == set()
        assert manager.get_connection_count() == 0

    def test_init_creates_lock(self, manager: ConnectionManager) -> None:
        assert isinstance(manager._lock, asyncio.Lock)


class TestConnect:
    """Tests for the connect method."""

    @pytest.mark.asyncio
    async def test_connect_accepts_and_registers(
        self, manager: ConnectionManager, mock_websocket: MockWebSocket
    ) -> None:
        await manager.connect(mock_websocket)

        assert mock_websocket.accepted is True
        assert manager.get_connection_count() == 1

    @pytest.mark.asyncio
    async def test_initial_events_sent_in_order(
        self, manager: ConnectionManager, mock_websocket: MockWebSocket
    ) -> None:
        """Snapshots go out before anything else."""
        initial = [{"type": "teams-snapshot"}, {"type": "tasks-snapshot"}]

        await manager.connect(mock_websocket, lambda: initial)

        assert mock_websocket.sent_messages == initial

    @pytest.mark.asyncio
    async def test_initial_evaluated_after_accept(
        self, manager: ConnectionManager, mock_websocket: MockWebSocket
    ) -> None:
        seen_accepted: list[bool] = []

        def initial() -> list[dict]:
            seen_accepted.append(mock_websocket.accepted)
            return []

        await manager.connect(mock_websocket, initial)

        assert seen_accepted == [True]

    @pytest.mark.asyncio
    async def test_connect_same_websocket_twice(
        self, manager: ConnectionManager, mock_websocket: MockWebSocket
    ) -> None:
        await manager.connect(mock_websocket)
        await manager.connect(mock_websocket)

        assert manager.get_connection_count() == 1


class TestDisconnect:
    @pytest.mark.asyncio
    async def test_disconnect_removes(
        self, manager: ConnectionManager, mock_websocket: MockWebSocket
    ) -> None:
        await manager.connect(mock_websocket)
        await manager.disconnect(mock_websocket)

        assert manager.get_connection_count() == 0

    @pytest.mark.asyncio
    async def test_disconnect_unknown_is_noop(
        self, manager: ConnectionManager, mock_websocket: MockWebSocket
    ) -> None:
        await manager.disconnect(mock_websocket)

        assert manager.get_connection_count() == 0


class TestBroadcast:
    """Tests for the broadcast method."""

    @pytest.mark.asyncio
    async def test_broadcast_to_all(self, manager: ConnectionManager) -> None:
        sockets = [MockWebSocket() for _ in range(3)]
        for ws in sockets:
            await manager.connect(ws)

        await manager.broadcast({"type": "task-changed"})

        assert all(ws.sent_messages == [{"type": "task-changed"}] for ws in sockets)

    @pytest.mark.asyncio
    async def test_broadcast_without_connections(self, manager: ConnectionManager) -> None:
        await manager.broadcast({"type": "task-changed"})

    @pytest.mark.asyncio
    async def test_broadcast_drops_dead_connections(
        self,
        manager: ConnectionManager,
        mock_websocket: MockWebSocket,
        failing_websocket: MockWebSocket,
    ) -> None:
        await manager.connect(mock_websocket)
        await manager.connect(failing_websocket)

        await manager.broadcast({"type": "teams-snapshot"})

        assert mock_websocket.sent_messages == [{"type": "teams-snapshot"}]
        assert manager.get_connection_count() == 1
        assert failing_websocket not in manager._connections


class TestCloseAll:
    @pytest.mark.asyncio
    async def test_close_all(self, manager: ConnectionManager) -> None:
        sockets = [MockWebSocket() for _ in range(2)]
        for ws in sockets:
            await manager.connect(ws)

        await manager.close_all("bye")

        assert manager.get_connection_count() == 0
        assert all(ws.closed and ws.close_code == 1001 for ws in sockets)
        assert sockets[0].close_reason == "bye"

    @pytest.mark.asyncio
    async def test_close_all_ignores_close_errors(self, manager: ConnectionManager) -> None:
        class BrokenClose(MockWebSocket):
            async def close(self, code: int = 1000, reason: str = "") -> None:
                raise RuntimeError("already closed")

        await manager.connect(BrokenClose())

        await manager.close_all()

        assert manager.get_connection_count() == 0
