"""WebSocket connection manager for real-time observers."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fastapi import WebSocket

log = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks connected WebSocket observers and broadcasts to them.

    Connections that fail on send are dropped.
    """

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(
        self,
        websocket: WebSocket,
        initial: Callable[[], list[dict[str, Any]]] | None = None,
    ) -> None:
        """Accept a connection, send it the initial events, then register it.

        ``initial`` is evaluated after the connection is accepted, and its
        events go out before the connection can receive any broadcast, so
        the observer starts from a complete view.
        """
        await websocket.accept()
        async with self._lock:
            if initial is not None:
                for message in initial():
                    await websocket.send_json(message)
            self._connections.add(websocket)
        log.debug("Observer connected (%d total)", len(self._connections))

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._connections.discard(websocket)
        log.debug("Observer disconnected (%d total)", len(self._connections))

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Send a message to every connected observer."""
        async with self._lock:
            connections = self._connections.copy()

        if not connections:
            return

        dead_connections: list[WebSocket] = []
        for websocket in connections:
            try:
                await websocket.send_json(message)
            except Exception:
                dead_connections.append(websocket)

        if dead_connections:
            async with self._lock:
                for ws in dead_connections:
                    self._connections.discard(ws)
            log.debug("Dropped %d dead observer connection(s)", len(dead_connections))

    def get_connection_count(self) -> int:
        return len(self._connections)

    async def close_all(self, reason: str = "Server shutting down") -> None:
        """Close all WebSocket connections gracefully."""
        async with self._lock:
            all_connections = list(self._connections)
            self._connections.clear()

        for websocket in all_connections:
            with contextlib.suppress(Exception):
                await websocket.close(code=1001, reason=reason)
        log.info("Closed %d observer connection(s)", len(all_connections))
