"""Server lifecycle: runs the service and the HTTP/WebSocket app together."""

from __future__ import annotations

from typing import TYPE_CHECKING

from teamwatch.broadcast.websocket import ConnectionManager
from teamwatch.dashboard.routes import create_app
from teamwatch.logging import get_logger
from teamwatch.service import TeamWatchService
from teamwatch.state.store import StateStore

if TYPE_CHECKING:
    from teamwatch.config.schema import Config

log = get_logger("dashboard")


async def serve(config: Config) -> None:
    """Start watching, serve until uvicorn exits, then shut everything down.

    uvicorn handles SIGINT/SIGTERM; when it returns the service is stopped
    and every observer connection closed.
    """
    import uvicorn

    store = StateStore()
    service = TeamWatchService(store, config.watch, config.broadcast)
    connections = ConnectionManager()
    unsubscribe = service.gateway.subscribe(connections.broadcast)

    await service.start()

    app = create_app(service, connections, config.server.cors_origins)
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=config.server.host,
            port=config.server.port,
            log_level="warning",
            access_log=False,
        )
    )

    log.info("Server running on http://%s:%d", config.server.host, config.server.port)
    try:
        await server.serve()
    finally:
        log.info("Shutting down")
        unsubscribe()
        await connections.close_all("Server shutting down")
        await service.stop()
