"""FastAPI routes: read-only REST views and the observer WebSocket."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from teamwatch import __version__
from teamwatch.broadcast.websocket import ConnectionManager
from teamwatch.logging import get_logger
from teamwatch.state.documents import message_timestamp, parse_timestamp

if TYPE_CHECKING:
    from teamwatch.service import TeamWatchService

log = get_logger("dashboard")


def create_app(
    service: TeamWatchService,
    connections: ConnectionManager | None = None,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """Create the FastAPI application over a service's state.

    The app does not start or stop the service; whoever runs the server
    owns that lifecycle.
    """
    app = FastAPI(
        title="teamwatch",
        description="Live view of agent team configs, inboxes and tasks",
        version=__version__,
    )
    connections = connections or ConnectionManager()
    app.state.service = service
    app.state.connections = connections

    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    _register_routes(app, service, connections)
    return app


def _task_sort_key(task: dict[str, Any]) -> float:
    for key in ("lastSynchronizedAt", "updatedAt", "createdAt"):
        if task.get(key):
            return parse_timestamp(task[key])
    return 0.0


def _register_routes(
    app: FastAPI,
    service: TeamWatchService,
    connections: ConnectionManager,
) -> None:
    store = service.store

    @app.get("/api/health")
    async def api_health() -> dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "teams": store.count_teams(),
            "tasks": store.count_tasks(),
            "connections": connections.get_connection_count(),
        }

    @app.get("/api/teams")
    async def api_teams() -> dict[str, Any]:
        """List all teams with their configs and inboxes."""
        teams = store.list_teams()
        for team in teams:
            team["inboxCount"] = len(team["inbox"])
        return {"success": True, "data": teams, "count": len(teams)}

    @app.get("/api/teams/{name}")
    async def api_team(name: str) -> dict[str, Any]:
        """Get one team, inbox newest first."""
        team = store.get_team(name)
        if team is None:
            raise HTTPException(status_code=404, detail=f"Team '{name}' not found")
        team["inbox"].sort(key=message_timestamp, reverse=True)
        return {"success": True, "data": team}

    @app.get("/api/tasks")
    async def api_tasks(team: str | None = None) -> dict[str, Any]:
        """List tasks, most recently synchronized first, optionally for one team."""
        tasks = store.list_tasks_by_team(team) if team else store.list_tasks()
        tasks.sort(key=_task_sort_key, reverse=True)
        result: dict[str, Any] = {"success": True, "data": tasks, "count": len(tasks)}
        if team:
            result["filter"] = {"team": team}
        return result

    @app.get("/api/tasks/{task_id}")
    async def api_task(task_id: str) -> dict[str, Any]:
        task = store.get_task(task_id)
        if task is None:
            raise HTTPException(status_code=404, detail=f"Task '{task_id}' not found")
        return {"success": True, "data": task}

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        """Observer stream: snapshots first, then live events."""
        await connections.connect(websocket, service.gateway.initial_events)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                # Binary frames carry nothing observers may send
                if message.get("text") == "ping":
                    await websocket.send_text("pong")
        except WebSocketDisconnect:
            pass
        finally:
            await connections.disconnect(websocket)
