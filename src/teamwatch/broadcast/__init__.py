"""Change broadcasting: debouncing, the gateway, and WebSocket fan-out."""

from teamwatch.broadcast.debounce import DebouncedEmitter
from teamwatch.broadcast.gateway import (
    KIND_ADD,
    KIND_CHANGE,
    KIND_REMOVE,
    TASK_CHANGED,
    TASKS_SNAPSHOT,
    TEAM_MESSAGE,
    TEAMS_SNAPSHOT,
    BroadcastGateway,
    format_event,
)
from teamwatch.broadcast.scheduler import BroadcastScheduler
from teamwatch.broadcast.websocket import ConnectionManager

__all__ = [
    "BroadcastGateway",
    "BroadcastScheduler",
    "ConnectionManager",
    "DebouncedEmitter",
    "format_event",
    "TEAMS_SNAPSHOT",
    "TASKS_SNAPSHOT",
    "TEAM_MESSAGE",
    "TASK_CHANGED",
    "KIND_ADD",
    "KIND_CHANGE",
    "KIND_REMOVE",
]
