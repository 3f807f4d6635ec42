"""teamwatch: live in-memory mirror of agent team configs, inboxes and tasks."""

__version__ = "0.1.0"

# Public API
from teamwatch.broadcast import BroadcastGateway, ConnectionManager, DebouncedEmitter
from teamwatch.config import Config, get_config, load_config
from teamwatch.errors import (
    DocumentError,
    DocumentParseError,
    DocumentReadError,
    TeamWatchError,
    WatcherError,
    WatcherStartupError,
)
from teamwatch.service import TeamWatchService
from teamwatch.state import StateStore
from teamwatch.watching import DirectoryWatcher, FileEvent, FileEventKind

__all__ = [
    # Service
    "TeamWatchService",
    "StateStore",
    # Broadcast
    "BroadcastGateway",
    "ConnectionManager",
    "DebouncedEmitter",
    # Watching
    "DirectoryWatcher",
    "FileEvent",
    "FileEventKind",
    # Config
    "Config",
    "load_config",
    "get_config",
    # Errors
    "TeamWatchError",
    "DocumentError",
    "DocumentReadError",
    "DocumentParseError",
    "WatcherError",
    "WatcherStartupError",
]
