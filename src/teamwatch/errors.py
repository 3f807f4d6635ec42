"""Exception types raised by teamwatch."""

from __future__ import annotations

from pathlib import Path


class TeamWatchError(Exception):
    """Base class for teamwatch errors."""


class DocumentError(TeamWatchError):
    """A watched file could not be turned into a document."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class DocumentReadError(DocumentError):
    """The file could not be read (vanished, permission denied, ...)."""


class DocumentParseError(DocumentError):
    """The file content is not valid JSON or has the wrong shape."""


class WatcherError(TeamWatchError):
    """A directory watcher could not be started."""


class WatcherStartupError(TeamWatchError):
    """No directory watcher could be started."""
