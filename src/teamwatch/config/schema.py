"""Configuration schema dataclasses for teamwatch.

All fields carry defaults so partial configs merge together cleanly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_ROOT = "~/.claude"


@dataclass
class WatchConfig:
    """Directory watching configuration.

    Example config.yaml:
        watch:
          root: ~/.claude
          teams_dir: teams
          tasks_dir: tasks
          poll_interval: 0.1
          stability_threshold: 0.1
    """

    root: str = DEFAULT_ROOT  # Directory holding teams/ and tasks/
    teams_dir: str = "teams"
    tasks_dir: str = "tasks"
    poll_interval: float = 0.1  # Seconds between polling cycles
    stability_threshold: float = 0.1  # File must be unchanged this long before delivery

    @property
    def root_path(self) -> Path:
        return Path(self.root).expanduser()

    @property
    def teams_path(self) -> Path:
        return self.root_path / self.teams_dir

    @property
    def tasks_path(self) -> Path:
        return self.root_path / self.tasks_dir


@dataclass
class BroadcastConfig:
    """Broadcast coalescing configuration."""

    debounce: float = 0.3  # Quiet period in seconds


@dataclass
class ServerConfig:
    """HTTP/WebSocket server configuration."""

    host: str = "127.0.0.1"
    port: int = 3001
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    verbose: int | None = None  # 0-4, overrides level
    file: str | None = None  # Log file path


@dataclass
class Config:
    """Root configuration object."""

    watch: WatchConfig = field(default_factory=WatchConfig)
    broadcast: BroadcastConfig = field(default_factory=BroadcastConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Unknown top-level sections are kept here
    extra: dict[str, Any] = field(default_factory=dict)
