"""Configuration file loading and caching.

Handles:
- YAML file parsing
- Environment variable overrides
- Conversion from dict to typed Config dataclass
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from teamwatch.config.merge import merge_configs
from teamwatch.config.paths import get_config_paths
from teamwatch.config.schema import (
    BroadcastConfig,
    Config,
    LoggingConfig,
    ServerConfig,
    WatchConfig,
)

# Module logger (may not be configured yet at import time)
_log = logging.getLogger("teamwatch.config")

_cached_config: Config | None = None

_KNOWN_SECTIONS = {"watch", "broadcast", "server", "logging"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except PermissionError:
        _log.debug("Permission denied reading %s", path)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}


def env_overrides() -> dict[str, Any]:
    """Build config dict from environment variables.

    TEAMWATCH_ROOT, TEAMWATCH_PORT and TEAMWATCH_LOG take highest priority.
    """
    overrides: dict[str, Any] = {}

    root = os.environ.get("TEAMWATCH_ROOT")
    if root:
        overrides.setdefault("watch", {})["root"] = root

    port = os.environ.get("TEAMWATCH_PORT")
    if port:
        try:
            overrides.setdefault("server", {})["port"] = int(port)
        except ValueError:
            _log.warning("Ignoring non-numeric TEAMWATCH_PORT=%r", port)

    log_path = os.environ.get("TEAMWATCH_LOG")
    if log_path:
        overrides.setdefault("logging", {})["file"] = log_path

    return overrides


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert merged dict to typed Config dataclass."""
    watch_data = _section(data, "watch")
    defaults = WatchConfig()
    watch = WatchConfig(
        root=str(watch_data.get("root", defaults.root)),
        teams_dir=str(watch_data.get("teams_dir", defaults.teams_dir)),
        tasks_dir=str(watch_data.get("tasks_dir", defaults.tasks_dir)),
        poll_interval=float(watch_data.get("poll_interval", defaults.poll_interval)),
        stability_threshold=float(
            watch_data.get("stability_threshold", defaults.stability_threshold)
        ),
    )

    broadcast_data = _section(data, "broadcast")
    broadcast = BroadcastConfig(
        debounce=float(broadcast_data.get("debounce", BroadcastConfig().debounce)),
    )

    server_data = _section(data, "server")
    server_defaults = ServerConfig()
    origins = server_data.get("cors_origins", server_defaults.cors_origins)
    server = ServerConfig(
        host=str(server_data.get("host", server_defaults.host)),
        port=int(server_data.get("port", server_defaults.port)),
        cors_origins=[o for o in origins if isinstance(o, str)]
        if isinstance(origins, list)
        else server_defaults.cors_origins,
    )

    log_data = _section(data, "logging")
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        verbose=log_data.get("verbose"),
        file=log_data.get("file"),
    )

    extra = {k: v for k, v in data.items() if k not in _KNOWN_SECTIONS}

    return Config(
        watch=watch,
        broadcast=broadcast,
        server=server,
        logging=logging_config,
        extra=extra,
    )


def load_config(config_file: str | None = None, reload: bool = False) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Environment variables
    2. Explicit config file
    3. User config
    4. System config

    Args:
        config_file: Optional explicit config file path.
        reload: Force reload even if cached.
    """
    global _cached_config

    if _cached_config is not None and not reload and config_file is None:
        return _cached_config

    configs: list[dict[str, Any]] = []

    for path in get_config_paths(config_file):
        config_data = load_yaml_file(path)
        if config_data:
            _log.debug("Loaded config from %s", path)
            configs.append(config_data)

    env_config = env_overrides()
    if env_config:
        configs.append(env_config)

    config = dict_to_config(merge_configs(*configs))

    if config_file is None:
        _cached_config = config

    return config


def get_config() -> Config:
    """Get the cached global config, loading it if needed."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    """Reset cached config. Useful for testing."""
    global _cached_config
    _cached_config = None
