"""Configuration management for teamwatch.

Provides hierarchical YAML-based configuration with:
- System-level config (/etc/teamwatch/ or %PROGRAMDATA%)
- User-level config (~/.config/teamwatch/, ~/.teamwatch/ or %APPDATA%)
- An explicit config file (--config)
- Environment variable overrides (highest priority)

Example usage:
    from teamwatch.config import load_config

    config = load_config()
    print(config.watch.teams_path)
    print(config.broadcast.debounce)
"""

from teamwatch.config.loader import (
    get_config,
    load_config,
    reset_config,
)
from teamwatch.config.paths import (
    get_config_paths,
    get_system_config_path,
    get_user_config_path,
)
from teamwatch.config.schema import (
    BroadcastConfig,
    Config,
    LoggingConfig,
    ServerConfig,
    WatchConfig,
)

__all__ = [
    "Config",
    "load_config",
    "get_config",
    "reset_config",
    "WatchConfig",
    "BroadcastConfig",
    "ServerConfig",
    "LoggingConfig",
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
]
