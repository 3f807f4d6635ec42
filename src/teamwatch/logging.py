"""Logging for teamwatch.

Everything logs under the ``teamwatch`` logger; components take a child
(``get_logger("watching")`` -> ``teamwatch.watching``). Lines look like::

    [14:02:11] warning watching: tasks: watch root /x/tasks does not exist yet

Output goes to the file named by ``logging.file`` in config or the
TEAMWATCH_LOG environment variable. Without either, it goes to stderr, but
only when stderr is a terminal, so a piped ``teamwatch`` stays quiet.

Verbosity runs 0-4: error, warning, info, verbose, trace.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from teamwatch.config.schema import LoggingConfig

TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

ROOT_NAME = "teamwatch"
LOG_FILE_ENV = "TEAMWATCH_LOG"

logger = logging.getLogger(ROOT_NAME)

_initialized = False

_NAMED_LEVELS = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "VERBOSE": VERBOSE,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_VERBOSITY_LEVELS = (logging.ERROR, logging.WARNING, logging.INFO, VERBOSE, TRACE)


class _ComponentFormatter(logging.Formatter):
    """Lowercase level plus the component name without the package prefix."""

    def __init__(self) -> None:
        super().__init__("[%(asctime)s] %(level)s %(component)s: %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        # Extra attributes only; levelname stays intact for other handlers
        record.level = record.levelname.lower()
        prefix = ROOT_NAME + "."
        record.component = (
            record.name[len(prefix):] if record.name.startswith(prefix) else record.name
        )
        return super().format(record)


def resolve_level(config: LoggingConfig | None) -> int:
    """Pick the log level from config; verbose takes precedence over level."""
    if config is None:
        return logging.INFO
    if config.verbose is not None:
        verbosity = min(max(config.verbose, 0), len(_VERBOSITY_LEVELS) - 1)
        return _VERBOSITY_LEVELS[verbosity]
    if config.level:
        return _NAMED_LEVELS.get(config.level.upper(), logging.INFO)
    return logging.INFO


def _log_file(config: LoggingConfig | None) -> str | None:
    path = (config.file if config else None) or os.environ.get(LOG_FILE_ENV)
    return os.path.expanduser(path) if path else None


def _make_handler(config: LoggingConfig | None) -> logging.Handler | None:
    """Build the single handler teamwatch logs through, if any."""
    path = _log_file(config)
    if path:
        try:
            return logging.FileHandler(path, mode="a", encoding="utf-8")
        except OSError as e:
            if not sys.stderr.isatty():
                return None
            print(f"[teamwatch] cannot open log file {path}: {e}", file=sys.stderr)
    return logging.StreamHandler(sys.stderr) if sys.stderr.isatty() else None


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure the teamwatch logger once; later calls are ignored.

    Args:
        config: Level, verbosity and log file settings
    """
    global _initialized
    if _initialized:
        return
    _initialized = True

    level = resolve_level(config)
    logger.setLevel(level)

    handler = _make_handler(config)
    if handler is not None:
        handler.setLevel(level)
        handler.setFormatter(_ComponentFormatter())
        logger.addHandler(handler)


def reset_logging() -> None:
    """Close teamwatch's handlers so setup_logging can run again."""
    global _initialized
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    _initialized = False


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the teamwatch logger, or its child for a component name."""
    return logger.getChild(name) if name else logger
