"""Entry point for running teamwatch.

Usage:
    python -m teamwatch [--root DIR] [--host HOST] [--port PORT]
                        [--config FILE] [--verbose N]

Watches <root>/teams and <root>/tasks and serves the mirrored state over
HTTP and WebSocket until interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from teamwatch.config import Config, load_config
from teamwatch.errors import WatcherStartupError
from teamwatch.logging import get_logger, setup_logging

log = get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="teamwatch",
        description="Mirror agent team configs, inboxes and tasks and stream changes.",
    )
    parser.add_argument("--root", help="directory containing teams/ and tasks/")
    parser.add_argument("--host", help="address to listen on")
    parser.add_argument("--port", type=int, help="port to listen on")
    parser.add_argument("--config", help="additional YAML config file")
    parser.add_argument(
        "--verbose", type=int, choices=range(5), help="0=errors ... 4=trace"
    )
    return parser


def apply_args(config: Config, args: argparse.Namespace) -> Config:
    """Command-line options override every config source."""
    if args.root:
        config.watch.root = args.root
    if args.host:
        config.server.host = args.host
    if args.port is not None:
        config.server.port = args.port
    if args.verbose is not None:
        config.logging.verbose = args.verbose
    return config


def main(argv: list[str] | None = None) -> int:
    """Run the teamwatch server."""
    args = build_parser().parse_args(argv)

    # Load config before logging so we can use config.logging settings
    config = apply_args(load_config(config_file=args.config), args)
    setup_logging(config.logging)

    log.info(
        "Starting teamwatch (root=%s, debounce=%.2fs)",
        config.watch.root_path,
        config.broadcast.debounce,
    )

    from teamwatch.dashboard.server import serve

    try:
        asyncio.run(serve(config))
    except WatcherStartupError as e:
        log.error("Failed to start file watchers: %s", e)
        return 1
    except KeyboardInterrupt:
        log.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
