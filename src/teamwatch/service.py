"""The watch/merge/broadcast service.

Three DirectoryWatchers feed one asyncio queue. A single dispatcher task
drains it and runs the matching change handler to completion before taking
the next event, so events for a given path are applied in the order the
watcher reported them. Handlers update the StateStore and schedule
debounced broadcasts through the BroadcastGateway.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any

from teamwatch.broadcast.gateway import BroadcastGateway
from teamwatch.broadcast.scheduler import BroadcastScheduler
from teamwatch.config.schema import BroadcastConfig, WatchConfig
from teamwatch.errors import WatcherError, WatcherStartupError
from teamwatch.handlers.base import ChangeHandler
from teamwatch.handlers.inbox import InboxHandler
from teamwatch.handlers.tasks import TaskHandler
from teamwatch.handlers.team_config import TeamConfigHandler
from teamwatch.logging import get_logger
from teamwatch.state.store import StateStore
from teamwatch.watching.watcher import DirectoryWatcher, FileEvent

log = get_logger("service")

TEAM_CONFIG_PATTERN = "*/config.json"
INBOX_PATTERN = "*/inboxes/*.json"
TASK_PATTERN = "*/*.json"


class TeamWatchService:
    """Keeps a StateStore in sync with the team and task directories.

    Example:
        store = StateStore()
        service = TeamWatchService(store, WatchConfig(root="~/.claude"))
        service.gateway.subscribe(connections.broadcast)
        await service.start()
        ...
        await service.stop()
    """

    def __init__(
        self,
        store: StateStore,
        watch: WatchConfig | None = None,
        broadcast: BroadcastConfig | None = None,
        gateway: BroadcastGateway | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: State to keep in sync; owned by the caller
            watch: Directories and polling settings
            broadcast: Debounce settings
            gateway: Gateway to publish through (default: a new one over store)
        """
        self.store = store
        self.watch_config = watch or WatchConfig()
        broadcast = broadcast or BroadcastConfig()

        self.gateway = gateway or BroadcastGateway(store)
        self.scheduler = BroadcastScheduler(self.gateway, broadcast.debounce)

        teams_path = self.watch_config.teams_path
        tasks_path = self.watch_config.tasks_path
        self._handlers: dict[str, ChangeHandler] = {
            handler.name: handler
            for handler in (
                TeamConfigHandler(store, self.scheduler, teams_path),
                InboxHandler(store, self.scheduler, teams_path),
                TaskHandler(store, self.scheduler, tasks_path),
            )
        }

        self._queue: asyncio.Queue[FileEvent] | None = None
        self._watchers: list[DirectoryWatcher] = []
        self._dispatcher: asyncio.Task[None] | None = None

    @property
    def watchers(self) -> list[DirectoryWatcher]:
        return list(self._watchers)

    def is_running(self) -> bool:
        return self._dispatcher is not None and not self._dispatcher.done()

    def _create_watchers(self, queue: asyncio.Queue[FileEvent]) -> list[DirectoryWatcher]:
        cfg = self.watch_config
        specs = (
            (TeamConfigHandler.name, cfg.teams_path, TEAM_CONFIG_PATTERN),
            (InboxHandler.name, cfg.teams_path, INBOX_PATTERN),
            (TaskHandler.name, cfg.tasks_path, TASK_PATTERN),
        )
        return [
            DirectoryWatcher(
                name,
                root,
                pattern,
                queue,
                poll_interval=cfg.poll_interval,
                stability_threshold=cfg.stability_threshold,
            )
            for name, root, pattern in specs
        ]

    async def dispatch(self, event: FileEvent) -> bool:
        """Route one event to its handler and apply it.

        Returns:
            False if the event was dropped
        """
        handler = self._handlers.get(event.source)
        if handler is None:
            log.warning("No handler for %s event on %s", event.source, event.path)
            return False
        return await handler.handle(event)

    async def _dispatch_loop(self, queue: asyncio.Queue[FileEvent]) -> None:
        while True:
            event = await queue.get()
            try:
                await self.dispatch(event)
            except Exception:
                log.exception("Error handling %s event for %s", event.kind.value, event.path)
            finally:
                queue.task_done()

    async def start(self) -> None:
        """Start watching and apply the initial scan.

        Returns once every pre-existing file has been applied to the store,
        so queries made afterwards see a warm model.

        Raises:
            WatcherStartupError: If none of the watchers could be started.
        """
        if self.is_running():
            log.warning("Service already running")
            return

        log.info("Starting file watchers...")
        queue: asyncio.Queue[FileEvent] = asyncio.Queue()

        watchers: list[DirectoryWatcher] = []
        for watcher in self._create_watchers(queue):
            try:
                watcher.validate()
            except WatcherError as e:
                log.error("Cannot start %s watcher: %s", watcher.name, e)
                continue
            watchers.append(watcher)

        if not watchers:
            raise WatcherStartupError("no directory watcher could be started")

        # No dispatcher until every scan has succeeded
        for watcher in watchers:
            watcher.scan()

        self._queue = queue
        self._dispatcher = asyncio.create_task(self._dispatch_loop(queue), name="dispatcher")
        await queue.join()

        for watcher in watchers:
            watcher.start()
        self._watchers = watchers

        log.info(
            "File watchers initialized (%d/3): %d team(s), %d task(s)",
            len(watchers),
            self.store.count_teams(),
            self.store.count_tasks(),
        )

    async def refresh(self) -> None:
        """Poll every watcher now and wait until the events are applied."""
        for watcher in self._watchers:
            watcher.poll()
        await self.drain()

    async def drain(self) -> None:
        """Wait until all queued events have been handled."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self) -> None:
        """Stop watchers and the dispatcher, discarding pending broadcasts.

        The store is left as it is.
        """
        log.info("Stopping file watchers...")
        for watcher in self._watchers:
            await watcher.stop()
        self._watchers = []

        dispatcher, self._dispatcher = self._dispatcher, None
        if dispatcher is not None:
            dispatcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await dispatcher
        self._queue = None

        dropped = self.scheduler.cancel_all()
        if dropped:
            log.debug("Discarded %d pending broadcast(s)", dropped)
        log.info("File watchers stopped")

    def status(self) -> dict[str, Any]:
        return {
            "running": self.is_running(),
            "watchers": [
                {
                    "name": w.name,
                    "root": str(w.root),
                    "pattern": w.pattern,
                    "files": w.known_count,
                }
                for w in self._watchers
            ],
            "queued": self._queue.qsize() if self._queue is not None else 0,
            "teams": self.store.count_teams(),
            "tasks": self.store.count_tasks(),
        }

    async def __aenter__(self) -> TeamWatchService:
        await self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.stop()
