"""Directory watching using polling.

Each DirectoryWatcher polls one root directory for files matching a glob
pattern and normalizes what it sees into FileEvents on an asyncio queue.
Polling is preferred over native file watchers for cross-platform
reliability, and it tolerates roots that do not exist yet.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from teamwatch.errors import WatcherError
from teamwatch.logging import get_logger

log = get_logger("watching")

# (st_mtime_ns, st_size)
Signature = tuple[int, int]


class FileEventKind(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class FileEvent:
    """A normalized filesystem change for one path."""

    source: str  # Name of the watcher that saw it
    path: Path
    kind: FileEventKind
    timestamp: float = field(default_factory=time.time, compare=False)


@dataclass
class _PendingChange:
    """A change waiting for the file to settle."""

    signature: Signature
    since: float


class DirectoryWatcher:
    """Watches files under a root directory matching a glob pattern.

    Added and modified files are delivered once their (mtime, size) signature
    has been stable for ``stability_threshold`` seconds, so readers do not
    race an in-progress write. Removals are delivered on the next poll.

    Example:
        queue: asyncio.Queue[FileEvent] = asyncio.Queue()
        watcher = DirectoryWatcher("tasks", Path("~/.claude/tasks"), "*/*.json", queue)
        watcher.scan()    # pre-existing files reported as added
        watcher.start()   # begin polling
        ...
        await watcher.stop()
    """

    def __init__(
        self,
        name: str,
        root: Path,
        pattern: str,
        queue: asyncio.Queue[FileEvent],
        poll_interval: float = 0.1,
        stability_threshold: float = 0.1,
    ) -> None:
        """Initialize the watcher.

        Args:
            name: Identifies the watcher on the events it emits
            root: Directory the pattern is resolved against (may not exist yet)
            pattern: Glob pattern relative to root, e.g. ``*/config.json``
            queue: Destination for FileEvents
            poll_interval: Seconds between polling cycles
            stability_threshold: Seconds a file must stay unchanged before delivery
        """
        self.name = name
        self._root = root
        self._pattern = pattern
        self._queue = queue
        self._poll_interval = max(0.01, poll_interval)
        self._stability_threshold = max(0.0, stability_threshold)

        # Delivered state: path -> signature last reported as added/modified
        self._known: dict[Path, Signature] = {}
        self._pending: dict[Path, _PendingChange] = {}
        self._root_missing = False

        self._task: asyncio.Task[None] | None = None

    @property
    def root(self) -> Path:
        return self._root

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def known_count(self) -> int:
        """Number of files currently reported as present."""
        return len(self._known)

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def validate(self) -> None:
        """Check that the root can be watched.

        A missing root is fine (it is picked up once created); a root that
        exists but is not a directory is not.

        Raises:
            WatcherError: If the root exists and is not a directory.
        """
        if self._root.exists() and not self._root.is_dir():
            raise WatcherError(f"{self.name}: watch root {self._root} is not a directory")

    def _snapshot(self) -> dict[Path, Signature]:
        """Stat every file currently matching the pattern."""
        if not self._root.is_dir():
            if not self._root_missing:
                log.warning(
                    "%s: watch root %s does not exist yet, waiting for it", self.name, self._root
                )
                self._root_missing = True
            return {}

        if self._root_missing:
            log.info("%s: watch root %s appeared", self.name, self._root)
            self._root_missing = False

        snapshot: dict[Path, Signature] = {}
        for path in self._root.glob(self._pattern):
            try:
                stat = path.stat()
            except FileNotFoundError:
                continue
            except OSError as e:
                log.warning("%s: error checking %s: %s", self.name, path, e)
                continue
            if path.is_file():
                snapshot[path] = (stat.st_mtime_ns, stat.st_size)
        return snapshot

    def _emit(self, path: Path, kind: FileEventKind) -> FileEvent:
        event = FileEvent(source=self.name, path=path, kind=kind)
        self._queue.put_nowait(event)
        log.debug("%s: %s %s", self.name, kind.value, path)
        return event

    def scan(self) -> list[FileEvent]:
        """Report every pre-existing file as added.

        Files last written less than ``stability_threshold`` seconds ago may
        still be mid-write; they are held back and delivered by a later poll
        once settled. Resets delivered state, so calling it again re-reports
        everything.
        """
        current = self._snapshot()
        self._known = {}
        self._pending.clear()

        wall_ns = time.time_ns()
        since = time.monotonic()
        threshold_ns = int(self._stability_threshold * 1e9)

        events: list[FileEvent] = []
        for path in sorted(current):
            signature = current[path]
            if wall_ns - signature[0] < threshold_ns:
                self._pending[path] = _PendingChange(signature=signature, since=since)
                continue
            self._known[path] = signature
            events.append(self._emit(path, FileEventKind.ADDED))

        if self._pending:
            log.debug("%s: %d file(s) still settling after scan", self.name, len(self._pending))
        log.info("%s: initial scan found %d file(s) under %s", self.name, len(events), self._root)
        return events

    def poll(self, now: float | None = None) -> list[FileEvent]:
        """Run one polling cycle and emit any settled changes.

        Args:
            now: Monotonic time to evaluate stability against (defaults to now)

        Returns:
            The events emitted during this cycle
        """
        if now is None:
            now = time.monotonic()

        current = self._snapshot()
        events: list[FileEvent] = []

        for path in list(self._known):
            if path not in current:
                del self._known[path]
                events.append(self._emit(path, FileEventKind.REMOVED))

        # Created and gone again before it settled: nothing to report
        for path in list(self._pending):
            if path not in current:
                del self._pending[path]

        for path, signature in current.items():
            if self._known.get(path) == signature:
                self._pending.pop(path, None)
                continue

            pending = self._pending.get(path)
            if pending is None or pending.signature != signature:
                pending = _PendingChange(signature=signature, since=now)
                self._pending[path] = pending

            if now - pending.since >= self._stability_threshold:
                kind = FileEventKind.MODIFIED if path in self._known else FileEventKind.ADDED
                del self._pending[path]
                self._known[path] = signature
                events.append(self._emit(path, kind))

        return events

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                self.poll()
            except Exception:
                log.exception("%s: polling cycle failed", self.name)

    def start(self) -> None:
        """Start polling in a background task.

        Must be called from within an async context.

        Raises:
            WatcherError: If the root cannot be watched.
        """
        if self.is_running():
            log.warning("%s: watcher already running", self.name)
            return

        self.validate()
        self._task = asyncio.create_task(self._poll_loop(), name=f"watcher:{self.name}")
        log.debug(
            "%s: watching %s/%s (interval=%.2fs, stability=%.2fs)",
            self.name,
            self._root,
            self._pattern,
            self._poll_interval,
            self._stability_threshold,
        )

    async def stop(self) -> None:
        """Stop polling and wait for the background task to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        log.debug("%s: watcher stopped", self.name)
