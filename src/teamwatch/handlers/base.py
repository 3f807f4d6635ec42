"""Shared plumbing for the change handlers."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from teamwatch.errors import DocumentError
from teamwatch.logging import get_logger
from teamwatch.watching.watcher import FileEvent, FileEventKind

if TYPE_CHECKING:
    from teamwatch.broadcast.scheduler import BroadcastScheduler
    from teamwatch.state.store import StateStore

log = get_logger("handlers")

T = TypeVar("T")


class ChangeHandler(ABC):
    """Applies FileEvents from one watched tree to the StateStore.

    Added and modified files go to ``on_upsert``, removed files to
    ``on_remove``. A DocumentError raised while reading is logged and the
    event dropped; because subclasses read before they mutate, the store
    keeps its previous value for that entity.
    """

    name: str = "handler"

    def __init__(
        self,
        store: StateStore,
        scheduler: BroadcastScheduler,
        root: Path,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.root = root

    async def handle(self, event: FileEvent) -> bool:
        """Apply one event.

        Returns:
            False if the event was dropped because the file was unusable
        """
        try:
            if event.kind is FileEventKind.REMOVED:
                await self.on_remove(event.path)
            else:
                await self.on_upsert(event.path, event.kind)
        except DocumentError as e:
            log.warning("%s: dropping %s event: %s", self.name, event.kind.value, e)
            return False
        return True

    @abstractmethod
    async def on_upsert(self, path: Path, kind: FileEventKind) -> None:
        """Re-read ``path`` and update the store."""

    @abstractmethod
    async def on_remove(self, path: Path) -> None:
        """Forget whatever ``path`` contributed to the store."""

    async def read(self, reader: Callable[[Path], T], path: Path) -> T:
        """Run a blocking reader off the event loop."""
        return await asyncio.to_thread(reader, path)

    def relative_parts(self, path: Path) -> tuple[str, ...]:
        """Path components below the handler's root, or () if outside it."""
        try:
            return path.relative_to(self.root).parts
        except ValueError:
            log.warning("%s: ignoring %s outside %s", self.name, path, self.root)
            return ()

    def team_name(self, path: Path) -> str | None:
        """The team is the first directory below the root."""
        parts = self.relative_parts(path)
        if len(parts) < 2:
            return None
        return parts[0]
