"""Task handler: ``tasks/<team>/<taskId>.json``."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from teamwatch.broadcast.gateway import KIND_ADD, KIND_CHANGE, KIND_REMOVE
from teamwatch.handlers.base import ChangeHandler, log
from teamwatch.state.documents import Document, read_json_document, utc_now_iso
from teamwatch.watching.watcher import FileEventKind

if TYPE_CHECKING:
    from teamwatch.broadcast.scheduler import BroadcastScheduler
    from teamwatch.state.store import StateStore

SYNC_KEY = "lastSynchronizedAt"

# Keys the path decides, whatever the file says
_PATH_KEYS = ("id", "team")


class TaskHandler(ChangeHandler):
    """Keeps one task record per task id.

    The id comes from the file name and the team from the parent
    directory; both override same-named fields inside the file.
    """

    name = "tasks"

    def __init__(
        self,
        store: StateStore,
        scheduler: BroadcastScheduler,
        root: Path,
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        super().__init__(store, scheduler, root)
        self._clock = clock

    def build_record(self, task_id: str, team: str, fields: Document) -> Document:
        record: Document = {"id": task_id, "team": team}
        record.update((k, v) for k, v in fields.items() if k not in _PATH_KEYS and k != SYNC_KEY)
        record[SYNC_KEY] = self._clock()
        return record

    async def on_upsert(self, path: Path, kind: FileEventKind) -> None:
        team = self.team_name(path)
        if not team:
            return
        task_id = path.stem

        fields = await self.read(read_json_document, path)
        record = self.build_record(task_id, team, fields)

        previous = self.store.get_task(task_id)
        if previous is not None and _same_content(previous, record):
            log.debug("Task %s unchanged, keeping previous sync time", task_id)
            return

        existed = self.store.put_task(record)
        event_kind = KIND_CHANGE if existed else KIND_ADD
        log.debug("Task %s: %s (team %s)", event_kind, task_id, team)
        self.scheduler.task_changed(record, event_kind)

    async def on_remove(self, path: Path) -> None:
        if not self.relative_parts(path):
            return
        task_id = path.stem

        removed = self.store.remove_task(task_id)
        if removed is None:
            return

        log.debug("Task removed: %s", task_id)
        self.scheduler.task_changed(removed, KIND_REMOVE)


def _same_content(a: Document, b: Document) -> bool:
    """Compare two task records ignoring their sync stamps."""
    return {k: v for k, v in a.items() if k != SYNC_KEY} == {
        k: v for k, v in b.items() if k != SYNC_KEY
    }
