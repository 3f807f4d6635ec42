"""Inbox handler: ``teams/<team>/inboxes/<member>.json``."""

from __future__ import annotations

from pathlib import Path

from teamwatch.broadcast.gateway import KIND_ADD, KIND_REMOVE
from teamwatch.handlers.base import ChangeHandler, log
from teamwatch.state.documents import read_message_list, tag_message
from teamwatch.watching.watcher import FileEventKind


class InboxHandler(ChangeHandler):
    """Mirrors inbox files into their team's inbox.

    The file, not the message, is the unit of consistency: on every change
    all messages that came from the file are replaced by the freshly parsed
    ones, and removing the file removes all of them.
    """

    name = "inbox"

    async def on_upsert(self, path: Path, kind: FileEventKind) -> None:
        team = self.team_name(path)
        if not team:
            return

        parsed = await self.read(read_message_list, path)
        messages = [tag_message(message, path, index) for index, message in enumerate(parsed)]
        self.store.replace_inbox_file(team, str(path), messages)

        log.debug(
            "Inbox %s: %s (%d message(s) from %s)", kind.value, team, len(messages), path.name
        )
        for message in messages:
            self.scheduler.team_message(team, message, KIND_ADD)
        self.scheduler.teams_changed()

    async def on_remove(self, path: Path) -> None:
        team = self.team_name(path)
        if not team:
            return

        removed = self.store.remove_inbox_file(team, str(path))
        if not removed:
            return

        log.debug("Inbox file removed: %s/%s (%d message(s))", team, path.name, len(removed))
        for message in removed:
            self.scheduler.team_message(team, message, KIND_REMOVE)
        self.scheduler.teams_changed()
