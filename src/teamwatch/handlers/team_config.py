"""Team config handler: ``teams/<team>/config.json``."""

from __future__ import annotations

from pathlib import Path

from teamwatch.handlers.base import ChangeHandler, log
from teamwatch.state.documents import read_json_document
from teamwatch.watching.watcher import FileEventKind


class TeamConfigHandler(ChangeHandler):
    """Keeps each team's config equal to the last good read of its file.

    Configs are replaced wholesale; there is no field-level merge.
    Removing the config file removes the team along with its inbox.
    """

    name = "team-config"

    async def on_upsert(self, path: Path, kind: FileEventKind) -> None:
        team = self.team_name(path)
        if not team:
            return

        config = await self.read(read_json_document, path)
        self.store.set_team_config(team, config)

        log.debug("Team config %s: %s", kind.value, team)
        self.scheduler.teams_changed()

    async def on_remove(self, path: Path) -> None:
        team = self.team_name(path)
        if not team:
            return

        if self.store.remove_team(team):
            log.debug("Team config removed: %s", team)
            self.scheduler.teams_changed()
