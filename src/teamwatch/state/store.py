"""In-memory state mirrored from the watched directories.

The StateStore is mutated only by the change handlers, all running on the
event loop thread. Every read accessor hands out a deep copy so callers can
never reach the live structures.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from teamwatch.state.documents import Document, message_origin, message_timestamp


@dataclass
class TeamState:
    """A team as known from its directory."""

    name: str
    config: Document | None = None
    inbox: list[Document] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to an independent dictionary."""
        return {
            "id": self.name,
            "name": self.name,
            "config": copy.deepcopy(self.config),
            "inbox": copy.deepcopy(self.inbox),
        }


class StateStore:
    """Teams keyed by name and tasks keyed by id.

    Mutators are used by the change handlers; the query methods
    (``list_teams``, ``get_team``, ``list_tasks``, ...) are the read surface
    for everything else.
    """

    def __init__(self) -> None:
        self._teams: dict[str, TeamState] = {}
        self._tasks: dict[str, Document] = {}

    def _ensure_team(self, name: str) -> TeamState:
        team = self._teams.get(name)
        if team is None:
            team = TeamState(name=name)
            self._teams[name] = team
        return team

    # -- mutators ----------------------------------------------------------

    def set_team_config(self, name: str, config: Document) -> None:
        """Replace a team's config wholesale, creating the team if needed."""
        self._ensure_team(name).config = copy.deepcopy(config)

    def remove_team(self, name: str) -> bool:
        """Drop a team and its inbox. Returns False if it was unknown."""
        return self._teams.pop(name, None) is not None

    def replace_inbox_file(self, name: str, source_file: str, messages: list[Document]) -> None:
        """Swap every message from ``source_file`` for ``messages``.

        The inbox is kept sorted by timestamp; the sort is stable so messages
        with equal timestamps stay in arrival order.
        """
        existing = self._teams.get(name)
        inbox = [m for m in existing.inbox if message_origin(m) != source_file] if existing else []
        inbox.extend(copy.deepcopy(messages))
        inbox.sort(key=message_timestamp)
        # Only touch the team once the new inbox is fully built
        self._ensure_team(name).inbox = inbox

    def remove_inbox_file(self, name: str, source_file: str) -> list[Document]:
        """Remove every message that came from ``source_file``.

        Returns:
            The removed messages (empty if the team or file was unknown)
        """
        team = self._teams.get(name)
        if team is None:
            return []
        removed = [m for m in team.inbox if message_origin(m) == source_file]
        if removed:
            team.inbox = [m for m in team.inbox if message_origin(m) != source_file]
        return removed

    def put_task(self, task: Document) -> bool:
        """Store a task record under its id.

        Returns:
            True if the task replaced an existing one
        """
        task_id = task["id"]
        existed = task_id in self._tasks
        self._tasks[task_id] = copy.deepcopy(task)
        return existed

    def remove_task(self, task_id: str) -> Document | None:
        """Remove a task, returning the record that was stored."""
        return self._tasks.pop(task_id, None)

    # -- queries -----------------------------------------------------------

    def list_teams(self) -> list[dict[str, Any]]:
        return [team.to_dict() for team in self._teams.values()]

    def get_team(self, name: str) -> dict[str, Any] | None:
        team = self._teams.get(name)
        return team.to_dict() if team else None

    def has_team(self, name: str) -> bool:
        return name in self._teams

    def list_tasks(self) -> list[Document]:
        return copy.deepcopy(list(self._tasks.values()))

    def list_tasks_by_team(self, name: str) -> list[Document]:
        return copy.deepcopy([t for t in self._tasks.values() if t.get("team") == name])

    def get_task(self, task_id: str) -> Document | None:
        task = self._tasks.get(task_id)
        return copy.deepcopy(task) if task is not None else None

    def count_teams(self) -> int:
        return len(self._teams)

    def count_tasks(self) -> int:
        return len(self._tasks)
