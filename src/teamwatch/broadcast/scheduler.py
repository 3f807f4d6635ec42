"""One debounced broadcast per event category."""

from __future__ import annotations

from typing import Any

from teamwatch.broadcast.debounce import DebouncedEmitter
from teamwatch.broadcast.gateway import BroadcastGateway


class BroadcastScheduler:
    """Coalesces handler notifications into gateway broadcasts.

    There is one timer per category (teams, inbox, tasks), not per entity.
    The teams broadcast re-reads the whole team list when it fires, so it
    never loses information. Inbox and task broadcasts carry only the last
    call's payload: a burst of updates within one quiet period reaches
    observers as the final update alone, while the store keeps all of them.
    """

    def __init__(self, gateway: BroadcastGateway, debounce: float = 0.3) -> None:
        self.gateway = gateway
        self.teams = DebouncedEmitter(gateway.publish_teams_snapshot, debounce, name="teams")
        self.inbox = DebouncedEmitter(gateway.publish_team_message, debounce, name="inbox")
        self.tasks = DebouncedEmitter(gateway.publish_task_changed, debounce, name="tasks")

    def teams_changed(self) -> None:
        self.teams()

    def team_message(self, team: str, message: dict[str, Any], event_kind: str) -> None:
        self.inbox(team, message, event_kind)

    def task_changed(self, task: dict[str, Any], event_kind: str) -> None:
        self.tasks(task, event_kind)

    def _emitters(self) -> tuple[DebouncedEmitter, ...]:
        return (self.teams, self.inbox, self.tasks)

    def cancel_all(self) -> int:
        """Discard pending broadcasts. Returns how many were dropped."""
        return sum(1 for emitter in self._emitters() if emitter.cancel())

    async def wait_idle(self) -> None:
        """Wait until every pending broadcast has been delivered."""
        for emitter in self._emitters():
            await emitter.wait_idle()
