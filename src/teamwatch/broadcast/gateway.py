"""Publishes state changes to subscribed observers."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from teamwatch.logging import get_logger

if TYPE_CHECKING:
    from teamwatch.state.store import StateStore

log = get_logger("broadcast")

# Event types
TEAMS_SNAPSHOT = "teams-snapshot"
TASKS_SNAPSHOT = "tasks-snapshot"
TEAM_MESSAGE = "team-message"
TASK_CHANGED = "task-changed"

# eventKind values
KIND_ADD = "add"
KIND_CHANGE = "change"
KIND_REMOVE = "remove"

Subscriber = Callable[[dict[str, Any]], Awaitable[None]]


def format_event(
    event_type: str,
    data: Any,
    timestamp: float | None = None,
) -> dict[str, Any]:
    """Format an event message for observers."""
    return {
        "type": event_type,
        "data": data,
        "timestamp": time.time() if timestamp is None else timestamp,
    }


class BroadcastGateway:
    """Fans event messages out to every subscriber.

    Subscribers are coroutine functions taking the formatted event message.
    A subscriber that raises is logged and skipped; the others still receive
    the event.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store
        self._subscribers: list[Subscriber] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber.

        Returns:
            A function that unregisters it
        """
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    async def publish(self, event_type: str, data: Any) -> dict[str, Any]:
        """Send one event to all subscribers and return the message sent."""
        message = format_event(event_type, data)
        for subscriber in list(self._subscribers):
            try:
                await subscriber(message)
            except Exception:
                log.exception("Subscriber failed handling %s", event_type)
        return message

    async def publish_teams_snapshot(self) -> None:
        """Publish the full team list as it is right now."""
        teams = self._store.list_teams()
        await self.publish(TEAMS_SNAPSHOT, teams)
        log.debug("Broadcasted teams snapshot (%d teams)", len(teams))

    async def publish_team_message(
        self,
        team: str,
        message: dict[str, Any],
        event_kind: str,
    ) -> None:
        await self.publish(
            TEAM_MESSAGE,
            {"team": team, "message": message, "eventKind": event_kind},
        )
        log.debug("Broadcasted inbox %s for %s", event_kind, team)

    async def publish_task_changed(self, task: dict[str, Any], event_kind: str) -> None:
        await self.publish(TASK_CHANGED, {"task": task, "eventKind": event_kind})
        log.debug("Broadcasted task %s for %s", event_kind, task.get("id"))

    def initial_events(self) -> list[dict[str, Any]]:
        """Events a newly connected observer needs before any update.

        The full team list comes first, then the full task list.
        """
        return [
            format_event(TEAMS_SNAPSHOT, self._store.list_teams()),
            format_event(TASKS_SNAPSHOT, self._store.list_tasks()),
        ]
