"""Change handlers turning file events into state updates."""

from teamwatch.handlers.base import ChangeHandler
from teamwatch.handlers.inbox import InboxHandler
from teamwatch.handlers.tasks import TaskHandler
from teamwatch.handlers.team_config import TeamConfigHandler

__all__ = [
    "ChangeHandler",
    "InboxHandler",
    "TaskHandler",
    "TeamConfigHandler",
]
