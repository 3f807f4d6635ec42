"""In-memory model of teams, inboxes and tasks."""

from teamwatch.state.documents import (
    Document,
    message_origin,
    message_sender,
    message_timestamp,
    parse_timestamp,
)
from teamwatch.state.store import StateStore, TeamState

__all__ = [
    "Document",
    "StateStore",
    "TeamState",
    "message_origin",
    "message_sender",
    "message_timestamp",
    "parse_timestamp",
]
