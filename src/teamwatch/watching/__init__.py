"""Directory watching for teamwatch.

Polls the team config, inbox and task directories and reports normalized
FileEvents through an asyncio queue.
"""

from teamwatch.watching.watcher import (
    DirectoryWatcher,
    FileEvent,
    FileEventKind,
)

__all__ = [
    "DirectoryWatcher",
    "FileEvent",
    "FileEventKind",
]
