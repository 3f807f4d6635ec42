"""HTTP/WebSocket front for teamwatch.

Usage:
    teamwatch --root ~/.claude --port 3001

    GET /api/health          - Service health and counts
    GET /api/teams           - All teams with configs and inboxes
    GET /api/teams/{name}    - One team, inbox newest first
    GET /api/tasks[?team=]   - Tasks, optionally filtered by team
    GET /api/tasks/{id}      - One task
    WS  /ws                  - Snapshots on connect, then live events
"""

from teamwatch.dashboard.routes import create_app
from teamwatch.dashboard.server import serve

__all__ = [
    "create_app",
    "serve",
]
