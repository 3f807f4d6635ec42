"""Root pytest configuration for all tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from teamwatch.config.schema import BroadcastConfig, WatchConfig
from tests.utils import EventRecorder

pytest_plugins = ("pytest_asyncio",)

# Short enough to keep the suite quick, long enough to coalesce a burst
TEST_DEBOUNCE = 0.05


@pytest.fixture
def claude_root(tmp_path: Path) -> Path:
    """An empty ~/.claude lookalike with teams/ and tasks/."""
    root = tmp_path / "claude"
    (root / "teams").mkdir(parents=True)
    (root / "tasks").mkdir(parents=True)
    return root


@pytest.fixture
def watch_config(claude_root: Path) -> WatchConfig:
    """Fast polling with no write-stabilization delay."""
    return WatchConfig(root=str(claude_root), poll_interval=0.02, stability_threshold=0.0)


@pytest.fixture
def broadcast_config() -> BroadcastConfig:
    return BroadcastConfig(debounce=TEST_DEBOUNCE)


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()
