"""Integration tests for TeamWatchService against a real directory tree."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from teamwatch.broadcast.gateway import TASK_CHANGED, TEAM_MESSAGE, TEAMS_SNAPSHOT
from teamwatch.config.schema import BroadcastConfig, WatchConfig
from teamwatch.errors import WatcherStartupError
from teamwatch.service import TeamWatchService
from teamwatch.state.store import StateStore
from teamwatch.watching.watcher import DirectoryWatcher, FileEvent, FileEventKind
from tests.utils import EventRecorder, write_json

DEBOUNCE = 0.05


@pytest.fixture
def service(watch_config: WatchConfig, broadcast_config: BroadcastConfig) -> TeamWatchService:
    return TeamWatchService(StateStore(), watch_config, broadcast_config)


class TestStartup:
    """Initial scan and watcher validation."""

    @pytest.mark.asyncio
    async def test_initial_scan_warms_store(self, service, claude_root: Path) -> None:
        teams = claude_root / "teams"
        write_json(teams / "alpha" / "config.json", {"members": [{"name": "bob"}]})
        write_json(teams / "alpha" / "inboxes" / "bob.json", [{"from": "carol", "text": "hi"}])
        write_json(claude_root / "tasks" / "alpha" / "1.json", {"subject": "ship"})

        await service.start()
        try:
            team = service.store.get_team("alpha")
            assert team["config"] == {"members": [{"name": "bob"}]}
            assert [m["text"] for m in team["inbox"]] == ["hi"]
            assert service.store.get_task("1")["team"] == "alpha"
            assert service.is_running()
        finally:
            await service.stop()

    @pytest.mark.asyncio
    async def test_all_roots_unusable_raises(self, tmp_path: Path) -> None:
        root = tmp_path / "claude"
        root.mkdir()
        (root / "teams").write_text("not a directory")
        (root / "tasks").write_text("not a directory")
        service = TeamWatchService(StateStore(), WatchConfig(root=str(root)))

        with pytest.raises(WatcherStartupError):
            await service.start()
        assert not service.is_running()

    @pytest.mark.asyncio
    async def test_failed_scan_leaves_no_dispatcher(
        self, service, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken_scan(self) -> list[FileEvent]:
            raise PermissionError("unreadable")

        monkeypatch.setattr(DirectoryWatcher, "scan", broken_scan)

        with pytest.raises(PermissionError):
            await service.start()
        assert not service.is_running()
        assert all(t.get_name() != "dispatcher" for t in asyncio.all_tasks())

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_other_watchers(self, tmp_path: Path) -> None:
        root = tmp_path / "claude"
        root.mkdir()
        (root / "teams").write_text("not a directory")
        write_json(root / "tasks" / "alpha" / "1.json", {})
        service = TeamWatchService(
            StateStore(), WatchConfig(root=str(root), poll_interval=0.02, stability_threshold=0.0)
        )

        await service.start()
        try:
            assert [w.name for w in service.watchers] == ["tasks"]
            assert service.store.count_tasks() == 1
        finally:
            await service.stop()

    @pytest.mark.asyncio
    async def test_missing_roots_picked_up_later(self, tmp_path: Path) -> None:
        root = tmp_path / "claude"
        service = TeamWatchService(
            StateStore(), WatchConfig(root=str(root), poll_interval=0.02, stability_threshold=0.0)
        )

        async with service:
            assert service.store.count_teams() == 0
            write_json(root / "teams" / "alpha" / "config.json", {})
            await service.refresh()

            assert service.store.has_team("alpha")

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, service) -> None:
        await service.start()
        try:
            watchers = service.watchers
            await service.start()
            assert service.watchers == watchers
        finally:
            await service.stop()


class TestEndToEnd:
    """Filesystem changes flowing through to the store and observers."""

    @pytest.mark.asyncio
    async def test_inbox_message_lifecycle(self, service, claude_root: Path) -> None:
        teams = claude_root / "teams"
        write_json(teams / "alpha" / "config.json", {"members": [{"name": "bob"}]})
        recorder = EventRecorder()
        service.gateway.subscribe(recorder)

        async with service:
            inbox = write_json(
                teams / "alpha" / "inboxes" / "bob.json",
                {"from": "carol", "text": "hello", "timestamp": "2024-01-01T10:00:00Z"},
            )
            await service.refresh()

            (message,) = service.store.get_team("alpha")["inbox"]
            assert message["from"] == "carol"

            inbox.unlink()
            await service.refresh()
            assert service.store.get_team("alpha")["inbox"] == []

            await service.scheduler.wait_idle()

        kinds = [e["data"]["eventKind"] for e in recorder.of_type(TEAM_MESSAGE)]
        assert kinds[-1] == "remove"
        snapshot = recorder.of_type(TEAMS_SNAPSHOT)[-1]
        assert snapshot["data"][0]["inbox"] == []

    @pytest.mark.asyncio
    async def test_burst_of_task_writes_broadcasts_last(
        self, service, claude_root: Path
    ) -> None:
        recorder = EventRecorder()
        service.gateway.subscribe(recorder)
        path = claude_root / "tasks" / "alpha" / "7.json"

        for rev in range(1, 6):
            write_json(path, {"status": "in_progress", "rev": rev})
            await service.dispatch(FileEvent("tasks", path, FileEventKind.MODIFIED))
        await service.scheduler.wait_idle()

        (event,) = recorder.of_type(TASK_CHANGED)
        assert event["data"]["task"]["rev"] == 5
        assert event["data"]["task"]["id"] == "7"

    @pytest.mark.asyncio
    async def test_task_removal(self, service, claude_root: Path) -> None:
        first = write_json(claude_root / "tasks" / "alpha" / "1.json", {})
        write_json(claude_root / "tasks" / "alpha" / "2.json", {})

        async with service:
            first.unlink()
            await service.refresh()

            assert [t["id"] for t in service.store.list_tasks()] == ["2"]

    @pytest.mark.asyncio
    async def test_corrupt_write_keeps_cached_config(self, service, claude_root: Path) -> None:
        config = write_json(claude_root / "teams" / "alpha" / "config.json", {"v": 1})

        async with service:
            config.write_text("{broken", encoding="utf-8")
            await service.refresh()

            assert service.store.get_team("alpha")["config"] == {"v": 1}

    @pytest.mark.asyncio
    async def test_unknown_source_dropped(self, service, tmp_path: Path) -> None:
        event = FileEvent("nonsense", tmp_path / "x.json", FileEventKind.ADDED)

        assert await service.dispatch(event) is False


class TestShutdown:
    @pytest.mark.asyncio
    async def test_stop_discards_pending_broadcasts(self, claude_root: Path) -> None:
        service = TeamWatchService(
            StateStore(),
            WatchConfig(root=str(claude_root), poll_interval=0.02, stability_threshold=0.0),
            BroadcastConfig(debounce=DEBOUNCE * 10),
        )
        recorder = EventRecorder()
        service.gateway.subscribe(recorder)

        await service.start()
        write_json(claude_root / "teams" / "alpha" / "config.json", {})
        await service.refresh()
        await service.stop()
        await asyncio.sleep(DEBOUNCE * 12)

        assert recorder.events == []
        assert service.store.has_team("alpha")
        assert not service.is_running()

    @pytest.mark.asyncio
    async def test_status(self, service) -> None:
        async with service:
            status = service.status()
            assert status["running"] is True
            assert {w["name"] for w in status["watchers"]} == {"team-config", "inbox", "tasks"}

        assert service.status()["running"] is False
