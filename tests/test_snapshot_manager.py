"""Unit tests for snapshot creation, retention and restore."""

import asyncio
import tarfile
from datetime import datetime, timedelta

import pytest

from deploy_pilot.api.exceptions import SnapshotCreateFailure, TransportError
from deploy_pilot.core import SnapshotManager, select_expired
from deploy_pilot.models import Snapshot
from deploy_pilot.transport import LocalTransport

from conftest import DroppedLinkTransport, deploy_state


def with_manager(config, action, clock=None):
    async def scenario():
        async with LocalTransport() as transport:
            manager = SnapshotManager.from_config(transport, config, clock=clock)
            return await action(manager)

    return asyncio.run(scenario())


class TestSelectExpired:
    def _snapshots(self, count):
        start = datetime(2025, 1, 1)
        return [
            Snapshot.from_name(Snapshot.make_name(start + timedelta(hours=i)), "/b")
            for i in range(count)
        ]

    def test_keeps_newest(self):
        snapshots = self._snapshots(7)
        expired = select_expired(list(reversed(snapshots)), 5)
        assert expired == snapshots[:2]

    @pytest.mark.parametrize("count", [0, 1, 5])
    def test_nothing_expires_within_limit(self, count):
        assert select_expired(self._snapshots(count), 5) == []


class TestSnapshotManager:
    def test_no_deployed_state_skips_snapshot(self, config, app_dir):
        snapshot = with_manager(config, lambda m: m.create_snapshot())
        assert snapshot is None
        assert not (app_dir / "backups").exists()

    def test_snapshot_archives_deployed_state(self, config, app_dir, clock):
        deploy_state(app_dir, "v1")
        snapshot = with_manager(config, lambda m: m.create_snapshot(), clock=clock)

        assert snapshot.name == "backup-20250101-120000.tar.gz"
        with tarfile.open(snapshot.path) as tar:
            names = tar.getnames()
        assert "dist/index.js" in names
        assert ".env" in names
        assert not any(name.startswith("backups") for name in names)

    def test_missing_members_are_skipped(self, config, app_dir, clock):
        deploy_state(app_dir, "v1")
        (app_dir / ".env").unlink()
        snapshot = with_manager(config, lambda m: m.create_snapshot(), clock=clock)

        with tarfile.open(snapshot.path) as tar:
            assert ".env" not in tar.getnames()

    def test_retention_keeps_newest_five(self, config, app_dir, clock):
        deploy_state(app_dir, "v1")

        async def create_many(manager):
            return [await manager.create_snapshot() for _ in range(7)]

        created = with_manager(config, create_many, clock=clock)
        remaining = with_manager(config, lambda m: m.list_snapshots())

        assert len(remaining) == 5
        assert [s.name for s in remaining] == [s.name for s in created[-5:]]

    def test_timestamps_stay_strictly_increasing(self, config, app_dir):
        deploy_state(app_dir, "v1")
        frozen = lambda: datetime(2025, 6, 1, 8, 0, 0)

        async def create_two(manager):
            return [await manager.create_snapshot(), await manager.create_snapshot()]

        first, second = with_manager(config, create_two, clock=frozen)
        assert second.created_at == first.created_at + timedelta(seconds=1)

    def test_prune_to_explicit_count(self, config, app_dir, clock):
        deploy_state(app_dir, "v1")

        async def scenario(manager):
            for _ in range(4):
                await manager.create_snapshot()
            removed = await manager.prune(2)
            return removed, await manager.list_snapshots()

        removed, remaining = with_manager(config, scenario, clock=clock)
        assert len(removed) == 2
        assert len(remaining) == 2
        assert max(removed) < min(remaining)

    def test_foreign_files_in_backups_are_ignored(self, config, app_dir, clock):
        deploy_state(app_dir, "v1")
        (app_dir / "backups").mkdir()
        (app_dir / "backups" / "README").write_text("keep me")

        with_manager(config, lambda m: m.create_snapshot(), clock=clock)
        snapshots = with_manager(config, lambda m: m.list_snapshots())

        assert len(snapshots) == 1
        assert (app_dir / "backups" / "README").exists()

    def test_restore_latest_overwrites_live_state(self, config, app_dir, clock):
        deploy_state(app_dir, "v1")
        with_manager(config, lambda m: m.create_snapshot(), clock=clock)
        deploy_state(app_dir, "v2")
        latest = with_manager(config, lambda m: m.create_snapshot(), clock=clock)
        deploy_state(app_dir, "v3")

        restored = with_manager(config, lambda m: m.restore_latest())

        assert restored == latest
        assert (app_dir / "dist" / "index.js").read_text() == "v2"

    def test_restore_without_snapshot(self, config, app_dir):
        deploy_state(app_dir, "v1")
        assert with_manager(config, lambda m: m.restore_latest()) is None
        assert (app_dir / "dist" / "index.js").read_text() == "v1"

    def test_unwritable_backups_dir_is_reported(self, config, app_dir, clock):
        deploy_state(app_dir, "v1")
        (app_dir / "backups").write_text("a file, not a directory")

        with pytest.raises(SnapshotCreateFailure):
            with_manager(config, lambda m: m.create_snapshot(), clock=clock)

    def test_unreadable_deployed_state_is_a_failure_not_a_skip(self, config, app_dir, clock):
        deploy_state(app_dir, "v1")

        async def scenario():
            async with DroppedLinkTransport("test -e") as transport:
                return await SnapshotManager.from_config(transport, config, clock=clock).create_snapshot()

        with pytest.raises(SnapshotCreateFailure):
            asyncio.run(scenario())
        assert not (app_dir / "backups").exists()

    def test_unreadable_backups_dir_raises(self, config, app_dir, clock):
        deploy_state(app_dir, "v1")
        with_manager(config, lambda m: m.create_snapshot(), clock=clock)

        async def scenario():
            async with DroppedLinkTransport("ls -1 ") as transport:
                return await SnapshotManager.from_config(transport, config).restore_latest()

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(scenario())
        assert exc_info.value.returncode == 255
