"""Unit tests for the rollback coordinator."""

import asyncio

from deploy_pilot.core import RollbackCoordinator, SnapshotManager
from deploy_pilot.models import RollbackStatus
from deploy_pilot.transport import LocalTransport

from conftest import DroppedLinkTransport, deploy_state


def snapshot(config, clock):
    async def scenario():
        async with LocalTransport() as transport:
            return await SnapshotManager.from_config(transport, config, clock=clock).create_snapshot()

    return asyncio.run(scenario())


class TestRollbackCoordinator:
    def test_restores_latest_snapshot(self, config, app_dir, transport_factory,
                                      supervisor_factory, supervisor_state, clock):
        deploy_state(app_dir, "v1")
        snapshot(config, clock)
        deploy_state(app_dir, "v2")
        latest = snapshot(config, clock)
        deploy_state(app_dir, "broken")

        coordinator = RollbackCoordinator(config, transport_factory,
                                          supervisor_factory=supervisor_factory)
        report = asyncio.run(coordinator.rollback())

        assert report.status == RollbackStatus.RESTORED
        assert report.restored
        assert report.snapshot == latest
        assert (app_dir / "dist" / "index.js").read_text() == "v2"
        assert supervisor_state.calls == ["reload", "save"]

    def test_no_snapshot_changes_nothing(self, config, app_dir, transport_factory,
                                         supervisor_factory, supervisor_state):
        deploy_state(app_dir, "broken")

        coordinator = RollbackCoordinator(config, transport_factory,
                                          supervisor_factory=supervisor_factory)
        report = asyncio.run(coordinator.rollback())

        assert report.status == RollbackStatus.NO_SNAPSHOT
        assert (app_dir / "dist" / "index.js").read_text() == "broken"
        assert supervisor_state.calls == []

    def test_failure_is_reported_not_raised(self, config, app_dir, transport_factory,
                                            supervisor_factory, supervisor_state, clock):
        deploy_state(app_dir, "v1")
        snapshot(config, clock)
        config.release.install_command = "exit 7"

        coordinator = RollbackCoordinator(config, transport_factory,
                                          supervisor_factory=supervisor_factory)
        report = asyncio.run(coordinator.rollback())

        assert report.status == RollbackStatus.FAILED
        assert report.error.startswith("Rollback failed")
        assert report.snapshot is not None
        assert supervisor_state.calls == []

    def test_supervisor_failure_is_reported(self, config, app_dir, transport_factory,
                                            supervisor_factory, supervisor_state, clock):
        deploy_state(app_dir, "v1")
        snapshot(config, clock)
        supervisor_state.fail_on.add("reload")

        coordinator = RollbackCoordinator(config, transport_factory,
                                          supervisor_factory=supervisor_factory)
        report = asyncio.run(coordinator.rollback())

        assert report.status == RollbackStatus.FAILED

    def test_unreadable_snapshots_fail_rollback(self, config, app_dir, supervisor_factory,
                                                supervisor_state, clock):
        deploy_state(app_dir, "v1")
        snapshot(config, clock)
        deploy_state(app_dir, "broken")

        coordinator = RollbackCoordinator(config, lambda: DroppedLinkTransport("ls -1 "),
                                          supervisor_factory=supervisor_factory)
        report = asyncio.run(coordinator.rollback())

        assert report.status == RollbackStatus.FAILED
        assert "exit 255" in report.error
        assert (app_dir / "dist" / "index.js").read_text() == "broken"
        assert supervisor_state.calls == []
