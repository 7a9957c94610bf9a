"""Unit tests for starting and reloading the application process."""

import asyncio
import stat

import pytest

from deploy_pilot.api.exceptions import ProcessReloadError
from deploy_pilot.core import ProcessReloader
from deploy_pilot.models import ProcessState, ReloadOutcome
from deploy_pilot.supervisor import PM2Supervisor, get_supervisor
from deploy_pilot.transport import LocalTransport

from conftest import FakeSupervisor

FAKE_PM2 = """#!/bin/sh
echo "$*" >> "{log}"
case "$1" in
  describe) test -f "{state}" ;;
  start) touch "{state}" ;;
  *) exit 0 ;;
esac
"""


class TestProcessReloader:
    def test_unknown_process_is_started(self, supervisor_state):
        reloader = ProcessReloader(FakeSupervisor(supervisor_state, "app"), "app")
        outcome = asyncio.run(reloader.ensure_running())

        assert outcome == ReloadOutcome.STARTED
        assert supervisor_state.calls == ["describe", "start", "save"]
        assert reloader.state == ProcessState.RUNNING
        assert reloader.history == [ProcessState.ABSENT, ProcessState.STARTING,
                                    ProcessState.RUNNING]

    def test_known_process_is_reloaded(self, supervisor_state):
        supervisor_state.known.add("app")
        reloader = ProcessReloader(FakeSupervisor(supervisor_state, "app"), "app")
        outcome = asyncio.run(reloader.ensure_running())

        assert outcome == ReloadOutcome.RELOADED
        assert supervisor_state.calls == ["describe", "reload", "save"]
        assert ProcessState.RELOADING in reloader.history

    def test_decision_is_made_on_every_run(self, supervisor_state):
        supervisor = FakeSupervisor(supervisor_state, "app")
        first = asyncio.run(ProcessReloader(supervisor, "app").ensure_running())
        second = asyncio.run(ProcessReloader(supervisor, "app").ensure_running())
        supervisor_state.known.clear()
        third = asyncio.run(ProcessReloader(supervisor, "app").ensure_running())

        assert (first, second, third) == (ReloadOutcome.STARTED, ReloadOutcome.RELOADED,
                                          ReloadOutcome.STARTED)

    def test_start_failure(self, supervisor_state):
        supervisor_state.fail_on.add("start")
        reloader = ProcessReloader(FakeSupervisor(supervisor_state, "app"), "app")

        with pytest.raises(ProcessReloadError):
            asyncio.run(reloader.ensure_running())
        assert reloader.state == ProcessState.FAILED
        assert "save" not in supervisor_state.calls

    def test_describe_failure(self, supervisor_state):
        supervisor_state.fail_on.add("describe")
        reloader = ProcessReloader(FakeSupervisor(supervisor_state, "app"), "app")

        with pytest.raises(ProcessReloadError):
            asyncio.run(reloader.ensure_running())


class TestPM2Supervisor:
    @pytest.fixture
    def fake_pm2(self, tmp_path, config):
        log = tmp_path / "pm2.log"
        state = tmp_path / "pm2.state"
        script = tmp_path / "pm2"
        script.write_text(FAKE_PM2.format(log=log, state=state))
        script.chmod(script.stat().st_mode | stat.S_IXUSR)
        config.supervisor.binary = str(script)
        config.supervisor.ecosystem_file = "ecosystem.config.js"
        return log

    def test_start_then_reload(self, fake_pm2, config, app_dir):
        app_dir.mkdir(parents=True)

        async def scenario():
            outcomes = []
            for _ in range(2):
                async with LocalTransport() as transport:
                    supervisor = get_supervisor(transport, config)
                    assert isinstance(supervisor, PM2Supervisor)
                    outcomes.append(await ProcessReloader(supervisor, "app").ensure_running())
            return outcomes

        outcomes = asyncio.run(scenario())

        assert outcomes == [ReloadOutcome.STARTED, ReloadOutcome.RELOADED]
        assert fake_pm2.read_text().splitlines() == [
            "describe app",
            "start ecosystem.config.js --env production",
            "save",
            "describe app",
            "reload ecosystem.config.js --env production --update-env",
            "save",
        ]
