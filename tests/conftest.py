"""Shared test fixtures for deploy-pilot."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, List, Set

import httpx
import pytest

from deploy_pilot.api.exceptions import TransportError
from deploy_pilot.models import (
    BuildConfig,
    HealthCheckConfig,
    PipelineConfig,
    ReleaseConfig,
    RemoteConfig,
    SupervisorConfig,
)
from deploy_pilot.supervisor.base import ProcessSupervisor
from deploy_pilot.transport import LocalTransport
from deploy_pilot.transport.base import CommandResult


class RecordingSleeper:
    """Awaitable sleep replacement that records requested delays."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class TickingClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


class SupervisorState:
    """In-memory process table shared by every FakeSupervisor instance."""

    def __init__(self):
        self.known: Set[str] = set()
        self.calls: List[str] = []
        self.fail_on: Set[str] = set()

    def _record(self, call: str) -> None:
        self.calls.append(call)
        if call in self.fail_on:
            raise TransportError(f"pm2 {call} failed", command=f"pm2 {call}", returncode=1)


class FakeSupervisor(ProcessSupervisor):
    def __init__(self, state: SupervisorState, process_name: str):
        self.state = state
        self.process_name = process_name

    async def describe(self, name: str) -> bool:
        self.state._record("describe")
        return name in self.state.known

    async def start(self) -> None:
        self.state._record("start")
        self.state.known.add(self.process_name)

    async def reload(self, update_env: bool = True) -> None:
        self.state._record("reload")

    async def save(self) -> None:
        self.state._record("save")


def health_transport(codes: Iterable[int]) -> httpx.MockTransport:
    """Mock HTTP transport answering with the given codes in order (0 = refused)."""
    pending = list(codes)
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        code = pending.pop(0) if pending else 200
        if code == 0:
            raise httpx.ConnectError("Connection refused", request=request)
        return httpx.Response(code)

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Provide a built Node.js project tree."""
    root = tmp_path / "project"
    (root / "dist").mkdir(parents=True)
    (root / "dist" / "index.js").write_text("v1")
    (root / "package.json").write_text('{"name": "app"}')
    (root / "package-lock.json").write_text("{}")
    (root / "ecosystem.config.js").write_text("module.exports = {apps: []}")
    return root


@pytest.fixture
def host_dir(tmp_path: Path) -> Path:
    """Provide the directory standing in for the target host."""
    host = tmp_path / "host"
    host.mkdir()
    return host


@pytest.fixture
def app_dir(host_dir: Path) -> Path:
    return host_dir / "app"


@pytest.fixture
def config(app_dir: Path, host_dir: Path) -> PipelineConfig:
    """Provide a configuration deploying into the local host directory."""
    return PipelineConfig(
        project_name="app",
        build=BuildConfig(
            artifact_dir="artifacts",
            commands=[],
            env_template=None,
        ),
        remote=RemoteConfig(
            app_dir=str(app_dir),
            upload_dir=str(host_dir / "upload"),
        ),
        release=ReleaseConfig(
            ownership_command=None,
            install_command="test -f package-lock.json",
        ),
        supervisor=SupervisorConfig(process_name="app"),
        health=HealthCheckConfig(url="http://app.test/"),
    )


class DroppedLinkTransport(LocalTransport):
    """Local transport where matching commands fail like a dropped ssh connection."""

    def __init__(self, *failing_prefixes: str):
        super().__init__()
        self.failing_prefixes = failing_prefixes

    async def _execute(self, command: str) -> CommandResult:
        if command.startswith(self.failing_prefixes):
            return CommandResult(command=command, returncode=255,
                                 stderr="Connection closed by remote host")
        return await super()._execute(command)


@pytest.fixture
def transport_factory():
    """Provide a factory for fresh local transport sessions."""
    return lambda: LocalTransport()


@pytest.fixture
def supervisor_state() -> SupervisorState:
    return SupervisorState()


@pytest.fixture
def supervisor_factory(supervisor_state: SupervisorState):
    return lambda transport, config: FakeSupervisor(
        supervisor_state, config.supervisor.process_name
    )


@pytest.fixture
def sleeper() -> RecordingSleeper:
    return RecordingSleeper()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


def deploy_state(app_dir: Path, version: str) -> None:
    """Lay out a deployed state directly on the host directory."""
    (app_dir / "dist").mkdir(parents=True, exist_ok=True)
    (app_dir / "dist" / "index.js").write_text(version)
    (app_dir / "package.json").write_text('{"name": "app"}')
    (app_dir / "package-lock.json").write_text("{}")
    (app_dir / "ecosystem.config.js").write_text("module.exports = {}")
    (app_dir / ".env").write_text("PORT=8000\n")
