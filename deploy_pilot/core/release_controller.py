# deploy_pilot/core/release_controller.py
"""Turns a transferred artifact into the live deployed state"""

import logging
import shlex
from typing import Dict

from .snapshot_manager import SnapshotManager
from .steps import Step, StepRunner
from ..api.exceptions import SnapshotCreateFailure
from ..models.config import PipelineConfig
from ..models.result import ReleaseReport
from ..transport.base import Transport

logger = logging.getLogger(__name__)


def render_env_file(values: Dict[str, str]) -> str:
    """Render KEY=value lines for an environment file"""
    return "".join(f"{key}={value}\n" for key, value in values.items())


class ReleaseController:
    """Runs the release steps on the host in a fixed order

    Every step must succeed before the next starts; the first failure raises
    ReleaseError. Snapshot failures are the one tolerated error.
    """

    def __init__(self,
                 transport: Transport,
                 config: PipelineConfig,
                 snapshots: SnapshotManager,
                 user: str):
        """Initialize release controller

        Args:
            transport: Open transport session to the host
            config: Pipeline configuration
            snapshots: Snapshot manager bound to the same session
            user: Deploying identity that must own the deployed state
        """
        self.transport = transport
        self.config = config
        self.snapshots = snapshots
        self.user = user
        self.app_dir = config.remote.app_dir

    async def release(self, remote_archive: str) -> ReleaseReport:
        """
        Release a transferred artifact

        Args:
            remote_archive: Path of the uploaded archive on the host

        Returns:
            ReleaseReport

        Raises:
            ReleaseError: a release step failed
        """
        report = ReleaseReport()
        runner = StepRunner()

        steps = [
            Step("Normalize ownership", self._normalize_ownership),
            Step("Snapshot previous deployment", lambda: self._snapshot(report)),
            Step("Extract artifact", lambda: self._extract(remote_archive)),
            Step("Remove transferred archive", lambda: self._remove_archive(remote_archive)),
            Step("Re-normalize ownership", self._normalize_ownership),
            Step("Install dependencies", self._install_dependencies),
            Step("Ensure environment file", lambda: self._ensure_env_file(report)),
            Step("Ensure logs directory", self._ensure_logs_dir),
        ]
        try:
            await runner.run(steps)
        finally:
            report.steps = list(runner.completed)
        return report

    async def _normalize_ownership(self) -> None:
        quoted_dir = shlex.quote(self.app_dir)
        await self.transport.run(f"mkdir -p {quoted_dir}")

        template = self.config.release.ownership_command
        if not template:
            return
        await self.transport.run(
            template.format(user=shlex.quote(self.user), path=quoted_dir)
        )

    async def _snapshot(self, report: ReleaseReport) -> None:
        try:
            report.snapshot = await self.snapshots.create_snapshot()
        except SnapshotCreateFailure as e:
            # Best effort: losing a backup must not block the deploy
            logger.warning("%s; continuing without a snapshot", e)
            report.snapshot_error = str(e)

    async def _extract(self, remote_archive: str) -> None:
        await self.transport.run(
            f"tar -xzf {shlex.quote(remote_archive)} -C {shlex.quote(self.app_dir)} --overwrite"
        )

    async def _remove_archive(self, remote_archive: str) -> None:
        await self.transport.run(f"rm -f {shlex.quote(remote_archive)}")

    async def _install_dependencies(self) -> None:
        await install_dependencies(self.transport, self.config)

    async def _ensure_env_file(self, report: ReleaseReport) -> None:
        env_file = self.config.remote.env_file
        if await self.transport.exists(env_file):
            logger.info("Environment file exists, leaving it untouched")
            return

        lines = " ".join(
            shlex.quote(line) for line in render_env_file(self.config.release.env_defaults).splitlines()
        )
        # noclobber makes the write fail rather than replace a file created meanwhile
        await self.transport.run(
            f"set -C && umask 077 && printf '%s\\n' {lines} > {shlex.quote(env_file)}"
        )
        report.env_created = True
        logger.info("Created environment file with defaults")

    async def _ensure_logs_dir(self) -> None:
        await self.transport.run(f"mkdir -p {shlex.quote(self.config.remote.logs_dir)}")


async def install_dependencies(transport: Transport, config: PipelineConfig) -> None:
    """Install runtime dependencies strictly from the lockfile"""
    await transport.run(
        f"cd {shlex.quote(config.remote.app_dir)} && {config.release.install_command}"
    )
