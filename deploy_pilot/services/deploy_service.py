"""Deploy service: the linear build → transfer → release → reload → verify pipeline"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from ..api.exceptions import ConfigError, DeployPilotError, HealthCheckFailure
from ..constants import ErrorCode
from ..core import (
    ArtifactBuilder,
    HealthVerifier,
    ProcessReloader,
    ReleaseController,
    RollbackCoordinator,
    SnapshotManager,
)
from ..models import (
    Artifact,
    HostCredentials,
    OperationStatus,
    PipelineConfig,
    PipelineResult,
    RollbackStatus,
    Snapshot,
    Stage,
    StageResult,
)
from ..supervisor import get_supervisor
from ..transport import TransportFactory
from ..utils.async_utils import Sleeper, sleep as default_sleep

logger = logging.getLogger(__name__)

StageReporter = Callable[[StageResult], None]


class DeployService:
    """Runs one deployment attempt against a single host

    Stages run strictly one after another. Only a failed health check leads
    to rollback; every other failure stops the pipeline before a new process
    is brought up.
    """

    def __init__(self,
                 config: PipelineConfig,
                 transport_factory: TransportFactory,
                 credentials: Optional[HostCredentials] = None,
                 project_root: Optional[Path] = None,
                 supervisor_factory: Optional[Callable] = None,
                 sleeper: Sleeper = default_sleep,
                 http_transport: Optional[httpx.AsyncBaseTransport] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 reporter: Optional[StageReporter] = None,
                 deploy_user: Optional[str] = None):
        """Initialize deploy service

        Args:
            config: Pipeline configuration
            transport_factory: Produces a fresh transport session per remote step
            credentials: Host credentials (host is the default health URL)
            project_root: Root for resolving build paths
            supervisor_factory: Builds a supervisor from (transport, config)
            sleeper: Awaitable sleep used by health polling
            http_transport: httpx transport for health probes
            clock: Timestamp source for artifacts and snapshots
            reporter: Called with each finished StageResult
            deploy_user: Identity that owns the deployed state
        """
        self.config = config
        self.transport_factory = transport_factory
        self.credentials = credentials
        self.project_root = Path(project_root or Path.cwd())
        self.supervisor_factory = supervisor_factory or get_supervisor
        self.sleeper = sleeper
        self.http_transport = http_transport
        self.clock = clock
        self.reporter = reporter
        self.deploy_user = deploy_user or (credentials.user if credentials else None)

    # Stage bookkeeping

    async def _stage(self,
                     result: PipelineResult,
                     stage: Stage,
                     action: Callable[[], Awaitable[Any]],
                     describe: Optional[Callable[[Any], str]] = None) -> Any:
        stage_result = StageResult(status=OperationStatus.IN_PROGRESS, stage=stage)
        result.stages.append(stage_result)
        try:
            value = await action()
        except DeployPilotError as e:
            stage_result.message = str(e)
            stage_result.add_error(e.error_code or ErrorCode.RELEASE_FAILED, str(e))
            stage_result.complete(OperationStatus.FAILED)
            self._report(stage_result)
            raise

        stage_result.message = describe(value) if describe else "ok"
        stage_result.complete(OperationStatus.SUCCESS)
        self._report(stage_result)
        return value

    def _skip(self, result: PipelineResult, stage: Stage, message: str) -> None:
        stage_result = StageResult(status=OperationStatus.SKIPPED, stage=stage, message=message)
        stage_result.complete()
        result.stages.append(stage_result)
        self._report(stage_result)

    def _report(self, stage_result: StageResult) -> None:
        if self.reporter:
            self.reporter(stage_result)

    # Collaborators

    def make_builder(self) -> ArtifactBuilder:
        return ArtifactBuilder(self.config.build, self.project_root, clock=self.clock)

    def make_verifier(self) -> HealthVerifier:
        host = self.credentials.host if self.credentials else None
        try:
            url = self.config.health.resolve_url(host)
        except ValueError as e:
            raise ConfigError(str(e))
        return HealthVerifier(self.config.health, url,
                              sleeper=self.sleeper, http_transport=self.http_transport)

    def make_rollback(self) -> RollbackCoordinator:
        return RollbackCoordinator(self.config, self.transport_factory,
                                   supervisor_factory=self.supervisor_factory,
                                   clock=self.clock)

    def remote_archive_path(self, artifact: Artifact) -> str:
        return f"{self.config.remote.upload_dir.rstrip('/')}/{artifact.filename}"

    # Pipeline

    async def deploy(self, artifact: Optional[Artifact] = None) -> PipelineResult:
        """
        Run the full pipeline

        Args:
            artifact: Pre-built artifact; builds one when omitted

        Returns:
            PipelineResult whose exit_code is 0 only on full success
        """
        result = PipelineResult(status=OperationStatus.IN_PROGRESS)

        try:
            # Fail before touching the host when the probe target is unknown
            verifier = self.make_verifier()

            if artifact is None:
                artifact = await self._stage(
                    result, Stage.BUILD, self.make_builder().build,
                    lambda a: f"built {a.filename}",
                )
            else:
                self._skip(result, Stage.BUILD, f"using {artifact.filename}")
            result.artifact = artifact

            remote_archive = self.remote_archive_path(artifact)
            await self._stage(
                result, Stage.TRANSPORT, lambda: self._transfer(artifact, remote_archive),
                lambda _: f"uploaded {artifact.filename}",
            )

            async with self.transport_factory() as transport:
                result.release = await self._stage(
                    result, Stage.RELEASE, lambda: self._release(transport, remote_archive),
                    self._describe_release,
                )
                reloader = ProcessReloader(
                    self.supervisor_factory(transport, self.config),
                    self.config.supervisor.process_name,
                )
                result.reload_outcome = await self._stage(
                    result, Stage.RELOAD, reloader.ensure_running,
                    lambda outcome: f"process {outcome.value}",
                )

            await self._stage(
                result, Stage.HEALTH, lambda: self._verify(verifier, result),
                lambda _: "service healthy",
            )

        except HealthCheckFailure as e:
            logger.error(str(e))
            await self._rollback(result)
            result.message = str(e)
            result.add_error(e.error_code, str(e))
            result.complete(OperationStatus.FAILED)
            return result

        except DeployPilotError as e:
            logger.error(str(e))
            result.message = str(e)
            result.add_error(e.error_code or ErrorCode.RELEASE_FAILED, str(e))
            result.complete(OperationStatus.FAILED)
            return result

        result.message = "Deployment succeeded"
        result.complete(OperationStatus.SUCCESS)
        return result

    async def _transfer(self, artifact: Artifact, remote_archive: str) -> None:
        async with self.transport_factory() as transport:
            await transport.upload(artifact.path, remote_archive)

    async def _release(self, transport, remote_archive: str):
        snapshots = SnapshotManager.from_config(transport, self.config, clock=self.clock)
        controller = ReleaseController(transport, self.config, snapshots,
                                       user=self.deploy_user or "")
        return await controller.release(remote_archive)

    @staticmethod
    def _describe_release(report) -> str:
        parts = []
        if report.snapshot:
            parts.append(f"snapshot {report.snapshot.name}")
        elif report.snapshot_error:
            parts.append("snapshot failed (continued)")
        else:
            parts.append("no previous deployment")
        parts.append("env created" if report.env_created else "env kept")
        return ", ".join(parts)

    async def _verify(self, verifier: HealthVerifier, result: PipelineResult) -> None:
        result.health = await verifier.verify()
        result.health.raise_for_status()

    async def _rollback(self, result: PipelineResult) -> None:
        stage_result = StageResult(status=OperationStatus.IN_PROGRESS, stage=Stage.ROLLBACK)
        result.stages.append(stage_result)

        report = await self.make_rollback().rollback()
        result.rollback = report

        if report.status == RollbackStatus.RESTORED:
            stage_result.message = f"restored {report.snapshot.name}"
            stage_result.complete(OperationStatus.SUCCESS)
        elif report.status == RollbackStatus.NO_SNAPSHOT:
            stage_result.message = "no snapshot to restore"
            stage_result.add_warning("Rollback skipped: no snapshot exists")
            stage_result.complete(OperationStatus.SKIPPED)
        else:
            stage_result.message = report.error or "rollback failed"
            stage_result.add_error(ErrorCode.ROLLBACK_FAILED, stage_result.message)
            stage_result.complete(OperationStatus.FAILED)
        self._report(stage_result)

    # Operator commands

    async def rollback(self) -> PipelineResult:
        """Manual rollback to the newest snapshot"""
        result = PipelineResult(status=OperationStatus.IN_PROGRESS)
        await self._rollback(result)
        restored = result.rollback.status == RollbackStatus.RESTORED
        result.message = result.stages[-1].message
        result.complete(OperationStatus.SUCCESS if restored else OperationStatus.FAILED)
        return result

    async def list_snapshots(self) -> List[Snapshot]:
        """List snapshots on the host, oldest first"""
        async with self.transport_factory() as transport:
            return await SnapshotManager.from_config(transport, self.config).list_snapshots()

    async def prune_snapshots(self, keep: int) -> List[Snapshot]:
        """Delete all but the newest ``keep`` snapshots"""
        async with self.transport_factory() as transport:
            return await SnapshotManager.from_config(transport, self.config).prune(keep)

    async def status(self) -> Dict[str, Any]:
        """Supervisor state plus a single health probe"""
        async with self.transport_factory() as transport:
            reloader = ProcessReloader(
                self.supervisor_factory(transport, self.config),
                self.config.supervisor.process_name,
            )
            known = await reloader.is_known()
            latest = await SnapshotManager.from_config(transport, self.config).latest()

        verifier = self.make_verifier()
        probe = await verifier.probe_once()

        return {
            "process": self.config.supervisor.process_name,
            "known": known,
            "latest_snapshot": latest.name if latest else None,
            "status_code": probe.display_code,
            "healthy": verifier.is_accepted(probe.status_code),
        }
