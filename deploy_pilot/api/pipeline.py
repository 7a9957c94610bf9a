"""Pipeline API for deployment operations"""

import getpass
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core import ArtifactBuilder, load_artifact
from ..models import (
    Artifact,
    HostCredentials,
    PipelineConfig,
    PipelineResult,
    Snapshot,
)
from ..services import ConfigService, DeployService
from ..services.deploy_service import StageReporter
from ..transport import get_transport_factory
from ..utils.async_utils import run_async


class Pipeline:
    """Pipeline class for build, deploy and recovery operations"""

    def __init__(self,
                 project_root: Optional[Path] = None,
                 config: Optional[PipelineConfig] = None,
                 config_path: Optional[Path] = None,
                 credentials: Optional[HostCredentials] = None,
                 local: bool = False,
                 reporter: Optional[StageReporter] = None):
        """
        Initialize pipeline

        Args:
            project_root: Project root directory (defaults to cwd)
            config: Configuration (loaded from the project file when omitted)
            config_path: Explicit configuration file
            credentials: Host credentials (read from the environment when omitted)
            local: Deploy onto this machine instead of over ssh
            reporter: Called with every finished stage
        """
        self.project_root = Path(project_root or Path.cwd())
        self.config_service = ConfigService(self.project_root, config_path)
        self.config = config or self.config_service.load_config()
        self.local = local
        self.credentials = credentials if credentials is not None else HostCredentials.from_env()
        self.reporter = reporter

    def _service(self) -> DeployService:
        factory = get_transport_factory(
            self.config,
            credentials=self.credentials,
            local=self.local,
        )
        deploy_user = self.credentials.user if self.credentials else None
        if self.local and not deploy_user:
            deploy_user = getpass.getuser()
        return DeployService(
            self.config,
            factory,
            credentials=self.credentials,
            project_root=self.project_root,
            reporter=self.reporter,
            deploy_user=deploy_user,
        )

    def build(self, run_commands: bool = True) -> Artifact:
        """
        Build and pack an artifact without deploying it

        Raises:
            BuildError: If a build command fails or output is incomplete
        """
        builder = ArtifactBuilder(self.config.build, self.project_root)
        return run_async(builder.build(run_commands=run_commands))

    def deploy(self, artifact_path: Optional[Path] = None) -> PipelineResult:
        """
        Run build, transfer, release, reload and health verification

        Args:
            artifact_path: Deploy this archive instead of building

        Returns:
            PipelineResult: Pipeline result (exit_code 0 on success)
        """
        artifact = load_artifact(artifact_path) if artifact_path else None
        return run_async(self._service().deploy(artifact))

    def rollback(self) -> PipelineResult:
        """Restore the newest snapshot and reload the process"""
        return run_async(self._service().rollback())

    def snapshots(self) -> List[Snapshot]:
        """List snapshots on the host, oldest first"""
        return run_async(self._service().list_snapshots())

    def prune_snapshots(self, keep: int) -> List[Snapshot]:
        """Remove all but the newest ``keep`` snapshots"""
        if keep < 1:
            raise ValueError("keep must be at least 1")
        return run_async(self._service().prune_snapshots(keep))

    def status(self) -> Dict[str, Any]:
        """Report supervisor state and one health probe"""
        return run_async(self._service().status())


# Convenience function
def deploy(project_root: Optional[str] = None, **options) -> PipelineResult:
    """
    Deploy a project (convenience function)

    Args:
        project_root: Project directory
        **options: Options
            - artifact: Pre-built archive to deploy
            - local: Deploy onto this machine
            - config: Config file path

    Returns:
        PipelineResult: Pipeline result
    """
    pipeline = Pipeline(
        project_root=Path(project_root) if project_root else None,
        config_path=options.get('config'),
        local=options.get('local', False),
    )
    artifact = options.get('artifact')
    return pipeline.deploy(Path(artifact) if artifact else None)
