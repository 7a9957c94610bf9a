"""Core functionality for deploy-pilot"""

from .builder import ArtifactBuilder, load_artifact
from .snapshot_manager import SnapshotManager, select_expired
from .steps import Step, StepRunner
from .release_controller import ReleaseController, install_dependencies, render_env_file
from .process_reloader import ProcessReloader
from .health_verifier import HealthVerifier
from .rollback import RollbackCoordinator

__all__ = [
    "ArtifactBuilder",
    "load_artifact",
    "SnapshotManager",
    "select_expired",
    "Step",
    "StepRunner",
    "ReleaseController",
    "install_dependencies",
    "render_env_file",
    "ProcessReloader",
    "HealthVerifier",
    "RollbackCoordinator",
]
