# deploy_pilot/models/__init__.py
"""Data models for deploy-pilot"""

from .artifact import Artifact
from .snapshot import Snapshot
from .process import ProcessState, ReloadOutcome
from .result import (
    OperationStatus,
    Stage,
    RollbackStatus,
    ErrorDetail,
    Result,
    StageResult,
    HealthProbe,
    HealthReport,
    ReleaseReport,
    RollbackReport,
    PipelineResult,
)
from .config import (
    BuildConfig,
    RemoteConfig,
    ReleaseConfig,
    SupervisorConfig,
    HealthCheckConfig,
    HostCredentials,
    PipelineConfig,
)

__all__ = [
    # Domain models
    "Artifact",
    "Snapshot",
    "ProcessState",
    "ReloadOutcome",

    # Result models
    "OperationStatus",
    "Stage",
    "RollbackStatus",
    "ErrorDetail",
    "Result",
    "StageResult",
    "HealthProbe",
    "HealthReport",
    "ReleaseReport",
    "RollbackReport",
    "PipelineResult",

    # Config models
    "BuildConfig",
    "RemoteConfig",
    "ReleaseConfig",
    "SupervisorConfig",
    "HealthCheckConfig",
    "HostCredentials",
    "PipelineConfig",
]
