"""Deploy Pilot - build, ship and verify a Node.js web service on a single host.

Builds a release artifact, uploads it over ssh, snapshots the running
deployment, swaps in the new release, reloads the process under its
supervisor and verifies it over HTTP, rolling back when it is unhealthy.
"""

from .__version__ import __version__, __version_info__, __author__, __license__

# Exceptions
from .api.exceptions import (
    DeployPilotError,
    BuildError,
    TransportError,
    ReleaseError,
    HealthCheckFailure,
    RollbackFailure,
    SnapshotCreateFailure,
    ProcessReloadError,
    ConfigError,
)

# Core API
from .api.pipeline import Pipeline, deploy

# Data models
from .models import (
    Artifact,
    Snapshot,
    PipelineConfig,
    HostCredentials,
    PipelineResult,
    StageResult,
    HealthReport,
    RollbackReport,
)

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__author__",
    "__license__",

    # Main classes
    "Pipeline",

    # Core API functions
    "deploy",

    # Data models
    "Artifact",
    "Snapshot",
    "PipelineConfig",
    "HostCredentials",
    "PipelineResult",
    "StageResult",
    "HealthReport",
    "RollbackReport",

    # Exceptions
    "DeployPilotError",
    "BuildError",
    "TransportError",
    "ReleaseError",
    "HealthCheckFailure",
    "RollbackFailure",
    "SnapshotCreateFailure",
    "ProcessReloadError",
    "ConfigError",
]
