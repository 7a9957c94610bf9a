# deploy_pilot/api/__init__.py
"""API layer for deploy-pilot"""

# Exceptions first: core modules import them while the pipeline loads
from .exceptions import (
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
from .pipeline import Pipeline, deploy

__all__ = [
    # Main classes
    "Pipeline",

    # Convenience functions
    "deploy",

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
