"""Exception definitions for deploy-pilot"""

from ..constants import ErrorCode


class DeployPilotError(Exception):
    """Base exception for deploy-pilot"""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class BuildError(DeployPilotError):
    """Artifact build or packaging failed"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.BUILD_FAILED)


class TransportError(DeployPilotError):
    """Upload or remote command execution failed"""

    def __init__(self, message: str, command: str = None, returncode: int = None,
                 stderr: str = ""):
        super().__init__(message, ErrorCode.TRANSPORT_FAILED)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class ReleaseError(DeployPilotError):
    """A release step on the target host failed"""

    def __init__(self, message: str, step: str = None):
        super().__init__(message, ErrorCode.RELEASE_FAILED)
        self.step = step


class HealthCheckFailure(DeployPilotError):
    """No health probe returned an accepted status"""

    def __init__(self, message: str, status_codes=None):
        super().__init__(message, ErrorCode.HEALTH_CHECK_FAILED)
        self.status_codes = list(status_codes or [])


class RollbackFailure(DeployPilotError):
    """Rollback could not be completed"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.ROLLBACK_FAILED)


class SnapshotCreateFailure(DeployPilotError):
    """Backup of the deployed state could not be created"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.SNAPSHOT_CREATE_FAILED)


class ProcessReloadError(DeployPilotError):
    """Supervisor failed to start or reload the process"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PROCESS_RELOAD_FAILED)


class ConfigError(DeployPilotError):
    """Configuration error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIG_FORMAT_ERROR)
