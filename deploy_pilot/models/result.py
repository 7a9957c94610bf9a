"""Operation result models"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Any

from .artifact import Artifact
from .snapshot import Snapshot
from .process import ReloadOutcome
from ..constants import (
    EXIT_SUCCESS,
    EXIT_FAILURE,
    HEALTH_UNREACHABLE_STATUS,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OperationStatus(Enum):
    """Operation status"""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    IN_PROGRESS = "in_progress"


class Stage(Enum):
    """Pipeline stages in execution order"""
    BUILD = "build"
    TRANSPORT = "transport"
    RELEASE = "release"
    RELOAD = "reload"
    HEALTH = "health"
    ROLLBACK = "rollback"


class RollbackStatus(Enum):
    """Outcome of a rollback attempt"""
    RESTORED = "restored"
    NO_SNAPSHOT = "no_snapshot"
    FAILED = "failed"


@dataclass
class ErrorDetail:
    """Detailed error information"""

    code: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat()
        }


@dataclass
class Result:
    """Base result class"""

    status: OperationStatus
    message: str = ""
    errors: List[ErrorDetail] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    start_time: datetime = field(default_factory=_utcnow)
    end_time: Optional[datetime] = None

    @property
    def is_success(self) -> bool:
        """Check if operation was successful"""
        return self.status == OperationStatus.SUCCESS

    @property
    def duration(self) -> Optional[float]:
        """Get operation duration in seconds"""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def add_error(self, code: str, message: str, **context) -> None:
        """Add an error"""
        self.errors.append(ErrorDetail(code=code, message=message, context=context))

    def add_warning(self, message: str) -> None:
        """Add a warning"""
        self.warnings.append(message)

    def complete(self, status: Optional[OperationStatus] = None) -> None:
        """Mark operation as complete"""
        self.end_time = _utcnow()
        if status:
            self.status = status


@dataclass
class StageResult(Result):
    """Result of one pipeline stage"""

    stage: Stage = Stage.BUILD

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "stage": self.stage.value,
            "status": self.status.value,
            "message": self.message,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": self.warnings,
            "duration": self.duration,
        }


@dataclass
class HealthProbe:
    """A single health probe"""

    attempt: int
    status_code: int
    error: Optional[str] = None

    @property
    def display_code(self) -> str:
        """Status code as curl prints it, 000 when unreachable"""
        return f"{self.status_code:03d}"

    @property
    def reachable(self) -> bool:
        return self.status_code != HEALTH_UNREACHABLE_STATUS


@dataclass
class HealthReport:
    """Outcome of bounded health verification"""

    url: str
    healthy: bool
    probes: List[HealthProbe] = field(default_factory=list)

    @property
    def status_codes(self) -> List[int]:
        return [p.status_code for p in self.probes]

    def raise_for_status(self) -> None:
        """Raise HealthCheckFailure unless a probe was accepted"""
        if self.healthy:
            return
        from ..api.exceptions import HealthCheckFailure
        codes = ", ".join(p.display_code for p in self.probes) or "none"
        raise HealthCheckFailure(
            f"Health check failed after {len(self.probes)} attempt(s): {codes}",
            status_codes=self.status_codes,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "healthy": self.healthy,
            "probes": [
                {"attempt": p.attempt, "status_code": p.display_code, "error": p.error}
                for p in self.probes
            ],
        }


@dataclass
class ReleaseReport:
    """What the release controller did on the host"""

    snapshot: Optional[Snapshot] = None
    snapshot_error: Optional[str] = None
    env_created: bool = False
    steps: List[str] = field(default_factory=list)


@dataclass
class RollbackReport:
    """Outcome of a rollback attempt"""

    status: RollbackStatus
    snapshot: Optional[Snapshot] = None
    error: Optional[str] = None

    @property
    def restored(self) -> bool:
        return self.status == RollbackStatus.RESTORED


@dataclass
class PipelineResult(Result):
    """Result of a complete deployment run"""

    stages: List[StageResult] = field(default_factory=list)
    artifact: Optional[Artifact] = None
    release: Optional[ReleaseReport] = None
    reload_outcome: Optional[ReloadOutcome] = None
    health: Optional[HealthReport] = None
    rollback: Optional[RollbackReport] = None

    @property
    def exit_code(self) -> int:
        """Process exit status of the pipeline run"""
        return EXIT_SUCCESS if self.is_success else EXIT_FAILURE

    @property
    def rollback_attempted(self) -> bool:
        return self.rollback is not None

    def get_stage(self, stage: Stage) -> Optional[StageResult]:
        """Get the result for a stage if it ran"""
        for stage_result in self.stages:
            if stage_result.stage == stage:
                return stage_result
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "status": self.status.value,
            "message": self.message,
            "exit_code": self.exit_code,
            "stages": [s.to_dict() for s in self.stages],
            "duration": self.duration,
        }
        if self.artifact:
            data["artifact"] = self.artifact.to_dict()
        if self.release and self.release.snapshot:
            data["snapshot"] = self.release.snapshot.to_dict()
        if self.reload_outcome:
            data["reload_outcome"] = self.reload_outcome.value
        if self.health:
            data["health"] = self.health.to_dict()
        if self.rollback:
            data["rollback"] = {
                "status": self.rollback.status.value,
                "snapshot": self.rollback.snapshot.to_dict() if self.rollback.snapshot else None,
                "error": self.rollback.error,
            }
        return data
