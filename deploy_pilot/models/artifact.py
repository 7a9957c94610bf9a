"""Artifact model"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Tuple


@dataclass(frozen=True)
class Artifact:
    """Immutable deployable bundle produced by one build"""

    artifact_id: str
    path: Path
    created_at: datetime
    commit: str
    checksum: str
    size: int
    members: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def filename(self) -> str:
        return self.path.name

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "artifact_id": self.artifact_id,
            "path": str(self.path),
            "created_at": self.created_at.isoformat(),
            "commit": self.commit,
            "checksum": self.checksum,
            "size": self.size,
            "members": list(self.members),
        }
