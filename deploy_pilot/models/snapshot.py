"""Snapshot model"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Any, Optional

from ..constants import (
    SNAPSHOT_PREFIX,
    SNAPSHOT_SUFFIX,
    SNAPSHOT_TIMESTAMP_FORMAT,
    SNAPSHOT_NAME_PATTERN,
)


@dataclass(frozen=True, order=True)
class Snapshot:
    """Point-in-time archive of the deployed state

    Snapshots order by their embedded creation timestamp.
    """

    created_at: datetime
    name: str
    path: str

    @property
    def snapshot_id(self) -> str:
        return self.created_at.strftime(SNAPSHOT_TIMESTAMP_FORMAT)

    @staticmethod
    def make_name(created_at: datetime) -> str:
        """Build the archive file name for a timestamp"""
        return f"{SNAPSHOT_PREFIX}{created_at.strftime(SNAPSHOT_TIMESTAMP_FORMAT)}{SNAPSHOT_SUFFIX}"

    @classmethod
    def from_name(cls, name: str, directory: str) -> Optional['Snapshot']:
        """Parse a snapshot from its file name

        Returns:
            Snapshot or None if the name is not a snapshot archive
        """
        match = SNAPSHOT_NAME_PATTERN.match(name)
        if not match:
            return None
        try:
            created_at = datetime.strptime(match.group("timestamp"), SNAPSHOT_TIMESTAMP_FORMAT)
        except ValueError:
            return None
        return cls(created_at=created_at, name=name, path=f"{directory.rstrip('/')}/{name}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "snapshot_id": self.snapshot_id,
            "name": self.name,
            "path": self.path,
            "created_at": self.created_at.isoformat(),
        }
