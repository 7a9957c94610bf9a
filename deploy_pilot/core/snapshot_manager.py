# deploy_pilot/core/snapshot_manager.py
"""Bounded history of deployed states on the target host"""

import logging
import shlex
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence

from ..api.exceptions import SnapshotCreateFailure, TransportError
from ..constants import ENV_FILE, SNAPSHOT_RETENTION
from ..models.config import PipelineConfig, RemoteConfig
from ..models.snapshot import Snapshot
from ..transport.base import Transport

logger = logging.getLogger(__name__)


def select_expired(snapshots: Sequence[Snapshot], keep: int) -> List[Snapshot]:
    """Return the snapshots beyond the newest ``keep``, oldest first"""
    ordered = sorted(snapshots)
    if keep < 1 or len(ordered) <= keep:
        return []
    return ordered[:-keep]


class SnapshotManager:
    """Creates, trims and restores timestamped backups of the deployed state"""

    def __init__(self,
                 transport: Transport,
                 remote: RemoteConfig,
                 output_dir: str,
                 members: Sequence[str],
                 retention: int = SNAPSHOT_RETENTION,
                 clock: Optional[Callable[[], datetime]] = None):
        """Initialize snapshot manager

        Args:
            transport: Open transport session to the host
            remote: Remote layout
            output_dir: Build output directory; its presence marks a prior deploy
            members: Paths (relative to app_dir) archived in each snapshot
            retention: Number of snapshots to keep
            clock: Returns the snapshot timestamp
        """
        self.transport = transport
        self.remote = remote
        self.output_dir = output_dir
        self.members = list(dict.fromkeys(members))
        self.retention = retention
        self._clock = clock or (lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    @classmethod
    def from_config(cls, transport: Transport, config: PipelineConfig,
                    clock: Optional[Callable[[], datetime]] = None) -> 'SnapshotManager':
        """Create a manager archiving build output, manifests, supervisor config and env file"""
        members = [
            config.build.output_dir,
            *config.build.manifest_files,
            config.supervisor.ecosystem_file,
            ENV_FILE,
        ]
        return cls(
            transport,
            config.remote,
            output_dir=config.build.output_dir,
            members=members,
            retention=config.release.snapshot_retention,
            clock=clock,
        )

    @property
    def app_dir(self) -> str:
        return self.remote.app_dir

    @property
    def backups_dir(self) -> str:
        return self.remote.backups_dir

    async def has_deployed_state(self) -> bool:
        """Check whether a previous build output exists on the host"""
        return await self.transport.exists(f"{self.app_dir.rstrip('/')}/{self.output_dir}")

    async def list_snapshots(self) -> List[Snapshot]:
        """List snapshots on the host, oldest first

        Raises:
            TransportError: the backup directory could not be read
        """
        if not await self.transport.exists(self.backups_dir):
            return []
        result = await self.transport.run(f"ls -1 {shlex.quote(self.backups_dir)}")

        snapshots = []
        for line in result.stdout.splitlines():
            snapshot = Snapshot.from_name(line.strip(), self.backups_dir)
            if snapshot:
                snapshots.append(snapshot)
        return sorted(snapshots)

    async def _existing_members(self) -> List[str]:
        quoted = " ".join(shlex.quote(m) for m in self.members)
        # ls exits non-zero when some members are missing; the rest are still listed
        result = await self.transport.run(
            f"cd {shlex.quote(self.app_dir)} && ls -1Ad -- {quoted} 2>/dev/null",
            check=False,
        )
        listed = {line.strip() for line in result.stdout.splitlines() if line.strip()}
        return [m for m in self.members if m in listed]

    def _next_timestamp(self, existing: Sequence[Snapshot]) -> datetime:
        created_at = self._clock().replace(microsecond=0, tzinfo=None)
        if existing:
            latest = max(existing).created_at
            if created_at <= latest:
                # Keep the newest snapshot strictly last in timestamp order
                created_at = latest + timedelta(seconds=1)
        return created_at

    async def create_snapshot(self) -> Optional[Snapshot]:
        """Archive the current deployed state and trim old snapshots

        Returns:
            The new Snapshot, or None when there is nothing deployed yet

        Raises:
            SnapshotCreateFailure: backup could not be written
        """
        try:
            if not await self.has_deployed_state():
                logger.info("No previous deployment found, skipping snapshot")
                return None

            await self.transport.run(f"mkdir -p {shlex.quote(self.backups_dir)}")
            existing = await self.list_snapshots()
            members = await self._existing_members()
            if not members:
                raise SnapshotCreateFailure("Nothing to archive in the deployed state")

            name = Snapshot.make_name(self._next_timestamp(existing))
            snapshot = Snapshot.from_name(name, self.backups_dir)
            await self.transport.run(
                f"tar -czf {shlex.quote(snapshot.path)} -C {shlex.quote(self.app_dir)} "
                + " ".join(shlex.quote(m) for m in members)
            )
            logger.info("Created snapshot %s", snapshot.name)

            await self.prune(self.retention, snapshots=[*existing, snapshot])
            return snapshot
        except TransportError as e:
            raise SnapshotCreateFailure(f"Snapshot creation failed: {e}")

    async def prune(self, keep: int, snapshots: Optional[List[Snapshot]] = None) -> List[Snapshot]:
        """Delete all but the newest ``keep`` snapshots, oldest first

        Returns:
            Deleted snapshots
        """
        if snapshots is None:
            snapshots = await self.list_snapshots()

        expired = select_expired(snapshots, keep)
        for snapshot in expired:
            await self.transport.run(f"rm -f {shlex.quote(snapshot.path)}")
            logger.info("Removed expired snapshot %s", snapshot.name)
        return expired

    async def latest(self) -> Optional[Snapshot]:
        """Get the most recent snapshot"""
        snapshots = await self.list_snapshots()
        return snapshots[-1] if snapshots else None

    async def restore_latest(self) -> Optional[Snapshot]:
        """Extract the newest snapshot over the deployed-state directory

        Returns:
            The restored Snapshot, or None if no snapshot exists
        """
        snapshot = await self.latest()
        if snapshot is None:
            logger.warning("No snapshot available in %s", self.backups_dir)
            return None

        await self.transport.run(
            f"tar -xzf {shlex.quote(snapshot.path)} -C {shlex.quote(self.app_dir)} --overwrite"
        )
        logger.info("Restored snapshot %s", snapshot.name)
        return snapshot
