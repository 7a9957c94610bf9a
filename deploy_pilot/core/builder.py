# deploy_pilot/core/builder.py
"""Artifact builder: compiles the source tree and packs a release bundle"""

import asyncio
import logging
import tarfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from ..api.exceptions import BuildError
from ..constants import ARTIFACT_EXCLUDE_PATTERNS, ARTIFACT_FILE_PATTERN
from ..models.artifact import Artifact
from ..models.config import BuildConfig
from ..utils.file_utils import calculate_file_checksum, is_excluded, safe_remove
from ..utils.git_utils import get_commit_sha, is_dirty, is_git_repository

logger = logging.getLogger(__name__)

ARTIFACT_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"


class ArtifactBuilder:
    """Builds one immutable artifact per invocation

    A failing build command or a missing required member raises BuildError
    and leaves no archive behind.
    """

    def __init__(self,
                 config: BuildConfig,
                 project_root: Optional[Path] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """Initialize artifact builder

        Args:
            config: Build configuration
            project_root: Directory that relative config paths resolve against
            clock: Returns the build timestamp (UTC)
        """
        self.config = config
        self.project_root = Path(project_root or Path.cwd()).resolve()
        self.source_dir = (self.project_root / config.source_dir).resolve()
        self.artifact_dir = (self.project_root / config.artifact_dir).resolve()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def build(self, run_commands: bool = True) -> Artifact:
        """Run the build and pack the artifact

        Args:
            run_commands: Run the configured build commands first

        Returns:
            The packed Artifact
        """
        if not self.source_dir.is_dir():
            raise BuildError(f"Source directory not found: {self.source_dir}")

        if run_commands:
            for command in self.config.commands:
                await self._run_command(command)

        members = self.collect_members()
        created_at = self._clock()
        commit = None
        if is_git_repository(self.source_dir):
            commit = get_commit_sha(self.source_dir)
            if is_dirty(self.source_dir):
                logger.warning("Building from a work tree with uncommitted changes")
        commit = commit or "nogit"
        artifact_id = f"{created_at.strftime(ARTIFACT_TIMESTAMP_FORMAT)}-{commit}"

        self.artifact_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.artifact_dir / ARTIFACT_FILE_PATTERN.format(artifact_id=artifact_id)

        try:
            await asyncio.get_event_loop().run_in_executor(
                None, self._pack, members, output_path
            )
        except (OSError, tarfile.TarError) as e:
            safe_remove(output_path)
            raise BuildError(f"Failed to pack artifact: {e}")

        artifact = Artifact(
            artifact_id=artifact_id,
            path=output_path,
            created_at=created_at,
            commit=commit,
            checksum=calculate_file_checksum(output_path),
            size=output_path.stat().st_size,
            members=tuple(members),
        )
        logger.info("Packed artifact %s (%d members)", artifact.filename, len(members))

        self.prune_artifacts(keep_id=artifact_id)
        return artifact

    async def _run_command(self, command: str) -> None:
        logger.info("Build: %s", command)
        process = await asyncio.create_subprocess_shell(
            command,
            cwd=str(self.source_dir),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        output, _ = await process.communicate()
        text = output.decode(errors="replace").strip()
        if text:
            logger.debug(text)
        if process.returncode != 0:
            tail = "\n".join(text.splitlines()[-20:])
            raise BuildError(f"Build command failed (exit {process.returncode}): {command}\n{tail}")

    def collect_members(self) -> List[str]:
        """Resolve the archive members, checking required ones exist"""
        missing = [m for m in self.config.required_members
                   if not (self.source_dir / m).exists()]
        if missing:
            raise BuildError(f"Build output incomplete, missing: {', '.join(missing)}")

        members = list(self.config.required_members)
        for member in self.config.optional_members:
            if (self.source_dir / member).exists():
                members.append(member)
            else:
                logger.debug("Optional member not present: %s", member)
        return members

    def _pack(self, members: List[str], output_path: Path) -> None:
        def exclude(info: tarfile.TarInfo) -> Optional[tarfile.TarInfo]:
            if is_excluded(info.name, ARTIFACT_EXCLUDE_PATTERNS):
                return None
            return info

        with tarfile.open(output_path, "w:gz") as tar:
            for member in members:
                tar.add(self.source_dir / member, arcname=member, filter=exclude)

    def prune_artifacts(self, keep_id: Optional[str] = None) -> List[Path]:
        """Delete local artifacts beyond the retention count

        Artifact names embed their build timestamp, so name order is age order.

        Returns:
            Removed archive paths
        """
        archives = sorted(
            p for p in self.artifact_dir.glob(ARTIFACT_FILE_PATTERN.format(artifact_id="*"))
            if p.is_file()
        )
        keep = max(self.config.keep_artifacts, 1)
        expired = archives[:-keep] if len(archives) > keep else []

        removed = []
        for path in expired:
            if keep_id and keep_id in path.name:
                continue
            safe_remove(path)
            removed.append(path)
            logger.debug("Removed expired artifact %s", path.name)
        return removed


def load_artifact(path: Path) -> Artifact:
    """Describe a previously built archive so it can be deployed without rebuilding

    Raises:
        BuildError: the file is missing or is not a readable gzip tarball
    """
    path = Path(path).resolve()
    if not path.is_file():
        raise BuildError(f"Artifact not found: {path}")

    try:
        with tarfile.open(path, "r:gz") as tar:
            names = tar.getnames()
    except (OSError, tarfile.TarError) as e:
        raise BuildError(f"Not a valid artifact archive: {path}: {e}")

    # Top-level entries only
    members = tuple(sorted({name.split("/", 1)[0] for name in names if name}))

    stem = path.name
    for suffix in (".tar.gz", ".tgz"):
        if stem.endswith(suffix):
            stem = stem[:-len(suffix)]
    artifact_id = stem[len("release-"):] if stem.startswith("release-") else stem
    commit = artifact_id.rsplit("-", 1)[-1] if "-" in artifact_id else "unknown"
    stat = path.stat()

    return Artifact(
        artifact_id=artifact_id,
        path=path,
        created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        commit=commit,
        checksum=calculate_file_checksum(path),
        size=stat.st_size,
        members=members,
    )
