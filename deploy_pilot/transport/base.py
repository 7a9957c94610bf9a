# deploy_pilot/transport/base.py
"""Transport abstract base class"""

import logging
import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from ..api.exceptions import TransportError
from ..constants import UPLOAD_PART_SUFFIX

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one remote command"""

    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> 'CommandResult':
        """Raise TransportError if the command failed"""
        if not self.ok:
            raise TransportError(
                f"Remote command failed (exit {self.returncode}): {self.stderr.strip() or self.command}",
                command=self.command,
                returncode=self.returncode,
                stderr=self.stderr,
            )
        return self


class Transport(ABC):
    """Delivers artifacts to the target host and runs commands there

    A transport is a scoped resource: credentials are materialised by
    ``open()`` and removed by ``close()``. Use it as an async context manager.
    """

    def __init__(self):
        self._opened = False

    async def __aenter__(self) -> 'Transport':
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._opened

    async def open(self) -> None:
        """Prepare the session (e.g. write transient credentials)"""
        if not self._opened:
            await self._do_open()
            self._opened = True

    async def close(self) -> None:
        """Tear down the session; always removes credential material"""
        try:
            await self._do_close()
        finally:
            self._opened = False

    async def _do_open(self) -> None:
        pass

    async def _do_close(self) -> None:
        pass

    @abstractmethod
    async def _execute(self, command: str) -> CommandResult:
        """Run a single shell command on the host without checking status"""
        pass

    @abstractmethod
    async def _copy(self, local_path: Path, remote_path: str) -> None:
        """Copy a local file to a remote path, raising TransportError on failure"""
        pass

    def _ensure_open(self) -> None:
        if not self._opened:
            raise TransportError("Transport session is not open")

    async def run(self, command: str, check: bool = True) -> CommandResult:
        """Run a remote command, blocking until it finishes

        Args:
            command: Shell command to run on the host
            check: Raise TransportError on a non-zero exit status

        Returns:
            CommandResult
        """
        self._ensure_open()
        logger.debug("$ %s", command)
        result = await self._execute(command)
        if result.stdout.strip():
            logger.debug(result.stdout.strip())
        if check:
            result.check()
        return result

    async def run_sequence(self, commands: Sequence[str]) -> List[CommandResult]:
        """Run commands in order, stopping at the first failure

        Raises:
            TransportError: the first failing command; later ones never run
        """
        results = []
        for command in commands:
            results.append(await self.run(command, check=True))
        return results

    async def upload(self, local_path: Path, remote_path: str) -> None:
        """Upload one file, all-or-nothing

        The file is copied next to its destination and renamed into place, so
        either the complete archive lands at ``remote_path`` or nothing does.
        """
        self._ensure_open()
        local_path = Path(local_path)
        if not local_path.is_file():
            raise TransportError(f"Local file not found: {local_path}")

        part_path = f"{remote_path}{UPLOAD_PART_SUFFIX}"
        quoted_part = shlex.quote(part_path)

        logger.info("Uploading %s", local_path.name)
        try:
            await self._copy(local_path, part_path)
            await self.run(f"mv -f {quoted_part} {shlex.quote(remote_path)}")
        except TransportError:
            try:
                await self._execute(f"rm -f {quoted_part}")
            except TransportError as cleanup_error:
                logger.warning("Could not remove partial upload %s: %s", part_path, cleanup_error)
            raise

    async def exists(self, remote_path: str) -> bool:
        """Check whether a path exists on the host

        Raises:
            TransportError: the check itself could not run (e.g. ssh exit 255)
        """
        result = await self.run(f"test -e {shlex.quote(remote_path)}", check=False)
        if result.returncode == 1:
            return False
        result.check()
        return True
