# deploy_pilot/transport/local.py
"""Local transport: runs the host-side commands on this machine"""

import asyncio
import os
import shutil
from pathlib import Path
from typing import Dict, Optional

from .base import Transport, CommandResult
from ..api.exceptions import TransportError


class LocalTransport(Transport):
    """Transport for same-host deployments and tests (uses /bin/sh)"""

    def __init__(self, workdir: Optional[Path] = None, env: Optional[Dict[str, str]] = None):
        super().__init__()
        self.workdir = Path(workdir) if workdir else None
        self.env = env

    async def _execute(self, command: str) -> CommandResult:
        environment = None
        if self.env is not None:
            environment = os.environ.copy()
            environment.update(self.env)

        try:
            process = await asyncio.create_subprocess_exec(
                "/bin/sh", "-c", command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(self.workdir) if self.workdir else None,
                env=environment,
            )
        except OSError as e:
            raise TransportError(f"Could not start /bin/sh: {e}")
        stdout, stderr = await process.communicate()
        return CommandResult(
            command=command,
            returncode=process.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )

    async def _copy(self, local_path: Path, remote_path: str) -> None:
        try:
            destination = Path(remote_path)
            destination.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.get_event_loop().run_in_executor(
                None, shutil.copyfile, local_path, destination
            )
        except OSError as e:
            raise TransportError(f"Upload failed: {e}")
