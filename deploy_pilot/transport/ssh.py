# deploy_pilot/transport/ssh.py
"""SSH transport using the OpenSSH client binaries"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from .base import Transport, CommandResult
from .credentials import CredentialFiles, write_credentials, remove_credentials
from ..api.exceptions import TransportError
from ..constants import DEFAULT_SSH_PORT
from ..models.config import HostCredentials

logger = logging.getLogger(__name__)


class SSHTransport(Transport):
    """Key-authenticated, host-verified ssh/scp transport

    The private key is written to a transient 0600 file when the session
    opens and deleted when it closes, whatever the outcome.
    """

    def __init__(self,
                 credentials: HostCredentials,
                 port: int = DEFAULT_SSH_PORT,
                 connect_timeout: int = 15,
                 ssh_binary: str = "ssh",
                 scp_binary: str = "scp"):
        super().__init__()
        if not credentials.host or not credentials.user:
            raise TransportError("SSH transport requires a host and a user")
        self.credentials = credentials
        self.port = port
        self.connect_timeout = connect_timeout
        self.ssh_binary = ssh_binary
        self.scp_binary = scp_binary
        self._files: Optional[CredentialFiles] = None

    @property
    def credential_dir(self) -> Optional[Path]:
        """Directory holding transient credential files while open"""
        return self._files.directory if self._files else None

    @property
    def destination(self) -> str:
        return f"{self.credentials.user}@{self.credentials.host}"

    async def _do_open(self) -> None:
        self._files = await write_credentials(
            self.credentials.private_key,
            self.credentials.known_hosts,
        )

    async def _do_close(self) -> None:
        files, self._files = self._files, None
        if files:
            remove_credentials(files.directory)

    def _common_options(self) -> List[str]:
        """Options shared by ssh and scp"""
        files = self._files
        options = [
            "-o", "BatchMode=yes",
            "-o", f"ConnectTimeout={self.connect_timeout}",
            "-o", f"UserKnownHostsFile={files.known_hosts_path}",
            "-o", "StrictHostKeyChecking=" + ("yes" if files.pinned_host_key else "accept-new"),
        ]
        if files.key_path:
            options += ["-o", "IdentitiesOnly=yes", "-i", str(files.key_path)]
        return options

    def build_ssh_cmd(self, remote_command: str) -> List[str]:
        """Build the ssh argv for a remote command"""
        return [
            self.ssh_binary,
            *self._common_options(),
            "-p", str(self.port),
            self.destination,
            remote_command,
        ]

    def build_scp_cmd(self, local_path: Path, remote_path: str) -> List[str]:
        """Build the scp argv for an upload"""
        return [
            self.scp_binary,
            *self._common_options(),
            "-P", str(self.port),
            str(local_path),
            f"{self.destination}:{remote_path}",
        ]

    async def _spawn(self, argv: List[str]) -> CommandResult:
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise TransportError(f"SSH client not available: {e.filename}")
        except OSError as e:
            raise TransportError(f"Could not start {argv[0]}: {e}")

        stdout, stderr = await process.communicate()
        # argv[-1] is the remote command or the scp destination; never log argv
        return CommandResult(
            command=argv[-1],
            returncode=process.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )

    async def _execute(self, command: str) -> CommandResult:
        return await self._spawn(self.build_ssh_cmd(command))

    async def _copy(self, local_path: Path, remote_path: str) -> None:
        result = await self._spawn(self.build_scp_cmd(local_path, remote_path))
        if not result.ok:
            raise TransportError(
                f"Upload failed (exit {result.returncode}): {result.stderr.strip()}",
                returncode=result.returncode,
                stderr=result.stderr,
            )
