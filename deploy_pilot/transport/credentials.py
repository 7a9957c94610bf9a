# deploy_pilot/transport/credentials.py
"""Transient credential files for remote access"""

import os
import shutil
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles

KEY_FILE_NAME = "id_deploy"
KNOWN_HOSTS_FILE_NAME = "known_hosts"
PRIVATE_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0600


@dataclass
class CredentialFiles:
    """Paths of the materialised credential files"""

    directory: Path
    key_path: Optional[Path]
    known_hosts_path: Path
    pinned_host_key: bool


async def _write_private(path: Path, content: str) -> None:
    # Create with 0600 before any byte of secret material is written
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, PRIVATE_FILE_MODE)
    os.close(fd)
    if not content.endswith("\n"):
        content += "\n"
    async with aiofiles.open(path, "w") as f:
        await f.write(content)
    os.chmod(path, PRIVATE_FILE_MODE)


async def write_credentials(private_key: Optional[str],
                            known_hosts: Optional[str] = None) -> CredentialFiles:
    """Write key material into a private temporary directory

    Args:
        private_key: Private key text (None to rely on the ssh agent)
        known_hosts: Pinned known_hosts entry for the target host

    Returns:
        CredentialFiles describing what was written
    """
    directory = Path(tempfile.mkdtemp(prefix="deploy-pilot-"))
    try:
        key_path = None
        if private_key:
            key_path = directory / KEY_FILE_NAME
            await _write_private(key_path, private_key)

        known_hosts_path = directory / KNOWN_HOSTS_FILE_NAME
        await _write_private(known_hosts_path, known_hosts or "")
    except Exception:
        remove_credentials(directory)
        raise

    return CredentialFiles(
        directory=directory,
        key_path=key_path,
        known_hosts_path=known_hosts_path,
        pinned_host_key=bool(known_hosts),
    )


def remove_credentials(directory: Optional[Path]) -> None:
    """Delete the credential directory and everything in it"""
    if directory is not None and directory.exists():
        shutil.rmtree(directory, ignore_errors=True)
