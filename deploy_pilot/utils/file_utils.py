# deploy_pilot/utils/file_utils.py
"""File operation utilities"""

import fnmatch
import hashlib
from pathlib import Path
from typing import Iterable


def calculate_file_checksum(file_path: Path,
                            algorithm: str = "sha256",
                            chunk_size: int = 8192) -> str:
    """
    Calculate file checksum

    Args:
        file_path: Path to file
        algorithm: Hash algorithm (sha256, md5, sha1)
        chunk_size: Read chunk size

    Returns:
        Hex digest string
    """
    hash_func = hashlib.new(algorithm)

    with open(file_path, 'rb') as f:
        while chunk := f.read(chunk_size):
            hash_func.update(chunk)

    return hash_func.hexdigest()


def format_size(size: int) -> str:
    """
    Format file size in human-readable format

    Args:
        size: Size in bytes

    Returns:
        Formatted size string
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} PB"


def is_excluded(relative_path: str, patterns: Iterable[str]) -> bool:
    """
    Check whether any component of a path matches an exclude pattern

    Args:
        relative_path: Path relative to the archive root
        patterns: fnmatch-style patterns

    Returns:
        True if the path should be skipped
    """
    parts = Path(relative_path).parts
    return any(
        fnmatch.fnmatch(part, pattern)
        for part in parts
        for pattern in patterns
    )


def safe_remove(path: Path) -> bool:
    """
    Remove a file if it exists

    Args:
        path: File path

    Returns:
        True if a file was removed
    """
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False

