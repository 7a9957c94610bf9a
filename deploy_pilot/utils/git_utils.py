"""Git operation utilities"""

import subprocess
from pathlib import Path
from typing import Optional


def is_git_repository(path: Path) -> bool:
    """
    Check if directory is a Git repository

    Args:
        path: Directory path

    Returns:
        True if it's a Git repository
    """
    try:
        result = subprocess.run(
            ['git', 'rev-parse', '--is-inside-work-tree'],
            cwd=path,
            capture_output=True,
            text=True
        )
        return result.returncode == 0
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False


def get_commit_sha(path: Path, short: bool = True) -> Optional[str]:
    """
    Get the commit checked out in a repository

    Args:
        path: Repository path
        short: Return the abbreviated hash

    Returns:
        Commit hash or None outside a repository
    """
    args = ['git', 'rev-parse']
    if short:
        args.append('--short=12')
    args.append('HEAD')

    try:
        result = subprocess.run(
            args,
            cwd=path,
            capture_output=True,
            text=True,
            check=True
        )
        return result.stdout.strip() or None
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None


def is_dirty(path: Path) -> bool:
    """
    Check for uncommitted changes

    Args:
        path: Repository path

    Returns:
        True if the work tree has modifications
    """
    try:
        result = subprocess.run(
            ['git', 'status', '--porcelain'],
            cwd=path,
            capture_output=True,
            text=True,
            check=True
        )
        return bool(result.stdout.strip())
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False
