"""Project context decorator for CLI commands"""

from functools import wraps
from pathlib import Path
from typing import Callable, Optional

import click

from ..utils.output import console
from ...constants import PROJECT_CONFIG_FILE, EMOJI_ERROR


def require_project(func: Callable) -> Callable:
    """Decorator that ensures command runs in a configured project

    This decorator:
    1. Finds the project root directory (an explicit --config wins)
    2. Stores the root on the click context object

    Args:
        func: Command function to decorate

    Returns:
        Decorated function
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        obj = ctx.obj

        if obj is not None and getattr(obj, 'config_path', None):
            project_root = Path(obj.config_path).resolve().parent
        else:
            project_root = find_project_root()

        if not project_root:
            console.print(
                f"{EMOJI_ERROR} No {PROJECT_CONFIG_FILE} found.\n"
                f"Run 'deploy-pilot init' to create one."
            )
            ctx.exit(1)

        if obj is not None:
            obj.project_root = project_root

        return func(*args, **kwargs)

    return wrapper


def find_project_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Find the project root directory by looking for the config file

    Args:
        start_path: Starting directory (defaults to current directory)

    Returns:
        Project root path or None if not found
    """
    if start_path is None:
        start_path = Path.cwd()
    else:
        start_path = Path(start_path).resolve()

    current = start_path

    # Check each directory up to root
    while current != current.parent:
        if (current / PROJECT_CONFIG_FILE).exists():
            return current
        current = current.parent

    return None
