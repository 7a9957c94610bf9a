# deploy_pilot/cli/commands/__init__.py
"""CLI commands"""

from . import init
from . import build
from . import deploy
from . import rollback
from . import snapshots
from . import status

__all__ = [
    "init",
    "build",
    "deploy",
    "rollback",
    "snapshots",
    "status",
]
