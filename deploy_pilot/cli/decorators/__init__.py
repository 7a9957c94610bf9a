# deploy_pilot/cli/decorators/__init__.py
"""CLI decorators"""

from .project import require_project, find_project_root

__all__ = [
    'require_project',
    'find_project_root',
]
