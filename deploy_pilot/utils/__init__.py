# deploy_pilot/utils/__init__.py
"""Utility functions for deploy-pilot"""

from .file_utils import (
    calculate_file_checksum,
    format_size,
    is_excluded,
    safe_remove,
)

from .git_utils import (
    is_git_repository,
    get_commit_sha,
    is_dirty,
)

from .async_utils import (
    run_async,
    sleep,
)

from .logging_utils import SecretMaskingFilter

__all__ = [
    # File utilities
    'calculate_file_checksum',
    'format_size',
    'is_excluded',
    'safe_remove',

    # Git utilities
    'is_git_repository',
    'get_commit_sha',
    'is_dirty',

    # Async utilities
    'run_async',
    'sleep',

    # Logging
    'SecretMaskingFilter',
]
