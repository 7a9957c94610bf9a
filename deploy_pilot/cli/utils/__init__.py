"""CLI utility functions"""

from .output import (
    console,
    print_stage,
    format_artifact,
    format_pipeline_result,
    format_snapshot_list,
    format_status,
    print_error,
    print_warning,
    print_success,
)

__all__ = [
    'console',

    # Output utilities
    'print_stage',
    'format_artifact',
    'format_pipeline_result',
    'format_snapshot_list',
    'format_status',
    'print_error',
    'print_warning',
    'print_success',
]
