"""Process supervision models"""

from enum import Enum


class ProcessState(Enum):
    """Lifecycle of the supervised application process"""
    ABSENT = "absent"
    STARTING = "starting"
    RUNNING = "running"
    RELOADING = "reloading"
    FAILED = "failed"


class ReloadOutcome(Enum):
    """How the process was brought up"""
    STARTED = "started"
    RELOADED = "reloaded"
