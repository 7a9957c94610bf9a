"""Process supervisor adapters"""

from .base import ProcessSupervisor
from .pm2 import PM2Supervisor
from ..models.config import PipelineConfig
from ..transport.base import Transport


def get_supervisor(transport: Transport, config: PipelineConfig) -> ProcessSupervisor:
    """
    Factory function to create the supervisor bound to a transport session

    Args:
        transport: Open transport session
        config: Pipeline configuration

    Returns:
        PM2Supervisor instance
    """
    return PM2Supervisor(transport, config.supervisor, config.remote.app_dir)


__all__ = [
    "ProcessSupervisor",
    "PM2Supervisor",
    "get_supervisor",
]
