# deploy_pilot/supervisor/base.py
"""Process supervisor abstract base class"""

from abc import ABC, abstractmethod


class ProcessSupervisor(ABC):
    """Capability interface of the external process supervisor"""

    @abstractmethod
    async def describe(self, name: str) -> bool:
        """
        Check whether the supervisor knows a process

        Args:
            name: Process name

        Returns:
            True if the process exists
        """
        pass

    @abstractmethod
    async def start(self) -> None:
        """Start the process from its configuration"""
        pass

    @abstractmethod
    async def reload(self, update_env: bool = True) -> None:
        """
        Zero-downtime reload of the process

        Args:
            update_env: Apply updated environment variables
        """
        pass

    @abstractmethod
    async def save(self) -> None:
        """Persist the process list for recovery across reboots"""
        pass
