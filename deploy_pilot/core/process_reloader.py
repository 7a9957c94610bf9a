# deploy_pilot/core/process_reloader.py
"""Starts or zero-downtime reloads the application process"""

import logging
from typing import List

from ..api.exceptions import ProcessReloadError, TransportError
from ..models.process import ProcessState, ReloadOutcome
from ..supervisor.base import ProcessSupervisor

logger = logging.getLogger(__name__)


class ProcessReloader:
    """Owns the running process through the supervisor's primitives

    Whether to reload or start is decided by asking the supervisor on every
    call; nothing is cached between deploys.
    """

    def __init__(self, supervisor: ProcessSupervisor, process_name: str):
        self.supervisor = supervisor
        self.process_name = process_name
        self.state = ProcessState.ABSENT
        self.history: List[ProcessState] = [self.state]

    def _transition(self, state: ProcessState) -> None:
        logger.debug("Process %s: %s -> %s", self.process_name, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    async def is_known(self) -> bool:
        """Query the supervisor for the process"""
        try:
            return await self.supervisor.describe(self.process_name)
        except TransportError as e:
            raise ProcessReloadError(f"Could not query supervisor: {e}")

    async def ensure_running(self) -> ReloadOutcome:
        """
        Reload the process if the supervisor knows it, otherwise start it

        Returns:
            ReloadOutcome.RELOADED or ReloadOutcome.STARTED

        Raises:
            ProcessReloadError: supervisor command failed
        """
        if await self.is_known():
            self._transition(ProcessState.RUNNING)
            return await self.reload()
        return await self.start()

    async def start(self) -> ReloadOutcome:
        """Fresh start under the configured ecosystem file"""
        self._transition(ProcessState.STARTING)
        logger.info("Starting process %s", self.process_name)
        await self._apply(self.supervisor.start())
        return ReloadOutcome.STARTED

    async def reload(self) -> ReloadOutcome:
        """Zero-downtime reload with updated environment"""
        self._transition(ProcessState.RELOADING)
        logger.info("Reloading process %s", self.process_name)
        await self._apply(self.supervisor.reload(update_env=True))
        return ReloadOutcome.RELOADED

    async def _apply(self, transition) -> None:
        try:
            await transition
            await self.supervisor.save()
        except TransportError as e:
            self._transition(ProcessState.FAILED)
            raise ProcessReloadError(f"Supervisor command failed: {e}")
        self._transition(ProcessState.RUNNING)
