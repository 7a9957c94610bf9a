# deploy_pilot/core/steps.py
"""Ordered, fail-fast execution of fallible steps"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Sequence

from ..api.exceptions import DeployPilotError, ReleaseError

logger = logging.getLogger(__name__)


@dataclass
class Step:
    """A named unit of work"""

    name: str
    action: Callable[[], Awaitable[Any]]


class StepRunner:
    """Runs steps in order and stops at the first failure"""

    def __init__(self):
        self.completed: List[str] = []

    async def run(self, steps: Sequence[Step]) -> List[Any]:
        """
        Execute steps sequentially

        Args:
            steps: Steps in execution order

        Returns:
            Step return values in order

        Raises:
            ReleaseError: wrapping the first failure; remaining steps are skipped
        """
        results = []
        for index, step in enumerate(steps, 1):
            logger.info("[%d/%d] %s", index, len(steps), step.name)
            try:
                results.append(await step.action())
            except DeployPilotError as e:
                raise ReleaseError(f"{step.name} failed: {e}", step=step.name) from e
            self.completed.append(step.name)
        return results
