# deploy_pilot/core/rollback.py
"""Restores the last known-good snapshot after a failed deployment"""

import logging
from datetime import datetime
from typing import Callable, Optional

from .process_reloader import ProcessReloader
from .release_controller import install_dependencies
from .snapshot_manager import SnapshotManager
from ..api.exceptions import DeployPilotError, RollbackFailure
from ..models.config import PipelineConfig
from ..models.result import RollbackReport, RollbackStatus
from ..supervisor import get_supervisor
from ..transport import TransportFactory

logger = logging.getLogger(__name__)


class RollbackCoordinator:
    """Restore, reinstall, reload; attempted once and never retried

    A missing snapshot is reported as a warning: no prior state is invented.
    """

    def __init__(self,
                 config: PipelineConfig,
                 transport_factory: TransportFactory,
                 supervisor_factory: Optional[Callable] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """Initialize rollback coordinator

        Args:
            config: Pipeline configuration
            transport_factory: Produces a fresh transport session
            supervisor_factory: Builds a supervisor from (transport, config)
            clock: Clock handed to the snapshot manager
        """
        self.config = config
        self.transport_factory = transport_factory
        self.supervisor_factory = supervisor_factory or get_supervisor
        self.clock = clock

    async def rollback(self) -> RollbackReport:
        """
        Roll the host back to the newest snapshot

        Returns:
            RollbackReport (restored, no_snapshot or failed)
        """
        logger.warning("Rolling back to the last snapshot")
        snapshot = None
        try:
            # Fresh session: credentials are re-established for this step
            async with self.transport_factory() as transport:
                snapshots = SnapshotManager.from_config(transport, self.config, clock=self.clock)
                snapshot = await snapshots.restore_latest()
                if snapshot is None:
                    logger.warning("Rollback skipped: no snapshot exists")
                    return RollbackReport(status=RollbackStatus.NO_SNAPSHOT)

                await install_dependencies(transport, self.config)

                reloader = ProcessReloader(
                    self.supervisor_factory(transport, self.config),
                    self.config.supervisor.process_name,
                )
                await reloader.reload()

            logger.info("Rollback restored %s", snapshot.name)
            return RollbackReport(status=RollbackStatus.RESTORED, snapshot=snapshot)

        except (DeployPilotError, OSError) as e:
            failure = RollbackFailure(f"Rollback failed: {e}")
            logger.error(str(failure))
            return RollbackReport(status=RollbackStatus.FAILED, snapshot=snapshot,
                                  error=str(failure))

