# deploy_pilot/core/health_verifier.py
"""Bounded health polling of the deployed service"""

import logging
from typing import Optional

import httpx

from ..constants import HEALTH_UNREACHABLE_STATUS
from ..models.config import HealthCheckConfig
from ..models.result import HealthProbe, HealthReport
from ..utils.async_utils import Sleeper, sleep as default_sleep

logger = logging.getLogger(__name__)


class HealthVerifier:
    """Classifies a deployment as healthy from a fixed number of probes

    Waits the settle interval, then probes at most ``attempts`` times spaced
    by ``interval_seconds``. Exhausting the attempts is a definitive failure.
    """

    def __init__(self,
                 config: HealthCheckConfig,
                 url: str,
                 sleeper: Sleeper = default_sleep,
                 http_transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize health verifier

        Args:
            config: Health check settings
            url: Public URL to probe
            sleeper: Awaitable sleep, replaceable in tests
            http_transport: Optional httpx transport (e.g. MockTransport)
        """
        self.config = config
        self.url = url
        self._sleep = sleeper
        self._http_transport = http_transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.timeout,
            follow_redirects=False,
            transport=self._http_transport,
        )

    async def probe(self, client: httpx.AsyncClient, attempt: int) -> HealthProbe:
        """Issue one GET and record its status (0 when unreachable)"""
        try:
            response = await client.get(self.url)
        except httpx.HTTPError as e:
            logger.info("Health probe %d: %03d (%s)", attempt, HEALTH_UNREACHABLE_STATUS,
                        type(e).__name__)
            return HealthProbe(attempt=attempt, status_code=HEALTH_UNREACHABLE_STATUS,
                               error=type(e).__name__)

        logger.info("Health probe %d: %03d", attempt, response.status_code)
        return HealthProbe(attempt=attempt, status_code=response.status_code)

    async def probe_once(self) -> HealthProbe:
        """Single probe without settling, for status reporting"""
        async with self._client() as client:
            return await self.probe(client, 1)

    def is_accepted(self, status_code: int) -> bool:
        return status_code in self.config.accepted_statuses

    async def verify(self, settle: bool = True) -> HealthReport:
        """
        Wait for the service to settle and poll it

        Args:
            settle: Wait the settle interval before the first probe

        Returns:
            HealthReport; call raise_for_status() to turn failure into an error
        """
        report = HealthReport(url=self.url, healthy=False)

        if settle:
            await self._sleep(self.config.settle_seconds)

        async with self._client() as client:
            for attempt in range(1, self.config.attempts + 1):
                probe = await self.probe(client, attempt)
                report.probes.append(probe)
                if self.is_accepted(probe.status_code):
                    report.healthy = True
                    break
                if attempt < self.config.attempts:
                    await self._sleep(self.config.interval_seconds)

        if not report.healthy:
            logger.error("Service unhealthy after %d attempt(s)", len(report.probes))
        return report
