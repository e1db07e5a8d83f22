"""Scheduler for background connectivity polling."""

from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger
import pytz

from news_service.client import NewsServiceClient
from news_service.exceptions import RemoteUnavailable
from orchestrator.session import ConnectivityState
from utils.helpers import DEFAULT_TIMEZONE, get_local_time


class HealthMonitor:
    """
    Polls the service health endpoint on a fixed interval.

    Its only effect is the shared ConnectivityState; it never posts chat
    messages and does not wait on in-flight chat calls.
    """

    JOB_ID = "health_check"

    def __init__(
        self,
        client: NewsServiceClient,
        connectivity: ConnectivityState,
        interval: int = 60,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        """Initialize scheduler."""
        self.client = client
        self.connectivity = connectivity
        self.interval = interval
        self.timezone = timezone
        self.scheduler = AsyncIOScheduler(timezone=pytz.timezone(timezone))
        self.is_running = False

    def start(self):
        """Start polling. Must be called from a running event loop."""
        if self.is_running:
            logger.warning("Health monitor already running")
            return

        self.scheduler.add_job(
            func=self.check,
            trigger=IntervalTrigger(seconds=self.interval, timezone=pytz.timezone(self.timezone)),
            id=self.JOB_ID,
            name=f"Service health check every {self.interval}s",
            replace_existing=True,
            next_run_time=get_local_time(self.timezone),
            max_instances=1,
            coalesce=True,
        )

        self.scheduler.start()
        self.is_running = True
        logger.info(f"Health monitor started (interval: {self.interval}s)")

    def stop(self):
        """Stop the scheduler."""
        if not self.is_running:
            return

        self.scheduler.shutdown(wait=False)
        self.is_running = False
        logger.info("Health monitor stopped")

    async def check(self) -> bool:
        """Run one health check and update the connectivity flag."""
        error: Optional[RemoteUnavailable] = None
        try:
            await self.client.check_health()
            connected = True
        except RemoteUnavailable as e:
            connected = False
            error = e

        previously = self.connectivity.connected
        self.connectivity.connected = connected
        self.connectivity.last_checked = get_local_time(self.timezone)

        if connected and not previously:
            logger.info("News service reachable again")
        elif not connected and previously:
            logger.warning(f"News service unreachable: {error}")

        if connected and self.connectivity.api_docs is None:
            await self._load_api_docs()

        return connected

    async def _load_api_docs(self):
        try:
            self.connectivity.api_docs = await self.client.get_api_docs()
        except RemoteUnavailable as e:
            logger.info(f"Could not fetch API docs: {e}")
