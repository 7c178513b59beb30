"""Optional interval polling on top of the fetch-on-change session."""

import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.services.dashboard_session import DashboardSession
from src.utils.config import DashboardConfig
from src.utils.logger import StructuredLogger

structured_logger = StructuredLogger("RefreshScheduler")


class RefreshScheduler:
    """Raises periodic refreshes for a session when intervals are configured."""

    def __init__(self, session: DashboardSession, dashboard_config: DashboardConfig):
        """
        Args:
            session: Session whose fetchers get refreshed
            dashboard_config: Supplies asset_refresh_seconds / chart_refresh_seconds;
                a value of 0 leaves that fetcher unpolled
        """
        self.scheduler = AsyncIOScheduler()
        self.session = session
        self.config = dashboard_config
        self.is_running = False

    async def _refresh_asset(self) -> None:
        await asyncio.gather(*self.session.request_refresh())

    async def _refresh_chart(self) -> None:
        await asyncio.gather(*self.session.refresh_chart())

    def start(self) -> bool:
        """
        Register the polling jobs and start the scheduler.

        Must be called from inside a running event loop.

        Returns:
            True if at least one job was scheduled
        """
        jobs = [
            ("asset_refresh", self._refresh_asset, self.config.asset_refresh_seconds),
            ("chart_refresh", self._refresh_chart, self.config.chart_refresh_seconds),
        ]

        scheduled = False
        for job_id, func, seconds in jobs:
            if seconds <= 0:
                continue
            self.scheduler.add_job(
                func,
                IntervalTrigger(seconds=seconds),
                id=job_id,
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
            structured_logger.info("Scheduled polling job", context={"job_id": job_id, "seconds": seconds})
            scheduled = True

        if scheduled and not self.is_running:
            self.scheduler.start()
            self.is_running = True
        return scheduled

    def shutdown(self) -> None:
        if self.is_running:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            structured_logger.info("Refresh scheduler stopped")

    def get_jobs(self) -> list[str]:
        return [job.id for job in self.scheduler.get_jobs()]
