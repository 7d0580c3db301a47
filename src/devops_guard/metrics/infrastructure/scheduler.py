"""
Daily Snapshot Scheduler
========================

APScheduler wrapper capturing one metrics snapshot per day.

A single cron job fires at a fixed local hour. Capture failures are logged
and followed by a fixed back-off; the job stays registered and fires again
on the next scheduled tick.
"""

import asyncio
from datetime import datetime, tzinfo
from typing import Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from devops_guard.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SNAPSHOT_HOUR = 9
DEFAULT_RETRY_DELAY_SECONDS = 60.0
JOB_ID = "daily_metrics_snapshot"


def build_daily_trigger(hour_local: int, timezone: Optional[tzinfo] = None) -> CronTrigger:
    """
    Cron trigger for ``hour_local``:00 every day.

    An exact match on the hour fires immediately; otherwise the next
    occurrence is today's slot if it has not passed, else tomorrow's.
    """
    hour_local = max(0, min(23, hour_local))
    return CronTrigger(hour=hour_local, minute=0, second=0, timezone=timezone)


class DailySnapshotScheduler:
    """
    Wrapper for APScheduler running the daily snapshot capture.

    Usage:
        scheduler = DailySnapshotScheduler(metrics_service.capture_daily_snapshot, hour_local=9)
        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        capture_job: Callable[[], Awaitable[object]],
        hour_local: int = DEFAULT_SNAPSHOT_HOUR,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        timezone: Optional[tzinfo] = None
    ):
        self._capture_job = capture_job
        self.hour_local = max(0, min(23, hour_local))
        self.retry_delay_seconds = retry_delay_seconds
        self._timezone = timezone
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    async def start(self) -> None:
        """Start the scheduler on the running event loop."""
        if self._running:
            logger.warning("Snapshot scheduler already running")
            return

        self._scheduler = AsyncIOScheduler(timezone=self._timezone)

        self._scheduler.add_job(
            self.run_capture,
            trigger=build_daily_trigger(self.hour_local, self._timezone),
            id=JOB_ID,
            name="Daily Metrics Snapshot",
            misfire_grace_time=3600,
            coalesce=True,
            max_instances=1,
            replace_existing=True
        )

        self._scheduler.start()
        self._running = True

        next_run = self.next_run
        logger.info(
            "Snapshot scheduler started",
            extra={
                "hour_local": self.hour_local,
                "next_run": next_run.isoformat() if next_run else None
            }
        )

    async def stop(self) -> None:
        """Stop the scheduler, cancelling a capture or back-off in progress."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=True)
            self._scheduler = None

        self._running = False
        logger.info("Snapshot scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def next_run(self) -> Optional[datetime]:
        """Next fire time of the capture job, or None when stopped."""
        if not self._running or self._scheduler is None:
            return None
        job = self._scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    async def run_capture(self) -> None:
        """Job body: capture once, back off on failure, never raise."""
        try:
            await self._capture_job()
        except Exception as e:
            logger.error(
                "Snapshot capture failed",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "retry_delay_seconds": self.retry_delay_seconds
                },
                exc_info=True
            )
            await asyncio.sleep(self.retry_delay_seconds)
