"""
Metrics Application Services
=============================

Application services computing backlog health over the live work item
store and recording daily snapshots.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from devops_guard.core import (
    RepositoryException,
    ServiceUnavailableException,
)
from devops_guard.metrics.domain import BacklogMetrics, MetricsCalculator, MetricsSnapshot
from devops_guard.shared.infrastructure.logging import get_logger, log_latency
from devops_guard.workitems.application import IWorkItemRepository

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class IMetricsSnapshotRepository(ABC):
    """Interface for snapshot storage. Snapshots are append-only."""

    @abstractmethod
    async def append(self, snapshot: MetricsSnapshot) -> MetricsSnapshot:
        """Store a new snapshot."""

    @abstractmethod
    async def exists_for_date(self, day: date) -> bool:
        """True if a snapshot was captured on ``day`` (UTC calendar date)."""

    @abstractmethod
    async def list_recent(self, limit: int = 30, newest_first: bool = True) -> List[MetricsSnapshot]:
        """Return up to ``limit`` snapshots ordered by capture time."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ========== Application Services ==========

class MetricsService:
    """
    Computes backlog metrics and manages snapshots.

    The same computation backs the on-demand metrics read and the daily
    snapshot job.
    """

    def __init__(
        self,
        work_item_repository: IWorkItemRepository,
        snapshot_repository: IMetricsSnapshotRepository,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self._work_items = work_item_repository
        self._snapshots = snapshot_repository
        self._clock = clock or _utcnow
        self._capture_lock = asyncio.Lock()

    async def compute_current(self, now: Optional[datetime] = None) -> BacklogMetrics:
        """
        Compute metrics over the live open set.

        Raises:
            ServiceUnavailableException: If the work item store is unreachable
        """
        now = now or self._clock()
        try:
            open_items = await self._work_items.list_open()
        except (ServiceUnavailableException, RepositoryException) as e:
            logger.error("Metrics unavailable", extra={"error": str(e)})
            raise ServiceUnavailableException(
                "Metrics", "Metrics unavailable: work item store unreachable", cause=e
            ) from e

        with log_latency(logger, "metrics_compute", open_count=len(open_items)):
            return MetricsCalculator.compute(open_items, now)

    async def capture_daily_snapshot(self) -> Optional[MetricsSnapshot]:
        """
        Capture today's snapshot unless one already exists.

        Returns:
            The new snapshot, or None if today (UTC) was already captured
        """
        async with self._capture_lock:
            now = self._clock()
            today = now.date()

            if await self._snapshots.exists_for_date(today):
                logger.info(
                    "Snapshot already exists, skipping",
                    extra={"day": today.isoformat()}
                )
                return None

            metrics = await self.compute_current(now)
            snapshot = await self._snapshots.append(
                MetricsSnapshot.from_metrics(metrics, captured_at=now)
            )

            logger.info(
                "Snapshot captured",
                extra={"snapshot_id": str(snapshot.id), **metrics.to_dict()}
            )
            return snapshot

    async def history(self, limit: int = 30) -> List[MetricsSnapshot]:
        """Most recent snapshots, newest first."""
        return await self._snapshots.list_recent(limit=limit, newest_first=True)
