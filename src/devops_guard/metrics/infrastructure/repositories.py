"""
Metrics Infrastructure Repositories
====================================

Snapshot stores: an in-memory list for non-persistent deployments and a
SQLAlchemy-backed table.
"""

import threading
from datetime import date, datetime, time, timedelta, timezone
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from devops_guard.infrastructure.database import unit_of_work
from devops_guard.metrics.application import IMetricsSnapshotRepository
from devops_guard.metrics.domain import MetricsSnapshot
from devops_guard.metrics.infrastructure.models import MetricsSnapshotModel

STORE_NAME = "Metrics snapshot store"


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class InMemorySnapshotRepository(IMetricsSnapshotRepository):
    """Process-local snapshot store. Snapshots are frozen, so no copying."""

    def __init__(self):
        self._snapshots: List[MetricsSnapshot] = []
        self._lock = threading.Lock()

    async def append(self, snapshot: MetricsSnapshot) -> MetricsSnapshot:
        with self._lock:
            self._snapshots.append(snapshot)
        return snapshot

    async def exists_for_date(self, day: date) -> bool:
        start, end = _day_bounds(day)
        with self._lock:
            return any(start <= s.captured_at < end for s in self._snapshots)

    async def list_recent(self, limit: int = 30, newest_first: bool = True) -> List[MetricsSnapshot]:
        with self._lock:
            ordered = sorted(self._snapshots, key=lambda s: s.captured_at, reverse=newest_first)
        return ordered[:max(limit, 0)]


class SQLAlchemySnapshotRepository(IMetricsSnapshotRepository):
    """SQLAlchemy snapshot store; one session per call."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def append(self, snapshot: MetricsSnapshot) -> MetricsSnapshot:
        async with unit_of_work(self._session_maker, STORE_NAME, "append") as session:
            session.add(MetricsSnapshotModel.from_entity(snapshot))
        return snapshot

    async def exists_for_date(self, day: date) -> bool:
        start, end = _day_bounds(day)
        stmt = (
            select(func.count())
            .select_from(MetricsSnapshotModel)
            .where(
                MetricsSnapshotModel.captured_at >= start,
                MetricsSnapshotModel.captured_at < end,
            )
        )
        async with unit_of_work(self._session_maker, STORE_NAME, "exists_for_date") as session:
            return (await session.execute(stmt)).scalar_one() > 0

    async def list_recent(self, limit: int = 30, newest_first: bool = True) -> List[MetricsSnapshot]:
        column = MetricsSnapshotModel.captured_at
        stmt = (
            select(MetricsSnapshotModel)
            .order_by(column.desc() if newest_first else column.asc())
            .limit(max(limit, 0))
        )
        async with unit_of_work(self._session_maker, STORE_NAME, "list_recent") as session:
            result = await session.execute(stmt)
            return [model.to_entity() for model in result.scalars().all()]
