"""Tests for MetricsService and the snapshot stores."""

import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from devops_guard.core import ServiceUnavailableException
from devops_guard.metrics.application import MetricsService
from devops_guard.metrics.domain import MetricsSnapshot
from devops_guard.metrics.infrastructure import InMemorySnapshotRepository
from devops_guard.workitems.domain import Priority
from devops_guard.workitems.infrastructure import InMemoryWorkItemRepository

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class MutableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class UnreachableWorkItemRepository(InMemoryWorkItemRepository):
    async def list_open(self):
        raise ServiceUnavailableException(
            "Work item store", "list_open failed", cause=ConnectionRefusedError("refused")
        )


@pytest.fixture
def clock():
    return MutableClock(NOW)


@pytest.fixture
def work_items():
    return InMemoryWorkItemRepository()


@pytest.fixture
def snapshots():
    return InMemorySnapshotRepository()


@pytest.fixture
def service(work_items, snapshots, clock):
    return MetricsService(work_items, snapshots, clock=clock)


class TestComputeCurrent:
    """On-demand metrics."""

    async def test_uses_open_items(self, service, work_items, make_item):
        await work_items.add(make_item(priority=Priority.HIGH, due_date=NOW.date() - timedelta(days=2)))

        metrics = await service.compute_current()

        assert metrics.open_count == 1
        assert metrics.overdue_count == 1
        assert metrics.risk_avg == 56.0

    async def test_store_unavailable(self, snapshots, clock):
        service = MetricsService(UnreachableWorkItemRepository(), snapshots, clock=clock)

        with pytest.raises(ServiceUnavailableException) as exc_info:
            await service.compute_current()

        assert exc_info.value.service_name == "Metrics"
        assert "cause" in exc_info.value.details
        assert isinstance(exc_info.value.__cause__, ServiceUnavailableException)


class TestDailyCapture:
    """Idempotent per-UTC-day snapshots."""

    async def test_second_capture_same_day_is_skipped(self, service, snapshots, clock):
        first = await service.capture_daily_snapshot()
        clock.now = NOW + timedelta(hours=11)
        second = await service.capture_daily_snapshot()

        assert first is not None
        assert first.captured_at == NOW
        assert second is None
        assert len(await snapshots.list_recent()) == 1

    async def test_next_day_captures_again(self, service, clock):
        first = await service.capture_daily_snapshot()
        clock.now = NOW + timedelta(days=1)
        second = await service.capture_daily_snapshot()

        history = await service.history(limit=10)

        assert [s.id for s in history] == [second.id, first.id]

    async def test_concurrent_captures_store_one(self, service, snapshots):
        results = await asyncio.gather(*(service.capture_daily_snapshot() for _ in range(5)))

        assert sum(r is not None for r in results) == 1
        assert len(await snapshots.list_recent()) == 1

    async def test_failed_capture_stores_nothing(self, snapshots, clock):
        service = MetricsService(UnreachableWorkItemRepository(), snapshots, clock=clock)

        with pytest.raises(ServiceUnavailableException):
            await service.capture_daily_snapshot()

        assert await snapshots.exists_for_date(NOW.date()) is False


class TestSnapshotStores:
    """Behaviour shared by both snapshot stores."""

    async def test_exists_for_date_uses_utc_day(self, snapshot_repository):
        await snapshot_repository.append(_snapshot(datetime(2025, 1, 15, 23, 59, tzinfo=timezone.utc)))

        assert await snapshot_repository.exists_for_date(date(2025, 1, 15))
        assert not await snapshot_repository.exists_for_date(date(2025, 1, 16))
        assert not await snapshot_repository.exists_for_date(date(2025, 1, 14))

    async def test_list_recent_newest_first_with_limit(self, snapshot_repository):
        for day in (1, 3, 2):
            await snapshot_repository.append(_snapshot(datetime(2025, 1, day, 9, tzinfo=timezone.utc)))

        recent = await snapshot_repository.list_recent(limit=2)
        oldest_first = await snapshot_repository.list_recent(limit=10, newest_first=False)

        assert [s.captured_at.day for s in recent] == [3, 2]
        assert [s.captured_at.day for s in oldest_first] == [1, 2, 3]

    async def test_round_trip_keeps_values(self, snapshot_repository):
        snapshot = _snapshot(NOW, risk_avg=42.5)
        await snapshot_repository.append(snapshot)

        (loaded,) = await snapshot_repository.list_recent(limit=1)

        assert loaded == snapshot


def _snapshot(captured_at: datetime, risk_avg: float = 10.0) -> MetricsSnapshot:
    return MetricsSnapshot(
        captured_at=captured_at,
        backlog_health_pct=75.0,
        sla_breach_rate_pct=25.0,
        overdue_count=1,
        risk_avg=risk_avg,
    )
