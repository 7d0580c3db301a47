"""Tests for the daily snapshot scheduler."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from devops_guard.metrics.application import MetricsService
from devops_guard.metrics.infrastructure import (
    DailySnapshotScheduler,
    InMemorySnapshotRepository,
    build_daily_trigger,
)
from devops_guard.metrics.infrastructure.scheduler import JOB_ID
from devops_guard.workitems.infrastructure import InMemoryWorkItemRepository

LOCAL = timezone(timedelta(hours=2))


def _next_fire(hour, now):
    return build_daily_trigger(hour, LOCAL).get_next_fire_time(None, now)


def _fire_now(scheduler):
    scheduler._scheduler.modify_job(JOB_ID, next_run_time=datetime.now(timezone.utc))


class TestDailyTrigger:
    """Next-run arithmetic of the cron trigger."""

    def test_before_hour_runs_today(self):
        now = datetime(2025, 1, 15, 8, 30, tzinfo=LOCAL)
        assert _next_fire(9, now) == datetime(2025, 1, 15, 9, 0, tzinfo=LOCAL)

    def test_exactly_on_hour_runs_today(self):
        now = datetime(2025, 1, 15, 9, 0, tzinfo=LOCAL)
        assert _next_fire(9, now) == now

    def test_after_hour_runs_tomorrow(self):
        now = datetime(2025, 1, 15, 9, 0, 1, tzinfo=LOCAL)
        assert _next_fire(9, now) == datetime(2025, 1, 16, 9, 0, tzinfo=LOCAL)

    def test_month_rollover(self):
        now = datetime(2025, 1, 31, 23, 30, tzinfo=LOCAL)
        assert _next_fire(0, now) == datetime(2025, 2, 1, 0, 0, tzinfo=LOCAL)

    @pytest.mark.parametrize("hour,expected", [(-3, 0), (30, 23)])
    def test_hour_is_clamped(self, hour, expected):
        now = datetime(2025, 1, 15, 0, 0, tzinfo=LOCAL)
        assert _next_fire(hour, now).hour == expected


class TestCaptureJob:
    """The job body run on every tick."""

    async def test_repeated_ticks_same_day_store_one_snapshot(self):
        utc_now = datetime(2025, 1, 15, 7, 0, tzinfo=timezone.utc)
        snapshots = InMemorySnapshotRepository()
        service = MetricsService(InMemoryWorkItemRepository(), snapshots, clock=lambda: utc_now)
        scheduler = DailySnapshotScheduler(service.capture_daily_snapshot, timezone=LOCAL)

        await scheduler.run_capture()
        await scheduler.run_capture()

        assert len(await snapshots.list_recent()) == 1

    async def test_failure_is_logged_and_backs_off(self, caplog):
        calls = []

        async def failing_job():
            calls.append(1)
            raise RuntimeError("store down")

        scheduler = DailySnapshotScheduler(failing_job, retry_delay_seconds=0.05, timezone=LOCAL)

        started = asyncio.get_running_loop().time()
        await scheduler.run_capture()
        elapsed = asyncio.get_running_loop().time() - started

        assert calls == [1]
        assert elapsed >= 0.04
        assert "Snapshot capture failed" in caplog.text


class TestSchedulerLifecycle:
    """start / stop around the APScheduler job."""

    async def test_start_registers_daily_job(self):
        scheduler = DailySnapshotScheduler(_noop, hour_local=9, timezone=LOCAL)
        await scheduler.start()

        try:
            next_run = scheduler.next_run
            assert scheduler.is_running
            assert next_run is not None
            assert (next_run.hour, next_run.minute) == (9, 0)
            assert next_run > datetime.now(LOCAL)
        finally:
            await scheduler.stop()

        assert not scheduler.is_running
        assert scheduler.next_run is None

    async def test_fired_job_runs_capture(self):
        calls = []

        async def job():
            calls.append(1)

        scheduler = DailySnapshotScheduler(job, timezone=LOCAL)
        await scheduler.start()
        _fire_now(scheduler)
        await asyncio.sleep(0.3)

        assert calls == [1]
        assert scheduler.is_running
        assert scheduler.next_run is not None
        await scheduler.stop()

    async def test_failed_tick_keeps_scheduler_running(self):
        async def failing_job():
            raise RuntimeError("store down")

        scheduler = DailySnapshotScheduler(failing_job, retry_delay_seconds=0.01, timezone=LOCAL)
        await scheduler.start()
        _fire_now(scheduler)
        await asyncio.sleep(0.3)

        assert scheduler.is_running
        assert scheduler.next_run is not None
        await scheduler.stop()

    async def test_stop_interrupts_back_off(self):
        async def failing_job():
            raise RuntimeError("store down")

        scheduler = DailySnapshotScheduler(failing_job, retry_delay_seconds=30, timezone=LOCAL)
        await scheduler.start()
        _fire_now(scheduler)
        await asyncio.sleep(0.2)

        await asyncio.wait_for(scheduler.stop(), timeout=1.0)

        assert not scheduler.is_running

    async def test_start_twice_keeps_one_job(self):
        scheduler = DailySnapshotScheduler(_noop, timezone=LOCAL)
        await scheduler.start()
        await scheduler.start()

        assert len(scheduler._scheduler.get_jobs()) == 1
        await scheduler.stop()

    async def test_stop_without_start_is_noop(self):
        scheduler = DailySnapshotScheduler(_noop)
        await scheduler.stop()
        assert not scheduler.is_running


async def _noop():
    return None
