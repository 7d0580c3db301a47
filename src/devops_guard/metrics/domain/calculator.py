"""
Metrics Calculator
==================

Pure functions for backlog health calculations.

Stateless utility class - all metrics logic in one place, so the on-demand
metrics read and the daily snapshot job produce identical figures.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Dict, Iterable

from devops_guard.metrics.domain.entities import BacklogMetrics
from devops_guard.workitems.domain import Priority, WorkItem


RECENT_ACTIVITY_WINDOW = timedelta(days=7)
RISK_PER_OVERDUE_DAY = 3
RISK_MIN = 0
RISK_MAX = 100

PRIORITY_BASE_RISK: Dict[Priority, int] = {
    Priority.LOW: 10,
    Priority.MEDIUM: 25,
    Priority.HIGH: 50,
    Priority.P0: 70,
}


def round_one_decimal(value: float) -> float:
    """
    Round to one decimal place, ties to even, on the decimal representation.

    12.25 -> 12.2, 12.35 -> 12.4, 33.333... -> 33.3
    """
    return float(Decimal(repr(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_EVEN))


class MetricsCalculator:
    """
    Pure functions for backlog metrics.

    All methods take the evaluation instant explicitly; nothing reads the
    clock.
    """

    @staticmethod
    def risk_score(priority: Priority, due_date: date | None, today: date) -> int:
        """
        Risk of a single item: base(priority) + 3 per overdue day, in [0, 100].

        Args:
            priority: Item priority
            due_date: Item due date, if any
            today: Current UTC calendar date
        """
        days_overdue = max(0, (today - due_date).days) if due_date is not None else 0
        score = PRIORITY_BASE_RISK[priority] + RISK_PER_OVERDUE_DAY * days_overdue
        return max(RISK_MIN, min(RISK_MAX, score))

    @staticmethod
    def compute(items: Iterable[WorkItem], now: datetime) -> BacklogMetrics:
        """
        Aggregate metrics over the open subset of ``items``.

        Resolved items are ignored, so callers may pass either the open set
        or everything.

        Args:
            items: Work items to evaluate
            now: Evaluation instant (timezone-aware UTC)
        """
        today = now.date()
        recent_cutoff = now - RECENT_ACTIVITY_WINDOW

        open_count = 0
        touched_recently = 0
        overdue = 0
        risk_total = 0

        for item in items:
            if not item.is_open:
                continue
            open_count += 1
            if item.updated_at >= recent_cutoff:
                touched_recently += 1
            if item.is_overdue(today):
                overdue += 1
            risk_total += MetricsCalculator.risk_score(item.priority, item.due_date, today)

        if open_count == 0:
            return BacklogMetrics(
                open_count=0,
                backlog_health_pct=100.0,
                sla_breach_rate_pct=0.0,
                overdue_count=0,
                risk_avg=0.0,
            )

        return BacklogMetrics(
            open_count=open_count,
            backlog_health_pct=round_one_decimal(100.0 * touched_recently / open_count),
            sla_breach_rate_pct=round_one_decimal(100.0 * overdue / open_count),
            overdue_count=overdue,
            risk_avg=round_one_decimal(risk_total / open_count),
        )
