"""
Metrics Domain Entities
========================

Immutable results of backlog health aggregation.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4


@dataclass(frozen=True)
class BacklogMetrics:
    """
    Aggregate health figures over the open work item set.

    Percentages and risk_avg are rounded to one decimal place.
    """
    open_count: int
    backlog_health_pct: float
    sla_breach_rate_pct: float
    overdue_count: int
    risk_avg: float

    def to_dict(self) -> dict:
        return {
            "open_count": self.open_count,
            "backlog_health_pct": self.backlog_health_pct,
            "sla_breach_rate_pct": self.sla_breach_rate_pct,
            "overdue_count": self.overdue_count,
            "risk_avg": self.risk_avg,
        }


@dataclass(frozen=True)
class MetricsSnapshot:
    """Point-in-time capture of backlog metrics. Never mutated once stored."""
    captured_at: datetime
    backlog_health_pct: float
    sla_breach_rate_pct: float
    overdue_count: int
    risk_avg: float
    id: UUID = field(default_factory=uuid4)

    @classmethod
    def from_metrics(
        cls,
        metrics: BacklogMetrics,
        captured_at: Optional[datetime] = None
    ) -> "MetricsSnapshot":
        return cls(
            captured_at=captured_at or datetime.now(timezone.utc),
            backlog_health_pct=metrics.backlog_health_pct,
            sla_breach_rate_pct=metrics.sla_breach_rate_pct,
            overdue_count=metrics.overdue_count,
            risk_avg=metrics.risk_avg,
        )
