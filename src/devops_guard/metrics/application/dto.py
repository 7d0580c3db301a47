"""
Metrics Application DTOs
=========================

Pydantic response models for the metrics API.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from devops_guard.metrics.domain import BacklogMetrics, MetricsSnapshot


class RiskSummary(BaseModel):
    avg: float = Field(..., description="Average risk score over open items (0-100)")


class MetricsResponse(BaseModel):
    """Current backlog health."""
    backlog_health_pct: float = Field(..., description="Open items touched in the last 7 days (%)")
    sla_breach_rate_pct: float = Field(..., description="Open items past their due date (%)")
    overdue_count: int = Field(..., description="Open items past their due date")
    risk: RiskSummary

    @classmethod
    def from_metrics(cls, metrics: BacklogMetrics) -> "MetricsResponse":
        return cls(
            backlog_health_pct=metrics.backlog_health_pct,
            sla_breach_rate_pct=metrics.sla_breach_rate_pct,
            overdue_count=metrics.overdue_count,
            risk=RiskSummary(avg=metrics.risk_avg),
        )


class MetricsHistoryPoint(BaseModel):
    id: UUID
    captured_at: datetime
    backlog_health_pct: float
    sla_breach_rate_pct: float
    overdue_count: int
    risk_avg: float

    @classmethod
    def from_snapshot(cls, snapshot: MetricsSnapshot) -> "MetricsHistoryPoint":
        return cls(
            id=snapshot.id,
            captured_at=snapshot.captured_at,
            backlog_health_pct=snapshot.backlog_health_pct,
            sla_breach_rate_pct=snapshot.sla_breach_rate_pct,
            overdue_count=snapshot.overdue_count,
            risk_avg=snapshot.risk_avg,
        )


class MetricsHistoryResponse(BaseModel):
    count: int
    points: List[MetricsHistoryPoint]


class SnapshotCaptureResponse(BaseModel):
    captured: bool = Field(..., description="False when today's snapshot already existed")
    snapshot: Optional[MetricsHistoryPoint] = None
