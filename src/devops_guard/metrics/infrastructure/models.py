"""
Metrics Infrastructure Models
==============================

SQLAlchemy ORM model for metrics snapshots.
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Float, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from devops_guard.infrastructure.database import Base
from devops_guard.metrics.domain import MetricsSnapshot


class MetricsSnapshotModel(Base):
    """
    Database model for MetricsSnapshot entity.

    Maps to the 'metrics_snapshots' table. No unique constraint per
    day; MetricsService enforces one capture per UTC day.
    """
    __tablename__ = "metrics_snapshots"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    captured_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    backlog_health_pct: Mapped[float] = mapped_column(Float, nullable=False)
    sla_breach_rate_pct: Mapped[float] = mapped_column(Float, nullable=False)
    overdue_count: Mapped[int] = mapped_column(Integer, nullable=False)
    risk_avg: Mapped[float] = mapped_column(Float, nullable=False)

    @classmethod
    def from_entity(cls, snapshot: MetricsSnapshot) -> "MetricsSnapshotModel":
        return cls(
            id=snapshot.id,
            captured_at=snapshot.captured_at,
            backlog_health_pct=snapshot.backlog_health_pct,
            sla_breach_rate_pct=snapshot.sla_breach_rate_pct,
            overdue_count=snapshot.overdue_count,
            risk_avg=snapshot.risk_avg,
        )

    def to_entity(self) -> MetricsSnapshot:
        captured_at = self.captured_at
        if captured_at.tzinfo is None:
            captured_at = captured_at.replace(tzinfo=timezone.utc)
        return MetricsSnapshot(
            id=self.id,
            captured_at=captured_at,
            backlog_health_pct=self.backlog_health_pct,
            sla_breach_rate_pct=self.sla_breach_rate_pct,
            overdue_count=self.overdue_count,
            risk_avg=self.risk_avg,
        )
