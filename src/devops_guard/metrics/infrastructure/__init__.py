"""
Metrics Infrastructure Layer
============================

Infrastructure implementations for metrics:
- Models: SQLAlchemy ORM model for snapshots
- Repositories: in-memory and SQL snapshot stores
- Scheduler: daily snapshot background loop
"""

from devops_guard.metrics.infrastructure.models import MetricsSnapshotModel
from devops_guard.metrics.infrastructure.repositories import (
    InMemorySnapshotRepository,
    SQLAlchemySnapshotRepository,
)
from devops_guard.metrics.infrastructure.scheduler import (
    DailySnapshotScheduler,
    build_daily_trigger,
)

__all__ = [
    "MetricsSnapshotModel",
    "InMemorySnapshotRepository",
    "SQLAlchemySnapshotRepository",
    "DailySnapshotScheduler",
    "build_daily_trigger",
]
