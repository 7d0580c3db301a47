"""
Metrics Domain Layer
====================

Contains:
- Entities: BacklogMetrics, MetricsSnapshot
- Domain Services: MetricsCalculator (risk scores and aggregation)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from devops_guard.metrics.domain.entities import BacklogMetrics, MetricsSnapshot
from devops_guard.metrics.domain.calculator import (
    MetricsCalculator,
    PRIORITY_BASE_RISK,
    round_one_decimal,
)

__all__ = [
    # Entities
    "BacklogMetrics",
    "MetricsSnapshot",
    # Domain Services
    "MetricsCalculator",
    "PRIORITY_BASE_RISK",
    "round_one_decimal",
]
