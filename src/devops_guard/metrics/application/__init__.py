"""
Metrics Application Layer
=========================

Contains:
- Services: MetricsService (on-demand metrics, daily capture, history)
- DTOs: API response models
- Repository interface for snapshot storage
"""

from devops_guard.metrics.application.dto import (
    RiskSummary,
    MetricsResponse,
    MetricsHistoryPoint,
    MetricsHistoryResponse,
    SnapshotCaptureResponse,
)
from devops_guard.metrics.application.services import (
    MetricsService,
    IMetricsSnapshotRepository,
)

__all__ = [
    # DTOs
    "RiskSummary",
    "MetricsResponse",
    "MetricsHistoryPoint",
    "MetricsHistoryResponse",
    "SnapshotCaptureResponse",
    # Services
    "MetricsService",
    # Repository Interfaces
    "IMetricsSnapshotRepository",
]
