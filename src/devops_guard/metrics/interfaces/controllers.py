"""
Metrics Controllers (API Routes)
=================================

FastAPI routes for backlog metrics and snapshot history.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from devops_guard.metrics.application import (
    MetricsHistoryPoint,
    MetricsHistoryResponse,
    MetricsResponse,
    MetricsService,
    SnapshotCaptureResponse,
)
from devops_guard.shared.api.security import require_api_key

router = APIRouter(prefix="/metrics", tags=["Metrics"])


def get_metrics_service(request: Request) -> MetricsService:
    """Get the metrics service wired at startup."""
    return request.app.state.metrics_service


@router.get(
    "",
    response_model=MetricsResponse,
    summary="Current backlog health",
    responses={503: {"description": "Work item store unavailable"}}
)
async def get_metrics(
    service: MetricsService = Depends(get_metrics_service)
):
    return MetricsResponse.from_metrics(await service.compute_current())


@router.get(
    "/history",
    response_model=MetricsHistoryResponse,
    summary="Recent daily snapshots, newest first"
)
async def get_metrics_history(
    request: Request,
    limit: Optional[int] = Query(None, ge=1, le=365),
    service: MetricsService = Depends(get_metrics_service)
):
    limit = limit or request.app.state.settings.metrics_history_default_limit
    snapshots = await service.history(limit)
    points = [MetricsHistoryPoint.from_snapshot(s) for s in snapshots]
    return MetricsHistoryResponse(count=len(points), points=points)


@router.post(
    "/snapshots",
    response_model=SnapshotCaptureResponse,
    summary="Capture today's snapshot now",
    description="Idempotent per UTC day: returns captured=false if today's snapshot exists.",
    dependencies=[Depends(require_api_key)]
)
async def capture_snapshot(
    service: MetricsService = Depends(get_metrics_service)
):
    snapshot = await service.capture_daily_snapshot()
    if snapshot is None:
        return SnapshotCaptureResponse(captured=False)
    return SnapshotCaptureResponse(
        captured=True, snapshot=MetricsHistoryPoint.from_snapshot(snapshot)
    )
