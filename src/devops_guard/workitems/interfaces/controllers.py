"""
Work Item Controllers (API Routes)
===================================

FastAPI routes for work items and event ingestion.

Controllers are thin - they delegate to application services.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status

from devops_guard.shared.api.security import require_api_key
from devops_guard.shared.infrastructure.logging import get_logger
from devops_guard.workitems.application import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    EventIngestRequest,
    EventIngestResponse,
    SeedResponse,
    WorkItemCreateRequest,
    WorkItemListResponse,
    WorkItemQuery,
    WorkItemResponse,
    WorkItemService,
    WorkItemUpdateRequest,
)
from devops_guard.workitems.domain import WorkItemStatus

logger = get_logger(__name__)
router = APIRouter(tags=["Work Items"])


# ========== Example payloads for Swagger ==========

WORK_ITEM_CREATE_EXAMPLE = {
    "title": "Fix NRE in billing webhook",
    "service": "billing",
    "priority": "High",
    "due_date": "2025-01-22",
    "component": "billing-api",
    "assignee": "alex",
    "labels": ["bug", "payments"]
}

EVENT_INGEST_EXAMPLE = {
    "work_item_id": "123e4567-e89b-12d3-a456-426614174000",
    "kind": "build_failed",
    "source": "github-actions",
    "message": "Build 123 failed on main",
    "occurred_at": "2025-01-15T10:00:00Z"
}


# ========== Dependencies ==========

def get_work_item_service(request: Request) -> WorkItemService:
    """Get the work item service wired at startup."""
    return request.app.state.work_item_service


# ========== Route Handlers ==========

@router.post(
    "/workitems",
    response_model=WorkItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new work item",
    description="Creates a work item for a given service with optional assignee, component, labels, and due date.",
    dependencies=[Depends(require_api_key)],
    openapi_extra={
        "requestBody": {"content": {"application/json": {"example": WORK_ITEM_CREATE_EXAMPLE}}}
    }
)
async def create_work_item(
    body: WorkItemCreateRequest,
    response: Response,
    service: WorkItemService = Depends(get_work_item_service)
):
    item = await service.create_work_item(body)
    response.headers["Location"] = f"/workitems/{item.id}"
    return WorkItemResponse.from_entity(item)


@router.get(
    "/workitems/{item_id}",
    response_model=WorkItemResponse,
    summary="Get a work item",
    responses={404: {"description": "Work item not found"}}
)
async def get_work_item(
    item_id: UUID,
    service: WorkItemService = Depends(get_work_item_service)
):
    return WorkItemResponse.from_entity(await service.get_work_item(item_id))


@router.get(
    "/workitems",
    response_model=WorkItemListResponse,
    summary="List work items",
    description=(
        "Returns a paged list with optional filters (service, status, assignee) "
        "and sorting (updatedAt, priority, dueDate). Items without a due date sort last."
    )
)
async def list_work_items(
    service_name: Optional[str] = Query(None, alias="service", description="Owning service (case-insensitive)"),
    status_filter: Optional[WorkItemStatus] = Query(None, alias="status"),
    assignee: Optional[str] = Query(None, description="Assignee (case-insensitive)"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort_by: str = Query("updatedAt", description="updatedAt | priority | dueDate"),
    sort_dir: str = Query("desc", description="asc | desc"),
    service: WorkItemService = Depends(get_work_item_service)
):
    query = WorkItemQuery.parse(
        service=service_name,
        status=status_filter,
        assignee=assignee,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_dir=sort_dir,
    )
    items, total = await service.list_work_items(query)

    return WorkItemListResponse(
        page=page,
        page_size=page_size,
        total=total,
        items=[WorkItemResponse.from_entity(item) for item in items],
    )


@router.patch(
    "/workitems/{item_id}",
    response_model=WorkItemResponse,
    summary="Partially update a work item",
    dependencies=[Depends(require_api_key)],
    responses={404: {"description": "Work item not found"}}
)
async def update_work_item(
    item_id: UUID,
    body: WorkItemUpdateRequest,
    service: WorkItemService = Depends(get_work_item_service)
):
    item = await service.update_work_item(item_id, body)
    return WorkItemResponse.from_entity(item)


@router.delete(
    "/workitems/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a work item",
    dependencies=[Depends(require_api_key)],
    responses={404: {"description": "Work item not found"}}
)
async def delete_work_item(
    item_id: UUID,
    service: WorkItemService = Depends(get_work_item_service)
):
    await service.delete_work_item(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/dev/seed",
    response_model=SeedResponse,
    summary="Seed demo work items",
    tags=["Development"],
    dependencies=[Depends(require_api_key)]
)
async def seed_demo_data(
    service: WorkItemService = Depends(get_work_item_service)
):
    return SeedResponse(seeded=await service.seed_demo_data())


@router.post(
    "/events/ingest",
    response_model=EventIngestResponse,
    summary="Ingest an external event (CI/CD, incident)",
    description=(
        "Applies simple rules to the referenced work item "
        "(raises priority, sets status, adds labels)."
    ),
    tags=["Events"],
    dependencies=[Depends(require_api_key)],
    responses={
        400: {"description": "Unknown event kind"},
        404: {"description": "Work item not found"}
    },
    openapi_extra={
        "requestBody": {"content": {"application/json": {"example": EVENT_INGEST_EXAMPLE}}}
    }
)
async def ingest_event(
    body: EventIngestRequest,
    service: WorkItemService = Depends(get_work_item_service)
):
    item, applied = await service.ingest_event(body.work_item_id, body.kind)

    logger.info(
        "Event ingested",
        extra={
            "work_item_id": str(item.id),
            "source": body.source,
            "occurred_at": body.occurred_at.isoformat()
        }
    )
    return EventIngestResponse(work_item_id=item.id, applied_rule=applied)
