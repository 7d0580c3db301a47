"""
Work Item Application Layer
===========================

Contains:
- Services: Orchestrate business logic and coordinate with repositories
- DTOs: Data transfer objects for API serialization
- Query objects: Filtering, paging and ordering for listings

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from devops_guard.workitems.application.dto import (
    WorkItemCreateRequest,
    WorkItemUpdateRequest,
    EventIngestRequest,
    WorkItemResponse,
    WorkItemListResponse,
    EventIngestResponse,
    SeedResponse,
)
from devops_guard.workitems.application.services import (
    WorkItemService,
    IWorkItemRepository,
    WorkItemQuery,
    SortField,
    SortDirection,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
)

__all__ = [
    # DTOs
    "WorkItemCreateRequest",
    "WorkItemUpdateRequest",
    "EventIngestRequest",
    "WorkItemResponse",
    "WorkItemListResponse",
    "EventIngestResponse",
    "SeedResponse",
    # Services
    "WorkItemService",
    # Queries
    "WorkItemQuery",
    "SortField",
    "SortDirection",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Repository Interfaces
    "IWorkItemRepository",
]
