"""
Work Item Application Services
===============================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (repositories), not concrete implementations
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Tuple
from uuid import UUID

from devops_guard.core import ResourceNotFoundException, ValidationException
from devops_guard.shared.infrastructure.logging import get_logger
from devops_guard.workitems.application.dto import (
    WorkItemCreateRequest,
    WorkItemUpdateRequest,
)
from devops_guard.workitems.domain import (
    EventRuleEngine,
    Priority,
    WorkItem,
    WorkItemStatus,
)

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


# ========== Query Objects ==========

class SortField(str, Enum):
    """Sortable columns. Values are the lower-cased wire names."""
    UPDATED_AT = "updatedat"
    PRIORITY = "priority"
    DUE_DATE = "duedate"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class WorkItemQuery:
    """
    Filters, paging and ordering for a work item listing.

    Filters are AND-combined; service and assignee match case-insensitively.
    """
    service: Optional[str] = None
    status: Optional[WorkItemStatus] = None
    assignee: Optional[str] = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort_by: SortField = SortField.UPDATED_AT
    sort_dir: SortDirection = SortDirection.DESC

    @classmethod
    def parse(
        cls,
        service: Optional[str] = None,
        status: Optional[WorkItemStatus] = None,
        assignee: Optional[str] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        sort_by: Optional[str] = None,
        sort_dir: Optional[str] = None,
    ) -> "WorkItemQuery":
        """
        Build a query from raw caller input.

        Raises:
            ValidationException: On out-of-range paging or unknown sort values
        """
        if page < 1:
            raise ValidationException("page must be >= 1.", {"page": page})
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise ValidationException(
                f"page_size must be between 1 and {MAX_PAGE_SIZE}.",
                {"page_size": page_size},
            )

        by = (sort_by or SortField.UPDATED_AT.value).strip().lower()
        try:
            parsed_by = SortField(by)
        except ValueError:
            raise ValidationException(
                "sort_by must be one of: updatedAt, priority, dueDate.",
                {"sort_by": sort_by},
            ) from None

        direction = (sort_dir or SortDirection.DESC.value).strip().lower()
        try:
            parsed_dir = SortDirection(direction)
        except ValueError:
            raise ValidationException(
                "sort_dir must be 'asc' or 'desc'.", {"sort_dir": sort_dir}
            ) from None

        return cls(
            service=service.strip() if service and service.strip() else None,
            status=status,
            assignee=assignee.strip() if assignee and assignee.strip() else None,
            page=page,
            page_size=page_size,
            sort_by=parsed_by,
            sort_dir=parsed_dir,
        )

    @property
    def effective_page(self) -> int:
        return max(self.page, 1)

    @property
    def effective_page_size(self) -> int:
        return max(self.page_size, 1)

    @property
    def offset(self) -> int:
        return (self.effective_page - 1) * self.effective_page_size


# ========== Repository Interfaces (Dependency Inversion) ==========

class IWorkItemRepository(ABC):
    """Interface for work item data access."""

    @abstractmethod
    async def add(self, item: WorkItem) -> WorkItem:
        """Store a new work item."""

    @abstractmethod
    async def get(self, item_id: UUID) -> Optional[WorkItem]:
        """Get a work item by id, or None if absent."""

    @abstractmethod
    async def list(self, query: WorkItemQuery) -> Tuple[List[WorkItem], int]:
        """Return one page of matching items and the total match count."""

    @abstractmethod
    async def list_open(self) -> List[WorkItem]:
        """Return every item whose status is not Resolved."""

    @abstractmethod
    async def update(self, item: WorkItem) -> WorkItem:
        """Persist the full state of an existing item."""

    @abstractmethod
    async def delete(self, item_id: UUID) -> None:
        """Remove an item. Missing ids are ignored."""


# ========== Application Services ==========

class WorkItemService:
    """
    Service for work item lifecycle and event ingestion.

    Every mutation is computed on a freshly loaded entity and persisted only
    once all of it has validated, so failures never reach the store.
    """

    def __init__(
        self,
        repository: IWorkItemRepository,
        rule_engine: Optional[EventRuleEngine] = None
    ):
        self._repo = repository
        self._rules = rule_engine or EventRuleEngine()

    async def create_work_item(self, request: WorkItemCreateRequest) -> WorkItem:
        item = WorkItem.create(
            request.title,
            request.service,
            request.priority,
            request.due_date,
            component=request.component,
            assignee=request.assignee,
            labels=request.labels,
        )
        await self._repo.add(item)
        logger.info(
            "Work item created",
            extra={"work_item_id": str(item.id), "service": item.service}
        )
        return item

    async def get_work_item(self, item_id: UUID) -> WorkItem:
        """
        Raises:
            ResourceNotFoundException: If the id is unknown
        """
        item = await self._repo.get(item_id)
        if item is None:
            raise ResourceNotFoundException("WorkItem", str(item_id))
        return item

    async def list_work_items(self, query: WorkItemQuery) -> Tuple[List[WorkItem], int]:
        return await self._repo.list(query)

    async def update_work_item(
        self,
        item_id: UUID,
        request: WorkItemUpdateRequest
    ) -> WorkItem:
        """
        Apply a partial update.

        Title, service, priority, status and labels change only when given.
        due_date, component and assignee may be cleared with an explicit null.
        """
        item = await self.get_work_item(item_id)
        provided = request.model_fields_set

        if request.title is not None:
            item.rename(request.title)
        if request.service is not None:
            item.move_to_service(request.service)
        if request.priority is not None:
            item.change_priority(request.priority)
        if "due_date" in provided:
            item.set_due_date(request.due_date)
        if "component" in provided:
            item.set_component(request.component)
        if "assignee" in provided:
            item.assign_to(request.assignee)
        if request.labels is not None:
            item.replace_labels(request.labels)
        if request.status is not None:
            item.set_status(request.status)

        await self._repo.update(item)
        logger.info(
            "Work item updated",
            extra={"work_item_id": str(item.id), "fields": sorted(provided)}
        )
        return item

    async def delete_work_item(self, item_id: UUID) -> None:
        await self.get_work_item(item_id)
        await self._repo.delete(item_id)
        logger.info("Work item deleted", extra={"work_item_id": str(item_id)})

    async def ingest_event(self, item_id: UUID, kind: str) -> Tuple[WorkItem, str]:
        """
        Apply the event rule for ``kind`` to a stored work item.

        Returns:
            Tuple of (updated item, applied rule tag)

        Raises:
            ResourceNotFoundException: If the id is unknown
            ValidationException: If the kind is unknown (nothing is persisted)
        """
        item = await self.get_work_item(item_id)
        applied = self._rules.apply(item, kind)
        await self._repo.update(item)

        logger.info(
            "Event rule applied",
            extra={
                "work_item_id": str(item.id),
                "kind": kind,
                "applied_rule": applied,
                "priority": item.priority.value,
                "status": item.status.value,
            }
        )
        return item, applied

    async def seed_demo_data(self) -> int:
        """Insert a handful of demo work items. Returns how many were added."""
        today = datetime.now(timezone.utc).date()
        demo = [
            ("Fix NRE in billing webhook", "billing", Priority.HIGH, today + timedelta(days=3),
             "billing-api", "alex", ["bug", "payments"]),
            ("Add rate limiting to gateway", "api-gateway", Priority.P0, today + timedelta(days=1),
             "gateway", "jamie", ["security", "p0"]),
            ("Improve docs sidebar", "docs", Priority.MEDIUM, today + timedelta(days=7),
             "docs-site", "riley", ["ux"]),
            ("Cache hot path in web", "web", Priority.LOW, None,
             "frontend", None, ["perf"]),
            ("Migrate to new auth lib", "api-gateway", Priority.HIGH, today + timedelta(days=10),
             "auth", "alex", ["tech-debt"]),
        ]

        for title, service, priority, due, component, assignee, labels in demo:
            item = WorkItem.create(
                title, service, priority, due,
                component=component, assignee=assignee, labels=labels,
            )
            await self._repo.add(item)

        logger.info("Demo data seeded", extra={"count": len(demo)})
        return len(demo)
