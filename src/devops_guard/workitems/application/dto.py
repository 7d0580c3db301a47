"""
Work Item Application DTOs
===========================

Data Transfer Objects for the work item API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses.
"""

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from devops_guard.workitems.domain import (
    Priority,
    WorkItem,
    WorkItemStatus,
)
from devops_guard.workitems.domain.entities import (
    ASSIGNEE_MAX_LENGTH,
    COMPONENT_MAX_LENGTH,
    LABEL_MAX_LENGTH,
    MAX_LABELS,
    SERVICE_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)


def _check_labels(labels: Optional[List[str]]) -> Optional[List[str]]:
    if labels is None:
        return labels
    labels = [label for label in labels if label]
    if len(labels) > MAX_LABELS:
        raise ValueError(f"Too many labels (max {MAX_LABELS}).")
    for label in labels:
        if len(label) > LABEL_MAX_LENGTH:
            raise ValueError(f"Each label must be <= {LABEL_MAX_LENGTH} chars.")
    return labels


# ========== Request DTOs ==========

class WorkItemCreateRequest(BaseModel):
    """DTO for creating a work item. Text is trimmed before length checks."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., max_length=TITLE_MAX_LENGTH, description="Short summary")
    service: str = Field(..., max_length=SERVICE_MAX_LENGTH, description="Owning service")
    priority: Priority = Field(..., description="Low, Medium, High or P0")
    due_date: Optional[date] = Field(None, description="Calendar due date")
    component: Optional[str] = Field(None, max_length=COMPONENT_MAX_LENGTH)
    assignee: Optional[str] = Field(None, max_length=ASSIGNEE_MAX_LENGTH)
    labels: Optional[List[str]] = Field(None, description="Free-form labels")

    @field_validator("title", "service")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("labels")
    @classmethod
    def validate_labels(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _check_labels(v)


class WorkItemUpdateRequest(BaseModel):
    """DTO for partially updating a work item. Absent fields are left alone."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, max_length=TITLE_MAX_LENGTH)
    service: Optional[str] = Field(None, max_length=SERVICE_MAX_LENGTH)
    priority: Optional[Priority] = None
    due_date: Optional[date] = None
    component: Optional[str] = Field(None, max_length=COMPONENT_MAX_LENGTH)
    assignee: Optional[str] = Field(None, max_length=ASSIGNEE_MAX_LENGTH)
    labels: Optional[List[str]] = None
    status: Optional[WorkItemStatus] = None

    @field_validator("title", "service")
    @classmethod
    def validate_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("cannot be empty")
        return v

    @field_validator("labels")
    @classmethod
    def validate_labels(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _check_labels(v)


class EventIngestRequest(BaseModel):
    """External event (CI/CD, incident) targeting a work item."""
    work_item_id: UUID = Field(..., description="Target work item")
    kind: str = Field(
        ...,
        min_length=1,
        description="build_failed | incident_opened | deploy_succeeded | coverage_dropped"
    )
    source: Optional[str] = Field(None, description="e.g. github-actions, pagerduty")
    message: Optional[str] = Field(None, description="Free text")
    occurred_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event happened"
    )

    @field_validator("occurred_at")
    @classmethod
    def validate_occurred_at(cls, v: datetime) -> datetime:
        """Reject timestamps in the far future."""
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        if v > datetime.now(timezone.utc) + timedelta(minutes=5):
            raise ValueError("occurred_at cannot be in the far future")
        return v


# ========== Response DTOs ==========

class WorkItemResponse(BaseModel):
    """Response model for a single work item."""
    id: UUID
    title: str
    service: str
    priority: Priority
    due_date: Optional[date]
    status: WorkItemStatus
    component: Optional[str]
    assignee: Optional[str]
    labels: List[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, item: WorkItem) -> "WorkItemResponse":
        return cls(
            id=item.id,
            title=item.title,
            service=item.service,
            priority=item.priority,
            due_date=item.due_date,
            status=item.status,
            component=item.component,
            assignee=item.assignee,
            labels=list(item.labels),
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


class WorkItemListResponse(BaseModel):
    """Paged list of work items."""
    page: int
    page_size: int
    total: int = Field(..., description="Matching items before paging")
    items: List[WorkItemResponse]


class EventIngestResponse(BaseModel):
    """Outcome of applying an event rule."""
    work_item_id: UUID
    applied_rule: str = Field(..., description="e.g. raised_to_high_and_in_progress")


class SeedResponse(BaseModel):
    seeded: int
