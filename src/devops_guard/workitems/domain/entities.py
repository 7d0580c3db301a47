"""
Work Item Domain Entities
==========================

Pure Python domain entities for work item tracking.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns. Every mutating
method validates its input before touching any field, so a failed call
leaves the entity exactly as it was.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional
from uuid import UUID, uuid4

from devops_guard.core import ValidationException


TITLE_MAX_LENGTH = 200
SERVICE_MAX_LENGTH = 100
COMPONENT_MAX_LENGTH = 100
ASSIGNEE_MAX_LENGTH = 100
LABEL_MAX_LENGTH = 30
MAX_LABELS = 20


class Priority(str, Enum):
    """Work item priority, ordered Low < Medium < High < P0."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    P0 = "P0"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANKS[self]

    @classmethod
    def from_rank(cls, rank: int) -> "Priority":
        for priority, value in _PRIORITY_RANKS.items():
            if value == rank:
                return priority
        raise ValueError(f"Unknown priority rank: {rank}")

    def at_least(self, floor: "Priority") -> "Priority":
        """Return the higher of this priority and ``floor``."""
        return floor if self.rank < floor.rank else self


_PRIORITY_RANKS = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
    Priority.P0: 3,
}


class WorkItemStatus(str, Enum):
    """Work item lifecycle statuses."""
    OPEN = "Open"
    IN_PROGRESS = "InProgress"
    BLOCKED = "Blocked"
    RESOLVED = "Resolved"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _required_text(value: Optional[str], field_name: str, max_length: int) -> str:
    if value is None or not value.strip():
        raise ValidationException(
            f"{field_name} is required.", {"field": field_name.lower()}
        )
    value = value.strip()
    if len(value) > max_length:
        raise ValidationException(
            f"{field_name} must be at most {max_length} characters.",
            {"field": field_name.lower(), "max_length": max_length},
        )
    return value


def _optional_text(value: Optional[str], field_name: str, max_length: int) -> Optional[str]:
    if value is None or not value.strip():
        return None
    value = value.strip()
    if len(value) > max_length:
        raise ValidationException(
            f"{field_name} must be at most {max_length} characters.",
            {"field": field_name.lower(), "max_length": max_length},
        )
    return value


def normalize_labels(labels: Optional[Iterable[str]]) -> List[str]:
    """
    Trim labels and drop blanks, enforcing length and count limits.

    Raises:
        ValidationException: If a label is too long or there are too many
    """
    result = [label.strip() for label in (labels or []) if label and label.strip()]
    for label in result:
        if len(label) > LABEL_MAX_LENGTH:
            raise ValidationException(
                f"Each label must be <= {LABEL_MAX_LENGTH} chars.",
                {"field": "labels", "label": label},
            )
    if len(result) > MAX_LABELS:
        raise ValidationException(
            f"Too many labels (max {MAX_LABELS}).",
            {"field": "labels", "count": len(result)},
        )
    return result


@dataclass
class WorkItem:
    """
    Work item entity representing a trackable unit of engineering work.

    Use ``WorkItem.create`` to build new instances; the plain constructor
    is for rehydrating persisted state.
    """

    id: UUID
    title: str
    service: str
    priority: Priority
    status: WorkItemStatus
    created_at: datetime
    updated_at: datetime
    due_date: Optional[date] = None
    component: Optional[str] = None
    assignee: Optional[str] = None
    labels: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate invariants on initialization."""
        if self.updated_at < self.created_at:
            raise ValidationException("updated_at cannot be before created_at")

    @classmethod
    def create(
        cls,
        title: str,
        service: str,
        priority: Priority,
        due_date: Optional[date] = None,
        *,
        component: Optional[str] = None,
        assignee: Optional[str] = None,
        labels: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None,
    ) -> "WorkItem":
        """Create a new open work item stamped with the current UTC time."""
        now = now or _utcnow()
        return cls(
            id=uuid4(),
            title=_required_text(title, "Title", TITLE_MAX_LENGTH),
            service=_required_text(service, "Service", SERVICE_MAX_LENGTH),
            priority=Priority(priority),
            status=WorkItemStatus.OPEN,
            created_at=now,
            updated_at=now,
            due_date=due_date,
            component=_optional_text(component, "Component", COMPONENT_MAX_LENGTH),
            assignee=_optional_text(assignee, "Assignee", ASSIGNEE_MAX_LENGTH),
            labels=normalize_labels(labels),
        )

    # ========== Queries ==========

    @property
    def is_open(self) -> bool:
        """Everything that is not Resolved counts toward the backlog."""
        return self.status != WorkItemStatus.RESOLVED

    def is_overdue(self, today: date) -> bool:
        return self.due_date is not None and self.due_date < today

    def days_overdue(self, today: date) -> int:
        if self.due_date is None:
            return 0
        return max(0, (today - self.due_date).days)

    def has_label(self, label: str) -> bool:
        wanted = label.strip().casefold()
        return any(existing.casefold() == wanted for existing in self.labels)

    # ========== Behaviours ==========

    def rename(self, new_title: str) -> None:
        self.title = _required_text(new_title, "Title", TITLE_MAX_LENGTH)
        self.touch()

    def move_to_service(self, new_service: str) -> None:
        self.service = _required_text(new_service, "Service", SERVICE_MAX_LENGTH)
        self.touch()

    def change_priority(self, priority: Priority) -> None:
        self.priority = Priority(priority)
        self.touch()

    def set_status(self, status: WorkItemStatus) -> None:
        self.status = WorkItemStatus(status)
        self.touch()

    def set_due_date(self, due_date: Optional[date]) -> None:
        self.due_date = due_date
        self.touch()

    def assign_to(self, assignee: Optional[str]) -> None:
        self.assignee = _optional_text(assignee, "Assignee", ASSIGNEE_MAX_LENGTH)
        self.touch()

    def set_component(self, component: Optional[str]) -> None:
        self.component = _optional_text(component, "Component", COMPONENT_MAX_LENGTH)
        self.touch()

    def replace_labels(self, labels: Optional[Iterable[str]]) -> None:
        self.labels = normalize_labels(labels)
        self.touch()

    def with_label(self, label: str) -> List[str]:
        """
        Label list with ``label`` appended unless already present
        (case-insensitive). Existing labels are never removed.
        """
        if self.has_label(label):
            return list(self.labels)
        return normalize_labels([*self.labels, label])

    def touch(self) -> None:
        self.updated_at = max(_utcnow(), self.created_at)
