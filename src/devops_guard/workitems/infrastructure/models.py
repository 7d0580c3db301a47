"""
Work Item Infrastructure Models
================================

SQLAlchemy ORM models for the work item module.

These are the database representations of our domain entities.
They belong in the infrastructure layer, not the domain layer.
"""

from datetime import date, datetime, timezone
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Date, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from devops_guard.infrastructure.database import Base
from devops_guard.workitems.domain import Priority, WorkItem, WorkItemStatus


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class WorkItemModel(Base):
    """
    Database model for WorkItem entity.

    Maps to the 'work_items' table. Priority is stored as its ordinal rank
    so ORDER BY priority sorts Low < Medium < High < P0.
    """
    __tablename__ = "work_items"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    service: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=WorkItemStatus.OPEN.value, index=True
    )
    component: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    assignee: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    labels: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True
    )

    @classmethod
    def from_entity(cls, item: WorkItem) -> "WorkItemModel":
        model = cls(id=item.id)
        model.copy_from(item)
        return model

    def copy_from(self, item: WorkItem) -> None:
        self.title = item.title
        self.service = item.service
        self.priority = item.priority.rank
        self.due_date = item.due_date
        self.status = item.status.value
        self.component = item.component
        self.assignee = item.assignee
        self.labels = list(item.labels)
        self.created_at = item.created_at
        self.updated_at = item.updated_at

    def to_entity(self) -> WorkItem:
        return WorkItem(
            id=self.id,
            title=self.title,
            service=self.service,
            priority=Priority.from_rank(self.priority),
            status=WorkItemStatus(self.status),
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
            due_date=self.due_date,
            component=self.component,
            assignee=self.assignee,
            labels=list(self.labels or []),
        )
