"""
Work Item Infrastructure Layer
==============================

Infrastructure implementations for work items:
- Models: SQLAlchemy ORM models
- Repositories: in-memory and SQL data access
"""

from devops_guard.workitems.infrastructure.models import WorkItemModel
from devops_guard.workitems.infrastructure.repositories import (
    InMemoryWorkItemRepository,
    SQLAlchemyWorkItemRepository,
)

__all__ = [
    "WorkItemModel",
    "InMemoryWorkItemRepository",
    "SQLAlchemyWorkItemRepository",
]
