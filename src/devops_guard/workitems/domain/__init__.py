"""
Work Item Domain Layer
======================

Contains:
- Entities: WorkItem with its Priority and WorkItemStatus enums
- Rules: EventRuleEngine mapping external events to state changes

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from devops_guard.workitems.domain.entities import (
    WorkItem,
    Priority,
    WorkItemStatus,
    normalize_labels,
)
from devops_guard.workitems.domain.rules import (
    EventKind,
    EventRule,
    EventRuleEngine,
    RULES,
)

__all__ = [
    # Entities
    "WorkItem",
    "Priority",
    "WorkItemStatus",
    "normalize_labels",
    # Rules
    "EventKind",
    "EventRule",
    "EventRuleEngine",
    "RULES",
]
