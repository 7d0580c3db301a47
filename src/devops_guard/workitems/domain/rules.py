"""
Event Rules
===========

Deterministic mapping from external signals (CI/CD, incident tooling) to
work item state changes.

Each rule is a pure function of the item's current state and the event
kind. A rule either applies completely, with a single updated_at refresh,
or not at all.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from devops_guard.core import ValidationException
from devops_guard.workitems.domain.entities import Priority, WorkItem, WorkItemStatus


class EventKind(str, Enum):
    """Supported external event kinds."""
    BUILD_FAILED = "build_failed"
    INCIDENT_OPENED = "incident_opened"
    DEPLOY_SUCCEEDED = "deploy_succeeded"
    COVERAGE_DROPPED = "coverage_dropped"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "EventKind":
        """
        Normalize (trim, lower-case) and parse an event kind.

        Raises:
            ValidationException: If the kind is not recognised
        """
        normalized = (raw or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            raise ValidationException(
                "Unknown event kind.",
                {"kind": raw, "allowed": [kind.value for kind in cls]},
            ) from None


@dataclass(frozen=True)
class EventRule:
    """
    One row of the rule table.

    Attributes:
        label: Label added (idempotently) to the item
        priority_floor: Minimum priority after the rule; raised only if below
        force_priority: Set priority unconditionally instead of flooring
        status: Status to set, or None to leave unchanged
        tag: Applied-rule tag reported back to the caller
    """
    label: str
    tag: str
    priority_floor: Optional[Priority] = None
    force_priority: Optional[Priority] = None
    status: Optional[WorkItemStatus] = None

    def target_priority(self, current: Priority) -> Priority:
        if self.force_priority is not None:
            return self.force_priority
        if self.priority_floor is not None:
            return current.at_least(self.priority_floor)
        return current


RULES: Dict[EventKind, EventRule] = {
    EventKind.BUILD_FAILED: EventRule(
        label="build-failed",
        priority_floor=Priority.HIGH,
        status=WorkItemStatus.IN_PROGRESS,
        tag="raised_to_high_and_in_progress",
    ),
    EventKind.INCIDENT_OPENED: EventRule(
        label="incident",
        force_priority=Priority.P0,
        status=WorkItemStatus.BLOCKED,
        tag="p0_and_blocked",
    ),
    EventKind.DEPLOY_SUCCEEDED: EventRule(
        label="deploy-ok",
        tag="noted_deploy_ok",
    ),
    EventKind.COVERAGE_DROPPED: EventRule(
        label="qa",
        priority_floor=Priority.MEDIUM,
        tag="raised_to_minimum_medium",
    ),
}


class EventRuleEngine:
    """
    Applies event rules to work items.

    Stateless; safe to share between requests.
    """

    def __init__(self, rules: Optional[Dict[EventKind, EventRule]] = None):
        self._rules = rules or RULES

    def rule_for(self, kind: str | EventKind) -> EventRule:
        parsed = kind if isinstance(kind, EventKind) else EventKind.parse(kind)
        return self._rules[parsed]

    def apply(self, item: WorkItem, kind: str | EventKind) -> str:
        """
        Apply the rule for ``kind`` to ``item`` in place.

        Returns:
            The applied-rule tag (not persisted on the entity)

        Raises:
            ValidationException: Unknown kind, or the label would exceed
                the label limit. The item is left untouched.
        """
        rule = self.rule_for(kind)

        # Compute everything first so a failure cannot leave a half-applied rule
        labels = item.with_label(rule.label)
        priority = rule.target_priority(item.priority)
        status = rule.status or item.status

        item.labels = labels
        item.priority = priority
        item.status = status
        item.touch()

        return rule.tag
