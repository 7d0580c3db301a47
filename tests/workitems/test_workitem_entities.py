"""Tests for the WorkItem entity and priority ordering."""

from datetime import date, datetime, timedelta, timezone

import pytest

from devops_guard.core import ValidationException
from devops_guard.workitems.domain import Priority, WorkItem, WorkItemStatus


class TestCreate:
    """WorkItem.create tests."""

    def test_defaults(self):
        item = WorkItem.create("  Fix login  ", " auth ", Priority.HIGH)

        assert item.title == "Fix login"
        assert item.service == "auth"
        assert item.status == WorkItemStatus.OPEN
        assert item.labels == []
        assert item.updated_at == item.created_at
        assert item.created_at.tzinfo is not None

    def test_optional_fields_trimmed_and_blank_becomes_none(self):
        item = WorkItem.create(
            "Fix login", "auth", Priority.LOW,
            component="   ", assignee=" sam ", labels=[" bug ", "", "  "],
        )

        assert item.component is None
        assert item.assignee == "sam"
        assert item.labels == ["bug"]

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_blank_title_rejected(self, title):
        with pytest.raises(ValidationException):
            WorkItem.create(title, "auth", Priority.LOW)

    def test_title_length_limit(self):
        WorkItem.create("x" * 200, "auth", Priority.LOW)
        with pytest.raises(ValidationException):
            WorkItem.create("x" * 201, "auth", Priority.LOW)

    def test_service_length_limit(self):
        with pytest.raises(ValidationException):
            WorkItem.create("ok", "s" * 101, Priority.LOW)

    def test_label_limits(self):
        with pytest.raises(ValidationException):
            WorkItem.create("ok", "auth", Priority.LOW, labels=["l" * 31])
        with pytest.raises(ValidationException):
            WorkItem.create("ok", "auth", Priority.LOW, labels=[f"l{i}" for i in range(21)])

        item = WorkItem.create("ok", "auth", Priority.LOW, labels=[f"l{i}" for i in range(20)])
        assert len(item.labels) == 20

    def test_updated_before_created_rejected(self):
        now = datetime.now(timezone.utc)
        with pytest.raises(ValidationException):
            WorkItem(
                id=WorkItem.create("a", "b", Priority.LOW).id,
                title="a",
                service="b",
                priority=Priority.LOW,
                status=WorkItemStatus.OPEN,
                created_at=now,
                updated_at=now - timedelta(seconds=1),
            )


class TestPriority:
    """Priority ordering tests."""

    def test_total_order(self):
        ranks = [p.rank for p in (Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.P0)]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 4

    def test_from_rank_roundtrip(self):
        for priority in Priority:
            assert Priority.from_rank(priority.rank) is priority

    def test_at_least(self):
        assert Priority.LOW.at_least(Priority.HIGH) == Priority.HIGH
        assert Priority.P0.at_least(Priority.HIGH) == Priority.P0
        assert Priority.MEDIUM.at_least(Priority.MEDIUM) == Priority.MEDIUM


class TestBehaviour:
    """Mutator and query tests."""

    def test_touch_never_moves_before_created(self):
        future = datetime.now(timezone.utc) + timedelta(hours=1)
        item = WorkItem.create("a", "b", Priority.LOW, now=future)

        item.rename("renamed")

        assert item.updated_at == item.created_at

    def test_mutation_refreshes_updated_at(self):
        past = datetime.now(timezone.utc) - timedelta(days=2)
        item = WorkItem.create("a", "b", Priority.LOW, now=past)

        item.change_priority(Priority.HIGH)

        assert item.priority == Priority.HIGH
        assert item.updated_at > past

    def test_failed_rename_leaves_item_unchanged(self):
        past = datetime.now(timezone.utc) - timedelta(days=2)
        item = WorkItem.create("a", "b", Priority.LOW, now=past)

        with pytest.raises(ValidationException):
            item.rename("   ")

        assert item.title == "a"
        assert item.updated_at == past

    def test_overdue(self):
        today = date(2025, 1, 15)
        item = WorkItem.create("a", "b", Priority.LOW, due_date=date(2025, 1, 12))

        assert item.is_overdue(today)
        assert item.days_overdue(today) == 3
        assert not item.is_overdue(date(2025, 1, 12))
        assert item.days_overdue(date(2025, 1, 10)) == 0

    def test_no_due_date_is_never_overdue(self):
        item = WorkItem.create("a", "b", Priority.LOW)
        assert not item.is_overdue(date(2099, 1, 1))
        assert item.days_overdue(date(2099, 1, 1)) == 0

    def test_resolved_is_not_open(self):
        item = WorkItem.create("a", "b", Priority.LOW)
        for status in (WorkItemStatus.OPEN, WorkItemStatus.IN_PROGRESS, WorkItemStatus.BLOCKED):
            item.set_status(status)
            assert item.is_open
        item.set_status(WorkItemStatus.RESOLVED)
        assert not item.is_open

    def test_with_label_is_case_insensitive_and_pure(self):
        item = WorkItem.create("a", "b", Priority.LOW, labels=["Bug"])

        assert item.with_label("bug") == ["Bug"]
        assert item.with_label("qa") == ["Bug", "qa"]
        assert item.labels == ["Bug"]
