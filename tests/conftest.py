"""Shared pytest fixtures: work item factory, repositories and a test app."""

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from devops_guard.config import Settings
from devops_guard.infrastructure.database import create_session_maker, create_tables
from devops_guard.main import create_app
from devops_guard.metrics.infrastructure import (
    InMemorySnapshotRepository,
    SQLAlchemySnapshotRepository,
)
from devops_guard.workitems.domain import Priority, WorkItem, WorkItemStatus
from devops_guard.workitems.infrastructure import (
    InMemoryWorkItemRepository,
    SQLAlchemyWorkItemRepository,
)

BASE_TIME = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
API_KEY = "test-secret"


@pytest.fixture
def make_item():
    """Factory for work items with controllable timestamps.

    ``updated_minutes`` shifts updated_at relative to BASE_TIME so ordering
    tests can place items precisely.
    """

    def _make(
        title: str = "Work item",
        service: str = "billing",
        priority: Priority = Priority.MEDIUM,
        due_date: Optional[date] = None,
        *,
        status: WorkItemStatus = WorkItemStatus.OPEN,
        assignee: Optional[str] = None,
        component: Optional[str] = None,
        labels: Optional[List[str]] = None,
        updated_minutes: int = 0,
        created_at: Optional[datetime] = None,
    ) -> WorkItem:
        updated_at = BASE_TIME + timedelta(minutes=updated_minutes)
        return WorkItem(
            id=uuid4(),
            title=title,
            service=service,
            priority=priority,
            status=status,
            created_at=created_at or (BASE_TIME - timedelta(days=30)),
            updated_at=updated_at,
            due_date=due_date,
            component=component,
            assignee=assignee,
            labels=list(labels or []),
        )

    return _make


@pytest_asyncio.fixture
async def sqlite_engine():
    """Fresh in-memory SQLite database shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(sqlite_engine):
    return create_session_maker(sqlite_engine)


@pytest.fixture(params=["memory", "sql"])
def work_item_repository(request, session_maker):
    """Runs the test against both work item stores."""
    if request.param == "memory":
        return InMemoryWorkItemRepository()
    return SQLAlchemyWorkItemRepository(session_maker)


@pytest.fixture(params=["memory", "sql"])
def snapshot_repository(request, session_maker):
    """Runs the test against both snapshot stores."""
    if request.param == "memory":
        return InMemorySnapshotRepository()
    return SQLAlchemySnapshotRepository(session_maker)


def make_settings(**overrides) -> Settings:
    values = {"use_sql": False, "api_key": None, "metrics_auto_capture": False}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def client():
    """TestClient over an in-memory app with no API key configured."""
    app = create_app(make_settings())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def secured_client():
    """TestClient over an in-memory app that requires ``API_KEY``."""
    app = create_app(make_settings(api_key=API_KEY))
    with TestClient(app) as test_client:
        yield test_client
