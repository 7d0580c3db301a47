"""
Work Item Infrastructure Repositories
======================================

Concrete implementations of the work item repository interface.

- InMemoryWorkItemRepository: process-local, guarded by a single lock
- SQLAlchemyWorkItemRepository: one session and transaction per call

Both apply the same listing rules: case-insensitive service/assignee
filters, ties on priority or due date broken by most recently updated,
items without a due date always placed last, and the item id as the
final key so equal timestamps page deterministically.

Case folding uses lower() on both sides. SQLite's built-in lower() only
folds ASCII, so on that backend non-ASCII service or assignee names
match case-sensitively; PostgreSQL folds them like Python does.
"""

import copy
import threading
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from devops_guard.core import ResourceNotFoundException
from devops_guard.infrastructure.database import unit_of_work
from devops_guard.shared.infrastructure.logging import get_logger
from devops_guard.workitems.application import (
    IWorkItemRepository,
    SortDirection,
    SortField,
    WorkItemQuery,
)
from devops_guard.workitems.domain import WorkItem, WorkItemStatus
from devops_guard.workitems.infrastructure.models import WorkItemModel

logger = get_logger(__name__)

STORE_NAME = "Work item store"


def _matches(item: WorkItem, query: WorkItemQuery) -> bool:
    if query.service and item.service.lower() != query.service.lower():
        return False
    if query.status is not None and item.status != query.status:
        return False
    if query.assignee and (item.assignee or "").lower() != query.assignee.lower():
        return False
    return True


def _sort(items: List[WorkItem], query: WorkItemQuery) -> List[WorkItem]:
    """Order items; relies on sort stability for the tie-break keys."""
    descending = query.sort_dir == SortDirection.DESC
    ordered = sorted(items, key=lambda i: i.id)

    if query.sort_by not in (SortField.PRIORITY, SortField.DUE_DATE):
        ordered.sort(key=lambda i: i.updated_at, reverse=descending)
        return ordered

    ordered.sort(key=lambda i: i.updated_at, reverse=True)

    if query.sort_by == SortField.PRIORITY:
        ordered.sort(key=lambda i: i.priority.rank, reverse=descending)
        return ordered

    dated = [i for i in ordered if i.due_date is not None]
    undated = [i for i in ordered if i.due_date is None]
    dated.sort(key=lambda i: i.due_date, reverse=descending)
    return dated + undated


class InMemoryWorkItemRepository(IWorkItemRepository):
    """
    Process-local work item store. Not durable.

    A single lock guards the backing dict. Items are copied on the way in
    and out so callers never share mutable state with the store.
    """

    def __init__(self):
        self._items: Dict[UUID, WorkItem] = {}
        self._lock = threading.Lock()

    async def add(self, item: WorkItem) -> WorkItem:
        with self._lock:
            self._items[item.id] = copy.deepcopy(item)
        return item

    async def get(self, item_id: UUID) -> Optional[WorkItem]:
        with self._lock:
            stored = self._items.get(item_id)
            return copy.deepcopy(stored) if stored is not None else None

    async def list(self, query: WorkItemQuery) -> Tuple[List[WorkItem], int]:
        with self._lock:
            snapshot = list(self._items.values())

        # Filtering, sorting and paging happen outside the lock
        matching = [item for item in snapshot if _matches(item, query)]
        ordered = _sort(matching, query)
        page = ordered[query.offset:query.offset + query.effective_page_size]

        return [copy.deepcopy(item) for item in page], len(matching)

    async def list_open(self) -> List[WorkItem]:
        with self._lock:
            snapshot = list(self._items.values())
        return [copy.deepcopy(item) for item in snapshot if item.is_open]

    async def update(self, item: WorkItem) -> WorkItem:
        with self._lock:
            if item.id not in self._items:
                raise ResourceNotFoundException("WorkItem", str(item.id))
            self._items[item.id] = copy.deepcopy(item)
        return item

    async def delete(self, item_id: UUID) -> None:
        with self._lock:
            self._items.pop(item_id, None)


class SQLAlchemyWorkItemRepository(IWorkItemRepository):
    """
    SQLAlchemy implementation of the work item repository.

    Each call opens its own session and transaction; isolation between
    concurrent callers is left to the database.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def add(self, item: WorkItem) -> WorkItem:
        async with unit_of_work(self._session_maker, STORE_NAME, "add") as session:
            session.add(WorkItemModel.from_entity(item))
        return item

    async def get(self, item_id: UUID) -> Optional[WorkItem]:
        async with unit_of_work(self._session_maker, STORE_NAME, "get") as session:
            model = await session.get(WorkItemModel, item_id)
            return model.to_entity() if model is not None else None

    async def list(self, query: WorkItemQuery) -> Tuple[List[WorkItem], int]:
        conditions = []
        if query.service:
            conditions.append(func.lower(WorkItemModel.service) == query.service.lower())
        if query.status is not None:
            conditions.append(WorkItemModel.status == query.status.value)
        if query.assignee:
            conditions.append(func.lower(WorkItemModel.assignee) == query.assignee.lower())

        count_stmt = select(func.count()).select_from(WorkItemModel).where(*conditions)
        stmt = (
            select(WorkItemModel)
            .where(*conditions)
            .order_by(*self._ordering(query))
            .offset(query.offset)
            .limit(query.effective_page_size)
        )

        async with unit_of_work(self._session_maker, STORE_NAME, "list") as session:
            total = (await session.execute(count_stmt)).scalar_one()
            result = await session.execute(stmt)
            items = [model.to_entity() for model in result.scalars().all()]

        return items, total

    async def list_open(self) -> List[WorkItem]:
        stmt = select(WorkItemModel).where(
            WorkItemModel.status != WorkItemStatus.RESOLVED.value
        )
        async with unit_of_work(self._session_maker, STORE_NAME, "list_open") as session:
            result = await session.execute(stmt)
            return [model.to_entity() for model in result.scalars().all()]

    async def update(self, item: WorkItem) -> WorkItem:
        async with unit_of_work(self._session_maker, STORE_NAME, "update") as session:
            model = await session.get(WorkItemModel, item.id)
            if model is None:
                raise ResourceNotFoundException("WorkItem", str(item.id))
            model.copy_from(item)
        return item

    async def delete(self, item_id: UUID) -> None:
        async with unit_of_work(self._session_maker, STORE_NAME, "delete") as session:
            await session.execute(delete(WorkItemModel).where(WorkItemModel.id == item_id))

    @staticmethod
    def _ordering(query: WorkItemQuery) -> list:
        descending = query.sort_dir == SortDirection.DESC
        updated = WorkItemModel.updated_at
        tie_break = WorkItemModel.id.asc()

        if query.sort_by == SortField.PRIORITY:
            column = WorkItemModel.priority
            primary = column.desc() if descending else column.asc()
            return [primary, updated.desc(), tie_break]

        if query.sort_by == SortField.DUE_DATE:
            column = WorkItemModel.due_date
            primary = column.desc() if descending else column.asc()
            return [primary.nulls_last(), updated.desc(), tie_break]

        return [updated.desc() if descending else updated.asc(), tie_break]
