"""Task Counts — grouped task tallies behind the category, tag and user representations.

Invariants:
    - One grouped query per page of rows, never one query per row
    - Ids with no tasks are absent from the result; callers default to TaskCounts()
    - "overdue" uses the same predicate as the list filter and the stats view
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.core.domain_types import ACTIVE_STATUSES, TaskStatus
from taskvault.models.task import Task
from taskvault.models.task_tag import TaskTag
from taskvault.services.render_query import overdue_clause


@dataclass(frozen=True)
class TaskCounts:
    total: int = 0
    active: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0


def _tally_columns(now: datetime) -> list:
    def _sum(condition):
        return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

    return [
        func.count(Task.id),
        _sum(Task.status.in_([s.value for s in ACTIVE_STATUSES])),
        _sum(Task.status == TaskStatus.COMPLETED.value),
        _sum(Task.status == TaskStatus.PENDING.value),
        _sum(overdue_clause(now)),
    ]


def _to_counts(rows) -> dict[UUID, TaskCounts]:
    return {
        row[0]: TaskCounts(
            total=row[1], active=row[2], completed=row[3],
            pending=row[4], overdue=row[5],
        )
        for row in rows
    }


async def count_tasks_by_category(
    db: AsyncSession, category_ids: Iterable[UUID], now: datetime,
) -> dict[UUID, TaskCounts]:
    ids = list(category_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Task.category_id, *_tally_columns(now))
        .where(Task.category_id.in_(ids))
        .group_by(Task.category_id),
    )
    return _to_counts(result.all())


async def count_tasks_by_tag(
    db: AsyncSession, tag_ids: Iterable[UUID], now: datetime,
) -> dict[UUID, TaskCounts]:
    ids = list(tag_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(TaskTag.tag_id, *_tally_columns(now))
        .join(Task, Task.id == TaskTag.task_id)
        .where(TaskTag.tag_id.in_(ids))
        .group_by(TaskTag.tag_id),
    )
    return _to_counts(result.all())


async def count_tasks_for_user(
    db: AsyncSession, user_id: UUID, now: datetime,
) -> TaskCounts:
    result = await db.execute(
        select(Task.user_id, *_tally_columns(now))
        .where(Task.user_id == user_id)
        .group_by(Task.user_id),
    )
    return _to_counts(result.all()).get(user_id, TaskCounts())


async def count_owner_tasks(db: AsyncSession, user_id: UUID) -> int:
    return await db.scalar(
        select(func.count(Task.id)).where(Task.user_id == user_id),
    ) or 0
