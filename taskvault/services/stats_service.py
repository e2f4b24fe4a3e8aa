"""Stats Service — counts the whole store into a StatsSnapshot.

Invariants:
    - Not owner-scoped: every user's rows are counted
    - Counts are taken at call time; nothing is cached
    - overdue / due-soon / with-tasks use the same predicates as the list filters
"""

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.core.domain_types import ResourceKind
from taskvault.core.stats_snapshot import StatsSnapshot, bucket_priority_counts
from taskvault.core.task_facts import due_soon_window
from taskvault.models.category import Category
from taskvault.models.tag import Tag
from taskvault.models.task import Task
from taskvault.models.user import User
from taskvault.schemas.stats import StatsResponse
from taskvault.services.render_query import (
    due_within_clause, has_tasks_clause, overdue_clause,
)


class StatsService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *where) -> int:
        return await self.db.scalar(
            select(func.count(model.id)).where(*where),
        ) or 0

    async def snapshot(self, now: datetime | None = None) -> StatsSnapshot:
        now = now or datetime.now(timezone.utc)
        by_status = dict((await self.db.execute(
            select(Task.status, func.count(Task.id)).group_by(Task.status),
        )).all())
        by_priority = dict((await self.db.execute(
            select(Task.priority, func.count(Task.id)).group_by(Task.priority),
        )).all())
        start, end = due_soon_window(now)

        return StatsSnapshot(
            users_total=await self._count(User),
            users_admins=await self._count(User, User.admin.is_(True)),
            tasks_total=await self._count(Task),
            tasks_by_status=by_status,
            tasks_by_priority=bucket_priority_counts(by_priority),
            tasks_overdue=await self._count(Task, overdue_clause(now)),
            tasks_due_soon=await self._count(Task, due_within_clause(start, end)),
            categories_total=await self._count(Category),
            categories_with_tasks=await self._count(
                Category, has_tasks_clause(ResourceKind.CATEGORY),
            ),
            tags_total=await self._count(Tag),
            tags_used=await self._count(Tag, has_tasks_clause(ResourceKind.TAG)),
        )

    async def get_stats(self) -> StatsResponse:
        return StatsResponse.model_validate((await self.snapshot()).to_dict())
