"""Category Service — owner-scoped CRUD, listing and guarded deletion of categories.

Invariants:
    - Every read and write is scoped to the caller; foreign rows look absent (404)
    - Each write is one transaction: validate, mutate, commit, or nothing at all
    - delete() reads the category FOR UPDATE before counting references, and task
      writes lock the same row before attaching to it

Design Decisions:
    - Drafts merge request fields over the current row, so core sees the full
      candidate state on partial updates
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.core.authorization import Caller, ensure_owned
from taskvault.core.deletion_guard import check_deletable, ensure_deletable
from taskvault.core.domain_types import ResourceKind
from taskvault.core.enforce_entities import (
    CategoryDraft, apply_category_defaults, ensure_valid, validate_category,
)
from taskvault.core.errors import ErrorContext
from taskvault.core.query_spec import (
    CategoryListParams, PageMeta, build_category_query, compute_page_meta,
)
from taskvault.models.category import Category
from taskvault.models.task import Task
from taskvault.schemas.category import CategoryResponse
from taskvault.services.render_query import render_count, render_page
from taskvault.services.task_counts import TaskCounts, count_tasks_by_category

logger = logging.getLogger(__name__)

_FIELDS = ("name", "description", "color")


class CategoryService:
    """Category operations for one resolved caller."""

    def __init__(self, db: AsyncSession, caller: Caller):
        self.db = db
        self.caller = caller

    async def list_page(
        self, params: CategoryListParams,
    ) -> tuple[list[CategoryResponse], PageMeta]:
        spec = build_category_query(self.caller.id, params)
        total = await self.db.scalar(render_count(spec)) or 0
        rows = []
        if spec.window.offset < total:
            rows = (await self.db.execute(render_page(spec))).scalars().all()
        return await self._present(rows), compute_page_meta(spec.window, total)

    async def get(self, category_id: UUID) -> CategoryResponse:
        category = await self._get_owned(category_id)
        return (await self._present([category]))[0]

    async def create(self, changes: dict) -> CategoryResponse:
        draft = apply_category_defaults(CategoryDraft(
            name=changes.get("name"),
            description=changes.get("description"),
            color=changes.get("color"),
        ))
        name_taken = await self._name_taken(draft.name)
        ensure_valid(validate_category(draft, name_taken=name_taken))

        category = Category(
            user_id=self.caller.id,
            name=draft.name,
            description=draft.description,
            color=draft.color,
        )
        self.db.add(category)
        await self.db.commit()
        logger.info(
            f"Category {category.id} created",
            extra={"caller_id": str(self.caller.id), "resource": "category"},
        )
        return (await self._present([category]))[0]

    async def update(self, category_id: UUID, changes: dict) -> CategoryResponse:
        category = await self._get_owned(category_id, lock=True)
        current = CategoryDraft(
            name=category.name,
            description=category.description,
            color=category.color,
        )
        draft = replace(current, **{k: changes[k] for k in _FIELDS if k in changes})
        name_taken = (
            draft.name != category.name
            and await self._name_taken(draft.name, exclude_id=category.id)
        )
        ensure_valid(validate_category(draft, name_taken=name_taken))

        category.name = draft.name
        category.description = draft.description
        category.color = draft.color
        await self.db.commit()
        return (await self._present([category]))[0]

    async def delete(self, category_id: UUID) -> None:
        """Guarded delete: refuses while any task still points at the category."""
        category = await self._get_owned(category_id, lock=True)
        references = await self.db.scalar(
            select(func.count(Task.id)).where(Task.category_id == category.id),
        ) or 0
        ensure_deletable(ResourceKind.CATEGORY.value, references, ErrorContext(
            caller_id=str(self.caller.id),
            resource="category", resource_id=str(category.id),
        ))
        await self.db.delete(category)
        await self.db.commit()
        logger.info(
            f"Category {category_id} deleted",
            extra={"caller_id": str(self.caller.id), "resource": "category"},
        )

    # ─── helpers ────────────────────────────────────────────────

    async def _get_owned(self, category_id: UUID, lock: bool = False) -> Category:
        query = select(Category).where(Category.id == category_id)
        if lock:
            query = query.with_for_update()
        category = (await self.db.execute(query)).scalar_one_or_none()
        ensure_owned(
            self.caller, category.user_id if category else None,
            ResourceKind.CATEGORY.value, category_id,
        )
        return category

    async def _name_taken(
        self, name: str | None, exclude_id: UUID | None = None,
    ) -> bool:
        if not name:
            return False
        query = select(Category.id).where(
            Category.user_id == self.caller.id, Category.name == name,
        )
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        return (await self.db.execute(query)).first() is not None

    async def _present(self, categories) -> list[CategoryResponse]:
        now = datetime.now(timezone.utc)
        counts = await count_tasks_by_category(
            self.db, [c.id for c in categories], now,
        )
        return [
            present_category(c, counts.get(c.id, TaskCounts()))
            for c in categories
        ]


def present_category(category: Category, counts: TaskCounts) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        description=category.description,
        color=category.color,
        tasks_count=counts.total,
        active_tasks_count=counts.active,
        completed_tasks_count=counts.completed,
        overdue_tasks_count=counts.overdue,
        has_tasks=counts.total > 0,
        can_delete=not check_deletable(ResourceKind.CATEGORY.value, counts.total),
        user_id=category.user_id,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )
