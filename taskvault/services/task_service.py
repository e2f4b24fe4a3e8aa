"""Task Service — owner-scoped task CRUD, tag assignment and lifecycle transitions.

Invariants:
    - Every read and write is scoped to the caller; foreign tasks look absent (404)
    - A write is one aggregate transaction: the task row plus its task_tags rows
    - The category being attached and the tags being linked are read FOR UPDATE,
      so a concurrent guarded delete of either serializes with this write
    - Every insert into task_tags passes validate_task_link first
    - Transitions re-validate the task (due_date rule) before persisting

Design Decisions:
    - tag_ids replace the tag set; unknown or foreign ids are dropped silently
    - PUT/PATCH may set status directly; the named transitions are the guarded path
    - Category and tag summaries are loaded with two batched queries per page
"""

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.core.authorization import Caller, ensure_owned
from taskvault.core.domain_types import ResourceKind, TaskAction
from taskvault.core.enforce_entities import (
    TaskDraft, apply_task_defaults, ensure_valid, validate_task, validate_task_link,
)
from taskvault.core.query_spec import (
    PageMeta, TaskListParams, build_task_query, compute_page_meta,
)
from taskvault.core.tag_usage import TagRef, plan_tag_links
from taskvault.core.task_facts import (
    as_utc, days_until_due, is_due_soon, is_high_priority, is_overdue,
    priority_label, status_label,
)
from taskvault.core.task_lifecycle import apply_transition
from taskvault.models.category import Category
from taskvault.models.tag import Tag
from taskvault.models.task import Task
from taskvault.models.task_tag import TaskTag
from taskvault.schemas.category import CategorySummary
from taskvault.schemas.tag import TagSummary
from taskvault.schemas.task import TaskResponse
from taskvault.services.render_query import render_count, render_page

logger = logging.getLogger(__name__)

_FIELDS = ("title", "description", "status", "priority", "due_date", "category_id")


def _draft_from_row(task: Task) -> TaskDraft:
    return TaskDraft(
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        due_date=as_utc(task.due_date) if task.due_date else None,
        category_id=task.category_id,
    )


class TaskService:
    """Task operations for one resolved caller."""

    def __init__(self, db: AsyncSession, caller: Caller):
        self.db = db
        self.caller = caller

    async def list_page(
        self, params: TaskListParams, status_scope: str | None = None,
    ) -> tuple[list[TaskResponse], PageMeta]:
        now = datetime.now(timezone.utc)
        spec = build_task_query(self.caller.id, params, now, status_scope)
        total = await self.db.scalar(render_count(spec)) or 0
        rows = []
        if spec.window.offset < total:
            rows = (await self.db.execute(render_page(spec))).scalars().all()
        return await self._present(rows, now), compute_page_meta(spec.window, total)

    async def get(self, task_id: UUID) -> TaskResponse:
        task = await self._get_owned(task_id)
        return (await self._present([task]))[0]

    async def create(self, changes: dict) -> TaskResponse:
        draft = apply_task_defaults(TaskDraft(
            **{k: changes.get(k) for k in _FIELDS},
        ))
        category_owned = await self._lock_category(draft.category_id)
        ensure_valid(validate_task(draft, category_owned=category_owned))

        task = Task(
            user_id=self.caller.id,
            title=draft.title,
            description=draft.description,
            status=draft.status,
            priority=draft.priority,
            due_date=draft.due_date,
            category_id=draft.category_id,
        )
        self.db.add(task)
        await self.db.flush()
        if changes.get("tag_ids"):
            await self._replace_tags(task, changes["tag_ids"])
        await self.db.commit()
        logger.info(
            f"Task {task.id} created",
            extra={"caller_id": str(self.caller.id), "resource": "task"},
        )
        return (await self._present([task]))[0]

    async def update(self, task_id: UUID, changes: dict) -> TaskResponse:
        task = await self._get_owned(task_id, lock=True)
        draft = apply_task_defaults(replace(
            _draft_from_row(task),
            **{k: changes[k] for k in _FIELDS if k in changes},
        ))
        category_owned = True
        if draft.category_id != task.category_id:
            category_owned = await self._lock_category(draft.category_id)
        ensure_valid(validate_task(draft, category_owned=category_owned))

        task.title = draft.title
        task.description = draft.description
        task.status = draft.status
        task.priority = draft.priority
        task.due_date = draft.due_date
        task.category_id = draft.category_id
        if "tag_ids" in changes:
            await self._replace_tags(task, changes["tag_ids"] or [])
        await self.db.commit()
        return (await self._present([task]))[0]

    async def delete(self, task_id: UUID) -> None:
        task = await self._get_owned(task_id, lock=True)
        await self.db.delete(task)
        await self.db.commit()
        logger.info(
            f"Task {task_id} deleted",
            extra={"caller_id": str(self.caller.id), "resource": "task"},
        )

    async def transition(self, task_id: UUID, action: TaskAction) -> TaskResponse:
        """Apply a lifecycle action. Disallowed complete/cancel/start are no-ops."""
        task = await self._get_owned(task_id, lock=True)
        draft, transition = apply_transition(_draft_from_row(task), action)
        if transition.changed:
            task.status = draft.status
            await self.db.commit()
            logger.info(
                f"Task {task.id} {transition.from_status.value} -> "
                f"{transition.to_status.value}",
                extra={
                    "caller_id": str(self.caller.id),
                    "resource": "task", "operation": action.value,
                },
            )
        return (await self._present([task]))[0]

    # ─── helpers ────────────────────────────────────────────────

    async def _get_owned(self, task_id: UUID, lock: bool = False) -> Task:
        query = select(Task).where(Task.id == task_id)
        if lock:
            query = query.with_for_update()
        task = (await self.db.execute(query)).scalar_one_or_none()
        ensure_owned(
            self.caller, task.user_id if task else None,
            ResourceKind.TASK.value, task_id,
        )
        return task

    async def _lock_category(self, category_id: UUID | None) -> bool:
        """True when category_id is None or names one of the caller's categories."""
        if category_id is None:
            return True
        owner_id = await self.db.scalar(
            select(Category.user_id)
            .where(Category.id == category_id)
            .with_for_update(),
        )
        return owner_id == self.caller.id

    async def _replace_tags(self, task: Task, tag_ids: list[UUID]) -> None:
        rows = (await self.db.execute(
            select(Tag.id, Tag.user_id)
            .where(Tag.id.in_(list(tag_ids)))
            .with_for_update(),
        )).all() if tag_ids else []
        owners = {tag_id: owner_id for tag_id, owner_id in rows}
        current = (await self.db.execute(
            select(TaskTag.tag_id).where(TaskTag.task_id == task.id),
        )).scalars().all()

        plan = plan_tag_links(
            task.user_id, current,
            [TagRef(id=tag_id, owner_id=owner_id) for tag_id, owner_id in rows],
        )
        if plan.to_remove:
            await self.db.execute(
                delete(TaskTag).where(
                    TaskTag.task_id == task.id,
                    TaskTag.tag_id.in_(plan.to_remove),
                ),
            )
        for tag_id in plan.to_add:
            ensure_valid(validate_task_link(
                task.user_id, owners[tag_id], already_linked=tag_id in current,
            ))
            self.db.add(TaskTag(task_id=task.id, tag_id=tag_id))
        await self.db.flush()

    async def _present(
        self, tasks, now: datetime | None = None,
    ) -> list[TaskResponse]:
        now = now or datetime.now(timezone.utc)
        category_ids = {t.category_id for t in tasks if t.category_id}
        categories = {}
        if category_ids:
            result = await self.db.execute(
                select(Category).where(Category.id.in_(category_ids)),
            )
            categories = {c.id: c for c in result.scalars().all()}

        tags_by_task: dict[UUID, list[TagSummary]] = defaultdict(list)
        if tasks:
            result = await self.db.execute(
                select(TaskTag.task_id, Tag)
                .join(Tag, Tag.id == TaskTag.tag_id)
                .where(TaskTag.task_id.in_([t.id for t in tasks]))
                .order_by(Tag.name, Tag.id),
            )
            for task_id, tag in result.all():
                tags_by_task[task_id].append(
                    TagSummary(id=tag.id, name=tag.name, color=tag.color),
                )

        return [
            present_task(t, categories.get(t.category_id), tags_by_task[t.id], now)
            for t in tasks
        ]


def present_task(
    task: Task,
    category: Category | None,
    tags: list[TagSummary],
    now: datetime,
) -> TaskResponse:
    due_date = as_utc(task.due_date) if task.due_date else None
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        status_label=status_label(task.status),
        priority=task.priority,
        priority_label=priority_label(task.priority),
        due_date=due_date,
        days_until_due=days_until_due(due_date, now),
        overdue=is_overdue(due_date, task.status, now),
        due_soon=is_due_soon(due_date, task.status, now),
        high_priority=is_high_priority(task.priority),
        user_id=task.user_id,
        category=(
            CategorySummary(id=category.id, name=category.name, color=category.color)
            if category else None
        ),
        tags=tags,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )
