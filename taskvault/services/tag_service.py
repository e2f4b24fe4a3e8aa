"""Tag Service — owner-scoped CRUD, listing (incl. popular) and guarded deletion of tags.

Invariants:
    - Every read and write is scoped to the caller; foreign rows look absent (404)
    - usage_percentage is computed against the owner's total task count at read time
    - delete() locks the tag row before counting task_tags references

Design Decisions:
    - popular=true is two-phase: tally the owner's tags in one grouped query,
      select ids in core (tag_usage), then hand the ids to the query spec
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
    TagDraft, apply_tag_defaults, ensure_valid, validate_tag,
)
from taskvault.core.errors import ErrorContext
from taskvault.core.query_spec import (
    PageMeta, TagListParams, build_tag_query, compute_page_meta,
)
from taskvault.core.tag_usage import select_popular_tag_ids, usage_percentage
from taskvault.models.tag import Tag
from taskvault.models.task_tag import TaskTag
from taskvault.schemas.tag import TagResponse
from taskvault.services.render_query import render_count, render_page
from taskvault.services.task_counts import (
    TaskCounts, count_owner_tasks, count_tasks_by_tag,
)

logger = logging.getLogger(__name__)

_FIELDS = ("name", "color")


class TagService:
    """Tag operations for one resolved caller."""

    def __init__(self, db: AsyncSession, caller: Caller):
        self.db = db
        self.caller = caller

    async def list_page(
        self, params: TagListParams,
    ) -> tuple[list[TagResponse], PageMeta]:
        popular_ids = None
        if params.popular:
            popular_ids = await self._popular_ids()
        spec = build_tag_query(self.caller.id, params, popular_ids)
        total = await self.db.scalar(render_count(spec)) or 0
        rows = []
        if spec.window.offset < total:
            rows = (await self.db.execute(render_page(spec))).scalars().all()
        return await self._present(rows), compute_page_meta(spec.window, total)

    async def get(self, tag_id: UUID) -> TagResponse:
        tag = await self._get_owned(tag_id)
        return (await self._present([tag]))[0]

    async def create(self, changes: dict) -> TagResponse:
        draft = apply_tag_defaults(TagDraft(
            name=changes.get("name"), color=changes.get("color"),
        ))
        ensure_valid(validate_tag(
            draft, name_taken=await self._name_taken(draft.name),
        ))

        tag = Tag(user_id=self.caller.id, name=draft.name, color=draft.color)
        self.db.add(tag)
        await self.db.commit()
        logger.info(
            f"Tag {tag.id} created",
            extra={"caller_id": str(self.caller.id), "resource": "tag"},
        )
        return (await self._present([tag]))[0]

    async def update(self, tag_id: UUID, changes: dict) -> TagResponse:
        tag = await self._get_owned(tag_id, lock=True)
        draft = replace(
            TagDraft(name=tag.name, color=tag.color),
            **{k: changes[k] for k in _FIELDS if k in changes},
        )
        name_taken = (
            draft.name != tag.name
            and await self._name_taken(draft.name, exclude_id=tag.id)
        )
        ensure_valid(validate_tag(draft, name_taken=name_taken))

        tag.name = draft.name
        tag.color = draft.color
        await self.db.commit()
        return (await self._present([tag]))[0]

    async def delete(self, tag_id: UUID) -> None:
        tag = await self._get_owned(tag_id, lock=True)
        references = await self.db.scalar(
            select(func.count(TaskTag.id)).where(TaskTag.tag_id == tag.id),
        ) or 0
        ensure_deletable(ResourceKind.TAG.value, references, ErrorContext(
            caller_id=str(self.caller.id),
            resource="tag", resource_id=str(tag.id),
        ))
        await self.db.delete(tag)
        await self.db.commit()
        logger.info(
            f"Tag {tag_id} deleted",
            extra={"caller_id": str(self.caller.id), "resource": "tag"},
        )

    # ─── helpers ────────────────────────────────────────────────

    async def _get_owned(self, tag_id: UUID, lock: bool = False) -> Tag:
        query = select(Tag).where(Tag.id == tag_id)
        if lock:
            query = query.with_for_update()
        tag = (await self.db.execute(query)).scalar_one_or_none()
        ensure_owned(
            self.caller, tag.user_id if tag else None,
            ResourceKind.TAG.value, tag_id,
        )
        return tag

    async def _name_taken(
        self, name: str | None, exclude_id: UUID | None = None,
    ) -> bool:
        if not name:
            return False
        query = select(Tag.id).where(Tag.user_id == self.caller.id, Tag.name == name)
        if exclude_id is not None:
            query = query.where(Tag.id != exclude_id)
        return (await self.db.execute(query)).first() is not None

    async def _popular_ids(self) -> frozenset[UUID]:
        result = await self.db.execute(
            select(TaskTag.tag_id, func.count(TaskTag.id))
            .join(Tag, Tag.id == TaskTag.tag_id)
            .where(Tag.user_id == self.caller.id)
            .group_by(TaskTag.tag_id),
        )
        counts = {tag_id: count for tag_id, count in result.all()}
        owner_total = await count_owner_tasks(self.db, self.caller.id)
        return select_popular_tag_ids(counts, owner_total)

    async def _present(self, tags) -> list[TagResponse]:
        now = datetime.now(timezone.utc)
        counts = await count_tasks_by_tag(self.db, [t.id for t in tags], now)
        owner_total = await count_owner_tasks(self.db, self.caller.id) if tags else 0
        return [
            present_tag(t, counts.get(t.id, TaskCounts()), owner_total)
            for t in tags
        ]


def present_tag(tag: Tag, counts: TaskCounts, owner_total: int) -> TagResponse:
    return TagResponse(
        id=tag.id,
        name=tag.name,
        color=tag.color,
        tasks_count=counts.total,
        active_tasks_count=counts.active,
        completed_tasks_count=counts.completed,
        overdue_tasks_count=counts.overdue,
        has_tasks=counts.total > 0,
        can_delete=not check_deletable(ResourceKind.TAG.value, counts.total),
        usage_percentage=usage_percentage(counts.total, owner_total),
        user_id=tag.user_id,
        created_at=tag.created_at,
        updated_at=tag.updated_at,
    )
