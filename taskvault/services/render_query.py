"""Query Rendering — the single step that turns a core QuerySpec into SQLAlchemy.

Invariants:
    - Every rendered statement is scoped by QuerySpec.owner_id
    - Count statements ignore sort and window; page statements apply both
    - Task-count sorting uses a correlated COUNT subquery (no GROUP BY), so
      LIMIT/OFFSET stay valid
    - An unknown filter kind or field for a resource raises ValueError (programming error)

Design Decisions:
    - Membership filters (tag, with/without tasks) are EXISTS/IN subqueries, so
      a row can never appear twice on a page
    - Nulls-last is rendered as (col IS NULL) ASC, col ASC: portable across
      PostgreSQL and SQLite
"""

from datetime import datetime

from sqlalchemy import ColumnElement, Select, and_, exists, func, or_, select

from taskvault.core.domain_types import ResourceKind, TaskStatus
from taskvault.core.query_spec import Filter, FilterKind, QuerySpec, SortKey
from taskvault.models.category import Category
from taskvault.models.tag import Tag
from taskvault.models.task import Task
from taskvault.models.task_tag import TaskTag


_MODELS = {
    ResourceKind.TASK: Task,
    ResourceKind.CATEGORY: Category,
    ResourceKind.TAG: Tag,
}

_EQUALITY_FIELDS = {
    ResourceKind.TASK: {"status", "priority", "category_id"},
    ResourceKind.CATEGORY: set(),
    ResourceKind.TAG: {"color"},
}


# ─── Reusable predicates ─────────────────────────────────────────

def overdue_clause(now: datetime) -> ColumnElement[bool]:
    return and_(
        Task.due_date.is_not(None),
        Task.due_date < now,
        Task.status != TaskStatus.COMPLETED.value,
    )


def due_within_clause(start: datetime, end: datetime) -> ColumnElement[bool]:
    return and_(
        Task.due_date >= start,
        Task.due_date < end,
        Task.status != TaskStatus.COMPLETED.value,
    )


def _category_task_count():
    return (
        select(func.count(Task.id))
        .where(Task.category_id == Category.id)
        .correlate(Category)
        .scalar_subquery()
    )


def _tag_task_count():
    return (
        select(func.count(TaskTag.id))
        .where(TaskTag.tag_id == Tag.id)
        .correlate(Tag)
        .scalar_subquery()
    )


def has_tasks_clause(resource: ResourceKind) -> ColumnElement[bool]:
    if resource is ResourceKind.CATEGORY:
        return exists().where(Task.category_id == Category.id)
    if resource is ResourceKind.TAG:
        return exists().where(TaskTag.tag_id == Tag.id)
    raise ValueError(f"{resource.value} has no task membership")


# ─── Filters ─────────────────────────────────────────────────────

def _render_filter(resource: ResourceKind, f: Filter) -> ColumnElement[bool]:
    model = _MODELS[resource]
    if f.kind is FilterKind.EQUALS:
        if f.field not in _EQUALITY_FIELDS[resource]:
            raise ValueError(f"Cannot filter {resource.value} by {f.field}")
        return getattr(model, f.field) == f.value
    if f.kind is FilterKind.SEARCH:
        if f.field == "title_or_description":
            return or_(
                Task.title.icontains(f.value, autoescape=True),
                Task.description.icontains(f.value, autoescape=True),
            )
        return model.name.icontains(f.value, autoescape=True)
    if f.kind is FilterKind.HAS_TAG:
        return Task.id.in_(
            select(TaskTag.task_id).where(TaskTag.tag_id == f.value),
        )
    if f.kind is FilterKind.OVERDUE:
        return overdue_clause(f.value)
    if f.kind is FilterKind.DUE_WITHIN:
        start, end = f.value
        return due_within_clause(start, end)
    if f.kind is FilterKind.WITH_TASKS:
        return has_tasks_clause(resource)
    if f.kind is FilterKind.WITHOUT_TASKS:
        return ~has_tasks_clause(resource)
    if f.kind is FilterKind.ID_IN:
        return model.id.in_(list(f.value))
    raise ValueError(f"Unknown filter kind: {f.kind}")


# ─── Sorting ─────────────────────────────────────────────────────

def _sort_column(resource: ResourceKind, key: SortKey):
    if key.field == "task_count":
        if resource is ResourceKind.CATEGORY:
            return _category_task_count()
        if resource is ResourceKind.TAG:
            return _tag_task_count()
        raise ValueError("task_count sort applies to categories and tags only")
    return getattr(_MODELS[resource], key.field)


def _render_sort(resource: ResourceKind, keys: tuple[SortKey, ...]) -> list:
    clauses = []
    for key in keys:
        column = _sort_column(resource, key)
        if key.nulls_last:
            clauses.append(column.is_(None).asc())
        clauses.append(column.desc() if key.descending else column.asc())
    return clauses


# ─── Statements ──────────────────────────────────────────────────

def render_where(spec: QuerySpec) -> list[ColumnElement[bool]]:
    model = _MODELS[spec.resource]
    clauses = [model.user_id == spec.owner_id]
    clauses += [_render_filter(spec.resource, f) for f in spec.filters]
    return clauses


def render_count(spec: QuerySpec) -> Select:
    model = _MODELS[spec.resource]
    return select(func.count(model.id)).where(*render_where(spec))


def render_page(spec: QuerySpec) -> Select:
    model = _MODELS[spec.resource]
    return (
        select(model)
        .where(*render_where(spec))
        .order_by(*_render_sort(spec.resource, spec.sort))
        .limit(spec.window.per_page)
        .offset(spec.window.offset)
    )
