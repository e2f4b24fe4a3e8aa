"""Query Specification — tests for pagination math, sort resolution and filter building.

Tests cover:
    - page/per_page clamping (never an error)
    - page meta beyond the last page
    - default and explicit sort orders, id tiebreak, due_date nulls last
    - task/category/tag filters compose into one spec
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from taskvault.core.domain_types import ResourceKind
from taskvault.core.query_spec import (
    CategoryListParams, FilterKind, PageWindow, SortKey, TagListParams,
    TaskListParams, build_category_query, build_tag_query, build_task_query,
    clamp_window, compute_page_meta,
)

NOW = datetime(2030, 6, 15, 13, 30, tzinfo=timezone.utc)
OWNER = uuid4()


# ─── pagination ──────────────────────────────────────────────────

def test_defaults_to_first_page_of_twenty():
    assert clamp_window(None, None) == PageWindow(page=1, per_page=20)


def test_per_page_150_is_clamped_to_100():
    assert clamp_window(1, 150).per_page == 100


@pytest.mark.parametrize("page, per_page, expected", [
    (0, 0, PageWindow(1, 1)),
    (-3, -5, PageWindow(1, 1)),
    (4, 100, PageWindow(4, 100)),
])
def test_window_is_clamped_silently(page, per_page, expected):
    assert clamp_window(page, per_page) == expected


def test_offset():
    assert PageWindow(page=3, per_page=20).offset == 40


def test_meta_beyond_last_page():
    meta = compute_page_meta(PageWindow(page=5, per_page=20), total_count=45)
    assert meta.total_pages == 3
    assert meta.total_count == 45
    assert meta.has_next_page is False
    assert meta.has_prev_page is True


def test_meta_middle_page():
    meta = compute_page_meta(PageWindow(page=2, per_page=20), total_count=45)
    assert meta.to_dict() == {
        "current_page": 2,
        "per_page": 20,
        "total_pages": 3,
        "total_count": 45,
        "has_next_page": True,
        "has_prev_page": True,
    }


def test_meta_empty_collection():
    meta = compute_page_meta(PageWindow(page=1, per_page=20), total_count=0)
    assert meta.total_pages == 0
    assert meta.has_next_page is False
    assert meta.has_prev_page is False


# ─── sorting ─────────────────────────────────────────────────────

def _sort(params: TaskListParams):
    return build_task_query(OWNER, params, NOW).sort


def test_task_default_sort_is_newest_first_with_id_tiebreak():
    assert _sort(TaskListParams()) == (
        SortKey("created_at", descending=True), SortKey("id"),
    )


def test_task_due_date_sort_puts_nulls_last():
    assert _sort(TaskListParams(sort_by="due_date", order="desc")) == (
        SortKey("due_date", nulls_last=True), SortKey("id"),
    )


def test_task_priority_sort_defaults_to_highest_first():
    assert _sort(TaskListParams(sort_by="priority"))[0] == SortKey("priority", descending=True)
    assert _sort(TaskListParams(sort_by="priority", order="asc"))[0] == SortKey("priority")


def test_task_title_sort():
    assert _sort(TaskListParams(sort_by="title"))[0] == SortKey("title")
    assert _sort(TaskListParams(sort_by="title", order="desc"))[0] == SortKey("title", descending=True)


def test_unknown_task_sort_falls_back_to_default():
    assert _sort(TaskListParams(sort_by="bogus")) == _sort(TaskListParams())


@pytest.mark.parametrize("sort_by", ["tasks_count", "usage"])
def test_named_resources_sort_by_task_count(sort_by):
    spec = build_tag_query(OWNER, TagListParams(sort_by=sort_by))
    assert spec.sort == (SortKey("task_count", descending=True), SortKey("id"))


def test_category_default_sort_is_name():
    spec = build_category_query(OWNER, CategoryListParams())
    assert spec.sort == (SortKey("name"), SortKey("id"))


# ─── filters ─────────────────────────────────────────────────────

def test_task_filters_compose():
    tag_id, category_id = uuid4(), uuid4()
    spec = build_task_query(OWNER, TaskListParams(
        status="pending", priority=3, category_id=category_id, tag_id=tag_id,
        overdue=True, due_soon=True, search="  milk ",
    ), NOW)
    kinds = [f.kind for f in spec.filters]
    assert spec.resource is ResourceKind.TASK
    assert spec.owner_id == OWNER
    assert kinds == [
        FilterKind.EQUALS, FilterKind.EQUALS, FilterKind.EQUALS,
        FilterKind.HAS_TAG, FilterKind.OVERDUE, FilterKind.DUE_WITHIN,
        FilterKind.SEARCH,
    ]
    assert spec.filters[-1].value == "milk"


def test_due_soon_window_spans_today_plus_seven_days():
    spec = build_task_query(OWNER, TaskListParams(due_soon=True), NOW)
    start, end = spec.filters[0].value
    assert start == datetime(2030, 6, 15, tzinfo=timezone.utc)
    assert end - start == timedelta(days=8)


def test_status_scope_ands_with_explicit_status():
    spec = build_task_query(
        OWNER, TaskListParams(status="pending"), NOW, status_scope="completed",
    )
    assert [f.value for f in spec.filters] == ["completed", "pending"]


def test_blank_search_is_ignored():
    spec = build_category_query(OWNER, CategoryListParams(search="   "))
    assert spec.filters == ()


def test_popular_tags_become_an_id_filter():
    popular = frozenset({uuid4()})
    spec = build_tag_query(OWNER, TagListParams(popular=True), popular)
    assert spec.filters[0].kind is FilterKind.ID_IN
    assert spec.filters[0].value == popular


def test_popular_with_no_ids_matches_nothing():
    spec = build_tag_query(OWNER, TagListParams(popular=True))
    assert spec.filters[0].value == frozenset()
