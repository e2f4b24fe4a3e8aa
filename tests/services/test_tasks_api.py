"""Task Routes — creation rules, tag/category assignment, listing, filters and sorting.

Invariants:
    - Task with status and due_date omitted → 422 (default status is pending)
    - category_id must name one of the caller's categories
    - tag_ids replace the tag set; unknown/foreign ids are ignored
    - due_date ascending sort puts tasks without a due date last
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from tests.services.api_helpers import (
    auth, create_category, create_tag, create_task, future, past,
)


async def test_missing_due_date_scenario(client, owner_a):
    res = await client.post(
        "/api/v1/tasks", json={"title": "Buy milk"}, headers=auth(owner_a),
    )
    assert res.status_code == 422
    assert res.json() == {
        "success": False,
        "error": "Validation failed",
        "errors": ["Due date can't be blank"],
    }


async def test_create_task_representation(client, owner_a):
    due = (datetime.now(timezone.utc) + timedelta(days=2)).isoformat()
    res = await client.post(
        "/api/v1/tasks",
        json={"title": "Buy milk", "due_date": due, "priority": 4},
        headers=auth(owner_a),
    )
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["status"] == "pending"
    assert data["status_label"] == "Pending"
    assert data["priority_label"] == "High"
    assert data["high_priority"] is True
    assert data["due_soon"] is True
    assert data["overdue"] is False
    assert data["days_until_due"] == 2
    assert data["category"] is None
    assert data["tags"] == []
    assert data["user_id"] == str(owner_a.id)


async def test_completed_task_may_omit_due_date(client, owner_a):
    res = await client.post(
        "/api/v1/tasks", json={"title": "Old chore", "status": "completed"},
        headers=auth(owner_a),
    )
    assert res.status_code == 201
    assert res.json()["data"]["due_date"] is None


async def test_priority_out_of_range_and_bad_status(client, owner_a):
    res = await client.post(
        "/api/v1/tasks",
        json={"title": "Buy milk", "due_date": future(), "priority": 7, "status": "nope"},
        headers=auth(owner_a),
    )
    assert res.status_code == 422
    assert sorted(res.json()["errors"]) == [
        "Priority must be between 0 and 5",
        "Status must be one of: pending, in_progress, completed, cancelled",
    ]


async def test_malformed_due_date_is_400(client, owner_a):
    res = await client.post(
        "/api/v1/tasks", json={"title": "Buy milk", "due_date": "someday"},
        headers=auth(owner_a),
    )
    assert res.status_code == 400


async def test_foreign_category_must_exist(client, owner_a, owner_b):
    theirs = await create_category(client, owner_b, "Theirs")
    for category_id in (theirs["id"], str(uuid4())):
        res = await client.post(
            "/api/v1/tasks",
            json={"title": "Sneaky", "due_date": future(), "category_id": category_id},
            headers=auth(owner_a),
        )
        assert res.status_code == 422
        assert res.json()["errors"] == ["Category must exist"]


async def test_tag_ids_ignore_foreign_and_unknown(client, owner_a, owner_b):
    mine = await create_tag(client, owner_a, "mine")
    theirs = await create_tag(client, owner_b, "theirs")
    task = await create_task(
        client, owner_a, tag_ids=[mine["id"], mine["id"], theirs["id"], str(uuid4())],
    )
    assert [t["name"] for t in task["tags"]] == ["mine"]

    their_view = await client.get(f"/api/v1/tags/{theirs['id']}", headers=auth(owner_b))
    assert their_view.json()["data"]["tasks_count"] == 0


async def test_update_replaces_or_keeps_tags(client, owner_a):
    one = await create_tag(client, owner_a, "one")
    two = await create_tag(client, owner_a, "two")
    task = await create_task(client, owner_a, tag_ids=[one["id"]])
    url = f"/api/v1/tasks/{task['id']}"

    untouched = await client.patch(url, json={"title": "Renamed"}, headers=auth(owner_a))
    assert [t["name"] for t in untouched.json()["data"]["tags"]] == ["one"]

    replaced = await client.put(url, json={"tag_ids": [two["id"]]}, headers=auth(owner_a))
    assert [t["name"] for t in replaced.json()["data"]["tags"]] == ["two"]

    cleared = await client.patch(url, json={"tag_ids": None}, headers=auth(owner_a))
    assert cleared.json()["data"]["tags"] == []


async def test_update_can_move_and_detach_category(client, owner_a):
    work = await create_category(client, owner_a, "Work")
    task = await create_task(client, owner_a, category_id=work["id"])
    url = f"/api/v1/tasks/{task['id']}"

    detached = await client.patch(url, json={"category_id": None}, headers=auth(owner_a))
    assert detached.status_code == 200
    assert detached.json()["data"]["category"] is None


async def test_update_cannot_drop_due_date_of_active_task(client, owner_a):
    task = await create_task(client, owner_a)
    res = await client.patch(
        f"/api/v1/tasks/{task['id']}", json={"due_date": None}, headers=auth(owner_a),
    )
    assert res.status_code == 422
    kept = await client.get(f"/api/v1/tasks/{task['id']}", headers=auth(owner_a))
    assert kept.json()["data"]["due_date"] is not None


async def test_foreign_task_is_not_found(client, owner_a, owner_b):
    task = await create_task(client, owner_a)
    url = f"/api/v1/tasks/{task['id']}"
    assert (await client.get(url, headers=auth(owner_b))).status_code == 404
    assert (await client.delete(url, headers=auth(owner_b))).status_code == 404
    assert (await client.patch(
        f"{url}/complete", headers=auth(owner_b),
    )).status_code == 404


async def test_delete_task_removes_links(client, owner_a):
    tag = await create_tag(client, owner_a, "urgent")
    task = await create_task(client, owner_a, tag_ids=[tag["id"]])
    res = await client.delete(f"/api/v1/tasks/{task['id']}", headers=auth(owner_a))
    assert res.status_code == 204
    assert res.content == b""
    after = await client.get(f"/api/v1/tags/{tag['id']}", headers=auth(owner_a))
    assert after.json()["data"]["tasks_count"] == 0


# ─── listing ─────────────────────────────────────────────────────

async def test_list_is_owner_scoped_newest_first(client, owner_a, owner_b):
    await create_task(client, owner_a, "First")
    await create_task(client, owner_a, "Second")
    await create_task(client, owner_b, "Hidden")
    res = await client.get("/api/v1/tasks", headers=auth(owner_a))
    body = res.json()
    assert [t["title"] for t in body["data"]] == ["Second", "First"]
    assert body["meta"]["total_count"] == 2


async def test_due_date_sort_puts_missing_dates_last(client, owner_a):
    undated = await client.post(
        "/api/v1/tasks", json={"title": "No date", "status": "completed"},
        headers=auth(owner_a),
    )
    assert undated.json()["data"]["due_date"] is None
    await create_task(client, owner_a, "Later", due_date=future(5))
    await create_task(client, owner_a, "Sooner", due_date=future(1))
    res = await client.get("/api/v1/tasks?sort_by=due_date", headers=auth(owner_a))
    assert [t["title"] for t in res.json()["data"]] == ["Sooner", "Later", "No date"]


async def test_priority_and_title_sorts(client, owner_a):
    await create_task(client, owner_a, "Bravo", priority=1)
    await create_task(client, owner_a, "Alpha", priority=5)
    await create_task(client, owner_a, "Charlie", priority=3)
    by_priority = await client.get("/api/v1/tasks?sort_by=priority", headers=auth(owner_a))
    assert [t["priority"] for t in by_priority.json()["data"]] == [5, 3, 1]
    by_title = await client.get(
        "/api/v1/tasks?sort_by=title&order=desc", headers=auth(owner_a),
    )
    assert [t["title"] for t in by_title.json()["data"]] == ["Charlie", "Bravo", "Alpha"]


async def test_filters(client, owner_a):
    work = await create_category(client, owner_a, "Work")
    tag = await create_tag(client, owner_a, "urgent")
    await create_task(
        client, owner_a, "Buy milk", description="semi-skimmed", priority=2,
    )
    await create_task(
        client, owner_a, "Report", category_id=work["id"], tag_ids=[tag["id"]],
        priority=4, due_date=past(),
    )
    await create_task(client, owner_a, "Far away", due_date=future(30))

    async def titles(query: str) -> list[str]:
        res = await client.get(f"/api/v1/tasks?{query}", headers=auth(owner_a))
        assert res.status_code == 200, res.text
        return sorted(t["title"] for t in res.json()["data"])

    assert await titles("search=SKIMMED") == ["Buy milk"]
    assert await titles("priority=4") == ["Report"]
    assert await titles(f"category_id={work['id']}") == ["Report"]
    assert await titles(f"tag_id={tag['id']}") == ["Report"]
    assert await titles("overdue=true") == ["Report"]
    assert await titles("due_soon=true") == ["Buy milk"]
    assert await titles("status=pending&priority=2") == ["Buy milk"]


async def test_search_treats_wildcards_literally(client, owner_a):
    await create_task(client, owner_a, "100% done")
    await create_task(client, owner_a, "Plain")
    res = await client.get("/api/v1/tasks", params={"search": "%"}, headers=auth(owner_a))
    assert [t["title"] for t in res.json()["data"]] == ["100% done"]


async def test_status_shortcuts(client, owner_a):
    done = await create_task(client, owner_a, "Done")
    await client.patch(f"/api/v1/tasks/{done['id']}/complete", headers=auth(owner_a))
    await create_task(client, owner_a, "Open")

    completed = await client.get("/api/v1/tasks/completed", headers=auth(owner_a))
    pending = await client.get("/api/v1/tasks/pending", headers=auth(owner_a))
    in_progress = await client.get("/api/v1/tasks/in_progress", headers=auth(owner_a))
    cancelled = await client.get("/api/v1/tasks/cancelled", headers=auth(owner_a))
    assert [t["title"] for t in completed.json()["data"]] == ["Done"]
    assert [t["title"] for t in pending.json()["data"]] == ["Open"]
    assert in_progress.json()["data"] == []
    assert cancelled.json()["data"] == []


async def test_per_page_is_clamped(client, owner_a):
    await create_task(client, owner_a)
    res = await client.get("/api/v1/tasks?per_page=150", headers=auth(owner_a))
    assert res.status_code == 200
    assert res.json()["meta"]["per_page"] == 100


async def test_non_integer_page_is_400(client, owner_a):
    res = await client.get("/api/v1/tasks?page=two", headers=auth(owner_a))
    assert res.status_code == 400
    assert res.json()["error"] == "Malformed request"


async def test_huge_page_is_empty_not_an_error(client, owner_a):
    await create_task(client, owner_a)
    res = await client.get(
        "/api/v1/tasks", params={"page": 10**18}, headers=auth(owner_a),
    )
    assert res.status_code == 200
    body = res.json()
    assert body["data"] == []
    assert body["meta"]["total_count"] == 1
    assert body["meta"]["has_next_page"] is False


async def test_priority_filter_out_of_range_is_400(client, owner_a):
    res = await client.get(
        "/api/v1/tasks", params={"priority": 10**20}, headers=auth(owner_a),
    )
    assert res.status_code == 400
    assert res.json()["error"] == "Malformed request"
