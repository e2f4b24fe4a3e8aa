"""Task Transitions — complete, uncomplete, cancel and start over HTTP.

Invariants:
    - complete then uncomplete returns the task to pending
    - uncomplete on a pending task → 422 "Task is not finished"
    - complete/cancel/start from a disallowed source → 200 with status unchanged
"""

from tests.services.api_helpers import auth, create_task


async def _patch(client, user, task, action):
    return await client.patch(
        f"/api/v1/tasks/{task['id']}/{action}", headers=auth(user),
    )


async def test_complete_then_uncomplete_round_trip(client, owner_a):
    task = await create_task(client, owner_a)
    done = await _patch(client, owner_a, task, "complete")
    assert done.status_code == 200
    assert done.json()["data"]["status"] == "completed"
    assert done.json()["data"]["status_label"] == "Completed"

    reopened = await _patch(client, owner_a, task, "uncomplete")
    assert reopened.status_code == 200
    assert reopened.json()["data"]["status"] == "pending"


async def test_uncomplete_pending_task_is_conflict(client, owner_a):
    task = await create_task(client, owner_a)
    res = await _patch(client, owner_a, task, "uncomplete")
    assert res.status_code == 422
    assert res.json() == {"success": False, "error": "Task is not finished"}


async def test_start_then_cancel(client, owner_a):
    task = await create_task(client, owner_a)
    started = await _patch(client, owner_a, task, "start")
    assert started.json()["data"]["status"] == "in_progress"
    cancelled = await _patch(client, owner_a, task, "cancel")
    assert cancelled.json()["data"]["status"] == "cancelled"


async def test_disallowed_sources_are_silent_no_ops(client, owner_a):
    task = await create_task(client, owner_a)
    await _patch(client, owner_a, task, "complete")
    for action in ("complete", "cancel", "start"):
        res = await _patch(client, owner_a, task, action)
        assert res.status_code == 200
        assert res.json()["data"]["status"] == "completed"


async def test_uncomplete_without_due_date_fails(client, owner_a):
    """A completed task created without a due date can't reopen to pending."""
    task = await create_task(client, owner_a, status="completed", due_date=None)
    res = await _patch(client, owner_a, task, "uncomplete")
    assert res.status_code == 422
    assert res.json()["errors"] == ["Due date can't be blank"]
    still = await client.get(f"/api/v1/tasks/{task['id']}", headers=auth(owner_a))
    assert still.json()["data"]["status"] == "completed"


async def test_direct_status_update_is_allowed(client, owner_a):
    task = await create_task(client, owner_a)
    res = await client.put(
        f"/api/v1/tasks/{task['id']}", json={"status": "cancelled"},
        headers=auth(owner_a),
    )
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "cancelled"
