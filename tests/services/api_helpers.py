"""Shared helpers for route tests: caller headers and canned request bodies."""

from datetime import datetime, timedelta, timezone


def auth(user) -> dict[str, str]:
    """Headers that identify user as the caller."""
    return {"X-User-ID": str(user.id)}


def future(days: int = 3) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def past(days: int = 3) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


async def create_category(client, user, name="Work", **fields) -> dict:
    res = await client.post(
        "/api/v1/categories", json={"name": name, **fields}, headers=auth(user),
    )
    assert res.status_code == 201, res.text
    return res.json()["data"]


async def create_tag(client, user, name="urgent", **fields) -> dict:
    res = await client.post(
        "/api/v1/tags", json={"name": name, **fields}, headers=auth(user),
    )
    assert res.status_code == 201, res.text
    return res.json()["data"]


async def create_task(client, user, title="Buy milk", **fields) -> dict:
    body = {"title": title, "due_date": future(), **fields}
    res = await client.post("/api/v1/tasks", json=body, headers=auth(user))
    assert res.status_code == 201, res.text
    return res.json()["data"]
