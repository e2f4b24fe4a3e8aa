"""User Routes — registration, caller resolution, profile visibility and updates.

Invariants:
    - Registration is public, lowercases email, never grants admin
    - Missing/malformed/unknown X-User-ID → 401
    - Profiles: self or admin may view; only self may update
    - Deleting a user removes their categories, tags, tasks and links
"""

from uuid import uuid4

from sqlalchemy import func, select

from taskvault.infrastructure.passwords import verify_password
from taskvault.models import Category, Tag, Task, TaskTag, User
from tests.services.api_helpers import auth, create_category, create_tag, create_task


async def test_register_lowercases_email_and_ignores_admin(client):
    res = await client.post("/api/v1/users/register", json={
        "email": "Carol@Example.com", "name": "Carol",
        "password": "secret123", "password_confirmation": "secret123",
        "admin": True,
    })
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["email"] == "carol@example.com"
    assert data["admin"] is False
    assert data["tasks_count"] == 0
    assert "password" not in data
    assert "password_digest" not in data


async def test_register_alias_and_duplicate_email(client):
    body = {"email": "dave@example.com", "name": "Dave", "password": "secret123"}
    first = await client.post("/api/v1/users", json=body)
    assert first.status_code == 201
    again = await client.post(
        "/api/v1/users/register", json={**body, "email": "DAVE@example.com"},
    )
    assert again.status_code == 422
    assert again.json()["errors"] == ["Email has already been taken"]


async def test_register_validation_messages(client):
    res = await client.post("/api/v1/users/register", json={
        "email": "nope", "name": "E", "password": "abc",
        "password_confirmation": "abd",
    })
    assert res.status_code == 422
    assert res.json()["errors"] == [
        "Email must be a valid email address",
        "Name must be between 2 and 50 characters",
        "Password is too short (minimum is 6 characters)",
        "Password confirmation doesn't match Password",
    ]


async def test_password_is_stored_hashed(client, test_session_factory):
    await client.post("/api/v1/users/register", json={
        "email": "erin@example.com", "name": "Erin", "password": "secret123",
    })
    async with test_session_factory() as db:
        digest = await db.scalar(
            select(User.password_digest).where(User.email == "erin@example.com"),
        )
    assert digest != "secret123"
    assert verify_password("secret123", digest)


async def test_missing_malformed_or_unknown_caller_is_401(client):
    for headers in ({}, {"X-User-ID": "not-a-uuid"}, {"X-User-ID": str(uuid4())}):
        res = await client.get("/api/v1/tasks", headers=headers)
        assert res.status_code == 401
        assert res.json() == {"success": False, "error": "Authentication required"}


async def test_view_own_profile(client, owner_a):
    await create_task(client, owner_a)
    for path in (f"/api/v1/users/{owner_a.id}", f"/api/v1/users/{owner_a.id}/profile"):
        res = await client.get(path, headers=auth(owner_a))
        assert res.status_code == 200
        assert res.json()["data"]["email"] == "alice@example.com"
        assert res.json()["data"]["pending_tasks_count"] == 1


async def test_view_other_profile_needs_admin(client, owner_a, owner_b, admin_user):
    denied = await client.get(f"/api/v1/users/{owner_b.id}", headers=auth(owner_a))
    assert denied.status_code == 403
    assert denied.json()["error"] == "Access denied"

    allowed = await client.get(f"/api/v1/users/{owner_b.id}", headers=auth(admin_user))
    assert allowed.status_code == 200
    assert allowed.json()["data"]["name"] == "Bob"


async def test_unknown_user_is_404(client, owner_a):
    res = await client.get(f"/api/v1/users/{uuid4()}", headers=auth(owner_a))
    assert res.status_code == 404
    assert res.json()["error"] == "User not found"


async def test_update_own_profile(client, owner_a, test_session_factory):
    res = await client.patch(
        f"/api/v1/users/{owner_a.id}",
        json={"name": "Alice Liddell", "password": ""},
        headers=auth(owner_a),
    )
    assert res.status_code == 200
    assert res.json()["data"]["name"] == "Alice Liddell"

    res = await client.put(
        f"/api/v1/users/{owner_a.id}",
        json={"password": "newsecret", "password_confirmation": "newsecret"},
        headers=auth(owner_a),
    )
    assert res.status_code == 200
    async with test_session_factory() as db:
        digest = await db.scalar(
            select(User.password_digest).where(User.id == owner_a.id),
        )
    assert verify_password("newsecret", digest)


async def test_update_email_to_taken_one_fails(client, owner_a, owner_b):
    res = await client.patch(
        f"/api/v1/users/{owner_a.id}", json={"email": "BOB@example.com"},
        headers=auth(owner_a),
    )
    assert res.status_code == 422
    assert res.json()["errors"] == ["Email has already been taken"]


async def test_admin_cannot_update_others(client, owner_a, admin_user):
    res = await client.patch(
        f"/api/v1/users/{owner_a.id}", json={"name": "Hacked"},
        headers=auth(admin_user),
    )
    assert res.status_code == 403


async def test_deleting_user_cascades(client, owner_a, owner_b, test_session_factory):
    category = await create_category(client, owner_a)
    tag = await create_tag(client, owner_a)
    await create_task(client, owner_a, category_id=category["id"], tag_ids=[tag["id"]])
    await create_task(client, owner_b, "Bob's task")

    async with test_session_factory() as db:
        user = await db.get(User, owner_a.id)
        await db.delete(user)
        await db.commit()

        counts = [
            await db.scalar(select(func.count(model.id)))
            for model in (Category, Tag, Task, TaskTag)
        ]
    assert counts == [0, 0, 1, 0]
