"""Seed Data — idempotent demo account with categories, tags, tasks and links.

Invariants:
    - Running the seed twice leaves exactly one copy of every seeded row
    - Seeded rows pass the same core rules as API writes

Design Decisions:
    - Rows are looked up by their natural keys (email, owner + name, owner + title)
      instead of being truncated, so the seed is safe on a database with real data
    - The demo user is an admin: the only path that sets the flag besides SQL

Usage:
    python -m taskvault.db.seed      (or the taskvault-seed console script)
"""

import asyncio
import logging
from dataclasses import asdict
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskvault.config import get_settings
from taskvault.core.enforce_entities import (
    CategoryDraft, TagDraft, TaskDraft, UserDraft, ensure_valid,
    validate_category, validate_tag, validate_task, validate_user,
)
from taskvault.db.session import create_engine, create_session_factory
from taskvault.infrastructure.observability import setup_logging
from taskvault.infrastructure.passwords import hash_password
from taskvault.models import Category, Tag, Task, TaskTag, User

logger = logging.getLogger(__name__)

DEMO_EMAIL = "test@example.com"
DEMO_PASSWORD = "password123"

CATEGORIES = [
    CategoryDraft(name="Work", description="Work tasks", color="#dc3545"),
    CategoryDraft(name="Personal", description="Personal errands", color="#28a745"),
    CategoryDraft(name="Study", description="Learning and growth", color="#17a2b8"),
]

TAGS = [
    TagDraft(name="Urgent", color="#dc3545"),
    TagDraft(name="Important", color="#ffc107"),
    TagDraft(name="Idea", color="#6f42c1"),
]

# (draft fields, category name, due in days, tag names)
TASKS = [
    (
        {"title": "Learn FastAPI", "description": "Work through the FastAPI tutorial",
         "status": "in_progress", "priority": 3},
        "Study", 7, ("Urgent", "Important"),
    ),
    (
        {"title": "Build the TODO app", "description": "Ship a complete task manager",
         "status": "pending", "priority": 5},
        "Work", 14, ("Important",),
    ),
]


async def _get_or_create_user(db: AsyncSession) -> User:
    user = await db.scalar(select(User).where(User.email == DEMO_EMAIL))
    if user:
        return user
    draft = UserDraft(email=DEMO_EMAIL, name="Test User", password=DEMO_PASSWORD)
    ensure_valid(validate_user(draft, password_required=True))
    user = User(
        email=draft.email, name=draft.name,
        password_digest=hash_password(draft.password), admin=True,
    )
    db.add(user)
    await db.flush()
    return user


async def seed(session_factory: async_sessionmaker[AsyncSession]) -> dict[str, int]:
    """Create the demo data if missing. Returns row counts after seeding."""
    now = datetime.now(timezone.utc)
    async with session_factory() as db:
        user = await _get_or_create_user(db)

        categories = {}
        for draft in CATEGORIES:
            category = await db.scalar(select(Category).where(
                Category.user_id == user.id, Category.name == draft.name,
            ))
            if category is None:
                ensure_valid(validate_category(draft))
                category = Category(
                    user_id=user.id, name=draft.name,
                    description=draft.description, color=draft.color,
                )
                db.add(category)
            categories[draft.name] = category

        tags = {}
        for draft in TAGS:
            tag = await db.scalar(select(Tag).where(
                Tag.user_id == user.id, Tag.name == draft.name,
            ))
            if tag is None:
                ensure_valid(validate_tag(draft))
                tag = Tag(user_id=user.id, name=draft.name, color=draft.color)
                db.add(tag)
            tags[draft.name] = tag
        await db.flush()

        for fields, category_name, due_in_days, tag_names in TASKS:
            task = await db.scalar(select(Task).where(
                Task.user_id == user.id, Task.title == fields["title"],
            ))
            if task is not None:
                continue
            draft = TaskDraft(
                **fields,
                due_date=now + timedelta(days=due_in_days),
                category_id=categories[category_name].id,
            )
            ensure_valid(validate_task(draft))
            task = Task(user_id=user.id, **asdict(draft))
            db.add(task)
            await db.flush()
            for name in tag_names:
                db.add(TaskTag(task_id=task.id, tag_id=tags[name].id))

        await db.commit()

        counts = {}
        for label, model in (
            ("users", User), ("categories", Category), ("tags", Tag),
            ("tasks", Task), ("task_tags", TaskTag),
        ):
            counts[label] = await db.scalar(select(func.count(model.id))) or 0
    return counts


async def _run() -> None:
    engine = create_engine(get_settings().database_url)
    try:
        counts = await seed(create_session_factory(engine))
        logger.info(f"Seed complete: {counts}")
    finally:
        await engine.dispose()


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, "text")
    asyncio.run(_run())


if __name__ == "__main__":
    main()
