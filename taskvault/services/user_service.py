"""User Service — registration, profile reads and self-service profile updates.

Invariants:
    - Emails are lowercased before the uniqueness check and before storage
    - Registration never grants admin; no request body can set it
    - Missing user → 404 first, then the view/update rule → 403
    - The password digest changes only when a non-blank password is sent
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.core.authorization import (
    Caller, ensure_can_update_user, ensure_can_view_user,
)
from taskvault.core.domain_types import ResourceKind
from taskvault.core.enforce_entities import (
    UserDraft, ensure_valid, normalize_email, validate_user,
)
from taskvault.core.errors import ErrorContext, ResourceNotFoundError
from taskvault.infrastructure.passwords import hash_password
from taskvault.models.user import User
from taskvault.schemas.user import UserResponse
from taskvault.services.task_counts import TaskCounts, count_tasks_for_user

logger = logging.getLogger(__name__)


async def resolve_caller(db: AsyncSession, user_id: UUID) -> Caller | None:
    """Load the caller identity for a user id, or None if no such user."""
    row = (await db.execute(
        select(User.id, User.admin).where(User.id == user_id),
    )).first()
    if row is None:
        return None
    return Caller(id=row.id, is_admin=row.admin)


class UserService:
    """User operations. caller is None only for registration."""

    def __init__(self, db: AsyncSession, caller: Caller | None = None):
        self.db = db
        self.caller = caller

    async def register(self, changes: dict) -> UserResponse:
        draft = UserDraft(
            email=normalize_email(changes.get("email")),
            name=changes.get("name"),
            password=changes.get("password"),
            password_confirmation=changes.get("password_confirmation"),
        )
        ensure_valid(validate_user(
            draft,
            email_taken=await self._email_taken(draft.email),
            password_required=True,
        ))

        user = User(
            email=draft.email,
            name=draft.name,
            password_digest=hash_password(draft.password),
            admin=False,
        )
        self.db.add(user)
        await self.db.commit()
        logger.info(f"User {user.id} registered", extra={"resource": "user"})
        return present_user(user, TaskCounts())

    async def get(self, user_id: UUID) -> UserResponse:
        user = await self._get_or_404(user_id)
        ensure_can_view_user(self.caller, user.id)
        return await self._present(user)

    async def update(self, user_id: UUID, changes: dict) -> UserResponse:
        user = await self._get_or_404(user_id, lock=True)
        ensure_can_update_user(self.caller, user.id)

        fields = {
            k: changes[k]
            for k in ("name", "password", "password_confirmation") if k in changes
        }
        if "email" in changes:
            fields["email"] = normalize_email(changes["email"])
        draft = replace(UserDraft(email=user.email, name=user.name), **fields)
        email_taken = (
            draft.email != user.email
            and await self._email_taken(draft.email, exclude_id=user.id)
        )
        ensure_valid(validate_user(draft, email_taken=email_taken))

        user.email = draft.email
        user.name = draft.name
        if draft.password and draft.password.strip():
            user.password_digest = hash_password(draft.password)
        await self.db.commit()
        logger.info(
            f"User {user.id} updated",
            extra={"caller_id": str(self.caller.id), "resource": "user"},
        )
        return await self._present(user)

    # ─── helpers ────────────────────────────────────────────────

    async def _get_or_404(self, user_id: UUID, lock: bool = False) -> User:
        query = select(User).where(User.id == user_id)
        if lock:
            query = query.with_for_update()
        user = (await self.db.execute(query)).scalar_one_or_none()
        if user is None:
            raise ResourceNotFoundError(
                ResourceKind.USER.value, str(user_id),
                ErrorContext(caller_id=str(self.caller.id) if self.caller else None),
            )
        return user

    async def _email_taken(
        self, email: str | None, exclude_id: UUID | None = None,
    ) -> bool:
        if not email:
            return False
        query = select(User.id).where(func.lower(User.email) == email)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        return (await self.db.execute(query)).first() is not None

    async def _present(self, user: User) -> UserResponse:
        counts = await count_tasks_for_user(
            self.db, user.id, datetime.now(timezone.utc),
        )
        return present_user(user, counts)


def present_user(user: User, counts: TaskCounts) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        admin=user.admin,
        tasks_count=counts.total,
        completed_tasks_count=counts.completed,
        pending_tasks_count=counts.pending,
        overdue_tasks_count=counts.overdue,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )
