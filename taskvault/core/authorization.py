"""Authorization Guard — decides whether a resolved caller may touch a resource.

Invariants:
    - The caller is an explicit value (id + admin flag) passed into every operation
    - Tasks, categories and tags are strictly owner-scoped; admins get no bypass
    - Foreign-owned task/category/tag → ResourceNotFoundError (no existence leak)
    - User profiles: self always; another user's profile only for admins (read only)
    - Updating a user profile is self-only, admins included → AccessDeniedError

Design Decisions:
    - Caller is a frozen dataclass, never ambient request state
"""

from dataclasses import dataclass
from uuid import UUID

from taskvault.core.errors import (
    AccessDeniedError, ErrorContext, ResourceNotFoundError,
)


@dataclass(frozen=True)
class Caller:
    id: UUID
    is_admin: bool = False


def ensure_owned(
    caller: Caller, owner_id: UUID | None, resource: str, resource_id: UUID,
) -> None:
    """owner_id is None when the row does not exist at all."""
    if owner_id is None or owner_id != caller.id:
        raise ResourceNotFoundError(
            resource, str(resource_id), ErrorContext(caller_id=str(caller.id)),
        )


def can_view_user(caller: Caller, user_id: UUID) -> bool:
    return caller.id == user_id or caller.is_admin


def ensure_can_view_user(caller: Caller, user_id: UUID) -> None:
    if not can_view_user(caller, user_id):
        raise AccessDeniedError(ErrorContext(
            caller_id=str(caller.id), resource="user", resource_id=str(user_id),
        ))


def ensure_can_update_user(caller: Caller, user_id: UUID) -> None:
    if caller.id != user_id:
        raise AccessDeniedError(ErrorContext(
            caller_id=str(caller.id), resource="user", resource_id=str(user_id),
        ))
