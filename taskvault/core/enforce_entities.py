"""Entity Rules — pure validation of candidate entity states before any write.

Invariants:
    - validate_* functions are PURE: they return a list of Violations, never mutate
    - Defaults (status, priority, colors) are applied BEFORE validation, never after
    - Store-dependent facts (name taken, category owned) arrive as plain booleans,
      computed by the shell inside the same transaction as the write
    - ensure_valid raises ValidationFailure with every violation at once

Design Decisions:
    - Drafts are plain dataclasses, decoupled from ORM rows: the shell builds a
      draft from request + current row, core judges it, shell persists it
    - Name uniqueness is case-sensitive per owner; email uniqueness is not
"""

import re
from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID

from taskvault.core.domain_types import (
    ACTIVE_STATUSES, DEFAULT_CATEGORY_COLOR, DEFAULT_PRIORITY, DEFAULT_TAG_COLOR,
    MAX_PRIORITY, MIN_PRIORITY, TaskStatus,
)
from taskvault.core.errors import ValidationFailure, Violation


HEX_COLOR_PATTERN = re.compile(r"#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})")
EMAIL_PATTERN = re.compile(
    r"[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*",
)

CATEGORY_NAME_LENGTH = (2, 50)
CATEGORY_DESCRIPTION_MAX = 500
TAG_NAME_LENGTH = (2, 30)
TASK_TITLE_LENGTH = (3, 100)
TASK_DESCRIPTION_MAX = 1000
USER_NAME_LENGTH = (2, 50)
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_BYTES = 72  # bcrypt truncation limit


# ─── Drafts ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class CategoryDraft:
    name: str | None
    color: str | None
    description: str | None = None


@dataclass(frozen=True)
class TagDraft:
    name: str | None
    color: str | None


@dataclass(frozen=True)
class TaskDraft:
    title: str | None
    description: str | None = None
    status: str | None = None
    priority: int | None = None
    due_date: datetime | None = None
    category_id: UUID | None = None


@dataclass(frozen=True)
class UserDraft:
    email: str | None
    name: str | None
    password: str | None = None
    password_confirmation: str | None = None


# ─── Defaults ────────────────────────────────────────────────────

def apply_task_defaults(draft: TaskDraft) -> TaskDraft:
    """Blank status becomes pending, blank priority becomes 0."""
    status = draft.status if not _blank(draft.status) else TaskStatus.PENDING.value
    priority = draft.priority if draft.priority is not None else DEFAULT_PRIORITY
    return replace(draft, status=status, priority=priority)


def apply_category_defaults(draft: CategoryDraft) -> CategoryDraft:
    if draft.color is None:
        return replace(draft, color=DEFAULT_CATEGORY_COLOR)
    return draft


def apply_tag_defaults(draft: TagDraft) -> TagDraft:
    if draft.color is None:
        return replace(draft, color=DEFAULT_TAG_COLOR)
    return draft


def normalize_email(email: str | None) -> str | None:
    return email.strip().lower() if email is not None else None


# ─── Field rules ─────────────────────────────────────────────────

def _blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def is_hex_color(value: str | None) -> bool:
    return value is not None and HEX_COLOR_PATTERN.fullmatch(value) is not None


def _check_name(
    field: str, value: str | None, bounds: tuple[int, int],
) -> list[Violation]:
    low, high = bounds
    if _blank(value):
        return [Violation(field, "can't be blank")]
    if not low <= len(value) <= high:
        return [Violation(field, f"must be between {low} and {high} characters")]
    return []


def _check_max(field: str, value: str | None, limit: int) -> list[Violation]:
    if value is not None and len(value) > limit:
        return [Violation(field, f"is too long (maximum is {limit} characters)")]
    return []


def _check_color(value: str | None) -> list[Violation]:
    if _blank(value):
        return [Violation("color", "can't be blank")]
    if not is_hex_color(value):
        return [Violation("color", "must be a valid hex color (#RGB or #RRGGBB)")]
    return []


# ─── Entity rules ────────────────────────────────────────────────

def validate_category(
    draft: CategoryDraft, name_taken: bool = False,
) -> list[Violation]:
    violations = _check_name("name", draft.name, CATEGORY_NAME_LENGTH)
    if name_taken:
        violations.append(Violation("name", "has already been taken"))
    violations += _check_max(
        "description", draft.description, CATEGORY_DESCRIPTION_MAX,
    )
    violations += _check_color(draft.color)
    return violations


def validate_tag(draft: TagDraft, name_taken: bool = False) -> list[Violation]:
    violations = _check_name("name", draft.name, TAG_NAME_LENGTH)
    if name_taken:
        violations.append(Violation("name", "has already been taken"))
    violations += _check_color(draft.color)
    return violations


def validate_task(
    draft: TaskDraft, category_owned: bool = True,
) -> list[Violation]:
    """Judge a fully-defaulted task draft.

    The due_date requirement is status-conditional, so this must run on every
    write that touches status or due_date, transitions included.
    """
    violations = _check_name("title", draft.title, TASK_TITLE_LENGTH)
    violations += _check_max(
        "description", draft.description, TASK_DESCRIPTION_MAX,
    )
    valid_statuses = [s.value for s in TaskStatus]
    if draft.status not in valid_statuses:
        violations.append(Violation(
            "status", f"must be one of: {', '.join(valid_statuses)}",
        ))
    if (
        isinstance(draft.priority, bool)
        or not isinstance(draft.priority, int)
        or not MIN_PRIORITY <= draft.priority <= MAX_PRIORITY
    ):
        violations.append(Violation(
            "priority", f"must be between {MIN_PRIORITY} and {MAX_PRIORITY}",
        ))
    if draft.status in {s.value for s in ACTIVE_STATUSES} and draft.due_date is None:
        violations.append(Violation("due_date", "can't be blank"))
    if draft.category_id is not None and not category_owned:
        violations.append(Violation("category", "must exist"))
    return violations


def validate_task_link(
    task_owner_id: UUID, tag_owner_id: UUID, already_linked: bool,
) -> list[Violation]:
    """A task↔tag link is unique per pair and never crosses owners."""
    violations = []
    if already_linked:
        violations.append(Violation("task", "already has this tag"))
    if task_owner_id != tag_owner_id:
        violations.append(Violation(
            "base", "Task and tag must belong to the same user",
        ))
    return violations


def validate_user(
    draft: UserDraft, email_taken: bool = False, password_required: bool = False,
) -> list[Violation]:
    violations = []
    if _blank(draft.email):
        violations.append(Violation("email", "can't be blank"))
    elif len(draft.email) > EMAIL_MAX_LENGTH:
        violations.append(Violation(
            "email", f"is too long (maximum is {EMAIL_MAX_LENGTH} characters)",
        ))
    elif EMAIL_PATTERN.fullmatch(draft.email) is None:
        violations.append(Violation("email", "must be a valid email address"))
    elif email_taken:
        violations.append(Violation("email", "has already been taken"))
    violations += _check_name("name", draft.name, USER_NAME_LENGTH)

    if _blank(draft.password):
        if password_required:
            violations.append(Violation("password", "can't be blank"))
        return violations
    if len(draft.password) < PASSWORD_MIN_LENGTH:
        violations.append(Violation(
            "password", f"is too short (minimum is {PASSWORD_MIN_LENGTH} characters)",
        ))
    if len(draft.password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        violations.append(Violation(
            "password", f"is too long (maximum is {PASSWORD_MAX_BYTES} bytes)",
        ))
    if (
        draft.password_confirmation is not None
        and draft.password_confirmation != draft.password
    ):
        violations.append(Violation(
            "password_confirmation", "doesn't match Password",
        ))
    return violations


def ensure_valid(violations: list[Violation]) -> None:
    """Raise ValidationFailure when any rule was violated."""
    if violations:
        raise ValidationFailure(violations)
