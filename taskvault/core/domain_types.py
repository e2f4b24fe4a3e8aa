"""Domain Types — identity wrappers, enums and bounds shared by every layer.

Invariants:
    - UserId, CategoryId, TagId, TaskId wrap UUIDs
    - Priority is bounded 0–5
    - All valid task states encoded in TaskStatus — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
CategoryId = NewType("CategoryId", UUID)
TagId = NewType("TagId", UUID)
TaskId = NewType("TaskId", UUID)


# ─── Bounds ──────────────────────────────────────────────────────

MIN_PRIORITY: int = 0
MAX_PRIORITY: int = 5
DEFAULT_PRIORITY: int = 0
HIGH_PRIORITY_THRESHOLD: int = 4
MEDIUM_PRIORITY: int = 3

DEFAULT_CATEGORY_COLOR: str = "#007bff"
DEFAULT_TAG_COLOR: str = "#6c757d"


# ─── Enums ───────────────────────────────────────────────────────

class TaskStatus(str, Enum):
    """Task lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that demand a due date
ACTIVE_STATUSES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.PENDING, TaskStatus.IN_PROGRESS},
)
TERMINAL_STATUSES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.COMPLETED, TaskStatus.CANCELLED},
)


class TaskAction(str, Enum):
    """Explicit lifecycle operations on a Task."""
    COMPLETE = "complete"
    CANCEL = "cancel"
    START_PROGRESS = "start_progress"
    UNCOMPLETE = "uncomplete"


class ResourceKind(str, Enum):
    """Owner-scoped resources, used in error messages and log extras."""
    USER = "user"
    CATEGORY = "category"
    TAG = "tag"
    TASK = "task"


STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.PENDING: "Pending",
    TaskStatus.IN_PROGRESS: "In progress",
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.CANCELLED: "Cancelled",
}

PRIORITY_LABELS: dict[int, str] = {
    0: "Low",
    1: "Very low",
    2: "Low",
    3: "Medium",
    4: "High",
    5: "Critical",
}
