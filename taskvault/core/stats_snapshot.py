"""Stats Snapshot — shape and priority bucketing for the global statistics view.

Invariants:
    - Priority buckets partition [0, 5]: high >= 4, medium == 3, low <= 2
    - Snapshot is assembled from counts taken at call time (no caching)
    - to_dict() is the exact JSON payload of GET /stats

Design Decisions:
    - Counting happens in the shell (one COUNT per figure); core owns the bucket
      boundaries and the payload shape so both stay in one place
"""

from dataclasses import dataclass

from taskvault.core.domain_types import HIGH_PRIORITY_THRESHOLD, MEDIUM_PRIORITY, TaskStatus


LOW_PRIORITY_MAX: int = MEDIUM_PRIORITY - 1


def priority_bucket(priority: int) -> str:
    if priority >= HIGH_PRIORITY_THRESHOLD:
        return "high"
    if priority == MEDIUM_PRIORITY:
        return "medium"
    return "low"


@dataclass(frozen=True)
class StatsSnapshot:
    users_total: int
    users_admins: int
    tasks_total: int
    tasks_by_status: dict[str, int]
    tasks_by_priority: dict[str, int]
    tasks_overdue: int
    tasks_due_soon: int
    categories_total: int
    categories_with_tasks: int
    tags_total: int
    tags_used: int

    def to_dict(self) -> dict:
        return {
            "users": {
                "total": self.users_total,
                "admins": self.users_admins,
                "regular": self.users_total - self.users_admins,
            },
            "tasks": {
                "total": self.tasks_total,
                "by_status": {
                    s.value: self.tasks_by_status.get(s.value, 0) for s in TaskStatus
                },
                "by_priority": {
                    bucket: self.tasks_by_priority.get(bucket, 0)
                    for bucket in ("high", "medium", "low")
                },
                "overdue": self.tasks_overdue,
                "due_soon": self.tasks_due_soon,
            },
            "categories": {
                "total": self.categories_total,
                "with_tasks": self.categories_with_tasks,
            },
            "tags": {
                "total": self.tags_total,
                "used": self.tags_used,
            },
        }


def bucket_priority_counts(counts_by_priority: dict[int, int]) -> dict[str, int]:
    """Fold per-priority counts into high/medium/low."""
    buckets = {"high": 0, "medium": 0, "low": 0}
    for priority, count in counts_by_priority.items():
        buckets[priority_bucket(priority)] += count
    return buckets
