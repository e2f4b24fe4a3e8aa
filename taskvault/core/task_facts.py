"""Task Facts — derived, time-dependent properties of a single task.

Invariants:
    - "now" is always an argument; nothing here reads the clock
    - Naive datetimes are treated as UTC (SQLite hands them back naive)
    - overdue: due_date < now AND status != completed (cancelled tasks can be overdue)
    - due soon: due_date within [start of today, end of today + 7 days] AND status != completed

Design Decisions:
    - DUE_SOON_DAYS and the window math are shared by the query renderer and the
      stats service so list filters and counters can never disagree
"""

from datetime import datetime, timedelta, timezone

from taskvault.core.domain_types import (
    HIGH_PRIORITY_THRESHOLD, PRIORITY_LABELS, STATUS_LABELS, TaskStatus,
)


DUE_SOON_DAYS: int = 7


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day(now: datetime) -> datetime:
    return as_utc(now).replace(hour=0, minute=0, second=0, microsecond=0)


def due_soon_window(now: datetime) -> tuple[datetime, datetime]:
    """Half-open [start, end) window covering today and the next 7 calendar days."""
    start = start_of_day(now)
    return start, start + timedelta(days=DUE_SOON_DAYS + 1)


def is_overdue(due_date: datetime | None, status: str, now: datetime) -> bool:
    if due_date is None or status == TaskStatus.COMPLETED.value:
        return False
    return as_utc(due_date) < as_utc(now)


def is_due_soon(due_date: datetime | None, status: str, now: datetime) -> bool:
    if due_date is None or status == TaskStatus.COMPLETED.value:
        return False
    start, end = due_soon_window(now)
    return start <= as_utc(due_date) < end


def is_high_priority(priority: int) -> bool:
    return priority >= HIGH_PRIORITY_THRESHOLD


def days_until_due(due_date: datetime | None, now: datetime) -> int | None:
    if due_date is None:
        return None
    return (as_utc(due_date).date() - as_utc(now).date()).days


def status_label(status: str) -> str:
    try:
        return STATUS_LABELS[TaskStatus(status)]
    except ValueError:
        return "Unknown"


def priority_label(priority: int) -> str:
    return PRIORITY_LABELS.get(priority, "Unknown")
