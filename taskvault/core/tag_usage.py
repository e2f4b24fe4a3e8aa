"""Tag Usage — usage percentages, the popular-tag selection, and tag-set planning.

Invariants:
    - usage_percentage = tagged tasks / owner's total tasks × 100, one decimal, half-up
    - Owner with zero tasks → every tag is at 0.0%
    - Popular means strictly above POPULAR_THRESHOLD (50.0)
    - plan_tag_links never plans a link to a tag owned by someone else

Design Decisions:
    - Popularity is computed in-process over ONE owner's tag counts, then fed back
      to the query engine as an id filter (two phases). The owner scope bounds
      the work; no store-side percentage arithmetic.
    - Decimal half-up rounding so 12.25 → 12.3 regardless of float banker's rounding
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping
from uuid import UUID


POPULAR_THRESHOLD: float = 50.0


def usage_percentage(tag_task_count: int, owner_task_count: int) -> float:
    if owner_task_count <= 0:
        return 0.0
    ratio = Decimal(tag_task_count) * 100 / Decimal(owner_task_count)
    return float(ratio.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def select_popular_tag_ids(
    tag_task_counts: Mapping[UUID, int], owner_task_count: int,
) -> frozenset[UUID]:
    """Ids of the owner's tags whose usage exceeds the popular threshold."""
    return frozenset(
        tag_id for tag_id, count in tag_task_counts.items()
        if usage_percentage(count, owner_task_count) > POPULAR_THRESHOLD
    )


@dataclass(frozen=True)
class TagRef:
    """Minimal view of a tag row: enough to judge ownership."""
    id: UUID
    owner_id: UUID


@dataclass(frozen=True)
class LinkPlan:
    to_add: tuple[UUID, ...]
    to_remove: tuple[UUID, ...]


def plan_tag_links(
    task_owner_id: UUID,
    current_tag_ids: Iterable[UUID],
    requested: Iterable[TagRef],
) -> LinkPlan:
    """Diff the task's current tag set against the requested one.

    Tags of other owners are dropped silently, like unknown ids, so the
    response never reveals that someone else's tag exists.
    """
    current = list(dict.fromkeys(current_tag_ids))
    wanted = list(dict.fromkeys(
        ref.id for ref in requested if ref.owner_id == task_owner_id
    ))
    return LinkPlan(
        to_add=tuple(t for t in wanted if t not in current),
        to_remove=tuple(t for t in current if t not in wanted),
    )
