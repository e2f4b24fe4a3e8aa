"""Deletion Guard — refuses to remove a Category or Tag that tasks still reference.

Invariants:
    - check_deletable is PURE: reference_count in, error list out
    - Zero references → no errors → the shell may delete
    - Any reference → the shell must abort with zero side effects

Design Decisions:
    - Reference counting lives in the shell, inside the same transaction that
      holds the entity row FOR UPDATE, so check-then-delete is atomic against
      a concurrent task attaching to the same row
"""

from taskvault.core.errors import DeletionRefusedError, ErrorContext


def check_deletable(resource: str, reference_count: int) -> list[str]:
    """Return the errors that block deletion (empty when deletion is safe)."""
    if reference_count <= 0:
        return []
    noun, verb = ("task", "references") if reference_count == 1 else ("tasks", "reference")
    return [
        f"Cannot delete {resource}: {reference_count} {noun} still "
        f"{verb} this {resource}",
    ]


def ensure_deletable(
    resource: str, reference_count: int, context: ErrorContext | None = None,
) -> None:
    errors = check_deletable(resource, reference_count)
    if errors:
        raise DeletionRefusedError(errors, context)
