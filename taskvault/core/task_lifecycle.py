"""Task Lifecycle — the status state machine and its transition contract.

Invariants:
    - pending → in_progress → {completed, cancelled}; pending → {completed, cancelled}
    - completed/cancelled are terminal; only UNCOMPLETE leaves them (→ pending)
    - COMPLETE, CANCEL, START_PROGRESS from a disallowed source are no-ops
    - UNCOMPLETE from a non-terminal source raises InvalidTransitionError
    - Every transition that changes status re-runs validate_task (due_date rule)

Design Decisions:
    - Transition table as data (_TRANSITIONS): one place to read the whole machine
    - plan_transition is pure and returns a Transition descriptor; the shell applies it
"""

from dataclasses import dataclass, replace

from taskvault.core.domain_types import (
    ACTIVE_STATUSES, TERMINAL_STATUSES, TaskAction, TaskStatus,
)
from taskvault.core.enforce_entities import TaskDraft, ensure_valid, validate_task
from taskvault.core.errors import InvalidTransitionError


# action -> (allowed source states, target state)
_TRANSITIONS: dict[TaskAction, tuple[frozenset[TaskStatus], TaskStatus]] = {
    TaskAction.COMPLETE: (ACTIVE_STATUSES, TaskStatus.COMPLETED),
    TaskAction.CANCEL: (ACTIVE_STATUSES, TaskStatus.CANCELLED),
    TaskAction.START_PROGRESS: (
        frozenset({TaskStatus.PENDING}), TaskStatus.IN_PROGRESS,
    ),
    TaskAction.UNCOMPLETE: (TERMINAL_STATUSES, TaskStatus.PENDING),
}


@dataclass(frozen=True)
class Transition:
    """Outcome of applying an action to a status."""
    action: TaskAction
    from_status: TaskStatus
    to_status: TaskStatus

    @property
    def changed(self) -> bool:
        return self.from_status != self.to_status


def can_transition(current: TaskStatus, action: TaskAction) -> bool:
    sources, _ = _TRANSITIONS[action]
    return current in sources


def plan_transition(current: TaskStatus, action: TaskAction) -> Transition:
    """Decide the target status for action. Pure — no state mutation."""
    if can_transition(current, action):
        return Transition(action, current, _TRANSITIONS[action][1])
    if action is TaskAction.UNCOMPLETE:
        raise InvalidTransitionError(current.value)
    return Transition(action, current, current)


def apply_transition(
    draft: TaskDraft, action: TaskAction,
) -> tuple[TaskDraft, Transition]:
    """Plan the transition and re-validate the resulting draft when status moves."""
    transition = plan_transition(TaskStatus(draft.status), action)
    if not transition.changed:
        return draft, transition
    moved = replace(draft, status=transition.to_status.value)
    ensure_valid(validate_task(moved))
    return moved, transition
