"""Task Routes — list/filter/sort/paginate, status shortcuts, CRUD and transitions.

Invariants:
    - Status shortcut routes are declared before /{task_id} so they never parse as ids
    - complete/cancel/start on a disallowed source return the task unchanged (200)
    - uncomplete on a non-terminal task → 422 "Task is not finished"
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.api.deps import get_caller
from taskvault.core.authorization import Caller
from taskvault.core.domain_types import (
    MAX_PRIORITY, MIN_PRIORITY, TaskAction, TaskStatus,
)
from taskvault.core.query_spec import TaskListParams
from taskvault.infrastructure.database import get_db
from taskvault.schemas.envelope import success_envelope
from taskvault.schemas.task import TaskCreate, TaskUpdate
from taskvault.services.task_service import TaskService

router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])


def task_list_params(
    page: int | None = Query(None),
    per_page: int | None = Query(None),
    search: str | None = Query(None),
    sort_by: str | None = Query(None),
    order: str | None = Query(None),
    status_filter: str | None = Query(None, alias="status"),
    priority: int | None = Query(None, ge=MIN_PRIORITY, le=MAX_PRIORITY),
    category_id: UUID | None = Query(None),
    tag_id: UUID | None = Query(None),
    overdue: bool = Query(False),
    due_soon: bool = Query(False),
) -> TaskListParams:
    return TaskListParams(
        page=page, per_page=per_page, search=search, sort_by=sort_by,
        order=order, status=status_filter, priority=priority,
        category_id=category_id, tag_id=tag_id,
        overdue=overdue, due_soon=due_soon,
    )


async def _list(
    params: TaskListParams, db: AsyncSession, caller: Caller,
    status_scope: TaskStatus | None = None,
) -> dict:
    tasks, meta = await TaskService(db, caller).list_page(
        params, status_scope.value if status_scope else None,
    )
    return success_envelope(tasks, meta.to_dict())


@router.get("")
async def list_tasks(
    params: TaskListParams = Depends(task_list_params),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return await _list(params, db, caller)


@router.get("/completed")
async def list_completed_tasks(
    params: TaskListParams = Depends(task_list_params),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return await _list(params, db, caller, TaskStatus.COMPLETED)


@router.get("/pending")
async def list_pending_tasks(
    params: TaskListParams = Depends(task_list_params),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return await _list(params, db, caller, TaskStatus.PENDING)


@router.get("/in_progress")
async def list_in_progress_tasks(
    params: TaskListParams = Depends(task_list_params),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return await _list(params, db, caller, TaskStatus.IN_PROGRESS)


@router.get("/cancelled")
async def list_cancelled_tasks(
    params: TaskListParams = Depends(task_list_params),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return await _list(params, db, caller, TaskStatus.CANCELLED)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    body: TaskCreate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    task = await TaskService(db, caller).create(body.model_dump(exclude_unset=True))
    return success_envelope(task)


@router.get("/{task_id}")
async def get_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return success_envelope(await TaskService(db, caller).get(task_id))


@router.put("/{task_id}")
@router.patch("/{task_id}")
async def update_task(
    task_id: UUID,
    body: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    task = await TaskService(db, caller).update(
        task_id, body.model_dump(exclude_unset=True),
    )
    return success_envelope(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    await TaskService(db, caller).delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── Transitions ────────────────────────────────────────────────

async def _transition(
    task_id: UUID, action: TaskAction, db: AsyncSession, caller: Caller,
) -> dict:
    return success_envelope(
        await TaskService(db, caller).transition(task_id, action),
    )


@router.patch("/{task_id}/complete")
async def complete_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return await _transition(task_id, TaskAction.COMPLETE, db, caller)


@router.patch("/{task_id}/uncomplete")
async def uncomplete_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return await _transition(task_id, TaskAction.UNCOMPLETE, db, caller)


@router.patch("/{task_id}/cancel")
async def cancel_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return await _transition(task_id, TaskAction.CANCEL, db, caller)


@router.patch("/{task_id}/start")
async def start_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return await _transition(task_id, TaskAction.START_PROGRESS, db, caller)
