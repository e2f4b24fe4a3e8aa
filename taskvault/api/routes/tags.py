"""Tag Routes — list/filter/sort/paginate (incl. popular) plus CRUD for the caller's tags."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.api.deps import get_caller
from taskvault.core.authorization import Caller
from taskvault.core.query_spec import TagListParams
from taskvault.infrastructure.database import get_db
from taskvault.schemas.envelope import success_envelope
from taskvault.schemas.tag import TagCreate, TagUpdate
from taskvault.services.tag_service import TagService

router = APIRouter(prefix="/api/v1/tags", tags=["tags"])


def tag_list_params(
    page: int | None = Query(None),
    per_page: int | None = Query(None),
    search: str | None = Query(None),
    sort_by: str | None = Query(None),
    order: str | None = Query(None),
    with_tasks: bool = Query(False),
    unused: bool = Query(False),
    color: str | None = Query(None),
    popular: bool = Query(False),
) -> TagListParams:
    return TagListParams(
        page=page, per_page=per_page, search=search, sort_by=sort_by,
        order=order, with_tasks=with_tasks, unused=unused, color=color,
        popular=popular,
    )


@router.get("")
async def list_tags(
    params: TagListParams = Depends(tag_list_params),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    tags, meta = await TagService(db, caller).list_page(params)
    return success_envelope(tags, meta.to_dict())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tag(
    body: TagCreate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    tag = await TagService(db, caller).create(body.model_dump(exclude_unset=True))
    return success_envelope(tag)


@router.get("/{tag_id}")
async def get_tag(
    tag_id: UUID,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return success_envelope(await TagService(db, caller).get(tag_id))


@router.put("/{tag_id}")
@router.patch("/{tag_id}")
async def update_tag(
    tag_id: UUID,
    body: TagUpdate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    tag = await TagService(db, caller).update(
        tag_id, body.model_dump(exclude_unset=True),
    )
    return success_envelope(tag)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(
    tag_id: UUID,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    await TagService(db, caller).delete(tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
