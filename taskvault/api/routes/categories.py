"""Category Routes — list/filter/sort/paginate plus CRUD for the caller's categories."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.api.deps import get_caller
from taskvault.core.authorization import Caller
from taskvault.core.query_spec import CategoryListParams
from taskvault.infrastructure.database import get_db
from taskvault.schemas.category import CategoryCreate, CategoryUpdate
from taskvault.schemas.envelope import success_envelope
from taskvault.services.category_service import CategoryService

router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


def category_list_params(
    page: int | None = Query(None),
    per_page: int | None = Query(None),
    search: str | None = Query(None),
    sort_by: str | None = Query(None),
    order: str | None = Query(None),
    with_tasks: bool = Query(False),
    empty: bool = Query(False),
) -> CategoryListParams:
    return CategoryListParams(
        page=page, per_page=per_page, search=search, sort_by=sort_by,
        order=order, with_tasks=with_tasks, empty=empty,
    )


@router.get("")
async def list_categories(
    params: CategoryListParams = Depends(category_list_params),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    categories, meta = await CategoryService(db, caller).list_page(params)
    return success_envelope(categories, meta.to_dict())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    category = await CategoryService(db, caller).create(
        body.model_dump(exclude_unset=True),
    )
    return success_envelope(category)


@router.get("/{category_id}")
async def get_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return success_envelope(await CategoryService(db, caller).get(category_id))


@router.put("/{category_id}")
@router.patch("/{category_id}")
async def update_category(
    category_id: UUID,
    body: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    category = await CategoryService(db, caller).update(
        category_id, body.model_dump(exclude_unset=True),
    )
    return success_envelope(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    await CategoryService(db, caller).delete(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
