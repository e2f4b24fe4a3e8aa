"""User Routes — registration, profile reads, self-service profile updates.

Invariants:
    - POST /register and POST "" are the only unauthenticated user endpoints
    - GET /{id}/profile follows the same view rule as GET /{id}
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.api.deps import get_caller
from taskvault.core.authorization import Caller
from taskvault.infrastructure.database import get_db
from taskvault.schemas.envelope import success_envelope
from taskvault.schemas.user import UserRegister, UserUpdate
from taskvault.services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
@router.post("", status_code=status.HTTP_201_CREATED)
async def register_user(body: UserRegister, db: AsyncSession = Depends(get_db)):
    user = await UserService(db).register(body.model_dump(exclude_unset=True))
    return success_envelope(user)


@router.get("/{user_id}/profile")
async def get_profile(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return success_envelope(await UserService(db, caller).get(user_id))


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return success_envelope(await UserService(db, caller).get(user_id))


@router.put("/{user_id}")
@router.patch("/{user_id}")
async def update_user(
    user_id: UUID,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    user = await UserService(db, caller).update(
        user_id, body.model_dump(exclude_unset=True),
    )
    return success_envelope(user)
