"""Stats Route — global counts across every user, for any authenticated caller."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.api.deps import get_caller
from taskvault.core.authorization import Caller
from taskvault.infrastructure.database import get_db
from taskvault.schemas.envelope import success_envelope
from taskvault.services.stats_service import StatsService

router = APIRouter(prefix="/api/v1/stats", tags=["stats"])


@router.get("")
async def get_stats(
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return success_envelope(await StatsService(db).get_stats())
