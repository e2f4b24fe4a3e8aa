"""Request Dependencies — resolves the caller identity from the X-User-ID header.

Invariants:
    - Missing, malformed or unknown user id → UnauthenticatedError (401)
    - The resolved Caller is passed explicitly into every service

Design Decisions:
    - Header-based identity stands in for the authentication collaborator;
      swapping it for a token scheme only changes this module
"""

import logging
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.core.authorization import Caller
from taskvault.core.errors import UnauthenticatedError
from taskvault.infrastructure.database import get_db
from taskvault.services.user_service import resolve_caller

logger = logging.getLogger(__name__)


async def get_caller(
    x_user_id: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Caller:
    if not x_user_id:
        raise UnauthenticatedError()
    try:
        user_id = UUID(x_user_id.strip())
    except ValueError:
        logger.warning(f"Malformed X-User-ID header: {x_user_id!r}")
        raise UnauthenticatedError()
    caller = await resolve_caller(db, user_id)
    if caller is None:
        raise UnauthenticatedError()
    return caller
