"""
Shared FastAPI dependencies.

Routers import their DB session, admin guard and pagination from here.
"""

from __future__ import annotations

from typing import TypedDict

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from db_models import User
from domain.enums import UserRole
from domain.errors import PermissionDeniedError
from middleware.auth import require_admin_token


class Pagination(TypedDict):
    limit: int
    offset: int


def pagination_params(
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0, le=100_000),
) -> Pagination:
    return {"limit": limit, "offset": offset}


async def require_admin(
    admin_id: int = Depends(require_admin_token),
    db: AsyncSession = Depends(get_db),
) -> int:
    """
    Require that the token subject is an active ADMIN user.

    Returns the admin's user id for services to record as the acting admin.
    """
    user = await db.get(User, admin_id)
    if not user:
        raise PermissionDeniedError("Admin account not found.")
    if user.role != UserRole.ADMIN.value:
        raise PermissionDeniedError("Admin role required for this endpoint.")
    if not user.is_active:
        raise PermissionDeniedError("Admin account is disabled.")
    return admin_id
