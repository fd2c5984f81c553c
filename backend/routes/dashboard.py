"""
Admin dashboard endpoint.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from deps import require_admin
from domain.responses import success_response
from services import dashboard_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/dashboard", tags=["dashboard"])


@router.get("/stats")
async def get_dashboard_stats(
    days: int = Query(settings.dashboard_default_days, ge=1, le=settings.dashboard_max_days),
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    logger.info(f"Fetching dashboard stats for last {days} days")
    stats = await dashboard_service.get_dashboard_stats(db, days=days)
    return success_response(data=stats, meta={"days": days})
