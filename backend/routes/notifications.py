"""
Admin notification inbox endpoints. Always scoped to the calling admin.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import require_admin
from domain.responses import success_response
from services import notification_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    notifications = await notification_service.list_notifications(
        db, user_id=admin_id, unread_only=unread_only
    )
    return success_response(data=notifications, meta={"total": len(notifications)})


@router.get("/unread")
async def get_unread_count(
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    count = await notification_service.get_unread_count(db, user_id=admin_id)
    return success_response(data={"count": count})


@router.put("/read-all")
async def mark_all_as_read(
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    changed = await notification_service.mark_all_as_read(db, user_id=admin_id)
    return success_response(data={"updated": changed, "message": "All notifications marked as read"})


@router.put("/{notification_id}/read")
async def mark_as_read(
    notification_id: int,
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    logger.info(f"Marking notification {notification_id} as read for admin {admin_id}")
    notification = await notification_service.mark_as_read(
        db, notification_id=notification_id, user_id=admin_id
    )
    return success_response(data=notification)
