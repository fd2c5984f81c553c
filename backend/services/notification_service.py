"""
Notification service — the admin inbox.

Every read and write is scoped to the admin passed in; one admin cannot
see or mark another admin's notifications.
"""

import logging
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from database import unit_of_work
from db_models import Notification
from domain.enums import NotificationType
from domain.errors import NotFoundError
from models import NotificationResponse

logger = logging.getLogger(__name__)


async def create_notification(
    db: AsyncSession,
    *,
    user_id: int,
    type: NotificationType,
    title: str,
    message: str,
    reference_id: int | None = None,
    reference_type: str | None = None,
) -> Notification:
    """Queue an unread notification. Flushes; the caller commits."""
    notification = Notification(
        user_id=user_id,
        type=NotificationType(type).value,
        title=title,
        message=message,
        reference_id=reference_id,
        reference_type=reference_type,
        is_read=False,
    )
    db.add(notification)
    await db.flush()

    logger.info(f"Notification created for user {user_id}: {title}")
    return notification


async def list_notifications(
    db: AsyncSession, *, user_id: int, unread_only: bool = False
) -> list[NotificationResponse]:
    """Newest first."""
    query = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    res = await db.execute(query.order_by(Notification.created_at.desc(), Notification.id.desc()))
    return [NotificationResponse.model_validate(n) for n in res.scalars().all()]


async def get_unread_count(db: AsyncSession, *, user_id: int) -> int:
    res = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
    )
    return res.scalar_one()


async def mark_as_read(db: AsyncSession, *, notification_id: int, user_id: int) -> NotificationResponse:
    """Marking an already-read notification keeps its first read_at."""
    async with unit_of_work(db):
        res = await db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        )
        notification = res.scalar_one_or_none()
        if not notification:
            raise NotFoundError("Notification", str(notification_id))

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            await db.flush()
        response = NotificationResponse.model_validate(notification)
    return response


async def mark_all_as_read(db: AsyncSession, *, user_id: int) -> int:
    """Returns how many notifications changed."""
    async with unit_of_work(db):
        result = await db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=datetime.utcnow())
            .execution_options(synchronize_session="fetch")
        )
        changed = result.rowcount

    logger.info(f"Marked {changed} notifications as read for user {user_id}")
    return changed
