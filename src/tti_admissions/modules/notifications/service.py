"""
Notifications Service

Per-principal reads and read-state updates of in-app notifications.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tti_admissions.core.auth import Principal
from tti_admissions.modules.admissions.errors import NotificationNotFoundError
from tti_admissions.modules.notifications import repository
from tti_admissions.modules.notifications.models import Notification
from tti_admissions.modules.notifications.schemas import (
    MarkAllReadResponse,
    MarkReadResponse,
    NotificationListResponse,
    NotificationResponse,
)

logger = logging.getLogger(__name__)


def _to_response(notification: Notification, principal: Principal) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        title=notification.title,
        message=notification.message,
        target_role=notification.target_role,
        course=notification.course,
        meta=notification.meta or {},
        is_read=notification.is_read_by(principal.id),
        created_at=notification.created_at,
    )


async def list_notifications(
    db: AsyncSession,
    principal: Principal,
    *,
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 50,
) -> NotificationListResponse:
    notifications, total, unread_count = await repository.list_visible(
        db, principal, unread_only=unread_only, skip=skip, limit=limit
    )
    return NotificationListResponse(
        items=[_to_response(n, principal) for n in notifications],
        total=total,
        unread_count=unread_count,
        skip=skip,
        limit=limit,
    )


async def mark_read(
    db: AsyncSession, principal: Principal, notification_id: UUID
) -> MarkReadResponse:
    """
    Mark one notification as read by the principal.

    Marking an already-read notification again is a no-op.

    Raises:
        NotificationNotFoundError: If it doesn't exist or isn't visible to the principal
    """
    notification = await repository.get_visible(
        db, principal, notification_id, for_update=True
    )
    if notification is None:
        logger.warning(f"Notification {notification_id} not visible to {principal}")
        raise NotificationNotFoundError(notification_id)

    if repository.mark_read(notification, principal.id):
        await db.commit()

    return MarkReadResponse(id=notification.id)


async def mark_all_read(db: AsyncSession, principal: Principal) -> MarkAllReadResponse:
    """Mark every visible, unread notification as read by the principal."""
    notifications = await repository.list_unread_visible(db, principal)

    updated = sum(1 for n in notifications if repository.mark_read(n, principal.id))
    if updated:
        await db.commit()

    logger.info(f"{principal} marked {updated} notification(s) as read")
    return MarkAllReadResponse(updated=updated)
