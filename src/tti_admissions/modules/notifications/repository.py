"""
Notifications Repository

Visibility rules, applied in every read:
- target_role is the principal's role, or ALL
- course is empty, or the principal's course (HEAD sees every course)
- user_id is empty, or the principal's id
"""

from typing import Any
from uuid import UUID

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tti_admissions.core.auth import Principal, Role

from .models import Notification, TargetRole

MAX_PAGE_SIZE = 100


async def create(
    db: AsyncSession,
    *,
    title: str,
    message: str,
    target_role: TargetRole,
    course: str | None = None,
    user_id: str | None = None,
    meta: dict[str, Any] | None = None,
) -> Notification:
    """Add a notification to the session (committed by the caller)."""
    notification = Notification(
        title=title,
        message=message,
        target_role=target_role,
        course=course,
        user_id=user_id,
        read_by=[],
        meta=meta or {},
    )
    db.add(notification)
    await db.flush()
    return notification


def _visible_to(query: Select, principal: Principal) -> Select:
    query = query.where(
        Notification.target_role.in_([TargetRole(principal.role.value), TargetRole.ALL]),
        or_(Notification.user_id.is_(None), Notification.user_id == principal.id),
    )
    if principal.role != Role.HEAD:
        course = principal.course.value if principal.course else None
        query = query.where(or_(Notification.course.is_(None), Notification.course == course))
    return query


def _unread_by(query: Select, user_id: str) -> Select:
    return query.where(~Notification.read_by.contains([user_id]))


async def list_visible(
    db: AsyncSession,
    principal: Principal,
    *,
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[Notification], int, int]:
    """
    Get notifications visible to the principal, newest first.

    Returns:
        Tuple of (notifications, total matching, unread count)
    """
    query = _visible_to(select(Notification), principal)

    unread_count = (
        await db.execute(
            select(func.count()).select_from(_unread_by(query, principal.id).subquery())
        )
    ).scalar() or 0

    if unread_only:
        query = _unread_by(query, principal.id)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0

    limit = max(1, min(limit, MAX_PAGE_SIZE))
    query = query.order_by(Notification.created_at.desc()).offset(max(skip, 0)).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all()), total, unread_count


async def get_visible(
    db: AsyncSession, principal: Principal, id: UUID, *, for_update: bool = False
) -> Notification | None:
    """
    Get one notification if the principal may see it.

    read_by is shared by every principal the notification targets, so a
    caller that rewrites it must lock the row with for_update=True.
    """
    query = _visible_to(select(Notification).where(Notification.id == id), principal)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def list_unread_visible(db: AsyncSession, principal: Principal) -> list[Notification]:
    query = _unread_by(_visible_to(select(Notification), principal), principal.id)
    result = await db.execute(query.with_for_update())
    return list(result.scalars().all())


def mark_read(notification: Notification, user_id: str) -> bool:
    """
    Add user_id to read_by. Idempotent.

    Returns:
        True if the notification was unread by this user
    """
    read_by = list(notification.read_by or [])
    if user_id in read_by:
        return False
    # Reassign: in-place mutation of a JSON column is not change-tracked
    notification.read_by = [*read_by, user_id]
    return True
