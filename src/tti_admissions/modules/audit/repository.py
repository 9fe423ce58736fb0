"""
Audit Log Repository

Append and read operations only. Entries are never updated or deleted.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import SYSTEM_ACTOR_ROLE, AuditLog

MAX_PAGE_SIZE = 100


async def create(
    db: AsyncSession,
    *,
    action: str,
    actor_id: str | None,
    actor_role: str,
    actor_name: str,
    admission_id: UUID | None,
    candidate_name: str,
    candidate_course: str,
    note: str = "",
    meta: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an audit entry to the session (committed by the caller)."""
    entry = AuditLog(
        action=action,
        actor_id=actor_id,
        actor_role=actor_role,
        actor_name=actor_name,
        admission_id=admission_id,
        candidate_name=candidate_name,
        candidate_course=candidate_course,
        note=note,
        meta=meta or {},
    )
    db.add(entry)
    await db.flush()
    return entry


async def list_logs(
    db: AsyncSession,
    *,
    visible_to_actor: str | None = None,
    admission_id: UUID | None = None,
    action: str | None = None,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[AuditLog], int]:
    """
    Get audit entries, newest first.

    Args:
        db: Database session
        visible_to_actor: If given, only entries written by this actor id or by SYSTEM
        admission_id: Filter by admission
        action: Filter by action name
        skip: Number of records to skip
        limit: Maximum records to return (capped at 100)

    Returns:
        Tuple of (entries, total count matching filters)
    """
    query = select(AuditLog)

    if visible_to_actor is not None:
        query = query.where(
            or_(
                AuditLog.actor_id == visible_to_actor,
                AuditLog.actor_role == SYSTEM_ACTOR_ROLE,
            )
        )
    if admission_id is not None:
        query = query.where(AuditLog.admission_id == admission_id)
    if action:
        query = query.where(AuditLog.action == action)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    limit = max(1, min(limit, MAX_PAGE_SIZE))
    query = query.order_by(AuditLog.created_at.desc()).offset(max(skip, 0)).limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all()), total
