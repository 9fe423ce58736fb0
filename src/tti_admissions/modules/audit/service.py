"""
Audit Log Service

Role-scoped reads of the audit trail. HEAD sees every entry; a TEACHER
sees entries they wrote plus system-generated ones (submissions).
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tti_admissions.core.auth import Principal, Role
from tti_admissions.modules.audit import repository
from tti_admissions.modules.audit.schemas import AuditLogListResponse, AuditLogResponse

logger = logging.getLogger(__name__)


async def list_audit_logs(
    db: AsyncSession,
    principal: Principal,
    *,
    admission_id: UUID | None = None,
    action: str | None = None,
    skip: int = 0,
    limit: int = 50,
) -> AuditLogListResponse:
    """
    List audit entries visible to the principal, newest first.

    Entries for soft-deleted admissions remain listed.
    """
    entries, total = await repository.list_logs(
        db,
        visible_to_actor=None if principal.role == Role.HEAD else principal.id,
        admission_id=admission_id,
        action=action,
        skip=skip,
        limit=limit,
    )
    logger.debug(f"{principal} listed {len(entries)} of {total} audit entries")

    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(e) for e in entries],
        total=total,
        skip=skip,
        limit=limit,
    )
