"""
Audit Log Router

Endpoints:
- GET /audit-logs - List audit entries visible to the caller

HEAD sees every entry. A TEACHER sees entries they wrote plus
system-generated entries (application submissions).
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tti_admissions.core.auth import Principal, get_current_principal
from tti_admissions.core.database import get_db
from tti_admissions.modules.audit import service
from tti_admissions.modules.audit.schemas import AuditLogListResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=AuditLogListResponse,
    summary="List Audit Logs",
    responses={
        401: {"description": "Unauthorized - invalid or missing token"},
    },
)
async def list_audit_logs(
    admission_id: UUID | None = Query(None, description="Only entries for this admission"),
    action: str | None = Query(None, max_length=50, description="Filter by action name"),
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Maximum records to return"),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> AuditLogListResponse:
    """List audit entries, newest first."""
    try:
        return await service.list_audit_logs(
            db,
            principal,
            admission_id=admission_id,
            action=action,
            skip=skip,
            limit=limit,
        )
    except Exception as e:
        logger.exception(f"Error listing audit logs: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred.",
            },
        ) from e
