"""
Notifications Router

Endpoints:
- GET /notifications - List notifications visible to the caller
- PUT /notifications/read-all - Mark all visible notifications as read
- PUT /notifications/{id}/read - Mark one notification as read
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tti_admissions.core.auth import Principal, get_current_principal
from tti_admissions.core.database import get_db
from tti_admissions.modules.admissions.errors import AdmissionServiceError
from tti_admissions.modules.notifications import service
from tti_admissions.modules.notifications.schemas import (
    MarkAllReadResponse,
    MarkReadResponse,
    NotificationListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _internal_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


@router.get("", response_model=NotificationListResponse, summary="List Notifications")
async def list_notifications(
    unread_only: bool = Query(False, description="Only unread notifications"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> NotificationListResponse:
    try:
        return await service.list_notifications(
            db, principal, unread_only=unread_only, skip=skip, limit=limit
        )
    except Exception as e:
        logger.exception(f"Error listing notifications: {e}")
        raise _internal_error() from e


@router.put("/read-all", response_model=MarkAllReadResponse, summary="Mark All As Read")
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> MarkAllReadResponse:
    try:
        return await service.mark_all_read(db, principal)
    except Exception as e:
        logger.exception(f"Error marking notifications read: {e}")
        raise _internal_error() from e


@router.put(
    "/{notification_id}/read",
    response_model=MarkReadResponse,
    summary="Mark As Read",
    responses={404: {"description": "Notification not found"}},
)
async def mark_read(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> MarkReadResponse:
    try:
        return await service.mark_read(db, principal, notification_id)
    except AdmissionServiceError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": e.error_code, "message": e.message},
        ) from e
    except Exception as e:
        logger.exception(f"Error marking notification {notification_id} read: {e}")
        raise _internal_error() from e
