"""
Notification Schemas
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from tti_admissions.modules.notifications.models import TargetRole


class NotificationResponse(BaseModel):
    id: UUID
    title: str
    message: str
    target_role: TargetRole
    course: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    total: int = Field(..., ge=0)
    unread_count: int = Field(..., ge=0)
    skip: int = Field(..., ge=0)
    limit: int = Field(..., ge=1, le=100)


class MarkReadResponse(BaseModel):
    id: UUID
    is_read: bool = True


class MarkAllReadResponse(BaseModel):
    updated: int = Field(..., ge=0, description="Number of notifications newly marked as read")
