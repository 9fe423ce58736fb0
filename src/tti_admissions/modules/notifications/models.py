"""
Notification Models

In-app notifications produced by the admission workflow. Each one targets a
role (optionally narrowed to a course or a single user). Recipients mark
them read; they are never deleted.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, Index, String, Text, func
from sqlalchemy.dialects.postgresql import JSON, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from tti_admissions.core.database import Base


class TargetRole(str, enum.Enum):
    """Audience of a notification."""

    HEAD = "HEAD"
    TEACHER = "TEACHER"
    ALL = "ALL"


class Notification(Base):
    """In-app notification with per-user read tracking."""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    # Audience
    target_role: Mapped[TargetRole] = mapped_column(
        Enum(TargetRole, name="notification_target_role"),
        nullable=False,
        default=TargetRole.ALL,
    )
    course: Mapped[str | None] = mapped_column(String(50), nullable=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # JSONB array of user ids: ["<id>", ...]
    read_by: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    meta: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_notifications_target_role_course", "target_role", "course"),
        Index("ix_notifications_user_id", "user_id"),
        Index("ix_notifications_created_at", "created_at"),
    )

    def is_read_by(self, user_id: str) -> bool:
        return user_id in (self.read_by or [])

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, role={self.target_role}, course={self.course})>"
