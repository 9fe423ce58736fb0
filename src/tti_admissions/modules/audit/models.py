"""
Audit Log Models

Append-only record of every workflow action. Exactly one row is written per
successful submission or transition; rows are never updated or deleted.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text, func
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from tti_admissions.core.database import Base

SYSTEM_ACTOR_ROLE = "SYSTEM"


class AuditLog(Base):
    """Immutable audit entry describing who did what to which admission."""

    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    action: Mapped[str] = mapped_column(String(50), nullable=False)

    # Actor (SYSTEM for candidate-initiated events)
    actor_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    actor_role: Mapped[str] = mapped_column(String(20), nullable=False, default=SYSTEM_ACTOR_ROLE)
    actor_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    # Subject, denormalized so entries outlive edits to the admission
    admission_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    candidate_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    candidate_course: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    note: Mapped[str] = mapped_column(Text, nullable=False, default="")
    meta: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_audit_logs_created_at", "created_at"),
        Index("ix_audit_logs_actor_role_created_at", "actor_role", "created_at"),
        Index("ix_audit_logs_admission_id_created_at", "admission_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AuditLog(action={self.action}, admission_id={self.admission_id})>"
