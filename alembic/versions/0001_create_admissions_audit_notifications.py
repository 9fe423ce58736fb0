"""create admissions, audit_logs and notifications tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Enum labels are the Python member names, matching SQLAlchemy's default
# Enum(...) storage.
course_enum = postgresql.ENUM(
    "DBMS",
    "CLOUD_COMPUTING",
    "ACCESSIBILITY",
    "BASIC_COMPUTERS",
    "MACHINE_LEARNING",
    name="course",
    create_type=False,
)
gender_enum = postgresql.ENUM("MALE", "FEMALE", "OTHER", name="gender", create_type=False)
skill_level_enum = postgresql.ENUM(
    "NONE", "FAIR", "GOOD", "EXCELLENT", "OUTSTANDING", name="skill_level", create_type=False
)
admission_status_enum = postgresql.ENUM(
    "SUBMITTED",
    "HEAD_ACCEPTED",
    "HEAD_REJECTED",
    "INTERVIEW_SCHEDULED",
    "SELECTED",
    "REJECTED",
    name="admission_status",
    create_type=False,
)
teacher_status_enum = postgresql.ENUM(
    "PENDING", "ACCEPTED", "REJECTED", name="teacher_status", create_type=False
)
final_status_enum = postgresql.ENUM(
    "PENDING", "SELECTED", "REJECTED", name="final_status", create_type=False
)
target_role_enum = postgresql.ENUM(
    "HEAD", "TEACHER", "ALL", name="notification_target_role", create_type=False
)

ALL_ENUMS = (
    course_enum,
    gender_enum,
    skill_level_enum,
    admission_status_enum,
    teacher_status_enum,
    final_status_enum,
    target_role_enum,
)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in ALL_ENUMS:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "admissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        # Candidate
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("mobile", sa.String(length=20), nullable=False),
        sa.Column("dob", sa.Date(), nullable=False),
        sa.Column("gender", gender_enum, nullable=False),
        sa.Column("state", sa.String(length=100), nullable=False),
        sa.Column("district", sa.String(length=100), nullable=False),
        sa.Column("disability_status", sa.String(length=200), nullable=False),
        sa.Column("education", sa.String(length=200), nullable=False),
        sa.Column("enrolled_course", sa.String(length=200), nullable=False),
        sa.Column("course", course_enum, nullable=False),
        sa.Column("basic_computer_knowledge", skill_level_enum, nullable=False),
        sa.Column("basic_english_skills", skill_level_enum, nullable=False),
        sa.Column("screen_reader", skill_level_enum, nullable=False),
        sa.Column("rules_declaration", sa.Boolean(), nullable=False),
        # Documents
        sa.Column("passport_photo", sa.String(length=500), nullable=False),
        sa.Column("id_proof", sa.String(length=500), nullable=False),
        sa.Column("udid", sa.String(length=500), nullable=False),
        sa.Column("disability_certificate", sa.String(length=500), nullable=False),
        sa.Column("degree_memo", sa.String(length=500), nullable=False),
        sa.Column("medical_certificate", sa.String(length=500), nullable=False),
        # Workflow
        sa.Column(
            "status", admission_status_enum, nullable=False, server_default="SUBMITTED"
        ),
        sa.Column(
            "teacher_status", teacher_status_enum, nullable=False, server_default="PENDING"
        ),
        sa.Column("final_status", final_status_enum, nullable=False, server_default="PENDING"),
        sa.Column("decision_done", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("interview_date", sa.Date(), nullable=True),
        sa.Column("interview_time", sa.String(length=20), nullable=True),
        sa.Column("interview_platform", sa.String(length=100), nullable=True),
        sa.Column("interview_link", sa.String(length=500), nullable=True),
        sa.Column("interview_scheduled_by", sa.String(length=64), nullable=True),
        # Soft delete
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by", sa.String(length=64), nullable=True),
        sa.Column("deletion_reason", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_admissions_status", "admissions", ["status"])
    op.create_index("ix_admissions_final_status", "admissions", ["final_status"])
    op.create_index("ix_admissions_course_status", "admissions", ["course", "status"])
    # One active application per email / mobile; soft-deleted rows don't count
    op.create_index(
        "uq_admissions_email_active",
        "admissions",
        ["email"],
        unique=True,
        postgresql_where=sa.text("is_deleted = false"),
    )
    op.create_index(
        "uq_admissions_mobile_active",
        "admissions",
        ["mobile"],
        unique=True,
        postgresql_where=sa.text("is_deleted = false"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("actor_id", sa.String(length=64), nullable=True),
        sa.Column("actor_role", sa.String(length=20), nullable=False),
        sa.Column("actor_name", sa.String(length=200), nullable=False),
        sa.Column("admission_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("candidate_name", sa.String(length=200), nullable=False),
        sa.Column("candidate_course", sa.String(length=50), nullable=False),
        sa.Column("note", sa.Text(), nullable=False),
        sa.Column("meta", sa.JSON(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])
    op.create_index(
        "ix_audit_logs_actor_role_created_at", "audit_logs", ["actor_role", "created_at"]
    )
    op.create_index(
        "ix_audit_logs_admission_id_created_at", "audit_logs", ["admission_id", "created_at"]
    )

    op.create_table(
        "notifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("target_role", target_role_enum, nullable=False),
        sa.Column("course", sa.String(length=50), nullable=True),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column(
            "read_by",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("meta", sa.JSON(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_notifications_target_role_course", "notifications", ["target_role", "course"]
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_notifications_created_at", table_name="notifications")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_index("ix_notifications_target_role_course", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_audit_logs_admission_id_created_at", table_name="audit_logs")
    op.drop_index("ix_audit_logs_actor_role_created_at", table_name="audit_logs")
    op.drop_index("ix_audit_logs_created_at", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("uq_admissions_mobile_active", table_name="admissions")
    op.drop_index("uq_admissions_email_active", table_name="admissions")
    op.drop_index("ix_admissions_course_status", table_name="admissions")
    op.drop_index("ix_admissions_final_status", table_name="admissions")
    op.drop_index("ix_admissions_status", table_name="admissions")
    op.drop_table("admissions")

    bind = op.get_bind()
    for enum_type in reversed(ALL_ENUMS):
        enum_type.drop(bind, checkfirst=True)
