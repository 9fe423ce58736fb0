"""
Admissions Models

Database model for candidate admission applications and the enums that
describe the review workflow.

The candidate fields are fixed at submission. The workflow fields
(status, teacher_status, final_status, decision_done, interview_*) change
only through the transition engine in service.py, and "deletion" is a
soft flag - rows are never removed.
"""

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    Index,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from tti_admissions.core.database import Base


class Course(str, enum.Enum):
    """Courses a candidate can apply for."""

    DBMS = "DBMS"
    CLOUD_COMPUTING = "CloudComputing"
    ACCESSIBILITY = "Accessibility"
    BASIC_COMPUTERS = "BasicComputers"
    MACHINE_LEARNING = "MachineLearning"


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class SkillLevel(str, enum.Enum):
    """Self-assessed skill levels."""

    NONE = "None"
    FAIR = "Fair"
    GOOD = "Good"
    EXCELLENT = "Excellent"
    OUTSTANDING = "Outstanding"


class AdmissionStatus(str, enum.Enum):
    """Workflow status of an admission."""

    SUBMITTED = "SUBMITTED"
    HEAD_ACCEPTED = "HEAD_ACCEPTED"
    HEAD_REJECTED = "HEAD_REJECTED"
    INTERVIEW_SCHEDULED = "INTERVIEW_SCHEDULED"
    SELECTED = "SELECTED"
    REJECTED = "REJECTED"


class TeacherStatus(str, enum.Enum):
    """Teacher's view of the candidate (informational, never gates a transition)."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class FinalStatus(str, enum.Enum):
    """Final admission outcome."""

    PENDING = "PENDING"
    SELECTED = "SELECTED"
    REJECTED = "REJECTED"


# Shared so the postgres type is created once for all three columns
skill_level_type = Enum(SkillLevel, name="skill_level")


class Admission(Base):
    """
    Candidate admission application.

    Email and mobile are unique among non-deleted rows (partial unique
    indexes), so a soft-deleted candidate may apply again.
    """

    __tablename__ = "admissions"

    # Primary key
    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Candidate
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile: Mapped[str] = mapped_column(String(20), nullable=False)
    dob: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[Gender] = mapped_column(Enum(Gender, name="gender"), nullable=False)

    # Location
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    district: Mapped[str] = mapped_column(String(100), nullable=False)

    # Background
    disability_status: Mapped[str] = mapped_column(String(200), nullable=False)
    education: Mapped[str] = mapped_column(String(200), nullable=False)
    enrolled_course: Mapped[str] = mapped_column(String(200), nullable=False)
    course: Mapped[Course] = mapped_column(Enum(Course, name="course"), nullable=False)

    # Skill assessment
    basic_computer_knowledge: Mapped[SkillLevel] = mapped_column(
        skill_level_type, nullable=False
    )
    basic_english_skills: Mapped[SkillLevel] = mapped_column(
        skill_level_type, nullable=False
    )
    screen_reader: Mapped[SkillLevel] = mapped_column(
        skill_level_type, nullable=False
    )

    rules_declaration: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Uploaded document references (storage paths)
    passport_photo: Mapped[str] = mapped_column(String(500), nullable=False)
    id_proof: Mapped[str] = mapped_column(String(500), nullable=False)
    udid: Mapped[str] = mapped_column(String(500), nullable=False)
    disability_certificate: Mapped[str] = mapped_column(String(500), nullable=False)
    degree_memo: Mapped[str] = mapped_column(String(500), nullable=False)
    medical_certificate: Mapped[str] = mapped_column(String(500), nullable=False)

    # Workflow
    status: Mapped[AdmissionStatus] = mapped_column(
        Enum(AdmissionStatus, name="admission_status"),
        nullable=False,
        default=AdmissionStatus.SUBMITTED,
    )
    teacher_status: Mapped[TeacherStatus] = mapped_column(
        Enum(TeacherStatus, name="teacher_status"),
        nullable=False,
        default=TeacherStatus.PENDING,
    )
    final_status: Mapped[FinalStatus] = mapped_column(
        Enum(FinalStatus, name="final_status"),
        nullable=False,
        default=FinalStatus.PENDING,
    )
    decision_done: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Interview (set once, by a teacher)
    interview_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    interview_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    interview_platform: Mapped[str | None] = mapped_column(String(100), nullable=True)
    interview_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    interview_scheduled_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Soft delete
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    deletion_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_admissions_status", "status"),
        Index("ix_admissions_final_status", "final_status"),
        Index("ix_admissions_course_status", "course", "status"),
        Index(
            "uq_admissions_email_active",
            "email",
            unique=True,
            postgresql_where=text("is_deleted = false"),
        ),
        Index(
            "uq_admissions_mobile_active",
            "mobile",
            unique=True,
            postgresql_where=text("is_deleted = false"),
        ),
    )

    @property
    def has_interview(self) -> bool:
        return bool(
            self.interview_date
            and self.interview_time
            and self.interview_platform
            and self.interview_link
        )

    def __repr__(self) -> str:
        return f"<Admission(id={self.id}, course={self.course}, status={self.status})>"
