"""
Admissions Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import date, datetime
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

# Re-use enums from models (they work with Pydantic too!)
from tti_admissions.modules.admissions.models import (
    AdmissionStatus,
    Course,
    FinalStatus,
    Gender,
    SkillLevel,
    TeacherStatus,
)
from tti_admissions.modules.admissions.transitions import TransitionAction
from tti_admissions.modules.notifications.dispatcher import Channel, DeliveryResult

MAX_DELETION_REASON_LENGTH = 500

# Upload field names, in the order they're validated and stored
DOCUMENT_FIELDS = (
    "passport_photo",
    "id_proof",
    "udid",
    "disability_certificate",
    "degree_memo",
    "medical_certificate",
)


class AdmissionCreate(BaseModel):
    """Candidate fields submitted with POST /admissions (documents travel separately)."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    mobile: str = Field(..., min_length=7, max_length=20, pattern=r"^\+?[0-9 \-]+$")
    dob: date
    gender: Gender

    state: str = Field(..., min_length=1, max_length=100)
    district: str = Field(..., min_length=1, max_length=100)

    disability_status: str = Field(..., min_length=1, max_length=200)
    education: str = Field(..., min_length=1, max_length=200)
    enrolled_course: str = Field("", max_length=200)
    course: Course

    basic_computer_knowledge: SkillLevel
    basic_english_skills: SkillLevel
    screen_reader: SkillLevel

    rules_declaration: bool

    @field_validator(
        "name", "state", "district", "disability_status", "education", "enrolled_course"
    )
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("mobile")
    @classmethod
    def normalize_mobile(cls, value: str) -> str:
        return value.strip()

    @model_validator(mode="after")
    def validate_admission(self) -> "AdmissionCreate":
        if self.dob > date.today():
            raise ValueError("dob cannot be in the future")
        if not self.rules_declaration:
            raise ValueError("rules_declaration must be accepted")
        return self


# ============================================
# Transition Payloads
# ============================================


class _TransitionBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    note: str | None = Field(None, max_length=1000)


class HeadApprove(_TransitionBase):
    action: Literal[TransitionAction.HEAD_APPROVE] = TransitionAction.HEAD_APPROVE


class HeadReject(_TransitionBase):
    action: Literal[TransitionAction.HEAD_REJECT] = TransitionAction.HEAD_REJECT


class ScheduleInterview(_TransitionBase):
    """
    Interview details.

    Fields are optional here so that a missing field surfaces as the
    workflow's VALIDATION_ERROR rather than a schema error.
    """

    action: Literal[TransitionAction.SCHEDULE_INTERVIEW] = TransitionAction.SCHEDULE_INTERVIEW
    date: str | None = None
    time: str | None = None
    platform: str | None = None
    link: str | None = None


class FinalApprove(_TransitionBase):
    action: Literal[TransitionAction.FINAL_APPROVE] = TransitionAction.FINAL_APPROVE


class FinalReject(_TransitionBase):
    action: Literal[TransitionAction.FINAL_REJECT] = TransitionAction.FINAL_REJECT


class SoftDelete(_TransitionBase):
    action: Literal[TransitionAction.SOFT_DELETE] = TransitionAction.SOFT_DELETE
    reason: str = ""

    @field_validator("reason", mode="before")
    @classmethod
    def clean_reason(cls, value: str | None) -> str:
        return str(value or "").strip()[:MAX_DELETION_REASON_LENGTH]


TransitionRequest = Annotated[
    HeadApprove | HeadReject | ScheduleInterview | FinalApprove | FinalReject | SoftDelete,
    Field(discriminator="action"),
]


# ============================================
# Request Bodies
# ============================================


class DecisionBody(BaseModel):
    """Optional body for approve/reject endpoints."""

    note: str | None = Field(None, max_length=1000)


class DeleteBody(BaseModel):
    """Body for PUT /admissions/{id}/head-delete."""

    reason: str | None = Field(
        None,
        description="Why the application is being removed (trimmed, max 500 characters)",
    )
    note: str | None = Field(None, max_length=1000)


class InterviewBody(BaseModel):
    """Body for POST /admissions/{id}/schedule-interview."""

    date: str | None = Field(None, json_schema_extra={"example": "2024-05-01"})
    time: str | None = Field(None, json_schema_extra={"example": "10:00"})
    platform: str | None = Field(None, json_schema_extra={"example": "Zoom"})
    link: str | None = Field(None, json_schema_extra={"example": "https://zoom.example/x"})
    note: str | None = Field(None, max_length=1000)


# ============================================
# Responses
# ============================================


class DeliveryStatus(BaseModel):
    """Outcome of one outward notification attempt."""

    channel: Channel
    recipient_count: int
    delivered: bool
    skipped: bool
    error: str | None = None

    @classmethod
    def from_result(cls, result: DeliveryResult) -> "DeliveryStatus":
        return cls(
            channel=result.channel,
            recipient_count=len(result.recipients),
            delivered=result.delivered,
            skipped=result.skipped,
            error=result.error,
        )


class InterviewDetails(BaseModel):
    date: date
    time: str
    platform: str
    link: str


class AdmissionListItem(BaseModel):
    """Summary row for dashboard lists."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    mobile: str
    course: Course
    status: AdmissionStatus
    teacher_status: TeacherStatus
    final_status: FinalStatus
    decision_done: bool
    interview_date: date | None = None
    interview_time: str | None = None
    created_at: datetime


class AdmissionListResponse(BaseModel):
    """Paginated list of admissions."""

    items: list[AdmissionListItem]
    total: int = Field(..., ge=0, description="Total number of admissions matching filters")
    skip: int = Field(..., ge=0)
    limit: int = Field(..., ge=1, le=100)


class AdmissionDetailResponse(BaseModel):
    """Complete admission record plus the actions the caller may take."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    mobile: str
    dob: date
    gender: Gender
    state: str
    district: str
    disability_status: str
    education: str
    enrolled_course: str
    course: Course
    basic_computer_knowledge: SkillLevel
    basic_english_skills: SkillLevel
    screen_reader: SkillLevel
    rules_declaration: bool

    passport_photo: str
    id_proof: str
    udid: str
    disability_certificate: str
    degree_memo: str
    medical_certificate: str

    status: AdmissionStatus
    teacher_status: TeacherStatus
    final_status: FinalStatus
    decision_done: bool
    interview: InterviewDetails | None = None

    created_at: datetime
    updated_at: datetime

    available_actions: list[TransitionAction] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def collect_interview(cls, data):
        # ORM objects carry the interview as flat interview_* columns
        if not isinstance(data, dict) and getattr(data, "has_interview", False):
            return {
                **{name: getattr(data, name) for name in cls.model_fields if hasattr(data, name)},
                "interview": InterviewDetails(
                    date=data.interview_date,
                    time=data.interview_time,
                    platform=data.interview_platform,
                    link=data.interview_link,
                ),
            }
        return data


class TransitionResponse(BaseModel):
    """Response after a workflow transition."""

    id: UUID
    action: TransitionAction
    status: AdmissionStatus
    final_status: FinalStatus
    decision_done: bool
    is_deleted: bool
    audit_log_id: UUID
    notification_id: UUID
    deliveries: list[DeliveryStatus] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    message: str


class SubmissionResponse(BaseModel):
    """Response after submitting an admission."""

    id: UUID
    status: AdmissionStatus
    candidate_email_sent: bool
    head_email_sent: bool
    deliveries: list[DeliveryStatus] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    message: str = "Admission submitted successfully!"
