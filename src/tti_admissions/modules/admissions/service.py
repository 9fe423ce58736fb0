"""
Admissions Service Layer

The admission workflow engine plus the role-scoped read views.

This module implements:
1. Submission Flow:
   - Require all six documents and the rules declaration
   - Reject duplicate email/mobile among active applications
   - Create the admission at SUBMITTED with its audit entry and HEAD notification
   - Best-effort candidate/HEAD email, candidate SMS and HEAD push

2. Transition Flow (apply_transition):
   - Role guard and payload validation before any read or write
   - Lookup scoped to the rule's source statuses (wrong state -> not found)
   - Full guard including the course check
   - Teacher directory resolution for HEAD_APPROVE
   - Compare-and-swap status update, audit entry and notification in one commit
   - Best-effort outward notifications after the commit

3. Read Views:
   - Paginated lists, TEACHER principals scoped to their own course
   - Named dashboard views
   - Detail with the actions the caller may take

Delivery failures never roll back a committed transition; they are returned
to the caller as warnings.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from functools import lru_cache
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tti_admissions.core.auth import Principal, Role
from tti_admissions.core.config import settings
from tti_admissions.modules.admissions import messages, repository
from tti_admissions.modules.admissions.directory import (
    Contact,
    CourseDirectory,
    head_contact_from_settings,
)
from tti_admissions.modules.admissions.errors import (
    ApplicationNotFoundError,
    DuplicateApplicationError,
    ForbiddenError,
    PayloadValidationError,
)
from tti_admissions.modules.admissions.models import (
    Admission,
    AdmissionStatus,
    Course,
    FinalStatus,
)
from tti_admissions.modules.admissions.schemas import (
    DOCUMENT_FIELDS,
    AdmissionCreate,
    AdmissionDetailResponse,
    AdmissionListItem,
    AdmissionListResponse,
    ScheduleInterview,
    SoftDelete,
    TransitionRequest,
)
from tti_admissions.modules.admissions.transitions import (
    TRANSITIONS,
    AuditAction,
    TransitionAction,
    TransitionRule,
    authorize,
    available_actions,
)
from tti_admissions.modules.audit import repository as audit_repository
from tti_admissions.modules.audit.models import SYSTEM_ACTOR_ROLE, AuditLog
from tti_admissions.modules.notifications import repository as notification_repository
from tti_admissions.modules.notifications.dispatcher import (
    DeliveryResult,
    NotificationDispatcher,
    OutboundMessage,
)
from tti_admissions.modules.notifications.models import Notification

logger = logging.getLogger(__name__)

HEAD_EMAIL_MISSING_WARNING = "HEAD email is not configured"
WRONG_STATE_MESSAGE = "No application found in a state that allows this action."

# Longest value each interview column stores
INTERVIEW_FIELD_LIMITS = {
    "time": Admission.__table__.c.interview_time.type.length,
    "platform": Admission.__table__.c.interview_platform.type.length,
    "link": Admission.__table__.c.interview_link.type.length,
}


@dataclass
class TransitionResult:
    """Outcome of a successful transition."""

    application: Admission
    audit_log: AuditLog
    notification: Notification
    deliveries: list[DeliveryResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class SubmissionResult:
    """Outcome of a successful submission."""

    application: Admission
    audit_log: AuditLog
    notification: Notification
    deliveries: list[DeliveryResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _delivery_warnings(deliveries: list[DeliveryResult]) -> list[str]:
    return [
        f"{d.channel.value} delivery failed: {d.error}"
        for d in deliveries
        if d.failed
    ]


def _parse_interview_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise PayloadValidationError("Interview date must be in YYYY-MM-DD format.") from None


def _interview_values(request: ScheduleInterview, principal: Principal) -> dict[str, Any]:
    """
    Validate interview details.

    Raises:
        PayloadValidationError: If a field is blank or longer than its column,
            the date isn't ISO, or the link isn't an http(s) URL
    """
    fields = {
        "date": request.date,
        "time": request.time,
        "platform": request.platform,
        "link": request.link,
    }
    missing = [name for name, value in fields.items() if not (value or "").strip()]
    if missing:
        raise PayloadValidationError(
            f"Interview {', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required."
        )

    too_long = [
        f"{name} (max {limit} characters)"
        for name, limit in INTERVIEW_FIELD_LIMITS.items()
        if len(fields[name].strip()) > limit
    ]
    if too_long:
        raise PayloadValidationError(f"Interview {', '.join(too_long)} too long.")

    link = request.link.strip()
    if not link.startswith(("http://", "https://")):
        raise PayloadValidationError("Interview link must start with http:// or https://.")

    return {
        "interview_date": _parse_interview_date(request.date.strip()),
        "interview_time": request.time.strip(),
        "interview_platform": request.platform.strip(),
        "interview_link": link,
        "interview_scheduled_by": principal.id,
    }


def _transition_values(
    rule: TransitionRule,
    principal: Principal,
    request: TransitionRequest,
) -> dict[str, Any]:
    """Columns the transition writes. Validates the payload first."""
    values: dict[str, Any] = {}

    if isinstance(request, ScheduleInterview):
        values.update(_interview_values(request, principal))

    if isinstance(request, SoftDelete):
        values.update(
            is_deleted=True,
            deleted_at=datetime.now(UTC),
            deleted_by=principal.id,
            deletion_reason=request.reason,
        )

    if rule.target is not None:
        values["status"] = rule.target
    if rule.final_status is not None:
        values["final_status"] = rule.final_status
        values["decision_done"] = True
    if rule.teacher_status is not None:
        values["teacher_status"] = rule.teacher_status

    return values


def _audit_meta(
    rule: TransitionRule,
    before: AdmissionStatus,
    after: Admission,
    teachers: list[Contact],
) -> dict[str, Any]:
    meta: dict[str, Any] = {"from_status": before.value, "to_status": after.status.value}
    if rule.action == TransitionAction.HEAD_APPROVE:
        meta["teachers"] = [t.name for t in teachers]
    elif rule.action == TransitionAction.SCHEDULE_INTERVIEW:
        meta["interview"] = {
            "date": after.interview_date.isoformat() if after.interview_date else None,
            "time": after.interview_time,
            "platform": after.interview_platform,
            "link": after.interview_link,
        }
    elif rule.action == TransitionAction.SOFT_DELETE:
        meta["reason"] = after.deletion_reason or ""
    if rule.final_status is not None:
        meta["final_status"] = rule.final_status.value
    return meta


def _duplicate_field(error: IntegrityError) -> str:
    return "mobile" if "mobile" in str(error.orig) else "email"


class AdmissionWorkflow:
    """
    The admission status transition engine.

    Args:
        directory: Course -> teacher contacts
        dispatcher: Outward email/SMS/push delivery
        head: The HEAD contact (email may be missing)
        branding: Organization name and dashboard link used in outward messages
    """

    def __init__(
        self,
        directory: CourseDirectory,
        dispatcher: NotificationDispatcher,
        head: Contact,
        branding: messages.Branding,
    ):
        self.directory = directory
        self.dispatcher = dispatcher
        self.head = head
        self.branding = branding

    async def _dispatch(
        self, outbound: list[OutboundMessage]
    ) -> tuple[list[DeliveryResult], list[str]]:
        deliveries = await self.dispatcher.dispatch(outbound)
        return deliveries, _delivery_warnings(deliveries)

    async def _check_duplicates(self, db: AsyncSession, data: AdmissionCreate) -> None:
        """
        Raises:
            DuplicateApplicationError: If an active admission uses the email or mobile
        """
        existing = await repository.find_active_by_contact(db, data.email, data.mobile)
        for admission in existing:
            field_name = "email" if admission.email.lower() == data.email else "mobile"
            logger.warning(
                f"Duplicate admission attempt on {field_name} (existing: {admission.id})"
            )
            raise DuplicateApplicationError(field_name)

    async def submit_application(
        self,
        db: AsyncSession,
        data: AdmissionCreate,
        documents: dict[str, str | None],
    ) -> SubmissionResult:
        """
        Submit a new admission.

        Args:
            db: Database session
            data: Validated candidate fields
            documents: Upload field name -> stored document path

        Returns:
            SubmissionResult with the created admission and delivery outcomes

        Raises:
            PayloadValidationError: If documents are missing or the declaration isn't accepted
            DuplicateApplicationError: If the email or mobile is already in use
        """
        missing = [name for name in DOCUMENT_FIELDS if not documents.get(name)]
        if missing:
            raise PayloadValidationError(f"Missing required documents: {', '.join(missing)}.")
        if not data.rules_declaration:
            raise PayloadValidationError("The rules declaration must be accepted.")

        await self._check_duplicates(db, data)

        try:
            admission = await repository.create(
                db, data, {name: documents[name] for name in DOCUMENT_FIELDS}
            )
            audit_log = await audit_repository.create(
                db,
                action=AuditAction.APPLICATION_SUBMITTED.value,
                actor_id=None,
                actor_role=SYSTEM_ACTOR_ROLE,
                actor_name="Applicant",
                admission_id=admission.id,
                candidate_name=admission.name,
                candidate_course=admission.course.value,
                meta={"to_status": admission.status.value},
            )
            notice = messages.in_app_notice(AuditAction.APPLICATION_SUBMITTED, admission)
            notification = await notification_repository.create(
                db,
                title=notice.title,
                message=notice.message,
                target_role=notice.target_role,
                course=admission.course.value,
                meta={"admission_id": str(admission.id)},
            )
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            field_name = _duplicate_field(e)
            logger.warning(f"Duplicate admission rejected by unique index on {field_name}")
            raise DuplicateApplicationError(field_name) from e
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Admission {admission.id} submitted for {admission.course.value}")

        deliveries, warnings = await self._dispatch(
            messages.submitted_messages(admission, self.head, self.branding)
        )
        if not self.head.email:
            logger.error("HEAD_EMAIL is not configured; skipping head notification email")
            warnings.insert(0, HEAD_EMAIL_MISSING_WARNING)

        return SubmissionResult(
            application=admission,
            audit_log=audit_log,
            notification=notification,
            deliveries=deliveries,
            warnings=warnings,
        )

    async def apply_transition(
        self,
        db: AsyncSession,
        admission_id: UUID,
        principal: Principal,
        request: TransitionRequest,
    ) -> TransitionResult:
        """
        Apply a named transition to an admission.

        Args:
            db: Database session
            admission_id: Admission UUID
            principal: The authenticated reviewer
            request: The transition and its payload

        Returns:
            TransitionResult with the updated admission, its new audit entry and
            notification, and the outcome of each outward delivery

        Raises:
            ForbiddenError: If the principal's role may not perform the action
            PayloadValidationError: If the payload is invalid
            ApplicationNotFoundError: If no active admission is in a source status,
                including when a concurrent request won the race
            CourseMismatchError: If a teacher acts outside their course
            TeacherNotConfiguredError: If HEAD_APPROVE finds no teacher for the course
        """
        rule = TRANSITIONS[request.action]

        try:
            authorize(principal, rule)
        except ForbiddenError:
            logger.warning(f"{principal} denied {rule.action.value} on {admission_id}")
            raise

        values = _transition_values(rule, principal, request)

        admission = await repository.get_active_by_id(db, admission_id, statuses=rule.sources)
        if admission is None:
            logger.warning(
                f"{rule.action.value} on {admission_id}: "
                f"no active admission in {sorted(s.value for s in rule.sources)}"
            )
            raise ApplicationNotFoundError(admission_id, message=WRONG_STATE_MESSAGE)

        try:
            authorize(principal, rule, admission)
        except ForbiddenError:
            logger.warning(
                f"{principal} denied {rule.action.value} on {admission_id} "
                f"(course {admission.course.value})"
            )
            raise

        teachers = self.directory.resolve(admission.course) if rule.requires_teacher else []
        before = admission.status

        try:
            updated = await repository.transition_status(db, admission_id, rule.sources, **values)
            if updated is None:
                logger.warning(f"{rule.action.value} on {admission_id} lost a concurrent update")
                raise ApplicationNotFoundError(admission_id, message=WRONG_STATE_MESSAGE)

            audit_log = await audit_repository.create(
                db,
                action=rule.audit_action.value,
                actor_id=principal.id,
                actor_role=principal.role.value,
                actor_name=principal.name,
                admission_id=updated.id,
                candidate_name=updated.name,
                candidate_course=updated.course.value,
                note=(request.note or "").strip(),
                meta=_audit_meta(rule, before, updated, teachers),
            )
            notice = messages.in_app_notice(rule.audit_action, updated)
            notification = await notification_repository.create(
                db,
                title=notice.title,
                message=notice.message,
                target_role=notice.target_role,
                course=updated.course.value,
                meta={"admission_id": str(updated.id), "action": rule.audit_action.value},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            f"{principal} applied {rule.action.value} to {admission_id}: "
            f"{before.value} -> {updated.status.value}"
        )

        deliveries, warnings = await self._dispatch(self._outbound_for(rule, updated, teachers))

        return TransitionResult(
            application=updated,
            audit_log=audit_log,
            notification=notification,
            deliveries=deliveries,
            warnings=warnings,
        )

    def _outbound_for(
        self,
        rule: TransitionRule,
        admission: Admission,
        teachers: list[Contact],
    ) -> list[OutboundMessage]:
        if rule.action == TransitionAction.HEAD_APPROVE:
            return messages.head_approved_messages(admission, teachers, self.branding)
        if rule.action == TransitionAction.HEAD_REJECT:
            return messages.head_rejected_messages(admission, self.branding)
        if rule.action == TransitionAction.SCHEDULE_INTERVIEW:
            return messages.interview_scheduled_messages(admission, self.branding)
        if rule.action == TransitionAction.FINAL_APPROVE:
            return messages.final_selected_messages(admission, self.branding)
        if rule.action == TransitionAction.FINAL_REJECT:
            return messages.final_rejected_messages(admission, self.branding)
        return []


@lru_cache
def get_workflow() -> AdmissionWorkflow:
    """FastAPI dependency returning the workflow built from settings."""
    return AdmissionWorkflow(
        directory=CourseDirectory.from_settings(settings),
        dispatcher=NotificationDispatcher.from_settings(settings),
        head=head_contact_from_settings(settings),
        branding=messages.Branding.from_settings(settings),
    )


# ============================================
# Read Views
# ============================================


@dataclass(frozen=True)
class AdmissionView:
    """A named dashboard list."""

    status: AdmissionStatus | None = None
    final_status: FinalStatus | None = None
    roles: frozenset[Role] = frozenset({Role.HEAD})


ADMISSION_VIEWS: dict[str, AdmissionView] = {
    "submitted": AdmissionView(status=AdmissionStatus.SUBMITTED),
    "head-accepted": AdmissionView(
        status=AdmissionStatus.HEAD_ACCEPTED, roles=frozenset({Role.HEAD, Role.TEACHER})
    ),
    "head-rejected": AdmissionView(status=AdmissionStatus.HEAD_REJECTED),
    "interview-required": AdmissionView(
        status=AdmissionStatus.INTERVIEW_SCHEDULED, roles=frozenset({Role.HEAD, Role.TEACHER})
    ),
    "teacher-accepted": AdmissionView(
        final_status=FinalStatus.SELECTED, roles=frozenset({Role.HEAD, Role.TEACHER})
    ),
    "teacher-rejected": AdmissionView(
        final_status=FinalStatus.REJECTED, roles=frozenset({Role.HEAD, Role.TEACHER})
    ),
    "final-selected": AdmissionView(final_status=FinalStatus.SELECTED),
    "final-rejected": AdmissionView(final_status=FinalStatus.REJECTED),
}


def _scoped_course(principal: Principal) -> Course | None:
    return principal.course if principal.role == Role.TEACHER else None


async def list_admissions(
    db: AsyncSession,
    principal: Principal,
    *,
    status: AdmissionStatus | None = None,
    final_status: FinalStatus | None = None,
    skip: int = 0,
    limit: int = 20,
) -> AdmissionListResponse:
    """
    List active admissions. A TEACHER only ever sees their own course.
    """
    admissions, total = await repository.list_admissions(
        db,
        course=_scoped_course(principal),
        status=status,
        final_status=final_status,
        skip=skip,
        limit=limit,
    )
    return AdmissionListResponse(
        items=[AdmissionListItem.model_validate(a) for a in admissions],
        total=total,
        skip=skip,
        limit=min(limit, repository.MAX_PAGE_SIZE),
    )


async def get_view(
    db: AsyncSession,
    principal: Principal,
    view: str,
    *,
    skip: int = 0,
    limit: int = 20,
) -> AdmissionListResponse:
    """
    List a named dashboard view.

    Raises:
        ApplicationNotFoundError: If the view name is unknown
        ForbiddenError: If the principal's role may not see the view
    """
    definition = ADMISSION_VIEWS.get(view)
    if definition is None:
        raise ApplicationNotFoundError(message=f"Unknown view: {view}")
    if principal.role not in definition.roles:
        logger.warning(f"{principal} denied view {view}")
        raise ForbiddenError("You do not have access to this view.")

    return await list_admissions(
        db,
        principal,
        status=definition.status,
        final_status=definition.final_status,
        skip=skip,
        limit=limit,
    )


async def get_admission(
    db: AsyncSession,
    principal: Principal,
    admission_id: UUID,
) -> AdmissionDetailResponse:
    """
    Get an active admission with the actions the principal may take.

    A TEACHER asking for another course's admission gets the same not-found
    error as for a missing one.

    Raises:
        ApplicationNotFoundError: If not found, deleted, or outside the teacher's course
    """
    admission = await repository.get_active_by_id(db, admission_id)
    if admission is None:
        raise ApplicationNotFoundError(admission_id)

    course = _scoped_course(principal)
    if course is not None and admission.course != course:
        logger.warning(f"{principal} requested admission {admission_id} outside their course")
        raise ApplicationNotFoundError(admission_id)

    detail = AdmissionDetailResponse.model_validate(admission)
    return detail.model_copy(update={"available_actions": available_actions(principal, admission)})
