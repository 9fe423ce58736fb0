"""
Admission Transitions

The status state machine and the role/course guard. Every transition entry
point goes through authorize() before touching state; there is no other
way to change an admission's workflow fields.

    SUBMITTED           -> HEAD_ACCEPTED        (HEAD, teacher configured)
    SUBMITTED           -> HEAD_REJECTED        (HEAD)
    HEAD_ACCEPTED       -> INTERVIEW_SCHEDULED  (TEACHER of the course)
    INTERVIEW_SCHEDULED -> SELECTED | REJECTED  (TEACHER of the course)

SOFT_DELETE is allowed from any status (HEAD only) and leaves the status
unchanged.
"""

import enum
from dataclasses import dataclass

from tti_admissions.core.auth import Principal, Role
from tti_admissions.modules.admissions.errors import CourseMismatchError, ForbiddenError
from tti_admissions.modules.admissions.models import (
    Admission,
    AdmissionStatus,
    FinalStatus,
    TeacherStatus,
)


class TransitionAction(str, enum.Enum):
    """Named, role-gated workflow actions."""

    HEAD_APPROVE = "HEAD_APPROVE"
    HEAD_REJECT = "HEAD_REJECT"
    SCHEDULE_INTERVIEW = "SCHEDULE_INTERVIEW"
    FINAL_APPROVE = "FINAL_APPROVE"
    FINAL_REJECT = "FINAL_REJECT"
    SOFT_DELETE = "SOFT_DELETE"


class AuditAction(str, enum.Enum):
    """Action names recorded in the audit log."""

    APPLICATION_SUBMITTED = "APPLICATION_SUBMITTED"
    HEAD_APPROVED = "HEAD_APPROVED"
    HEAD_REJECTED = "HEAD_REJECTED"
    HEAD_DELETED = "HEAD_DELETED"
    INTERVIEW_SCHEDULED = "INTERVIEW_SCHEDULED"
    FINAL_SELECTED = "FINAL_SELECTED"
    FINAL_REJECTED = "FINAL_REJECTED"


@dataclass(frozen=True)
class TransitionRule:
    """
    One row of the transition table.

    Attributes:
        action: The named action
        sources: Statuses the admission must currently be in
        target: Status after the transition (None keeps the current status)
        role: The only role allowed to perform the action
        requires_course_match: Principal course must equal the admission course
        requires_teacher: A teacher must be configured for the course
        final_status: Final outcome set by the transition (terminal only)
        teacher_status: Informational teacher status set by the transition
        audit_action: Action recorded in the audit log
    """

    action: TransitionAction
    sources: frozenset[AdmissionStatus]
    target: AdmissionStatus | None
    role: Role
    audit_action: AuditAction
    requires_course_match: bool = False
    requires_teacher: bool = False
    final_status: FinalStatus | None = None
    teacher_status: TeacherStatus | None = None

    @property
    def is_terminal(self) -> bool:
        return self.final_status is not None


ALL_STATUSES = frozenset(AdmissionStatus)


TRANSITIONS: dict[TransitionAction, TransitionRule] = {
    TransitionAction.HEAD_APPROVE: TransitionRule(
        action=TransitionAction.HEAD_APPROVE,
        sources=frozenset({AdmissionStatus.SUBMITTED}),
        target=AdmissionStatus.HEAD_ACCEPTED,
        role=Role.HEAD,
        audit_action=AuditAction.HEAD_APPROVED,
        requires_teacher=True,
    ),
    TransitionAction.HEAD_REJECT: TransitionRule(
        action=TransitionAction.HEAD_REJECT,
        sources=frozenset({AdmissionStatus.SUBMITTED}),
        target=AdmissionStatus.HEAD_REJECTED,
        role=Role.HEAD,
        audit_action=AuditAction.HEAD_REJECTED,
        final_status=FinalStatus.REJECTED,
    ),
    TransitionAction.SCHEDULE_INTERVIEW: TransitionRule(
        action=TransitionAction.SCHEDULE_INTERVIEW,
        sources=frozenset({AdmissionStatus.HEAD_ACCEPTED}),
        target=AdmissionStatus.INTERVIEW_SCHEDULED,
        role=Role.TEACHER,
        audit_action=AuditAction.INTERVIEW_SCHEDULED,
        requires_course_match=True,
    ),
    TransitionAction.FINAL_APPROVE: TransitionRule(
        action=TransitionAction.FINAL_APPROVE,
        sources=frozenset({AdmissionStatus.INTERVIEW_SCHEDULED}),
        target=AdmissionStatus.SELECTED,
        role=Role.TEACHER,
        audit_action=AuditAction.FINAL_SELECTED,
        requires_course_match=True,
        final_status=FinalStatus.SELECTED,
        teacher_status=TeacherStatus.ACCEPTED,
    ),
    TransitionAction.FINAL_REJECT: TransitionRule(
        action=TransitionAction.FINAL_REJECT,
        sources=frozenset({AdmissionStatus.INTERVIEW_SCHEDULED}),
        target=AdmissionStatus.REJECTED,
        role=Role.TEACHER,
        audit_action=AuditAction.FINAL_REJECTED,
        requires_course_match=True,
        final_status=FinalStatus.REJECTED,
        teacher_status=TeacherStatus.REJECTED,
    ),
    TransitionAction.SOFT_DELETE: TransitionRule(
        action=TransitionAction.SOFT_DELETE,
        sources=ALL_STATUSES,
        target=None,
        role=Role.HEAD,
        audit_action=AuditAction.HEAD_DELETED,
    ),
}


def _build_valid_status_transitions() -> dict[AdmissionStatus, set[AdmissionStatus]]:
    transitions: dict[AdmissionStatus, set[AdmissionStatus]] = {s: set() for s in AdmissionStatus}
    for rule in TRANSITIONS.values():
        if rule.target is None:
            continue
        for source in rule.sources:
            transitions[source].add(rule.target)
    return transitions


# Status graph derived from TRANSITIONS; terminal states map to an empty set
VALID_STATUS_TRANSITIONS: dict[AdmissionStatus, set[AdmissionStatus]] = (
    _build_valid_status_transitions()
)


def authorize(
    principal: Principal,
    rule: TransitionRule,
    application: Admission | None = None,
) -> None:
    """
    Check that the principal may perform the transition.

    Called twice by the engine: once without an application (role only, before
    any read) and once with the loaded application (role and course).

    Args:
        principal: The authenticated reviewer
        rule: The transition being attempted
        application: The admission being transitioned (optional)

    Raises:
        ForbiddenError: If the principal's role is not allowed
        CourseMismatchError: If the rule needs a course match and it doesn't hold
    """
    if principal.role != rule.role:
        raise ForbiddenError(
            f"Only {rule.role.value} may perform {rule.action.value}.",
        )

    if application is not None and rule.requires_course_match:
        if principal.course is None or principal.course != application.course:
            raise CourseMismatchError(
                principal.course.value if principal.course else None,
                application.course.value,
            )


def is_allowed(
    principal: Principal,
    rule: TransitionRule,
    application: Admission,
) -> bool:
    """Whether the rule applies to the application's state and the guard passes."""
    if application.is_deleted or application.status not in rule.sources:
        return False
    try:
        authorize(principal, rule, application)
    except ForbiddenError:
        return False
    return True


def available_actions(principal: Principal, application: Admission) -> list[TransitionAction]:
    """List the actions the principal could perform on the application right now."""
    return [
        action
        for action, rule in TRANSITIONS.items()
        if is_allowed(principal, rule, application)
    ]
