"""
Admission Messages

Builds the in-app notification text and the outward email/SMS/push
messages for each workflow event. Pure functions: nothing here sends
anything.
"""

from dataclasses import dataclass

from tti_admissions.core.config import Settings
from tti_admissions.core.email import render_email
from tti_admissions.modules.admissions.directory import Contact
from tti_admissions.modules.admissions.models import Admission
from tti_admissions.modules.admissions.transitions import AuditAction
from tti_admissions.modules.notifications.dispatcher import Channel, OutboundMessage
from tti_admissions.modules.notifications.models import TargetRole

AUTOMATED_FOOTER = (
    "This is an automatically generated email. Replies to this message are not monitored."
)


@dataclass(frozen=True)
class Branding:
    """Organization details shown in outward messages."""

    organization_name: str
    dashboard_url: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "Branding":
        return cls(
            organization_name=settings.organization_name,
            dashboard_url=settings.dashboard_url,
        )


@dataclass(frozen=True)
class InAppNotice:
    """Text and audience of the in-app notification for an event."""

    title: str
    message: str
    target_role: TargetRole


def in_app_notice(event: AuditAction, admission: Admission) -> InAppNotice:
    """Notification for the next responsible party; always scoped to the admission's course."""
    name = admission.name
    course = admission.course.value

    if event == AuditAction.APPLICATION_SUBMITTED:
        return InAppNotice(
            "New admission submitted", f"{name} applied for {course}.", TargetRole.HEAD
        )
    if event == AuditAction.HEAD_APPROVED:
        return InAppNotice(
            "Candidate ready for interview",
            f"{name} ({course}) was approved by the Head. Please schedule an interview.",
            TargetRole.TEACHER,
        )
    if event == AuditAction.HEAD_REJECTED:
        return InAppNotice(
            "Application rejected", f"{name} ({course}) was rejected.", TargetRole.HEAD
        )
    if event == AuditAction.HEAD_DELETED:
        return InAppNotice(
            "Application deleted", f"{name} ({course}) was deleted.", TargetRole.HEAD
        )
    if event == AuditAction.INTERVIEW_SCHEDULED:
        return InAppNotice(
            "Interview scheduled",
            f"Interview for {name} ({course}) on {admission.interview_date} "
            f"at {admission.interview_time}.",
            TargetRole.HEAD,
        )
    if event == AuditAction.FINAL_SELECTED:
        return InAppNotice(
            "Candidate selected", f"{name} was selected for {course}.", TargetRole.HEAD
        )
    if event == AuditAction.FINAL_REJECTED:
        return InAppNotice(
            "Candidate not selected",
            f"{name} was not selected for {course} after the interview.",
            TargetRole.HEAD,
        )
    raise ValueError(f"No notification defined for {event}")


def _email(recipients: list[str], subject: str, body: str) -> OutboundMessage:
    return OutboundMessage(
        channel=Channel.EMAIL,
        recipients=tuple(r for r in recipients if r),
        subject=subject,
        body=body,
    )


def _sms(admission: Admission, branding: Branding, subject: str, text: str) -> OutboundMessage:
    return OutboundMessage(
        channel=Channel.SMS,
        recipients=(admission.mobile,) if admission.mobile else (),
        subject=subject,
        body=f"{branding.organization_name}: {text}",
    )


def _push(tokens: list[str], title: str, body: str, admission: Admission) -> OutboundMessage:
    return OutboundMessage(
        channel=Channel.PUSH,
        recipients=tuple(tokens),
        subject=title,
        body=body,
        data={"admission_id": str(admission.id), "course": admission.course.value},
    )


def submitted_messages(
    admission: Admission, head: Contact, branding: Branding
) -> list[OutboundMessage]:
    """Candidate confirmation, HEAD review request, candidate SMS, HEAD push."""
    org = branding.organization_name
    candidate_body = render_email(
        organization=branding.organization_name,
        title="Admission Submitted",
        greeting=f"Dear {admission.name},",
        paragraphs=[
            f"Thank you for applying to {org}.",
            "Your admission application has been successfully submitted. Our team will "
            "review your application, and you will be notified about the next steps via email.",
            AUTOMATED_FOOTER,
        ],
    )
    head_body = render_email(
        organization=branding.organization_name,
        title="New Admission Request",
        greeting="Dear Sir/Madam,",
        paragraphs=[
            "A new admission application has been submitted and requires your review.",
            "Please log in to the dashboard to review and take the necessary action.",
        ],
        details={
            "Name": admission.name,
            "Course applied": admission.course.value,
            "Mobile": admission.mobile,
        },
        button=("Open Dashboard", branding.dashboard_url),
    )
    return [
        _email([admission.email], f"Admission Submitted - {org}", candidate_body),
        _email([head.email] if head.email else [], "New Admission Request", head_body),
        _sms(
            admission,
            branding,
            "Admission Submitted",
            "your admission application has been submitted.",
        ),
        _push(
            list(head.push_tokens),
            "New admission request",
            f"{admission.name} applied for {admission.course.value}",
            admission,
        ),
    ]


def head_approved_messages(
    admission: Admission, teachers: list[Contact], branding: Branding
) -> list[OutboundMessage]:
    """One email to all course teachers plus push to their devices."""
    names = " and ".join(t.name for t in teachers if t.name) or "Teacher"
    body = render_email(
        organization=branding.organization_name,
        title="Candidate Approved - Schedule Interview",
        greeting=f"Dear {names},",
        paragraphs=[
            "The following candidate has been approved by the Head "
            "and is ready for the interview process.",
            "Please log in to the dashboard and schedule the interview at your convenience.",
        ],
        details={"Name": admission.name, "Course": admission.course.value},
        button=("Open Dashboard", branding.dashboard_url),
    )
    tokens = [token for teacher in teachers for token in teacher.push_tokens]
    return [
        _email(
            [t.email for t in teachers if t.email],
            "Candidate Approved - Schedule Interview",
            body,
        ),
        _push(
            tokens,
            "Candidate ready for interview",
            f"{admission.name} ({admission.course.value}) is ready for an interview",
            admission,
        ),
    ]


def head_rejected_messages(admission: Admission, branding: Branding) -> list[OutboundMessage]:
    org = branding.organization_name
    body = render_email(
        organization=branding.organization_name,
        title="Application Update",
        greeting=f"Dear {admission.name},",
        paragraphs=[
            f"Thank you for your interest in the programs offered by {org}.",
            "After careful review of your application, we regret to inform you that your "
            "application has not been approved at this stage.",
            "We encourage you to apply again in the future if you meet the eligibility criteria.",
            AUTOMATED_FOOTER,
        ],
    )
    return [
        _email([admission.email], "Application Rejected", body),
        _sms(
            admission,
            branding,
            "Application Rejected",
            "your application was not approved at this stage.",
        ),
    ]


def interview_scheduled_messages(admission: Admission, branding: Branding) -> list[OutboundMessage]:
    org = branding.organization_name
    details = {
        "Date": str(admission.interview_date),
        "Time": admission.interview_time or "",
        "Platform": admission.interview_platform or "",
        "Meeting link": admission.interview_link or "",
    }
    body = render_email(
        organization=branding.organization_name,
        title="Interview Scheduled",
        greeting=f"Dear {admission.name},",
        paragraphs=[
            "We are pleased to inform you that your interview has been scheduled.",
            "Please ensure that you join the interview on time. We wish you the very best.",
            AUTOMATED_FOOTER,
        ],
        details=details,
        button=("Join Interview", admission.interview_link) if admission.interview_link else None,
    )
    return [
        _email([admission.email], f"Interview Scheduled - {org}", body),
        _sms(
            admission,
            branding,
            "Interview Scheduled",
            f"your interview is on {admission.interview_date} at {admission.interview_time} "
            f"via {admission.interview_platform}. Link: {admission.interview_link}",
        ),
    ]


def final_selected_messages(admission: Admission, branding: Branding) -> list[OutboundMessage]:
    org = branding.organization_name
    body = render_email(
        organization=branding.organization_name,
        title="Congratulations!",
        greeting=f"Dear {admission.name},",
        paragraphs=[
            f"We are delighted to inform you that you have been selected after the interview "
            f"process for the {admission.course.value} course at {org}.",
            "Further instructions regarding onboarding will be shared with you shortly.",
            AUTOMATED_FOOTER,
        ],
    )
    return [
        _email([admission.email], f"Congratulations - {org}", body),
        _sms(
            admission,
            branding,
            "Selected",
            f"congratulations, you have been selected for {admission.course.value}.",
        ),
    ]


def final_rejected_messages(admission: Admission, branding: Branding) -> list[OutboundMessage]:
    org = branding.organization_name
    body = render_email(
        organization=branding.organization_name,
        title="Interview Result",
        greeting=f"Dear {admission.name},",
        paragraphs=[
            f"Thank you for taking the time to apply and attend the interview with {org}.",
            "After careful consideration, we regret to inform you that you have not been "
            "selected at this time.",
            "We truly appreciate your interest and encourage you to apply again in the future.",
            AUTOMATED_FOOTER,
        ],
    )
    return [
        _email([admission.email], f"Interview Result - {org}", body),
        _sms(admission, branding, "Interview Result", "you have not been selected at this time."),
    ]
