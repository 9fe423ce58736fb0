"""
Fixtures for admissions tests.
"""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from tti_admissions.modules.admissions.directory import Contact, CourseDirectory
from tti_admissions.modules.admissions.models import (
    Admission,
    AdmissionStatus,
    Course,
    FinalStatus,
    TeacherStatus,
)
from tti_admissions.modules.admissions.messages import Branding
from tti_admissions.modules.admissions.schemas import AdmissionCreate
from tti_admissions.modules.admissions.service import AdmissionWorkflow
from tti_admissions.modules.audit.models import AuditLog
from tti_admissions.modules.notifications.dispatcher import Channel, NotificationDispatcher
from tti_admissions.modules.notifications.models import Notification

SERVICE = "tti_admissions.modules.admissions.service"

DOCUMENTS = {
    "passport_photo": "passport_photo/1.jpg",
    "id_proof": "id_proof/2.pdf",
    "udid": "udid/3.pdf",
    "disability_certificate": "disability_certificate/4.pdf",
    "degree_memo": "degree_memo/5.pdf",
    "medical_certificate": "medical_certificate/6.pdf",
}


class FakeAdmissionStore:
    """
    In-memory stand-in for the admissions repository module.

    transition_status() yields to the event loop before its check-and-set so
    concurrent callers interleave the way they would against the database.
    """

    MAX_PAGE_SIZE = 100

    def __init__(self):
        self.rows: dict = {}
        self.list_admissions = AsyncMock(return_value=([], 0))

    def add(self, admission: Admission) -> Admission:
        self.rows[admission.id] = admission
        return admission

    async def get_active_by_id(self, db, id, statuses=None):
        admission = self.rows.get(id)
        if admission is None or admission.is_deleted:
            return None
        if statuses is not None and admission.status not in set(statuses):
            return None
        return admission

    async def transition_status(self, db, id, sources, **values):
        await asyncio.sleep(0)
        admission = self.rows.get(id)
        if admission is None or admission.is_deleted or admission.status not in set(sources):
            return None
        for name, value in values.items():
            setattr(admission, name, value)
        return admission

    async def create(self, db, data, documents):
        now = datetime.now(UTC)
        admission = Admission(
            id=uuid4(),
            **data.model_dump(),
            **documents,
            status=AdmissionStatus.SUBMITTED,
            teacher_status=TeacherStatus.PENDING,
            final_status=FinalStatus.PENDING,
            decision_done=False,
            is_deleted=False,
            created_at=now,
            updated_at=now,
        )
        return self.add(admission)

    async def find_active_by_contact(self, db, email, mobile):
        return [
            a
            for a in self.rows.values()
            if not a.is_deleted and (a.email.lower() == email.lower() or a.mobile == mobile)
        ]


class RecordingSender:
    """Channel sender that records messages and returns a fixed outcome."""

    def __init__(self, result: bool = True, error: Exception | None = None):
        self.result = result
        self.error = error
        self.messages = []

    async def __call__(self, message) -> bool:
        self.messages.append(message)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def store():
    fake = FakeAdmissionStore()
    with patch(f"{SERVICE}.repository", fake):
        yield fake


@pytest.fixture
def records():
    """Patch the audit and notification repositories with recording fakes."""

    async def create_audit(db, **kwargs):
        return AuditLog(id=uuid4(), **kwargs)

    async def create_notification(db, **kwargs):
        return Notification(id=uuid4(), read_by=[], **kwargs)

    audit_repo = MagicMock()
    audit_repo.create = AsyncMock(side_effect=create_audit)
    notification_repo = MagicMock()
    notification_repo.create = AsyncMock(side_effect=create_notification)

    with (
        patch(f"{SERVICE}.audit_repository", audit_repo),
        patch(f"{SERVICE}.notification_repository", notification_repo),
    ):
        yield MagicMock(audit=audit_repo.create, notification=notification_repo.create)


@pytest.fixture
def senders():
    return {
        Channel.EMAIL: RecordingSender(),
        Channel.SMS: RecordingSender(),
        Channel.PUSH: RecordingSender(),
    }


@pytest.fixture
def directory():
    return CourseDirectory(
        {
            Course.DBMS: [
                Contact(
                    name="DBMS Teacher",
                    email="dbms.teacher@example.com",
                    push_tokens=("ExponentPushToken[dbms]",),
                )
            ],
            Course.BASIC_COMPUTERS: [
                Contact(name="Basics A", email="basics.a@example.com"),
                Contact(name="Basics B", email="basics.b@example.com"),
            ],
        }
    )


@pytest.fixture
def head_contact():
    return Contact(
        name="Head of Admissions",
        email="head@example.com",
        push_tokens=("ExponentPushToken[head]",),
    )


@pytest.fixture
def branding():
    return Branding(organization_name="TTI Foundation", dashboard_url="https://admin.tti.example")


@pytest.fixture
def workflow(directory, senders, head_contact, branding):
    return AdmissionWorkflow(
        directory=directory,
        dispatcher=NotificationDispatcher(senders, timeout_seconds=1.0),
        head=head_contact,
        branding=branding,
    )


@pytest.fixture
def documents():
    return dict(DOCUMENTS)


@pytest.fixture
def admission_create():
    return AdmissionCreate(
        name="  Ravi Kumar ",
        email="Ravi.Kumar@Example.com",
        mobile="+919000000001",
        dob="1999-06-30",
        gender="Male",
        state="Andhra Pradesh",
        district="Guntur",
        disability_status="Locomotor disability",
        education="B.Sc",
        enrolled_course="",
        course="DBMS",
        basic_computer_knowledge="Fair",
        basic_english_skills="Good",
        screen_reader="None",
        rules_declaration=True,
    )
