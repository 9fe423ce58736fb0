"""
Shared fixtures: principals, admissions and a mock database session.
"""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql

from tti_admissions.core.auth import Principal, Role
from tti_admissions.modules.admissions.models import (
    Admission,
    AdmissionStatus,
    Course,
    FinalStatus,
    Gender,
    SkillLevel,
    TeacherStatus,
)


def make_admission(**overrides) -> Admission:
    """Build a detached Admission with every column populated."""
    now = datetime.now(UTC)
    fields = {
        "id": uuid4(),
        "name": "Asha Rao",
        "email": "asha.rao@example.com",
        "mobile": "+919876543210",
        "dob": date(2000, 1, 15),
        "gender": Gender.FEMALE,
        "state": "Telangana",
        "district": "Hyderabad",
        "disability_status": "Visual impairment",
        "education": "B.Com",
        "enrolled_course": "",
        "course": Course.DBMS,
        "basic_computer_knowledge": SkillLevel.GOOD,
        "basic_english_skills": SkillLevel.FAIR,
        "screen_reader": SkillLevel.EXCELLENT,
        "rules_declaration": True,
        "passport_photo": "passport_photo/a.jpg",
        "id_proof": "id_proof/b.pdf",
        "udid": "udid/c.pdf",
        "disability_certificate": "disability_certificate/d.pdf",
        "degree_memo": "degree_memo/e.pdf",
        "medical_certificate": "medical_certificate/f.pdf",
        "status": AdmissionStatus.SUBMITTED,
        "teacher_status": TeacherStatus.PENDING,
        "final_status": FinalStatus.PENDING,
        "decision_done": False,
        "interview_date": None,
        "interview_time": None,
        "interview_platform": None,
        "interview_link": None,
        "interview_scheduled_by": None,
        "is_deleted": False,
        "deleted_at": None,
        "deleted_by": None,
        "deletion_reason": None,
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return Admission(**fields)


@pytest.fixture
def admission_factory():
    return make_admission


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.flush = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


def _query_result(rows: list) -> MagicMock:
    result = MagicMock()
    result.scalar.return_value = len(rows)
    result.scalars.return_value.all.return_value = list(rows)
    result.scalar_one_or_none.return_value = rows[0] if rows else None
    return result


@pytest.fixture
def query_db():
    """
    Session mock for repository tests.

    Every execute() is recorded and answered with query_db.rows, so the
    statements a repository builds can be compiled and inspected.
    """
    db = AsyncMock()
    db.rows = []
    db.execute = AsyncMock(side_effect=lambda statement: _query_result(db.rows))
    return db


@pytest.fixture
def compile_sql():
    """Compile a statement for PostgreSQL. Returns (single-line SQL, bind params)."""

    def compile_(statement) -> tuple[str, dict]:
        compiled = statement.compile(dialect=postgresql.dialect())
        return " ".join(str(compiled).split()), compiled.params

    return compile_


@pytest.fixture
def head():
    return Principal(id="head-1", role=Role.HEAD, name="Head of Admissions")


@pytest.fixture
def dbms_teacher():
    return Principal(id="teacher-dbms", role=Role.TEACHER, course=Course.DBMS, name="DBMS Teacher")


@pytest.fixture
def cloud_teacher():
    return Principal(
        id="teacher-cloud",
        role=Role.TEACHER,
        course=Course.CLOUD_COMPUTING,
        name="Cloud Teacher",
    )
