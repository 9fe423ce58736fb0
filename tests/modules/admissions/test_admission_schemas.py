"""
Unit tests for admissions request schemas.
"""

from datetime import date, timedelta

import pytest
from pydantic import TypeAdapter, ValidationError

from tti_admissions.modules.admissions.schemas import (
    AdmissionCreate,
    HeadApprove,
    ScheduleInterview,
    SoftDelete,
    TransitionRequest,
)
from tti_admissions.modules.admissions.transitions import TransitionAction


def _payload(**overrides) -> dict:
    payload = {
        "name": "Ravi Kumar",
        "email": "ravi@example.com",
        "mobile": "+919000000001",
        "dob": "1999-06-30",
        "gender": "Male",
        "state": "Andhra Pradesh",
        "district": "Guntur",
        "disability_status": "Locomotor disability",
        "education": "B.Sc",
        "course": "CloudComputing",
        "basic_computer_knowledge": "Fair",
        "basic_english_skills": "Good",
        "screen_reader": "None",
        "rules_declaration": True,
    }
    payload.update(overrides)
    return payload


class TestAdmissionCreate:
    """Tests for AdmissionCreate validation."""

    def test_normalizes_fields(self):
        data = AdmissionCreate(**_payload(name="  Ravi  ", email=" Ravi@Example.COM"))
        assert data.name == "Ravi"
        assert data.email == "ravi@example.com"
        assert data.enrolled_course == ""

    def test_declaration_must_be_accepted(self):
        with pytest.raises(ValidationError):
            AdmissionCreate(**_payload(rules_declaration=False))

    def test_dob_in_future(self):
        future = (date.today() + timedelta(days=1)).isoformat()
        with pytest.raises(ValidationError):
            AdmissionCreate(**_payload(dob=future))

    @pytest.mark.parametrize(
        "overrides",
        [
            {"email": "not-an-email"},
            {"mobile": "call me"},
            {"course": "Astrology"},
            {"screen_reader": "Expert"},
            {"name": ""},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            AdmissionCreate(**_payload(**overrides))


class TestTransitionRequest:
    """Tests for the discriminated transition payload."""

    adapter = TypeAdapter(TransitionRequest)

    def test_discriminates_on_action(self):
        request = self.adapter.validate_python(
            {"action": "SCHEDULE_INTERVIEW", "date": "2026-11-02", "link": "https://x.example"}
        )
        assert isinstance(request, ScheduleInterview)
        assert request.time is None

    def test_unknown_action(self):
        with pytest.raises(ValidationError):
            self.adapter.validate_python({"action": "PROMOTE"})

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            self.adapter.validate_python({"action": "HEAD_APPROVE", "status": "SELECTED"})

    def test_default_action(self):
        assert HeadApprove().action == TransitionAction.HEAD_APPROVE

    def test_soft_delete_reason_is_trimmed_and_capped(self):
        assert SoftDelete(reason=None).reason == ""
        assert SoftDelete(reason="  duplicate  ").reason == "duplicate"
        assert len(SoftDelete(reason="y" * 501).reason) == 500
