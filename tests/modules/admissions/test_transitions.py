"""
Unit tests for the transition table and guard.
"""

import pytest

from tti_admissions.modules.admissions.errors import CourseMismatchError, ForbiddenError
from tti_admissions.modules.admissions.models import (
    AdmissionStatus,
    Course,
    FinalStatus,
    TeacherStatus,
)
from tti_admissions.modules.admissions.transitions import (
    TRANSITIONS,
    VALID_STATUS_TRANSITIONS,
    TransitionAction,
    authorize,
    available_actions,
)


class TestTransitionTable:
    """The status graph derived from TRANSITIONS."""

    def test_every_action_has_a_rule(self):
        assert set(TRANSITIONS) == set(TransitionAction)

    def test_status_graph(self):
        assert VALID_STATUS_TRANSITIONS[AdmissionStatus.SUBMITTED] == {
            AdmissionStatus.HEAD_ACCEPTED,
            AdmissionStatus.HEAD_REJECTED,
        }
        assert VALID_STATUS_TRANSITIONS[AdmissionStatus.HEAD_ACCEPTED] == {
            AdmissionStatus.INTERVIEW_SCHEDULED
        }
        assert VALID_STATUS_TRANSITIONS[AdmissionStatus.INTERVIEW_SCHEDULED] == {
            AdmissionStatus.SELECTED,
            AdmissionStatus.REJECTED,
        }

    @pytest.mark.parametrize(
        "terminal",
        [AdmissionStatus.HEAD_REJECTED, AdmissionStatus.SELECTED, AdmissionStatus.REJECTED],
    )
    def test_terminal_statuses_have_no_exit(self, terminal):
        assert VALID_STATUS_TRANSITIONS[terminal] == set()

    def test_terminal_rules_set_final_status(self):
        head_reject = TRANSITIONS[TransitionAction.HEAD_REJECT]
        final_approve = TRANSITIONS[TransitionAction.FINAL_APPROVE]
        final_reject = TRANSITIONS[TransitionAction.FINAL_REJECT]

        assert head_reject.final_status == FinalStatus.REJECTED
        assert head_reject.teacher_status is None
        assert final_approve.final_status == FinalStatus.SELECTED
        assert final_approve.teacher_status == TeacherStatus.ACCEPTED
        assert final_reject.final_status == FinalStatus.REJECTED
        assert final_reject.teacher_status == TeacherStatus.REJECTED

    def test_soft_delete_keeps_status(self):
        rule = TRANSITIONS[TransitionAction.SOFT_DELETE]
        assert rule.target is None
        assert rule.sources == frozenset(AdmissionStatus)
        assert not rule.is_terminal


class TestAuthorize:
    """Tests for the role/course guard."""

    @pytest.mark.parametrize(
        "action",
        [TransitionAction.HEAD_APPROVE, TransitionAction.HEAD_REJECT, TransitionAction.SOFT_DELETE],
    )
    def test_teacher_cannot_perform_head_actions(self, dbms_teacher, action):
        with pytest.raises(ForbiddenError) as exc_info:
            authorize(dbms_teacher, TRANSITIONS[action])
        assert exc_info.value.status_code == 403

    @pytest.mark.parametrize(
        "action",
        [
            TransitionAction.SCHEDULE_INTERVIEW,
            TransitionAction.FINAL_APPROVE,
            TransitionAction.FINAL_REJECT,
        ],
    )
    def test_head_cannot_perform_teacher_actions(self, head, action):
        with pytest.raises(ForbiddenError):
            authorize(head, TRANSITIONS[action])

    def test_teacher_of_other_course_is_rejected(self, cloud_teacher, admission_factory):
        admission = admission_factory(course=Course.DBMS, status=AdmissionStatus.HEAD_ACCEPTED)

        with pytest.raises(CourseMismatchError) as exc_info:
            authorize(cloud_teacher, TRANSITIONS[TransitionAction.SCHEDULE_INTERVIEW], admission)

        assert exc_info.value.error_code == "COURSE_MISMATCH"
        assert exc_info.value.application_course == Course.DBMS.value

    def test_teacher_of_same_course_passes(self, dbms_teacher, admission_factory):
        admission = admission_factory(course=Course.DBMS)
        authorize(dbms_teacher, TRANSITIONS[TransitionAction.FINAL_APPROVE], admission)

    def test_role_only_check_skips_course(self, cloud_teacher):
        authorize(cloud_teacher, TRANSITIONS[TransitionAction.FINAL_REJECT])


class TestAvailableActions:
    """Tests for available_actions()."""

    def test_head_on_submitted(self, head, admission_factory):
        admission = admission_factory(status=AdmissionStatus.SUBMITTED)
        assert available_actions(head, admission) == [
            TransitionAction.HEAD_APPROVE,
            TransitionAction.HEAD_REJECT,
            TransitionAction.SOFT_DELETE,
        ]

    def test_teacher_on_own_course_interview(self, dbms_teacher, admission_factory):
        admission = admission_factory(status=AdmissionStatus.INTERVIEW_SCHEDULED)
        assert available_actions(dbms_teacher, admission) == [
            TransitionAction.FINAL_APPROVE,
            TransitionAction.FINAL_REJECT,
        ]

    def test_teacher_on_other_course(self, cloud_teacher, admission_factory):
        admission = admission_factory(status=AdmissionStatus.HEAD_ACCEPTED)
        assert available_actions(cloud_teacher, admission) == []

    def test_head_on_terminal(self, head, admission_factory):
        admission = admission_factory(status=AdmissionStatus.SELECTED)
        assert available_actions(head, admission) == [TransitionAction.SOFT_DELETE]

    def test_deleted_admission_has_no_actions(self, head, admission_factory):
        admission = admission_factory(is_deleted=True)
        assert available_actions(head, admission) == []
