"""
Unit tests for the audit log service.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from tti_admissions.modules.audit.models import SYSTEM_ACTOR_ROLE, AuditLog
from tti_admissions.modules.audit.service import list_audit_logs


def _entry(**overrides) -> AuditLog:
    fields = {
        "id": uuid4(),
        "action": "HEAD_APPROVED",
        "actor_id": "head-1",
        "actor_role": "HEAD",
        "actor_name": "Head of Admissions",
        "admission_id": uuid4(),
        "candidate_name": "Asha Rao",
        "candidate_course": "DBMS",
        "note": "",
        "meta": {"from_status": "SUBMITTED", "to_status": "HEAD_ACCEPTED"},
        "created_at": datetime.now(UTC),
    }
    fields.update(overrides)
    return AuditLog(**fields)


class TestListAuditLogs:
    """Tests for list_audit_logs."""

    @pytest.mark.asyncio
    async def test_head_sees_everything(self, mock_db, head):
        entries = [
            _entry(),
            _entry(action="APPLICATION_SUBMITTED", actor_id=None, actor_role=SYSTEM_ACTOR_ROLE),
        ]

        with patch("tti_admissions.modules.audit.service.repository") as mock_repo:
            mock_repo.list_logs = AsyncMock(return_value=(entries, 2))

            response = await list_audit_logs(mock_db, head)

        assert mock_repo.list_logs.call_args.kwargs["visible_to_actor"] is None
        assert response.total == 2
        assert response.items[1].actor_role == "SYSTEM"
        assert response.items[0].meta["to_status"] == "HEAD_ACCEPTED"

    @pytest.mark.asyncio
    async def test_teacher_sees_own_and_system_entries(self, mock_db, dbms_teacher):
        admission_id = uuid4()

        with patch("tti_admissions.modules.audit.service.repository") as mock_repo:
            mock_repo.list_logs = AsyncMock(return_value=([], 0))

            await list_audit_logs(
                mock_db, dbms_teacher, admission_id=admission_id, action="FINAL_SELECTED"
            )

        kwargs = mock_repo.list_logs.call_args.kwargs
        assert kwargs["visible_to_actor"] == dbms_teacher.id
        assert kwargs["admission_id"] == admission_id
        assert kwargs["action"] == "FINAL_SELECTED"
