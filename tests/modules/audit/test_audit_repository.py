"""
Unit tests for audit log queries.
"""

from uuid import uuid4

import pytest

from tti_admissions.modules.audit import repository
from tti_admissions.modules.audit.service import list_audit_logs


def _page_sql(db, compile_sql) -> tuple[str, dict]:
    sql, params = compile_sql(db.execute.call_args_list[-1].args[0])
    return sql.split(" WHERE ", 1)[-1], params


class TestListLogs:
    """Tests for list_logs visibility and filters."""

    @pytest.mark.asyncio
    async def test_teacher_sees_own_and_system_entries(
        self, query_db, compile_sql, dbms_teacher
    ):
        await list_audit_logs(query_db, dbms_teacher)

        where, params = _page_sql(query_db, compile_sql)
        visibility = (
            "audit_logs.actor_id = %(actor_id_1)s OR audit_logs.actor_role = %(actor_role_1)s"
        )
        assert visibility in where
        assert params["actor_id_1"] == dbms_teacher.id
        assert params["actor_role_1"] == "SYSTEM"

    @pytest.mark.asyncio
    async def test_head_sees_everything(self, query_db, compile_sql, head):
        await list_audit_logs(query_db, head)

        sql, _ = compile_sql(query_db.execute.call_args_list[-1].args[0])
        assert " WHERE " not in sql
        assert "ORDER BY audit_logs.created_at DESC" in sql

    @pytest.mark.asyncio
    async def test_filters_combine_with_visibility(self, query_db, compile_sql, dbms_teacher):
        admission_id = uuid4()

        await repository.list_logs(
            query_db,
            visible_to_actor=dbms_teacher.id,
            admission_id=admission_id,
            action="INTERVIEW_SCHEDULED",
        )

        where, params = _page_sql(query_db, compile_sql)
        assert "audit_logs.admission_id = %(admission_id_1)s" in where
        assert "audit_logs.action = %(action_1)s" in where
        assert params["admission_id_1"] == admission_id
        assert params["action_1"] == "INTERVIEW_SCHEDULED"
