"""
Unit tests for bearer token verification.
"""

from datetime import timedelta

import pytest
from fastapi import HTTPException

from tti_admissions.core.auth import Role, resolve_principal
from tti_admissions.core.security import create_access_token, decode_token
from tti_admissions.modules.admissions.models import Course


class TestResolvePrincipal:
    """Tests for resolve_principal."""

    def test_head(self):
        token = create_access_token("head-1", {"role": "head", "name": "Head", "course": "DBMS"})

        principal = resolve_principal(token)

        assert principal.id == "head-1"
        assert principal.role == Role.HEAD
        assert principal.is_head
        # HEAD is never course-scoped
        assert principal.course is None

    def test_teacher(self):
        token = create_access_token("t-1", {"role": "TEACHER", "course": "MachineLearning"})

        principal = resolve_principal(token)

        assert principal.role == Role.TEACHER
        assert principal.course == Course.MACHINE_LEARNING

    @pytest.mark.parametrize(
        "claims",
        [
            {"role": "TEACHER"},
            {"role": "TEACHER", "course": "Astrology"},
            {"role": "ADMIN"},
            {},
        ],
    )
    def test_invalid_claims(self, claims):
        with pytest.raises(HTTPException) as exc_info:
            resolve_principal(create_access_token("x-1", claims))
        assert exc_info.value.status_code == 401

    def test_expired_token(self):
        token = create_access_token("head-1", {"role": "HEAD"}, expires_delta=timedelta(seconds=-5))

        assert decode_token(token) is None
        with pytest.raises(HTTPException) as exc_info:
            resolve_principal(token)
        assert exc_info.value.detail["error"] == "INVALID_TOKEN"

    def test_wrong_token_type(self):
        token = create_access_token("head-1", {"role": "HEAD", "type": "refresh"})

        with pytest.raises(HTTPException) as exc_info:
            resolve_principal(token)
        assert exc_info.value.detail["error"] == "INVALID_TOKEN_TYPE"
