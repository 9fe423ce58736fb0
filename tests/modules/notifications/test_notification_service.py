"""
Unit tests for the notifications service layer.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from tti_admissions.modules.admissions.errors import NotificationNotFoundError
from tti_admissions.modules.notifications import repository
from tti_admissions.modules.notifications.models import Notification, TargetRole
from tti_admissions.modules.notifications.service import (
    list_notifications,
    mark_all_read,
    mark_read,
)


def _notification(read_by=None, **overrides) -> Notification:
    fields = {
        "id": uuid4(),
        "title": "New admission submitted",
        "message": "Asha Rao applied for DBMS.",
        "target_role": TargetRole.HEAD,
        "course": "DBMS",
        "user_id": None,
        "read_by": list(read_by or []),
        "meta": {},
        "created_at": datetime.now(UTC),
    }
    fields.update(overrides)
    return Notification(**fields)


@pytest.fixture
def mock_repo():
    with patch("tti_admissions.modules.notifications.service.repository") as repo:
        repo.mark_read = repository.mark_read
        yield repo


class TestListNotifications:
    """Tests for list_notifications."""

    @pytest.mark.asyncio
    async def test_read_state_is_per_principal(self, mock_db, mock_repo, head):
        unread = _notification()
        read = _notification(read_by=[head.id])
        mock_repo.list_visible = AsyncMock(return_value=([unread, read], 2, 1))

        response = await list_notifications(mock_db, head)

        assert response.total == 2
        assert response.unread_count == 1
        assert [n.is_read for n in response.items] == [False, True]
        mock_repo.list_visible.assert_awaited_once_with(
            mock_db, head, unread_only=False, skip=0, limit=50
        )


class TestMarkRead:
    """Tests for mark_read."""

    @pytest.mark.asyncio
    async def test_mark_read(self, mock_db, mock_repo, head):
        notification = _notification(read_by=["someone-else"])
        mock_repo.get_visible = AsyncMock(return_value=notification)

        response = await mark_read(mock_db, head, notification.id)

        assert response.id == notification.id
        assert notification.read_by == ["someone-else", head.id]
        mock_db.commit.assert_awaited_once()
        mock_repo.get_visible.assert_awaited_once_with(
            mock_db, head, notification.id, for_update=True
        )

    @pytest.mark.asyncio
    async def test_mark_read_is_idempotent(self, mock_db, mock_repo, head):
        notification = _notification(read_by=[head.id])
        mock_repo.get_visible = AsyncMock(return_value=notification)

        await mark_read(mock_db, head, notification.id)

        assert notification.read_by == [head.id]
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_not_visible(self, mock_db, mock_repo, dbms_teacher):
        mock_repo.get_visible = AsyncMock(return_value=None)

        with pytest.raises(NotificationNotFoundError) as exc_info:
            await mark_read(mock_db, dbms_teacher, uuid4())

        assert exc_info.value.status_code == 404


class TestMarkAllRead:
    """Tests for mark_all_read."""

    @pytest.mark.asyncio
    async def test_marks_every_unread(self, mock_db, mock_repo, dbms_teacher):
        notifications = [_notification(target_role=TargetRole.TEACHER) for _ in range(3)]
        mock_repo.list_unread_visible = AsyncMock(return_value=notifications)

        response = await mark_all_read(mock_db, dbms_teacher)

        assert response.updated == 3
        assert all(n.is_read_by(dbms_teacher.id) for n in notifications)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_nothing_to_mark(self, mock_db, mock_repo, head):
        mock_repo.list_unread_visible = AsyncMock(return_value=[])

        response = await mark_all_read(mock_db, head)

        assert response.updated == 0
        mock_db.commit.assert_not_awaited()


class TestMarkReadHelper:
    def test_reassigns_list(self):
        notification = _notification()
        original = notification.read_by

        assert repository.mark_read(notification, "u-1") is True
        assert notification.read_by is not original
        assert repository.mark_read(notification, "u-1") is False
