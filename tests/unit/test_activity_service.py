# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the audit trail and notifications."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from scholaris.domains.activity.service import ActivityRecorder, AuditAction
from scholaris.infrastructure.database.models.activity import AuditLog, Notification
from scholaris.models.common import NotificationPriority, NotificationType


@pytest.fixture
def recorder(mock_db: AsyncMock) -> ActivityRecorder:
    """Create activity recorder with mock database."""
    return ActivityRecorder(db=mock_db)


class TestAudit:
    """Tests for audit rows."""

    def test_audit_row_staged(self, recorder, mock_db, sample_teacher_id) -> None:
        """Test the row is added to the session but not committed."""
        course_id = str(uuid4())

        entry = recorder.audit(
            AuditAction.COURSE_CREATED,
            sample_teacher_id,
            "course",
            course_id,
            code="CS101",
        )

        assert isinstance(entry, AuditLog)
        assert entry.action == "COURSE_CREATED"
        assert entry.user_id == sample_teacher_id
        assert entry.entity_type == "course"
        assert entry.entity_id == course_id
        assert entry.details == {"code": "CS101"}
        mock_db.add.assert_called_once_with(entry)
        mock_db.commit.assert_not_called()

    def test_system_action(self, recorder) -> None:
        """Test actions without a user are allowed."""
        entry = recorder.audit(AuditAction.STUDY_PLAN_DELETED, None)

        assert entry.user_id is None
        assert entry.details == {}


class TestNotify:
    """Tests for notifications."""

    def test_notification_staged_unread(self, recorder, mock_db, sample_student_id) -> None:
        """Test a notification is created unread with normal priority."""
        notification = recorder.notify(
            sample_student_id,
            "Enrolled in CS101",
            "You have been enrolled in Intro to Programming",
            NotificationType.ENROLLMENT,
            course_id="course-1",
        )

        assert isinstance(notification, Notification)
        assert notification.notification_type == "enrollment"
        assert notification.priority == "normal"
        assert notification.is_read is False
        assert notification.course_id == "course-1"
        assert notification.data == {}
        mock_db.add.assert_called_once_with(notification)
        mock_db.commit.assert_not_called()

    def test_priority_and_data(self, recorder, sample_student_id) -> None:
        """Test priority and extra data are stored."""
        notification = recorder.notify(
            sample_student_id,
            "Graded",
            "You received an A",
            NotificationType.GRADE_POSTED,
            priority=NotificationPriority.HIGH,
            data={"score": 95},
        )

        assert notification.priority == "high"
        assert notification.data == {"score": 95}


class TestReadNotifications:
    """Tests for listing and reading notifications."""

    @pytest.mark.asyncio
    async def test_list_unread(self, recorder, mock_db, sample_student_id) -> None:
        """Test unread filtering narrows the query."""
        rows = [MagicMock(), MagicMock()]
        result = MagicMock()
        result.scalars.return_value.all.return_value = rows
        mock_db.execute.return_value = result

        notifications = await recorder.list_notifications(sample_student_id, unread_only=True)

        assert notifications == rows
        query = str(mock_db.execute.call_args.args[0])
        assert "notifications.is_read" in query
        assert "ORDER BY notifications.created_at DESC" in query

    @pytest.mark.asyncio
    async def test_mark_read(self, recorder, mock_db, sample_student_id) -> None:
        """Test marking a notification read commits."""
        mock_db.execute.return_value = MagicMock(rowcount=1)

        assert await recorder.mark_read(str(uuid4()), sample_student_id) is True
        mock_db.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_mark_read_of_other_user(self, recorder, mock_db) -> None:
        """Test another user's notification is not found."""
        mock_db.execute.return_value = MagicMock(rowcount=0)

        assert await recorder.mark_read(str(uuid4()), "someone-else") is False
