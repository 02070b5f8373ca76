# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Submission service."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from scholaris.domains.enrollment.service import NotEnrolledError
from scholaris.domains.submission.service import (
    AlreadySubmittedError,
    AssignmentNotFoundError,
    DeadlinePassedError,
    SubmissionNotFoundError,
    SubmissionService,
)
from scholaris.infrastructure.database.models.activity import AuditLog
from scholaris.infrastructure.database.models.coursework import AssignmentSubmission
from scholaris.models.submission import SubmitAssignmentRequest


@pytest.fixture
def submission_service(mock_db: AsyncMock) -> SubmissionService:
    """Create submission service with mock database."""
    return SubmissionService(db=mock_db)


@pytest.fixture
def assignment(mock_db: AsyncMock) -> MagicMock:
    """Open assignment returned by db.get."""
    item = MagicMock()
    item.id = str(uuid4())
    item.course_id = str(uuid4())
    item.due_date = datetime.now(timezone.utc) + timedelta(days=3)
    item.status = "assigned"
    mock_db.get.return_value = item
    return item


@pytest.fixture
def request_body() -> SubmitAssignmentRequest:
    return SubmitAssignmentRequest(text_content="My essay on sorting algorithms")


def _scalar(value: object) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _added(mock_db: AsyncMock, model: type) -> list:
    return [c.args[0] for c in mock_db.add.call_args_list if isinstance(c.args[0], model)]


async def _mock_refresh(obj) -> None:
    obj.id = obj.id or str(uuid4())


class TestSubmitAssignment:
    """Tests for submitting an assignment."""

    @pytest.mark.asyncio
    async def test_submit_success(
        self, submission_service, mock_db, assignment, request_body, sample_student_id
    ) -> None:
        """Test an enrolled student submits before the deadline."""
        mock_db.execute.side_effect = [_scalar(MagicMock()), _scalar(None)]
        mock_db.refresh.side_effect = _mock_refresh

        result = await submission_service.submit_assignment(
            assignment.id, sample_student_id, request_body
        )

        assert len(_added(mock_db, AssignmentSubmission)) == 1
        mock_db.commit.assert_called_once()
        assert assignment.status == "submitted"
        (audit,) = _added(mock_db, AuditLog)
        assert audit.action == "ASSIGNMENT_SUBMITTED"
        assert (audit.user_id, audit.entity_id) == (sample_student_id, assignment.id)
        assert result.assignment_id == assignment.id
        assert result.student_id == sample_student_id
        assert result.text_content == "My essay on sorting algorithms"

    @pytest.mark.asyncio
    async def test_assignment_not_found(
        self, submission_service, mock_db, request_body, sample_student_id
    ) -> None:
        """Test a missing assignment raises AssignmentNotFoundError."""
        mock_db.get.return_value = None

        with pytest.raises(AssignmentNotFoundError):
            await submission_service.submit_assignment("missing", sample_student_id, request_body)

    @pytest.mark.asyncio
    async def test_not_enrolled(
        self, submission_service, mock_db, assignment, request_body, sample_student_id
    ) -> None:
        """Test a student outside the course cannot submit."""
        mock_db.execute.return_value = _scalar(None)

        with pytest.raises(NotEnrolledError):
            await submission_service.submit_assignment(
                assignment.id, sample_student_id, request_body
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["assigned", "draft", "graded"])
    async def test_after_deadline_rejected(
        self, submission_service, mock_db, assignment, request_body, sample_student_id, status
    ) -> None:
        """Test submission after the deadline is rejected whatever the status."""
        assignment.due_date = datetime.now(timezone.utc) - timedelta(minutes=1)
        assignment.status = status
        mock_db.execute.return_value = _scalar(MagicMock())

        with pytest.raises(DeadlinePassedError):
            await submission_service.submit_assignment(
                assignment.id, sample_student_id, request_body
            )

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_already_submitted(
        self, submission_service, mock_db, assignment, request_body, sample_student_id
    ) -> None:
        """Test a second submission is rejected."""
        mock_db.execute.side_effect = [_scalar(MagicMock()), _scalar(MagicMock())]

        with pytest.raises(AlreadySubmittedError):
            await submission_service.submit_assignment(
                assignment.id, sample_student_id, request_body
            )

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_submission(
        self, submission_service, mock_db, assignment, request_body, sample_student_id
    ) -> None:
        """Test a unique constraint violation at commit is reported as already submitted."""
        mock_db.execute.side_effect = [_scalar(MagicMock()), _scalar(None)]
        mock_db.commit.side_effect = IntegrityError(
            "INSERT INTO assignment_submissions",
            {},
            Exception("uq_assignment_submissions_assignment_student"),
        )

        with pytest.raises(AlreadySubmittedError):
            await submission_service.submit_assignment(
                assignment.id, sample_student_id, request_body
            )

        mock_db.rollback.assert_called_once()
        mock_db.refresh.assert_not_called()


class TestUpdateSubmission:
    """Tests for updating a submission."""

    @pytest.mark.asyncio
    async def test_update_success(
        self, submission_service, mock_db, assignment, sample_student_id
    ) -> None:
        """Test the content and timestamp are replaced."""
        existing = MagicMock()
        existing.id = str(uuid4())
        existing.assignment_id = assignment.id
        existing.student_id = sample_student_id
        existing.text_content = "old"
        existing.submitted_at = datetime(2025, 1, 1, tzinfo=timezone.utc)
        mock_db.execute.return_value = _scalar(existing)

        result = await submission_service.update_submission(
            assignment.id,
            sample_student_id,
            SubmitAssignmentRequest(text_content="new"),
        )

        assert result.text_content == "new"
        assert existing.submitted_at > datetime(2025, 1, 1, tzinfo=timezone.utc)
        mock_db.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_update_missing(
        self, submission_service, mock_db, assignment, request_body, sample_student_id
    ) -> None:
        """Test updating a submission that does not exist."""
        mock_db.execute.return_value = _scalar(None)

        with pytest.raises(SubmissionNotFoundError):
            await submission_service.update_submission(
                assignment.id, sample_student_id, request_body
            )

    @pytest.mark.asyncio
    async def test_update_after_deadline(
        self, submission_service, mock_db, assignment, request_body, sample_student_id
    ) -> None:
        """Test updating after the deadline is rejected."""
        assignment.due_date = datetime.now(timezone.utc) - timedelta(hours=1)
        mock_db.execute.return_value = _scalar(MagicMock())

        with pytest.raises(DeadlinePassedError):
            await submission_service.update_submission(
                assignment.id, sample_student_id, request_body
            )

        mock_db.commit.assert_not_called()


class TestGetSubmission:
    """Tests for submission lookup."""

    @pytest.mark.asyncio
    async def test_get_missing(self, submission_service, mock_db, sample_student_id) -> None:
        """Test a missing submission raises SubmissionNotFoundError."""
        mock_db.execute.return_value = _scalar(None)

        with pytest.raises(SubmissionNotFoundError):
            await submission_service.get_submission("assignment-1", sample_student_id)
