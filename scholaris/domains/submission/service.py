# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Submission service for assignment submissions.

This module provides the SubmissionService class for:
- Submitting an assignment (one submission per student, before the deadline)
- Updating a submission before the deadline
- Looking up a student's submission
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scholaris.domains.activity.service import ActivityRecorder, AuditAction
from scholaris.domains.enrollment.service import EnrollmentService
from scholaris.infrastructure.database.models.coursework import (
    Assignment,
    AssignmentSubmission,
)
from scholaris.models.common import AssignmentStatus
from scholaris.models.submission import SubmissionResponse, SubmitAssignmentRequest

logger = logging.getLogger(__name__)


class SubmissionServiceError(Exception):
    """Base exception for submission service errors."""

    pass


class AssignmentNotFoundError(SubmissionServiceError):
    """Raised when assignment is not found."""

    pass


class SubmissionNotFoundError(SubmissionServiceError):
    """Raised when the student has no submission for the assignment."""

    pass


class DeadlinePassedError(SubmissionServiceError):
    """Raised when submitting or editing after the due date."""

    pass


class AlreadySubmittedError(SubmissionServiceError):
    """Raised when the student already submitted the assignment."""

    pass


class SubmissionService:
    """Service for assignment submissions.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._enrollments = EnrollmentService(db)
        self._activity = ActivityRecorder(db)

    async def submit_assignment(
        self,
        assignment_id: str,
        student_id: str,
        request: SubmitAssignmentRequest,
    ) -> SubmissionResponse:
        """Submit an assignment.

        Args:
            assignment_id: Assignment identifier.
            student_id: Submitting student.
            request: Submission content.

        Returns:
            The stored submission.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotEnrolledError: If the student is not actively enrolled.
            DeadlinePassedError: If the due date has passed.
            AlreadySubmittedError: If the student already submitted.
        """
        assignment = await self._get_assignment(assignment_id)
        await self._enrollments.require_active_enrollment(assignment.course_id, student_id)

        if self._is_past_due(assignment):
            raise DeadlinePassedError("Assignment submission deadline has passed")

        if await self._find_submission(assignment_id, student_id):
            raise AlreadySubmittedError("You have already submitted this assignment")

        submission = AssignmentSubmission(
            assignment_id=assignment_id,
            student_id=student_id,
            text_content=request.text_content,
            submitted_at=datetime.now(timezone.utc),
        )
        self.db.add(submission)
        assignment.status = AssignmentStatus.SUBMITTED.value

        self._activity.audit(
            AuditAction.ASSIGNMENT_SUBMITTED,
            student_id,
            "assignment",
            assignment_id,
        )

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("Concurrent submission rejected: %s", str(e.orig))
            raise AlreadySubmittedError("You have already submitted this assignment") from e
        await self.db.refresh(submission)

        logger.info(
            "Assignment submitted: assignment=%s, student=%s",
            assignment_id,
            student_id,
        )

        return self._to_response(submission)

    async def update_submission(
        self,
        assignment_id: str,
        student_id: str,
        request: SubmitAssignmentRequest,
    ) -> SubmissionResponse:
        """Replace the content of an existing submission.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            SubmissionNotFoundError: If there is nothing to update.
            DeadlinePassedError: If the due date has passed.
        """
        assignment = await self._get_assignment(assignment_id)

        submission = await self._find_submission(assignment_id, student_id)
        if not submission:
            raise SubmissionNotFoundError("Submission not found")

        if self._is_past_due(assignment):
            raise DeadlinePassedError("Cannot update submission after deadline")

        submission.text_content = request.text_content
        submission.submitted_at = datetime.now(timezone.utc)
        self._activity.audit(
            AuditAction.SUBMISSION_UPDATED,
            student_id,
            "assignment",
            assignment_id,
        )
        await self.db.commit()
        await self.db.refresh(submission)

        logger.info(
            "Submission updated: assignment=%s, student=%s",
            assignment_id,
            student_id,
        )

        return self._to_response(submission)

    async def get_submission(self, assignment_id: str, student_id: str) -> SubmissionResponse:
        """Get a student's submission.

        Raises:
            SubmissionNotFoundError: If the student has not submitted.
        """
        submission = await self._find_submission(assignment_id, student_id)
        if not submission:
            raise SubmissionNotFoundError("Submission not found")
        return self._to_response(submission)

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    async def _get_assignment(self, assignment_id: str) -> Assignment:
        assignment = await self.db.get(Assignment, assignment_id)
        if not assignment:
            raise AssignmentNotFoundError("Assignment not found")
        return assignment

    async def _find_submission(
        self,
        assignment_id: str,
        student_id: str,
    ) -> AssignmentSubmission | None:
        result = await self.db.execute(
            select(AssignmentSubmission).where(
                AssignmentSubmission.assignment_id == assignment_id,
                AssignmentSubmission.student_id == student_id,
            )
        )
        return result.scalar_one_or_none()

    def _is_past_due(self, assignment: Assignment) -> bool:
        return datetime.now(timezone.utc) > assignment.due_date

    def _to_response(self, submission: AssignmentSubmission) -> SubmissionResponse:
        return SubmissionResponse(
            id=submission.id,
            assignment_id=submission.assignment_id,
            student_id=submission.student_id,
            text_content=submission.text_content,
            submitted_at=submission.submitted_at,
        )
