# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for managing student course enrollments.

This module provides the EnrollmentService class for:
- Student enrollment in courses
- Bulk enrollment operations
- Active enrollment checks used by quizzes and submissions
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scholaris.domains.activity.service import ActivityRecorder, AuditAction

from scholaris.infrastructure.database.models.course import Course, Enrollment
from scholaris.infrastructure.database.models.user import User
from scholaris.models.common import EnrollmentStatus, NotificationType
from scholaris.models.enrollment import BulkEnrollResponse, EnrollmentResponse

logger = logging.getLogger(__name__)


class EnrollmentServiceError(Exception):
    """Base exception for enrollment service errors."""

    pass


class CourseNotFoundError(EnrollmentServiceError):
    """Raised when course is not found."""

    pass


class StudentNotFoundError(EnrollmentServiceError):
    """Raised when student is not found."""

    pass


class InvalidStudentTypeError(EnrollmentServiceError):
    """Raised when user is not a student."""

    pass


class AlreadyEnrolledError(EnrollmentServiceError):
    """Raised when student is already enrolled in course."""

    pass


class NotEnrolledError(EnrollmentServiceError):
    """Raised when student has no active enrollment in course."""

    pass


class CourseFullError(EnrollmentServiceError):
    """Raised when enrolling would exceed course capacity."""

    pass


class EnrollmentClosedError(EnrollmentServiceError):
    """Raised after the course's enrollment deadline."""

    pass


class EnrollmentService:
    """Service for managing student enrollments.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._activity = ActivityRecorder(db)

    async def enroll_student(
        self,
        course_id: str,
        student_id: str,
        enrolled_by: str,
    ) -> EnrollmentResponse:
        """Enroll a student in a course.

        A previously dropped enrollment is reactivated.

        Args:
            course_id: Course identifier.
            student_id: Student identifier.
            enrolled_by: ID of user performing enrollment.

        Returns:
            Enrollment response.

        Raises:
            CourseNotFoundError: If course not found.
            StudentNotFoundError: If student not found.
            InvalidStudentTypeError: If user is not a student.
            EnrollmentClosedError: If the enrollment deadline has passed.
            AlreadyEnrolledError: If student already enrolled.
            CourseFullError: If the course is at capacity.
        """
        course = await self._get_course(course_id)
        await self._get_student(student_id)
        self._check_enrollment_open(course)

        existing = await self._get_enrollment(course_id, student_id)
        if existing and existing.status == EnrollmentStatus.ACTIVE.value:
            raise AlreadyEnrolledError("Student is already enrolled in this course")

        await self._check_capacity(course, adding=1)

        if existing:
            existing.status = EnrollmentStatus.ACTIVE.value
            existing.enrolled_at = datetime.now(timezone.utc)
            existing.enrolled_by_id = enrolled_by
            enrollment = existing
            action = "Reactivated enrollment"
        else:
            enrollment = Enrollment(
                course_id=course_id,
                student_id=student_id,
                status=EnrollmentStatus.ACTIVE.value,
                enrolled_by_id=enrolled_by,
            )
            self.db.add(enrollment)
            action = "Enrolled student"

        self._activity.audit(
            AuditAction.STUDENT_ENROLLED,
            enrolled_by,
            "course",
            course_id,
            student_id=student_id,
        )
        self._notify_enrolled(course, student_id)

        await self._commit_enrollment()
        await self.db.refresh(enrollment)

        logger.info(
            "%s: student=%s, course=%s, by=%s",
            action,
            student_id,
            course_id,
            enrolled_by,
        )

        return self._to_response(enrollment)

    async def bulk_enroll(
        self,
        course_id: str,
        student_ids: list[str],
        enrolled_by: str,
    ) -> BulkEnrollResponse:
        """Enroll several students, skipping those already enrolled.

        Args:
            course_id: Course identifier.
            student_ids: Students to enroll.
            enrolled_by: ID of user performing enrollment.

        Returns:
            Enrolled, skipped and failed student ids.

        Raises:
            CourseNotFoundError: If course not found.
            EnrollmentClosedError: If the enrollment deadline has passed.
            AlreadyEnrolledError: If every student is already enrolled.
            CourseFullError: If the new students do not fit.
        """
        course = await self._get_course(course_id)
        self._check_enrollment_open(course)

        requested = list(dict.fromkeys(student_ids))

        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.course_id == course_id,
                Enrollment.student_id.in_(requested),
            )
        )
        existing = {e.student_id: e for e in result.scalars().all()}

        skipped = [
            sid
            for sid in requested
            if sid in existing and existing[sid].status == EnrollmentStatus.ACTIVE.value
        ]
        candidates = [sid for sid in requested if sid not in skipped]
        if not candidates:
            raise AlreadyEnrolledError("All students are already enrolled in this course")

        result = await self.db.execute(select(User).where(User.id.in_(candidates)))
        users = {u.id: u for u in result.scalars().all()}

        failed: dict[str, str] = {}
        to_enroll: list[str] = []
        for sid in candidates:
            user = users.get(sid)
            if user is None or user.deleted_at is not None:
                failed[sid] = "Student not found"
            elif not user.is_student:
                failed[sid] = "User is not a student"
            else:
                to_enroll.append(sid)

        if to_enroll:
            await self._check_capacity(course, adding=len(to_enroll))

        now = datetime.now(timezone.utc)
        for sid in to_enroll:
            previous = existing.get(sid)
            if previous:
                previous.status = EnrollmentStatus.ACTIVE.value
                previous.enrolled_at = now
                previous.enrolled_by_id = enrolled_by
            else:
                self.db.add(
                    Enrollment(
                        course_id=course_id,
                        student_id=sid,
                        status=EnrollmentStatus.ACTIVE.value,
                        enrolled_by_id=enrolled_by,
                    )
                )
            self._notify_enrolled(course, sid)

        if to_enroll:
            self._activity.audit(
                AuditAction.STUDENTS_BULK_ENROLLED,
                enrolled_by,
                "course",
                course_id,
                student_ids=to_enroll,
            )
            await self._commit_enrollment()

        logger.info(
            "Bulk enrollment: course=%s, enrolled=%d, skipped=%d, failed=%d, by=%s",
            course_id,
            len(to_enroll),
            len(skipped),
            len(failed),
            enrolled_by,
        )

        return BulkEnrollResponse(enrolled=to_enroll, skipped=skipped, failed=failed)

    async def get_active_enrollment(
        self,
        course_id: str,
        student_id: str,
    ) -> Enrollment | None:
        """Get a student's active enrollment in a course, if any."""
        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.course_id == course_id,
                Enrollment.student_id == student_id,
                Enrollment.status == EnrollmentStatus.ACTIVE.value,
            )
        )
        return result.scalar_one_or_none()

    async def require_active_enrollment(self, course_id: str, student_id: str) -> Enrollment:
        """Get an active enrollment or fail.

        Raises:
            NotEnrolledError: If the student is not actively enrolled.
        """
        enrollment = await self.get_active_enrollment(course_id, student_id)
        if not enrollment:
            raise NotEnrolledError("You are not enrolled in this course")
        return enrollment

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    async def _get_course(self, course_id: str) -> Course:
        course = await self.db.get(Course, course_id)
        if not course:
            raise CourseNotFoundError(f"Course {course_id} not found")
        return course

    async def _get_student(self, student_id: str) -> User:
        result = await self.db.execute(
            select(User).where(User.id == student_id, User.deleted_at.is_(None))
        )
        user = result.scalar_one_or_none()
        if not user:
            raise StudentNotFoundError(f"Student {student_id} not found")
        if not user.is_student:
            raise InvalidStudentTypeError("User is not a student")
        return user

    async def _get_enrollment(self, course_id: str, student_id: str) -> Enrollment | None:
        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.course_id == course_id,
                Enrollment.student_id == student_id,
            )
        )
        return result.scalar_one_or_none()

    def _check_enrollment_open(self, course: Course) -> None:
        deadline = course.enrollment_deadline
        if deadline and datetime.now(timezone.utc) > deadline:
            raise EnrollmentClosedError("Enrollment deadline has passed for this course")

    async def _check_capacity(self, course: Course, adding: int) -> None:
        if not course.capacity:
            return
        result = await self.db.execute(
            select(func.count())
            .select_from(Enrollment)
            .where(
                Enrollment.course_id == course.id,
                Enrollment.status == EnrollmentStatus.ACTIVE.value,
            )
        )
        active = result.scalar_one()
        if active + adding > course.capacity:
            raise CourseFullError(
                f"Course capacity exceeded: {active} of {course.capacity} seats taken"
            )

    async def _commit_enrollment(self) -> None:
        """Commit, mapping a lost race on uq_enrollments_course_student."""
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("Concurrent enrollment rejected: %s", str(e.orig))
            raise AlreadyEnrolledError("Student is already enrolled in this course") from e

    def _notify_enrolled(self, course: Course, student_id: str) -> None:
        self._activity.notify(
            student_id,
            f"Enrolled in {course.code}",
            f"You have been enrolled in {course.name}",
            NotificationType.ENROLLMENT,
            course_id=course.id,
        )

    def _to_response(self, enrollment: Enrollment) -> EnrollmentResponse:
        return EnrollmentResponse(
            id=enrollment.id,
            course_id=enrollment.course_id,
            student_id=enrollment.student_id,
            status=enrollment.status,
            enrolled_at=enrollment.enrolled_at,
            enrolled_by_id=enrollment.enrolled_by_id,
        )
