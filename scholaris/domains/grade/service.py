# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade calculation service.

This module provides the GradeCalculationService class for:
- GPA calculation (overall or per term)
- Storing the GPA on the student's profile
- Course grade statistics
- Student transcripts

and the GradingService class for teachers grading submissions by hand
and adjusting recorded grades.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scholaris.domains.activity.service import ActivityRecorder, AuditAction
from scholaris.domains.grade.grading import (
    GRADE_POINTS,
    GPAEntry,
    calculate_percentage,
    percentage_to_letter,
    round2,
    weighted_gpa,
)
from scholaris.infrastructure.database.models.course import Course, Enrollment
from scholaris.infrastructure.database.models.coursework import Assignment, AssignmentSubmission
from scholaris.infrastructure.database.models.grade import Grade
from scholaris.infrastructure.database.models.user import User, UserProfile
from scholaris.models.common import (
    AssignmentStatus,
    EnrollmentStatus,
    NotificationType,
    UserRole,
)
from scholaris.models.grade import (
    CourseGradeSummary,
    GPAResponse,
    GradeResponse,
    GradeSubmissionRequest,
    GradeUpdateRequest,
    TranscriptCourse,
    TranscriptResponse,
    TranscriptStudent,
)

logger = logging.getLogger(__name__)


class GradeServiceError(Exception):
    """Base exception for grade service errors."""

    pass


class StudentNotFoundError(GradeServiceError):
    """Raised when the student or their profile is not found."""

    pass


class CourseNotFoundError(GradeServiceError):
    """Raised when the course is not found."""

    pass


class SubmissionNotFoundError(GradeServiceError):
    """Raised when the submission to grade is not found."""

    pass


class GradeNotFoundError(GradeServiceError):
    """Raised when the grade is not found."""

    pass


class AlreadyGradedError(GradeServiceError):
    """Raised when grading a submission that already has a grade."""

    pass


class GradingAccessDeniedError(GradeServiceError):
    """Raised when the user may not grade or change the grade."""

    pass


class InvalidGradeError(GradeServiceError):
    """Raised for an unknown letter grade or a non-positive maximum."""

    pass


class GradeCalculationService:
    """Service for GPA, course statistics and transcripts.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def calculate_gpa(
        self,
        student_id: str,
        semester: str | None = None,
        year: int | None = None,
    ) -> float:
        """Calculate a student's GPA.

        Each grade is weighted by its course's credits and its own weight.
        Extra-credit grades are excluded.

        Args:
            student_id: Student identifier.
            semester: Only count courses in this semester.
            year: Only count courses in this year.

        Returns:
            GPA rounded to two decimals, 0.0 when there are no grades.
        """
        query = (
            select(Grade.letter_grade, Grade.weight, Course.credits)
            .join(Course, Grade.course_id == Course.id)
            .where(
                Grade.student_id == student_id,
                Grade.is_extra_credit.is_(False),
            )
        )
        if semester:
            query = query.where(Course.semester == semester)
        if year:
            query = query.where(Course.year == year)

        result = await self.db.execute(query)
        entries = [
            GPAEntry(
                letter_grade=letter,
                credits=float(credits or 1),
                weight=float(weight or 1),
            )
            for letter, weight, credits in result.all()
        ]

        return weighted_gpa(entries)

    async def get_gpa(
        self,
        student_id: str,
        semester: str | None = None,
        year: int | None = None,
    ) -> GPAResponse:
        """Calculate a GPA and wrap it in a response model."""
        gpa = await self.calculate_gpa(student_id, semester=semester, year=year)
        return GPAResponse(student_id=student_id, gpa=gpa, semester=semester, year=year)

    async def update_student_gpa(self, student_id: str) -> float:
        """Recalculate the overall GPA and store it on the profile.

        Args:
            student_id: Student identifier.

        Returns:
            The stored GPA.

        Raises:
            StudentNotFoundError: If the student has no profile.
        """
        gpa = await self.apply_student_gpa(student_id)
        if gpa is None:
            raise StudentNotFoundError(f"Profile for student {student_id} not found")

        await self.db.commit()

        logger.info("Updated GPA: student=%s, gpa=%.2f", student_id, gpa)

        return gpa

    async def apply_student_gpa(self, student_id: str) -> float | None:
        """Set the profile GPA without committing.

        Returns:
            The GPA, or None when the student has no profile to store it on.
        """
        gpa = await self.calculate_gpa(student_id)

        result = await self.db.execute(
            select(UserProfile).where(UserProfile.user_id == student_id)
        )
        profile = result.scalar_one_or_none()
        if not profile:
            return None

        profile.gpa = Decimal(str(gpa))
        return gpa

    async def calculate_course_grades(self, course_id: str) -> CourseGradeSummary:
        """Average percentage and letter distribution for a course.

        Args:
            course_id: Course identifier.

        Returns:
            Summary with average (two decimals), distribution and total.

        Raises:
            CourseNotFoundError: If the course does not exist.
        """
        course = await self.db.get(Course, course_id)
        if not course:
            raise CourseNotFoundError(f"Course {course_id} not found")

        result = await self.db.execute(
            select(Grade.percentage, Grade.letter_grade).where(Grade.course_id == course_id)
        )
        rows = result.all()

        if not rows:
            return CourseGradeSummary(course_id=course_id, average=0.0, distribution={}, total=0)

        total_percentage = sum(float(percentage or 0) for percentage, _ in rows)
        distribution = Counter(letter for _, letter in rows)

        return CourseGradeSummary(
            course_id=course_id,
            average=round2(total_percentage / len(rows)),
            distribution=dict(distribution),
            total=len(rows),
        )

    async def get_student_transcript(self, student_id: str) -> TranscriptResponse:
        """Build a student's transcript.

        Args:
            student_id: Student identifier.

        Returns:
            One row per enrollment with the course's average grade, plus
            overall GPA and credits earned in completed courses.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        result = await self.db.execute(
            select(User).options(selectinload(User.profile)).where(User.id == student_id)
        )
        student = result.scalar_one_or_none()
        if not student:
            raise StudentNotFoundError(f"Student {student_id} not found")

        result = await self.db.execute(
            select(Enrollment)
            .options(selectinload(Enrollment.course))
            .where(Enrollment.student_id == student_id)
            .order_by(Enrollment.enrolled_at)
        )
        enrollments = result.scalars().all()

        result = await self.db.execute(
            select(Grade.course_id, Grade.percentage).where(Grade.student_id == student_id)
        )
        percentages: dict[str, list[float]] = defaultdict(list)
        for course_id, percentage in result.all():
            percentages[course_id].append(float(percentage or 0))

        courses = []
        for enrollment in enrollments:
            course = enrollment.course
            course_percentages = percentages.get(course.id, [])
            average = (
                round2(sum(course_percentages) / len(course_percentages))
                if course_percentages
                else 0.0
            )
            courses.append(
                TranscriptCourse(
                    course_code=course.code,
                    course_name=course.name,
                    credits=course.credits,
                    semester=course.semester,
                    year=course.year,
                    final_grade=enrollment.final_grade,
                    final_points=(
                        float(enrollment.final_points)
                        if enrollment.final_points is not None
                        else None
                    ),
                    average_percentage=average,
                    status=enrollment.status,
                )
            )

        overall_gpa = await self.calculate_gpa(student_id)
        total_credits = sum(
            row.credits for row in courses if row.status == EnrollmentStatus.COMPLETED.value
        )

        profile = student.profile
        return TranscriptResponse(
            student=TranscriptStudent(
                id=student.id,
                name=student.full_name,
                student_number=profile.student_number if profile else None,
                major=profile.major if profile else None,
                minor=profile.minor if profile else None,
            ),
            courses=courses,
            overall_gpa=overall_gpa,
            total_credits=total_credits,
        )


class GradingService:
    """Service for grades entered by teachers.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._activity = ActivityRecorder(db)
        self._calculator = GradeCalculationService(db)

    async def grade_submission(
        self,
        submission_id: str,
        request: GradeSubmissionRequest,
        grader_id: str,
        grader_role: str,
    ) -> GradeResponse:
        """Grade an assignment submission.

        Marks the assignment graded, refreshes the student's stored GPA
        and notifies the student.

        Args:
            submission_id: Submission identifier.
            request: Score and optional letter, maximum and feedback.
            grader_id: Grading user.
            grader_role: Role of that user.

        Returns:
            The new grade.

        Raises:
            SubmissionNotFoundError: If the submission does not exist.
            AlreadyGradedError: If the submission already has a grade.
            GradingAccessDeniedError: Unless the grader is a supervisor
                teacher or the course instructor.
            InvalidGradeError: If the letter or maximum is invalid.
        """
        result = await self.db.execute(
            select(AssignmentSubmission)
            .options(selectinload(AssignmentSubmission.assignment).selectinload(Assignment.course))
            .where(AssignmentSubmission.id == submission_id)
        )
        submission = result.scalar_one_or_none()
        if not submission:
            raise SubmissionNotFoundError("Submission not found")

        result = await self.db.execute(select(Grade).where(Grade.submission_id == submission_id))
        if result.scalars().first() is not None:
            raise AlreadyGradedError("This submission has already been graded")

        assignment = submission.assignment
        can_grade = (
            grader_role == UserRole.SUPERVISOR_TEACHER.value
            or assignment.course.instructor_id == grader_id
        )
        if not can_grade:
            raise GradingAccessDeniedError("You cannot grade this assignment")

        max_points = request.max_points
        if max_points is None:
            max_points = assignment.max_points
        if not max_points or max_points <= 0:
            raise InvalidGradeError("Maximum points must be greater than zero")

        percentage = calculate_percentage(request.score, max_points)
        letter = self._letter(request.letter_grade, percentage)

        grade = Grade(
            id=str(uuid4()),
            student_id=submission.student_id,
            course_id=assignment.course_id,
            assignment_id=assignment.id,
            submission_id=submission.id,
            letter_grade=letter,
            score=Decimal(str(request.score)),
            max_points=Decimal(str(max_points)),
            percentage=Decimal(str(percentage)),
            weight=Decimal(str(request.weight)),
            is_extra_credit=request.is_extra_credit,
            feedback=request.feedback,
            graded_by_id=grader_id,
        )
        self.db.add(grade)
        assignment.status = AssignmentStatus.GRADED.value

        self._activity.audit(
            AuditAction.SUBMISSION_GRADED,
            grader_id,
            "grade",
            grade.id,
            student_id=submission.student_id,
            assignment_id=assignment.id,
            score=request.score,
            max_points=max_points,
        )
        self._activity.notify(
            submission.student_id,
            f"Graded: {assignment.title}",
            f"You received {letter} ({percentage:.2f}%) on {assignment.title}",
            NotificationType.GRADE_POSTED,
            course_id=assignment.course_id,
            assignment_id=assignment.id,
            grade_id=grade.id,
        )

        await self.db.flush()
        await self._calculator.apply_student_gpa(submission.student_id)
        await self.db.commit()
        await self.db.refresh(grade)

        logger.info(
            "Graded submission: submission=%s, student=%s, grade=%s, by=%s",
            submission_id,
            submission.student_id,
            letter,
            grader_id,
        )

        return self._to_response(grade)

    async def update_grade(
        self,
        grade_id: str,
        request: GradeUpdateRequest,
        grader_id: str,
        grader_role: str,
    ) -> GradeResponse:
        """Change a recorded grade.

        A new score or maximum recomputes the percentage, and the letter
        follows the percentage unless one is given.

        Raises:
            GradeNotFoundError: If the grade does not exist.
            GradingAccessDeniedError: Unless the user is a supervisor
                teacher, the original grader or the course instructor.
            InvalidGradeError: If the letter or maximum is invalid.
        """
        result = await self.db.execute(
            select(Grade).options(selectinload(Grade.course)).where(Grade.id == grade_id)
        )
        grade = result.scalar_one_or_none()
        if not grade:
            raise GradeNotFoundError("Grade not found")

        can_update = (
            grader_role == UserRole.SUPERVISOR_TEACHER.value
            or grade.graded_by_id == grader_id
            or grade.course.instructor_id == grader_id
        )
        if not can_update:
            raise GradingAccessDeniedError("You cannot update this grade")

        changes = request.model_dump(exclude_none=True)

        if request.score is not None or request.max_points is not None:
            score = request.score if request.score is not None else float(grade.score)
            max_points = (
                request.max_points if request.max_points is not None else float(grade.max_points)
            )
            if max_points <= 0:
                raise InvalidGradeError("Maximum points must be greater than zero")
            percentage = calculate_percentage(score, max_points)
            grade.score = Decimal(str(score))
            grade.max_points = Decimal(str(max_points))
            grade.percentage = Decimal(str(percentage))
            grade.letter_grade = self._letter(request.letter_grade, percentage)
        elif request.letter_grade is not None:
            grade.letter_grade = self._letter(request.letter_grade, float(grade.percentage))

        if request.feedback is not None:
            grade.feedback = request.feedback
        if request.is_extra_credit is not None:
            grade.is_extra_credit = request.is_extra_credit
        if request.weight is not None:
            grade.weight = Decimal(str(request.weight))

        self._activity.audit(
            AuditAction.GRADE_UPDATED,
            grader_id,
            "grade",
            grade.id,
            student_id=grade.student_id,
            changes=changes,
        )
        self._activity.notify(
            grade.student_id,
            "Grade updated",
            f"Your grade in {grade.course.name} is now {grade.letter_grade}",
            NotificationType.GRADE_UPDATED,
            course_id=grade.course_id,
            assignment_id=grade.assignment_id,
            grade_id=grade.id,
        )

        await self.db.flush()
        await self._calculator.apply_student_gpa(grade.student_id)
        await self.db.commit()
        await self.db.refresh(grade)

        logger.info(
            "Updated grade: grade=%s, by=%s, fields=%s",
            grade_id,
            grader_id,
            sorted(changes),
        )

        return self._to_response(grade)

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    def _letter(self, letter: str | None, percentage: float) -> str:
        if letter is None:
            return percentage_to_letter(percentage)
        letter = letter.strip().upper()
        if letter not in GRADE_POINTS:
            raise InvalidGradeError(f"Unknown letter grade: {letter}")
        return letter

    def _to_response(self, grade: Grade) -> GradeResponse:
        return GradeResponse(
            id=grade.id,
            student_id=grade.student_id,
            course_id=grade.course_id,
            assignment_id=grade.assignment_id,
            submission_id=grade.submission_id,
            quiz_attempt_id=grade.quiz_attempt_id,
            letter_grade=grade.letter_grade,
            score=float(grade.score),
            max_points=float(grade.max_points),
            percentage=float(grade.percentage),
            weight=float(grade.weight),
            is_extra_credit=grade.is_extra_credit,
            feedback=grade.feedback,
            graded_by_id=grade.graded_by_id,
        )
