# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz attempt service.

This module provides the QuizAttemptService class for:
- Starting (or resuming) a quiz attempt
- Submitting answers, scoring them and recording a grade
- Awarding points by hand for questions without an answer key
- Reading an attempt with access control
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scholaris.domains.activity.service import ActivityRecorder, AuditAction
from scholaris.domains.enrollment.service import EnrollmentService
from scholaris.domains.grade.grading import calculate_percentage, percentage_to_letter
from scholaris.domains.grade.service import GradeCalculationService
from scholaris.domains.quiz.scoring import (
    cap_score,
    grade_answers,
    parse_duration,
    sanitize_questions,
)
from scholaris.infrastructure.database.models.coursework import Quiz, QuizAttempt
from scholaris.infrastructure.database.models.grade import Grade
from scholaris.models.common import NotificationType, UserRole
from scholaris.models.quiz import (
    QuestionResult,
    QuizAttemptResponse,
    QuizAttemptResult,
    QuizQuestionView,
)

logger = logging.getLogger(__name__)


class QuizServiceError(Exception):
    """Base exception for quiz service errors."""

    pass


class QuizNotFoundError(QuizServiceError):
    """Raised when quiz is not found."""

    pass


class AttemptNotFoundError(QuizServiceError):
    """Raised when quiz attempt is not found."""

    pass


class QuizClosedError(QuizServiceError):
    """Raised when starting a quiz after its due date."""

    pass


class MaxAttemptsExceededError(QuizServiceError):
    """Raised when the student has used every allowed attempt."""

    pass


class AttemptAlreadySubmittedError(QuizServiceError):
    """Raised when submitting an attempt twice."""

    pass


class TimeLimitExceededError(QuizServiceError):
    """Raised when a timed attempt is submitted too late."""

    pass


class AttemptAccessDeniedError(QuizServiceError):
    """Raised when a user may not submit or read an attempt."""

    pass


class AttemptNotSubmittedError(QuizServiceError):
    """Raised when grading an attempt that has not been submitted."""

    pass


class QuestionNotFoundError(QuizServiceError):
    """Raised when the attempt has no result for the question."""

    pass


class InvalidPointsError(QuizServiceError):
    """Raised when awarded points exceed what the question is worth."""

    pass


class QuizAttemptService:
    """Service for quiz attempts.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._enrollments = EnrollmentService(db)
        self._activity = ActivityRecorder(db)

    async def start_attempt(self, quiz_id: str, student_id: str) -> QuizAttemptResponse:
        """Start a quiz attempt, resuming an unsubmitted one if it exists.

        Args:
            quiz_id: Quiz identifier.
            student_id: Student taking the quiz.

        Returns:
            The attempt with the questions, stripped of answer keys.

        Raises:
            QuizNotFoundError: If quiz not found.
            NotEnrolledError: If the student is not actively enrolled.
            QuizClosedError: If the due date has passed.
            MaxAttemptsExceededError: If no attempts remain.
        """
        quiz = await self.db.get(Quiz, quiz_id)
        if not quiz:
            raise QuizNotFoundError("Quiz not found")

        await self._enrollments.require_active_enrollment(quiz.course_id, student_id)

        if quiz.due_date and datetime.now(timezone.utc) > quiz.due_date:
            raise QuizClosedError("Quiz deadline has passed")

        result = await self.db.execute(
            select(QuizAttempt)
            .where(
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.student_id == student_id,
                QuizAttempt.submitted_at.is_(None),
            )
            .order_by(QuizAttempt.started_at.desc())
            .limit(1)
        )
        attempt = result.scalars().first()

        if attempt:
            logger.info(
                "Resuming quiz attempt: attempt=%s, quiz=%s, student=%s",
                attempt.id,
                quiz_id,
                student_id,
            )
            return self._to_response(attempt, quiz)

        result = await self.db.execute(
            select(func.count())
            .select_from(QuizAttempt)
            .where(
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.student_id == student_id,
            )
        )
        used = result.scalar_one()
        if used >= quiz.attempts_allowed:
            raise MaxAttemptsExceededError("Maximum attempts exceeded")

        attempt = QuizAttempt(
            quiz_id=quiz_id,
            student_id=student_id,
            started_at=datetime.now(timezone.utc),
            answers={},
            score=0,
        )
        self.db.add(attempt)
        await self.db.commit()
        await self.db.refresh(attempt)

        logger.info(
            "Started quiz attempt: attempt=%s, quiz=%s, student=%s, number=%d/%d",
            attempt.id,
            quiz_id,
            student_id,
            used + 1,
            quiz.attempts_allowed,
        )

        return self._to_response(attempt, quiz)

    async def submit_attempt(
        self,
        attempt_id: str,
        answers: dict[str, Any],
        student_id: str,
    ) -> QuizAttemptResult:
        """Submit answers for an attempt and record the grade.

        Args:
            attempt_id: Attempt identifier.
            answers: Answers keyed by question id.
            student_id: Submitting student.

        Returns:
            Score, percentage, letter grade and per-question results.

        Raises:
            AttemptNotFoundError: If attempt not found.
            AttemptAccessDeniedError: If the attempt belongs to someone else.
            AttemptAlreadySubmittedError: If already submitted.
            TimeLimitExceededError: If a timed quiz ran out of time.
        """
        attempt = await self._get_attempt(attempt_id)
        quiz = attempt.quiz

        if attempt.student_id != student_id:
            raise AttemptAccessDeniedError("You can only submit your own quiz attempts")

        if attempt.submitted_at:
            raise AttemptAlreadySubmittedError("Quiz attempt already submitted")

        now = datetime.now(timezone.utc)
        if quiz.is_timed and attempt.started_at:
            if now - attempt.started_at > parse_duration(quiz.duration):
                raise TimeLimitExceededError("Time limit exceeded")

        results, earned = grade_answers(quiz.questions_data, answers, quiz.max_points)
        score = cap_score(earned, quiz.max_points)
        attempt.answers = answers
        attempt.results = results
        attempt.score = score
        attempt.submitted_at = now

        percentage = calculate_percentage(score, quiz.max_points)
        letter = percentage_to_letter(percentage)
        grade = await self._record_grade(attempt, quiz, score, percentage, letter)

        self._activity.audit(
            AuditAction.QUIZ_SUBMITTED,
            student_id,
            "quiz_attempt",
            attempt.id,
            quiz_id=quiz.id,
            score=score,
            max_points=quiz.max_points,
        )
        self._activity.notify(
            student_id,
            f"Quiz graded: {quiz.title}",
            f"You scored {score}/{quiz.max_points} ({letter}) on {quiz.title}",
            NotificationType.GRADE_POSTED,
            course_id=quiz.course_id,
            grade_id=grade.id,
        )

        await self.db.commit()
        await self.db.refresh(attempt)

        logger.info(
            "Submitted quiz attempt: attempt=%s, student=%s, score=%d/%d, grade=%s",
            attempt_id,
            student_id,
            score,
            quiz.max_points,
            letter,
        )

        return self._to_result(attempt, quiz, percentage, letter)

    async def grade_answer(
        self,
        attempt_id: str,
        question_id: str,
        points: float,
        grader_id: str,
        grader_role: str,
    ) -> QuizAttemptResult:
        """Award points for one question of a submitted attempt.

        Used for essay and short-answer questions that have no answer key,
        and to override an automatic verdict. The attempt score, its grade
        and the student's stored GPA are recalculated.

        Args:
            attempt_id: Attempt identifier.
            question_id: Id of the question being graded.
            points: Points awarded, at most what the question is worth.
            grader_id: Grading user.
            grader_role: Role of that user.

        Returns:
            The updated result.

        Raises:
            AttemptNotFoundError: If attempt not found.
            AttemptAccessDeniedError: Unless the grader is a supervisor
                teacher, the quiz creator or the course instructor.
            AttemptNotSubmittedError: If the attempt is still open.
            QuestionNotFoundError: If the attempt has no such question.
            InvalidPointsError: If points exceed the question's worth.
        """
        attempt = await self._get_attempt(attempt_id)
        quiz = attempt.quiz

        can_grade = (
            grader_role == UserRole.SUPERVISOR_TEACHER.value
            or quiz.created_by_id == grader_id
            or quiz.course.instructor_id == grader_id
        )
        if not can_grade:
            raise AttemptAccessDeniedError("You cannot grade this quiz")

        if not attempt.submitted_at:
            raise AttemptNotSubmittedError("Quiz attempt has not been submitted")

        results = [dict(entry) for entry in attempt.results or []]
        entry = next((r for r in results if str(r.get("questionId")) == question_id), None)
        if entry is None:
            raise QuestionNotFoundError(f"Question {question_id} not found in this attempt")

        worth = float(entry.get("maxPoints") or 0)
        if points > worth:
            raise InvalidPointsError(f"Question {question_id} is worth at most {worth:g} points")

        entry["pointsEarned"] = float(points)
        entry["isCorrect"] = points >= worth if worth > 0 else None
        entry["manuallyGraded"] = True
        # JSONB columns only persist on reassignment
        attempt.results = results

        score = cap_score(sum(float(r.get("pointsEarned") or 0) for r in results), quiz.max_points)
        attempt.score = score
        percentage = calculate_percentage(score, quiz.max_points)
        letter = percentage_to_letter(percentage)
        grade = await self._record_grade(
            attempt, quiz, score, percentage, letter, graded_by_id=grader_id
        )

        self._activity.audit(
            AuditAction.QUIZ_ANSWER_GRADED,
            grader_id,
            "quiz_attempt",
            attempt.id,
            question_id=question_id,
            points=points,
        )
        self._activity.notify(
            attempt.student_id,
            f"Quiz grade updated: {quiz.title}",
            f"Your score on {quiz.title} is now {score}/{quiz.max_points} ({letter})",
            NotificationType.GRADE_UPDATED,
            course_id=quiz.course_id,
            grade_id=grade.id,
        )

        await self.db.flush()
        await GradeCalculationService(self.db).apply_student_gpa(attempt.student_id)
        await self.db.commit()
        await self.db.refresh(attempt)

        logger.info(
            "Graded quiz answer: attempt=%s, question=%s, points=%g, score=%d, by=%s",
            attempt_id,
            question_id,
            points,
            score,
            grader_id,
        )

        return self._to_result(attempt, quiz, percentage, letter)

    async def get_attempt(
        self,
        attempt_id: str,
        user_id: str,
        user_role: str,
    ) -> QuizAttemptResponse:
        """Read an attempt.

        Visible to its student, supervisor teachers, the quiz creator and
        the course instructor.

        Raises:
            AttemptNotFoundError: If attempt not found.
            AttemptAccessDeniedError: If the user may not see it.
        """
        attempt = await self._get_attempt(attempt_id)
        quiz = attempt.quiz

        can_access = (
            attempt.student_id == user_id
            or user_role == UserRole.SUPERVISOR_TEACHER.value
            or quiz.created_by_id == user_id
            or quiz.course.instructor_id == user_id
        )
        if not can_access:
            raise AttemptAccessDeniedError("Access denied")

        return self._to_response(attempt, quiz)

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    async def _get_attempt(self, attempt_id: str) -> QuizAttempt:
        result = await self.db.execute(
            select(QuizAttempt)
            .options(selectinload(QuizAttempt.quiz).selectinload(Quiz.course))
            .where(QuizAttempt.id == attempt_id)
        )
        attempt = result.scalar_one_or_none()
        if not attempt:
            raise AttemptNotFoundError("Quiz attempt not found")
        return attempt

    async def _record_grade(
        self,
        attempt: QuizAttempt,
        quiz: Quiz,
        score: int,
        percentage: float,
        letter: str,
        graded_by_id: str | None = None,
    ) -> Grade:
        """Create or refresh the grade linked to an attempt."""
        result = await self.db.execute(select(Grade).where(Grade.quiz_attempt_id == attempt.id))
        grade = result.scalar_one_or_none()

        if grade is None:
            grade = Grade(
                id=str(uuid4()),
                student_id=attempt.student_id,
                course_id=quiz.course_id,
                quiz_attempt_id=attempt.id,
                weight=Decimal("1.0"),
                is_extra_credit=False,
                feedback=f"Quiz: {quiz.title}",
            )
            self.db.add(grade)

        grade.letter_grade = letter
        grade.score = Decimal(score)
        grade.max_points = Decimal(quiz.max_points)
        grade.percentage = Decimal(str(percentage))
        if graded_by_id:
            grade.graded_by_id = graded_by_id
        return grade

    def _to_result(
        self,
        attempt: QuizAttempt,
        quiz: Quiz,
        percentage: float,
        letter: str,
    ) -> QuizAttemptResult:
        return QuizAttemptResult(
            id=attempt.id,
            quiz_id=attempt.quiz_id,
            student_id=attempt.student_id,
            score=attempt.score,
            max_points=quiz.max_points,
            percentage=percentage,
            letter_grade=letter,
            submitted_at=attempt.submitted_at,
            results=[QuestionResult.model_validate(entry) for entry in attempt.results or []],
        )

    def _to_response(self, attempt: QuizAttempt, quiz: Quiz) -> QuizAttemptResponse:
        return QuizAttemptResponse(
            id=attempt.id,
            quiz_id=attempt.quiz_id,
            student_id=attempt.student_id,
            started_at=attempt.started_at,
            submitted_at=attempt.submitted_at,
            score=attempt.score,
            answers=attempt.answers,
            questions=[
                QuizQuestionView(**question)
                for question in sanitize_questions(quiz.questions_data)
            ],
        )
