# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Coursework service.

This module provides the CourseworkService class for:
- Creating assignments in a course
- Creating quizzes with their answer keys

Only supervisor teachers, the course instructor and the course creator
may add coursework to a course.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from scholaris.domains.activity.service import ActivityRecorder, AuditAction
from scholaris.domains.quiz.scoring import sanitize_questions
from scholaris.infrastructure.database.models.course import Course
from scholaris.infrastructure.database.models.coursework import Assignment, Quiz
from scholaris.models.common import AssignmentStatus, UserRole
from scholaris.models.quiz import QuizCreateRequest, QuizQuestionView, QuizResponse
from scholaris.models.submission import AssignmentCreateRequest, AssignmentResponse

logger = logging.getLogger(__name__)


class CourseworkServiceError(Exception):
    """Base exception for coursework service errors."""

    pass


class CourseNotFoundError(CourseworkServiceError):
    """Raised when the target course is not found."""

    pass


class CourseworkAccessDeniedError(CourseworkServiceError):
    """Raised when the user may not add coursework to the course."""

    pass


class CourseworkService:
    """Service for creating assignments and quizzes.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._activity = ActivityRecorder(db)

    async def create_assignment(
        self,
        request: AssignmentCreateRequest,
        creator_id: str,
        creator_role: str,
    ) -> AssignmentResponse:
        """Create an assignment.

        Args:
            request: Assignment details.
            creator_id: User creating the assignment.
            creator_role: Role of that user.

        Returns:
            The stored assignment.

        Raises:
            CourseNotFoundError: If the course does not exist.
            CourseworkAccessDeniedError: If the user does not manage the course.
        """
        course = await self._get_managed_course(str(request.course_id), creator_id, creator_role)

        assignment = Assignment(
            course_id=course.id,
            title=request.title,
            description=request.description,
            due_date=request.due_date,
            max_points=request.max_points,
            status=AssignmentStatus.ASSIGNED.value,
            created_by_id=creator_id,
        )
        self.db.add(assignment)
        await self.db.flush()

        self._activity.audit(
            AuditAction.ASSIGNMENT_CREATED,
            creator_id,
            "assignment",
            assignment.id,
            course_id=course.id,
            title=request.title,
        )

        await self.db.commit()
        await self.db.refresh(assignment)

        logger.info(
            "Created assignment: id=%s, course=%s, by=%s",
            assignment.id,
            course.id,
            creator_id,
        )

        return AssignmentResponse(
            id=assignment.id,
            course_id=assignment.course_id,
            title=assignment.title,
            description=assignment.description,
            due_date=assignment.due_date,
            max_points=assignment.max_points,
            status=assignment.status,
            created_by_id=assignment.created_by_id,
        )

    async def create_quiz(
        self,
        request: QuizCreateRequest,
        creator_id: str,
        creator_role: str,
    ) -> QuizResponse:
        """Create a quiz.

        The question count and maximum score are derived from the
        questions: ``total_questions`` is their number and ``max_points``
        the sum of their points. Questions without an id are numbered by
        position.

        Raises:
            CourseNotFoundError: If the course does not exist.
            CourseworkAccessDeniedError: If the user does not manage the course.
        """
        course = await self._get_managed_course(str(request.course_id), creator_id, creator_role)

        questions = self._question_data(request)
        max_points = round(sum(question["points"] for question in questions))

        quiz = Quiz(
            course_id=course.id,
            title=request.title,
            description=request.description,
            duration=request.duration,
            is_timed=request.is_timed,
            attempts_allowed=request.attempts_allowed,
            due_date=request.due_date,
            total_questions=len(questions),
            max_points=max_points,
            questions_data=questions,
            created_by_id=creator_id,
        )
        self.db.add(quiz)
        await self.db.flush()

        self._activity.audit(
            AuditAction.QUIZ_CREATED,
            creator_id,
            "quiz",
            quiz.id,
            course_id=course.id,
            total_questions=len(questions),
            max_points=max_points,
        )

        await self.db.commit()
        await self.db.refresh(quiz)

        logger.info(
            "Created quiz: id=%s, course=%s, questions=%d, max_points=%d, by=%s",
            quiz.id,
            course.id,
            len(questions),
            max_points,
            creator_id,
        )

        return QuizResponse(
            id=quiz.id,
            course_id=quiz.course_id,
            title=quiz.title,
            description=quiz.description,
            duration=quiz.duration,
            is_timed=quiz.is_timed,
            attempts_allowed=quiz.attempts_allowed,
            due_date=quiz.due_date,
            total_questions=quiz.total_questions,
            max_points=quiz.max_points,
            created_by_id=quiz.created_by_id,
            questions=[
                QuizQuestionView(**question)
                for question in sanitize_questions(quiz.questions_data)
            ],
        )

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    async def _get_managed_course(self, course_id: str, user_id: str, user_role: str) -> Course:
        course = await self.db.get(Course, course_id)
        if not course:
            raise CourseNotFoundError("Course not found")

        can_manage = (
            user_role == UserRole.SUPERVISOR_TEACHER.value
            or course.instructor_id == user_id
            or course.created_by_id == user_id
        )
        if not can_manage:
            raise CourseworkAccessDeniedError("You cannot add coursework to this course")
        return course

    def _question_data(self, request: QuizCreateRequest) -> list[dict[str, Any]]:
        questions = []
        for index, question in enumerate(request.questions):
            data = question.model_dump(by_alias=True)
            if not data.get("id"):
                data["id"] = str(index + 1)
            questions.append(data)
        return questions
