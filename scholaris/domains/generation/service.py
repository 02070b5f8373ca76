# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""AI generation service.

This module provides the GenerationService class, which loads course data,
runs a generation capability against the LLM and returns the parsed result:
- Weekly study plans (with a static fallback when generation fails)
- Quizzes and assignments covering selected study-plan weeks
- Answers to student questions
- Personal performance reports from quiz attempts
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scholaris.core.config import GenerationSettings, get_settings
from scholaris.core.generation import (
    AIResponseError,
    AssignmentCapability,
    CourseContext,
    GenerationCapability,
    PersonalReportCapability,
    QuizCapability,
    QuizQuestionCapability,
    StudyPlanCapability,
    build_fallback_plan,
)
from scholaris.core.intelligence.llm import LLMClient, LLMError
from scholaris.domains.course.service import CourseService
from scholaris.infrastructure.database.models.course import Course
from scholaris.infrastructure.database.models.coursework import Quiz, QuizAttempt
from scholaris.infrastructure.database.models.user import User
from scholaris.models.generation import StudyPlanGenerationResponse, StudyPlanMetadata

logger = logging.getLogger(__name__)

FALLBACK_NOTE = "Fallback study plan generated due to AI processing issues"

WEEK = timedelta(days=7)


class GenerationServiceError(Exception):
    """Base exception for generation service errors."""

    pass


class CourseNotFoundError(GenerationServiceError):
    """Raised when course is not found."""

    pass


class StudyPlanNotFoundError(GenerationServiceError):
    """Raised when the course has no study plan to build on."""

    pass


class NoWeeksSelectedError(GenerationServiceError):
    """Raised when none of the requested weeks exist in the plan."""

    pass


class NoQuizAttemptsError(GenerationServiceError):
    """Raised when a report is requested for a student with no attempts."""

    pass


class GenerationFailedError(GenerationServiceError):
    """Raised when the LLM call fails or its reply is unusable."""

    pass


def course_weeks(start: datetime, end: datetime, now: datetime | None = None) -> tuple[int, int]:
    """Compute a course's length in weeks and the week it is currently in.

    Args:
        start: Course start.
        end: Course end.
        now: Reference time, defaults to the current UTC time.

    Returns:
        ``(total_weeks, current_week)``. Total is at least 1; current is 0
        before the course starts and never exceeds the total.
    """
    now = now or datetime.now(timezone.utc)
    total_weeks = max(1, math.ceil((end - start) / WEEK))
    if now < start:
        return total_weeks, 0
    return total_weeks, min(math.ceil((now - start) / WEEK), total_weeks)


class GenerationService:
    """Service orchestrating AI content generation for courses.

    Attributes:
        db: Async database session.
        llm: LLM client used for completions.
    """

    def __init__(
        self,
        db: AsyncSession,
        llm_client: LLMClient | None = None,
        generation_settings: GenerationSettings | None = None,
    ) -> None:
        self.db = db
        self.llm = llm_client or LLMClient()
        self._settings = generation_settings or get_settings().generation
        self._courses = CourseService(db)

    async def get_weekly_study_plan(self, course_id: str) -> StudyPlanGenerationResponse:
        """Generate and store a weekly study plan for a course.

        Generation failures never surface: a default plan with one
        placeholder week per course week is stored instead and the
        metadata carries a note.

        Args:
            course_id: Course identifier.

        Returns:
            The stored plan with generation metadata.

        Raises:
            CourseNotFoundError: If course not found.
        """
        course = await self._get_course(course_id)
        context = CourseContext.from_course(course)
        total_weeks, current_week = course_weeks(course.start_date, course.end_date)

        params = {
            "total_weeks": total_weeks,
            "start_date": course.start_date.date().isoformat(),
            "end_date": course.end_date.date().isoformat(),
            "current_week": current_week,
        }

        note = None
        try:
            weeks = await self._generate(StudyPlanCapability(), params, context)
            logger.info(
                "Study plan generated: course=%s, weeks=%d",
                course_id,
                len(weeks),
            )
        except (LLMError, AIResponseError) as e:
            logger.warning(
                "Study plan generation failed, using fallback: course=%s, error=%s",
                course_id,
                e,
            )
            weeks = build_fallback_plan(total_weeks)
            note = FALLBACK_NOTE

        await self._courses.save_study_plan(course, weeks)

        return StudyPlanGenerationResponse(
            study_plan=weeks,
            metadata=StudyPlanMetadata(
                generated_at=datetime.now(timezone.utc),
                total_weeks=total_weeks,
                current_week=current_week,
                note=note,
            ),
        )

    async def get_quiz(self, course_id: str, weeks_to_cover: list[int]) -> dict[str, Any]:
        """Generate a quiz covering selected study-plan weeks.

        Raises:
            CourseNotFoundError: If course not found.
            StudyPlanNotFoundError: If the course has no study plan.
            NoWeeksSelectedError: If no requested week is in the plan.
            GenerationFailedError: If generation fails.
        """
        course = await self._get_course(course_id)
        weeks = self._select_weeks(course, weeks_to_cover)
        return await self._generate_or_fail(
            QuizCapability(),
            {"weeks": weeks},
            CourseContext.from_course(course),
            "Failed to generate quiz. Please try again later.",
        )

    async def get_assignment(self, course_id: str, weeks_to_cover: list[int]) -> dict[str, Any]:
        """Generate an assignment covering selected study-plan weeks.

        Raises:
            CourseNotFoundError: If course not found.
            StudyPlanNotFoundError: If the course has no study plan.
            NoWeeksSelectedError: If no requested week is in the plan.
            GenerationFailedError: If generation fails.
        """
        course = await self._get_course(course_id)
        weeks = self._select_weeks(course, weeks_to_cover)
        return await self._generate_or_fail(
            AssignmentCapability(),
            {"weeks": weeks},
            CourseContext.from_course(course),
            "Failed to generate assignment. Please try again later.",
        )

    async def ask_quiz_question(self, course_id: str, question: str) -> dict[str, Any]:
        """Answer a student's question in the context of a course."""
        course = await self._get_course(course_id)
        return await self._generate_or_fail(
            QuizQuestionCapability(),
            {"question": question},
            CourseContext.from_course(course),
            "Failed to answer quiz question. Please try again later.",
        )

    async def get_personal_report(self, course_id: str, student_id: str) -> dict[str, Any]:
        """Generate a performance report from a student's quiz attempts.

        Raises:
            CourseNotFoundError: If course not found.
            NoQuizAttemptsError: If the student has no attempts in the course.
            GenerationFailedError: If generation fails.
        """
        course = await self._get_course(course_id)

        result = await self.db.execute(
            select(QuizAttempt)
            .join(Quiz, QuizAttempt.quiz_id == Quiz.id)
            .options(selectinload(QuizAttempt.quiz))
            .where(
                Quiz.course_id == course_id,
                QuizAttempt.student_id == student_id,
            )
            .order_by(QuizAttempt.started_at.desc())
        )
        attempts = result.scalars().all()
        if not attempts:
            raise NoQuizAttemptsError("No quiz attempts found")

        return await self._generate_or_fail(
            PersonalReportCapability(),
            {
                "student_id": student_id,
                "attempts": [self._serialize_attempt(attempt) for attempt in attempts],
            },
            CourseContext.from_course(course),
            "Failed to generate personal report. Please try again later.",
        )

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    async def _get_course(self, course_id: str) -> Course:
        result = await self.db.execute(
            select(Course)
            .options(
                selectinload(Course.department),
                selectinload(Course.instructor).selectinload(User.profile),
                selectinload(Course.prerequisites),
            )
            .where(Course.id == course_id)
        )
        course = result.scalar_one_or_none()
        if not course:
            raise CourseNotFoundError("Course not found")
        return course

    def _select_weeks(self, course: Course, weeks_to_cover: list[int]) -> list[dict[str, Any]]:
        if not course.study_plan or not isinstance(course.study_plan, list):
            raise StudyPlanNotFoundError("Study plan not found")

        wanted = set(weeks_to_cover)
        weeks = [
            week
            for week in course.study_plan
            if isinstance(week, dict) and week.get("weekNumber") in wanted
        ]
        if not weeks:
            raise NoWeeksSelectedError("No study plan found for specified weeks")
        return weeks

    async def _generate(
        self,
        capability: GenerationCapability,
        params: dict[str, Any],
        context: CourseContext,
    ) -> Any:
        """Run a capability against the LLM and parse the reply.

        Raises:
            LLMError: If the completion fails.
            AIResponseError: If the reply is unusable.
        """
        system_message, user_message = capability.build_prompt(params, context)
        response_format = {"type": "json_object"} if self._settings.structured_output else None

        response = await self.llm.complete(
            prompt=user_message["content"],
            system_prompt=system_message["content"],
            temperature=self._settings.temperature,
            max_tokens=self._settings.max_output_tokens,
            response_format=response_format,
        )

        logger.debug(
            "Generation completed: capability=%s, course=%s, tokens=%d",
            capability.name,
            context.course_id,
            response.total_tokens,
        )

        return capability.parse_response(response.content)

    async def _generate_or_fail(
        self,
        capability: GenerationCapability,
        params: dict[str, Any],
        context: CourseContext,
        failure_message: str,
    ) -> Any:
        try:
            return await self._generate(capability, params, context)
        except (LLMError, AIResponseError) as e:
            logger.error(
                "Generation failed: capability=%s, course=%s, error=%s",
                capability.name,
                context.course_id,
                e,
            )
            raise GenerationFailedError(failure_message) from e

    def _serialize_attempt(self, attempt: QuizAttempt) -> dict[str, Any]:
        return {
            "quizTitle": attempt.quiz.title,
            "score": attempt.score,
            "maxPoints": attempt.quiz.max_points,
            "answers": attempt.answers or {},
            "startedAt": attempt.started_at.isoformat() if attempt.started_at else None,
            "submittedAt": attempt.submitted_at.isoformat() if attempt.submitted_at else None,
        }
