# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the AI generation service.

Tests cover:
- Course week arithmetic
- Study plan generation and fallback
- Quiz and assignment week selection
- Personal reports
- Error wrapping
"""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from scholaris.core.config import GenerationSettings
from scholaris.core.intelligence.llm import LLMError, LLMResponse
from scholaris.domains.generation.service import (
    FALLBACK_NOTE,
    CourseNotFoundError,
    GenerationFailedError,
    GenerationService,
    NoQuizAttemptsError,
    NoWeeksSelectedError,
    StudyPlanNotFoundError,
    course_weeks,
)


@pytest.fixture
def mock_llm() -> AsyncMock:
    """Create a mock LLM client."""
    llm = AsyncMock()
    llm.complete = AsyncMock()
    return llm


@pytest.fixture
def generation_service(mock_db: AsyncMock, mock_llm: AsyncMock) -> GenerationService:
    """Create generation service with mock database and LLM."""
    return GenerationService(
        db=mock_db,
        llm_client=mock_llm,
        generation_settings=GenerationSettings(),
    )


def _reply(content: str) -> LLMResponse:
    return LLMResponse(content=content, model="gemini/gemini-1.5-flash", tokens_input=10)


def _scalar(value: object) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _scalars(values: list) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.all.return_value = values
    return result


# =============================================================================
# course_weeks
# =============================================================================


class TestCourseWeeks:
    """Tests for course week arithmetic."""

    START = datetime(2025, 9, 1, tzinfo=timezone.utc)

    def test_total_rounds_up(self) -> None:
        """Test a partial week counts as a full week."""
        total, _ = course_weeks(self.START, self.START + timedelta(days=92), self.START)

        assert total == 14

    def test_minimum_one_week(self) -> None:
        """Test a same-day course still has one week."""
        total, _ = course_weeks(self.START, self.START, self.START)

        assert total == 1

    def test_before_start(self) -> None:
        """Test current week is 0 before the course starts."""
        _, current = course_weeks(
            self.START,
            self.START + timedelta(weeks=10),
            self.START - timedelta(days=3),
        )

        assert current == 0

    def test_during_course(self) -> None:
        """Test current week counts started weeks."""
        _, current = course_weeks(
            self.START,
            self.START + timedelta(weeks=10),
            self.START + timedelta(days=15),
        )

        assert current == 3

    def test_after_end(self) -> None:
        """Test current week never exceeds the total."""
        total, current = course_weeks(
            self.START,
            self.START + timedelta(weeks=10),
            self.START + timedelta(weeks=30),
        )

        assert current == total == 10


# =============================================================================
# Study plan
# =============================================================================


class TestWeeklyStudyPlan:
    """Tests for study plan generation."""

    @pytest.mark.asyncio
    async def test_generated_plan_is_saved(
        self, generation_service, mock_db, mock_llm, sample_course
    ) -> None:
        """Test a valid reply is normalized and stored on the course."""
        mock_db.execute.return_value = _scalar(sample_course)
        mock_llm.complete.return_value = _reply(
            '```json\n[{"weekNumber": 1, "title": "Variables"}, {"title": "Loops"}]\n```'
        )

        response = await generation_service.get_weekly_study_plan(sample_course.id)

        assert [week["title"] for week in response.study_plan] == ["Variables", "Loops"]
        assert response.study_plan[1]["weekNumber"] == 2
        assert response.metadata.note is None
        assert response.metadata.total_weeks == 10
        assert response.metadata.current_week == 2
        assert sample_course.study_plan == response.study_plan
        mock_db.commit.assert_called_once()

        kwargs = mock_llm.complete.call_args.kwargs
        assert "Intro to Programming" in kwargs["prompt"]
        assert "Computer Science" in kwargs["system_prompt"]
        assert kwargs["temperature"] == 0.7
        assert kwargs["response_format"] is None

    @pytest.mark.asyncio
    async def test_llm_failure_uses_fallback(
        self, generation_service, mock_db, mock_llm, sample_course
    ) -> None:
        """Test an LLM error produces the fallback plan with a note."""
        mock_db.execute.return_value = _scalar(sample_course)
        mock_llm.complete.side_effect = LLMError("provider down")

        response = await generation_service.get_weekly_study_plan(sample_course.id)

        assert len(response.study_plan) == 10
        assert response.study_plan[0]["title"] == "Week 1: Course Content"
        assert response.metadata.note == FALLBACK_NOTE
        assert sample_course.study_plan == response.study_plan
        mock_db.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_refusal_uses_fallback(
        self, generation_service, mock_db, mock_llm, sample_course
    ) -> None:
        """Test a refusal reply produces the fallback plan."""
        mock_db.execute.return_value = _scalar(sample_course)
        mock_llm.complete.return_value = _reply("I apologize, I cannot generate that.")

        response = await generation_service.get_weekly_study_plan(sample_course.id)

        assert response.metadata.note == FALLBACK_NOTE

    @pytest.mark.asyncio
    async def test_structured_output_requests_json_mode(
        self, mock_db, mock_llm, sample_course
    ) -> None:
        """Test JSON mode is requested when structured output is enabled."""
        service = GenerationService(
            db=mock_db,
            llm_client=mock_llm,
            generation_settings=GenerationSettings(structured_output=True),
        )
        mock_db.execute.return_value = _scalar(sample_course)
        mock_llm.complete.return_value = _reply('{"weeks": [{"title": "Intro"}]}')

        await service.get_weekly_study_plan(sample_course.id)

        assert mock_llm.complete.call_args.kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_course_not_found(self, generation_service, mock_db, mock_llm) -> None:
        """Test a missing course is reported, not replaced by a fallback."""
        mock_db.execute.return_value = _scalar(None)

        with pytest.raises(CourseNotFoundError):
            await generation_service.get_weekly_study_plan("missing")

        mock_llm.complete.assert_not_called()


# =============================================================================
# Quiz and assignment
# =============================================================================


class TestQuizAndAssignment:
    """Tests for quiz and assignment generation."""

    @pytest.fixture
    def planned_course(self, sample_course: MagicMock, mock_db: AsyncMock) -> MagicMock:
        sample_course.study_plan = [
            {"weekNumber": 1, "title": "Variables"},
            {"weekNumber": 2, "title": "Loops"},
            {"weekNumber": 3, "title": "Functions"},
        ]
        mock_db.execute.return_value = _scalar(sample_course)
        return sample_course

    @pytest.mark.asyncio
    async def test_quiz_covers_selected_weeks(
        self, generation_service, mock_llm, planned_course
    ) -> None:
        """Test only the requested weeks are sent to the model."""
        quiz = {"quizTitle": "Loops and Functions", "questions": [{"id": "1"}]}
        mock_llm.complete.return_value = _reply(json.dumps(quiz))

        result = await generation_service.get_quiz(planned_course.id, [2, 3, 9])

        assert result == quiz
        prompt = mock_llm.complete.call_args.kwargs["prompt"]
        assert "Loops" in prompt
        assert "Functions" in prompt
        assert "Variables" not in prompt

    @pytest.mark.asyncio
    async def test_no_study_plan(self, generation_service, mock_db, sample_course) -> None:
        """Test a course without a plan cannot generate a quiz."""
        mock_db.execute.return_value = _scalar(sample_course)

        with pytest.raises(StudyPlanNotFoundError):
            await generation_service.get_quiz(sample_course.id, [1])

    @pytest.mark.asyncio
    async def test_no_matching_weeks(self, generation_service, planned_course) -> None:
        """Test requested weeks missing from the plan are rejected."""
        with pytest.raises(NoWeeksSelectedError):
            await generation_service.get_assignment(planned_course.id, [7, 8])

    @pytest.mark.asyncio
    async def test_invalid_quiz_reply(self, generation_service, mock_llm, planned_course) -> None:
        """Test an unusable reply raises GenerationFailedError."""
        mock_llm.complete.return_value = _reply('{"title": "no questions"}')

        with pytest.raises(GenerationFailedError, match="Failed to generate quiz"):
            await generation_service.get_quiz(planned_course.id, [1])

    @pytest.mark.asyncio
    async def test_assignment_llm_error(
        self, generation_service, mock_llm, planned_course
    ) -> None:
        """Test LLM failures are wrapped in GenerationFailedError."""
        mock_llm.complete.side_effect = LLMError("timeout")

        with pytest.raises(GenerationFailedError, match="Failed to generate assignment"):
            await generation_service.get_assignment(planned_course.id, [1])

    @pytest.mark.asyncio
    async def test_assignment_success(self, generation_service, mock_llm, planned_course) -> None:
        """Test a valid assignment reply is returned."""
        mock_llm.complete.return_value = _reply(
            'Here it is: {"assignmentTitle": "Loop drills", "description": "Write loops"}'
        )

        result = await generation_service.get_assignment(planned_course.id, [2])

        assert result["assignmentTitle"] == "Loop drills"


# =============================================================================
# Questions and reports
# =============================================================================


class TestQuestionsAndReports:
    """Tests for question answering and personal reports."""

    @pytest.mark.asyncio
    async def test_ask_quiz_question(
        self, generation_service, mock_db, mock_llm, sample_course
    ) -> None:
        """Test the student's question is answered."""
        mock_db.execute.return_value = _scalar(sample_course)
        mock_llm.complete.return_value = _reply('{"answer": "A loop repeats code."}')

        result = await generation_service.ask_quiz_question(sample_course.id, "What is a loop?")

        assert result["answer"] == "A loop repeats code."
        assert "What is a loop?" in mock_llm.complete.call_args.kwargs["prompt"]

    @pytest.mark.asyncio
    async def test_personal_report(
        self, generation_service, mock_db, mock_llm, sample_course, sample_student_id
    ) -> None:
        """Test attempts are summarized into a report."""
        attempt = MagicMock()
        attempt.quiz.title = "Loops Quiz"
        attempt.quiz.max_points = 10
        attempt.score = 7
        attempt.answers = {"q1": "2"}
        attempt.started_at = datetime(2025, 10, 1, tzinfo=timezone.utc)
        attempt.submitted_at = None

        mock_db.execute.side_effect = [_scalar(sample_course), _scalars([attempt])]
        mock_llm.complete.return_value = _reply(
            json.dumps(
                {
                    "performanceSummary": "Good grasp of loops",
                    "recommendations": [{"title": "Practice nested loops"}],
                }
            )
        )

        report = await generation_service.get_personal_report(
            sample_course.id, sample_student_id
        )

        assert report["performanceSummary"] == "Good grasp of loops"
        prompt = mock_llm.complete.call_args.kwargs["prompt"]
        assert "Loops Quiz" in prompt
        assert sample_student_id in prompt

    @pytest.mark.asyncio
    async def test_personal_report_without_attempts(
        self, generation_service, mock_db, mock_llm, sample_course
    ) -> None:
        """Test a report needs at least one attempt."""
        mock_db.execute.side_effect = [_scalar(sample_course), _scalars([])]

        with pytest.raises(NoQuizAttemptsError, match="No quiz attempts found"):
            await generation_service.get_personal_report(sample_course.id, str(uuid4()))

        mock_llm.complete.assert_not_called()
