# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for generation capabilities.

Tests cover:
- Course context building
- Prompt generation
- Response parsing and validation
"""

import json
from datetime import date
from unittest.mock import MagicMock

import pytest

from scholaris.core.generation import (
    AIRefusalError,
    AIResponseParseError,
    AssignmentCapability,
    CourseContext,
    PersonalReportCapability,
    QuizCapability,
    QuizQuestionCapability,
    StudyPlanCapability,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def context() -> CourseContext:
    """Create a populated course context."""
    return CourseContext(
        course_id="course-1",
        name="Data Structures",
        code="CS201",
        description="Lists, trees and graphs",
        level="undergraduate",
        department="Computer Science",
        credits=4,
        instructor="Grace Hopper",
        prerequisites="Intro to Programming",
    )


@pytest.fixture
def weeks() -> list[dict]:
    """Provide two study plan weeks."""
    return [
        {"weekNumber": 1, "title": "Week 1: Arrays"},
        {"weekNumber": 2, "title": "Week 2: Linked Lists"},
    ]


# =============================================================================
# CourseContext
# =============================================================================


class TestCourseContext:
    """Tests for CourseContext."""

    def test_from_course(self, sample_course: MagicMock) -> None:
        """Test context is built from a loaded course row."""
        prerequisite = MagicMock()
        prerequisite.name = "Discrete Math"
        sample_course.prerequisites = [prerequisite]

        context = CourseContext.from_course(sample_course)

        assert context.course_id == sample_course.id
        assert context.name == "Intro to Programming"
        assert context.department == "Computer Science"
        assert context.instructor == "Ada Lovelace"
        assert context.prerequisites == "Discrete Math"

    def test_from_course_fallbacks(self, sample_course: MagicMock) -> None:
        """Test missing relations fall back to display defaults."""
        sample_course.instructor = None
        sample_course.department = None
        sample_course.code = None
        sample_course.description = None

        context = CourseContext.from_course(sample_course)

        assert context.instructor == "TBA"
        assert context.department == "General"
        assert context.code == "N/A"
        assert context.prerequisites == "None"
        assert context.description == ""

    def test_instructor_without_profile(self, sample_course: MagicMock) -> None:
        """Test an instructor with no profile shows as TBA."""
        sample_course.instructor.profile = None

        context = CourseContext.from_course(sample_course)

        assert context.instructor == "TBA"

    def test_prompt_section(self, context: CourseContext) -> None:
        """Test the shared prompt section lists the course facts."""
        section = context.to_prompt_section()

        assert "Course Name: Data Structures" in section
        assert "Course Code: CS201" in section
        assert "Instructor: Grace Hopper" in section


# =============================================================================
# StudyPlanCapability
# =============================================================================


class TestStudyPlanCapability:
    """Tests for StudyPlanCapability."""

    @pytest.fixture
    def capability(self) -> StudyPlanCapability:
        return StudyPlanCapability()

    def test_name(self, capability: StudyPlanCapability) -> None:
        """Test capability name."""
        assert capability.name == "study_plan"
        assert "StudyPlanCapability" in repr(capability)

    def test_build_prompt(self, capability: StudyPlanCapability, context: CourseContext) -> None:
        """Test prompt carries course facts and the week count."""
        messages = capability.build_prompt(
            {
                "total_weeks": 14,
                "start_date": date(2025, 9, 1),
                "end_date": date(2025, 12, 5),
                "current_week": 3,
            },
            context,
        )

        assert [message["role"] for message in messages] == ["system", "user"]
        assert "Computer Science" in messages[0]["content"]
        user = messages[1]["content"]
        assert "Duration: 14 weeks (from 2025-09-01 to 2025-12-05)" in user
        assert "Current Week: 3" in user
        assert "Prerequisites: Intro to Programming" in user
        assert "Credits: 4" in user
        assert "JSON array" in user

    def test_parse_response_normalizes(self, capability: StudyPlanCapability) -> None:
        """Test the reply is parsed and every week is back-filled."""
        reply = 'Here you go:\n```json\n[{"weekNumber": 1, "title": "Arrays"}, {}]\n```'

        plan = capability.parse_response(reply)

        assert len(plan) == 2
        assert plan[0]["title"] == "Arrays"
        assert plan[1]["weekNumber"] == 2
        assert plan[1]["outcomes"] == []

    def test_parse_response_refusal(self, capability: StudyPlanCapability) -> None:
        """Test refusal text raises AIRefusalError."""
        with pytest.raises(AIRefusalError):
            capability.parse_response("Sorry, I am unable to help with that.")


# =============================================================================
# QuizCapability
# =============================================================================


class TestQuizCapability:
    """Tests for QuizCapability."""

    @pytest.fixture
    def capability(self) -> QuizCapability:
        return QuizCapability()

    def test_build_prompt_embeds_weeks(
        self,
        capability: QuizCapability,
        context: CourseContext,
        weeks: list[dict],
    ) -> None:
        """Test the selected weeks appear in the prompt."""
        messages = capability.build_prompt({"weeks": weeks}, context)

        user = messages[1]["content"]
        assert "Week 2: Linked Lists" in user
        assert "quizTitle" in user
        assert "correctAnswer" in user

    def test_parse_valid_quiz(self, capability: QuizCapability) -> None:
        """Test a complete quiz is returned unchanged."""
        quiz = {
            "quizTitle": "Arrays Quiz",
            "questions": [{"id": "1", "question": "What is an array?"}],
        }

        assert capability.parse_response(json.dumps(quiz)) == quiz

    def test_parse_missing_title(self, capability: QuizCapability) -> None:
        """Test a quiz without a title is rejected."""
        with pytest.raises(AIResponseParseError, match="Invalid quiz structure generated"):
            capability.parse_response('{"questions": []}')

    def test_parse_missing_questions(self, capability: QuizCapability) -> None:
        """Test a quiz without a question list is rejected."""
        with pytest.raises(AIResponseParseError, match="Invalid quiz structure generated"):
            capability.parse_response('{"quizTitle": "Arrays", "questions": "none"}')

    def test_parse_array_reply(self, capability: QuizCapability) -> None:
        """Test an array reply is not a valid quiz."""
        with pytest.raises(AIResponseParseError):
            capability.parse_response('[{"quizTitle": "Arrays"}]')


# =============================================================================
# Other capabilities
# =============================================================================


class TestAssignmentCapability:
    """Tests for AssignmentCapability."""

    def test_parse_requires_title_and_description(self) -> None:
        """Test both required keys must be present."""
        capability = AssignmentCapability()

        with pytest.raises(AIResponseParseError, match="Invalid assignment structure generated"):
            capability.parse_response('{"assignmentTitle": "Build a list"}')

    def test_parse_valid(self) -> None:
        """Test a valid assignment is returned."""
        capability = AssignmentCapability()

        result = capability.parse_response(
            '{"assignmentTitle": "Build a list", "description": "Implement a linked list"}'
        )

        assert result["assignmentTitle"] == "Build a list"

    def test_prompt_mentions_level(self, context: CourseContext, weeks: list[dict]) -> None:
        """Test the prompt is pitched at the course level."""
        messages = AssignmentCapability().build_prompt({"weeks": weeks}, context)

        assert "undergraduate level students" in messages[1]["content"]


class TestQuizQuestionCapability:
    """Tests for QuizQuestionCapability."""

    def test_prompt_contains_question(self, context: CourseContext) -> None:
        """Test the student's question is embedded."""
        messages = QuizQuestionCapability().build_prompt(
            {"question": "Why is binary search O(log n)?"},
            context,
        )

        assert "Why is binary search O(log n)?" in messages[1]["content"]

    def test_parse_requires_answer(self) -> None:
        """Test a reply without an answer is rejected."""
        with pytest.raises(AIResponseParseError):
            QuizQuestionCapability().parse_response('{"explanation": "..."}')


class TestPersonalReportCapability:
    """Tests for PersonalReportCapability."""

    def test_prompt_contains_ids_and_attempts(self, context: CourseContext) -> None:
        """Test the schema is filled with the student and course ids."""
        messages = PersonalReportCapability().build_prompt(
            {
                "student_id": "student-9",
                "attempts": [{"quizTitle": "Arrays Quiz", "score": 80}],
            },
            context,
        )

        user = messages[1]["content"]
        assert '"studentId": "student-9"' in user
        assert '"courseId": "course-1"' in user
        assert "Arrays Quiz" in user

    def test_parse_valid(self) -> None:
        """Test a report with summary and recommendations is accepted."""
        reply = json.dumps(
            {
                "performanceSummary": "Steady progress",
                "recommendations": [{"title": "Practice recursion"}],
            }
        )

        report = PersonalReportCapability().parse_response(reply)

        assert report["performanceSummary"] == "Steady progress"

    def test_parse_empty_recommendations(self) -> None:
        """Test an empty recommendation list is rejected."""
        with pytest.raises(AIResponseParseError):
            PersonalReportCapability().parse_response(
                '{"performanceSummary": "ok", "recommendations": []}'
            )
