# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz and quiz attempt models."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class QuizQuestionView(BaseModel):
    """A question as shown to a student taking the quiz.

    Never carries the answer key or explanation.
    """

    id: str
    question: str
    type: str | None = None
    options: list[Any] | None = None
    points: float | None = None


class QuizAttemptResponse(BaseModel):
    """An attempt with the questions to answer."""

    id: str
    quiz_id: str
    student_id: str
    started_at: datetime | None = None
    submitted_at: datetime | None = None
    score: int | None = None
    answers: dict[str, Any] | None = None
    questions: list[QuizQuestionView] = Field(default_factory=list)


class SubmitQuizAttemptRequest(BaseModel):
    """Answers keyed by question id."""

    answers: dict[str, Any] = Field(default_factory=dict)


class QuestionResult(BaseModel):
    """How one question of a submitted attempt was graded.

    ``is_correct`` is None for questions without an answer key until a
    teacher awards points.
    """

    question_id: str = Field(..., alias="questionId")
    student_answer: Any = Field(default=None, alias="studentAnswer")
    correct_answer: Any = Field(default=None, alias="correctAnswer")
    is_correct: bool | None = Field(default=None, alias="isCorrect")
    points_earned: float = Field(default=0.0, alias="pointsEarned")
    max_points: float = Field(default=0.0, alias="maxPoints")
    explanation: str | None = None
    manually_graded: bool = Field(default=False, alias="manuallyGraded")

    model_config = {"populate_by_name": True}


class QuizAttemptResult(BaseModel):
    """Outcome of a submitted attempt."""

    id: str
    quiz_id: str
    student_id: str
    score: int
    max_points: int
    percentage: float
    letter_grade: str
    submitted_at: datetime
    results: list[QuestionResult] = Field(default_factory=list)


class GradeQuestionRequest(BaseModel):
    """Points a teacher awards for one question of a submitted attempt."""

    points: float = Field(..., ge=0)


class QuizQuestionInput(BaseModel):
    """A question as written by a teacher, answer key included."""

    id: str | None = None
    question: str = Field(..., min_length=1)
    type: str = "multiple_choice"
    options: list[Any] | None = None
    correct_answer: Any = Field(default=None, alias="correctAnswer")
    explanation: str | None = None
    points: float = Field(default=1, ge=0)

    model_config = {"populate_by_name": True}


class QuizCreateRequest(BaseModel):
    """Create a quiz in a course."""

    course_id: UUID
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    duration: str | None = Field(default=None, max_length=50, examples=["45 minutes"])
    is_timed: bool = False
    attempts_allowed: int = Field(default=1, ge=1)
    due_date: datetime | None = None
    questions: list[QuizQuestionInput] = Field(..., min_length=1)


class QuizResponse(BaseModel):
    """A stored quiz, without its answer keys."""

    id: str
    course_id: str
    title: str
    description: str | None = None
    duration: str | None = None
    is_timed: bool
    attempts_allowed: int
    due_date: datetime | None = None
    total_questions: int
    max_points: int
    created_by_id: str | None = None
    questions: list[QuizQuestionView] = Field(default_factory=list)
