# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""GPA, course summary and transcript models."""

from pydantic import BaseModel, Field


class GPAResponse(BaseModel):
    """A student's GPA, optionally for one term."""

    student_id: str
    gpa: float
    semester: str | None = None
    year: int | None = None


class CourseGradeSummary(BaseModel):
    """Grade statistics for a course."""

    course_id: str
    average: float
    distribution: dict[str, int] = Field(default_factory=dict)
    total: int


class TranscriptCourse(BaseModel):
    """One course row on a transcript."""

    course_code: str
    course_name: str
    credits: int
    semester: str
    year: int
    final_grade: str | None = None
    final_points: float | None = None
    average_percentage: float
    status: str


class TranscriptStudent(BaseModel):
    """Student header on a transcript."""

    id: str
    name: str
    student_number: str | None = None
    major: str | None = None
    minor: str | None = None


class TranscriptResponse(BaseModel):
    """A student's transcript."""

    student: TranscriptStudent
    courses: list[TranscriptCourse] = Field(default_factory=list)
    overall_gpa: float
    total_credits: int


class GradeSubmissionRequest(BaseModel):
    """A teacher's grade for an assignment submission.

    ``max_points`` defaults to the assignment's and ``letter_grade`` to
    the letter for the resulting percentage.
    """

    score: float = Field(..., ge=0)
    max_points: float | None = Field(default=None, gt=0)
    letter_grade: str | None = Field(default=None, max_length=3)
    feedback: str | None = None
    is_extra_credit: bool = False
    weight: float = Field(default=1.0, gt=0)


class GradeUpdateRequest(BaseModel):
    """Changes to an existing grade; omitted fields are kept."""

    score: float | None = Field(default=None, ge=0)
    max_points: float | None = Field(default=None, gt=0)
    letter_grade: str | None = Field(default=None, max_length=3)
    feedback: str | None = None
    is_extra_credit: bool | None = None
    weight: float | None = Field(default=None, gt=0)


class GradeResponse(BaseModel):
    """A stored grade."""

    id: str
    student_id: str
    course_id: str
    assignment_id: str | None = None
    submission_id: str | None = None
    quiz_attempt_id: str | None = None
    letter_grade: str
    score: float
    max_points: float
    percentage: float
    weight: float
    is_extra_credit: bool
    feedback: str | None = None
    graded_by_id: str | None = None
