# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""AI generation request and response models.

Generated payloads (quizzes, assignments, answers, reports) keep the
camelCase keys the model produced and are returned as plain dicts.
"""

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, Field

WeekNumber = Annotated[int, Field(ge=1)]


class WeeksToCoverRequest(BaseModel):
    """Weeks of the study plan a quiz or assignment should cover."""

    weeks_to_cover: list[WeekNumber] = Field(
        ...,
        alias="weeksToCover",
        min_length=1,
        description="1-based week numbers",
        examples=[[1, 2, 3]],
    )

    model_config = {"populate_by_name": True}


class AskQuestionRequest(BaseModel):
    """A student's question about the course or a quiz."""

    question: str = Field(..., min_length=1, max_length=2000)


class PersonalReportRequest(BaseModel):
    """Request a performance report for a student."""

    student_id: UUID = Field(..., alias="studentId")

    model_config = {"populate_by_name": True}


class StudyPlanMetadata(BaseModel):
    """Facts about a generated study plan."""

    generated_at: datetime
    total_weeks: int
    current_week: int
    note: str | None = None


class StudyPlanGenerationResponse(BaseModel):
    """A generated (or fallback) study plan."""

    study_plan: list[dict[str, Any]]
    metadata: StudyPlanMetadata
