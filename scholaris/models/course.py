# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course and study plan models."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from scholaris.models.common import CourseLevel


class CourseCreateRequest(BaseModel):
    """Request to create a course.

    The department may be given by id or by name; the id wins when both
    are present.
    """

    code: str = Field(..., min_length=2, max_length=20, description="Unique course code")
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    level: CourseLevel = CourseLevel.UNDERGRADUATE
    credits: int = Field(default=3, ge=0, le=12)
    semester: str = Field(..., min_length=1, max_length=20, examples=["Fall"])
    year: int = Field(..., ge=2000, le=2100)
    capacity: int | None = Field(default=None, ge=1)
    department_id: str | None = None
    department_name: str | None = None
    instructor_id: UUID
    start_date: datetime
    end_date: datetime
    enrollment_deadline: datetime | None = None
    prerequisite_ids: list[UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_dates_and_department(self) -> "CourseCreateRequest":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        if not self.department_id and not self.department_name:
            raise ValueError("department_id or department_name is required")
        return self


class CourseResponse(BaseModel):
    """Course details."""

    id: str
    code: str
    name: str
    description: str | None = None
    level: str
    credits: int
    semester: str
    year: int
    capacity: int | None = None
    department_id: str
    department_name: str | None = None
    instructor_id: str | None = None
    instructor_name: str | None = None
    created_by_id: str | None = None
    start_date: datetime
    end_date: datetime
    enrollment_deadline: datetime | None = None
    has_study_plan: bool = False


class StudyPlanWeek(BaseModel):
    """A manually authored study plan week.

    Extra keys are preserved so AI-generated weeks round-trip unchanged.
    """

    model_config = {"extra": "allow"}

    weekNumber: int = Field(..., ge=1)
    title: str = Field(..., min_length=1)
    objectives: list[Any] = Field(default_factory=list)
    topics: list[Any] = Field(default_factory=list)
    readings: list[Any] = Field(default_factory=list)
    activities: list[Any] = Field(default_factory=list)
    assessments: list[Any] = Field(default_factory=list)
    outcomes: list[Any] = Field(default_factory=list)


class StudyPlanUpdateRequest(BaseModel):
    """Replace a course's study plan."""

    weeks: list[StudyPlanWeek] = Field(..., min_length=1)


class StudyPlanResponse(BaseModel):
    """A course's stored study plan."""

    course_id: str
    course_code: str
    course_name: str
    study_plan: list[dict[str, Any]] = Field(default_factory=list)
