# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment and submission models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class AssignmentCreateRequest(BaseModel):
    """Create an assignment in a course."""

    course_id: UUID
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    due_date: datetime
    max_points: int = Field(default=100, ge=0)


class AssignmentResponse(BaseModel):
    """A stored assignment."""

    id: str
    course_id: str
    title: str
    description: str | None = None
    due_date: datetime
    max_points: int
    status: str
    created_by_id: str | None = None


class SubmitAssignmentRequest(BaseModel):
    """Submission payload."""

    text_content: str = Field(..., min_length=1)


class SubmissionResponse(BaseModel):
    """Stored submission."""

    id: str
    assignment_id: str
    student_id: str
    text_content: str | None = None
    submitted_at: datetime | None = None
