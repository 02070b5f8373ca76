# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class EnrollStudentRequest(BaseModel):
    """Enroll one student."""

    student_id: UUID


class BulkEnrollRequest(BaseModel):
    """Enroll several students at once."""

    student_ids: list[UUID] = Field(..., min_length=1, max_length=500)


class EnrollmentResponse(BaseModel):
    """Enrollment details."""

    id: str
    course_id: str
    student_id: str
    status: str
    enrolled_at: datetime | None = None
    enrolled_by_id: str | None = None


class BulkEnrollResponse(BaseModel):
    """Outcome of a bulk enrollment.

    Attributes:
        enrolled: Student ids enrolled by this request.
        skipped: Ids already actively enrolled.
        failed: Ids rejected with the reason.
    """

    enrolled: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)
