# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade API endpoints.

- GET /student/{student_id}/gpa - GPA, optionally for one term
- GET /student/{student_id}/transcript - Full transcript
- GET /course/{course_id}/summary - Course grade statistics (staff)
- PUT /{grade_id} - Change a recorded grade (course staff)

Students may only read their own GPA and transcript.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from scholaris.api.dependencies import DB, AuthenticatedUser, StaffUser, ensure_self_or_staff
from scholaris.domains.grade.service import (
    CourseNotFoundError,
    GradeCalculationService,
    GradeNotFoundError,
    GradeServiceError,
    GradingAccessDeniedError,
    GradingService,
    StudentNotFoundError,
)
from scholaris.models.grade import (
    CourseGradeSummary,
    GPAResponse,
    GradeResponse,
    GradeUpdateRequest,
    TranscriptResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/student/{student_id}/gpa",
    response_model=GPAResponse,
    summary="Get student GPA",
)
async def get_student_gpa(
    student_id: UUID,
    current_user: AuthenticatedUser,
    db: DB,
    semester: str | None = Query(default=None, description="Only count this semester"),
    year: int | None = Query(default=None, description="Only count this year"),
) -> GPAResponse:
    """Calculate a student's GPA."""
    ensure_self_or_staff(current_user, str(student_id))
    return await GradeCalculationService(db).get_gpa(
        str(student_id), semester=semester, year=year
    )


@router.get(
    "/student/{student_id}/transcript",
    response_model=TranscriptResponse,
    summary="Get student transcript",
)
async def get_student_transcript(
    student_id: UUID,
    current_user: AuthenticatedUser,
    db: DB,
) -> TranscriptResponse:
    """Build a student's transcript."""
    ensure_self_or_staff(current_user, str(student_id))

    try:
        return await GradeCalculationService(db).get_student_transcript(str(student_id))
    except StudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/course/{course_id}/summary",
    response_model=CourseGradeSummary,
    summary="Get course grade summary",
)
async def get_course_summary(
    course_id: UUID,
    current_user: StaffUser,
    db: DB,
) -> CourseGradeSummary:
    """Average percentage and letter distribution for a course."""
    try:
        return await GradeCalculationService(db).calculate_course_grades(str(course_id))
    except CourseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/{grade_id}",
    response_model=GradeResponse,
    summary="Update grade",
    description="Change a grade. Allowed for supervisor teachers, the grader "
    "and the course instructor.",
)
async def update_grade(
    grade_id: UUID,
    data: GradeUpdateRequest,
    current_user: StaffUser,
    db: DB,
) -> GradeResponse:
    """Change a recorded grade and refresh the student's GPA."""
    try:
        return await GradingService(db).update_grade(
            grade_id=str(grade_id),
            request=data,
            grader_id=current_user.id,
            grader_role=current_user.role,
        )
    except GradeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except GradingAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except GradeServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
