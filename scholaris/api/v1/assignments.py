# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment API endpoints.

- POST / - Create an assignment (course staff)
- POST /{assignment_id}/submission - Submit an assignment (students)
- PUT /{assignment_id}/submission - Update a submission before the deadline
- GET /{assignment_id}/submissions/{student_id} - Read a student's submission
- POST /submissions/{submission_id}/grade - Grade a submission (course staff)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from scholaris.api.dependencies import (
    DB,
    AuthenticatedUser,
    StaffUser,
    StudentUser,
    ensure_self_or_staff,
)
from scholaris.domains.coursework.service import (
    CourseNotFoundError,
    CourseworkAccessDeniedError,
    CourseworkService,
)
from scholaris.domains.enrollment.service import NotEnrolledError
from scholaris.domains.grade.service import (
    AlreadyGradedError,
    GradeServiceError,
    GradingAccessDeniedError,
    GradingService,
    SubmissionNotFoundError as GradingSubmissionNotFoundError,
)
from scholaris.domains.submission.service import (
    AlreadySubmittedError,
    AssignmentNotFoundError,
    SubmissionNotFoundError,
    SubmissionService,
    SubmissionServiceError,
)
from scholaris.models.grade import GradeResponse, GradeSubmissionRequest
from scholaris.models.submission import (
    AssignmentCreateRequest,
    AssignmentResponse,
    SubmissionResponse,
    SubmitAssignmentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create assignment",
)
async def create_assignment(
    data: AssignmentCreateRequest,
    current_user: StaffUser,
    db: DB,
) -> AssignmentResponse:
    """Create an assignment in a course the user manages."""
    try:
        return await CourseworkService(db).create_assignment(
            request=data,
            creator_id=current_user.id,
            creator_role=current_user.role,
        )
    except CourseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CourseworkAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.post(
    "/{assignment_id}/submission",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit assignment",
)
async def submit_assignment(
    assignment_id: UUID,
    data: SubmitAssignmentRequest,
    current_user: StudentUser,
    db: DB,
) -> SubmissionResponse:
    """Submit an assignment before its deadline.

    Raises:
        HTTPException: If the assignment is missing, the student is not
            enrolled, the deadline passed or it was already submitted.
    """
    try:
        return await SubmissionService(db).submit_assignment(
            assignment_id=str(assignment_id),
            student_id=current_user.id,
            request=data,
        )
    except AssignmentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AlreadySubmittedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except (NotEnrolledError, SubmissionServiceError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put(
    "/{assignment_id}/submission",
    response_model=SubmissionResponse,
    summary="Update submission",
)
async def update_submission(
    assignment_id: UUID,
    data: SubmitAssignmentRequest,
    current_user: StudentUser,
    db: DB,
) -> SubmissionResponse:
    """Replace the content of an existing submission."""
    try:
        return await SubmissionService(db).update_submission(
            assignment_id=str(assignment_id),
            student_id=current_user.id,
            request=data,
        )
    except (AssignmentNotFoundError, SubmissionNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SubmissionServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get(
    "/{assignment_id}/submissions/{student_id}",
    response_model=SubmissionResponse,
    summary="Get submission",
)
async def get_submission(
    assignment_id: UUID,
    student_id: UUID,
    current_user: AuthenticatedUser,
    db: DB,
) -> SubmissionResponse:
    """Read a student's submission. Students may only read their own."""
    ensure_self_or_staff(current_user, str(student_id))

    try:
        return await SubmissionService(db).get_submission(str(assignment_id), str(student_id))
    except SubmissionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/submissions/{submission_id}/grade",
    response_model=GradeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Grade submission",
    description="Grade a submission. Only the course instructor or a supervisor teacher.",
)
async def grade_submission(
    submission_id: UUID,
    data: GradeSubmissionRequest,
    current_user: StaffUser,
    db: DB,
) -> GradeResponse:
    """Grade a submission and notify the student.

    Raises:
        HTTPException: If the submission is missing, already graded, the
            user cannot grade it or the grade is invalid.
    """
    try:
        return await GradingService(db).grade_submission(
            submission_id=str(submission_id),
            request=data,
            grader_id=current_user.id,
            grader_role=current_user.role,
        )
    except GradingSubmissionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except GradingAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except AlreadyGradedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except GradeServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
