# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course API endpoints.

This module provides endpoints for course management:
- POST / - Create a course (supervisor teachers)
- GET /{course_id} - Get course details

Study plan endpoints:
- GET /{course_id}/study-plan - Get the stored study plan
- PUT /{course_id}/study-plan - Replace the study plan
- DELETE /{course_id}/study-plan - Remove the study plan

Student enrollment endpoints:
- POST /{course_id}/enrollments - Enroll a student
- POST /{course_id}/enrollments/bulk - Bulk enroll students

Enrollment requires supervisor teacher or admin access. Study plans may be
changed only by the course's instructor or creator.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from scholaris.api.dependencies import (
    DB,
    AuthenticatedUser,
    EnrollerUser,
    StaffUser,
    SupervisorUser,
)
from scholaris.domains.course.service import (
    CourseAccessDeniedError,
    CourseCodeExistsError,
    CourseNotFoundError,
    CourseService,
    CourseServiceError,
    DepartmentNotFoundError,
    InstructorNotFoundError,
    NotSupervisorError,
)
from scholaris.domains.enrollment.service import (
    AlreadyEnrolledError,
    CourseNotFoundError as EnrollmentCourseNotFoundError,
    EnrollmentService,
    EnrollmentServiceError,
    StudentNotFoundError,
)
from scholaris.models.course import (
    CourseCreateRequest,
    CourseResponse,
    StudyPlanResponse,
    StudyPlanUpdateRequest,
)
from scholaris.models.enrollment import (
    BulkEnrollRequest,
    BulkEnrollResponse,
    EnrollmentResponse,
    EnrollStudentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
    description="Create a new course. Requires supervisor teacher access.",
)
async def create_course(
    data: CourseCreateRequest,
    current_user: SupervisorUser,
    db: DB,
) -> CourseResponse:
    """Create a new course.

    Raises:
        HTTPException: If instructor/department not found, the instructor
            cannot teach, or the code exists.
    """
    logger.info("Creating course: %s by %s", data.code, current_user.id)

    service = CourseService(db)

    try:
        return await service.create_course(
            request=data,
            creator_id=current_user.id,
            creator_role=current_user.role,
        )
    except NotSupervisorError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except (InstructorNotFoundError, DepartmentNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CourseCodeExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except CourseServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get(
    "/{course_id}",
    response_model=CourseResponse,
    summary="Get course",
)
async def get_course(
    course_id: UUID,
    current_user: AuthenticatedUser,
    db: DB,
) -> CourseResponse:
    """Get course details."""
    try:
        return await CourseService(db).get_course(str(course_id))
    except CourseNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")


# ============================================================================
# Study Plan Endpoints
# ============================================================================


@router.get(
    "/{course_id}/study-plan",
    response_model=StudyPlanResponse,
    summary="Get study plan",
)
async def get_study_plan(
    course_id: UUID,
    current_user: AuthenticatedUser,
    db: DB,
) -> StudyPlanResponse:
    """Get a course's stored study plan."""
    try:
        return await CourseService(db).get_study_plan(str(course_id))
    except CourseNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")


@router.put(
    "/{course_id}/study-plan",
    response_model=StudyPlanResponse,
    summary="Replace study plan",
    description="Replace the study plan. Only the instructor or creator may do this.",
)
async def update_study_plan(
    course_id: UUID,
    data: StudyPlanUpdateRequest,
    current_user: StaffUser,
    db: DB,
) -> StudyPlanResponse:
    """Replace a course's study plan."""
    try:
        return await CourseService(db).update_study_plan(
            course_id=str(course_id),
            weeks=data.weeks,
            user_id=current_user.id,
        )
    except CourseNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    except CourseAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.delete(
    "/{course_id}/study-plan",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete study plan",
)
async def delete_study_plan(
    course_id: UUID,
    current_user: StaffUser,
    db: DB,
) -> None:
    """Remove a course's study plan."""
    try:
        await CourseService(db).delete_study_plan(str(course_id), current_user.id)
    except CourseNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    except CourseAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


# ============================================================================
# Student Enrollment Endpoints
# ============================================================================


@router.post(
    "/{course_id}/enrollments",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll student",
    description="Enroll a student. Requires supervisor teacher or admin access.",
)
async def enroll_student(
    course_id: UUID,
    data: EnrollStudentRequest,
    current_user: EnrollerUser,
    db: DB,
) -> EnrollmentResponse:
    """Enroll a student in a course.

    Raises:
        HTTPException: If course/student not found, already enrolled, or
            an enrollment rule is violated.
    """
    logger.info(
        "Enrolling student: student=%s, course=%s, by=%s",
        data.student_id,
        course_id,
        current_user.id,
    )

    try:
        return await EnrollmentService(db).enroll_student(
            course_id=str(course_id),
            student_id=str(data.student_id),
            enrolled_by=current_user.id,
        )
    except (EnrollmentCourseNotFoundError, StudentNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AlreadyEnrolledError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except EnrollmentServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post(
    "/{course_id}/enrollments/bulk",
    response_model=BulkEnrollResponse,
    summary="Bulk enroll students",
)
async def bulk_enroll(
    course_id: UUID,
    data: BulkEnrollRequest,
    current_user: EnrollerUser,
    db: DB,
) -> BulkEnrollResponse:
    """Enroll several students, skipping those already enrolled."""
    try:
        return await EnrollmentService(db).bulk_enroll(
            course_id=str(course_id),
            student_ids=[str(sid) for sid in data.student_ids],
            enrolled_by=current_user.id,
        )
    except EnrollmentCourseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except EnrollmentServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
