# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course service for course creation and study plan authoring.

This module provides the CourseService class for:
- Course creation by supervisor teachers
- Course lookup
- Study plan retrieval, replacement and deletion by the course's
  instructor or creator
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scholaris.domains.activity.service import ActivityRecorder, AuditAction
from scholaris.infrastructure.database.models.course import Course
from scholaris.infrastructure.database.models.user import Department, User
from scholaris.models.common import UserRole
from scholaris.models.course import (
    CourseCreateRequest,
    CourseResponse,
    StudyPlanResponse,
    StudyPlanWeek,
)

logger = logging.getLogger(__name__)


class CourseServiceError(Exception):
    """Base exception for course service errors."""

    pass


class CourseNotFoundError(CourseServiceError):
    """Raised when course is not found."""

    pass


class CourseCodeExistsError(CourseServiceError):
    """Raised when course code already exists."""

    pass


class DepartmentNotFoundError(CourseServiceError):
    """Raised when department is not found by id or name."""

    pass


class InstructorNotFoundError(CourseServiceError):
    """Raised when the instructor user is not found."""

    pass


class InvalidInstructorError(CourseServiceError):
    """Raised when the instructor is not a teacher or supervisor teacher."""

    pass


class NotSupervisorError(CourseServiceError):
    """Raised when a non-supervisor tries to create a course."""

    pass


class CourseAccessDeniedError(CourseServiceError):
    """Raised when a user may not modify a course's study plan."""

    pass


def _looks_like_uuid(value: str) -> bool:
    try:
        UUID(value)
    except ValueError:
        return False
    return True


class CourseService:
    """Service for course creation and study plan management.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._activity = ActivityRecorder(db)

    async def create_course(
        self,
        request: CourseCreateRequest,
        creator_id: str,
        creator_role: str,
    ) -> CourseResponse:
        """Create a new course.

        Args:
            request: Course creation data.
            creator_id: ID of the supervisor teacher creating the course.
            creator_role: Role of the creating user.

        Returns:
            Created course response.

        Raises:
            NotSupervisorError: If the creator is not a supervisor teacher.
            InstructorNotFoundError: If the instructor does not exist.
            InvalidInstructorError: If the instructor cannot teach.
            DepartmentNotFoundError: If the department cannot be resolved.
            CourseCodeExistsError: If the course code is taken.
        """
        if creator_role != UserRole.SUPERVISOR_TEACHER.value:
            raise NotSupervisorError("Only supervisor teachers can create courses")

        instructor = await self._get_instructor(str(request.instructor_id))
        department = await self._resolve_department(
            request.department_id, request.department_name
        )

        existing = await self.db.execute(select(Course).where(Course.code == request.code))
        if existing.scalar_one_or_none():
            raise CourseCodeExistsError("Course code already exists")

        prerequisites: list[Course] = []
        if request.prerequisite_ids:
            prerequisite_ids = [str(pid) for pid in request.prerequisite_ids]
            result = await self.db.execute(
                select(Course).where(Course.id.in_(prerequisite_ids))
            )
            prerequisites = list(result.scalars().all())

        course = Course(
            code=request.code,
            name=request.name,
            description=request.description,
            level=request.level.value,
            credits=request.credits,
            semester=request.semester,
            year=request.year,
            capacity=request.capacity,
            department_id=department.id,
            instructor_id=instructor.id,
            created_by_id=creator_id,
            start_date=request.start_date,
            end_date=request.end_date,
            enrollment_deadline=request.enrollment_deadline,
            prerequisites=prerequisites,
        )

        self.db.add(course)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise CourseCodeExistsError("Course code already exists") from e

        self._activity.audit(
            AuditAction.COURSE_CREATED,
            creator_id,
            "course",
            course.id,
            code=course.code,
            instructor_id=instructor.id,
        )
        await self.db.commit()
        await self.db.refresh(course)

        logger.info(
            "Created course: code=%s, name=%s, instructor=%s, by=%s",
            course.code,
            course.name,
            instructor.id,
            creator_id,
        )

        return self._to_response(course, department, instructor)

    async def get_course(self, course_id: str) -> CourseResponse:
        """Get a course.

        Raises:
            CourseNotFoundError: If course not found.
        """
        course = await self._get_course(course_id, with_relations=True)
        return self._to_response(course, course.department, course.instructor)

    async def get_study_plan(self, course_id: str) -> StudyPlanResponse:
        """Get a course's study plan (empty list when none is stored).

        Raises:
            CourseNotFoundError: If course not found.
        """
        course = await self._get_course(course_id)
        return self._to_study_plan_response(course)

    async def update_study_plan(
        self,
        course_id: str,
        weeks: list[StudyPlanWeek],
        user_id: str,
    ) -> StudyPlanResponse:
        """Replace a course's study plan.

        Args:
            course_id: Course identifier.
            weeks: New week records.
            user_id: ID of the user making the change.

        Raises:
            CourseNotFoundError: If course not found.
            CourseAccessDeniedError: If the user is neither instructor nor creator.
        """
        course = await self._get_course(course_id)
        self._check_plan_access(course, user_id)

        course.study_plan = [week.model_dump() for week in weeks]
        self._activity.audit(
            AuditAction.STUDY_PLAN_UPDATED,
            user_id,
            "course",
            course_id,
            weeks=len(weeks),
        )
        await self.db.commit()

        logger.info(
            "Updated study plan: course=%s, weeks=%d, by=%s",
            course_id,
            len(weeks),
            user_id,
        )

        return self._to_study_plan_response(course)

    async def delete_study_plan(self, course_id: str, user_id: str) -> None:
        """Remove a course's study plan.

        Raises:
            CourseNotFoundError: If course not found.
            CourseAccessDeniedError: If the user is neither instructor nor creator.
        """
        course = await self._get_course(course_id)
        self._check_plan_access(course, user_id)

        course.study_plan = None
        self._activity.audit(AuditAction.STUDY_PLAN_DELETED, user_id, "course", course_id)
        await self.db.commit()

        logger.info("Deleted study plan: course=%s, by=%s", course_id, user_id)

    async def save_study_plan(self, course: Course, weeks: list[dict[str, Any]]) -> None:
        """Persist a generated study plan on an already loaded course."""
        course.study_plan = weeks
        await self.db.commit()

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    async def _get_course(self, course_id: str, with_relations: bool = False) -> Course:
        query = select(Course).where(Course.id == course_id)
        if with_relations:
            query = query.options(
                selectinload(Course.department),
                selectinload(Course.instructor).selectinload(User.profile),
            )
        result = await self.db.execute(query)
        course = result.scalar_one_or_none()
        if not course:
            raise CourseNotFoundError("Course not found")
        return course

    async def _get_instructor(self, instructor_id: str) -> User:
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.profile))
            .where(User.id == instructor_id, User.deleted_at.is_(None))
        )
        instructor = result.scalar_one_or_none()
        if not instructor:
            raise InstructorNotFoundError("Instructor not found")
        if not instructor.can_teach:
            raise InvalidInstructorError("Instructor must be a teacher or supervisor teacher")
        return instructor

    async def _resolve_department(
        self,
        department_id: str | None,
        department_name: str | None,
    ) -> Department:
        """Find a department by id, falling back to treating the id as a name."""
        department = None
        if department_id and _looks_like_uuid(department_id):
            department = await self.db.get(Department, department_id)

        name = department_name or department_id
        if department is None and name:
            result = await self.db.execute(select(Department).where(Department.name == name))
            department = result.scalar_one_or_none()

        if department is None:
            raise DepartmentNotFoundError(
                f"Department not found with ID or name: {department_id or department_name}"
            )
        return department

    def _check_plan_access(self, course: Course, user_id: str) -> None:
        if user_id not in (course.instructor_id, course.created_by_id):
            raise CourseAccessDeniedError(
                "You do not have permission to modify the study plan for this course"
            )

    def _to_study_plan_response(self, course: Course) -> StudyPlanResponse:
        return StudyPlanResponse(
            course_id=course.id,
            course_code=course.code,
            course_name=course.name,
            study_plan=course.study_plan or [],
        )

    def _to_response(
        self,
        course: Course,
        department: Department | None,
        instructor: User | None,
    ) -> CourseResponse:
        return CourseResponse(
            id=course.id,
            code=course.code,
            name=course.name,
            description=course.description,
            level=course.level,
            credits=course.credits,
            semester=course.semester,
            year=course.year,
            capacity=course.capacity,
            department_id=course.department_id,
            department_name=department.name if department else None,
            instructor_id=course.instructor_id,
            instructor_name=instructor.full_name if instructor else None,
            created_by_id=course.created_by_id,
            start_date=course.start_date,
            end_date=course.end_date,
            enrollment_deadline=course.enrollment_deadline,
            has_study_plan=bool(course.study_plan),
        )
