# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course domain package.

This package provides course management functionality including:
- Course creation with instructor and department checks
- Study plan authoring restricted to the course's instructor or creator
"""

from scholaris.domains.course.service import (
    CourseAccessDeniedError,
    CourseCodeExistsError,
    CourseNotFoundError,
    CourseService,
    CourseServiceError,
    DepartmentNotFoundError,
    InstructorNotFoundError,
    InvalidInstructorError,
    NotSupervisorError,
)

__all__ = [
    "CourseService",
    "CourseServiceError",
    "CourseNotFoundError",
    "CourseCodeExistsError",
    "DepartmentNotFoundError",
    "InstructorNotFoundError",
    "InvalidInstructorError",
    "NotSupervisorError",
    "CourseAccessDeniedError",
]
