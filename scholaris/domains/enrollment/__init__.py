# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides student enrollment management functionality including:
- Student enrollment in courses
- Bulk enrollment operations
- Active enrollment checks
"""

from scholaris.domains.enrollment.service import (
    AlreadyEnrolledError,
    CourseFullError,
    CourseNotFoundError,
    EnrollmentClosedError,
    EnrollmentService,
    EnrollmentServiceError,
    InvalidStudentTypeError,
    NotEnrolledError,
    StudentNotFoundError,
)

__all__ = [
    "EnrollmentService",
    "EnrollmentServiceError",
    "CourseNotFoundError",
    "StudentNotFoundError",
    "InvalidStudentTypeError",
    "AlreadyEnrolledError",
    "NotEnrolledError",
    "CourseFullError",
    "EnrollmentClosedError",
]
