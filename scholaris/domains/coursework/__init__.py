# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Coursework domain package: assignment and quiz creation."""

from scholaris.domains.coursework.service import (
    CourseNotFoundError,
    CourseworkAccessDeniedError,
    CourseworkService,
    CourseworkServiceError,
)

__all__ = [
    "CourseworkService",
    "CourseworkServiceError",
    "CourseNotFoundError",
    "CourseworkAccessDeniedError",
]
