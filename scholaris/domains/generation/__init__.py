# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""AI generation domain package."""

from scholaris.domains.generation.service import (
    FALLBACK_NOTE,
    CourseNotFoundError,
    GenerationFailedError,
    GenerationService,
    GenerationServiceError,
    NoQuizAttemptsError,
    NoWeeksSelectedError,
    StudyPlanNotFoundError,
    course_weeks,
)

__all__ = [
    "GenerationService",
    "GenerationServiceError",
    "CourseNotFoundError",
    "StudyPlanNotFoundError",
    "NoWeeksSelectedError",
    "NoQuizAttemptsError",
    "GenerationFailedError",
    "FALLBACK_NOTE",
    "course_weeks",
]
