# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade domain package.

This package provides grade calculation functionality including:
- The letter and percentage grading scale
- Weighted GPA calculation
- Course grade statistics and transcripts
- Manual grading of submissions and grade adjustments
"""

from scholaris.domains.grade.grading import (
    GPAEntry,
    calculate_percentage,
    letter_to_points,
    percentage_to_letter,
    weighted_gpa,
)
from scholaris.domains.grade.service import (
    AlreadyGradedError,
    CourseNotFoundError,
    GradeCalculationService,
    GradeNotFoundError,
    GradeServiceError,
    GradingAccessDeniedError,
    GradingService,
    InvalidGradeError,
    StudentNotFoundError,
    SubmissionNotFoundError,
)

__all__ = [
    "GradeCalculationService",
    "GradingService",
    "GradeServiceError",
    "StudentNotFoundError",
    "CourseNotFoundError",
    "SubmissionNotFoundError",
    "GradeNotFoundError",
    "AlreadyGradedError",
    "GradingAccessDeniedError",
    "InvalidGradeError",
    "GPAEntry",
    "letter_to_points",
    "percentage_to_letter",
    "calculate_percentage",
    "weighted_gpa",
]
