# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    courses: Course creation, study plans and enrollment.
    assignments: Assignments, submissions and submission grading.
    quizzes: Quiz creation, attempts, scoring and manual grading.
    grades: GPA, transcripts, course summaries and grade changes.
    notifications: In-app notifications of the current user.
    generation: AI study plan, quiz, assignment and report generation.
"""

from fastapi import APIRouter

from scholaris.api.v1 import (
    assignments,
    courses,
    generation,
    grades,
    notifications,
    quizzes,
)

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(courses.router, prefix="/courses", tags=["Courses"])
router.include_router(assignments.router, prefix="/assignments", tags=["Assignments"])
router.include_router(quizzes.router, prefix="/quizzes", tags=["Quizzes"])
router.include_router(grades.router, prefix="/grades", tags=["Grades"])
router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
router.include_router(generation.router, prefix="/gemini", tags=["AI Generation"])

__all__ = ["router"]
