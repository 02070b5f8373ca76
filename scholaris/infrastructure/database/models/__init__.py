# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models.

Importing this package registers every table on Base.metadata.
"""

from scholaris.infrastructure.database.models.activity import AuditLog, Notification
from scholaris.infrastructure.database.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
)
from scholaris.infrastructure.database.models.course import (
    Course,
    Enrollment,
    course_prerequisites,
)
from scholaris.infrastructure.database.models.coursework import (
    Assignment,
    AssignmentSubmission,
    Quiz,
    QuizAttempt,
)
from scholaris.infrastructure.database.models.grade import Grade
from scholaris.infrastructure.database.models.session import Session
from scholaris.infrastructure.database.models.user import Department, User, UserProfile

__all__ = [
    "Base",
    "TimestampMixin",
    "SoftDeleteMixin",
    "Department",
    "User",
    "UserProfile",
    "Course",
    "Enrollment",
    "course_prerequisites",
    "Assignment",
    "AssignmentSubmission",
    "Quiz",
    "QuizAttempt",
    "Grade",
    "Session",
    "Notification",
    "AuditLog",
]
