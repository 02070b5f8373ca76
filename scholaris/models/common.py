# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enumerations shared across domains."""

from enum import Enum


class UserRole(str, Enum):
    """Platform roles.

    SUPERVISOR_TEACHER has department-head privileges: creating courses
    and enrolling students.
    """

    ADMIN = "admin"
    SUPERVISOR_TEACHER = "supervisor_teacher"
    TEACHER = "teacher"
    STUDENT = "student"


STAFF_ROLES: tuple[str, ...] = (
    UserRole.ADMIN.value,
    UserRole.SUPERVISOR_TEACHER.value,
    UserRole.TEACHER.value,
)


class EnrollmentStatus(str, Enum):
    """Lifecycle of a course enrollment."""

    ACTIVE = "active"
    DROPPED = "dropped"
    COMPLETED = "completed"


class AssignmentStatus(str, Enum):
    """Lifecycle of an assignment."""

    DRAFT = "draft"
    ASSIGNED = "assigned"
    SUBMITTED = "submitted"
    GRADED = "graded"


class CourseLevel(str, Enum):
    """Academic level of a course."""

    UNDERGRADUATE = "undergraduate"
    GRADUATE = "graduate"
    DOCTORAL = "doctoral"


class NotificationType(str, Enum):
    """Events a user is notified about."""

    ENROLLMENT = "enrollment"
    GRADE_POSTED = "grade_posted"
    GRADE_UPDATED = "grade_updated"


class NotificationPriority(str, Enum):
    """How prominently a notification is shown."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"
