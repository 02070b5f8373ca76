# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Audit trail and in-app notifications.

ActivityRecorder adds AuditLog and Notification rows to the caller's
session. Nothing is committed here: the rows are written by the same
commit as the change they describe, and vanish with it on rollback.

Example:
    activity = ActivityRecorder(db)
    activity.audit(AuditAction.COURSE_CREATED, user_id, "course", course.id)
    activity.notify(
        student_id,
        "Enrolled in CS101",
        "You have been enrolled in Intro to Computing",
        NotificationType.ENROLLMENT,
        course_id=course.id,
    )
    await db.commit()
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from scholaris.infrastructure.database.models.activity import AuditLog, Notification
from scholaris.models.common import NotificationPriority, NotificationType

logger = logging.getLogger(__name__)


class AuditAction(str, Enum):
    """Recorded user actions."""

    COURSE_CREATED = "COURSE_CREATED"
    STUDY_PLAN_UPDATED = "STUDY_PLAN_UPDATED"
    STUDY_PLAN_DELETED = "STUDY_PLAN_DELETED"
    STUDENT_ENROLLED = "STUDENT_ENROLLED"
    STUDENTS_BULK_ENROLLED = "STUDENTS_BULK_ENROLLED"
    ASSIGNMENT_CREATED = "ASSIGNMENT_CREATED"
    ASSIGNMENT_SUBMITTED = "ASSIGNMENT_SUBMITTED"
    SUBMISSION_UPDATED = "SUBMISSION_UPDATED"
    QUIZ_CREATED = "QUIZ_CREATED"
    QUIZ_SUBMITTED = "QUIZ_SUBMITTED"
    QUIZ_ANSWER_GRADED = "QUIZ_ANSWER_GRADED"
    SUBMISSION_GRADED = "SUBMISSION_GRADED"
    GRADE_UPDATED = "GRADE_UPDATED"


class ActivityRecorder:
    """Stage audit and notification rows on a session.

    Attributes:
        db: Async database session shared with the calling service.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def audit(
        self,
        action: AuditAction,
        user_id: str | None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        **details: Any,
    ) -> AuditLog:
        """Record that a user performed an action.

        Args:
            action: What happened.
            user_id: Acting user, None for system actions.
            entity_type: Kind of record acted on, e.g. "course".
            entity_id: Id of that record.
            **details: JSON-serializable facts about the action.

        Returns:
            The staged row.
        """
        entry = AuditLog(
            user_id=user_id,
            action=action.value,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        )
        self.db.add(entry)
        logger.info(
            "Audit: action=%s, user=%s, %s=%s",
            action.value,
            user_id or "system",
            entity_type or "entity",
            entity_id,
        )
        return entry

    def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        notification_type: NotificationType,
        priority: NotificationPriority = NotificationPriority.NORMAL,
        course_id: str | None = None,
        assignment_id: str | None = None,
        grade_id: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        """Stage an in-app notification for one user."""
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            notification_type=notification_type.value,
            priority=priority.value,
            course_id=course_id,
            assignment_id=assignment_id,
            grade_id=grade_id,
            data=data or {},
            is_read=False,
        )
        self.db.add(notification)
        logger.debug(
            "Notification staged: user=%s, type=%s",
            user_id,
            notification_type.value,
        )
        return notification

    async def list_notifications(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[Notification]:
        """Newest notifications of a user."""
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        result = await self.db.execute(
            query.order_by(Notification.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def mark_read(self, notification_id: str, user_id: str) -> bool:
        """Mark one of the user's notifications read.

        Returns:
            False when the user has no such notification.
        """
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
            .values(is_read=True, read_at=datetime.now(timezone.utc))
        )
        await self.db.commit()
        return result.rowcount > 0
