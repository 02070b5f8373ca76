# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification API endpoints.

- GET / - List the current user's notifications, newest first
- POST /{notification_id}/read - Mark one notification read
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from scholaris.api.dependencies import DB, AuthenticatedUser
from scholaris.domains.activity.service import ActivityRecorder
from scholaris.models.notification import NotificationResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=list[NotificationResponse],
    summary="List notifications",
)
async def list_notifications(
    current_user: AuthenticatedUser,
    db: DB,
    unread_only: bool = Query(default=False, description="Only unread notifications"),
    limit: int = Query(default=50, ge=1, le=200),
) -> list[NotificationResponse]:
    """List the current user's notifications."""
    notifications = await ActivityRecorder(db).list_notifications(
        current_user.id,
        unread_only=unread_only,
        limit=limit,
    )
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.post(
    "/{notification_id}/read",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Mark notification read",
)
async def mark_notification_read(
    notification_id: UUID,
    current_user: AuthenticatedUser,
    db: DB,
) -> None:
    """Mark one of the current user's notifications read."""
    if not await ActivityRecorder(db).mark_read(str(notification_id), current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )
