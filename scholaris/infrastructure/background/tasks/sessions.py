# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Session housekeeping tasks.

Removes login sessions that have expired or were deactivated.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from scholaris.infrastructure.database.connection import get_session
from scholaris.infrastructure.database.models.session import Session

logger = logging.getLogger(__name__)


async def cleanup_expired_sessions(db: AsyncSession, now: datetime | None = None) -> int:
    """Delete expired or inactive sessions.

    Args:
        db: Async database session. The caller commits.
        now: Reference time, defaults to the current UTC time.

    Returns:
        Number of deleted sessions.
    """
    now = now or datetime.now(timezone.utc)

    result = await db.execute(
        delete(Session).where(
            or_(
                Session.expires_at < now,
                Session.is_active.is_(False),
            )
        )
    )
    deleted = result.rowcount or 0

    if deleted:
        logger.info("Cleaned up %d expired sessions", deleted)
    else:
        logger.debug("No expired sessions to clean up")

    return deleted


async def run_session_cleanup() -> int:
    """Scheduled entry point: clean up sessions in a fresh database session."""
    async with get_session() as db:
        return await cleanup_expired_sessions(db)
