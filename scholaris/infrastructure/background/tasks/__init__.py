# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Periodic task implementations run by the scheduler."""

from scholaris.infrastructure.background.tasks.sessions import (
    cleanup_expired_sessions,
    run_session_cleanup,
)

__all__ = [
    "cleanup_expired_sessions",
    "run_session_cleanup",
]
