# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Background job infrastructure.

Periodic jobs run in-process on APScheduler:

    from scholaris.infrastructure.background import start_scheduler, stop_scheduler

    # Start scheduler with default jobs
    await start_scheduler()

    # Stop at shutdown
    await stop_scheduler()
"""

from scholaris.infrastructure.background.scheduler import (
    ScheduledTask,
    TaskScheduler,
    get_scheduler,
    start_scheduler,
    stop_scheduler,
)
from scholaris.infrastructure.background.tasks import (
    cleanup_expired_sessions,
    run_session_cleanup,
)

__all__ = [
    "ScheduledTask",
    "TaskScheduler",
    "get_scheduler",
    "start_scheduler",
    "stop_scheduler",
    "cleanup_expired_sessions",
    "run_session_cleanup",
]
