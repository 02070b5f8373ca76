# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-process scheduler for housekeeping jobs.

Jobs are coroutine functions fired on a fixed interval by APScheduler's
AsyncIOScheduler, sharing the API's event loop. A failing run is
recorded on its ScheduledTask and the job keeps its schedule.

Example:
    scheduler = await start_scheduler()
    scheduler.add_interval_task("Nightly report", build_report, hours=24)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable
from uuid import uuid4

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from scholaris.core.config import get_settings
from scholaris.infrastructure.background.tasks import run_session_cleanup

logger = logging.getLogger(__name__)

JobFunc = Callable[[], Awaitable[Any]]


@dataclass
class ScheduledTask:
    """A registered job together with its run bookkeeping."""

    name: str
    func: JobFunc
    id: str = field(default_factory=lambda: str(uuid4()))
    enabled: bool = True
    last_run: datetime | None = None
    run_count: int = 0
    error_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        data = {
            key: getattr(self, key)
            for key in ("id", "name", "enabled", "run_count", "error_count")
        }
        data["last_run"] = self.last_run.isoformat() if self.last_run else None
        return data


class TaskScheduler:
    """Keeps ScheduledTask records and mirrors enabled ones into APScheduler."""

    def __init__(self) -> None:
        self._scheduler: AsyncIOScheduler | None = None
        self._tasks: dict[str, ScheduledTask] = {}

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None

    def add_interval_task(
        self,
        name: str,
        func: JobFunc,
        seconds: int = 0,
        minutes: int = 0,
        hours: int = 0,
        enabled: bool = True,
        start_immediately: bool = False,
    ) -> ScheduledTask:
        """Register a job that repeats every hours/minutes/seconds.

        The task is always recorded. It is handed to APScheduler only when
        it is enabled and the scheduler has been started.

        Args:
            name: Label used in logs and stats.
            func: Coroutine function taking no arguments.
            seconds: Seconds part of the interval.
            minutes: Minutes part of the interval.
            hours: Hours part of the interval.
            enabled: Disabled tasks are recorded but never run.
            start_immediately: Fire once right away instead of after
                the first interval.

        Returns:
            The recorded ScheduledTask.
        """
        task = ScheduledTask(name=name, func=func, enabled=enabled)
        self._tasks[task.id] = task

        if enabled and self._scheduler is not None:
            first_run = datetime.now(timezone.utc) if start_immediately else None
            self._scheduler.add_job(
                self._execute_task,
                trigger=IntervalTrigger(hours=hours, minutes=minutes, seconds=seconds),
                args=[task.id],
                id=task.id,
                name=name,
                next_run_time=first_run,
            )

        logger.info(
            "Scheduled %s every %dh %dm %ds (enabled=%s)",
            name,
            hours,
            minutes,
            seconds,
            enabled,
        )
        return task

    async def _execute_task(self, task_id: str) -> None:
        task = self._tasks.get(task_id)
        if task is None or not task.enabled:
            return

        logger.debug("Running job %s", task.name)
        try:
            await task.func()
        except Exception as e:
            task.error_count += 1
            logger.error("Job %s failed: %s", task.name, str(e))
            return

        task.run_count += 1
        task.last_run = datetime.now(timezone.utc)

    def list_tasks(self) -> list[ScheduledTask]:
        return list(self._tasks.values())

    async def start(self) -> None:
        """Create and start the underlying AsyncIOScheduler."""
        if self._scheduler is not None:
            return
        self._scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self._scheduler.start()
        logger.info("Task scheduler started")

    async def stop(self) -> None:
        """Shut APScheduler down without waiting for running jobs."""
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Task scheduler stopped")

    def get_stats(self) -> dict[str, Any]:
        tasks = self.list_tasks()
        return {
            "is_running": self.is_running,
            "task_count": len(tasks),
            "total_runs": sum(task.run_count for task in tasks),
            "total_errors": sum(task.error_count for task in tasks),
            "tasks": [task.to_dict() for task in tasks],
        }


_scheduler: TaskScheduler | None = None


def get_scheduler() -> TaskScheduler:
    """Return the process-wide scheduler, creating it on first use."""
    global _scheduler
    if _scheduler is None:
        _scheduler = TaskScheduler()
    return _scheduler


async def start_scheduler() -> TaskScheduler:
    """Start the process-wide scheduler with the housekeeping jobs.

    Returns:
        The running scheduler.
    """
    scheduler = get_scheduler()
    await scheduler.start()

    scheduler.add_interval_task(
        name="Session Cleanup",
        func=run_session_cleanup,
        minutes=get_settings().session.cleanup_interval_minutes,
    )
    return scheduler


async def stop_scheduler() -> None:
    global _scheduler
    if _scheduler is not None:
        await _scheduler.stop()
        _scheduler = None
