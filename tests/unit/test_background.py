# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for background jobs.

Tests cover:
- Expired session cleanup
- Task scheduler bookkeeping
"""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from scholaris.infrastructure.background.scheduler import TaskScheduler
from scholaris.infrastructure.background.tasks.sessions import (
    cleanup_expired_sessions,
    run_session_cleanup,
)


class TestSessionCleanup:
    """Tests for session housekeeping."""

    @pytest.mark.asyncio
    async def test_deletes_expired_sessions(self, mock_db: AsyncMock) -> None:
        """Test the delete statement reports the removed row count."""
        result = MagicMock()
        result.rowcount = 3
        mock_db.execute.return_value = result

        deleted = await cleanup_expired_sessions(mock_db)

        assert deleted == 3
        mock_db.execute.assert_called_once()
        statement = str(mock_db.execute.call_args.args[0])
        assert "DELETE FROM sessions" in statement
        assert "expires_at" in statement
        assert "is_active" in statement

    @pytest.mark.asyncio
    async def test_nothing_to_delete(self, mock_db: AsyncMock) -> None:
        """Test a missing row count is reported as zero."""
        result = MagicMock()
        result.rowcount = None
        mock_db.execute.return_value = result

        assert await cleanup_expired_sessions(mock_db) == 0

    @pytest.mark.asyncio
    async def test_scheduled_entry_point(self, mock_db: AsyncMock) -> None:
        """Test the scheduled job opens its own database session."""
        result = MagicMock()
        result.rowcount = 1
        mock_db.execute.return_value = result

        @asynccontextmanager
        async def fake_session():
            yield mock_db

        with patch(
            "scholaris.infrastructure.background.tasks.sessions.get_session",
            fake_session,
        ):
            assert await run_session_cleanup() == 1


class TestTaskScheduler:
    """Tests for TaskScheduler."""

    @pytest.mark.asyncio
    async def test_execute_counts_runs(self) -> None:
        """Test successful runs are recorded."""
        scheduler = TaskScheduler()
        job = AsyncMock()
        task = scheduler.add_interval_task(name="Job", func=job, minutes=5)

        await scheduler._execute_task(task.id)

        job.assert_awaited_once()
        assert task.run_count == 1
        assert task.error_count == 0
        assert task.last_run is not None

    @pytest.mark.asyncio
    async def test_execute_counts_errors(self) -> None:
        """Test a failing job is counted and does not raise."""
        scheduler = TaskScheduler()
        task = scheduler.add_interval_task(
            name="Broken",
            func=AsyncMock(side_effect=RuntimeError("db down")),
            minutes=5,
        )

        await scheduler._execute_task(task.id)

        assert task.run_count == 0
        assert task.error_count == 1
        assert scheduler.get_stats()["total_errors"] == 1

    @pytest.mark.asyncio
    async def test_disabled_task_is_skipped(self) -> None:
        """Test disabled tasks never run."""
        scheduler = TaskScheduler()
        job = AsyncMock()
        task = scheduler.add_interval_task(name="Off", func=job, minutes=5, enabled=False)

        await scheduler._execute_task(task.id)

        job.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_start_and_stop(self) -> None:
        """Test jobs are registered with APScheduler while running."""
        scheduler = TaskScheduler()
        await scheduler.start()
        try:
            task = scheduler.add_interval_task(name="Job", func=AsyncMock(), minutes=1)

            assert scheduler.is_running is True
            assert scheduler._scheduler.get_job(task.id) is not None
        finally:
            await scheduler.stop()

        assert scheduler.is_running is False
        assert scheduler.get_stats()["task_count"] == 1
