# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

import os
from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from scholaris.core.config import clear_settings_cache

# =============================================================================
# Environment
# =============================================================================

TEST_ENVIRONMENT: dict[str, str] = {
    "ENVIRONMENT": "development",
    "DEBUG": "true",
    "LOG_LEVEL": "DEBUG",
    "JWT_SECRET_KEY": "test-secret-key-for-testing-only",
    "JWT_ALGORITHM": "HS256",
    "ACCESS_TOKEN_EXPIRE_MINUTES": "30",
    "RATE_LIMIT_ENABLED": "false",
    # Use litellm's bundled model cost map instead of fetching it over the network.
    "LITELLM_LOCAL_MODEL_COST_MAP": "True",
}

for _key, _value in TEST_ENVIRONMENT.items():
    os.environ.setdefault(_key, _value)


@pytest.fixture(autouse=True)
def reset_settings() -> Generator[None, None, None]:
    """Make every test read settings from a fresh environment."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    db.delete = AsyncMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    db.get = AsyncMock()
    return db


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def sample_student_id() -> str:
    """Provide a sample student ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def sample_teacher_id() -> str:
    """Provide a sample teacher ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440002"


@pytest.fixture
def sample_course() -> MagicMock:
    """Create a sample course model with relations loaded."""
    now = datetime.now(timezone.utc)
    department = MagicMock()
    department.name = "Computer Science"

    profile = MagicMock()
    profile.first_name = "Ada"
    profile.last_name = "Lovelace"
    instructor = MagicMock()
    instructor.id = str(uuid4())
    instructor.profile = profile

    course = MagicMock()
    course.id = str(uuid4())
    course.code = "CS101"
    course.name = "Intro to Programming"
    course.description = "Fundamentals of programming"
    course.level = "undergraduate"
    course.credits = 3
    course.semester = "fall"
    course.year = 2025
    course.capacity = None
    course.department = department
    course.instructor = instructor
    course.instructor_id = instructor.id
    course.created_by_id = str(uuid4())
    course.prerequisites = []
    course.start_date = now - timedelta(days=10)
    course.end_date = now + timedelta(days=60)
    course.enrollment_deadline = None
    course.study_plan = None
    return course
