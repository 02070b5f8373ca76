# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request-scoped dependencies for the v1 routers.

Routes declare what they need through the Annotated aliases at the
bottom of this module (DB, LLM and the role-checked user types). Tests
swap get_db and get_llm_client through app.dependency_overrides.

Example:
    @router.get("/{course_id}")
    async def get_course(course_id: str, db: DB, user: AuthenticatedUser):
        ...
"""

from functools import lru_cache
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from scholaris.api.middleware.auth import CurrentUser, get_current_user
from scholaris.core.intelligence.llm import LLMClient
from scholaris.infrastructure.database.connection import get_session
from scholaris.models.common import STAFF_ROLES, UserRole


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session that commits when the request succeeds."""
    async with get_session() as session:
        yield session


@lru_cache
def get_llm_client() -> LLMClient:
    """One LLMClient per process, built from settings on first use."""
    return LLMClient()


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Return the caller or answer 401 with a Bearer challenge."""
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


class RequireRole:
    """Accept callers holding any of the given role codes, else 403.

    Example:
        @router.post("")
        async def create_course(
            user: CurrentUser = Depends(RequireRole("supervisor_teacher")),
        ):
            ...
    """

    def __init__(self, *roles: str) -> None:
        self.roles = roles

    def __call__(self, request: Request) -> CurrentUser:
        user = require_auth(request)

        if not user.has_any_role(*self.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(self.roles)}",
            )

        return user


require_staff = RequireRole(*STAFF_ROLES)
require_enroller = RequireRole(UserRole.SUPERVISOR_TEACHER.value, UserRole.ADMIN.value)
require_supervisor = RequireRole(UserRole.SUPERVISOR_TEACHER.value)
require_student = RequireRole(UserRole.STUDENT.value)


def ensure_self_or_staff(current_user: CurrentUser, student_id: str) -> None:
    """Let students act only on their own records.

    Raises:
        HTTPException: If a student targets another student.
    """
    if current_user.is_student and current_user.id != student_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Students can only access their own records",
        )


# =========================================================================
# Annotated aliases for endpoint signatures
# =========================================================================

DB = Annotated[AsyncSession, Depends(get_db)]
AuthenticatedUser = Annotated[CurrentUser, Depends(require_auth)]
StaffUser = Annotated[CurrentUser, Depends(require_staff)]
EnrollerUser = Annotated[CurrentUser, Depends(require_enroller)]
SupervisorUser = Annotated[CurrentUser, Depends(require_supervisor)]
StudentUser = Annotated[CurrentUser, Depends(require_student)]
LLM = Annotated[LLMClient, Depends(get_llm_client)]
