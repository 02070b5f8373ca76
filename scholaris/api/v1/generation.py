# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""AI generation API endpoints.

- GET /{course_id}/get-weekly-study-plan - Generate and store a study plan
- POST /{course_id}/get-quiz - Generate a quiz for selected weeks
- POST /{course_id}/get-assignment - Generate an assignment for selected weeks
- POST /{course_id}/ask-quiz-question - Answer a student's question
- POST /{course_id}/get-personal-report - Report on a student's quiz attempts

Study plan, quiz and assignment generation require staff access. All
generation endpoints share a tighter rate limit.
"""

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, HTTPException, Request, status

from scholaris.api.dependencies import (
    DB,
    LLM,
    AuthenticatedUser,
    StaffUser,
    ensure_self_or_staff,
)
from scholaris.api.middleware.rate_limit import generation_limit, limiter
from scholaris.domains.generation.service import (
    CourseNotFoundError,
    GenerationService,
    GenerationServiceError,
)
from scholaris.models.generation import (
    AskQuestionRequest,
    PersonalReportRequest,
    StudyPlanGenerationResponse,
    WeeksToCoverRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _raise_http(error: GenerationServiceError) -> None:
    if isinstance(error, CourseNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.get(
    "/{course_id}/get-weekly-study-plan",
    response_model=StudyPlanGenerationResponse,
    summary="Generate weekly study plan",
    description="Generate a study plan with AI and store it on the course. "
    "Falls back to a default plan when generation fails.",
)
@limiter.limit(generation_limit)
async def get_weekly_study_plan(
    request: Request,
    course_id: UUID,
    current_user: StaffUser,
    db: DB,
    llm: LLM,
) -> StudyPlanGenerationResponse:
    """Generate and store a weekly study plan."""
    logger.info("Generating study plan: course=%s, by=%s", course_id, current_user.id)

    try:
        return await GenerationService(db, llm).get_weekly_study_plan(str(course_id))
    except GenerationServiceError as e:
        _raise_http(e)


@router.post(
    "/{course_id}/get-quiz",
    response_model=dict[str, Any],
    summary="Generate quiz",
)
@limiter.limit(generation_limit)
async def get_quiz(
    request: Request,
    course_id: UUID,
    data: WeeksToCoverRequest,
    current_user: StaffUser,
    db: DB,
    llm: LLM,
) -> dict[str, Any]:
    """Generate a quiz covering selected study-plan weeks."""
    try:
        return await GenerationService(db, llm).get_quiz(str(course_id), data.weeks_to_cover)
    except GenerationServiceError as e:
        _raise_http(e)


@router.post(
    "/{course_id}/get-assignment",
    response_model=dict[str, Any],
    summary="Generate assignment",
)
@limiter.limit(generation_limit)
async def get_assignment(
    request: Request,
    course_id: UUID,
    data: WeeksToCoverRequest,
    current_user: StaffUser,
    db: DB,
    llm: LLM,
) -> dict[str, Any]:
    """Generate an assignment covering selected study-plan weeks."""
    try:
        return await GenerationService(db, llm).get_assignment(str(course_id), data.weeks_to_cover)
    except GenerationServiceError as e:
        _raise_http(e)


@router.post(
    "/{course_id}/ask-quiz-question",
    response_model=dict[str, Any],
    summary="Ask a question",
)
@limiter.limit(generation_limit)
async def ask_quiz_question(
    request: Request,
    course_id: UUID,
    data: AskQuestionRequest,
    current_user: AuthenticatedUser,
    db: DB,
    llm: LLM,
) -> dict[str, Any]:
    """Answer a question in the context of a course."""
    try:
        return await GenerationService(db, llm).ask_quiz_question(str(course_id), data.question)
    except GenerationServiceError as e:
        _raise_http(e)


@router.post(
    "/{course_id}/get-personal-report",
    response_model=dict[str, Any],
    summary="Generate personal report",
)
@limiter.limit(generation_limit)
async def get_personal_report(
    request: Request,
    course_id: UUID,
    data: PersonalReportRequest,
    current_user: AuthenticatedUser,
    db: DB,
    llm: LLM,
) -> dict[str, Any]:
    """Generate a performance report. Students may only request their own."""
    ensure_self_or_staff(current_user, str(data.student_id))

    try:
        return await GenerationService(db, llm).get_personal_report(
            str(course_id), str(data.student_id)
        )
    except GenerationServiceError as e:
        _raise_http(e)
