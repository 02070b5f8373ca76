# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz API endpoints.

- POST / - Create a quiz (course staff)
- POST /{quiz_id}/attempts - Start or resume an attempt (students)
- POST /attempts/{attempt_id}/submit - Submit answers (students)
- GET /attempts/{attempt_id} - Read an attempt
- POST /attempts/{attempt_id}/questions/{question_id}/grade - Award points
  for one question by hand (course staff)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from scholaris.api.dependencies import DB, AuthenticatedUser, StaffUser, StudentUser
from scholaris.domains.coursework.service import (
    CourseNotFoundError,
    CourseworkAccessDeniedError,
    CourseworkService,
)
from scholaris.domains.enrollment.service import NotEnrolledError
from scholaris.domains.quiz.service import (
    AttemptAccessDeniedError,
    AttemptNotFoundError,
    QuestionNotFoundError,
    QuizAttemptService,
    QuizNotFoundError,
    QuizServiceError,
)
from scholaris.models.quiz import (
    GradeQuestionRequest,
    QuizAttemptResponse,
    QuizAttemptResult,
    QuizCreateRequest,
    QuizResponse,
    SubmitQuizAttemptRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=QuizResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create quiz",
    description="Create a quiz. Its question count and maximum score follow its questions.",
)
async def create_quiz(
    data: QuizCreateRequest,
    current_user: StaffUser,
    db: DB,
) -> QuizResponse:
    """Create a quiz in a course the user manages."""
    try:
        return await CourseworkService(db).create_quiz(
            request=data,
            creator_id=current_user.id,
            creator_role=current_user.role,
        )
    except CourseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CourseworkAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.post(
    "/{quiz_id}/attempts",
    response_model=QuizAttemptResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start quiz attempt",
    description="Start a new attempt, or resume the unsubmitted one.",
)
async def start_attempt(
    quiz_id: UUID,
    current_user: StudentUser,
    db: DB,
) -> QuizAttemptResponse:
    """Start or resume a quiz attempt.

    Raises:
        HTTPException: If the quiz is missing, the student is not enrolled,
            the quiz is closed or no attempts remain.
    """
    try:
        return await QuizAttemptService(db).start_attempt(str(quiz_id), current_user.id)
    except QuizNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (NotEnrolledError, QuizServiceError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post(
    "/attempts/{attempt_id}/submit",
    response_model=QuizAttemptResult,
    summary="Submit quiz attempt",
)
async def submit_attempt(
    attempt_id: UUID,
    data: SubmitQuizAttemptRequest,
    current_user: StudentUser,
    db: DB,
) -> QuizAttemptResult:
    """Submit answers, score them and record the grade."""
    try:
        return await QuizAttemptService(db).submit_attempt(
            attempt_id=str(attempt_id),
            answers=data.answers,
            student_id=current_user.id,
        )
    except AttemptNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AttemptAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except QuizServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get(
    "/attempts/{attempt_id}",
    response_model=QuizAttemptResponse,
    summary="Get quiz attempt",
)
async def get_attempt(
    attempt_id: UUID,
    current_user: AuthenticatedUser,
    db: DB,
) -> QuizAttemptResponse:
    """Read an attempt the user is allowed to see."""
    try:
        return await QuizAttemptService(db).get_attempt(
            attempt_id=str(attempt_id),
            user_id=current_user.id,
            user_role=current_user.role,
        )
    except AttemptNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AttemptAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.post(
    "/attempts/{attempt_id}/questions/{question_id}/grade",
    response_model=QuizAttemptResult,
    summary="Grade quiz question",
    description="Award points for a question, e.g. an essay, and rescore the attempt.",
)
async def grade_question(
    attempt_id: UUID,
    question_id: str,
    data: GradeQuestionRequest,
    current_user: StaffUser,
    db: DB,
) -> QuizAttemptResult:
    """Award points for one question of a submitted attempt."""
    try:
        return await QuizAttemptService(db).grade_answer(
            attempt_id=str(attempt_id),
            question_id=question_id,
            points=data.points,
            grader_id=current_user.id,
            grader_role=current_user.role,
        )
    except (AttemptNotFoundError, QuestionNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AttemptAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except QuizServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
