# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz attempt domain package."""

from scholaris.domains.quiz.scoring import (
    cap_score,
    grade_answers,
    is_correct,
    parse_duration,
    sanitize_questions,
    score_answers,
)
from scholaris.domains.quiz.service import (
    AttemptAccessDeniedError,
    AttemptAlreadySubmittedError,
    AttemptNotFoundError,
    AttemptNotSubmittedError,
    InvalidPointsError,
    MaxAttemptsExceededError,
    QuestionNotFoundError,
    QuizAttemptService,
    QuizClosedError,
    QuizNotFoundError,
    QuizServiceError,
    TimeLimitExceededError,
)

__all__ = [
    "QuizAttemptService",
    "QuizServiceError",
    "QuizNotFoundError",
    "AttemptNotFoundError",
    "QuizClosedError",
    "MaxAttemptsExceededError",
    "AttemptAlreadySubmittedError",
    "TimeLimitExceededError",
    "AttemptAccessDeniedError",
    "AttemptNotSubmittedError",
    "QuestionNotFoundError",
    "InvalidPointsError",
    "cap_score",
    "grade_answers",
    "is_correct",
    "parse_duration",
    "sanitize_questions",
    "score_answers",
]
