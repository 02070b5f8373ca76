# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz scoring helpers.

Questions are stored as dicts with ``id``, ``question``, ``type``,
``options``, ``points``, ``correctAnswer`` and ``explanation`` keys.
Answers arrive keyed by question id.

Example:
    >>> questions = [
    ...     {"id": "q1", "options": ["3", "4"], "correctAnswer": "4", "points": 5},
    ...     {"id": "q2", "correctAnswer": "True", "points": 5},
    ... ]
    >>> score_answers(questions, {"q1": 1, "q2": " true "}, max_points=10)
    10
"""

import re
from datetime import timedelta
from typing import Any

DEFAULT_QUIZ_DURATION = timedelta(hours=1)

# Keys safe to show a student taking the quiz.
STUDENT_QUESTION_FIELDS: tuple[str, ...] = ("id", "question", "type", "options", "points")

_DURATION_PATTERN = re.compile(r"(\d+)\s*(minute|hour|day)s?", re.IGNORECASE)

_DURATION_UNITS = {
    "minute": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
}


def parse_duration(duration: str | None) -> timedelta:
    """Parse a human duration such as "45 minutes" or "2 hours".

    Args:
        duration: Free-text duration from the quiz.

    Returns:
        The duration, or one hour when the text is missing or unrecognised.
    """
    if not duration:
        return DEFAULT_QUIZ_DURATION
    match = _DURATION_PATTERN.search(duration)
    if not match:
        return DEFAULT_QUIZ_DURATION
    return int(match.group(1)) * _DURATION_UNITS[match.group(2).lower()]


def question_key(question: dict[str, Any], index: int) -> str:
    """Key under which a question's answer is submitted.

    Questions without an id are addressed by their 1-based position.
    """
    question_id = question.get("id")
    if question_id is None or question_id == "":
        return str(index + 1)
    return str(question_id)


def sanitize_questions(questions: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """Strip answer keys and explanations from questions."""
    sanitized = []
    for index, question in enumerate(questions or []):
        view = {field: question.get(field) for field in STUDENT_QUESTION_FIELDS}
        view["id"] = question_key(question, index)
        view["question"] = str(question.get("question") or "")
        sanitized.append(view)
    return sanitized


def _normalize(value: Any) -> str:
    return " ".join(str(value).split()).lower()


def _as_index(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def is_correct(answer: Any, correct_answer: Any, options: list[Any] | None = None) -> bool:
    """Compare a submitted answer with the answer key.

    Strings compare case- and whitespace-insensitively. For questions with
    options, either side may be an option index instead of the option text.
    A value that is itself the text of an option is never read as an index,
    so numeric options such as ["1", "2", "3"] compare by text only.
    """
    if answer is None or answer == "":
        return False
    if _normalize(answer) == _normalize(correct_answer):
        return True

    if not options:
        return False

    texts = {_normalize(option) for option in options}

    answer_index = _as_index(answer)
    if answer_index is not None and _normalize(answer) not in texts:
        if 0 <= answer_index < len(options):
            if _normalize(options[answer_index]) == _normalize(correct_answer):
                return True

    key_index = _as_index(correct_answer)
    if key_index is not None and _normalize(correct_answer) not in texts:
        if 0 <= key_index < len(options):
            if _normalize(options[key_index]) == _normalize(answer):
                return True

    return False


def grade_answers(
    questions: list[dict[str, Any]] | None,
    answers: dict[str, Any],
    max_points: int,
) -> tuple[list[dict[str, Any]], float]:
    """Grade each question and collect per-question results.

    A question earns its ``points`` (an equal share of ``max_points`` when
    unset) if the answer matches ``correctAnswer``. Questions without an
    answer key are left for manual grading: their ``isCorrect`` is None
    and they earn nothing here.

    Args:
        questions: Stored quiz questions.
        answers: Submitted answers keyed by question id.
        max_points: Maximum score for the quiz.

    Returns:
        Tuple of (results, earned points before rounding). Each result has
        questionId, studentAnswer, correctAnswer, isCorrect, pointsEarned,
        maxPoints and explanation.
    """
    questions = questions or []
    if not questions:
        return [], 0.0

    default_points = max(max_points, 0) / len(questions)
    results: list[dict[str, Any]] = []
    earned = 0.0

    for index, question in enumerate(questions):
        key = question_key(question, index)
        points = question.get("points")
        worth = float(points) if isinstance(points, (int, float)) else default_points
        correct_answer = question.get("correctAnswer")
        answer = answers.get(key)

        if correct_answer is None or correct_answer == "":
            correct = None
            points_earned = 0.0
        else:
            correct = is_correct(answer, correct_answer, question.get("options"))
            points_earned = worth if correct else 0.0
        earned += points_earned

        results.append(
            {
                "questionId": key,
                "studentAnswer": answer,
                "correctAnswer": correct_answer,
                "isCorrect": correct,
                "pointsEarned": points_earned,
                "maxPoints": worth,
                "explanation": question.get("explanation"),
            }
        )

    return results, earned


def cap_score(earned: float, max_points: int) -> int:
    """Round earned points and clamp them to 0..max_points."""
    if max_points <= 0:
        return 0
    return max(0, min(round(earned), max_points))


def score_answers(
    questions: list[dict[str, Any]] | None,
    answers: dict[str, Any],
    max_points: int,
) -> int:
    """Score submitted answers against the stored answer keys.

    Args:
        questions: Stored quiz questions.
        answers: Submitted answers keyed by question id.
        max_points: Maximum score for the quiz.

    Returns:
        Rounded score, capped at ``max_points``.
    """
    _, earned = grade_answers(questions, answers, max_points)
    return cap_score(earned, max_points)
