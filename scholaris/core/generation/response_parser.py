# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Recovery of JSON payloads from free-text LLM replies.

Language models asked for "JSON only" still wrap their answers in markdown
fences, prepend prose, or refuse outright. This module recovers the JSON
value with a chain of extraction strategies, each of which yields candidate
substrings. The first candidate that decodes to an object or array wins; a
candidate that fails to decode falls through to the next one.

Strategies, in order:
1. direct: the whole reply
2. fenced: the contents of ```json ... ``` (or bare ```) blocks
3. greedy: first ``[`` to last ``]``, then first ``{`` to last ``}``
4. balanced: bracket-matched spans, honouring string literals
5. trimmed: fence markers removed and text outside the outermost
   brackets dropped

When nothing decodes, replies that read like an apology or refusal raise
AIRefusalError; anything else raises AIResponseParseError.

The module also normalizes study-plan payloads into a list of week
records with every field present.

Example:
    >>> parse_ai_response('Sure! ```json\\n[{"weekNumber": 1}]\\n```', "study plan")
    [{'weekNumber': 1}]
"""

import json
import logging
import re
from collections.abc import Callable, Iterator
from typing import Any

logger = logging.getLogger(__name__)

REFUSAL_INDICATORS: tuple[str, ...] = (
    "i apologize",
    "cannot generate",
    "try again",
    "error",
    "sorry",
    "unable to",
    "not available",
)

REFUSAL_MESSAGE = "AI model is currently unavailable. Please try again later."

DEFAULT_WEEK_OBJECTIVES: tuple[str, ...] = (
    "Complete assigned readings",
    "Participate in discussions",
    "Complete assignments",
)

WEEK_LIST_FIELDS: tuple[str, ...] = (
    "topics",
    "readings",
    "activities",
    "assessments",
    "outcomes",
)

# Keys that wrap the week array in object-shaped replies, in priority order.
WEEK_CONTAINER_KEYS: tuple[str, ...] = ("weeks", "studyPlan", "plan")

# Any of these on a bare object means the model returned a single week.
SINGLE_WEEK_KEYS: tuple[str, ...] = ("weekNumber", "title", "objectives")

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_FENCE_MARKER_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)

_CLOSERS = {"[": "]", "{": "}"}


class AIResponseError(Exception):
    """Base exception for unusable LLM replies.

    Attributes:
        message: Error description.
        context: What was being generated (e.g. "study plan").
        raw_response: The reply that could not be used.
    """

    def __init__(
        self,
        message: str,
        context: str | None = None,
        raw_response: str | None = None,
    ):
        self.message = message
        self.context = context
        self.raw_response = raw_response
        super().__init__(self.message)


class AIRefusalError(AIResponseError):
    """The model apologised or declined instead of producing content."""


class AIResponseParseError(AIResponseError):
    """The reply contained no recoverable JSON of the expected shape."""


_NOT_JSON = object()


def _decode(candidate: str) -> Any:
    """Decode a candidate, returning _NOT_JSON unless it is an object or array."""
    candidate = candidate.strip()
    if not candidate:
        return _NOT_JSON
    try:
        value = json.loads(candidate)
    except ValueError:
        return _NOT_JSON
    if isinstance(value, (dict, list)):
        return value
    return _NOT_JSON


def _direct(text: str) -> Iterator[str]:
    yield text


def _fenced(text: str) -> Iterator[str]:
    for match in _FENCE_PATTERN.finditer(text):
        yield match.group(1)


def _greedy(text: str) -> Iterator[str]:
    for pattern in (_ARRAY_PATTERN, _OBJECT_PATTERN):
        match = pattern.search(text)
        if match:
            yield match.group(0)


def _balanced_span(text: str, start: int) -> str | None:
    """Return the bracket-balanced span opening at ``start``, if any.

    Brackets inside JSON string literals are ignored.
    """
    expected: list[str] = []
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            expected.append(_CLOSERS[char])
        elif char in ("]", "}"):
            if not expected or expected.pop() != char:
                return None
            if not expected:
                return text[start : index + 1]
    return None


def _balanced(text: str) -> Iterator[str]:
    for index, char in enumerate(text):
        if char in _CLOSERS:
            span = _balanced_span(text, index)
            if span is not None:
                yield span


def _trimmed(text: str) -> Iterator[str]:
    cleaned = _FENCE_MARKER_PATTERN.sub("", text).strip()

    starts = [pos for pos in (cleaned.find("["), cleaned.find("{")) if pos != -1]
    ends = [pos for pos in (cleaned.rfind("]"), cleaned.rfind("}")) if pos != -1]
    if not starts or not ends:
        return

    start, end = min(starts), max(ends)
    if end <= start:
        return

    candidate = cleaned[start : end + 1]
    if _CLOSERS[candidate[0]] == candidate[-1]:
        yield candidate


STRATEGIES: tuple[tuple[str, Callable[[str], Iterator[str]]], ...] = (
    ("direct", _direct),
    ("fenced", _fenced),
    ("greedy", _greedy),
    ("balanced", _balanced),
    ("trimmed", _trimmed),
)


def is_refusal(text: str) -> bool:
    """Check whether a reply reads like an apology or refusal.

    Args:
        text: Raw LLM reply.

    Returns:
        True if any refusal indicator appears (case-insensitive).
    """
    lowered = text.lower()
    return any(indicator in lowered for indicator in REFUSAL_INDICATORS)


def parse_ai_response(text: str | None, context: str = "response") -> Any:
    """Recover a JSON object or array from an LLM reply.

    Args:
        text: Raw LLM reply.
        context: What was being generated, used in error messages.

    Returns:
        The decoded dict or list.

    Raises:
        AIRefusalError: If no JSON was found and the reply looks like a refusal.
        AIResponseParseError: If no JSON was found otherwise.
    """
    if text is None or not text.strip():
        raise AIResponseParseError(
            f"Empty response from AI model for {context}. Please try again.",
            context=context,
            raw_response=text,
        )

    for strategy_name, strategy in STRATEGIES:
        for candidate in strategy(text):
            value = _decode(candidate)
            if value is not _NOT_JSON:
                logger.debug(
                    "Parsed AI response: context=%s, strategy=%s, type=%s",
                    context,
                    strategy_name,
                    type(value).__name__,
                )
                return value

    if is_refusal(text):
        logger.warning(
            "AI model declined to produce %s: %s", context, text[:200]
        )
        raise AIRefusalError(REFUSAL_MESSAGE, context=context, raw_response=text)

    logger.warning(
        "No JSON found in AI response: context=%s, length=%d", context, len(text)
    )
    raise AIResponseParseError(
        f"Invalid JSON response from AI model for {context}. Please try again.",
        context=context,
        raw_response=text,
    )


def extract_weeks(parsed: Any) -> list[Any]:
    """Locate the list of week records in a parsed study-plan reply.

    Args:
        parsed: Value returned by parse_ai_response().

    Returns:
        The non-empty list of week entries (not yet normalized).

    Raises:
        AIResponseParseError: If no week list can be found or it is empty.
    """
    if isinstance(parsed, list):
        weeks = parsed
    elif isinstance(parsed, dict):
        weeks = None
        for key in WEEK_CONTAINER_KEYS:
            if isinstance(parsed.get(key), list):
                weeks = parsed[key]
                break

        if weeks is None and "weekNumber" in parsed:
            weeks = [parsed]

        if weeks is None:
            list_keys = [key for key, value in parsed.items() if isinstance(value, list)]
            if list_keys:
                logger.debug("Using array property as study plan: %s", list_keys[0])
                weeks = parsed[list_keys[0]]
            elif any(parsed.get(key) for key in SINGLE_WEEK_KEYS):
                weeks = [parsed]
            else:
                raise AIResponseParseError(
                    "Study plan must be an array of weeks or contain a weeks array",
                    context="study plan",
                )
    else:
        raise AIResponseParseError(
            "Study plan must be an array of weeks",
            context="study plan",
        )

    if not weeks:
        raise AIResponseParseError("Study plan cannot be empty", context="study plan")

    return weeks


def default_week(week_number: int) -> dict[str, Any]:
    """Build a placeholder week with every field present.

    Args:
        week_number: 1-based week number.

    Returns:
        Week record with default title and objectives.
    """
    week: dict[str, Any] = {
        "weekNumber": week_number,
        "title": f"Week {week_number}: Course Content",
        "objectives": list(DEFAULT_WEEK_OBJECTIVES),
    }
    for field_name in WEEK_LIST_FIELDS:
        week[field_name] = []
    return week


def normalize_week(week: Any, index: int) -> dict[str, Any]:
    """Back-fill missing fields on a week record.

    Args:
        week: Week entry from the model (non-dicts are replaced).
        index: 0-based position in the plan.

    Returns:
        A new dict with weekNumber, title, objectives and all list fields.
    """
    if not isinstance(week, dict):
        return default_week(index + 1)

    normalized = dict(week)

    if not normalized.get("weekNumber"):
        normalized["weekNumber"] = index + 1

    if not normalized.get("title"):
        normalized["title"] = f"Week {normalized['weekNumber']}: Course Content"

    if not isinstance(normalized.get("objectives"), list):
        normalized["objectives"] = list(DEFAULT_WEEK_OBJECTIVES)

    for field_name in WEEK_LIST_FIELDS:
        if not isinstance(normalized.get(field_name), list):
            normalized[field_name] = []

    return normalized


def normalize_study_plan(parsed: Any) -> list[dict[str, Any]]:
    """Turn a parsed study-plan reply into normalized week records.

    Args:
        parsed: Value returned by parse_ai_response().

    Returns:
        List of complete week dicts.

    Raises:
        AIResponseParseError: If the reply has no usable week list.
    """
    return [normalize_week(week, index) for index, week in enumerate(extract_weeks(parsed))]


def build_fallback_plan(total_weeks: int) -> list[dict[str, Any]]:
    """Build the static plan used when generation fails.

    Args:
        total_weeks: Number of weeks in the course.

    Returns:
        ``total_weeks`` default week records.
    """
    return [default_week(number) for number in range(1, total_weeks + 1)]
