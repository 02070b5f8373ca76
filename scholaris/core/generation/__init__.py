# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""AI content generation: prompt capabilities and response parsing.

Example:
    >>> from scholaris.core.generation import QuizCapability, CourseContext
    >>> capability = QuizCapability()
    >>> messages = capability.build_prompt({"weeks": weeks}, context)
    >>> quiz = capability.parse_response(llm_reply)
"""

from scholaris.core.generation.assignment import AssignmentCapability
from scholaris.core.generation.base import CourseContext, GenerationCapability
from scholaris.core.generation.quiz import QuizCapability
from scholaris.core.generation.report import PersonalReportCapability
from scholaris.core.generation.response_parser import (
    AIRefusalError,
    AIResponseError,
    AIResponseParseError,
    build_fallback_plan,
    extract_weeks,
    normalize_study_plan,
    normalize_week,
    parse_ai_response,
)
from scholaris.core.generation.study_plan import StudyPlanCapability
from scholaris.core.generation.tutoring import QuizQuestionCapability

__all__ = [
    # Capabilities
    "GenerationCapability",
    "CourseContext",
    "StudyPlanCapability",
    "QuizCapability",
    "AssignmentCapability",
    "QuizQuestionCapability",
    "PersonalReportCapability",
    # Parsing
    "AIResponseError",
    "AIRefusalError",
    "AIResponseParseError",
    "parse_ai_response",
    "extract_weeks",
    "normalize_week",
    "normalize_study_plan",
    "build_fallback_plan",
]
