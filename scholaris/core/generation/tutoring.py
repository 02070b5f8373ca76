# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Answers student questions about quiz logic and course material."""

from typing import Any

from scholaris.core.generation.base import (
    JSON_OBJECT_RULES,
    CourseContext,
    GenerationCapability,
)

ANSWER_SCHEMA = """{
  "answer": "Detailed answer to the question",
  "explanation": "Step-by-step explanation if applicable",
  "examples": ["example1", ...],
  "commonMisconceptions": ["misconception1", ...],
  "additionalResources": [
    {"title": "Resource title", "type": "reading|video|website", "description": "..."}
  ],
  "relatedTopics": ["topic1", ...]
}"""


class QuizQuestionCapability(GenerationCapability):
    """Explain a concept or quiz answer to a student.

    Params:
        question (str): The student's question.
    """

    context_label = "quiz question answer"

    @property
    def name(self) -> str:
        return "quiz_question"

    def build_user_prompt(self, params: dict[str, Any], context: CourseContext) -> str:
        return f"""Answer the following question about quiz logic and answers for this course:

{context.to_prompt_section()}

STUDENT QUESTION:
{params["question"]}

REQUIREMENTS:
Give a clear explanation with step-by-step reasoning, examples, common misconceptions to avoid and resources for further study, pitched at {context.level} level students.

FORMATTING:
The JSON response should be:
{ANSWER_SCHEMA}

{JSON_OBJECT_RULES}"""

    def parse_response(self, response: str) -> dict[str, Any]:
        return self._parse_object(response, ("answer",))
