# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz generation capability.

Builds a mixed-format quiz (multiple choice, true/false, short answer,
essay) from selected weeks of a course's study plan.
"""

import json
from typing import Any

from scholaris.core.generation.base import (
    JSON_OBJECT_RULES,
    CourseContext,
    GenerationCapability,
)
from scholaris.core.generation.response_parser import AIResponseParseError

QUIZ_SCHEMA = """{
  "quizTitle": "Quiz Title",
  "description": "Quiz description",
  "totalPoints": number,
  "timeLimit": "estimated time in minutes",
  "questions": [
    {
      "id": "question_id",
      "type": "multiple_choice|true_false|short_answer|essay",
      "question": "Question text",
      "points": number,
      "difficulty": "easy|medium|hard",
      "options": ["option1", "option2", "option3", "option4"],
      "correctAnswer": "correct answer or option index",
      "explanation": "Explanation of the correct answer",
      "tags": ["topic1", "topic2"]
    }
  ]
}"""


class QuizCapability(GenerationCapability):
    """Generate a quiz covering selected study-plan weeks.

    Params:
        weeks (list[dict]): Study plan weeks the quiz must cover.
    """

    context_label = "quiz"

    @property
    def name(self) -> str:
        return "quiz"

    def build_user_prompt(self, params: dict[str, Any], context: CourseContext) -> str:
        return f"""Create a comprehensive quiz for the following course based on the study plan:

{context.to_prompt_section()}

STUDY PLAN FOR QUIZ:
{json.dumps(params["weeks"], indent=2)}

REQUIREMENTS:
Create a quiz that covers the specified weeks with:
1. Multiple choice questions (40% of total)
2. True/False questions (20% of total)
3. Short answer questions (25% of total)
4. Essay questions (15% of total)

Each question must be unambiguous, test key concepts, and include the correct answer and an explanation.

FORMATTING:
The JSON response should be:
{QUIZ_SCHEMA}

{JSON_OBJECT_RULES}"""

    def parse_response(self, response: str) -> dict[str, Any]:
        """Parse the quiz, requiring a title and a question list.

        Raises:
            AIResponseError: If the reply is unusable.
        """
        data = self._parse_object(response, ("quizTitle",))
        if not isinstance(data.get("questions"), list):
            raise AIResponseParseError(
                "Invalid quiz structure generated",
                context=self.context_label,
                raw_response=response,
            )
        return data
