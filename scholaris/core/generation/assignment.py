# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment generation capability."""

import json
from typing import Any

from scholaris.core.generation.base import (
    JSON_OBJECT_RULES,
    CourseContext,
    GenerationCapability,
)

ASSIGNMENT_SCHEMA = """{
  "assignmentTitle": "Assignment Title",
  "description": "Detailed assignment description",
  "objectives": ["objective1", ...],
  "totalPoints": number,
  "estimatedTime": "estimated time in hours",
  "instructions": [
    {"step": number, "title": "Step Title", "description": "...", "requirements": ["requirement1", ...]}
  ],
  "deliverables": [
    {"type": "document|presentation|code|report|other", "description": "...", "format": "...", "weight": "percentage"}
  ],
  "rubric": [
    {"criterion": "Criterion name", "excellent": "...", "good": "...", "satisfactory": "...", "needsImprovement": "...", "points": number}
  ],
  "resources": [
    {"title": "Resource title", "type": "reading|video|tool|website", "url": "...", "description": "..."}
  ]
}"""


class AssignmentCapability(GenerationCapability):
    """Generate an assignment covering selected study-plan weeks.

    Params:
        weeks (list[dict]): Study plan weeks the assignment must cover.
    """

    context_label = "assignment"

    @property
    def name(self) -> str:
        return "assignment"

    def build_user_prompt(self, params: dict[str, Any], context: CourseContext) -> str:
        return f"""Create a comprehensive assignment for the following course based on the study plan:

{context.to_prompt_section()}

STUDY PLAN FOR ASSIGNMENT:
{json.dumps(params["weeks"], indent=2)}

REQUIREMENTS:
Include clear objectives, detailed instructions, assessment criteria with a rubric, expected deliverables and time estimates.
The assignment should be appropriate for {context.level} level students and encourage critical thinking.

FORMATTING:
The JSON response should be:
{ASSIGNMENT_SCHEMA}

{JSON_OBJECT_RULES}"""

    def parse_response(self, response: str) -> dict[str, Any]:
        return self._parse_object(response, ("assignmentTitle", "description"))
