# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Personal performance report capability.

Summarizes a student's quiz attempts in a course into strengths,
knowledge gaps and recommendations.
"""

import json
from typing import Any

from scholaris.core.generation.base import (
    JSON_OBJECT_RULES,
    CourseContext,
    GenerationCapability,
)

REPORT_SCHEMA = """{
  "studentId": "%(student_id)s",
  "courseId": "%(course_id)s",
  "overallScore": "percentage or grade",
  "totalAttempts": number,
  "performanceSummary": "Overall performance summary",
  "strengths": ["strength1", ...],
  "areasForImprovement": ["area1", ...],
  "knowledgeGaps": [
    {"topic": "Topic name", "description": "...", "severity": "low|medium|high", "recommendations": ["rec1", ...]}
  ],
  "recommendations": [
    {"category": "study|practice|resources|time_management", "title": "...", "description": "...", "priority": "high|medium|low", "estimatedTime": "..."}
  ],
  "studyPlan": [
    {"week": number, "focus": "What to focus on", "activities": ["activity1", ...], "resources": ["resource1", ...]}
  ],
  "nextSteps": ["step1", ...],
  "estimatedImprovement": "Expected improvement with recommendations"
}"""


class PersonalReportCapability(GenerationCapability):
    """Generate a personal report from a student's quiz attempts.

    Params:
        student_id (str): Student the report is for.
        attempts (list[dict]): Serialized quiz attempts, newest first.
    """

    context_label = "personal report"

    @property
    def name(self) -> str:
        return "personal_report"

    def build_user_prompt(self, params: dict[str, Any], context: CourseContext) -> str:
        schema = REPORT_SCHEMA % {
            "student_id": params["student_id"],
            "course_id": context.course_id,
        }
        return f"""Generate a detailed personal report for a student based on their quiz performance:

{context.to_prompt_section()}

STUDENT QUIZ PERFORMANCE:
{json.dumps(params["attempts"], indent=2, default=str)}

REQUIREMENTS:
Summarize overall performance, strengths and areas of improvement, identify knowledge gaps, and give specific, actionable recommendations and study strategies.
Keep the tone encouraging and constructive.

FORMATTING:
The JSON response should be:
{schema}

{JSON_OBJECT_RULES}"""

    def parse_response(self, response: str) -> dict[str, Any]:
        return self._parse_object(response, ("performanceSummary", "recommendations"))
