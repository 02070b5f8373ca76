# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Weekly study plan generation capability.

Produces one record per course week with objectives, topics, readings,
activities, assessments and outcomes. Replies are normalized so every
week carries every field.
"""

from typing import Any

from scholaris.core.generation.base import (
    JSON_ARRAY_RULES,
    CourseContext,
    GenerationCapability,
)
from scholaris.core.generation.response_parser import (
    normalize_study_plan,
    parse_ai_response,
)

WEEK_SCHEMA = """{
  "weekNumber": number,
  "title": "Week X: [Topic Title]",
  "objectives": ["objective1", "objective2", ...],
  "topics": [
    {"title": "Topic Title", "subtopics": ["subtopic1", ...], "difficulty": "beginner|intermediate|advanced"}
  ],
  "readings": [
    {"title": "Reading Title", "type": "textbook|article|paper|online", "pages": "chapters", "priority": "required|recommended"}
  ],
  "activities": [
    {"title": "Activity Title", "type": "assignment|lab|project|discussion", "description": "...", "timeEstimate": "hours", "points": number}
  ],
  "assessments": [
    {"type": "quiz|exam|project|participation", "description": "...", "weight": "percentage", "criteria": ["criterion1", ...]}
  ],
  "outcomes": ["outcome1", "outcome2", ...]
}"""


class StudyPlanCapability(GenerationCapability):
    """Generate a week-by-week study plan for a course.

    Params:
        total_weeks (int): Number of weeks in the course.
        start_date (date): First day of the course.
        end_date (date): Last day of the course.
        current_week (int): Week the course is in, 0 before it starts.
    """

    context_label = "study plan"

    @property
    def name(self) -> str:
        return "study_plan"

    @property
    def description(self) -> str:
        return "Creates a progressive weekly study plan for a course"

    def build_user_prompt(self, params: dict[str, Any], context: CourseContext) -> str:
        weeks = params["total_weeks"]
        return f"""Create a comprehensive weekly study plan for the following course:

COURSE INFORMATION:
- Course Name: {context.name}
- Course Code: {context.code}
- Description: {context.description}
- Academic Level: {context.level}
- Department: {context.department}
- Credits: {context.credits}
- Duration: {weeks} weeks (from {params["start_date"]} to {params["end_date"]})
- Prerequisites: {context.prerequisites}
- Current Week: {params.get("current_week", 0)}
- Instructor: {context.instructor}

REQUIREMENTS:
Create a detailed weekly study plan that progressively builds knowledge and skills. Each week should include:
1. Clear, measurable learning objectives (3-5 per week)
2. Specific topics and subtopics to be covered
3. Required readings and supplementary materials
4. Practical assignments and hands-on activities
5. Assessment methods and criteria
6. Expected learning outcomes and competencies

FORMATTING:
Respond with a JSON array of {weeks} week objects (not wrapped in an object). Each week object must look like:
{WEEK_SCHEMA}

{JSON_ARRAY_RULES}

Ensure the plan is progressive, balanced in workload, appropriate for {context.level} level students and realistic for {context.credits} credit hours."""

    def parse_response(self, response: str) -> list[dict[str, Any]]:
        """Parse and normalize the week list.

        Raises:
            AIResponseError: If no usable week list is found.
        """
        return normalize_study_plan(parse_ai_response(response, self.context_label))
