# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Base definitions for AI generation capabilities.

A capability knows how to:
1. Build prompt messages for one kind of content (build_prompt)
2. Turn the model's reply into a validated payload (parse_response)

Capabilities do NOT call the LLM. GenerationService sends the prompt and
hands the reply back to the capability.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from scholaris.core.generation.response_parser import (
    AIResponseParseError,
    parse_ai_response,
)

JSON_OBJECT_RULES = """CRITICAL: You must respond with ONLY a valid JSON object.
- Do NOT include any markdown formatting (code blocks, etc.)
- Do NOT include any explanatory text before or after the JSON
- The response must start with { and end with }
- The response must be parseable as JSON"""

JSON_ARRAY_RULES = """CRITICAL: You must respond with ONLY a valid JSON array.
- Do NOT include any markdown formatting (code blocks, etc.)
- Do NOT include any explanatory text before or after the JSON
- The response must start with [ and end with ]
- The response must be parseable as JSON"""


class CourseContext(BaseModel):
    """Course facts shared by every generation prompt.

    Attributes:
        course_id: Course identifier.
        name: Course name.
        code: Course code.
        description: Course description.
        level: Academic level (e.g. "undergraduate").
        department: Department name.
        credits: Credit hours.
        instructor: Instructor display name.
        prerequisites: Comma separated prerequisite course names.
    """

    course_id: str
    name: str
    code: str = "N/A"
    description: str = ""
    level: str = ""
    department: str = "General"
    credits: int | None = None
    instructor: str = "TBA"
    prerequisites: str = "None"

    @classmethod
    def from_course(cls, course: Any) -> "CourseContext":
        """Build the context from a Course row with relations loaded.

        Args:
            course: Course model with department, instructor.profile
                and prerequisites loaded.

        Returns:
            CourseContext with display fallbacks applied.
        """
        instructor = "TBA"
        profile = getattr(course.instructor, "profile", None) if course.instructor else None
        if profile is not None and profile.first_name and profile.last_name:
            instructor = f"{profile.first_name} {profile.last_name}"

        prerequisites = ", ".join(p.name for p in getattr(course, "prerequisites", None) or [])

        return cls(
            course_id=course.id,
            name=course.name,
            code=course.code or "N/A",
            description=course.description or "",
            level=course.level or "",
            department=course.department.name if course.department else "General",
            credits=course.credits,
            instructor=instructor,
            prerequisites=prerequisites or "None",
        )

    def to_prompt_section(self) -> str:
        """Format the course facts for prompt inclusion."""
        return "\n".join(
            [
                "COURSE INFORMATION:",
                f"- Course Name: {self.name}",
                f"- Course Code: {self.code}",
                f"- Description: {self.description}",
                f"- Academic Level: {self.level}",
                f"- Department: {self.department}",
                f"- Instructor: {self.instructor}",
            ]
        )


class GenerationCapability(ABC):
    """Abstract base class for generation capabilities.

    Example:
        class SummaryCapability(GenerationCapability):
            name = "summary"
            context_label = "summary"

            def build_user_prompt(self, params, context):
                return f"Summarize {context.name}"

            def parse_response(self, response):
                return self._parse_object(response, ("summary",))
    """

    #: Used in parse error messages, e.g. "quiz".
    context_label: str = "response"

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique name of this capability."""
        ...

    @property
    def description(self) -> str:
        """Return a description of what this capability does."""
        return ""

    def build_system_prompt(self, context: CourseContext) -> str:
        """Build the system prompt shared by all capabilities."""
        return (
            "You are an expert educational content creator specializing in "
            f"{context.department} courses."
        )

    @abstractmethod
    def build_user_prompt(self, params: dict[str, Any], context: CourseContext) -> str:
        """Build the user prompt for this capability.

        Args:
            params: Capability-specific input parameters.
            context: Course facts.

        Returns:
            Prompt text.
        """
        ...

    def build_prompt(
        self,
        params: dict[str, Any],
        context: CourseContext,
    ) -> list[dict[str, str]]:
        """Build the prompt messages for the LLM.

        Args:
            params: Capability-specific input parameters.
            context: Course facts.

        Returns:
            System and user messages.
        """
        return [
            {"role": "system", "content": self.build_system_prompt(context)},
            {"role": "user", "content": self.build_user_prompt(params, context)},
        ]

    @abstractmethod
    def parse_response(self, response: str) -> Any:
        """Parse the LLM reply into a validated payload.

        Raises:
            AIResponseError: If the reply is unusable.
        """
        ...

    def _parse_object(self, response: str, required: tuple[str, ...]) -> dict[str, Any]:
        """Parse a JSON object reply and check required keys are truthy.

        Args:
            response: Raw LLM reply.
            required: Keys that must be present and non-empty.

        Returns:
            The decoded object.

        Raises:
            AIResponseParseError: If the reply is not an object or lacks a key.
        """
        data = parse_ai_response(response, self.context_label)
        if not isinstance(data, dict) or any(not data.get(key) for key in required):
            raise AIResponseParseError(
                f"Invalid {self.context_label} structure generated",
                context=self.context_label,
                raw_response=response,
            )
        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
