# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for LLM response parsing.

Tests cover:
- Each extraction strategy
- Fall-through between strategies
- Refusal detection
- Study plan week extraction and normalization
"""

import pytest

from scholaris.core.generation.response_parser import (
    DEFAULT_WEEK_OBJECTIVES,
    REFUSAL_MESSAGE,
    WEEK_LIST_FIELDS,
    AIRefusalError,
    AIResponseError,
    AIResponseParseError,
    build_fallback_plan,
    extract_weeks,
    is_refusal,
    normalize_study_plan,
    normalize_week,
    parse_ai_response,
)


# =============================================================================
# parse_ai_response
# =============================================================================


class TestParseAIResponse:
    """Tests for JSON recovery from free text."""

    def test_direct_json_array(self) -> None:
        """Test a clean JSON array is decoded as-is."""
        assert parse_ai_response('[{"weekNumber": 1}]') == [{"weekNumber": 1}]

    def test_direct_json_object(self) -> None:
        """Test a clean JSON object is decoded as-is."""
        assert parse_ai_response('  {"answer": "42"}  ') == {"answer": "42"}

    def test_markdown_fence_with_language(self) -> None:
        """Test JSON inside a ```json fence surrounded by prose."""
        text = 'Here is your plan:\n```json\n[{"weekNumber": 1}]\n```\nGood luck!'

        assert parse_ai_response(text) == [{"weekNumber": 1}]

    def test_bare_markdown_fence(self) -> None:
        """Test JSON inside a fence without a language tag."""
        text = '```\n{"quizTitle": "Loops"}\n```'

        assert parse_ai_response(text) == {"quizTitle": "Loops"}

    def test_greedy_array_with_surrounding_prose(self) -> None:
        """Test prose before and after an array is ignored."""
        text = 'Sure, the weeks are [{"weekNumber": 1}, {"weekNumber": 2}] as requested.'

        assert parse_ai_response(text) == [{"weekNumber": 1}, {"weekNumber": 2}]

    def test_greedy_object_with_surrounding_prose(self) -> None:
        """Test prose around an object without nested arrays."""
        text = 'Result: {"answer": "use a loop"} Hope this helps.'

        assert parse_ai_response(text) == {"answer": "use a loop"}

    def test_broken_fence_falls_through_to_later_strategy(self) -> None:
        """Test an invalid fenced block does not stop later strategies."""
        text = '```json\n{not valid}\n```\nCorrected: {"answer": "ok"}'

        assert parse_ai_response(text) == {"answer": "ok"}

    def test_balanced_span_between_two_values(self) -> None:
        """Test bracket matching finds the first complete value."""
        text = 'first {"a": 1} and then {"b": 2}'

        assert parse_ai_response(text) == {"a": 1}

    def test_balanced_span_ignores_brackets_in_strings(self) -> None:
        """Test brackets inside string literals do not end the span."""
        text = 'noise ] {"title": "Arrays [part 1]", "note": "use \\"}\\" carefully"} trailing }'

        result = parse_ai_response(text)

        assert result == {"title": "Arrays [part 1]", "note": 'use "}" carefully'}

    def test_scalar_json_is_not_accepted(self) -> None:
        """Test a bare JSON scalar is not treated as a result."""
        with pytest.raises(AIResponseParseError):
            parse_ai_response("42")

    def test_empty_text_is_parse_error(self) -> None:
        """Test empty input raises a parse error."""
        with pytest.raises(AIResponseParseError) as exc_info:
            parse_ai_response("   ", "quiz")

        assert exc_info.value.context == "quiz"

    def test_none_text_is_parse_error(self) -> None:
        """Test None input raises a parse error."""
        with pytest.raises(AIResponseParseError):
            parse_ai_response(None)

    def test_refusal_raises_refusal_error(self) -> None:
        """Test apology text without JSON is reported as a refusal."""
        text = "I apologize, but I cannot generate a study plan right now."

        with pytest.raises(AIRefusalError) as exc_info:
            parse_ai_response(text, "study plan")

        assert exc_info.value.message == REFUSAL_MESSAGE
        assert exc_info.value.raw_response == text

    def test_plain_prose_raises_parse_error(self) -> None:
        """Test non-JSON, non-refusal text raises a parse error."""
        with pytest.raises(AIResponseParseError) as exc_info:
            parse_ai_response("Week one covers variables.", "study plan")

        assert "study plan" in exc_info.value.message
        assert not isinstance(exc_info.value, AIRefusalError)

    def test_errors_share_base_class(self) -> None:
        """Test both failures derive from AIResponseError."""
        assert issubclass(AIRefusalError, AIResponseError)
        assert issubclass(AIResponseParseError, AIResponseError)

    def test_json_wins_over_refusal_words(self) -> None:
        """Test a reply containing JSON is parsed even if it says sorry."""
        text = 'Sorry for the delay! {"answer": "recursion"}'

        assert parse_ai_response(text) == {"answer": "recursion"}


class TestIsRefusal:
    """Tests for refusal detection."""

    @pytest.mark.parametrize(
        "text",
        [
            "Sorry, that is not possible.",
            "I am UNABLE TO comply.",
            "The model is not available.",
            "Please try again later",
        ],
    )
    def test_refusal_indicators(self, text: str) -> None:
        """Test each indicator is matched case-insensitively."""
        assert is_refusal(text) is True

    def test_normal_text(self) -> None:
        """Test ordinary prose is not a refusal."""
        assert is_refusal("Here is the plan for week one.") is False


# =============================================================================
# Study plan helpers
# =============================================================================


class TestExtractWeeks:
    """Tests for locating the week array."""

    def test_list_is_returned(self) -> None:
        """Test a list is used directly."""
        weeks = [{"weekNumber": 1}]

        assert extract_weeks(weeks) is weeks

    @pytest.mark.parametrize("key", ["weeks", "studyPlan", "plan"])
    def test_container_keys(self, key: str) -> None:
        """Test known wrapper keys are unwrapped."""
        assert extract_weeks({key: [{"weekNumber": 1}]}) == [{"weekNumber": 1}]

    def test_container_key_priority(self) -> None:
        """Test weeks wins over other list keys."""
        parsed = {"plan": [{"weekNumber": 9}], "weeks": [{"weekNumber": 1}]}

        assert extract_weeks(parsed) == [{"weekNumber": 1}]

    def test_first_list_valued_key(self) -> None:
        """Test an unknown wrapper key holding a list is used."""
        parsed = {"course": "CS101", "schedule": [{"weekNumber": 1}]}

        assert extract_weeks(parsed) == [{"weekNumber": 1}]

    def test_single_week_object_is_wrapped(self) -> None:
        """Test a lone week object becomes a one-week plan."""
        parsed = {"weekNumber": 1, "title": "Basics"}

        assert extract_weeks(parsed) == [parsed]

    def test_single_week_with_list_fields(self) -> None:
        """Test a lone week whose objectives are a list is not unwrapped."""
        parsed = {"weekNumber": 1, "title": "Intro", "objectives": ["x"], "topics": []}

        assert extract_weeks(parsed) == [parsed]

    def test_unrecognised_object(self) -> None:
        """Test an object with no week data is rejected."""
        with pytest.raises(AIResponseParseError):
            extract_weeks({"message": "hello"})

    def test_empty_plan(self) -> None:
        """Test an empty week list is rejected."""
        with pytest.raises(AIResponseParseError, match="Study plan cannot be empty"):
            extract_weeks({"weeks": []})


class TestNormalizeWeek:
    """Tests for week back-filling."""

    def test_missing_fields_are_filled(self) -> None:
        """Test an empty week gets every field."""
        week = normalize_week({}, 2)

        assert week["weekNumber"] == 3
        assert week["title"] == "Week 3: Course Content"
        assert week["objectives"] == list(DEFAULT_WEEK_OBJECTIVES)
        for field_name in WEEK_LIST_FIELDS:
            assert week[field_name] == []

    def test_existing_fields_are_kept(self) -> None:
        """Test present values are not overwritten."""
        original = {
            "weekNumber": 5,
            "title": "Recursion",
            "objectives": ["Write recursive functions"],
            "topics": [{"title": "Base cases"}],
        }

        week = normalize_week(original, 0)

        assert week["weekNumber"] == 5
        assert week["title"] == "Recursion"
        assert week["objectives"] == ["Write recursive functions"]
        assert week["topics"] == [{"title": "Base cases"}]
        assert week["readings"] == []

    def test_non_list_fields_are_replaced(self) -> None:
        """Test wrongly typed list fields become empty lists."""
        week = normalize_week({"readings": "chapter 1", "objectives": "learn"}, 0)

        assert week["readings"] == []
        assert week["objectives"] == list(DEFAULT_WEEK_OBJECTIVES)

    def test_input_is_not_mutated(self) -> None:
        """Test normalization returns a new dict."""
        original = {"title": "Loops"}

        normalize_week(original, 0)

        assert original == {"title": "Loops"}

    def test_non_dict_entry_becomes_default_week(self) -> None:
        """Test a string entry is replaced by a default week."""
        week = normalize_week("week one", 0)

        assert week["weekNumber"] == 1
        assert week["title"] == "Week 1: Course Content"


class TestNormalizeStudyPlan:
    """Tests for the full normalization pipeline."""

    def test_parsed_reply_is_normalized(self) -> None:
        """Test a fenced reply becomes complete week records."""
        parsed = parse_ai_response('```json\n{"weeks": [{"title": "Intro"}, {}]}\n```')

        plan = normalize_study_plan(parsed)

        assert [week["weekNumber"] for week in plan] == [1, 2]
        assert plan[0]["title"] == "Intro"
        assert plan[1]["title"] == "Week 2: Course Content"
        assert all(set(WEEK_LIST_FIELDS) <= set(week) for week in plan)


class TestBuildFallbackPlan:
    """Tests for the static fallback plan."""

    def test_one_week_per_course_week(self) -> None:
        """Test the plan has the requested number of default weeks."""
        plan = build_fallback_plan(4)

        assert len(plan) == 4
        assert [week["weekNumber"] for week in plan] == [1, 2, 3, 4]
        assert plan[3]["title"] == "Week 4: Course Content"
        assert plan[0]["objectives"] == list(DEFAULT_WEEK_OBJECTIVES)

    def test_weeks_are_independent(self) -> None:
        """Test fallback weeks do not share list objects."""
        plan = build_fallback_plan(2)

        plan[0]["topics"].append("x")

        assert plan[1]["topics"] == []
