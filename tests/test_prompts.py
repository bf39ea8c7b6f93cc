"""Tests for relay prompt builders."""

from __future__ import annotations

import json

from storysmith.api.schemas import Suggestion
from storysmith.constants import OperationMode, SuggestionKind
from storysmith.prompts import (
    build_analyze_prompt,
    build_create_prompt,
    build_prompt,
    build_review_prompt,
    serialize_suggestions,
)

STORY = "As a shopper I want to save my card"


class TestAnalyzePrompt:
    def test_embeds_story_and_schema(self) -> None:
        prompt = build_analyze_prompt(STORY)
        assert f'User Story: "{STORY}"' in prompt
        for key in (
            "qualityScore",
            "qualityLevel",
            "recommendedStoryPoints",
            "improvementSuggestions",
            "suggestedAcceptanceCriteria",
            "similarHistoricalStories",
        ):
            assert key in prompt

    def test_lists_every_quality_level(self) -> None:
        prompt = build_analyze_prompt(STORY)
        for level in ("Poor", "Needs Improvements", "Good", "Excellent"):
            assert f'"{level}"' in prompt

    def test_requests_three_similar_stories(self) -> None:
        assert "generate 3 plausible" in build_analyze_prompt(STORY)


class TestApplySuggestionsPrompt:
    def test_serializes_suggestions_with_type(self) -> None:
        suggestions = [
            Suggestion(
                id="s1",
                text="Name the role",
                example="As a shopper",
                kind=SuggestionKind.IMPROVEMENT,
            ),
            Suggestion(
                id="ac1",
                text="Cards are listed",
                kind=SuggestionKind.ACCEPTANCE,
            ),
        ]
        data = json.loads(serialize_suggestions(suggestions))
        assert data == [
            {
                "id": "s1",
                "text": "Name the role",
                "example": "As a shopper",
                "type": "improvement",
            },
            {
                "id": "ac1",
                "text": "Cards are listed",
                "example": "",
                "type": "acceptance",
            },
        ]

    def test_build_prompt_dispatches_with_suggestions(self) -> None:
        suggestions = [Suggestion(id="s1", text="Name the role")]
        prompt = build_prompt(
            OperationMode.APPLY_SUGGESTIONS, STORY, suggestions
        )
        assert f'Original User Story: "{STORY}"' in prompt
        assert '"id": "s1"' in prompt
        assert "Acceptance Criteria" in prompt


class TestReviewPrompt:
    def test_limits_changes_to_wording(self) -> None:
        prompt = build_review_prompt(STORY)
        assert STORY in prompt
        assert "grammar" in prompt
        assert "Do not add, remove or change requirements" in prompt


class TestCreatePrompt:
    def test_requests_sectioned_description(self) -> None:
        prompt = build_create_prompt("checkout faster, saved cards")
        assert '"title"' in prompt
        assert '"description"' in prompt
        for section in ("Details:", "Scope:", "Acceptance Criteria:"):
            assert section in prompt
        assert 'Notes: "checkout faster, saved cards"' in prompt

    def test_build_prompt_dispatch(self) -> None:
        assert build_prompt(
            OperationMode.CREATE_STORY_FROM_SCRATCH, "notes"
        ) == build_create_prompt("notes")
        assert build_prompt(
            OperationMode.REVIEW_AND_IMPROVE, STORY
        ) == build_review_prompt(STORY)
