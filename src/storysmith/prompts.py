"""Consolidated LLM prompts for the story relay.

One builder per relay operation. The JSON-mode prompts spell out the
exact object shape the relay validates the reply against, so a
schema change here must be mirrored in api/schemas.py.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence

from storysmith.api.schemas import Suggestion
from storysmith.constants import (
    SIMILAR_STORY_COUNT,
    OperationMode,
    QualityLevel,
)

_LEVELS = ", ".join(f'"{level}"' for level in QualityLevel)

# ── analyze ───────────────────────────────────────────────────────

ANALYZE_PROMPT = """\
Analyze the following user story for quality, provide improvement \
suggestions, suggest acceptance criteria, and find similar historical \
stories. Return the output as a JSON object with the following structure:
{{
  "qualityScore": integer (0-100),
  "qualityLevel": one of {levels},
  "recommendedStoryPoints": integer,
  "improvementSuggestions": [{{ "id": string, "text": string, \
"example": string, "ticked": boolean }}],
  "suggestedAcceptanceCriteria": [{{ "id": string, "text": string, \
"example": string, "ticked": boolean }}],
  "similarHistoricalStories": [{{ "id": string, "title": string, \
"status": string, "featureId": string, "featureName": string, \
"matchingPercentage": integer (0-100) }}]
}}

User Story: "{story}"

Ensure all 'id' fields are unique strings within their list. For \
'ticked', default to true for suggestions and criteria that are generally \
good practice or directly applicable, and false for more advanced or \
optional ones. For 'similarHistoricalStories', generate {similar_count} \
plausible mock stories with varying matching percentages."""

# ── apply_suggestions ─────────────────────────────────────────────

APPLY_SUGGESTIONS_PROMPT = """\
Given the original user story and a list of suggestions, rewrite the user \
story to incorporate the suggestions. Suggestions of type "acceptance" are \
acceptance criteria: add them to an "Acceptance Criteria" list at the end \
of the story. Return only the new user story text, with no preamble and no \
surrounding quotes.

Original User Story: "{story}"
Suggestions: {suggestions}"""

# ── review_and_improve ────────────────────────────────────────────

REVIEW_AND_IMPROVE_PROMPT = """\
Review the following user story and improve its wording. Fix grammar, \
spelling, punctuation and clarity only. Do not add, remove or change \
requirements, roles, goals or acceptance criteria, and keep the original \
structure and formatting. Return only the improved user story text, with \
no preamble and no surrounding quotes.

User Story: "{story}"."""

# ── create_story_from_scratch ─────────────────────────────────────

CREATE_FROM_SCRATCH_PROMPT = """\
Write a complete user story from the following rough notes. Return the \
output as a JSON object with exactly this structure:
{{
  "title": string (a concise "As a <role>, I want <goal>" sentence),
  "description": string
}}

The "description" must be formatted text with these sections, in order:
Details:
<who needs this, what they want, and why>

Scope:
<bulleted list of what is in scope>

Acceptance Criteria:
<bulleted list of testable criteria>

Notes: "{story}\""""


def build_analyze_prompt(story: str) -> str:
    return ANALYZE_PROMPT.format(
        story=story,
        levels=_LEVELS,
        similar_count=SIMILAR_STORY_COUNT,
    )


def serialize_suggestions(suggestions: Sequence[Suggestion]) -> str:
    """Compact JSON for embedding ticked suggestions in a prompt."""
    return json.dumps(
        [
            {
                "id": s.id,
                "text": s.text,
                "example": s.example,
                "type": s.kind.value if s.kind else None,
            }
            for s in suggestions
        ],
        ensure_ascii=False,
    )


def build_apply_suggestions_prompt(
    story: str, suggestions: Sequence[Suggestion]
) -> str:
    return APPLY_SUGGESTIONS_PROMPT.format(
        story=story,
        suggestions=serialize_suggestions(suggestions),
    )


def build_review_prompt(story: str) -> str:
    return REVIEW_AND_IMPROVE_PROMPT.format(story=story)


def build_create_prompt(notes: str) -> str:
    return CREATE_FROM_SCRATCH_PROMPT.format(story=notes)


_BUILDERS: dict[OperationMode, Callable[[str], str]] = {
    OperationMode.ANALYZE: build_analyze_prompt,
    OperationMode.REVIEW_AND_IMPROVE: build_review_prompt,
    OperationMode.CREATE_STORY_FROM_SCRATCH: build_create_prompt,
}


def build_prompt(
    mode: OperationMode,
    story: str,
    suggestions: Sequence[Suggestion] = (),
) -> str:
    """Build the vendor prompt for a relay operation."""
    if mode == OperationMode.APPLY_SUGGESTIONS:
        return build_apply_suggestions_prompt(story, suggestions)
    return _BUILDERS[mode](story)
