"""Tests for StoryDraft callbacks."""

from __future__ import annotations

from storysmith.api.schemas import Suggestion
from storysmith.assistant.draft import StoryDraft
from storysmith.constants import StoryStatus


def test_accept_sets_description_and_title() -> None:
    draft = StoryDraft(title="Old", description="old text")
    draft.on_accept_changes("new text", "New title")
    assert draft.description == "new text"
    assert draft.title == "New title"


def test_accept_without_title_keeps_title() -> None:
    draft = StoryDraft(title="Keep", description="old")
    draft.on_accept_changes("new", None)
    assert draft.title == "Keep"


def test_decline_restores_or_clears() -> None:
    draft = StoryDraft(description="current")
    draft.on_decline_changes("original")
    assert draft.description == "original"
    draft.on_decline_changes(None)
    assert draft.description == ""


def test_listener_fires_only_on_change() -> None:
    seen: list[str] = []
    draft = StoryDraft(description="same", text_listener=seen.append)
    draft.edit_description("same")
    draft.on_story_update("same", [])
    draft.edit_description("different")
    assert seen == ["different"]


def test_story_update_replaces_criteria() -> None:
    draft = StoryDraft(description="text")
    criteria = [Suggestion(id="ac1", text="Listed", ticked=True)]
    draft.on_story_update("text", criteria)
    assert draft.acceptance_criteria == criteria
    # Returned list is a copy
    draft.acceptance_criteria.clear()
    assert len(draft.criteria) == 1


def test_round_trip_through_record() -> None:
    draft = StoryDraft.from_record({
        "title": "Saved cards",
        "description": "As a shopper...",
        "status": "Ready",
        "story_points": 5,
        "feature_epic": "Checkout",
        "acceptance_criteria": [
            {"id": "ac1", "text": "Listed", "ticked": True}
        ],
    })
    assert draft.status == StoryStatus.READY
    payload = draft.to_create()
    assert payload.title == "Saved cards"
    assert payload.story_points == 5
    assert payload.acceptance_criteria[0].id == "ac1"
    assert payload.sprint is None
