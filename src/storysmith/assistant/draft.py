"""Story being edited alongside the assistant."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from storysmith.api.schemas import StoryCreate, Suggestion
from storysmith.constants import StoryStatus


class StoryView(Protocol):
    """What the assistant reads from and writes back to the story form."""

    @property
    def story_text(self) -> str: ...
    @property
    def acceptance_criteria(self) -> list[Suggestion]: ...
    def on_story_update(
        self,
        text: str,
        criteria: list[Suggestion],
        title: str | None = None,
    ) -> None: ...
    def on_story_points_update(self, points: int) -> None: ...
    def on_accept_changes(
        self, text: str, title: str | None = None
    ) -> None: ...
    def on_decline_changes(self, original: str | None) -> None: ...


class StoryDraft:
    """Form state for one story.

    ``text_listener`` is called with the new description whenever the
    description changes, so the assistant can mark its analysis stale.
    """

    def __init__(
        self,
        title: str = "",
        description: str = "",
        *,
        acceptance_criteria: list[Suggestion] | None = None,
        story_points: int | None = None,
        status: StoryStatus = StoryStatus.DRAFT,
        feature_epic: str | None = None,
        sprint: str | None = None,
        text_listener: Callable[[str], None] | None = None,
    ) -> None:
        self.title = title
        self.description = description
        self.criteria: list[Suggestion] = list(acceptance_criteria or [])
        self.story_points = story_points
        self.status = status
        self.feature_epic = feature_epic
        self.sprint = sprint
        self.text_listener = text_listener

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> StoryDraft:
        return cls(
            title=record.get("title", ""),
            description=record.get("description", ""),
            acceptance_criteria=[
                Suggestion.model_validate(c)
                for c in record.get("acceptance_criteria") or []
            ],
            story_points=record.get("story_points"),
            status=StoryStatus(record.get("status", StoryStatus.DRAFT)),
            feature_epic=record.get("feature_epic"),
            sprint=record.get("sprint"),
        )

    @property
    def story_text(self) -> str:
        return self.description

    @property
    def acceptance_criteria(self) -> list[Suggestion]:
        return list(self.criteria)

    def edit_description(self, text: str) -> None:
        """User typed into the description field."""
        self._set_description(text)

    def _set_description(self, text: str) -> None:
        changed = text != self.description
        self.description = text
        if changed and self.text_listener is not None:
            self.text_listener(text)

    # Callbacks invoked by the assistant

    def on_story_update(
        self,
        text: str,
        criteria: list[Suggestion],
        title: str | None = None,
    ) -> None:
        self._set_description(text)
        self.criteria = list(criteria)
        if title:
            self.title = title

    def on_story_points_update(self, points: int) -> None:
        self.story_points = points

    def on_accept_changes(self, text: str, title: str | None = None) -> None:
        self._set_description(text)
        if title:
            self.title = title

    def on_decline_changes(self, original: str | None) -> None:
        self._set_description(original if original is not None else "")

    def to_create(self) -> StoryCreate:
        """Payload for saving this draft as a new story."""
        return StoryCreate(
            title=self.title,
            description=self.description,
            status=self.status,
            feature_epic=self.feature_epic or None,
            sprint=self.sprint or None,
            story_points=self.story_points,
            acceptance_criteria=self.criteria,
        )
