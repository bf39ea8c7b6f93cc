"""In-memory fake repositories and relay doubles for testing.

Dict-backed implementations of the repository protocols, plus a
scripted relay client for exercising the assistant controller.
No SQLAlchemy, no I/O; instant operations for unit tests.
"""

# pyright: reportUnusedFunction=false

from __future__ import annotations

import asyncio
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from storysmith.constants import (
    DEFAULT_STORY_SORT,
    STORY_SORT_FIELDS,
    OperationMode,
)
from storysmith.models.profile import Profile
from storysmith.models.story import UserStory
from storysmith.repositories.protocols import StoryQuery


class FakeStoryRepository:
    """Dict-backed StoryRepository for testing."""

    def __init__(self) -> None:
        self._store: dict[str, UserStory] = {}
        self._clock = datetime.now(UTC)

    def _tick(self) -> datetime:
        # Strictly increasing timestamps keep created_at sorts stable
        self._clock += timedelta(milliseconds=1)
        return self._clock

    async def get(self, user_id: str, story_id: str) -> UserStory | None:
        story = self._store.get(story_id)
        if story is None or story.user_id != user_id:
            return None
        return story

    async def list_for_user(
        self, user_id: str, query: StoryQuery
    ) -> list[UserStory]:
        stories = [
            s for s in self._store.values() if s.user_id == user_id
        ]
        if query.status:
            stories = [s for s in stories if s.status == query.status]
        if query.feature_epic:
            needle = query.feature_epic.lower()
            stories = [
                s
                for s in stories
                if needle in (s.feature_epic or "").lower()
            ]
        sort_name = (
            query.sort_by
            if query.sort_by in STORY_SORT_FIELDS
            else DEFAULT_STORY_SORT
        )
        present = [s for s in stories if getattr(s, sort_name) is not None]
        missing = [s for s in stories if getattr(s, sort_name) is None]
        present.sort(
            key=lambda s: getattr(s, sort_name),
            reverse=not query.ascending,
        )
        # NULLs sort first ascending, last descending (SQLite order)
        return missing + present if query.ascending else present + missing

    async def create(self, story: UserStory) -> UserStory:
        if not story.id:
            story.id = str(uuid.uuid4())
        if story.acceptance_criteria is None:
            story.acceptance_criteria = []
        now = self._tick()
        story.created_at = now
        story.updated_at = now
        self._store[story.id] = story
        return story

    async def save(self, story: UserStory) -> UserStory:
        story.updated_at = self._tick()
        self._store[story.id] = story
        return story

    async def delete(self, user_id: str, story_id: str) -> bool:
        story = self._store.get(story_id)
        if story is None or story.user_id != user_id:
            return False
        del self._store[story_id]
        return True


class FakeProfileRepository:
    """Dict-backed ProfileRepository for testing."""

    def __init__(self) -> None:
        self._store: dict[str, Profile] = {}

    async def get(self, user_id: str) -> Profile | None:
        return self._store.get(user_id)

    async def upsert(self, profile: Profile) -> Profile:
        profile.updated_at = datetime.now(UTC)
        self._store[profile.id] = profile
        return profile


class FakeDataService:
    """Test double for DataService — always healthy."""

    async def check_connection(self) -> bool:
        return True


class ScriptedRelayClient:
    """RelayClient double returning canned replies per operation.

    Each reply is either a dict (returned), an Exception (raised), or
    a callable taking the request kwargs. Every call is recorded in
    ``calls``. ``gate`` lets a test hold a call open to observe the
    Loading state.
    """

    def __init__(
        self,
        replies: dict[OperationMode, Any] | None = None,
    ) -> None:
        self.replies: dict[OperationMode, Any] = dict(replies or {})
        self.calls: list[dict[str, Any]] = []
        self.gate: asyncio.Event | None = None

    async def invoke(
        self,
        *,
        user_story: str,
        llm_model: str,
        operation_mode: OperationMode,
        suggestions: list[Any] | None = None,
    ) -> dict[str, Any]:
        call = {
            "user_story": user_story,
            "llm_model": llm_model,
            "operation_mode": operation_mode,
            "suggestions": list(suggestions or []),
        }
        self.calls.append(call)
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies[operation_mode]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(call)  # type: ignore[no-any-return]
        return dict(reply)


class RecordingNotifier:
    """Notifier double collecting (level, message) pairs."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def levels(self) -> list[str]:
        return [level for level, _ in self.messages]
