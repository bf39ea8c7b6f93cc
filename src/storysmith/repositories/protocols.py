"""Protocol-based repository interfaces.

SQL implementations satisfy these protocols structurally (no inheritance).
Test doubles can be plain classes or mocks matching the same signature.
Every story query is scoped to one owner: the row-level filter the
hosted store applied is enforced here instead.
"""

from dataclasses import dataclass
from typing import Protocol

from storysmith.constants import DEFAULT_STORY_SORT
from storysmith.models.profile import Profile
from storysmith.models.story import UserStory


@dataclass(frozen=True)
class StoryQuery:
    """Filter and sort options for listing a user's stories."""

    status: str | None = None
    feature_epic: str | None = None  # case-insensitive substring
    sort_by: str = DEFAULT_STORY_SORT
    ascending: bool = False


class StoryRepository(Protocol):
    async def get(self, user_id: str, story_id: str) -> UserStory | None: ...
    async def list_for_user(
        self, user_id: str, query: StoryQuery
    ) -> list[UserStory]: ...
    async def create(self, story: UserStory) -> UserStory: ...
    async def save(self, story: UserStory) -> UserStory: ...
    async def delete(self, user_id: str, story_id: str) -> bool: ...


class ProfileRepository(Protocol):
    async def get(self, user_id: str) -> Profile | None: ...
    async def upsert(self, profile: Profile) -> Profile: ...
