"""User story record management."""

from __future__ import annotations

from storysmith.api.schemas import StoryCreate, StoryUpdate
from storysmith.constants import STORY_SORT_FIELDS
from storysmith.models.story import UserStory
from storysmith.repositories.protocols import StoryQuery, StoryRepository


class InvalidStoryQueryError(ValueError):
    pass


class StoryService:
    def __init__(self, repo: StoryRepository) -> None:
        self._repo = repo

    async def list_for_user(
        self,
        user_id: str,
        *,
        status: str | None = None,
        feature_epic: str | None = None,
        sort_by: str = "created_at",
        order: str = "desc",
    ) -> list[UserStory]:
        if sort_by not in STORY_SORT_FIELDS:
            raise InvalidStoryQueryError(
                f"Cannot sort by '{sort_by}'. "
                f"Valid: {', '.join(sorted(STORY_SORT_FIELDS))}"
            )
        if order not in ("asc", "desc"):
            raise InvalidStoryQueryError("Order must be 'asc' or 'desc'.")
        query = StoryQuery(
            # "all" is the list view's no-filter sentinel
            status=None if status in (None, "", "all") else status,
            feature_epic=(feature_epic or "").strip() or None,
            sort_by=sort_by,
            ascending=order == "asc",
        )
        return await self._repo.list_for_user(user_id, query)

    async def get(self, user_id: str, story_id: str) -> UserStory | None:
        return await self._repo.get(user_id, story_id)

    async def create(self, user_id: str, body: StoryCreate) -> UserStory:
        story = UserStory(
            user_id=user_id,
            title=body.title,
            description=body.description,
            status=body.status.value,
            feature_epic=body.feature_epic or None,
            sprint=body.sprint or None,
            story_points=body.story_points,
            acceptance_criteria=[
                c.to_wire() for c in body.acceptance_criteria
            ],
        )
        return await self._repo.create(story)

    async def update(
        self, user_id: str, story_id: str, body: StoryUpdate
    ) -> UserStory | None:
        """Apply the fields present in body; None if no such story."""
        story = await self._repo.get(user_id, story_id)
        if story is None:
            return None
        changes = body.model_dump(exclude_unset=True)
        if "acceptance_criteria" in changes:
            criteria = body.acceptance_criteria or []
            changes["acceptance_criteria"] = [c.to_wire() for c in criteria]
        if changes.get("status") is not None:
            changes["status"] = str(changes["status"])
        for field in ("title", "description", "status"):
            # Required columns: an explicit null leaves them unchanged
            if field in changes and changes[field] is None:
                del changes[field]
        for field in ("feature_epic", "sprint"):
            if field in changes and not changes[field]:
                changes[field] = None
        for name, value in changes.items():
            setattr(story, name, value)
        return await self._repo.save(story)

    async def delete(self, user_id: str, story_id: str) -> bool:
        return await self._repo.delete(user_id, story_id)
