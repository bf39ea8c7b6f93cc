"""SQL implementation of StoryRepository."""

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storysmith.constants import DEFAULT_STORY_SORT, STORY_SORT_FIELDS
from storysmith.models.story import UserStory
from storysmith.repositories.protocols import StoryQuery


class SqlStoryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str, story_id: str) -> UserStory | None:
        result = await self._session.execute(
            select(UserStory).where(
                UserStory.id == story_id,
                UserStory.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_user(
        self, user_id: str, query: StoryQuery
    ) -> list[UserStory]:
        stmt = select(UserStory).where(UserStory.user_id == user_id)
        if query.status:
            stmt = stmt.where(UserStory.status == query.status)
        if query.feature_epic:
            stmt = stmt.where(
                func.lower(UserStory.feature_epic).contains(
                    query.feature_epic.lower(), autoescape=True
                )
            )
        sort_name = (
            query.sort_by
            if query.sort_by in STORY_SORT_FIELDS
            else DEFAULT_STORY_SORT
        )
        column = getattr(UserStory, sort_name)
        stmt = stmt.order_by(
            column.asc() if query.ascending else column.desc(),
            UserStory.id.asc(),
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, story: UserStory) -> UserStory:
        self._session.add(story)
        await self._session.flush()
        return story

    async def save(self, story: UserStory) -> UserStory:
        await self._session.flush()
        await self._session.refresh(story)
        return story

    async def delete(self, user_id: str, story_id: str) -> bool:
        result = await self._session.execute(
            sa_delete(UserStory).where(
                UserStory.id == story_id,
                UserStory.user_id == user_id,
            )
        )
        await self._session.flush()
        rowcount: int = getattr(result, "rowcount", 0) or 0
        return rowcount > 0
