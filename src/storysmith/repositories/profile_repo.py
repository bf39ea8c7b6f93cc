"""SQL implementation of ProfileRepository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storysmith.models.profile import Profile


class SqlProfileRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str) -> Profile | None:
        result = await self._session.execute(
            select(Profile).where(Profile.id == user_id)
        )
        return result.scalar_one_or_none()

    async def upsert(self, profile: Profile) -> Profile:
        merged = await self._session.merge(profile)
        await self._session.flush()
        return merged
