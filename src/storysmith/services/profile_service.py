"""User profile management."""

from __future__ import annotations

from storysmith.api.schemas import ProfileUpdate
from storysmith.models.profile import Profile
from storysmith.repositories.protocols import ProfileRepository


class ProfileService:
    def __init__(self, repo: ProfileRepository) -> None:
        self._repo = repo

    async def get_or_default(self, user_id: str) -> Profile:
        """Stored profile, or an unsaved empty one for new users."""
        profile = await self._repo.get(user_id)
        if profile is None:
            profile = Profile(id=user_id)
        return profile

    async def update(self, user_id: str, body: ProfileUpdate) -> Profile:
        profile = await self._repo.get(user_id) or Profile(id=user_id)
        # Blank form fields are stored as NULL
        profile.first_name = (body.first_name or "").strip() or None
        profile.last_name = (body.last_name or "").strip() or None
        profile.avatar_url = (body.avatar_url or "").strip() or None
        return await self._repo.upsert(profile)
