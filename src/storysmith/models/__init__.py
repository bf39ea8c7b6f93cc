"""SQLAlchemy ORM models."""

from storysmith.models.base import Base
from storysmith.models.profile import Profile
from storysmith.models.story import UserStory

__all__ = [
    "Base",
    "Profile",
    "UserStory",
]
