"""FastAPI dependency injection for services and repository access."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, Request

from storysmith.constants import USER_ID_HEADER
from storysmith.relay.service import RelayService
from storysmith.repositories.protocols import (
    ProfileRepository,
    StoryRepository,
)
from storysmith.services.data_service import DataService
from storysmith.services.profile_service import ProfileService
from storysmith.services.story_service import StoryService

logger = logging.getLogger(__name__)


@dataclass
class Repos:
    """Repository container resolved per-request via Depends.

    Routes receive this instead of touching session_factory.
    """

    story: StoryRepository
    profile: ProfileRepository


async def get_repos(
    request: Request,
) -> AsyncIterator[Repos]:
    """Generator dep — session lives for the request, commits after."""
    from storysmith.repositories.profile_repo import (
        SqlProfileRepository,
    )
    from storysmith.repositories.story_repo import SqlStoryRepository

    session_factory = request.app.state.typed.session_factory
    async with session_factory() as session:
        yield Repos(
            story=SqlStoryRepository(session),
            profile=SqlProfileRepository(session),
        )
        await session.commit()


def get_story_service(repos: Repos = Depends(get_repos)) -> StoryService:
    return StoryService(repos.story)


def get_profile_service(
    repos: Repos = Depends(get_repos),
) -> ProfileService:
    return ProfileService(repos.profile)


def get_relay_service(request: Request) -> RelayService:
    """Get RelayService from app.state."""
    return request.app.state.typed.relay_service  # type: ignore[no-any-return]


def get_data_service(request: Request) -> DataService:
    """Get DataService from app.state."""
    return request.app.state.typed.data_service  # type: ignore[no-any-return]


def get_current_user_id(
    x_user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
) -> str:
    """Owner id forwarded by the upstream auth proxy.

    Authentication itself happens before requests reach this service;
    story and profile rows are always filtered by this id.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=401,
            detail=f"Missing {USER_ID_HEADER} header",
        )
    return x_user_id.strip()
