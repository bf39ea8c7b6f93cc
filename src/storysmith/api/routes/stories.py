"""User story CRUD routes, scoped to the calling user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from storysmith.api.dependencies import (
    get_current_user_id,
    get_story_service,
)
from storysmith.api.schemas import APIResponse, StoryCreate, StoryUpdate
from storysmith.services.story_service import (
    InvalidStoryQueryError,
    StoryService,
)

router = APIRouter(prefix="/api/stories", tags=["stories"])


@router.get("")
async def list_stories(
    status: str | None = Query(default=None),
    feature_epic: str | None = Query(default=None),
    sort_by: str = Query(default="created_at"),
    order: str = Query(default="desc"),
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
) -> APIResponse:
    """List the user's stories with optional filters and sorting."""
    try:
        stories = await service.list_for_user(
            user_id,
            status=status,
            feature_epic=feature_epic,
            sort_by=sort_by,
            order=order,
        )
    except InvalidStoryQueryError as exc:
        return APIResponse(success=False, error=str(exc))
    return APIResponse(
        success=True,
        data=[s.to_dict() for s in stories],
        metadata={"count": len(stories)},
    )


@router.post("")
async def create_story(
    body: StoryCreate,
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
) -> APIResponse:
    """Create a new story owned by the caller."""
    story = await service.create(user_id, body)
    return APIResponse(success=True, data=story.to_dict())


@router.get("/{story_id}")
async def get_story(
    story_id: str,
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
) -> APIResponse:
    story = await service.get(user_id, story_id)
    if story is None:
        return APIResponse(success=False, error="Story not found")
    return APIResponse(success=True, data=story.to_dict())


@router.put("/{story_id}")
async def update_story(
    story_id: str,
    body: StoryUpdate,
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
) -> APIResponse:
    story = await service.update(user_id, story_id, body)
    if story is None:
        return APIResponse(success=False, error="Story not found")
    return APIResponse(success=True, data=story.to_dict())


@router.delete("/{story_id}")
async def delete_story(
    story_id: str,
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
) -> APIResponse:
    deleted = await service.delete(user_id, story_id)
    if not deleted:
        return APIResponse(success=False, error="Story not found")
    return APIResponse(success=True)
