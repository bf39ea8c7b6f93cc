"""Profile routes for the calling user."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from storysmith.api.dependencies import (
    get_current_user_id,
    get_profile_service,
)
from storysmith.api.schemas import APIResponse, ProfileUpdate
from storysmith.services.profile_service import ProfileService

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("")
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> APIResponse:
    profile = await service.get_or_default(user_id)
    return APIResponse(success=True, data=profile.to_dict())


@router.put("")
async def update_profile(
    body: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> APIResponse:
    profile = await service.update(user_id, body)
    return APIResponse(success=True, data=profile.to_dict())
