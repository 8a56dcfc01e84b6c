"""Profile routes: onboarding and location preferences."""
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from ..models import ProfilePreferences, ProfileResult, UserPreferences
from ..services import ProfileService, profile_service
from .deps import get_current_user_id

router = APIRouter(prefix="/api/profile", tags=["profile"])


def get_profile_service() -> ProfileService:
    return profile_service


@router.post("/onboarding", response_model=ProfileResult, response_model_exclude_none=True)
async def complete_onboarding(
    preferences: ProfilePreferences,
    user_id: Optional[str] = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResult:
    """Save onboarding preferences and mark the user as onboarded."""
    return await service.complete_onboarding(user_id, preferences)


@router.get("/onboarding/redirect")
async def redirect_after_onboarding() -> RedirectResponse:
    """Send the user home once onboarding is complete."""
    return RedirectResponse(url="/", status_code=303)


@router.put("/preferences", response_model=ProfileResult, response_model_exclude_none=True)
async def update_location_preferences(
    preferences: ProfilePreferences,
    user_id: Optional[str] = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResult:
    """Update the user's location preferences."""
    return await service.update_location_preferences(user_id, preferences)


@router.get("/preferences", response_model=Optional[UserPreferences])
async def get_user_preferences(
    user_id: Optional[str] = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> Optional[UserPreferences]:
    """Stored preferences, or null until the user has completed them."""
    return await service.get_user_preferences(user_id)
