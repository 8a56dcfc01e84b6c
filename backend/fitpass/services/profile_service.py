"""Profile actions: onboarding and location preferences.

Each action validates its input, forwards it to Sanity (and Clerk for
onboarding) and converts every failure into a ``ProfileResult`` rather than
raising.
"""
import math
from typing import Callable, Optional

from ..models import LocationData, ProfilePreferences, ProfileResult, UserPreferences
from ..utils.logger import logger
from .clerk_client import ClerkClient
from .queries import USER_PROFILE_ID_QUERY, USER_PROFILE_WITH_PREFERENCES_QUERY
from .sanity_client import SanityClient

# Pages whose cached renders depend on the user's preferences
REVALIDATE_PATHS = ["/", "/classes", "/profile"]


def is_valid_location(location: Optional[LocationData]) -> bool:
    """A location is usable once lat, lng and a non-blank address are all set."""
    return bool(
        location
        and isinstance(location.lat, (int, float))
        and isinstance(location.lng, (int, float))
        and isinstance(location.address, str)
        and location.address.strip()
    )


def is_valid_radius(radius: Optional[float]) -> bool:
    """Search radius must be a finite number of at least 1 km."""
    return (
        isinstance(radius, (int, float))
        and not isinstance(radius, bool)
        and math.isfinite(radius)
        and radius >= 1
    )


def _validation_error(preferences: ProfilePreferences) -> Optional[str]:
    if not is_valid_location(preferences.location):
        return "Location is required"
    if not is_valid_radius(preferences.search_radius):
        return "Search radius is required"
    return None


def _preferences_patch(preferences: ProfilePreferences) -> dict:
    location = preferences.location
    return {
        "location": {
            "lat": location.lat,
            "lng": location.lng,
            "address": location.address,
        },
        "searchRadius": preferences.search_radius,
    }


def revalidate_paths() -> None:
    """Signal that preference-dependent pages are stale."""
    for path in REVALIDATE_PATHS:
        logger.debug(f"[PROFILE] Revalidating {path}")


class ProfileService:
    """Service for onboarding and profile preference actions."""

    def __init__(
        self,
        read_client_factory: Callable[[], SanityClient] = SanityClient,
        write_client_factory: Callable[[], SanityClient] = SanityClient.for_writes,
        clerk_client_factory: Callable[[], ClerkClient] = ClerkClient,
    ):
        """Initialize the profile service.

        Args:
            read_client_factory: Builds the Sanity client used for reads
            write_client_factory: Builds the Sanity client used for writes
            clerk_client_factory: Builds the Clerk client
        """
        self.read_client_factory = read_client_factory
        self.write_client_factory = write_client_factory
        self.clerk_client_factory = clerk_client_factory

    async def get_or_create_user_profile(self, clerk_id: str) -> str:
        """Return the id of the user's profile document, creating it if missing.

        Args:
            clerk_id: Clerk user id

        Returns:
            Sanity document id of the profile
        """
        async with self.read_client_factory() as client:
            existing = await client.fetch(USER_PROFILE_ID_QUERY, {"clerkId": clerk_id})
        if existing:
            return existing

        profile_id = f"userProfile-{clerk_id}"
        logger.info(f"[PROFILE] Creating profile {profile_id}")
        async with self.write_client_factory() as client:
            await client.create_if_not_exists(
                {"_id": profile_id, "_type": "userProfile", "clerkId": clerk_id}
            )
        return profile_id

    async def complete_onboarding(
        self, user_id: Optional[str], preferences: ProfilePreferences
    ) -> ProfileResult:
        """Save onboarding preferences and mark the Clerk user as onboarded."""
        try:
            if not user_id:
                return ProfileResult(success=False, error="Unauthorized")

            error = _validation_error(preferences)
            if error:
                return ProfileResult(success=False, error=error)

            profile_id = await self.get_or_create_user_profile(user_id)

            async with self.write_client_factory() as client:
                await client.patch(profile_id).set(_preferences_patch(preferences)).commit()

            async with self.clerk_client_factory() as clerk:
                await clerk.update_user_metadata(
                    user_id, public_metadata={"hasOnboarded": True}
                )

            revalidate_paths()
            logger.info(f"[PROFILE] Onboarding completed for {user_id}")
            return ProfileResult(success=True, message="Onboarding completed!")

        except Exception as e:
            logger.error(f"[PROFILE] Onboarding error: {e}", exc_info=True)
            return ProfileResult(success=False, error="Failed to complete onboarding")

    async def update_location_preferences(
        self, user_id: Optional[str], preferences: ProfilePreferences
    ) -> ProfileResult:
        """Update location preferences of an existing profile."""
        try:
            if not user_id:
                return ProfileResult(success=False, error="Unauthorized")

            error = _validation_error(preferences)
            if error:
                return ProfileResult(success=False, error=error)

            async with self.read_client_factory() as client:
                profile = await client.fetch(
                    USER_PROFILE_WITH_PREFERENCES_QUERY, {"clerkId": user_id}
                )

            if not profile or not profile.get("_id"):
                return ProfileResult(success=False, error="User profile not found")

            async with self.write_client_factory() as client:
                await client.patch(profile["_id"]).set(_preferences_patch(preferences)).commit()

            revalidate_paths()
            return ProfileResult(success=True, message="Preferences updated!")

        except Exception as e:
            logger.error(f"[PROFILE] Update preferences error: {e}", exc_info=True)
            return ProfileResult(success=False, error="Failed to update preferences")

    async def get_user_preferences(self, user_id: Optional[str]) -> Optional[UserPreferences]:
        """Return stored preferences, or None until the user has completed them."""
        try:
            if not user_id:
                return None

            async with self.read_client_factory() as client:
                profile = await client.fetch(
                    USER_PROFILE_WITH_PREFERENCES_QUERY, {"clerkId": user_id}
                )

            profile = profile or {}
            location = LocationData.model_validate(profile.get("location") or {})
            search_radius = profile.get("searchRadius")

            if not is_valid_location(location) or not is_valid_radius(search_radius):
                return None

            return UserPreferences(location=location, search_radius=search_radius)

        except Exception as e:
            logger.error(f"[PROFILE] Get preferences error: {e}", exc_info=True)
            return None


# Global profile service instance
profile_service = ProfileService()
