"""Profile preference models."""
from typing import Optional

from pydantic import BaseModel, Field


class LocationData(BaseModel):
    """A user's preferred location.

    The CMS can hold a partial location (lat/lng/address missing), so every
    field is optional here and completeness is checked by the profile service.
    """

    lat: Optional[float] = None
    lng: Optional[float] = None
    address: Optional[str] = None


class ProfilePreferences(BaseModel):
    """Location preferences submitted from onboarding or the profile page."""

    location: Optional[LocationData] = None
    search_radius: Optional[float] = Field(default=None, alias="searchRadius")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "location": {"lat": 51.5072, "lng": -0.1276, "address": "London, UK"},
                "searchRadius": 10,
            }
        },
    }


class ProfileResult(BaseModel):
    """Outcome of a profile action."""

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


class UserPreferences(BaseModel):
    """Complete stored preferences of an onboarded user."""

    location: LocationData
    search_radius: float = Field(..., alias="searchRadius")

    model_config = {"populate_by_name": True}
