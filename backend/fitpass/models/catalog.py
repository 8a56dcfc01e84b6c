"""Catalog and booking enumerations shared by the tools and API models.

Activities, class sessions, venues and bookings live in the CMS; the
assistant tools read them as plain JSON and only these value sets are
modelled here.
"""
from enum import Enum
from typing import List


class TierLevel(str, Enum):
    """Subscription tier gating which classes a user may book."""

    BASIC = "basic"
    PERFORMANCE = "performance"
    CHAMPION = "champion"

    def accessible_tiers(self) -> List["TierLevel"]:
        """Tiers whose classes a member on this tier can book."""
        order = list(TierLevel)
        return order[: order.index(self) + 1]


class BookingsFilter(str, Enum):
    """Which slice of a user's bookings to return."""

    UPCOMING = "upcoming"
    PAST = "past"
    ALL = "all"


class FitnessGoal(str, Enum):
    """Goals the recommendation tool maps onto class categories."""

    STRENGTH = "strength"
    FLEXIBILITY = "flexibility"
    CARDIO = "cardio"
    RELAXATION = "relaxation"
    WEIGHT_LOSS = "weight-loss"
