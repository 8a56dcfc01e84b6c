"""Assistant tools over the FitPass catalog and booking data.

Each tool pairs a description (read by the model when choosing a tool) with
a pydantic input schema and an async execute function. Execute functions
build a GROQ query from the optional inputs, run it once against Sanity,
apply any filtering GROQ can't express, normalise nullable fields and
return a small JSON payload whose ``count`` equals the length of its list.
"""
import math
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..models import BookingsFilter, FitnessGoal, TierLevel
from ..services.exceptions import ToolInputError, ToolNotFoundError
from ..services.queries import (
    ACTIVITY_PROJECTION,
    AI_CATEGORIES_QUERY,
    AI_SEARCH_VENUES_QUERY,
    AI_USER_ALL_BOOKINGS_QUERY,
    AI_USER_PAST_BOOKINGS_QUERY,
    AI_USER_UPCOMING_BOOKINGS_QUERY,
    CLASS_SESSIONS_QUERY,
    UPCOMING_ACTIVITY_FILTER,
    VENUE_PROJECTION,
    match_pattern,
)
from ..services.sanity_client import SanityClient
from ..utils.logger import logger

ExecuteFn = Callable[[Any, SanityClient], Awaitable[Dict[str, Any]]]

GOAL_CATEGORIES: Dict[FitnessGoal, List[str]] = {
    FitnessGoal.STRENGTH: ["HIIT", "Strength", "CrossFit"],
    FitnessGoal.FLEXIBILITY: ["Yoga", "Pilates", "Stretching"],
    FitnessGoal.CARDIO: ["Cycling", "Running", "Dance", "HIIT"],
    FitnessGoal.RELAXATION: ["Yoga", "Meditation", "Pilates"],
    FitnessGoal.WEIGHT_LOSS: ["HIIT", "Cycling", "Boot Camp"],
}

SUBSCRIPTION_INFO: Dict[str, Any] = {
    "tiers": [
        {
            "name": "Basic",
            "monthlyPrice": 29,
            "annualPrice": 290,
            "classesPerMonth": 5,
            "classAccess": "Basic-tier classes only",
            "perClassCost": "$5.80",
        },
        {
            "name": "Performance",
            "monthlyPrice": 59,
            "annualPrice": 590,
            "classesPerMonth": 12,
            "classAccess": "Basic + Performance classes",
            "perClassCost": "$4.92",
        },
        {
            "name": "Champion",
            "monthlyPrice": 99,
            "annualPrice": 990,
            "classesPerMonth": "Unlimited",
            "classAccess": "All classes",
            "perClassCost": "Best value for 8+ classes/month",
        },
    ],
    "freeTrialDays": 3,
    "annualDiscount": "17%",
}

DURATION_TOLERANCE = 15
MAX_RECOMMENDATIONS = 5


# --- Helpers ---

def as_string_or_null(value: Any) -> Optional[str]:
    """Return ``value`` if it is a non-blank string, else None."""
    return value if isinstance(value, str) and value.strip() else None


def as_number_or_null(value: Any) -> Optional[float]:
    """Return ``value`` if it is a finite number, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if math.isfinite(value) else None


def _category_name(activity: Dict[str, Any]) -> str:
    category = activity.get("category") or {}
    return (category.get("name") or "").lower()


def _enum_value(value: Any) -> Any:
    return value.value if value is not None else None


class Tool:
    """An assistant tool: name, description, input schema and executor."""

    def __init__(
        self,
        name: str,
        description: str,
        input_model: Type[BaseModel],
        execute: ExecuteFn,
    ):
        self.name = name
        self.description = description
        self.input_model = input_model
        self.execute = execute

    @property
    def input_schema(self) -> Dict[str, Any]:
        """JSON schema of the tool input, as sent to the model."""
        return self.input_model.model_json_schema(by_alias=True)

    def spec(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }

    def parse_arguments(self, arguments: Optional[Dict[str, Any]]) -> BaseModel:
        """Validate raw arguments against the input schema.

        Raises:
            ToolInputError: If the arguments do not match the schema
        """
        try:
            return self.input_model.model_validate(arguments or {})
        except ValidationError as e:
            raise ToolInputError(f"Invalid arguments for {self.name}: {e}") from e

    async def run(self, arguments: Optional[Dict[str, Any]], client: SanityClient) -> Dict[str, Any]:
        params = self.parse_arguments(arguments)
        return await self.execute(params, client)


class ToolInput(BaseModel):
    """Base for tool inputs; camelCase aliases are what the model sees."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# --- Tool: Search for classes ---

class SearchClassesInput(ToolInput):
    query: Optional[str] = Field(
        default=None, description="Text to search for in class names or descriptions"
    )
    category: Optional[str] = Field(
        default=None, description="Category name like 'Yoga', 'HIIT', 'Pilates', etc."
    )
    instructor: Optional[str] = Field(default=None, description="Instructor name to search for")
    tier_level: Optional[TierLevel] = Field(
        default=None, alias="tierLevel", description="Tier level filter"
    )


async def search_classes(params: SearchClassesInput, client: SanityClient) -> Dict[str, Any]:
    conditions = [UPCOMING_ACTIVITY_FILTER]
    query_params: Dict[str, Any] = {}

    if params.query:
        conditions.append("(name match $query || instructor match $query)")
        query_params["query"] = match_pattern(params.query)
    if params.instructor:
        conditions.append("instructor match $instructor")
        query_params["instructor"] = match_pattern(params.instructor)
    if params.tier_level:
        conditions.append("tierLevel == $tierLevel")
        query_params["tierLevel"] = params.tier_level.value

    groq = f"*[{' && '.join(conditions)}] | order(name asc) [0...10] {ACTIVITY_PROJECTION}"
    activities = await client.fetch(groq, query_params) or []

    if params.category:
        wanted = params.category.lower()
        activities = [a for a in activities if wanted in _category_name(a)]

    logger.info(f"[TOOLS] searchClasses matched {len(activities)} classes")
    return {"count": len(activities), "classes": activities}


# --- Tool: Get upcoming sessions for a specific class ---

class GetClassSessionsInput(ToolInput):
    class_name: str = Field(
        ..., alias="className", description="The name of the class to find sessions for"
    )


def _normalise_session(session: Dict[str, Any]) -> Dict[str, Any]:
    max_capacity = session.get("maxCapacity") or 0
    current_bookings = session.get("currentBookings") or 0
    activity = session.get("activity")
    venue = session.get("venue")

    return {
        "id": session.get("_id"),
        "startTime": as_string_or_null(session.get("startTime")),
        "spotsAvailable": max(0, max_capacity - current_bookings),
        "activity": {
            "name": as_string_or_null(activity.get("name")),
            "instructor": as_string_or_null(activity.get("instructor")),
            "duration": as_number_or_null(activity.get("duration")),
            "tierLevel": as_string_or_null(activity.get("tierLevel")),
        } if activity else None,
        "venue": {
            "name": as_string_or_null(venue.get("name")),
            "city": as_string_or_null(venue.get("city")),
        } if venue else None,
    }


async def get_class_sessions(params: GetClassSessionsInput, client: SanityClient) -> Dict[str, Any]:
    sessions = await client.fetch(
        CLASS_SESSIONS_QUERY, {"classNamePattern": match_pattern(params.class_name)}
    ) or []

    normalised = [_normalise_session(s) for s in sessions]
    logger.info(f"[TOOLS] getClassSessions found {len(normalised)} sessions for '{params.class_name}'")
    return {"count": len(normalised), "sessions": normalised}


# --- Tool: Search venues ---

class SearchVenuesInput(ToolInput):
    name: Optional[str] = Field(default=None, description="Venue name to search for")
    city: Optional[str] = Field(default=None, description="City to search in")


async def search_venues(params: SearchVenuesInput, client: SanityClient) -> Dict[str, Any]:
    if not params.name and not params.city:
        venues = await client.fetch(AI_SEARCH_VENUES_QUERY) or []
        return {"count": len(venues), "venues": venues}

    conditions = ['_type == "venue"']
    query_params: Dict[str, Any] = {}
    if params.name:
        conditions.append("name match $name")
        query_params["name"] = match_pattern(params.name)
    if params.city:
        conditions.append("address.city match $city")
        query_params["city"] = match_pattern(params.city)

    groq = f"*[{' && '.join(conditions)}] | order(name asc) [0...10] {VENUE_PROJECTION}"
    venues = await client.fetch(groq, query_params) or []

    logger.info(f"[TOOLS] searchVenues matched {len(venues)} venues")
    return {"count": len(venues), "venues": venues}


# --- Tool: Get categories ---

class NoInput(ToolInput):
    pass


async def get_categories(params: NoInput, client: SanityClient) -> Dict[str, Any]:
    categories = await client.fetch(AI_CATEGORIES_QUERY) or []
    return {"count": len(categories), "categories": categories}


# --- Tool: Subscription info ---

async def get_subscription_info(params: NoInput, client: SanityClient) -> Dict[str, Any]:
    return {"count": len(SUBSCRIPTION_INFO["tiers"]), **SUBSCRIPTION_INFO}


# --- Tool: Recommendations ---

class GetRecommendationsInput(ToolInput):
    fitness_goal: Optional[FitnessGoal] = Field(
        default=None, alias="fitnessGoal", description="User's fitness goal"
    )
    preferred_duration: Optional[Union[int, float]] = Field(
        default=None, alias="preferredDuration", description="Preferred class duration in minutes"
    )
    tier_level: Optional[TierLevel] = Field(
        default=None, alias="tierLevel", description="User's subscription tier"
    )


async def get_recommendations(params: GetRecommendationsInput, client: SanityClient) -> Dict[str, Any]:
    conditions = [UPCOMING_ACTIVITY_FILTER]
    query_params: Dict[str, Any] = {}

    if params.tier_level:
        conditions.append("tierLevel in $tierLevels")
        query_params["tierLevels"] = [t.value for t in params.tier_level.accessible_tiers()]
    if params.preferred_duration:
        conditions.append("duration <= $maxDuration && duration >= $minDuration")
        query_params["maxDuration"] = params.preferred_duration + DURATION_TOLERANCE
        query_params["minDuration"] = params.preferred_duration - DURATION_TOLERANCE

    groq = f"*[{' && '.join(conditions)}] | order(name asc) [0...20] {ACTIVITY_PROJECTION}"
    activities = await client.fetch(groq, query_params) or []

    recommended = activities
    if params.fitness_goal:
        targets = [c.lower() for c in GOAL_CATEGORIES[params.fitness_goal]]
        recommended = [
            a for a in activities
            if any(target in _category_name(a) for target in targets)
        ]
        # Fall back to everything bookable rather than recommending nothing
        if not recommended:
            recommended = activities

    recommended = recommended[:MAX_RECOMMENDATIONS]
    return {
        "count": len(recommended),
        "recommendations": recommended,
        "basedOn": {
            "fitnessGoal": _enum_value(params.fitness_goal),
            "preferredDuration": params.preferred_duration,
            "tierLevel": _enum_value(params.tier_level),
        },
    }


# --- Tool: Get user's bookings ---

class GetUserBookingsInput(ToolInput):
    type: BookingsFilter = Field(
        default=BookingsFilter.UPCOMING,
        description=(
            "Filter bookings: 'upcoming' for future classes, 'past' for completed, "
            "'all' for everything. Defaults to 'upcoming'."
        ),
    )
    clerk_id: Optional[str] = Field(
        default=None,
        alias="clerkId",
        description="The user's Clerk ID from the system context. Extract this from the system message.",
    )


BOOKINGS_QUERIES = {
    BookingsFilter.UPCOMING: AI_USER_UPCOMING_BOOKINGS_QUERY,
    BookingsFilter.PAST: AI_USER_PAST_BOOKINGS_QUERY,
    BookingsFilter.ALL: AI_USER_ALL_BOOKINGS_QUERY,
}


def _flatten_booking(booking: Dict[str, Any]) -> Dict[str, Any]:
    session = booking.get("classSession") or {}
    activity = session.get("activity") or {}
    venue = session.get("venue") or {}

    return {
        "id": booking.get("_id"),
        "sessionId": session.get("_id"),
        "status": booking.get("status"),
        "bookedAt": booking.get("createdAt"),
        "attendedAt": booking.get("attendedAt"),
        "class": activity.get("name"),
        "instructor": activity.get("instructor"),
        "duration": activity.get("duration"),
        "dateTime": session.get("startTime"),
        "venue": venue.get("name"),
        "city": venue.get("city"),
    }


async def get_user_bookings(params: GetUserBookingsInput, client: SanityClient) -> Dict[str, Any]:
    if not params.clerk_id:
        return {"error": "User not authenticated", "count": 0, "bookings": []}

    bookings = await client.fetch(
        BOOKINGS_QUERIES[params.type], {"clerkId": params.clerk_id}
    ) or []

    flattened = [_flatten_booking(b) for b in bookings]
    logger.info(f"[TOOLS] getUserBookings returned {len(flattened)} {params.type.value} bookings")
    return {"count": len(flattened), "type": params.type.value, "bookings": flattened}


# --- Registry ---

ai_tools: Dict[str, Tool] = {
    t.name: t
    for t in [
        Tool(
            "searchClasses",
            "Search for fitness classes by name, category, instructor, or tier level. "
            "Only returns classes with upcoming sessions available. "
            "Use this to help users find classes they're interested in.",
            SearchClassesInput,
            search_classes,
        ),
        Tool(
            "getClassSessions",
            "Get upcoming scheduled sessions for a specific class or activity. "
            "Shows dates, times, venues, and availability.",
            GetClassSessionsInput,
            get_class_sessions,
        ),
        Tool(
            "searchVenues",
            "Search for fitness venues/studios by name or city. "
            "Returns venue details including address and amenities.",
            SearchVenuesInput,
            search_venues,
        ),
        Tool(
            "getCategories",
            "Get all available fitness class categories. "
            "Useful when users want to know what types of classes are offered.",
            NoInput,
            get_categories,
        ),
        Tool(
            "getSubscriptionInfo",
            "Get information about subscription tiers, pricing, and what classes each tier can access.",
            NoInput,
            get_subscription_info,
        ),
        Tool(
            "getRecommendations",
            "Get personalized class recommendations based on user preferences like fitness goals, "
            "preferred time of day, or difficulty level. "
            "Only returns classes with upcoming sessions available.",
            GetRecommendationsInput,
            get_recommendations,
        ),
        Tool(
            "getUserBookings",
            "Get the current user's bookings. Can filter by upcoming or past bookings. "
            "Use this when users ask about their scheduled classes, booking history, "
            "or want to know what classes they have coming up. "
            "The clerkId is provided in the system context.",
            GetUserBookingsInput,
            get_user_bookings,
        ),
    ]
}


def get_tool(name: str) -> Tool:
    """Look up a registered tool by name.

    Raises:
        ToolNotFoundError: If no tool has that name
    """
    try:
        return ai_tools[name]
    except KeyError:
        raise ToolNotFoundError(f"Unknown tool: {name}") from None


def tool_specs() -> List[Dict[str, Any]]:
    """Name, description and input schema of every tool, in registry order."""
    return [t.spec() for t in ai_tools.values()]


async def run_tool(
    name: str, arguments: Optional[Dict[str, Any]], client: SanityClient
) -> Dict[str, Any]:
    """Validate arguments and execute one tool."""
    logger.info(f"[TOOLS] Running {name}")
    return await get_tool(name).run(arguments, client)
