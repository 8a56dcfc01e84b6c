"""Tests for the assistant tools."""
import math

import pytest
from unittest.mock import AsyncMock, Mock

from fitpass.agents.tools import (
    ai_tools,
    as_number_or_null,
    as_string_or_null,
    get_tool,
    run_tool,
    tool_specs,
)
from fitpass.services.exceptions import ToolInputError, ToolNotFoundError
from fitpass.services.queries import (
    AI_CATEGORIES_QUERY,
    AI_SEARCH_VENUES_QUERY,
    AI_USER_ALL_BOOKINGS_QUERY,
    AI_USER_PAST_BOOKINGS_QUERY,
    AI_USER_UPCOMING_BOOKINGS_QUERY,
    CLASS_SESSIONS_QUERY,
)


def make_client(result):
    """Create a Sanity client double whose fetch returns ``result``."""
    client = Mock()
    client.fetch = AsyncMock(return_value=result)
    return client


def activity(name, category=None, tier="basic", duration=45, instructor="Sam"):
    return {
        "_id": f"activity-{name.lower().replace(' ', '-')}",
        "name": name,
        "instructor": instructor,
        "duration": duration,
        "tierLevel": tier,
        "category": {"name": category} if category else None,
    }


@pytest.fixture
def activities():
    return [
        activity("Boot Camp Blast", "Boot Camp"),
        activity("Power HIIT", "HIIT", tier="performance"),
        activity("Sunrise Flow", "Yoga"),
        activity("Spin City", "Cycling", tier="champion"),
        activity("Open Gym"),
    ]


class TestRegistry:
    """Tests for the tool registry."""

    def test_all_tools_registered_in_order(self):
        """Test that every tool is registered, in declaration order."""
        assert list(ai_tools) == [
            "searchClasses",
            "getClassSessions",
            "searchVenues",
            "getCategories",
            "getSubscriptionInfo",
            "getRecommendations",
            "getUserBookings",
        ]

    def test_tool_specs_use_camel_case_inputs(self):
        """Test that input schemas expose the camelCase argument names."""
        specs = {spec["name"]: spec for spec in tool_specs()}
        assert "tierLevel" in specs["searchClasses"]["input_schema"]["properties"]
        assert specs["getClassSessions"]["input_schema"]["required"] == ["className"]
        assert "clerkId" in specs["getUserBookings"]["input_schema"]["properties"]
        assert all(spec["description"] for spec in specs.values())

    def test_get_unknown_tool(self):
        """Test that unknown tools raise ToolNotFoundError."""
        with pytest.raises(ToolNotFoundError):
            get_tool("bookClass")

    @pytest.mark.asyncio
    async def test_invalid_arguments(self):
        """Test that arguments are validated before any query is issued."""
        client = make_client([])
        with pytest.raises(ToolInputError):
            await run_tool("searchClasses", {"tierLevel": "platinum"}, client)
        client.fetch.assert_not_called()


class TestNormalisers:
    """Tests for nullable field helpers."""

    def test_as_string_or_null(self):
        """Test that blank and non-string values become None."""
        assert as_string_or_null("Yoga") == "Yoga"
        assert as_string_or_null("   ") is None
        assert as_string_or_null("") is None
        assert as_string_or_null(12) is None
        assert as_string_or_null(None) is None

    def test_as_number_or_null(self):
        """Test that non-finite and non-numeric values become None."""
        assert as_number_or_null(45) == 45
        assert as_number_or_null(30.5) == 30.5
        assert as_number_or_null(math.inf) is None
        assert as_number_or_null(math.nan) is None
        assert as_number_or_null("45") is None
        assert as_number_or_null(True) is None


class TestSearchClasses:
    """Tests for searchClasses."""

    @pytest.mark.asyncio
    async def test_no_filters(self, activities):
        """Test the base query lists bookable activities."""
        client = make_client(activities)
        result = await run_tool("searchClasses", {}, client)

        assert result["count"] == len(result["classes"]) == 5
        groq, params = client.fetch.call_args.args
        assert 'status == "scheduled"' in groq
        assert "order(name asc) [0...10]" in groq
        assert params == {}

    @pytest.mark.asyncio
    async def test_user_text_sent_as_params(self):
        """Test that search text is passed as params, not formatted into GROQ."""
        client = make_client([])
        await run_tool(
            "searchClasses",
            {"query": 'yoga" || true || "', "instructor": "Alex", "tierLevel": "performance"},
            client,
        )

        groq, params = client.fetch.call_args.args
        assert "yoga" not in groq
        assert "Alex" not in groq
        assert "(name match $query || instructor match $query)" in groq
        assert params == {
            "query": '*yoga" || true || "*',
            "instructor": "*Alex*",
            "tierLevel": "performance",
        }

    @pytest.mark.asyncio
    async def test_category_filtered_client_side(self, activities):
        """Test case-insensitive category filtering after the query."""
        client = make_client(activities)
        result = await run_tool("searchClasses", {"category": "hiit"}, client)

        assert result["count"] == 1
        assert result["classes"][0]["name"] == "Power HIIT"
        # Category isn't part of the GROQ filter
        _, params = client.fetch.call_args.args
        assert "category" not in params

    @pytest.mark.asyncio
    async def test_null_result(self):
        """Test that a null store result is treated as no classes."""
        result = await run_tool("searchClasses", {"category": "Yoga"}, make_client(None))
        assert result == {"count": 0, "classes": []}


class TestGetClassSessions:
    """Tests for getClassSessions."""

    @pytest.mark.asyncio
    async def test_sessions_normalised(self):
        """Test spots available and nullable field normalisation."""
        sessions = [
            {
                "_id": "session-1",
                "startTime": "2026-10-20T07:00:00Z",
                "maxCapacity": 12,
                "currentBookings": 5,
                "activity": {"name": "Sunrise Flow", "instructor": " ", "duration": 45, "tierLevel": "basic"},
                "venue": {"name": "Studio One", "city": "London"},
            },
            {
                "_id": "session-2",
                "startTime": "",
                "maxCapacity": 10,
                "currentBookings": 14,
                "activity": None,
                "venue": None,
            },
            {
                "_id": "session-3",
                "startTime": None,
                "maxCapacity": None,
                "currentBookings": None,
                "activity": {"name": "Power HIIT", "instructor": "Kim", "duration": "long", "tierLevel": None},
                "venue": {"name": "", "city": None},
            },
        ]
        client = make_client(sessions)
        result = await run_tool("getClassSessions", {"className": "flow"}, client)

        assert result["count"] == len(result["sessions"]) == 3
        first, second, third = result["sessions"]

        assert first == {
            "id": "session-1",
            "startTime": "2026-10-20T07:00:00Z",
            "spotsAvailable": 7,
            "activity": {"name": "Sunrise Flow", "instructor": None, "duration": 45, "tierLevel": "basic"},
            "venue": {"name": "Studio One", "city": "London"},
        }
        assert second["spotsAvailable"] == 0
        assert second["startTime"] is None
        assert second["activity"] is None and second["venue"] is None
        assert third["spotsAvailable"] == 0
        assert third["activity"]["duration"] is None
        assert third["venue"] == {"name": None, "city": None}

        groq, params = client.fetch.call_args.args
        assert groq == CLASS_SESSIONS_QUERY
        assert params == {"classNamePattern": "*flow*"}

    @pytest.mark.asyncio
    async def test_class_name_required(self):
        """Test that className is required."""
        with pytest.raises(ToolInputError):
            await run_tool("getClassSessions", {}, make_client([]))


class TestSearchVenues:
    """Tests for searchVenues."""

    @pytest.mark.asyncio
    async def test_default_listing(self):
        """Test that no arguments uses the default venue query."""
        venues = [{"_id": "venue-1", "name": "Studio One"}]
        client = make_client(venues)
        result = await run_tool("searchVenues", {}, client)

        assert result == {"count": 1, "venues": venues}
        assert client.fetch.call_args.args == (AI_SEARCH_VENUES_QUERY,)

    @pytest.mark.asyncio
    async def test_name_and_city_filters(self):
        """Test that name and city become match params."""
        client = make_client([])
        result = await run_tool("searchVenues", {"name": "studio", "city": "Leeds"}, client)

        assert result == {"count": 0, "venues": []}
        groq, params = client.fetch.call_args.args
        assert "name match $name" in groq
        assert "address.city match $city" in groq
        assert params == {"name": "*studio*", "city": "*Leeds*"}


class TestStaticAndCatalogTools:
    """Tests for getCategories and getSubscriptionInfo."""

    @pytest.mark.asyncio
    async def test_get_categories(self):
        """Test listing categories."""
        categories = [{"_id": "c1", "name": "Yoga"}, {"_id": "c2", "name": "HIIT"}]
        client = make_client(categories)
        result = await run_tool("getCategories", {}, client)

        assert result == {"count": 2, "categories": categories}
        assert client.fetch.call_args.args == (AI_CATEGORIES_QUERY,)

    @pytest.mark.asyncio
    async def test_subscription_info(self):
        """Test that subscription info is static and needs no query."""
        client = make_client([])
        result = await run_tool("getSubscriptionInfo", {}, client)

        client.fetch.assert_not_called()
        assert result["count"] == len(result["tiers"]) == 3
        assert [t["monthlyPrice"] for t in result["tiers"]] == [29, 59, 99]
        assert result["tiers"][2]["classesPerMonth"] == "Unlimited"
        assert result["freeTrialDays"] == 3
        assert result["annualDiscount"] == "17%"


class TestGetRecommendations:
    """Tests for getRecommendations."""

    @pytest.mark.asyncio
    async def test_goal_filters_categories(self, activities):
        """Test that a fitness goal keeps only matching categories."""
        client = make_client(activities)
        result = await run_tool("getRecommendations", {"fitnessGoal": "weight-loss"}, client)

        names = [a["name"] for a in result["recommendations"]]
        assert names == ["Boot Camp Blast", "Power HIIT", "Spin City"]
        assert result["count"] == 3
        assert result["basedOn"] == {
            "fitnessGoal": "weight-loss",
            "preferredDuration": None,
            "tierLevel": None,
        }

    @pytest.mark.asyncio
    async def test_goal_without_matches_falls_back(self):
        """Test fallback to all activities when no category matches."""
        client = make_client([activity("Open Gym"), activity("Rowing", "Rowing")])
        result = await run_tool("getRecommendations", {"fitnessGoal": "relaxation"}, client)

        assert result["count"] == 2

    @pytest.mark.asyncio
    async def test_capped_at_five(self):
        """Test that at most five recommendations are returned."""
        client = make_client([activity(f"Class {i}", "Yoga") for i in range(8)])
        result = await run_tool("getRecommendations", {}, client)

        assert result["count"] == len(result["recommendations"]) == 5

    @pytest.mark.asyncio
    async def test_tier_and_duration_params(self):
        """Test tier access list and duration window params."""
        client = make_client([])
        result = await run_tool(
            "getRecommendations", {"tierLevel": "performance", "preferredDuration": 45}, client
        )

        assert result["basedOn"]["preferredDuration"] == 45
        assert isinstance(result["basedOn"]["preferredDuration"], int)
        groq, params = client.fetch.call_args.args
        assert "tierLevel in $tierLevels" in groq
        assert "[0...20]" in groq
        assert params == {
            "tierLevels": ["basic", "performance"],
            "maxDuration": 60,
            "minDuration": 30,
        }

    @pytest.mark.asyncio
    async def test_champion_accesses_all_tiers(self):
        """Test that the champion tier unlocks every tier."""
        client = make_client([])
        await run_tool("getRecommendations", {"tierLevel": "champion"}, client)

        _, params = client.fetch.call_args.args
        assert params["tierLevels"] == ["basic", "performance", "champion"]


class TestGetUserBookings:
    """Tests for getUserBookings."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("arguments", [{}, {"clerkId": ""}, {"clerkId": None, "type": "all"}])
    async def test_requires_user(self, arguments):
        """Test that a missing clerk id returns an auth error and no bookings."""
        client = make_client([{"_id": "b1"}])
        result = await run_tool("getUserBookings", arguments, client)

        assert result == {"error": "User not authenticated", "count": 0, "bookings": []}
        client.fetch.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "booking_type,query",
        [
            ("upcoming", AI_USER_UPCOMING_BOOKINGS_QUERY),
            ("past", AI_USER_PAST_BOOKINGS_QUERY),
            ("all", AI_USER_ALL_BOOKINGS_QUERY),
        ],
    )
    async def test_query_selected_by_type(self, booking_type, query):
        """Test that the booking type selects the matching query."""
        client = make_client([])
        result = await run_tool(
            "getUserBookings", {"type": booking_type, "clerkId": "user_123"}, client
        )

        assert result == {"count": 0, "type": booking_type, "bookings": []}
        assert client.fetch.call_args.args == (query, {"clerkId": "user_123"})

    @pytest.mark.asyncio
    async def test_bookings_flattened(self):
        """Test that nested booking data is flattened with nulls for gaps."""
        bookings = [
            {
                "_id": "booking-1",
                "status": "confirmed",
                "createdAt": "2026-10-01T10:00:00Z",
                "classSession": {
                    "_id": "session-1",
                    "startTime": "2026-10-20T07:00:00Z",
                    "activity": {"name": "Sunrise Flow", "instructor": "Sam", "duration": 45},
                    "venue": {"name": "Studio One", "city": "London"},
                },
            },
            {"_id": "booking-2", "status": None, "createdAt": None, "classSession": None},
        ]
        result = await run_tool("getUserBookings", {"clerkId": "user_123"}, make_client(bookings))

        assert result["count"] == 2
        assert result["type"] == "upcoming"
        assert result["bookings"][0] == {
            "id": "booking-1",
            "sessionId": "session-1",
            "status": "confirmed",
            "bookedAt": "2026-10-01T10:00:00Z",
            "attendedAt": None,
            "class": "Sunrise Flow",
            "instructor": "Sam",
            "duration": 45,
            "dateTime": "2026-10-20T07:00:00Z",
            "venue": "Studio One",
            "city": "London",
        }
        empty = result["bookings"][1]
        assert empty["id"] == "booking-2"
        assert all(empty[key] is None for key in empty if key != "id")
