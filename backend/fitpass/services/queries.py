"""Named GROQ queries used by the assistant tools and profile actions.

User supplied values are never formatted into these strings; they are passed
as ``$params`` to :meth:`SanityClient.fetch`.
"""

# Activities with at least one upcoming, scheduled session.
UPCOMING_ACTIVITY_FILTER = (
    '_type == "activity" && count(*[_type == "classSession" '
    '&& activity._ref == ^._id && startTime > now() && status == "scheduled"]) > 0'
)

ACTIVITY_PROJECTION = """{
  _id,
  name,
  instructor,
  duration,
  tierLevel,
  category->{name}
}"""

VENUE_PROJECTION = """{
  _id,
  name,
  description,
  address,
  amenities
}"""

CLASS_SESSIONS_QUERY = """*[
  _type == "classSession"
  && activity->name match $classNamePattern
  && startTime > now()
  && status == "scheduled"
] | order(startTime asc) [0...10] {
  _id,
  startTime,
  maxCapacity,
  "currentBookings": count(*[_type == "booking" && classSession._ref == ^._id && status == "confirmed"]),
  activity->{name, instructor, duration, tierLevel},
  venue->{name, "city": address.city}
}"""

AI_SEARCH_VENUES_QUERY = f"""*[_type == "venue"] | order(name asc) [0...10] {VENUE_PROJECTION}"""

AI_CATEGORIES_QUERY = """*[_type == "category"] | order(name asc) {
  _id,
  name,
  description,
  "activityCount": count(*[_type == "activity" && category._ref == ^._id])
}"""

_BOOKING_PROJECTION = """{
  _id,
  status,
  createdAt,
  attendedAt,
  classSession->{
    _id,
    startTime,
    activity->{name, instructor, duration},
    venue->{name, "city": address.city}
  }
}"""

_USER_BOOKINGS_FILTER = '_type == "booking" && user->clerkId == $clerkId'

AI_USER_UPCOMING_BOOKINGS_QUERY = f"""*[
  {_USER_BOOKINGS_FILTER}
  && status == "confirmed"
  && classSession->startTime > now()
] | order(classSession->startTime asc) [0...20] {_BOOKING_PROJECTION}"""

AI_USER_PAST_BOOKINGS_QUERY = f"""*[
  {_USER_BOOKINGS_FILTER}
  && classSession->startTime <= now()
] | order(classSession->startTime desc) [0...20] {_BOOKING_PROJECTION}"""

AI_USER_ALL_BOOKINGS_QUERY = f"""*[
  {_USER_BOOKINGS_FILTER}
] | order(classSession->startTime desc) [0...20] {_BOOKING_PROJECTION}"""

USER_PROFILE_ID_QUERY = """*[_type == "userProfile" && clerkId == $clerkId][0]._id"""

USER_PROFILE_WITH_PREFERENCES_QUERY = """*[_type == "userProfile" && clerkId == $clerkId][0] {
  _id,
  clerkId,
  location,
  searchRadius
}"""


def match_pattern(text: str) -> str:
    """Wrap ``text`` in GROQ ``match`` wildcards."""
    return f"*{text}*"
