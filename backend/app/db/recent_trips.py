"""In-memory recent trip store - process-local, best effort."""

from collections import deque
from collections.abc import Sequence
from datetime import UTC, datetime
from functools import lru_cache

from pydantic import BaseModel

from backend.app.config import get_settings
from backend.app.models.common import RouteFilter
from backend.app.models.itinerary import Itinerary
from backend.app.models.query import TripQuery


class RecentTrip(BaseModel):
    """Summary of one completed search."""

    destination_text: str
    route_filter: RouteFilter
    result_count: int
    best_total_time: int | None
    provenance: str | None
    searched_at: datetime


class InMemoryRecentTripStore:
    """Bounded history of searches, newest first."""

    def __init__(self, capacity: int = 10) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._trips: deque[RecentTrip] = deque(maxlen=capacity)

    def record(
        self,
        query: TripQuery,
        itineraries: Sequence[Itinerary],
        route_filter: RouteFilter = RouteFilter.fastest,
    ) -> RecentTrip:
        """Remember one search; the oldest entry is evicted at capacity."""
        trip = RecentTrip(
            destination_text=query.destination_text,
            route_filter=route_filter,
            result_count=len(itineraries),
            best_total_time=min((i.total_time for i in itineraries), default=None),
            provenance=itineraries[0].provenance.value if itineraries else None,
            searched_at=datetime.now(UTC),
        )
        self._trips.appendleft(trip)
        return trip

    def list_recent(self, limit: int | None = None) -> list[RecentTrip]:
        trips = list(self._trips)
        if limit is not None:
            return trips[:limit]
        return trips

    def clear(self) -> None:
        self._trips.clear()


@lru_cache
def get_recent_trip_store() -> InMemoryRecentTripStore:
    """Process-wide store instance."""
    return InMemoryRecentTripStore(capacity=get_settings().recent_trips_capacity)
