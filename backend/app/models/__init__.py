"""Models package - re-exports for convenience."""

from backend.app.models.common import (
    Coordinates,
    ItineraryProvenance,
    RouteFilter,
    TransportMode,
)
from backend.app.models.itinerary import (
    Itinerary,
    LockedReasoning,
    Reasoning,
    Step,
    VisibleReasoning,
)
from backend.app.models.provider_results import (
    PlanItinerary,
    PlanLeg,
    TransmodelLeg,
    TripPattern,
)
from backend.app.models.query import TravelIntent, TripQuery, WeatherSnapshot

__all__ = [
    # Common
    "Coordinates",
    "TransportMode",
    "ItineraryProvenance",
    "RouteFilter",
    # Itinerary
    "Itinerary",
    "Step",
    "Reasoning",
    "VisibleReasoning",
    "LockedReasoning",
    # Query
    "TripQuery",
    "WeatherSnapshot",
    "TravelIntent",
    # Provider results
    "TripPattern",
    "TransmodelLeg",
    "PlanItinerary",
    "PlanLeg",
]
