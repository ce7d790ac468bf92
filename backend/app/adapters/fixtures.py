"""Static fallback itineraries used when every upstream source fails."""

from typing import Any

from backend.app.models.common import ItineraryProvenance, TransportMode
from backend.app.models.itinerary import Itinerary

OFFLINE_REASONING_PREFIX = "Offline estimate:"

_DEFAULT_ITINERARIES: tuple[dict[str, Any], ...] = (
    {
        "id": "fallback-fast-1",
        "total_time": 18,
        "start_time": "08:15",
        "end_time": "08:33",
        "cost": 4.40,
        "walking_distance": 450,
        "transfers": 0,
        "co2_savings": 920,
        "is_accessible": True,
        "ai_reasoning": {
            "kind": "visible",
            "text": f"{OFFLINE_REASONING_PREFIX} fastest option, an express bus on a dedicated lane.",
        },
        "steps": [
            {"mode": TransportMode.walk, "instruction": "Walk to stop A", "duration_minutes": 5},
            {
                "mode": TransportMode.bus,
                "instruction": "Express bus 101",
                "duration_minutes": 10,
                "line_name": "101",
                "color": "#3B82F6",
            },
            {"mode": TransportMode.walk, "instruction": "Walk to your destination", "duration_minutes": 3},
        ],
    },
    {
        "id": "fallback-cheap-1",
        "total_time": 35,
        "start_time": "08:10",
        "end_time": "08:45",
        "cost": 2.20,
        "walking_distance": 800,
        "transfers": 0,
        "co2_savings": 1100,
        "is_accessible": False,
        "ai_reasoning": {
            "kind": "visible",
            "text": f"{OFFLINE_REASONING_PREFIX} cheapest option, a direct local bus on the social fare.",
        },
        "steps": [
            {"mode": TransportMode.walk, "instruction": "Walk to the local bus stop", "duration_minutes": 10},
            {
                "mode": TransportMode.bus,
                "instruction": "Local bus 404",
                "duration_minutes": 20,
                "line_name": "404",
                "color": "#EF4444",
            },
            {"mode": TransportMode.walk, "instruction": "Walk to your destination", "duration_minutes": 5},
        ],
    },
    {
        "id": "fallback-lowwalk-1",
        "total_time": 25,
        "start_time": "08:15",
        "end_time": "08:40",
        "cost": 4.40,
        "walking_distance": 150,
        "transfers": 1,
        "co2_savings": 850,
        "is_accessible": True,
        "ai_reasoning": {
            "kind": "visible",
            "text": f"{OFFLINE_REASONING_PREFIX} least walking, short timed transfers door to door.",
        },
        "steps": [
            {"mode": TransportMode.walk, "instruction": "Walk to the stop around the corner", "duration_minutes": 2},
            {
                "mode": TransportMode.bus,
                "instruction": "Feeder bus A1",
                "duration_minutes": 8,
                "line_name": "A1",
                "color": "#10B981",
            },
            {
                "mode": TransportMode.metro,
                "instruction": "Metro line 1",
                "duration_minutes": 15,
                "line_name": "L1",
                "color": "#3B82F6",
            },
        ],
    },
)


class FallbackCatalog:
    """Terminal safety net: a fixed, location-agnostic itinerary set."""

    def get_defaults(self) -> list[Itinerary]:
        """Fresh copies of the default itineraries (never empty)."""
        return [
            Itinerary.model_validate({**data, "provenance": ItineraryProvenance.static_fallback})
            for data in _DEFAULT_ITINERARIES
        ]
