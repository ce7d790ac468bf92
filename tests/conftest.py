"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable
from typing import Any

import pytest

from backend.app.models.common import ItineraryProvenance, TransportMode
from backend.app.models.itinerary import Itinerary, Step, VisibleReasoning
from backend.app.models.query import WeatherSnapshot


@pytest.fixture
def weather() -> WeatherSnapshot:
    return WeatherSnapshot(temperature_c=24.0, condition="Partly Cloudy", humidity=0.6, rain_next_hour=False)


@pytest.fixture
def make_itinerary() -> Callable[..., Itinerary]:
    """Factory for valid itineraries with sensible defaults."""

    def _make(
        id: str = "it-1",
        *,
        total_time: int = 20,
        cost: float = 3.0,
        walking_distance: int = 400,
        transfers: int = 0,
        is_accessible: bool = True,
        modes: tuple[TransportMode, ...] = (TransportMode.walk, TransportMode.bus, TransportMode.walk),
        provenance: ItineraryProvenance = ItineraryProvenance.primary_engine,
        **overrides: Any,
    ) -> Itinerary:
        data: dict[str, Any] = {
            "id": id,
            "total_time": total_time,
            "cost": cost,
            "walking_distance": walking_distance,
            "transfers": transfers,
            "is_accessible": is_accessible,
            "start_time": "08:00",
            "end_time": "08:20",
            "steps": [
                Step(mode=mode, instruction=f"Use {mode.value}", duration_minutes=5) for mode in modes
            ],
            "ai_reasoning": VisibleReasoning(text="Route computed from published GTFS schedule data."),
            "provenance": provenance,
        }
        data.update(overrides)
        return Itinerary(**data)

    return _make
