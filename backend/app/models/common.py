"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    """Geographic coordinates (WGS84)."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class TransportMode(str, Enum):
    """Transport mode of a single step."""

    walk = "walk"
    bus = "bus"
    metro = "metro"
    train = "train"
    bike = "bike"
    ride = "ride"  # ride-hail
    scooter = "scooter"


class ItineraryProvenance(str, Enum):
    """Which pipeline tier produced an itinerary."""

    primary_engine = "primary_engine"
    secondary_engine = "secondary_engine"
    ai_generated = "ai_generated"
    ai_enhanced = "ai_enhanced"
    static_fallback = "static_fallback"


class RouteFilter(str, Enum):
    """Ranking criterion selected by the caller."""

    fastest = "fastest"
    cheapest = "cheapest"
    less_walking = "less_walking"
    less_transfers = "less_transfers"
    accessible = "accessible"
