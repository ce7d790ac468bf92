"""Trip planning endpoints - POST /trips/plan and GET /trips/recent."""

import logging
from functools import lru_cache
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from backend.app.adapters.geocoding import DestinationNotFoundError
from backend.app.adapters.weather import default_weather, fetch_current_weather
from backend.app.config import Settings, get_settings
from backend.app.db.recent_trips import InMemoryRecentTripStore, RecentTrip, get_recent_trip_store
from backend.app.models.common import Coordinates, RouteFilter
from backend.app.models.itinerary import Itinerary
from backend.app.models.query import TripQuery, WeatherSnapshot
from backend.app.orchestration.pipeline import TripPlanningPipeline, build_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])


class PlanTripRequest(BaseModel):
    """Request body for POST /trips/plan."""

    destination: str = Field(..., min_length=1, description="Free-text destination or request")
    origin: Coordinates | None = Field(None, description="Traveler position (default origin if omitted)")
    route_filter: RouteFilter = RouteFilter.fastest
    is_premium: bool = False


class PlanTripResponse(BaseModel):
    """Response for POST /trips/plan."""

    itineraries: list[Itinerary]
    weather: WeatherSnapshot


@lru_cache
def get_pipeline() -> TripPlanningPipeline:
    """Process-wide pipeline built from settings."""
    return build_pipeline(get_settings())


async def get_weather_for(origin: Coordinates, settings: Settings) -> WeatherSnapshot:
    """Live weather at the origin, or a neutral default when unavailable."""
    try:
        return await fetch_current_weather(
            origin,
            base_url=settings.weather_url,
            timeout_seconds=settings.weather_timeout_seconds,
        )
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Weather unavailable, using default: {e}")
        return default_weather()


@router.post("/plan", response_model=PlanTripResponse, status_code=status.HTTP_200_OK)
async def plan_trip(
    request: PlanTripRequest,
    pipeline: Annotated[TripPlanningPipeline, Depends(get_pipeline)],
    store: Annotated[InMemoryRecentTripStore, Depends(get_recent_trip_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> PlanTripResponse:
    """Plan a trip to a free-text destination.

    Returns:
        Ranked itineraries plus the weather used as context

    Raises:
        HTTPException: 404 if the destination cannot be resolved
    """
    if not request.destination.strip():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Destination not found: empty destination")

    origin = request.origin or Coordinates(lat=settings.default_origin_lat, lon=settings.default_origin_lon)
    weather = await get_weather_for(origin, settings)

    query = TripQuery(
        origin=request.origin,
        destination_text=request.destination,
        weather=weather,
        is_premium=request.is_premium,
    )

    logger.info(f"[POST /trips/plan] destination={request.destination!r}, filter={request.route_filter.value}")

    try:
        itineraries = await pipeline.plan(query, request.route_filter)
    except DestinationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    store.record(query, itineraries, request.route_filter)

    return PlanTripResponse(itineraries=itineraries, weather=weather)


@router.get("/recent", response_model=list[RecentTrip])
async def list_recent_trips(
    store: Annotated[InMemoryRecentTripStore, Depends(get_recent_trip_store)],
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> list[RecentTrip]:
    """Recent searches, newest first."""
    return store.list_recent(limit)
