"""Primary routing engine: OpenTripPlanner Transmodel ``trip`` API."""

from datetime import datetime, timedelta
from typing import Any

from backend.app.adapters.fares import FareEstimator
from backend.app.models.common import Coordinates, ItineraryProvenance, TransportMode
from backend.app.models.itinerary import Itinerary, Step, VisibleReasoning
from backend.app.models.provider_results import TransmodelData, TripPattern
from backend.app.providers.base import (
    GraphQLTripProvider,
    count_transfers,
    itinerary_id,
    map_native_mode,
    mode_color,
    seconds_to_minutes,
    step_instruction,
)

TRANSMODEL_TAG = "otp-transmodel"
SCHEDULE_REASONING = "Route computed from published GTFS schedule data."

TRANSMODEL_QUERY = """
query Trip($fromLat: Float!, $fromLon: Float!, $toLat: Float!, $toLon: Float!, $count: Int!) {
  trip(
    from: {coordinates: {latitude: $fromLat, longitude: $fromLon}}
    to: {coordinates: {latitude: $toLat, longitude: $toLon}}
    numTripPatterns: $count
  ) {
    tripPatterns {
      expectedStartTime
      expectedEndTime
      duration
      walkDistance
      legs {
        mode
        distance
        duration
        fromPlace { name }
        toPlace { name }
        line { id publicCode }
      }
    }
  }
}
"""


def _clock(value: str | None, default: datetime) -> str:
    """Render an ISO-8601 timestamp as HH:MM in its own offset."""
    if value:
        try:
            return datetime.fromisoformat(value).strftime("%H:%M")
        except ValueError:
            pass
    return default.strftime("%H:%M")


def map_trip_pattern(
    pattern: TripPattern,
    index: int,
    *,
    fare_estimator: FareEstimator,
    generated_at: datetime,
) -> Itinerary:
    """Map one Transmodel trip pattern to an Itinerary.

    Each leg becomes exactly one step, in order. Transfers count boardings after
    the first; cost comes from the fare estimator since the query carries no
    fare data.

    Raises:
        ValueError: If the pattern has no legs
    """
    if not pattern.legs:
        raise ValueError("trip pattern has no legs")

    steps: list[Step] = []
    for leg in pattern.legs:
        mode = map_native_mode(leg.mode)
        line = leg.line.public_code if leg.line else None
        to_name = leg.to_place.name if leg.to_place else None
        steps.append(
            Step(
                mode=mode,
                instruction=step_instruction(mode, line, leg.mode, to_name),
                duration_minutes=seconds_to_minutes(leg.duration),
                line_name=line or None,
                color=mode_color(mode),
            )
        )

    if pattern.duration is not None:
        total_time = seconds_to_minutes(pattern.duration)
    else:
        total_time = sum(step.duration_minutes for step in steps)

    if pattern.walk_distance is not None:
        walking_distance = round(pattern.walk_distance)
    else:
        walking_distance = round(
            sum(leg.distance or 0 for leg in pattern.legs if map_native_mode(leg.mode) == TransportMode.walk)
        )

    return Itinerary(
        id=itinerary_id(TRANSMODEL_TAG, index, generated_at),
        total_time=total_time,
        cost=fare_estimator.estimate(steps),
        walking_distance=walking_distance,
        transfers=count_transfers(steps),
        co2_savings=0,
        is_accessible=True,  # Transmodel exposes no per-pattern accessibility flag
        start_time=_clock(pattern.start_time, generated_at),
        end_time=_clock(pattern.end_time, generated_at + timedelta(minutes=total_time)),
        steps=steps,
        ai_reasoning=VisibleReasoning(text=SCHEDULE_REASONING),
        provenance=ItineraryProvenance.primary_engine,
        is_premium=True,
    )


class TransmodelProvider(GraphQLTripProvider[TripPattern]):
    """Primary engine backed by an OTP Transmodel GraphQL endpoint."""

    name = "otp_transmodel"
    provenance = ItineraryProvenance.primary_engine
    query = TRANSMODEL_QUERY

    def __init__(self, endpoint: str, *, client_name: str = "transit-planner-api", **kwargs: Any):
        super().__init__(endpoint, **kwargs)
        self.client_name = client_name

    def headers(self) -> dict[str, str]:
        # Public Transmodel deployments reject requests without a client name
        return {**super().headers(), "ET-Client-Name": self.client_name}

    def build_variables(self, origin: Coordinates, destination: Coordinates) -> dict[str, Any]:
        return {
            "fromLat": origin.lat,
            "fromLon": origin.lon,
            "toLat": destination.lat,
            "toLon": destination.lon,
            "count": self.result_count,
        }

    def extract_patterns(self, data: Any) -> list[TripPattern]:
        parsed = TransmodelData.model_validate(data or {})
        return parsed.trip.trip_patterns if parsed.trip else []

    def map_pattern(self, pattern: TripPattern, index: int, generated_at: datetime) -> Itinerary:
        return map_trip_pattern(
            pattern, index, fare_estimator=self.fare_estimator, generated_at=generated_at
        )
