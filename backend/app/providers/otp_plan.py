"""Secondary routing engine: OpenTripPlanner ``plan`` GraphQL API."""

from datetime import datetime, timedelta
from typing import Any

from backend.app.adapters.fares import FareEstimator
from backend.app.models.common import Coordinates, ItineraryProvenance, TransportMode
from backend.app.models.itinerary import Itinerary, Step, VisibleReasoning
from backend.app.models.provider_results import PlanData, PlanItinerary
from backend.app.providers.base import (
    GraphQLTripProvider,
    count_transfers,
    itinerary_id,
    map_native_mode,
    mode_color,
    seconds_to_minutes,
    step_instruction,
)

OTP_PLAN_TAG = "otp-plan"
SCHEDULE_REASONING = "Route computed from OpenTripPlanner schedule data."

PLAN_QUERY = """
query PlanTrip($fromLat: Float!, $fromLon: Float!, $toLat: Float!, $toLon: Float!, $count: Int!) {
  plan(
    from: {lat: $fromLat, lon: $fromLon}
    to: {lat: $toLat, lon: $toLon}
    numItineraries: $count
    transportModes: [{mode: TRANSIT}, {mode: WALK}]
  ) {
    itineraries {
      startTime
      endTime
      duration
      walkDistance
      legs {
        mode
        startTime
        endTime
        duration
        distance
        route { shortName longName }
        from { name lat lon }
        to { name lat lon }
      }
    }
  }
}
"""


def _clock(epoch_ms: int | None, default: datetime) -> str:
    if epoch_ms is None:
        return default.strftime("%H:%M")
    return datetime.fromtimestamp(epoch_ms / 1000).strftime("%H:%M")


def map_plan_itinerary(
    itinerary: PlanItinerary,
    index: int,
    *,
    fare_estimator: FareEstimator,
    generated_at: datetime,
) -> Itinerary:
    """Map one OTP plan itinerary to an Itinerary.

    Raises:
        ValueError: If the itinerary has no legs
    """
    if not itinerary.legs:
        raise ValueError("plan itinerary has no legs")

    steps: list[Step] = []
    for leg in itinerary.legs:
        mode = map_native_mode(leg.mode)
        line = (leg.route.short_name or leg.route.long_name) if leg.route else None
        to_name = leg.to_place.name if leg.to_place else None

        if leg.duration is not None:
            minutes = seconds_to_minutes(leg.duration)
        elif leg.start_time is not None and leg.end_time is not None:
            minutes = round((leg.end_time - leg.start_time) / 60000)
        else:
            minutes = 0

        steps.append(
            Step(
                mode=mode,
                instruction=step_instruction(mode, line, leg.mode, to_name),
                duration_minutes=max(0, minutes),
                line_name=line or None,
                color=mode_color(mode),
            )
        )

    if itinerary.duration is not None:
        total_time = seconds_to_minutes(itinerary.duration)
    else:
        total_time = sum(step.duration_minutes for step in steps)

    if itinerary.walk_distance is not None:
        walking_distance = round(itinerary.walk_distance)
    else:
        walking_distance = round(
            sum(leg.distance or 0 for leg in itinerary.legs if map_native_mode(leg.mode) == TransportMode.walk)
        )

    return Itinerary(
        id=itinerary_id(OTP_PLAN_TAG, index, generated_at),
        total_time=total_time,
        cost=fare_estimator.estimate(steps),
        walking_distance=walking_distance,
        transfers=count_transfers(steps),
        co2_savings=0,
        is_accessible=True,
        start_time=_clock(itinerary.start_time, generated_at),
        end_time=_clock(itinerary.end_time, generated_at + timedelta(minutes=total_time)),
        steps=steps,
        ai_reasoning=VisibleReasoning(text=SCHEDULE_REASONING),
        provenance=ItineraryProvenance.secondary_engine,
        is_premium=True,
    )


class OTPPlanProvider(GraphQLTripProvider[PlanItinerary]):
    """Secondary engine backed by an OTP ``plan`` GraphQL endpoint."""

    name = "otp_plan"
    provenance = ItineraryProvenance.secondary_engine
    query = PLAN_QUERY

    def build_variables(self, origin: Coordinates, destination: Coordinates) -> dict[str, Any]:
        return {
            "fromLat": origin.lat,
            "fromLon": origin.lon,
            "toLat": destination.lat,
            "toLon": destination.lon,
            "count": self.result_count,
        }

    def extract_patterns(self, data: Any) -> list[PlanItinerary]:
        parsed = PlanData.model_validate(data or {})
        return parsed.plan.itineraries if parsed.plan else []

    def map_pattern(self, pattern: PlanItinerary, index: int, generated_at: datetime) -> Itinerary:
        return map_plan_itinerary(
            pattern, index, fare_estimator=self.fare_estimator, generated_at=generated_at
        )
