"""Fare estimation strategies for routing results without native fare data."""

from collections.abc import Sequence
from typing import Protocol

from backend.app.models.common import TransportMode
from backend.app.models.itinerary import Step

DEFAULT_PER_LEG_FARE = 1.5


class FareEstimator(Protocol):
    """Protocol for fare estimation strategies."""

    def estimate(self, steps: Sequence[Step]) -> float:
        """Estimate the fare of an ordered list of steps."""
        ...


class FlatLegFare:
    """Flat surcharge for every non-walking step.

    Placeholder fare model: real deployments plug in a fare table instead.
    """

    def __init__(self, per_leg: float = DEFAULT_PER_LEG_FARE):
        if per_leg < 0:
            raise ValueError("per_leg must be >= 0")
        self.per_leg = per_leg

    def estimate(self, steps: Sequence[Step]) -> float:
        boarded = sum(1 for step in steps if step.mode != TransportMode.walk)
        return round(self.per_leg * boarded, 2)
