"""Itinerary models - canonical trip results handed to the caller."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from backend.app.models.common import ItineraryProvenance, TransportMode


class VisibleReasoning(BaseModel):
    """AI reasoning the caller is allowed to see."""

    kind: Literal["visible"] = "visible"
    text: str


class LockedReasoning(BaseModel):
    """Placeholder for reasoning withheld from non-premium callers."""

    kind: Literal["locked"] = "locked"


Reasoning = Annotated[VisibleReasoning | LockedReasoning, Field(discriminator="kind")]


class Step(BaseModel):
    """One uninterrupted leg of travel."""

    mode: TransportMode
    instruction: str
    duration_minutes: int = Field(..., ge=0)
    line_name: str | None = None
    color: str | None = None
    is_covered: bool | None = None


class Itinerary(BaseModel):
    """Complete proposed trip from origin to destination.

    An itinerary without steps is not usable, so ``steps`` must contain at
    least one entry; anything upstream that cannot produce a step is dropped
    before it gets here.
    """

    id: str = Field(..., min_length=1)
    total_time: int = Field(..., ge=0, description="Door-to-door minutes")
    cost: float = Field(..., ge=0, description="Currency-agnostic fare estimate")
    walking_distance: int = Field(..., ge=0, description="Meters on foot")
    transfers: int = Field(..., ge=0)
    co2_savings: int = Field(0, ge=0, description="Grams saved vs. driving, 0 when unknown")
    is_accessible: bool
    start_time: str
    end_time: str
    steps: list[Step] = Field(..., min_length=1)
    ai_reasoning: Reasoning
    provenance: ItineraryProvenance
    is_premium: bool | None = None
    weather_alert: str | None = None
    safety_score: int | None = Field(None, ge=0, le=100)
    calories_burned: int | None = Field(None, ge=0)
    traffic_delay_minutes: int | None = Field(None, ge=0)

    @property
    def reasoning_text(self) -> str | None:
        """Reasoning text, or None when locked."""
        if isinstance(self.ai_reasoning, VisibleReasoning):
            return self.ai_reasoning.text
        return None

    @property
    def non_walk_steps(self) -> list[Step]:
        return [s for s in self.steps if s.mode != TransportMode.walk]
