"""Query models - the read-only input of one search."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.app.models.common import Coordinates


class WeatherSnapshot(BaseModel):
    """Current weather at the origin, used as prompt context only."""

    model_config = ConfigDict(frozen=True)

    temperature_c: float
    condition: str
    humidity: float | None = Field(None, ge=0, le=1)
    rain_next_hour: bool = False


class TripQuery(BaseModel):
    """Single input threaded through the whole pipeline."""

    model_config = ConfigDict(frozen=True)

    origin: Coordinates | None = Field(
        None, description="Traveler position; None means use the configured default"
    )
    destination_text: str
    weather: WeatherSnapshot
    is_premium: bool = False

    @field_validator("destination_text")
    @classmethod
    def validate_destination_not_blank(cls, v: str) -> str:
        """Ensure destination text carries something to resolve."""
        if not v.strip():
            raise ValueError("destination_text must not be blank")
        return v


class TravelIntent(BaseModel):
    """Structured reading of a free-text mobility request."""

    destination: str
    time: str | None = None
    time_type: Literal["departure", "arrival"] | None = None
    is_accessible: bool | None = None
