"""Provider result models - native routing backend shapes.

These mirror the GraphQL responses of each routing backend. They are only
consumed by the provider's own mapping function; nothing past that boundary
sees these field names.
"""

from pydantic import BaseModel, ConfigDict, Field


class _NativeModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class NamedPlace(_NativeModel):
    """Leg endpoint as reported by the backend."""

    name: str | None = None
    lat: float | None = None
    lon: float | None = None


# Transmodel (OTP "trip" API)


class TransmodelLine(_NativeModel):
    id: str | None = None
    public_code: str | None = Field(None, alias="publicCode")


class TransmodelLeg(_NativeModel):
    mode: str
    distance: float | None = None
    duration: float | None = Field(None, description="Seconds")
    from_place: NamedPlace | None = Field(None, alias="fromPlace")
    to_place: NamedPlace | None = Field(None, alias="toPlace")
    line: TransmodelLine | None = None


class TripPattern(_NativeModel):
    """One Transmodel trip pattern (a candidate itinerary)."""

    start_time: str | None = Field(None, alias="expectedStartTime")
    end_time: str | None = Field(None, alias="expectedEndTime")
    duration: float | None = Field(None, description="Seconds")
    walk_distance: float | None = Field(None, alias="walkDistance")
    legs: list[TransmodelLeg] = Field(default_factory=list)


class TransmodelTrip(_NativeModel):
    trip_patterns: list[TripPattern] = Field(default_factory=list, alias="tripPatterns")


class TransmodelData(_NativeModel):
    trip: TransmodelTrip | None = None


# OTP "plan" API


class PlanRoute(_NativeModel):
    short_name: str | None = Field(None, alias="shortName")
    long_name: str | None = Field(None, alias="longName")


class PlanLeg(_NativeModel):
    mode: str
    start_time: int | None = Field(None, alias="startTime", description="Epoch milliseconds")
    end_time: int | None = Field(None, alias="endTime", description="Epoch milliseconds")
    duration: float | None = Field(None, description="Seconds")
    distance: float | None = None
    route: PlanRoute | None = None
    from_place: NamedPlace | None = Field(None, alias="from")
    to_place: NamedPlace | None = Field(None, alias="to")


class PlanItinerary(_NativeModel):
    """One OTP plan itinerary."""

    start_time: int | None = Field(None, alias="startTime", description="Epoch milliseconds")
    end_time: int | None = Field(None, alias="endTime", description="Epoch milliseconds")
    duration: float | None = Field(None, description="Seconds")
    walk_distance: float | None = Field(None, alias="walkDistance")
    legs: list[PlanLeg] = Field(default_factory=list)


class PlanResult(_NativeModel):
    itineraries: list[PlanItinerary] = Field(default_factory=list)


class PlanData(_NativeModel):
    plan: PlanResult | None = None
