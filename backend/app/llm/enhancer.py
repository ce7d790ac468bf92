"""AI enhancer - annotates or generates itineraries through the generative backend.

Two modes:
- enhance: real routing results go in, the model only adds annotations
  (reasoning, safety score, weather alert, calories, CO2). Structural facts are
  always taken from the input, and output whose step count or mode order
  differs from the input is rejected.
- generate: no routing results exist, the model invents a small set of
  distinct itineraries from origin, destination and weather.

Model output must follow a strict JSON schema. Anything that does not parse or
validate raises GenerationError; the caller decides what to fall back to.
"""

import json
import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from backend.app.llm.client import GenerationError, GenerativeClient
from backend.app.models.common import Coordinates, ItineraryProvenance, TransportMode
from backend.app.models.itinerary import Itinerary, Step, VisibleReasoning
from backend.app.models.query import WeatherSnapshot
from backend.app.providers.base import count_transfers, itinerary_id, mode_color

logger = logging.getLogger(__name__)

GENERATED_TAG = "ai-generated"
SCHEMA_NAME = "itinerary_list"


class EnhancementMode(str, Enum):
    """Whether the model annotates real routes or invents them."""

    enhance = "enhance"
    generate = "generate"


@dataclass(frozen=True)
class EnhancementPayload:
    """Input for one enhancer call."""

    weather: WeatherSnapshot
    destination_text: str = ""
    origin: Coordinates | None = None
    itineraries: Sequence[Itinerary] = field(default_factory=tuple)


# Model output contract


class GeneratedStep(BaseModel):
    """Step as returned by the model."""

    model_config = ConfigDict(extra="forbid")

    mode: TransportMode
    instruction: str
    duration_minutes: int = Field(..., ge=0)
    line_name: str | None = None
    color: str | None = None
    is_covered: bool | None = None


class GeneratedItinerary(BaseModel):
    """Itinerary as returned by the model."""

    model_config = ConfigDict(extra="forbid")

    id: str | None = None
    total_time: int = Field(..., ge=0)
    cost: float = Field(..., ge=0)
    walking_distance: int = Field(..., ge=0)
    transfers: int = Field(..., ge=0)
    co2_savings: int = Field(0, ge=0)
    is_accessible: bool
    start_time: str
    end_time: str
    steps: list[GeneratedStep]
    ai_reasoning: str
    safety_score: int | None = Field(None, ge=0, le=100)
    weather_alert: str | None = None
    calories_burned: int | None = Field(None, ge=0)
    traffic_delay_minutes: int | None = Field(None, ge=0)


class GeneratedItineraryList(BaseModel):
    model_config = ConfigDict(extra="forbid")

    itineraries: list[GeneratedItinerary]


def _nullable(json_type: str) -> dict[str, Any]:
    return {"type": [json_type, "null"]}


def itinerary_response_schema() -> dict[str, Any]:
    """Strict JSON schema for the model's output.

    Every property is required and nullable where optional, as strict
    structured-output backends demand; transport mode is a closed enum.
    """
    step_properties: dict[str, Any] = {
        "mode": {"type": "string", "enum": [m.value for m in TransportMode]},
        "instruction": {"type": "string"},
        "duration_minutes": {"type": "integer"},
        "line_name": _nullable("string"),
        "color": _nullable("string"),
        "is_covered": _nullable("boolean"),
    }
    itinerary_properties: dict[str, Any] = {
        "id": _nullable("string"),
        "total_time": {"type": "integer"},
        "cost": {"type": "number"},
        "walking_distance": {"type": "integer"},
        "transfers": {"type": "integer"},
        "co2_savings": {"type": "integer"},
        "is_accessible": {"type": "boolean"},
        "start_time": {"type": "string"},
        "end_time": {"type": "string"},
        "steps": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": step_properties,
                "required": list(step_properties),
                "additionalProperties": False,
            },
        },
        "ai_reasoning": {"type": "string"},
        "safety_score": _nullable("integer"),
        "weather_alert": _nullable("string"),
        "calories_burned": _nullable("integer"),
        "traffic_delay_minutes": _nullable("integer"),
    }
    return {
        "type": "object",
        "properties": {
            "itineraries": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": itinerary_properties,
                    "required": list(itinerary_properties),
                    "additionalProperties": False,
                },
            }
        },
        "required": ["itineraries"],
        "additionalProperties": False,
    }


_FENCE_RE = re.compile(
    r"^\s*```[\w+-]*[ \t]*\r?\n?(?P<body>.*?)\r?\n?[ \t]*```\s*$",
    re.DOTALL,
)


def strip_code_fence(text: str) -> str:
    """Remove one wrapping ``` fence (and its language tag) if present."""
    match = _FENCE_RE.match(text)
    if match:
        return match.group("body").strip()
    return text.strip()


def parse_generated(text: str) -> list[GeneratedItinerary]:
    """Parse raw model text into validated itineraries.

    Accepts the schema's ``{"itineraries": [...]}`` object or a bare list.

    Raises:
        GenerationError: If the text is not JSON or does not match the schema
    """
    cleaned = strip_code_fence(text)
    if not cleaned:
        raise GenerationError("model output is empty")

    try:
        data = json.loads(cleaned)
    except ValueError as e:
        raise GenerationError(f"model output is not JSON: {e}") from e

    if isinstance(data, list):
        data = {"itineraries": data}

    try:
        return GeneratedItineraryList.model_validate(data).itineraries
    except ValidationError as e:
        raise GenerationError(
            f"model output failed schema validation ({e.error_count()} error(s))"
        ) from e


def _weather_lines(weather: WeatherSnapshot) -> list[str]:
    lines = [
        f"- Temperature: {weather.temperature_c:.0f}°C",
        f"- Condition: {weather.condition}",
    ]
    if weather.humidity is not None:
        lines.append(f"- Humidity: {weather.humidity * 100:.0f}%")
    lines.append(f"- Rain expected within the hour: {'yes' if weather.rain_next_hour else 'no'}")
    return lines


class AIEnhancer:
    """Enriches or generates itineraries under a strict output schema."""

    def __init__(
        self,
        client: GenerativeClient,
        *,
        min_generated: int = 3,
        max_generated: int = 4,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize enhancer.

        Args:
            client: Generative backend client
            min_generated: Itineraries requested in generative mode (lower bound)
            max_generated: Itineraries kept in generative mode (upper bound)
            clock: Time source for identifiers and prompts (injectable for tests)
        """
        self.client = client
        self.min_generated = min_generated
        self.max_generated = max_generated
        self._clock = clock

    async def enhance(self, mode: EnhancementMode, payload: EnhancementPayload) -> list[Itinerary]:
        """Run one enhancer call.

        Returns:
            Validated itineraries (annotated originals, or newly generated ones)

        Raises:
            GenerationError: On backend failure, unparseable or schema-invalid
                output, empty generation, or structural changes in enhance mode
        """
        if mode == EnhancementMode.enhance:
            return await self._enhance_existing(payload)
        return await self._generate(payload)

    # Enhancement mode

    async def _enhance_existing(self, payload: EnhancementPayload) -> list[Itinerary]:
        originals = list(payload.itineraries)
        if not originals:
            raise GenerationError("enhancement mode needs at least one itinerary")

        raw = await self.client.generate(
            system_prompt=self._build_enhance_system_prompt(),
            user_prompt=self._build_enhance_context(payload),
            schema_name=SCHEMA_NAME,
            response_schema=itinerary_response_schema(),
        )
        annotated = parse_generated(raw)

        if len(annotated) != len(originals):
            raise GenerationError(
                f"model returned {len(annotated)} itineraries for {len(originals)} inputs"
            )

        enhanced: list[Itinerary] = []
        for position, (original, item) in enumerate(zip(originals, annotated, strict=True)):
            original_modes = [s.mode for s in original.steps]
            returned_modes = [s.mode for s in item.steps]
            if original_modes != returned_modes:
                raise GenerationError(
                    f"model changed the legs of itinerary {position}: "
                    f"{[m.value for m in original_modes]} -> {[m.value for m in returned_modes]}"
                )
            returned_id = (item.id or "").strip()
            if returned_id and returned_id != original.id:
                raise GenerationError(
                    f"model reordered itinerary {position}: expected id {original.id!r}, got {returned_id!r}"
                )
            enhanced.append(self._merge_annotations(original, item))

        logger.info(f"[enhancer] Enhanced {len(enhanced)} itineraries")
        return enhanced

    def _merge_annotations(self, original: Itinerary, item: GeneratedItinerary) -> Itinerary:
        reasoning = (
            VisibleReasoning(text=item.ai_reasoning.strip())
            if item.ai_reasoning.strip()
            else original.ai_reasoning
        )
        return original.model_copy(
            update={
                "ai_reasoning": reasoning,
                "safety_score": item.safety_score
                if item.safety_score is not None
                else original.safety_score,
                "weather_alert": item.weather_alert or original.weather_alert,
                "calories_burned": item.calories_burned
                if item.calories_burned is not None
                else original.calories_burned,
                "co2_savings": original.co2_savings or item.co2_savings,
                "traffic_delay_minutes": item.traffic_delay_minutes
                if item.traffic_delay_minutes is not None
                else original.traffic_delay_minutes,
                "provenance": ItineraryProvenance.ai_enhanced,
            }
        )

    def _build_enhance_system_prompt(self) -> str:
        return """You are an urban mobility analyst. You receive real transit itineraries computed
by a routing engine, plus the current weather. Annotate them.

CRITICAL CONSTRAINTS:
- Return exactly one itinerary per input itinerary, in the same order.
- Copy id, steps (same count, same order, same modes), times, durations, costs,
  walking distance and transfers exactly as given. Do NOT add, drop, merge or reorder legs.
- Only fill in: ai_reasoning, safety_score (0-100), weather_alert, calories_burned,
  co2_savings (grams saved versus driving) and traffic_delay_minutes.
- ai_reasoning: one or two sentences explaining when to pick this option, including how its
  price compares with the other options (e.g. "30% cheaper than the fastest option").
- weather_alert: only when the weather materially affects the trip (rain on long walks,
  extreme heat or cold), otherwise null.
- Output JSON only, matching the provided schema."""

    def _build_enhance_context(self, payload: EnhancementPayload) -> str:
        lines = ["## Weather"]
        lines.extend(_weather_lines(payload.weather))
        lines.append("")

        if payload.destination_text:
            lines.append(f"## Destination\n- {payload.destination_text}")
            lines.append("")

        lines.append("## Itineraries")
        for itinerary in payload.itineraries:
            data = itinerary.model_dump(
                mode="json",
                include={
                    "id",
                    "total_time",
                    "cost",
                    "walking_distance",
                    "transfers",
                    "co2_savings",
                    "is_accessible",
                    "start_time",
                    "end_time",
                    "steps",
                },
            )
            lines.append(json.dumps(data, ensure_ascii=False))

        return "\n".join(lines)

    # Generative mode

    async def _generate(self, payload: EnhancementPayload) -> list[Itinerary]:
        origin = payload.origin
        if origin is None or not payload.destination_text.strip():
            raise GenerationError("generative mode needs an origin and a destination")

        raw = await self.client.generate(
            system_prompt=self._build_generate_system_prompt(),
            user_prompt=self._build_generate_context(payload, origin),
            schema_name=SCHEMA_NAME,
            response_schema=itinerary_response_schema(),
        )
        generated = parse_generated(raw)
        if not generated:
            raise GenerationError("model generated no itineraries")

        generated_at = self._clock()
        used_ids: set[str] = set()
        itineraries: list[Itinerary] = []
        for item in generated:
            if not item.steps:
                logger.warning("[enhancer] Dropping generated itinerary without steps")
                continue
            itinerary = self._to_itinerary(item, len(itineraries), generated_at, used_ids)
            used_ids.add(itinerary.id)
            itineraries.append(itinerary)

        if not itineraries:
            raise GenerationError("model generated no usable itineraries")

        if len(itineraries) > self.max_generated:
            logger.info(
                f"[enhancer] Keeping {self.max_generated} of {len(itineraries)} generated itineraries"
            )
            itineraries = itineraries[: self.max_generated]
        elif len(itineraries) < self.min_generated:
            logger.warning(
                f"[enhancer] Model generated {len(itineraries)} itineraries, "
                f"expected at least {self.min_generated}"
            )

        return itineraries

    def _to_itinerary(
        self,
        item: GeneratedItinerary,
        ordinal: int,
        generated_at: datetime,
        used_ids: set[str],
    ) -> Itinerary:
        ident = (item.id or "").strip()
        if not ident or ident in used_ids:
            ident = itinerary_id(GENERATED_TAG, ordinal, generated_at)

        steps = [
            Step(
                mode=s.mode,
                instruction=s.instruction,
                duration_minutes=s.duration_minutes,
                line_name=s.line_name,
                color=s.color or mode_color(s.mode),
                is_covered=s.is_covered,
            )
            for s in item.steps
        ]

        try:
            return Itinerary(
                id=ident,
                total_time=item.total_time,
                cost=item.cost,
                walking_distance=item.walking_distance,
                transfers=count_transfers(steps),
                co2_savings=item.co2_savings,
                is_accessible=item.is_accessible,
                start_time=item.start_time,
                end_time=item.end_time,
                steps=steps,
                ai_reasoning=VisibleReasoning(text=item.ai_reasoning),
                provenance=ItineraryProvenance.ai_generated,
                weather_alert=item.weather_alert,
                safety_score=item.safety_score,
                calories_burned=item.calories_burned,
                traffic_delay_minutes=item.traffic_delay_minutes,
            )
        except ValidationError as e:
            raise GenerationError(f"generated itinerary {ordinal} is invalid: {e}") from e

    def _build_generate_system_prompt(self) -> str:
        return f"""You are an expert urban mobility planner. No routing engine data is available,
so propose realistic public transport itineraries yourself.

CRITICAL CONSTRAINTS:
- Return between {self.min_generated} and {self.max_generated} materially different itineraries.
- Cover at least: the fastest option, the cheapest option, and one multi-modal or
  ride-hail ("ride") option.
- Use plausible line names and numbers for the local transit network of the origin city.
- Transport modes must be one of: {", ".join(m.value for m in TransportMode)}.
- Each itinerary needs at least one step; total_time should equal the sum of step durations.
- Costs are in local currency units; walking_distance in meters; co2_savings in grams
  saved versus driving the same trip.
- Take the weather into account: prefer covered options in rain, set weather_alert when
  the weather materially affects a route, otherwise null.
- ai_reasoning: one or two sentences on when to choose this option.
- Leave id null.
- Output JSON only, matching the provided schema."""

    def _build_generate_context(self, payload: EnhancementPayload, origin: Coordinates) -> str:
        lines = [
            "## Trip",
            f"- Origin coordinates: {origin.lat:.5f}, {origin.lon:.5f}",
            f"- Destination: {payload.destination_text}",
            f"- Departure: now ({self._clock().strftime('%H:%M')})",
            "",
            "## Weather",
        ]
        lines.extend(_weather_lines(payload.weather))
        return "\n".join(lines)
