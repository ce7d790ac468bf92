"""Integration tests for the trip planning pipeline tiers.

Real components throughout; only the edges (geocoder HTTP, routing
providers, generative backend) are stubbed.
"""

import httpx
import pytest

from backend.app.adapters.fixtures import FallbackCatalog
from backend.app.adapters.geocoding import AddressResolver, DestinationNotFoundError
from backend.app.config import Settings
from backend.app.llm.client import GenerationError
from backend.app.llm.enhancer import AIEnhancer
from backend.app.models.common import Coordinates, ItineraryProvenance, RouteFilter
from backend.app.models.itinerary import LockedReasoning
from backend.app.models.query import TripQuery
from backend.app.orchestration.pipeline import TripPlanningPipeline, build_pipeline
from backend.app.providers.base import ProviderFailureKind, ProviderOutcome
from backend.app.providers.cascade import ProviderCascade
from tests.helpers import ScriptedGenerativeClient, generated_item, generated_json

DEFAULT_ORIGIN = Coordinates(lat=-23.5615, lon=-46.6559)
IBIRAPUERA = {"lat": "-23.5874", "lon": "-46.6576", "display_name": "Parque Ibirapuera"}


class RecordingProvider:
    def __init__(self, name: str, itineraries=None, failure=None) -> None:
        self.name = name
        self.provenance = ItineraryProvenance.primary_engine
        self._itineraries = itineraries or []
        self._failure = failure
        self.calls: list[tuple[Coordinates, Coordinates]] = []

    async def fetch(self, origin: Coordinates, destination: Coordinates) -> ProviderOutcome:
        self.calls.append((origin, destination))
        if self._failure:
            return ProviderOutcome(provider=self.name, failure=self._failure)
        return ProviderOutcome(provider=self.name, itineraries=list(self._itineraries))

    async def plan_trip(self, origin: Coordinates, destination: Coordinates):
        return (await self.fetch(origin, destination)).itineraries


def _geocoder(results: list[dict]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=results)))


def _pipeline(
    providers: list[RecordingProvider],
    generative: ScriptedGenerativeClient,
    *,
    geocoder_results: list[dict] | None = None,
    enhance_results: bool = True,
) -> TripPlanningPipeline:
    return TripPlanningPipeline(
        resolver=AddressResolver(client=_geocoder([IBIRAPUERA] if geocoder_results is None else geocoder_results)),
        cascade=ProviderCascade(providers),
        enhancer=AIEnhancer(generative),
        fallback=FallbackCatalog(),
        default_origin=DEFAULT_ORIGIN,
        enhance_results=enhance_results,
    )


def _query(weather, **kwargs) -> TripQuery:
    return TripQuery(destination_text="Ibirapuera Park", weather=weather, **kwargs)


@pytest.mark.asyncio
async def test_unknown_destination_raises_before_any_provider(weather) -> None:
    provider = RecordingProvider("primary")
    pipeline = _pipeline([provider], ScriptedGenerativeClient(), geocoder_results=[])

    with pytest.raises(DestinationNotFoundError):
        await pipeline.plan(_query(weather))

    assert provider.calls == []


@pytest.mark.asyncio
async def test_provider_results_are_enhanced(weather, make_itinerary) -> None:
    provider = RecordingProvider("primary", [make_itinerary("p-1"), make_itinerary("p-2", total_time=12)])
    generative = ScriptedGenerativeClient(
        generated_json(
            generated_item(["walk", "bus", "walk"], reasoning="Reliable."),
            generated_item(["walk", "bus", "walk"], reasoning="Quickest."),
        )
    )

    result = await _pipeline([provider], generative).plan(_query(weather, is_premium=True))

    assert [i.id for i in result] == ["p-2", "p-1"]
    assert all(i.provenance == ItineraryProvenance.ai_enhanced for i in result)
    assert result[0].reasoning_text == "Quickest."
    assert provider.calls == [(DEFAULT_ORIGIN, Coordinates(lat=-23.5874, lon=-46.6576))]


@pytest.mark.asyncio
async def test_enhancement_failure_keeps_raw_provider_results(weather, make_itinerary) -> None:
    provider = RecordingProvider("primary", [make_itinerary("p-1")])
    generative = ScriptedGenerativeClient(GenerationError("backend call failed: APITimeoutError"))

    result = await _pipeline([provider], generative).plan(_query(weather, is_premium=True))

    assert [i.id for i in result] == ["p-1"]
    assert result[0].provenance == ItineraryProvenance.primary_engine


@pytest.mark.asyncio
async def test_enhancement_disabled_skips_backend(weather, make_itinerary) -> None:
    generative = ScriptedGenerativeClient()
    pipeline = _pipeline([RecordingProvider("primary", [make_itinerary("p-1")])], generative, enhance_results=False)

    result = await pipeline.plan(_query(weather, is_premium=True))

    assert result[0].provenance == ItineraryProvenance.primary_engine
    # Only intent extraction could have used the backend, and none was wired
    assert generative.calls == []


@pytest.mark.asyncio
async def test_secondary_used_when_primary_empty(weather, make_itinerary) -> None:
    primary = RecordingProvider("primary", failure=ProviderFailureKind.timeout)
    secondary = RecordingProvider(
        "secondary", [make_itinerary("s-1", provenance=ItineraryProvenance.secondary_engine)]
    )

    result = await _pipeline([primary, secondary], ScriptedGenerativeClient(), enhance_results=False).plan(
        _query(weather, is_premium=True)
    )

    assert [i.id for i in result] == ["s-1"]
    assert result[0].provenance == ItineraryProvenance.secondary_engine


@pytest.mark.asyncio
async def test_no_providers_results_are_generated(weather) -> None:
    generative = ScriptedGenerativeClient(
        generated_json(
            generated_item(["walk", "bus", "walk"], total_time=30),
            generated_item(["walk", "metro"], total_time=20),
            generated_item(["ride"], total_time=15, cost=30.0),
        )
    )
    origin = Coordinates(lat=-23.55, lon=-46.63)

    result = await _pipeline([RecordingProvider("primary", failure=ProviderFailureKind.empty)], generative).plan(
        _query(weather, origin=origin, is_premium=True)
    )

    assert len(result) == 3
    assert all(i.provenance == ItineraryProvenance.ai_generated for i in result)
    assert [i.total_time for i in result] == [15, 20, 30]
    assert "-23.55000" in generative.calls[0]["user_prompt"]


@pytest.mark.asyncio
async def test_everything_failing_serves_fallback_catalog(weather) -> None:
    generative = ScriptedGenerativeClient(GenerationError("no generative backend configured"))
    pipeline = _pipeline([RecordingProvider("primary", failure=ProviderFailureKind.network)], generative)

    result = await pipeline.plan(_query(weather))

    assert len(result) == 3
    assert all(i.provenance == ItineraryProvenance.static_fallback for i in result)
    assert all(i.steps for i in result)


@pytest.mark.asyncio
async def test_non_premium_caller_gets_locked_reasoning(weather, make_itinerary) -> None:
    provider = RecordingProvider("primary", [make_itinerary("p-1", traffic_delay_minutes=4)])

    result = await _pipeline([provider], ScriptedGenerativeClient(), enhance_results=False).plan(_query(weather))

    assert isinstance(result[0].ai_reasoning, LockedReasoning)
    assert result[0].traffic_delay_minutes is None


@pytest.mark.asyncio
async def test_accessible_filter_may_empty_the_list(weather) -> None:
    generative = ScriptedGenerativeClient(generated_json(generated_item(["ride"], is_accessible=False)))
    pipeline = _pipeline([RecordingProvider("primary", failure=ProviderFailureKind.empty)], generative)

    result = await pipeline.plan(_query(weather), RouteFilter.accessible)

    assert result == []


def test_build_pipeline_wires_configured_components() -> None:
    settings = Settings(
        otp_transmodel_url="https://otp.example/transmodel",
        otp_plan_url="",
        openai_api_key=None,
        per_leg_fare=2.0,
        ai_enhancement_enabled=False,
        default_origin_lat=45.5,
        default_origin_lon=-73.5,
    )

    pipeline = build_pipeline(settings)

    assert [p.name for p in pipeline.cascade.providers] == ["otp_transmodel", "otp_plan"]
    assert pipeline.cascade.providers[0].fare_estimator.per_leg == 2.0
    assert pipeline.default_origin == Coordinates(lat=45.5, lon=-73.5)
    assert pipeline.enhance_results is False
    assert pipeline.resolver.generative_client is None
