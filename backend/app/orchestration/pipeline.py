"""Trip planning pipeline - intent, geocoding, routing cascade, AI tier, gate, rank.

Degradation order for one search:

1. Real routing results, AI-enhanced
2. Real routing results, raw (enhancement failed or disabled)
3. AI-generated itineraries (no provider returned anything)
4. Static fallback catalog (generation failed too)

Only an unresolvable destination leaves the pipeline as an error.
"""

import logging

from backend.app.adapters.fares import FlatLegFare
from backend.app.adapters.fixtures import FallbackCatalog
from backend.app.adapters.geocoding import AddressResolver
from backend.app.config import Settings
from backend.app.llm.client import (
    GenerationError,
    UnconfiguredGenerativeClient,
    get_generative_client,
)
from backend.app.llm.enhancer import AIEnhancer, EnhancementMode, EnhancementPayload
from backend.app.models.common import Coordinates, RouteFilter
from backend.app.models.itinerary import Itinerary
from backend.app.models.query import TripQuery
from backend.app.orchestration.premium import apply_entitlement
from backend.app.orchestration.ranker import rank
from backend.app.providers.cascade import ProviderCascade
from backend.app.providers.otp_plan import OTPPlanProvider
from backend.app.providers.transmodel import TransmodelProvider
from backend.app.utils.logging import StructuredPipelineLogger
from backend.app.utils.metrics import PrometheusPipelineMetrics

logger = logging.getLogger(__name__)


class TripPlanningPipeline:
    """Runs one search end to end; holds no per-search state."""

    def __init__(
        self,
        resolver: AddressResolver,
        cascade: ProviderCascade,
        enhancer: AIEnhancer,
        fallback: FallbackCatalog,
        *,
        default_origin: Coordinates,
        enhance_results: bool = True,
        metrics: PrometheusPipelineMetrics | None = None,
        structured_logger: StructuredPipelineLogger | None = None,
    ):
        self.resolver = resolver
        self.cascade = cascade
        self.enhancer = enhancer
        self.fallback = fallback
        self.default_origin = default_origin
        self.enhance_results = enhance_results
        self._metrics = metrics or PrometheusPipelineMetrics()
        self._logger = structured_logger or StructuredPipelineLogger()

    async def plan(self, query: TripQuery, route_filter: RouteFilter = RouteFilter.fastest) -> list[Itinerary]:
        """Plan a trip for one query.

        Args:
            query: Destination text, optional origin, weather and entitlement
            route_filter: Ranking criterion applied last

        Returns:
            Gated and ranked itineraries. Non-empty unless ``route_filter`` is
            ``accessible`` and nothing qualifies.

        Raises:
            DestinationNotFoundError: Destination could not be geocoded (no
                routing provider is called in that case)
        """
        destination_text = await self.resolver.extract_intent(query.destination_text)
        destination = await self.resolver.resolve_destination(destination_text)
        origin = query.origin or self.default_origin

        cascade_result = await self.cascade.plan_detailed(origin, destination)

        if cascade_result.itineraries:
            itineraries = await self._enhance(cascade_result.itineraries, query)
        else:
            itineraries = await self._generate(origin, destination_text, query)

        itineraries = [i for i in itineraries if i.steps]
        if not itineraries:
            logger.warning("[pipeline] No usable itineraries, serving fallback catalog")
            itineraries = self.fallback.get_defaults()

        provenance = itineraries[0].provenance.value
        self._metrics.inc_search_result(provenance)
        self._logger.log_search_outcome(destination_text, provenance, len(itineraries), route_filter.value)

        gated = apply_entitlement(itineraries, query.is_premium)
        return rank(gated, route_filter)

    async def _enhance(self, itineraries: list[Itinerary], query: TripQuery) -> list[Itinerary]:
        if not self.enhance_results:
            return itineraries

        payload = EnhancementPayload(weather=query.weather, itineraries=tuple(itineraries))
        try:
            return await self.enhancer.enhance(EnhancementMode.enhance, payload)
        except GenerationError as e:
            logger.warning(f"[pipeline] Enhancement failed, keeping raw provider results: {e}")
            self._metrics.inc_generation_failure(EnhancementMode.enhance.value)
            return itineraries

    async def _generate(self, origin: Coordinates, destination_text: str, query: TripQuery) -> list[Itinerary]:
        payload = EnhancementPayload(
            weather=query.weather,
            destination_text=destination_text,
            origin=origin,
        )
        try:
            return await self.enhancer.enhance(EnhancementMode.generate, payload)
        except GenerationError as e:
            logger.warning(f"[pipeline] Generation failed, serving fallback catalog: {e}")
            self._metrics.inc_generation_failure(EnhancementMode.generate.value)
            return self.fallback.get_defaults()


def build_pipeline(settings: Settings) -> TripPlanningPipeline:
    """Wire the concrete components from settings."""
    generative_client = get_generative_client(settings)
    fare_estimator = FlatLegFare(per_leg=settings.per_leg_fare)
    # Without a backend, intent extraction passes the raw text straight through
    intent_client = None if isinstance(generative_client, UnconfiguredGenerativeClient) else generative_client

    providers = [
        TransmodelProvider(
            settings.otp_transmodel_url,
            client_name=settings.otp_client_name,
            timeout_seconds=settings.provider_timeout_seconds,
            result_count=settings.provider_result_count,
            fare_estimator=fare_estimator,
        ),
        OTPPlanProvider(
            settings.otp_plan_url,
            timeout_seconds=settings.provider_timeout_seconds,
            result_count=settings.provider_result_count,
            fare_estimator=fare_estimator,
        ),
    ]

    metrics = PrometheusPipelineMetrics()
    structured_logger = StructuredPipelineLogger()

    return TripPlanningPipeline(
        resolver=AddressResolver(
            geocoding_url=settings.geocoding_url,
            user_agent=settings.geocoding_user_agent,
            timeout_seconds=settings.geocoding_timeout_seconds,
            generative_client=intent_client,
        ),
        cascade=ProviderCascade(providers, metrics=metrics, structured_logger=structured_logger),
        enhancer=AIEnhancer(
            generative_client,
            min_generated=settings.generated_itineraries_min,
            max_generated=settings.generated_itineraries_max,
        ),
        fallback=FallbackCatalog(),
        default_origin=Coordinates(lat=settings.default_origin_lat, lon=settings.default_origin_lon),
        enhance_results=settings.ai_enhancement_enabled,
        metrics=metrics,
        structured_logger=structured_logger,
    )
