"""Provider cascade - ordered fallback across routing backends.

Providers are tried strictly in priority order and the first non-empty result
wins. Results are never merged across providers so a list never mixes fare or
time bases. All-empty is a normal outcome: the caller reads it as "no real
data, generate instead".
"""

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from backend.app.models.common import Coordinates
from backend.app.models.itinerary import Itinerary
from backend.app.providers.base import ProviderFailureKind, ProviderOutcome, TripProvider
from backend.app.utils.logging import StructuredPipelineLogger
from backend.app.utils.metrics import PrometheusPipelineMetrics

logger = logging.getLogger(__name__)


@dataclass
class CascadeResult:
    """Winning itineraries plus the record of every attempt made."""

    itineraries: list[Itinerary] = field(default_factory=list)
    attempts: list[ProviderOutcome] = field(default_factory=list)

    @property
    def winner(self) -> str | None:
        for attempt in self.attempts:
            if attempt.ok:
                return attempt.provider
        return None


class ProviderCascade:
    """Tries TripProviders in priority order, short-circuiting on first success."""

    def __init__(
        self,
        providers: Sequence[TripProvider],
        *,
        metrics: PrometheusPipelineMetrics | None = None,
        structured_logger: StructuredPipelineLogger | None = None,
    ) -> None:
        self.providers = list(providers)
        self._metrics = metrics or PrometheusPipelineMetrics()
        self._logger = structured_logger or StructuredPipelineLogger()

    async def plan(self, origin: Coordinates, destination: Coordinates) -> list[Itinerary]:
        """Itineraries from the first provider that returns any; empty if none do."""
        result = await self.plan_detailed(origin, destination)
        return result.itineraries

    async def plan_detailed(self, origin: Coordinates, destination: Coordinates) -> CascadeResult:
        """Run the cascade and keep a per-attempt record for debugging."""
        result = CascadeResult()

        for provider in self.providers:
            outcome = await self._attempt(provider, origin, destination)
            result.attempts.append(outcome)

            outcome_label = "success" if outcome.ok else (outcome.failure or ProviderFailureKind.empty).value
            self._metrics.record_provider_attempt(provider.name, outcome_label, outcome.latency_ms)
            self._logger.log_provider_attempt(
                provider.name,
                outcome_label,
                outcome.latency_ms,
                result_count=len(outcome.itineraries),
                detail=outcome.detail,
            )

            if outcome.ok:
                result.itineraries = outcome.itineraries
                return result

        logger.info(f"[cascade] All {len(self.providers)} provider(s) returned nothing")
        return result

    async def _attempt(
        self, provider: TripProvider, origin: Coordinates, destination: Coordinates
    ) -> ProviderOutcome:
        start = time.monotonic()
        try:
            return await provider.fetch(origin, destination)
        except Exception as e:
            # A provider that raises breaks its contract; classify it like a backend error
            logger.error(f"[cascade] Provider {provider.name} raised {type(e).__name__}: {e}")
            return ProviderOutcome(
                provider=provider.name,
                failure=ProviderFailureKind.backend_error,
                detail=f"raised {type(e).__name__}",
                latency_ms=(time.monotonic() - start) * 1000,
            )
