"""Routing provider contract and the shared GraphQL transport.

Every provider follows the same fail-soft contract: whatever goes wrong while
talking to a backend (unset endpoint, network error, timeout, non-2xx status,
non-JSON body, GraphQL ``errors``, a body that does not fit the native model)
ends up as an empty itinerary list. ``fetch`` additionally reports *why* the
list is empty so the cascade can log and count it.
"""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

import httpx
from pydantic import ValidationError

from backend.app.adapters.fares import FareEstimator, FlatLegFare
from backend.app.models.common import Coordinates, ItineraryProvenance, TransportMode
from backend.app.models.itinerary import Itinerary, Step

logger = logging.getLogger(__name__)

NativeT = TypeVar("NativeT")


class ProviderFailureKind(str, Enum):
    """Reason a provider produced no itineraries."""

    not_configured = "not_configured"
    network = "network"
    timeout = "timeout"
    http_status = "http_status"
    unparseable = "unparseable"
    backend_error = "backend_error"
    schema = "schema"
    empty = "empty"


@dataclass
class ProviderOutcome:
    """Result of one provider call: itineraries, or the reason there are none."""

    provider: str
    itineraries: list[Itinerary] = field(default_factory=list)
    failure: ProviderFailureKind | None = None
    detail: str | None = None
    latency_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.failure is None and bool(self.itineraries)


class TripProvider(Protocol):
    """Protocol for routing provider implementations."""

    name: str
    provenance: ItineraryProvenance

    async def fetch(self, origin: Coordinates, destination: Coordinates) -> ProviderOutcome:
        """Query the backend and report itineraries or a classified failure."""
        ...

    async def plan_trip(self, origin: Coordinates, destination: Coordinates) -> list[Itinerary]:
        """Query the backend; an empty list on any failure."""
        ...


# Mapping helpers shared by the provider mapping functions

_NATIVE_MODES: dict[str, TransportMode] = {
    "WALK": TransportMode.walk,
    "FOOT": TransportMode.walk,
    "BUS": TransportMode.bus,
    "COACH": TransportMode.bus,
    "TROLLEYBUS": TransportMode.bus,
    "SUBWAY": TransportMode.metro,
    "METRO": TransportMode.metro,
    "RAIL": TransportMode.train,
    "TRAIN": TransportMode.train,
    "TRAM": TransportMode.train,
    "BICYCLE": TransportMode.bike,
    "BIKE": TransportMode.bike,
    "SCOOTER": TransportMode.scooter,
}

_MODE_COLORS: dict[TransportMode, str] = {
    TransportMode.bus: "#3B82F6",
    TransportMode.metro: "#EF4444",
    TransportMode.train: "#10B981",
}
DEFAULT_MODE_COLOR = "#9CA3AF"


def map_native_mode(native_mode: str) -> TransportMode:
    """Map a backend mode name to a TransportMode (unknown modes become ride)."""
    return _NATIVE_MODES.get(native_mode.strip().upper(), TransportMode.ride)


def mode_color(mode: TransportMode) -> str:
    return _MODE_COLORS.get(mode, DEFAULT_MODE_COLOR)


def step_instruction(mode: TransportMode, line: str | None, native_mode: str, to_name: str | None) -> str:
    if mode == TransportMode.walk:
        return f"Walk to {to_name or 'your destination'}"
    return f"Take {line or native_mode.lower()} towards {to_name or 'the next stop'}"


def count_transfers(steps: Sequence[Step]) -> int:
    """Transfers between boardings; the first boarding is not a transfer."""
    boarded = sum(1 for step in steps if step.mode != TransportMode.walk)
    return max(0, boarded - 1)


def seconds_to_minutes(seconds: float | None) -> int:
    return round((seconds or 0) / 60)


def itinerary_id(tag: str, ordinal: int, generated_at: datetime) -> str:
    """Identifier unique within one result set: tag, ordinal, generation time."""
    return f"{tag}-{ordinal}-{int(generated_at.timestamp() * 1000)}"


class GraphQLTripProvider(ABC, Generic[NativeT]):
    """Base provider for GraphQL routing backends.

    Subclasses supply the query, its variables, how to pull native patterns out
    of ``data`` and the pure mapping from one native pattern to an Itinerary.
    """

    name: str
    provenance: ItineraryProvenance
    query: str

    def __init__(
        self,
        endpoint: str,
        *,
        timeout_seconds: float = 8.0,
        result_count: int = 3,
        fare_estimator: FareEstimator | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize provider.

        Args:
            endpoint: GraphQL endpoint URL (empty string = not configured)
            timeout_seconds: Per-request timeout
            result_count: Number of itineraries to ask the backend for
            fare_estimator: Fare strategy (default: flat per-leg surcharge)
            client: Optional httpx client (for testing with mocks)
        """
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self.result_count = result_count
        self.fare_estimator = fare_estimator or FlatLegFare()
        self._client = client

    @abstractmethod
    def build_variables(self, origin: Coordinates, destination: Coordinates) -> dict[str, Any]:
        """GraphQL variables for one origin/destination pair."""

    @abstractmethod
    def extract_patterns(self, data: Any) -> list[NativeT]:
        """Validate ``data`` into native patterns (raises ValidationError)."""

    @abstractmethod
    def map_pattern(self, pattern: NativeT, index: int, generated_at: datetime) -> Itinerary:
        """Map one native pattern to an Itinerary."""

    def headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    async def plan_trip(self, origin: Coordinates, destination: Coordinates) -> list[Itinerary]:
        outcome = await self.fetch(origin, destination)
        return outcome.itineraries

    async def fetch(self, origin: Coordinates, destination: Coordinates) -> ProviderOutcome:
        start = time.monotonic()
        outcome = await self._fetch(origin, destination)
        outcome.latency_ms = (time.monotonic() - start) * 1000
        return outcome

    def _failed(self, kind: ProviderFailureKind, detail: str) -> ProviderOutcome:
        return ProviderOutcome(provider=self.name, failure=kind, detail=detail)

    async def _fetch(self, origin: Coordinates, destination: Coordinates) -> ProviderOutcome:
        if not self.endpoint:
            return self._failed(ProviderFailureKind.not_configured, "endpoint not set")

        payload = {"query": self.query, "variables": self.build_variables(origin, destination)}

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self.timeout_seconds)
            close_client = True

        try:
            response = await client.post(
                self.endpoint,
                json=payload,
                headers=self.headers(),
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            return self._failed(ProviderFailureKind.timeout, f"{type(e).__name__}: {e}")
        except httpx.HTTPError as e:
            return self._failed(ProviderFailureKind.network, f"{type(e).__name__}: {e}")
        finally:
            if close_client:
                await client.aclose()

        if not response.is_success:
            return self._failed(ProviderFailureKind.http_status, f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            return self._failed(
                ProviderFailureKind.unparseable, f"non-JSON body: {response.text[:100]!r}"
            )

        if not isinstance(body, dict):
            return self._failed(ProviderFailureKind.unparseable, "body is not a JSON object")

        if body.get("errors"):
            return self._failed(ProviderFailureKind.backend_error, str(body["errors"])[:300])

        try:
            patterns = self.extract_patterns(body.get("data"))
        except ValidationError as e:
            return self._failed(ProviderFailureKind.schema, f"{e.error_count()} validation error(s)")

        generated_at = datetime.now()
        itineraries: list[Itinerary] = []
        for index, pattern in enumerate(patterns):
            try:
                itineraries.append(self.map_pattern(pattern, index, generated_at))
            except (ValidationError, ValueError) as e:
                # Zero-leg or otherwise unusable patterns are dropped, not fatal
                logger.warning(f"[{self.name}] Discarding pattern {index}: {e}")

        if not itineraries:
            return self._failed(ProviderFailureKind.empty, f"{len(patterns)} pattern(s), none usable")

        return ProviderOutcome(provider=self.name, itineraries=itineraries)
