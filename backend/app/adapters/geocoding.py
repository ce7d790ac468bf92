"""Address resolver: geocoding and natural-language intent extraction."""

import json
import logging
from typing import Any

import httpx

from backend.app.llm.client import GenerativeClient
from backend.app.llm.enhancer import strip_code_fence
from backend.app.models.common import Coordinates
from backend.app.models.query import TravelIntent

logger = logging.getLogger(__name__)

INTENT_SYSTEM_PROMPT = (
    "You are an expert urban mobility analyzer. Extract the destination and any "
    "time intent from the user's request accurately. Return the destination as a "
    "place name or address suitable for geocoding."
)

INTENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "destination": {"type": "string"},
        "time": {"type": ["string", "null"]},
        "time_type": {"type": ["string", "null"], "enum": ["departure", "arrival", None]},
        "is_accessible": {"type": ["boolean", "null"]},
    },
    "required": ["destination", "time", "time_type", "is_accessible"],
    "additionalProperties": False,
}


class DestinationNotFoundError(Exception):
    """Destination text could not be resolved to coordinates."""

    def __init__(self, query: str, reason: str = "no match"):
        super().__init__(f"Destination not found: {query!r} ({reason})")
        self.query = query
        self.reason = reason


class AddressResolver:
    """Resolves free text to coordinates and extracts destination intent."""

    def __init__(
        self,
        *,
        geocoding_url: str = "https://nominatim.openstreetmap.org/search",
        user_agent: str = "transit-planner-api/0.1",
        timeout_seconds: float = 5.0,
        generative_client: GenerativeClient | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize resolver.

        Args:
            geocoding_url: Nominatim-compatible search endpoint
            user_agent: User-Agent header (required by public Nominatim)
            timeout_seconds: Geocoding request timeout
            generative_client: Backend for intent extraction (None = disabled)
            client: Optional httpx client (for testing with mocks)
        """
        self.geocoding_url = geocoding_url
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds
        self.generative_client = generative_client
        self._client = client

    async def resolve_destination(self, free_text: str) -> Coordinates:
        """Geocode free text, taking the first candidate on ambiguous matches.

        One network call, no retries.

        Raises:
            DestinationNotFoundError: Blank text, no match, or an unusable
                geocoder response
        """
        query = free_text.strip()
        if not query:
            raise DestinationNotFoundError(free_text, "empty destination")

        params: dict[str, str | int] = {"q": query, "format": "jsonv2", "limit": 1}

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self.timeout_seconds)
            close_client = True

        try:
            response = await client.get(
                self.geocoding_url,
                params=params,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            results = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Geocoding request failed for '{query}': {e}")
            raise DestinationNotFoundError(query, f"geocoder unavailable: {type(e).__name__}") from e
        except ValueError as e:
            logger.error(f"Geocoding response for '{query}' was not JSON")
            raise DestinationNotFoundError(query, "geocoder returned invalid data") from e
        finally:
            if close_client:
                await client.aclose()

        if not isinstance(results, list) or not results:
            logger.warning(f"No results found for place: {query}")
            raise DestinationNotFoundError(query)

        first = results[0]
        try:
            coordinates = Coordinates(lat=float(first["lat"]), lon=float(first["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise DestinationNotFoundError(query, "geocoder returned invalid data") from e

        logger.debug(
            f"Geocoded {query} to {coordinates.lat}, {coordinates.lon} "
            f"({first.get('display_name', 'unnamed')})"
        )
        return coordinates

    async def parse_intent(self, free_text: str) -> TravelIntent:
        """Structured intent for a mobility request; never raises.

        Any failure (no backend, backend error, bad output, blank destination)
        yields an intent whose destination is the original text.
        """
        fallback = TravelIntent(destination=free_text)
        if not free_text.strip() or self.generative_client is None:
            return fallback

        try:
            raw = await self.generative_client.generate(
                system_prompt=INTENT_SYSTEM_PROMPT,
                user_prompt=f'User mobility request: "{free_text}"',
                schema_name="travel_intent",
                response_schema=INTENT_SCHEMA,
            )
            intent = TravelIntent.model_validate(json.loads(strip_code_fence(raw)))
        except Exception as e:
            logger.warning(f"Intent extraction failed, using raw text: {e}")
            return fallback

        if not intent.destination.strip():
            return fallback
        return intent

    async def extract_intent(self, free_text: str) -> str:
        """Destination text extracted from a free-text request (or the text itself)."""
        intent = await self.parse_intent(free_text)
        return intent.destination
