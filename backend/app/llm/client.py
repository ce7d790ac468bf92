"""Generative backend client with OpenAI integration.

Security: Reads API key from environment only, never hardcoded.
Without a key every call fails with GenerationError so callers fall through to
their non-AI path.
"""

import logging
from typing import Any, Protocol

from openai import AsyncOpenAI

from backend.app.config import Settings, settings

logger = logging.getLogger(__name__)

MAX_RESPONSE_CHARS = 20000


class GenerationError(Exception):
    """Generative backend produced nothing usable."""

    pass


class GenerativeClient(Protocol):
    """Protocol for generative backend implementations."""

    async def generate(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        schema_name: str,
        response_schema: dict[str, Any],
    ) -> str:
        """Return the model's raw text, constrained by ``response_schema``.

        Args:
            system_prompt: Role and rules for the model
            user_prompt: Request-specific context
            schema_name: Identifier for the output schema
            response_schema: Strict JSON schema the output must follow

        Returns:
            Raw response text (may still be wrapped in a code fence)

        Raises:
            GenerationError: On any backend failure or empty output
        """
        ...


class UnconfiguredGenerativeClient:
    """Client used when no API key is configured; always fails."""

    async def generate(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        schema_name: str,
        response_schema: dict[str, Any],
    ) -> str:
        raise GenerationError("no generative backend configured")


class OpenAIGenerativeClient:
    """OpenAI-backed client using structured (json_schema) output."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout_seconds: float = 20.0):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Model name to use (default: gpt-4o-mini for cost efficiency)
            timeout_seconds: Request timeout; a timeout surfaces as GenerationError
        """
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        self.model = model

    async def generate(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        schema_name: str,
        response_schema: dict[str, Any],
    ) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=0.4,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": schema_name,
                        "schema": response_schema,
                        "strict": True,
                    },
                },
            )
        except Exception as e:
            logger.error(f"OpenAI API call failed: {e}")
            raise GenerationError(f"backend call failed: {type(e).__name__}") from e

        content = response.choices[0].message.content if response.choices else None

        # Validation: Check for empty response
        if not content or not content.strip():
            logger.warning("OpenAI returned empty response")
            raise GenerationError("backend returned empty content")

        # Validation: Check for unreasonably long response
        if len(content) > MAX_RESPONSE_CHARS:
            logger.warning(
                f"OpenAI response unexpectedly large ({len(content)} chars), rejecting"
            )
            raise GenerationError("backend response too large")

        return content


def get_generative_client(config: Settings | None = None) -> GenerativeClient:
    """Factory function to get appropriate generative client based on config.

    Args:
        config: Settings to read (default: module settings)

    Returns:
        OpenAIGenerativeClient if API key is configured, UnconfiguredGenerativeClient otherwise
    """
    config = config or settings
    api_key = config.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI client for itinerary generation")
        return OpenAIGenerativeClient(
            api_key=api_key.get_secret_value(),
            model=config.openai_model,
            timeout_seconds=config.generative_timeout_seconds,
        )
    else:
        logger.warning("No OpenAI API key configured, AI enhancement and generation disabled")
        return UnconfiguredGenerativeClient()
