"""Structured logging for provider attempts and search outcomes."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredPipelineLogger:
    """Structured logger for the trip-planning pipeline."""

    def log_provider_attempt(
        self,
        provider: str,
        outcome: str,
        latency_ms: float,
        result_count: int = 0,
        detail: str | None = None,
    ) -> None:
        """Log one routing provider attempt with structured data."""
        log_data: dict[str, Any] = {
            "provider": provider,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "result_count": result_count,
        }

        if detail:
            log_data["detail"] = detail

        log_msg = f"Provider attempt: {provider} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})

    def log_search_outcome(
        self,
        destination: str,
        provenance: str,
        result_count: int,
        route_filter: str,
    ) -> None:
        """Log which tier produced the final result list."""
        log_data: dict[str, Any] = {
            "destination": destination,
            "provenance": provenance,
            "result_count": result_count,
            "filter": route_filter,
        }

        logger.info(f"Search complete: {provenance}", extra={"structured": log_data})
