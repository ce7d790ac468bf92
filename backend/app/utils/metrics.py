"""Prometheus metrics for the trip-planning pipeline."""

from prometheus_client import Counter, Histogram

# Provider metrics
provider_latency_ms = Histogram(
    "provider_latency_ms",
    "Routing provider call latency in milliseconds",
    ["provider", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000, 16000],
)

provider_attempts_total = Counter(
    "provider_attempts_total",
    "Total routing provider attempts by outcome",
    ["provider", "outcome"],
)

# Generative backend metrics
generation_failures_total = Counter(
    "generation_failures_total",
    "Total AI enhancer failures",
    ["mode"],
)

# Search metrics
search_results_total = Counter(
    "search_results_total",
    "Completed searches by the tier that produced the results",
    ["provenance"],
)


class PrometheusPipelineMetrics:
    """Prometheus-based pipeline metrics implementation."""

    def record_provider_attempt(self, provider: str, outcome: str, latency_ms: float) -> None:
        """Record one provider attempt and its latency."""
        provider_attempts_total.labels(provider=provider, outcome=outcome).inc()
        provider_latency_ms.labels(provider=provider, outcome=outcome).observe(latency_ms)

    def inc_generation_failure(self, mode: str) -> None:
        """Increment generation failure counter."""
        generation_failures_total.labels(mode=mode).inc()

    def inc_search_result(self, provenance: str) -> None:
        """Increment completed search counter."""
        search_results_total.labels(provenance=provenance).inc()
