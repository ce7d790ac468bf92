"""Premium gate - entitlement-based redaction of premium-only fields."""

from collections.abc import Sequence

from backend.app.models.itinerary import Itinerary, LockedReasoning


def apply_entitlement(itineraries: Sequence[Itinerary], is_premium_user: bool) -> list[Itinerary]:
    """Redact premium-only fields for callers without entitlement.

    Non-premium callers get AI reasoning replaced by a locked marker and the
    live-traffic delay cleared; every other field passes through. The function
    is total: it never fails and never drops an itinerary.

    Args:
        itineraries: Itineraries from any pipeline tier
        is_premium_user: Whether the caller holds a premium entitlement

    Returns:
        New list of the same length and order
    """
    if is_premium_user:
        return list(itineraries)

    return [
        itinerary.model_copy(
            update={"ai_reasoning": LockedReasoning(), "traffic_delay_minutes": None}
        )
        for itinerary in itineraries
    ]
