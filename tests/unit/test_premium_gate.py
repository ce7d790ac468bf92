"""Tests for entitlement-based redaction."""

from backend.app.models.itinerary import LockedReasoning, VisibleReasoning
from backend.app.orchestration.premium import apply_entitlement


def test_non_premium_reasoning_is_locked(make_itinerary) -> None:
    itineraries = [
        make_itinerary("a", traffic_delay_minutes=7),
        make_itinerary("b", ai_reasoning=VisibleReasoning(text="Cheapest option")),
    ]

    gated = apply_entitlement(itineraries, is_premium_user=False)

    assert [i.id for i in gated] == ["a", "b"]
    assert all(isinstance(i.ai_reasoning, LockedReasoning) for i in gated)
    assert all(i.reasoning_text is None for i in gated)
    assert gated[0].traffic_delay_minutes is None
    # Everything else passes through
    assert gated[0].steps == itineraries[0].steps
    assert gated[1].cost == itineraries[1].cost
    # Inputs are not mutated
    assert isinstance(itineraries[1].ai_reasoning, VisibleReasoning)


def test_premium_passes_everything_through(make_itinerary) -> None:
    itineraries = [make_itinerary("a", traffic_delay_minutes=7)]

    gated = apply_entitlement(itineraries, is_premium_user=True)

    assert gated == itineraries
    assert gated[0].traffic_delay_minutes == 7


def test_empty_input() -> None:
    assert apply_entitlement([], is_premium_user=False) == []


def test_gating_twice_changes_nothing(make_itinerary) -> None:
    once = apply_entitlement([make_itinerary("a", traffic_delay_minutes=3)], is_premium_user=False)
    assert apply_entitlement(once, is_premium_user=False) == once
