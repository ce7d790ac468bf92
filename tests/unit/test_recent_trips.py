"""Tests for the in-memory recent trip store."""

import pytest

from backend.app.db.recent_trips import InMemoryRecentTripStore
from backend.app.models.common import ItineraryProvenance, RouteFilter
from backend.app.models.query import TripQuery


def _query(destination: str, weather) -> TripQuery:
    return TripQuery(destination_text=destination, weather=weather)


def test_newest_first_and_bounded(weather, make_itinerary) -> None:
    store = InMemoryRecentTripStore(capacity=2)

    store.record(_query("Pinheiros", weather), [make_itinerary()])
    store.record(_query("Liberdade", weather), [make_itinerary()])
    store.record(_query("Ibirapuera", weather), [make_itinerary()])

    assert [t.destination_text for t in store.list_recent()] == ["Ibirapuera", "Liberdade"]


def test_record_summarizes_results(weather, make_itinerary) -> None:
    store = InMemoryRecentTripStore()

    trip = store.record(
        _query("Paulista", weather),
        [
            make_itinerary("a", total_time=30, provenance=ItineraryProvenance.ai_enhanced),
            make_itinerary("b", total_time=12, provenance=ItineraryProvenance.ai_enhanced),
        ],
        RouteFilter.cheapest,
    )

    assert trip.result_count == 2
    assert trip.best_total_time == 12
    assert trip.provenance == "ai_enhanced"
    assert trip.route_filter == RouteFilter.cheapest


def test_empty_result_recorded(weather) -> None:
    store = InMemoryRecentTripStore()
    trip = store.record(_query("Paulista", weather), [], RouteFilter.accessible)

    assert trip.result_count == 0
    assert trip.best_total_time is None
    assert trip.provenance is None


def test_limit_and_clear(weather, make_itinerary) -> None:
    store = InMemoryRecentTripStore()
    for name in ("a", "b", "c"):
        store.record(_query(name, weather), [make_itinerary()])

    assert len(store.list_recent(limit=2)) == 2
    store.clear()
    assert store.list_recent() == []


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        InMemoryRecentTripStore(capacity=0)
