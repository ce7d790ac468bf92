"""Tests for route ranking."""

import pytest

from backend.app.models.common import RouteFilter
from backend.app.orchestration.ranker import rank


def test_fastest_is_stable_for_ties(make_itinerary) -> None:
    itineraries = [
        make_itinerary("a", total_time=30),
        make_itinerary("b", total_time=10),
        make_itinerary("c", total_time=10),
        make_itinerary("d", total_time=20),
    ]

    ranked = rank(itineraries, RouteFilter.fastest)

    assert [i.id for i in ranked] == ["b", "c", "d", "a"]


@pytest.mark.parametrize(
    ("route_filter", "field"),
    [
        (RouteFilter.fastest, "total_time"),
        (RouteFilter.cheapest, "cost"),
        (RouteFilter.less_walking, "walking_distance"),
        (RouteFilter.less_transfers, "transfers"),
    ],
)
def test_sorting_filters_are_ascending_and_idempotent(make_itinerary, route_filter, field) -> None:
    itineraries = [
        make_itinerary("a", total_time=25, cost=4.4, walking_distance=100, transfers=2),
        make_itinerary("b", total_time=15, cost=2.2, walking_distance=900, transfers=0),
        make_itinerary("c", total_time=40, cost=1.5, walking_distance=400, transfers=1),
    ]

    ranked = rank(itineraries, route_filter)
    values = [getattr(i, field) for i in ranked]

    assert values == sorted(values)
    assert rank(ranked, route_filter) == ranked
    assert len(ranked) == len(itineraries)


def test_accessible_filters_out_inaccessible(make_itinerary) -> None:
    itineraries = [
        make_itinerary("a", is_accessible=False),
        make_itinerary("b", is_accessible=True),
        make_itinerary("c", is_accessible=True),
    ]

    assert [i.id for i in rank(itineraries, RouteFilter.accessible)] == ["b", "c"]


def test_accessible_may_yield_empty(make_itinerary) -> None:
    assert rank([make_itinerary(is_accessible=False)], RouteFilter.accessible) == []


def test_input_not_mutated(make_itinerary) -> None:
    itineraries = [make_itinerary("a", total_time=30), make_itinerary("b", total_time=10)]
    rank(itineraries, RouteFilter.fastest)
    assert [i.id for i in itineraries] == ["a", "b"]
