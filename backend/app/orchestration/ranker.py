"""Route ranker - sorts or filters the final itinerary list."""

from collections.abc import Callable, Sequence

from backend.app.models.common import RouteFilter
from backend.app.models.itinerary import Itinerary

_SORT_KEYS: dict[RouteFilter, Callable[[Itinerary], float]] = {
    RouteFilter.fastest: lambda i: i.total_time,
    RouteFilter.cheapest: lambda i: i.cost,
    RouteFilter.less_walking: lambda i: i.walking_distance,
    RouteFilter.less_transfers: lambda i: i.transfers,
}


def rank(itineraries: Sequence[Itinerary], route_filter: RouteFilter) -> list[Itinerary]:
    """Order or filter itineraries by the selected criterion.

    Sorting filters are stable ascending sorts, so ties keep their input order
    and ranking a ranked list again changes nothing. ``accessible`` drops
    inaccessible itineraries and may return an empty list.

    Args:
        itineraries: Itineraries to rank
        route_filter: Selected criterion

    Returns:
        New ranked list
    """
    if route_filter == RouteFilter.accessible:
        return [i for i in itineraries if i.is_accessible]

    # sorted() is stable
    return sorted(itineraries, key=_SORT_KEYS[route_filter])
