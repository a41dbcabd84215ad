"""Distance, rating and ranking helpers."""

from __future__ import annotations

from typing import Iterable, List

from geopy.distance import geodesic

from ..providers.base import Coordinate, PlaceResult, RawPlace

RATING_DISTANCE_SCALE = 2000.0
MAX_POI_COUNT = 10


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    return geodesic((a.lat, a.lng), (b.lat, b.lng)).meters


def rating_for_distance(distance_m: float) -> float:
    """Display heuristic in [1.0, 5.0]: one star lost per 2 km from the center."""
    return max(1.0, 5.0 - distance_m / RATING_DISTANCE_SCALE)


def calculate_rating(center: Coordinate, coordinate: Coordinate) -> float:
    return rating_for_distance(distance_meters(center, coordinate))


def rank_places(places: Iterable[RawPlace], center: Coordinate, limit: int = MAX_POI_COUNT) -> List[PlaceResult]:
    """Nearest first, capped at `limit`. sorted() is stable, so ties keep supplier order."""
    ranked = []
    for p in places:
        d = distance_meters(center, p.coordinate)
        ranked.append(PlaceResult(place=p, distance_m=d, rating=rating_for_distance(d)))
    ranked.sort(key=lambda r: r.distance_m)
    return ranked[: max(limit, 0)]
