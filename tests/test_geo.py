"""Distance, rating and ranking helpers."""

from __future__ import annotations

import pytest

from conftest import make_place
from tourguide.core.geo import calculate_rating, distance_meters, rank_places, rating_for_distance
from tourguide.providers.base import Coordinate, Viewport

# Metres per degree of longitude along the WGS84 equator.
EQUATOR_M_PER_DEG = 111_319.49079327357
ORIGIN = Coordinate(0.0, 0.0)


def _east_of_origin(source_id: str, meters: float):
    return make_place(source_id, 0.0, meters / EQUATOR_M_PER_DEG)


@pytest.mark.parametrize(
    "distance, expected",
    [(0.0, 5.0), (2000.0, 4.0), (8000.0, 1.0), (10000.0, 1.0), (1000.0, 4.5)],
)
def test_rating_for_distance(distance, expected):
    assert rating_for_distance(distance) == expected


def test_rating_never_below_one():
    assert rating_for_distance(1_000_000.0) == 1.0


def test_calculate_rating_uses_geodesic_distance():
    target = Coordinate(0.0, 2000.0 / EQUATOR_M_PER_DEG)
    assert distance_meters(ORIGIN, target) == pytest.approx(2000.0, abs=0.01)
    assert calculate_rating(ORIGIN, target) == pytest.approx(4.0, abs=1e-5)


def test_rank_orders_by_distance_and_caps():
    places = [
        _east_of_origin("100m", 100),
        _east_of_origin("50m", 50),
        _east_of_origin("500m", 500),
        _east_of_origin("10m", 10),
    ]
    ranked = rank_places(places, ORIGIN, limit=3)
    assert [r.place.source_id for r in ranked] == ["10m", "50m", "100m"]
    assert ranked[0].distance_m == pytest.approx(10.0, abs=0.01)
    assert ranked[0].rating == pytest.approx(5.0 - 10.0 / 2000.0, abs=1e-5)


def test_rank_keeps_supplier_order_for_ties():
    places = [
        make_place("north", 0.001, 0.0),
        make_place("near", 0.0, 0.0001),
        make_place("south", -0.001, 0.0),
    ]
    ranked = rank_places(places, ORIGIN)
    assert [r.place.source_id for r in ranked] == ["near", "north", "south"]


def test_rank_default_limit_is_ten():
    places = [_east_of_origin(str(i), 10 * (i + 1)) for i in range(15)]
    assert len(rank_places(places, ORIGIN)) == 10


def test_viewport_tolerance():
    a = Viewport(Coordinate(35.0, 139.0), 0.01, 0.01)
    assert a.is_close(Viewport(Coordinate(35.00005, 139.00005), 0.01, 0.01))
    assert not a.is_close(Viewport(Coordinate(35.0002, 139.0), 0.01, 0.01))
    assert not a.is_close(None)


def test_viewport_from_meters():
    vp = Viewport.from_meters(Coordinate(0.0, 0.0), 1000.0, 1000.0)
    assert vp.lat_delta == pytest.approx(1000.0 / 111_320.0)
    assert vp.lng_delta == pytest.approx(1000.0 / 111_320.0)
    assert vp.radius_meters() == pytest.approx(500.0)
