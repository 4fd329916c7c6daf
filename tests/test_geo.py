import math

import pytest

from dealradius.core.geo import (
    EARTH_RADIUS_MILES,
    GeoPoint,
    circle_bounds,
    circle_polygon,
    distance_miles,
    polygon_to_geojson,
)

CHICAGO = GeoPoint(41.8781, -87.6298)
NYC = GeoPoint(40.7128, -74.0060)
LA = GeoPoint(34.0522, -118.2437)


def test_distance_zero_for_same_point():
    assert distance_miles(CHICAGO, CHICAGO) == 0
    assert distance_miles(NYC, NYC) == 0


def test_distance_is_symmetric():
    points = [CHICAGO, NYC, LA, GeoPoint(0, 0), GeoPoint(-33.8688, 151.2093), GeoPoint(64.1466, -21.9426)]
    for a in points:
        for b in points:
            assert distance_miles(a, b) == pytest.approx(distance_miles(b, a), rel=1e-12, abs=1e-9)


def test_distance_nyc_to_la_matches_known_fixture():
    d = distance_miles(NYC, LA)
    assert 2451 * 0.99 <= d <= 2451 * 1.01


def test_distance_along_meridian_is_arc_length():
    north = GeoPoint(CHICAGO.latitude + math.degrees(5 / EARTH_RADIUS_MILES), CHICAGO.longitude)
    assert distance_miles(CHICAGO, north) == pytest.approx(5, rel=1e-9)


def test_circle_polygon_is_closed_ring_of_points_plus_one():
    for n in (4, 16, 64):
        ring = circle_polygon(CHICAGO, 10, n)
        assert len(ring) == n + 1
        assert ring[0].latitude == pytest.approx(ring[-1].latitude, abs=1e-9)
        assert ring[0].longitude == pytest.approx(ring[-1].longitude, abs=1e-9)


def test_circle_polygon_default_resolution():
    assert len(circle_polygon(CHICAGO, 5)) == 65


@pytest.mark.parametrize("center", [CHICAGO, GeoPoint(0.0, 10.0)])
@pytest.mark.parametrize("radius", [1, 10, 25, 50])
def test_circle_polygon_points_sit_on_the_radius(center, radius):
    for p in circle_polygon(center, radius):
        assert abs(distance_miles(center, p) - radius) / radius < 0.01


def test_circle_polygon_zero_radius_collapses_to_center():
    ring = circle_polygon(CHICAGO, 0, 8)
    assert all(p == CHICAGO for p in ring)


def test_circle_polygon_returns_fresh_sequence_each_call():
    a = circle_polygon(CHICAGO, 10)
    b = circle_polygon(CHICAGO, 10)
    assert a == b
    assert a is not b
    assert isinstance(a, tuple)


def test_circle_polygon_rejects_non_positive_points():
    with pytest.raises(ValueError):
        circle_polygon(CHICAGO, 10, 0)


def test_circle_bounds_pads_radius_by_twenty_percent():
    box = circle_bounds(CHICAGO, 10, 1.2)
    expected = 10 * 1609.34 / 111320 * 1.2
    assert box.north - CHICAGO.latitude == pytest.approx(expected)
    assert CHICAGO.latitude - box.south == pytest.approx(expected)
    assert box.east - CHICAGO.longitude == pytest.approx(expected)
    assert box.as_lnglat_pairs() == [[box.west, box.south], [box.east, box.north]]


def test_polygon_to_geojson_uses_lon_lat_order():
    ring = circle_polygon(CHICAGO, 3, 4)
    fc = polygon_to_geojson(ring)
    coords = fc["features"][0]["geometry"]["coordinates"][0]
    assert fc["type"] == "FeatureCollection"
    assert fc["features"][0]["geometry"]["type"] == "Polygon"
    assert len(coords) == 5
    assert coords[0] == [ring[0].longitude, ring[0].latitude]
