"""
Geospatial helpers.

A tiny geometry layer so the proximity index and the drag controller can do distance and
circle math without pulling in heavier GIS dependencies.

`circle_polygon` is a local equirectangular approximation (latitude-cosine correction
only). It stays within ~1% of the true radius up to 50 miles; larger radii need a proper
geodesic projection.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import atan2, cos, pi, radians, sin, sqrt
from typing import Any

EARTH_RADIUS_MILES = 3959.0
METERS_PER_MILE = 1609.34
METERS_PER_DEGREE = 111_320.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class BoundingBox:
    """An axis-aligned lon/lat box (degrees)."""

    west: float
    south: float
    east: float
    north: float

    def as_lnglat_pairs(self) -> list[list[float]]:
        """`[[west, south], [east, north]]`, the shape map SDKs take for `fitBounds`."""
        return [[self.west, self.south], [self.east, self.north]]


CirclePolygon = tuple[GeoPoint, ...]


def distance_miles(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in miles (Haversine)."""
    lat1 = radians(a.latitude)
    lat2 = radians(b.latitude)
    dlat = radians(b.latitude - a.latitude)
    dlon = radians(b.longitude - a.longitude)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push antipodal pairs a hair past 1.
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_MILES * 2 * atan2(sqrt(h), sqrt(1 - h))


def circle_polygon(center: GeoPoint, radius_miles: float, points: int = 64) -> CirclePolygon:
    """Closed ring of `points + 1` vertices approximating a circle around `center`.

    The first and last vertices coincide (angle 0 and 2*pi). A zero radius collapses
    every vertex onto the center.
    """
    if points < 1:
        raise ValueError("points must be >= 1")

    radius_m = float(radius_miles) * METERS_PER_MILE
    lat_m_per_deg = METERS_PER_DEGREE
    lon_m_per_deg = METERS_PER_DEGREE * cos(center.latitude * pi / 180)

    ring: list[GeoPoint] = []
    for i in range(points + 1):
        angle = (i / points) * 2 * pi
        dx = radius_m * cos(angle)
        dy = radius_m * sin(angle)
        ring.append(
            GeoPoint(
                latitude=center.latitude + dy / lat_m_per_deg,
                longitude=center.longitude + dx / lon_m_per_deg,
            )
        )
    return tuple(ring)


def circle_bounds(center: GeoPoint, radius_miles: float, padding_factor: float = 1.2) -> BoundingBox:
    """Viewport box around a radius circle, padded by `padding_factor`.

    The same degree offset is applied on both axes (no longitude correction), which
    over-covers east/west and keeps the whole circle in view.
    """
    d = float(radius_miles) * METERS_PER_MILE / METERS_PER_DEGREE * float(padding_factor)
    return BoundingBox(
        west=center.longitude - d,
        south=center.latitude - d,
        east=center.longitude + d,
        north=center.latitude + d,
    )


def polygon_to_geojson(polygon: CirclePolygon) -> dict[str, Any]:
    """Wrap a ring as a single-feature GeoJSON FeatureCollection (`[lon, lat]` order)."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[[p.longitude, p.latitude] for p in polygon]],
                },
                "properties": {},
            }
        ],
    }
