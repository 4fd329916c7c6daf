"""
Proximity index: which same-category deals sit within a radius of a reference location.

Pure functions over their inputs, cheap enough to re-run on every radius or location
change. The output is a tuple so consumers cannot mutate a shared result set.
"""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from dealradius.core.geo import GeoPoint, distance_miles
from dealradius.domain.models import Deal, LocationRecord, ProximityResult

LocationsFor = Callable[[Deal], Sequence[LocationRecord]]


def _embedded_locations(deal: Deal) -> Sequence[LocationRecord]:
    return deal.locations


def resolve_primary_location(locations: Sequence[LocationRecord]) -> LocationRecord | None:
    """Pick the location that represents an entity on the map.

    The first active, published location wins; otherwise the first one listed. If the
    chosen record has no coordinates the entity is treated as unlocated.
    """
    if not locations:
        return None
    primary = next((loc for loc in locations if loc.is_active and not loc.is_draft), locations[0])
    if primary.coordinates is None:
        return None
    return primary


def filter_within_radius(
    center: GeoPoint | None,
    entities: Iterable[Deal],
    exclude_id: str | None,
    category_filter: str,
    radius_miles: float,
    *,
    locations_for: LocationsFor | None = None,
) -> tuple[ProximityResult, ...]:
    """Deals of `category_filter` within `radius_miles` of `center`, nearest first.

    The `exclude_id` deal never appears. Category matching is exact. Deals without a
    resolvable location are skipped. Equal distances keep input order.
    """
    if center is None:
        return ()
    get_locations = locations_for or _embedded_locations

    out: list[ProximityResult] = []
    for deal in entities:
        if deal.id == exclude_id:
            continue
        if deal.category != category_filter:
            continue
        location = resolve_primary_location(get_locations(deal))
        if location is None or location.coordinates is None:
            continue
        d = distance_miles(center, location.coordinates.to_point())
        if d > radius_miles:
            continue
        out.append(ProximityResult(entity=deal, distance_miles=d, location=location))

    # list.sort is stable, so ties keep input order.
    out.sort(key=lambda r: r.distance_miles)
    return tuple(out)
