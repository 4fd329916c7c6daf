"""
Marker and summary building for proximity results.

Turns a `ProximityResult` tuple into what the map and the sidebar show: numbered markers
classified as partner / competitor / cheaper competitor, and the one-line
"Competitor deals in N miles: K" summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Sequence

from dealradius.core.geo import GeoPoint
from dealradius.domain.models import Deal, ProximityResult

MarkerKind = Literal["reference", "partner", "competitor", "competitor_lower_price"]


@dataclass(frozen=True)
class MarkerSpec:
    label: int
    deal_id: str
    position: GeoPoint
    kind: MarkerKind
    title: str
    category: str
    status: str
    location_name: str
    distance_miles: float
    price: float | None = None
    regular_price: float | None = None
    discount: int | None = None
    purchases: int = 0


def classify_deal(
    deal: Deal,
    *,
    reference_price: float,
    competitor_prefix: str = "competitor-",
) -> MarkerKind:
    """Competitor deals are flagged as cheaper only when both prices are known (> 0)."""
    is_competitor = bool(deal.account_id and deal.account_id.startswith(competitor_prefix))
    if not is_competitor:
        return "partner"
    price = deal.best_price()
    if price > 0 and reference_price > 0 and price < reference_price:
        return "competitor_lower_price"
    return "competitor"


def build_markers(
    reference: Deal | None,
    reference_position: GeoPoint | None,
    results: Sequence[ProximityResult],
    *,
    competitor_prefix: str = "competitor-",
) -> list[MarkerSpec]:
    """Reference marker (label 0) followed by one numbered marker per result."""
    markers: list[MarkerSpec] = []
    reference_price = reference.best_price() if reference is not None else 0.0

    if reference is not None and reference_position is not None:
        markers.append(
            MarkerSpec(
                label=0,
                deal_id=reference.id,
                position=reference_position,
                kind="reference",
                title=reference.title,
                category=reference.category,
                status=reference.status,
                location_name=reference.location_label,
                distance_miles=0.0,
            )
        )

    for i, r in enumerate(results, start=1):
        deal = r.entity
        first = deal.options[0] if deal.options else None
        coords = r.location.coordinates
        position = coords.to_point() if coords is not None else GeoPoint(0.0, 0.0)
        markers.append(
            MarkerSpec(
                label=i,
                deal_id=deal.id,
                position=position,
                kind=classify_deal(
                    deal, reference_price=reference_price, competitor_prefix=competitor_prefix
                ),
                title=deal.title,
                category=deal.category,
                status=deal.status,
                location_name=r.location.name,
                distance_miles=r.distance_miles,
                price=first.groupon_price if first else None,
                regular_price=first.regular_price if first else None,
                discount=first.discount if first else None,
                purchases=deal.stats.purchases if deal.stats else 0,
            )
        )
    return markers


def markers_to_geojson(markers: Sequence[MarkerSpec]) -> dict[str, Any]:
    """Point FeatureCollection with the marker fields as properties."""
    features = []
    for m in markers:
        features.append(
            {
                "type": "Feature",
                "geometry": {
                    "type": "Point",
                    "coordinates": [m.position.longitude, m.position.latitude],
                },
                "properties": {
                    "label": m.label,
                    "deal_id": m.deal_id,
                    "kind": m.kind,
                    "title": m.title,
                    "category": m.category,
                    "status": m.status,
                    "location_name": m.location_name,
                    "distance": f"{m.distance_miles:.1f} miles away",
                    "price": m.price,
                    "regular_price": m.regular_price,
                    "discount": m.discount,
                    "purchases": m.purchases,
                },
            }
        )
    return {"type": "FeatureCollection", "features": features}


def summarize(radius_miles: int, results: Sequence[ProximityResult]) -> tuple[str, str | None]:
    """Return (`"Competitor deals in N miles: K"`, nearest distance label or None)."""
    unit = "mile" if radius_miles == 1 else "miles"
    headline = f"Competitor deals in {radius_miles} {unit}: {len(results)}"
    nearest = f"{results[0].distance_miles:.1f} mi" if results else None
    return headline, nearest
