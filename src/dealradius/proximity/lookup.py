"""
One-shot nearby-deals lookup.

Runs a `ProximitySelector` against a headless `GeoJsonMapSurface` and packages the result
(items, summary, circle, markers, viewport) as a `NearbyResponse`. Both the CLI and the
API go through here.
"""

from __future__ import annotations

from dealradius.catalog.loader import Catalog
from dealradius.config.settings import Settings
from dealradius.core.frames import ManualFrameScheduler
from dealradius.domain.models import Coordinates, NearbyItem, NearbyResponse
from dealradius.interaction.selector import ProximitySelector
from dealradius.interaction.surface import GeoJsonMapSurface


class DealNotFoundError(LookupError):
    def __init__(self, deal_id: str):
        super().__init__(f"Unknown deal id: {deal_id!r}")
        self.deal_id = deal_id


def nearby_deals(
    deal_id: str,
    *,
    catalog: Catalog,
    settings: Settings,
    radius_miles: float | None = None,
) -> NearbyResponse:
    """Nearby same-category deals for `deal_id`; radius values outside the range are clamped."""
    reference = catalog.get_deal(deal_id)
    if reference is None:
        raise DealNotFoundError(deal_id)

    surface = GeoJsonMapSurface(style=settings.style)
    selector = ProximitySelector(
        reference,
        catalog.deals,
        surface,
        ManualFrameScheduler(),
        settings=settings,
        locations_for=catalog.locations_for,
        initial_radius=radius_miles,
    )
    try:
        headline, nearest = selector.summary()
        kinds = {m.label: m.kind for m in surface.marker_specs}
        items = []
        for i, r in enumerate(selector.results, start=1):
            coords = r.location.coordinates
            items.append(
                NearbyItem(
                    deal_id=r.entity.id,
                    title=r.entity.title,
                    category=r.entity.category,
                    distance_miles=round(r.distance_miles, 3),
                    location_name=r.location.name,
                    latitude=coords.latitude if coords else 0.0,
                    longitude=coords.longitude if coords else 0.0,
                    marker_label=i,
                    marker_kind=kinds.get(i, "partner"),
                )
            )
        center = selector.center
        return NearbyResponse(
            deal_id=reference.id,
            category=reference.category,
            radius_miles=selector.radius_state.radius_miles,
            summary=headline,
            nearest=nearest,
            center=(
                Coordinates(latitude=center.latitude, longitude=center.longitude)
                if center is not None
                else None
            ),
            results=items,
            circle=surface.circle,
            markers=surface.markers,
            viewport=surface.viewport.to_dict() if surface.viewport else None,
        )
    finally:
        selector.close()
