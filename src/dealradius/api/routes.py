"""
API routes.

Endpoints:
- GET  `/api/health`: liveness probe.
- GET  `/api/settings`: public selector settings (radius range, circle, settle, style).
- GET  `/api/deals/{deal_id}/nearby`: competitor deals near a deal's primary location.
- POST `/api/nearby`: same lookup with per-request `settings_overrides`.
- GET  `/api/circle`: circle polygon GeoJSON for an arbitrary center and radius.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, HTTPException, Query

from dealradius.catalog.loader import Catalog, load_catalog
from dealradius.config.overrides import apply_settings_overrides
from dealradius.config.settings import get_settings
from dealradius.core.env import resolve_project_path
from dealradius.core.geo import GeoPoint, circle_bounds, circle_polygon, polygon_to_geojson
from dealradius.domain.models import NearbyQuery, NearbyResponse
from dealradius.interaction.radius_drag import clamp_radius
from dealradius.proximity.lookup import DealNotFoundError, nearby_deals


router = APIRouter()


@lru_cache
def _load_catalog_cached(path: str) -> Catalog:
    return load_catalog(path)


def _catalog() -> Catalog:
    settings = get_settings()
    return _load_catalog_cached(str(resolve_project_path(settings.catalog.path)))


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok"}


@router.get("/api/settings")
def get_public_settings() -> dict:
    """Return safe-to-expose settings for UI defaults (catalog path omitted)."""
    data = get_settings().model_dump(mode="json")
    return {
        "app": {"name": data.get("app", {}).get("name", "DealRadius")},
        "radius": data.get("radius", {}),
        "circle": data.get("circle", {}),
        "settle": data.get("settle", {}),
        "style": data.get("style", {}),
    }


@router.get("/api/deals/{deal_id}/nearby", response_model=NearbyResponse)
def get_nearby(deal_id: str, radius: float | None = Query(default=None)) -> NearbyResponse:
    """Nearby same-category deals; out-of-range radius values are clamped."""
    try:
        return nearby_deals(deal_id, catalog=_catalog(), settings=get_settings(), radius_miles=radius)
    except DealNotFoundError as e:
        raise HTTPException(
            status_code=404,
            detail={"code": "DEAL_NOT_FOUND", "message": str(e)},
        ) from e


@router.post("/api/nearby", response_model=NearbyResponse)
def post_nearby(query: NearbyQuery) -> NearbyResponse:
    """Nearby lookup with validated per-request settings overrides."""
    try:
        settings = apply_settings_overrides(get_settings(), query.settings_overrides)
    except ValueError as e:
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "message": str(e)},
        ) from e
    try:
        return nearby_deals(
            query.deal_id, catalog=_catalog(), settings=settings, radius_miles=query.radius_miles
        )
    except DealNotFoundError as e:
        raise HTTPException(
            status_code=404,
            detail={"code": "DEAL_NOT_FOUND", "message": str(e)},
        ) from e


@router.get("/api/circle")
def get_circle(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    radius: float = Query(...),
    points: int | None = Query(default=None, ge=3, le=1024),
) -> dict:
    """Circle polygon + settle viewport for a center and (clamped) radius."""
    settings = get_settings()
    center = GeoPoint(latitude=lat, longitude=lon)
    radius_miles = clamp_radius(
        radius, min_miles=settings.radius.min_miles, max_miles=settings.radius.max_miles
    )
    polygon = circle_polygon(center, radius_miles, points or settings.circle.points)
    bounds = circle_bounds(center, radius_miles, settings.settle.padding_factor)
    return {
        "radius_miles": radius_miles,
        "circle": polygon_to_geojson(polygon),
        "bounds": bounds.as_lnglat_pairs(),
    }
