"""
Domain models (Pydantic).

These types are the contract between the catalog, the proximity selector and the API:
- catalog entities (`Deal`, `LocationRecord`)
- API inputs (`NearbyQuery`)
- proximity output (`ProximityResult`, `NearbyResponse`)

Deals are read-only for the selector; nothing here mutates them after validation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, Field

from dealradius.core.geo import GeoPoint as CoreGeoPoint


class Coordinates(BaseModel):
    """A validated geographic point in decimal degrees."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def to_point(self) -> CoreGeoPoint:
        return CoreGeoPoint(latitude=self.latitude, longitude=self.longitude)


class Address(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""


class LocationRecord(BaseModel):
    """A merchant location; a deal can be redeemable at several of them."""

    id: str
    name: str = ""
    account_id: str | None = None
    coordinates: Coordinates | None = None
    address: Address | None = None
    is_active: bool = True
    is_draft: bool = False


class DealOption(BaseModel):
    groupon_price: float = Field(..., ge=0)
    regular_price: float = Field(..., ge=0)
    discount: int = Field(0, ge=0, le=100)


class DealStats(BaseModel):
    purchases: int = Field(0, ge=0)
    views: int = Field(0, ge=0)


class Deal(BaseModel):
    """A merchant deal; the entity the proximity selector filters and ranks."""

    id: str
    title: str
    category: str
    subcategory: str | None = None
    account_id: str | None = None
    status: str = "Live"
    location_label: str = ""
    options: list[DealOption] = Field(default_factory=list)
    stats: DealStats | None = None
    locations: list[LocationRecord] = Field(default_factory=list)

    def best_price(self) -> float:
        """Lowest option price, or 0 when the deal has no options."""
        if not self.options:
            return 0.0
        return min(o.groupon_price for o in self.options)


@dataclass(frozen=True)
class ProximityResult:
    """A deal annotated with its distance from the reference location."""

    entity: Deal
    distance_miles: float
    location: LocationRecord


@dataclass(frozen=True)
class RadiusState:
    radius_miles: int
    is_dragging: bool


class NearbyQuery(BaseModel):
    """Query payload for a nearby-deals lookup."""

    deal_id: str
    radius_miles: float | None = None
    settings_overrides: dict[str, Any] | None = None


class NearbyItem(BaseModel):
    deal_id: str
    title: str
    category: str
    distance_miles: float
    location_name: str
    latitude: float
    longitude: float
    marker_label: int
    marker_kind: Literal["partner", "competitor", "competitor_lower_price"]


class NearbyResponse(BaseModel):
    """Proximity selector snapshot for one reference deal."""

    deal_id: str
    category: str
    radius_miles: int
    summary: str
    nearest: str | None = None
    center: Coordinates | None = None
    results: list[NearbyItem] = Field(default_factory=list)
    circle: dict[str, Any] | None = None
    markers: dict[str, Any] | None = None
    viewport: dict[str, Any] | None = None
