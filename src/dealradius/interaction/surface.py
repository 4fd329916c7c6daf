"""
Map surface boundary.

`MapSurface` is the only thing the drag controller and the selector know about the map.
A browser binding implements it on top of its mapping SDK; `GeoJsonMapSurface` is the
headless implementation used by the API, the CLI replay and the tests. It keeps the latest
circle, markers and viewport request as GeoJSON-ready payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Protocol, Sequence

from dealradius.config.settings import LayerPaint, StyleSettings
from dealradius.core.geo import BoundingBox, CirclePolygon, GeoPoint, polygon_to_geojson
from dealradius.domain.models import Deal, ProximityResult
from dealradius.proximity.markers import MarkerSpec, build_markers, markers_to_geojson


PointerKind = Literal["down", "move", "up", "leave", "enter_boundary", "leave_boundary"]


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event in geographic coordinates.

    `down`, `enter_boundary` and `leave_boundary` are scoped to the radius boundary;
    `move`, `up` and `leave` are surface-wide.
    """

    kind: PointerKind
    position: GeoPoint | None = None


@dataclass(frozen=True)
class ViewportRequest:
    bounds: BoundingBox
    duration_ms: int
    padding_px: int = 40
    max_zoom: float = 15

    def to_dict(self) -> dict[str, Any]:
        return {
            "bounds": self.bounds.as_lnglat_pairs(),
            "duration": self.duration_ms,
            "padding": self.padding_px,
            "maxZoom": self.max_zoom,
        }


PointerHandler = Callable[[PointerEvent], None]


class MapSurface(Protocol):
    def set_pan_enabled(self, enabled: bool) -> None: ...

    def set_cursor(self, cursor: str) -> None: ...

    def set_boundary_emphasis(self, active: bool) -> None: ...

    def render_circle(self, polygon: CirclePolygon) -> None: ...

    def render_markers(
        self,
        results: Sequence[ProximityResult],
        *,
        reference: Deal | None = None,
        reference_position: GeoPoint | None = None,
    ) -> None: ...

    def fit_bounds(self, request: ViewportRequest) -> None: ...

    def on_pointer_event(self, handler: PointerHandler) -> Callable[[], None]: ...


@dataclass
class GeoJsonMapSurface:
    """Headless map surface that records what a real map would draw."""

    style: StyleSettings = field(default_factory=StyleSettings)
    pan_enabled: bool = True
    cursor: str = "default"
    emphasis_active: bool = False
    circle: dict[str, Any] | None = None
    markers: dict[str, Any] | None = None
    marker_specs: list[MarkerSpec] = field(default_factory=list)
    viewport: ViewportRequest | None = None
    circle_renders: int = 0
    marker_renders: int = 0
    fit_requests: list[ViewportRequest] = field(default_factory=list)
    _handlers: list[PointerHandler] = field(default_factory=list, repr=False)

    @property
    def paint(self) -> LayerPaint:
        return self.style.drag if self.emphasis_active else self.style.rest

    def set_pan_enabled(self, enabled: bool) -> None:
        self.pan_enabled = bool(enabled)

    def set_cursor(self, cursor: str) -> None:
        self.cursor = cursor

    def set_boundary_emphasis(self, active: bool) -> None:
        self.emphasis_active = bool(active)

    def render_circle(self, polygon: CirclePolygon) -> None:
        # Data replacement, never an in-place edit of the previous ring.
        self.circle = polygon_to_geojson(polygon)
        self.circle_renders += 1

    def render_markers(
        self,
        results: Sequence[ProximityResult],
        *,
        reference: Deal | None = None,
        reference_position: GeoPoint | None = None,
    ) -> None:
        self.marker_specs = build_markers(
            reference,
            reference_position,
            results,
            competitor_prefix=self.style.competitor_account_prefix,
        )
        self.markers = markers_to_geojson(self.marker_specs)
        self.marker_renders += 1

    def fit_bounds(self, request: ViewportRequest) -> None:
        self.viewport = request
        self.fit_requests.append(request)

    def on_pointer_event(self, handler: PointerHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return _unsubscribe

    def emit(self, event: PointerEvent) -> None:
        """Dispatch a pointer event to every subscribed handler."""
        for handler in list(self._handlers):
            handler(event)

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready view of the current surface state."""
        return {
            "pan_enabled": self.pan_enabled,
            "cursor": self.cursor,
            "paint": self.paint.model_dump(mode="json"),
            "circle": self.circle,
            "markers": self.markers,
            "viewport": self.viewport.to_dict() if self.viewport else None,
        }
