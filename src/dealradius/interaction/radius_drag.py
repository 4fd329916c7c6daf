"""
Radius drag controller.

Turns pointer gestures on the radius boundary into radius updates. States:

    IDLE --pointer down on boundary--> DRAGGING --pointer up / leave--> SETTLING --fit--> IDLE

While dragging, map panning is disabled. Pointer moves land in a single-slot mailbox that
is drained at most once per animation frame (the latest position wins, earlier ones in
the same frame are dropped). The radius is the distance from the center to the pointer,
rounded to whole miles and clamped to the configured range, and is published only when
it changes. Settling fits the viewport to the circle and returns to IDLE without waiting
for the animation.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Callable

from dealradius.config.settings import Settings, get_settings
from dealradius.core.frames import FrameScheduler
from dealradius.core.geo import CirclePolygon, GeoPoint, circle_bounds, circle_polygon, distance_miles
from dealradius.domain.models import RadiusState
from dealradius.interaction.surface import MapSurface, PointerEvent, ViewportRequest

logger = logging.getLogger(__name__)

RadiusListener = Callable[[RadiusState], None]


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    SETTLING = "settling"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_radius(candidate: float, *, min_miles: int = 1, max_miles: int = 50) -> int:
    """Round to whole miles, then clamp into `[min_miles, max_miles]`."""
    if math.isnan(candidate):
        return min_miles
    if math.isinf(candidate):
        return max_miles if candidate > 0 else min_miles
    return max(min_miles, min(max_miles, _round_half_up(candidate)))


class RadiusDragController:
    def __init__(
        self,
        center: GeoPoint,
        surface: MapSurface,
        frames: FrameScheduler,
        *,
        initial_radius: float | None = None,
        settings: Settings | None = None,
    ):
        if center is None:
            raise ValueError("center is required; disable the radius affordance when unlocated")
        self._settings = settings or get_settings()
        self._center = center
        self._surface = surface
        self._frames = frames

        cfg = self._settings.radius
        default = cfg.default_miles if initial_radius is None else initial_radius
        self._radius = clamp_radius(default, min_miles=cfg.min_miles, max_miles=cfg.max_miles)
        self._phase = DragPhase.IDLE
        self._pending_position: GeoPoint | None = None
        self._frame_handle: int | None = None
        self._listeners: list[RadiusListener] = []
        self._closed = False
        self.publish_count = 0

    @property
    def center(self) -> GeoPoint:
        return self._center

    @property
    def phase(self) -> DragPhase:
        return self._phase

    @property
    def radius_miles(self) -> int:
        return self._radius

    @property
    def radius_state(self) -> RadiusState:
        return RadiusState(radius_miles=self._radius, is_dragging=self._phase is DragPhase.DRAGGING)

    @property
    def has_pending_frame(self) -> bool:
        return self._frame_handle is not None

    def subscribe(self, listener: RadiusListener) -> Callable[[], None]:
        """Call `listener` with the new `RadiusState` on every radius or drag-flag change."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        state = self.radius_state
        for listener in list(self._listeners):
            listener(state)

    def circle(self) -> CirclePolygon:
        return circle_polygon(self._center, self._radius, self._settings.circle.points)

    def render_circle(self) -> None:
        self._surface.render_circle(self.circle())

    def fit_to_circle(self, duration_ms: int | None = None) -> ViewportRequest:
        """Ask the surface to animate its viewport onto the padded circle box."""
        cfg = self._settings.settle
        request = ViewportRequest(
            bounds=circle_bounds(self._center, self._radius, cfg.padding_factor),
            duration_ms=cfg.duration_ms if duration_ms is None else duration_ms,
            padding_px=cfg.padding_px,
            max_zoom=cfg.max_zoom,
        )
        self._surface.fit_bounds(request)
        return request

    def set_radius(self, miles: float) -> bool:
        """External radius change; accepted only while idle. Returns True if it changed."""
        if self._closed or self._phase is not DragPhase.IDLE:
            logger.debug("set_radius(%s) ignored in phase %s", miles, self._phase.value)
            return False
        cfg = self._settings.radius
        radius = clamp_radius(miles, min_miles=cfg.min_miles, max_miles=cfg.max_miles)
        if radius == self._radius:
            return False
        self._radius = radius
        self.render_circle()
        self._notify()
        return True

    def handle_event(self, event: PointerEvent) -> None:
        if event.kind == "down":
            self.pointer_down(event.position)
        elif event.kind == "move":
            if event.position is not None:
                self.pointer_move(event.position)
        elif event.kind == "up":
            self.pointer_up()
        elif event.kind == "leave":
            self.pointer_leave()
        elif event.kind == "enter_boundary":
            self.pointer_enter_boundary()
        elif event.kind == "leave_boundary":
            self.pointer_leave_boundary()

    def pointer_enter_boundary(self) -> None:
        if not self._closed:
            self._surface.set_cursor("ew-resize")

    def pointer_leave_boundary(self) -> None:
        if not self._closed and self._phase is not DragPhase.DRAGGING:
            self._surface.set_cursor("default")

    def pointer_down(self, position: GeoPoint | None = None) -> bool:
        """Start a drag session. A second pointer-down while dragging is ignored."""
        if self._closed or self._phase is not DragPhase.IDLE:
            return False
        self._phase = DragPhase.DRAGGING
        self._surface.set_pan_enabled(False)
        self._surface.set_cursor("ew-resize")
        logger.debug("radius drag started at %s mi", self._radius)
        self._notify()
        return True

    def pointer_move(self, position: GeoPoint) -> None:
        if self._phase is not DragPhase.DRAGGING:
            return
        self._pending_position = position
        if self._frame_handle is None:
            self._frame_handle = self._frames.request_frame(self._on_frame)

    def _on_frame(self) -> None:
        self._frame_handle = None
        position = self._pending_position
        self._pending_position = None
        if position is None or self._phase is not DragPhase.DRAGGING:
            return
        cfg = self._settings.radius
        radius = clamp_radius(
            distance_miles(self._center, position), min_miles=cfg.min_miles, max_miles=cfg.max_miles
        )
        if radius == self._radius:
            return
        self._radius = radius
        self.publish_count += 1
        self.render_circle()
        self._surface.set_boundary_emphasis(True)
        logger.debug("radius published: %s mi", radius)
        self._notify()

    def _cancel_pending_frame(self) -> None:
        if self._frame_handle is not None:
            self._frames.cancel_frame(self._frame_handle)
            self._frame_handle = None
        self._pending_position = None

    def pointer_up(self) -> bool:
        return self._stop_dragging()

    def pointer_leave(self) -> bool:
        return self._stop_dragging()

    def _stop_dragging(self) -> bool:
        if self._phase is not DragPhase.DRAGGING:
            return False
        self._cancel_pending_frame()
        self._phase = DragPhase.SETTLING
        self._surface.set_pan_enabled(True)
        self._surface.set_cursor("default")
        self._surface.set_boundary_emphasis(False)
        self._notify()
        self._settle()
        return True

    def _settle(self) -> None:
        # Fire-and-forget; the animation runs on the surface's own clock.
        request = self.fit_to_circle()
        self._phase = DragPhase.IDLE
        logger.debug(
            "radius drag settled at %s mi; fitting %s over %d ms",
            self._radius,
            request.bounds,
            request.duration_ms,
        )

    def teardown(self) -> None:
        """Cancel pending work and release the pan lock if a drag was in progress."""
        if self._closed:
            return
        self._cancel_pending_frame()
        if self._phase is DragPhase.DRAGGING:
            self._surface.set_pan_enabled(True)
            self._surface.set_cursor("default")
            self._surface.set_boundary_emphasis(False)
        self._phase = DragPhase.IDLE
        self._listeners.clear()
        self._closed = True
