"""
Proximity selector: the "competitor deals near this merchant" panel, minus the pixels.

Owns the reference deal, the candidate deals and the drag controller, and keeps the
proximity result set in sync with them. Every radius publish recomputes the results and
the controller redraws the circle; markers are only replaced once the drag has ended, so
the map does not churn marker DOM while the boundary is moving.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from dealradius.config.settings import Settings, get_settings
from dealradius.core.frames import FrameScheduler
from dealradius.core.geo import GeoPoint
from dealradius.domain.models import Deal, ProximityResult, RadiusState
from dealradius.interaction.radius_drag import RadiusDragController, clamp_radius
from dealradius.interaction.surface import MapSurface
from dealradius.proximity.index import LocationsFor, filter_within_radius, resolve_primary_location
from dealradius.proximity.markers import summarize

logger = logging.getLogger(__name__)


class ProximitySelector:
    def __init__(
        self,
        reference: Deal,
        entities: Sequence[Deal],
        surface: MapSurface,
        frames: FrameScheduler,
        *,
        settings: Settings | None = None,
        locations_for: LocationsFor | None = None,
        initial_radius: float | None = None,
    ):
        self._settings = settings or get_settings()
        self._surface = surface
        self._frames = frames
        self._locations_for = locations_for or (lambda d: d.locations)
        self._entities: tuple[Deal, ...] = tuple(entities)

        cfg = self._settings.radius
        default = cfg.default_miles if initial_radius is None else initial_radius
        self._radius = clamp_radius(default, min_miles=cfg.min_miles, max_miles=cfg.max_miles)

        self._reference = reference
        self._center: GeoPoint | None = None
        self._controller: RadiusDragController | None = None
        self._unsubscribers: list[Callable[[], None]] = []
        self._results: tuple[ProximityResult, ...] = ()
        self._attach(reference)

    @property
    def reference(self) -> Deal:
        return self._reference

    @property
    def center(self) -> GeoPoint | None:
        return self._center

    @property
    def enabled(self) -> bool:
        """False when the reference deal has no location; the radius affordance is hidden."""
        return self._controller is not None

    @property
    def controller(self) -> RadiusDragController | None:
        return self._controller

    @property
    def results(self) -> tuple[ProximityResult, ...]:
        return self._results

    @property
    def radius_state(self) -> RadiusState:
        if self._controller is not None:
            return self._controller.radius_state
        return RadiusState(radius_miles=self._radius, is_dragging=False)

    def summary(self) -> tuple[str, str | None]:
        return summarize(self.radius_state.radius_miles, self._results)

    def _attach(self, reference: Deal) -> None:
        self._reference = reference
        location = resolve_primary_location(self._locations_for(reference))
        self._center = (
            location.coordinates.to_point() if location and location.coordinates else None
        )
        if self._center is None:
            logger.info("deal %s has no resolvable location; radius selector disabled", reference.id)
            self._results = ()
            return

        controller = RadiusDragController(
            self._center,
            self._surface,
            self._frames,
            initial_radius=self._radius,
            settings=self._settings,
        )
        self._controller = controller
        self._unsubscribers = [
            controller.subscribe(self._on_radius_state),
            self._surface.on_pointer_event(controller.handle_event),
        ]
        self._recompute()
        controller.render_circle()
        self._render_markers()
        controller.fit_to_circle(self._settings.settle.initial_duration_ms)

    def _detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        if self._controller is not None:
            self._radius = self._controller.radius_miles
            self._controller.teardown()
            self._controller = None

    def _recompute(self) -> None:
        self._results = filter_within_radius(
            self._center,
            self._entities,
            self._reference.id,
            self._reference.category,
            self.radius_state.radius_miles,
            locations_for=self._locations_for,
        )

    def _render_markers(self) -> None:
        self._surface.render_markers(
            self._results, reference=self._reference, reference_position=self._center
        )

    def _on_radius_state(self, state: RadiusState) -> None:
        self._recompute()
        if not state.is_dragging:
            self._render_markers()

    def set_radius(self, miles: float) -> bool:
        if self._controller is None:
            cfg = self._settings.radius
            self._radius = clamp_radius(miles, min_miles=cfg.min_miles, max_miles=cfg.max_miles)
            return False
        return self._controller.set_radius(miles)

    def set_entities(self, entities: Sequence[Deal]) -> None:
        self._entities = tuple(entities)
        self._recompute()
        if self._controller is not None and not self.radius_state.is_dragging:
            self._render_markers()

    def set_reference(self, reference: Deal) -> None:
        """Switch to another reference deal (new center and category)."""
        self._detach()
        self._attach(reference)

    def close(self) -> None:
        self._detach()
