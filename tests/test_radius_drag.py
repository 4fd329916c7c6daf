import math

import pytest

from dealradius.config.settings import Settings
from dealradius.core.frames import ManualFrameScheduler
from dealradius.core.geo import EARTH_RADIUS_MILES, GeoPoint
from dealradius.domain.models import RadiusState
from dealradius.interaction.radius_drag import DragPhase, RadiusDragController, clamp_radius
from dealradius.interaction.surface import GeoJsonMapSurface, PointerEvent

CHICAGO = GeoPoint(41.8781, -87.6298)


def _north_of(miles: float) -> GeoPoint:
    return GeoPoint(CHICAGO.latitude + math.degrees(miles / EARTH_RADIUS_MILES), CHICAGO.longitude)


def _controller(initial_radius: float = 10):
    surface = GeoJsonMapSurface()
    frames = ManualFrameScheduler()
    ctrl = RadiusDragController(
        CHICAGO, surface, frames, initial_radius=initial_radius, settings=Settings()
    )
    return ctrl, surface, frames


def test_clamp_radius_rounds_and_clamps():
    assert clamp_radius(0.2) == 1
    assert clamp_radius(-5) == 1
    assert clamp_radius(7.49) == 7
    assert clamp_radius(7.5) == 8
    assert clamp_radius(50.4) == 50
    assert clamp_radius(12_000) == 50
    assert clamp_radius(float("inf")) == 50
    assert clamp_radius(float("nan")) == 1


def test_pointer_down_starts_drag_and_locks_pan():
    ctrl, surface, _ = _controller()
    assert ctrl.pointer_down() is True
    assert ctrl.phase is DragPhase.DRAGGING
    assert ctrl.radius_state == RadiusState(radius_miles=10, is_dragging=True)
    assert surface.pan_enabled is False
    assert surface.cursor == "ew-resize"


def test_second_pointer_down_is_ignored():
    ctrl, surface, frames = _controller()
    ctrl.pointer_down()
    ctrl.pointer_move(_north_of(20))
    frames.run_frame()

    assert ctrl.pointer_down() is False
    assert ctrl.phase is DragPhase.DRAGGING
    assert ctrl.radius_miles == 20
    assert surface.pan_enabled is False


def test_drag_publishes_distance_to_pointer():
    ctrl, surface, frames = _controller()
    seen: list[RadiusState] = []
    ctrl.subscribe(seen.append)

    ctrl.pointer_down()
    ctrl.pointer_move(_north_of(17.3))
    frames.run_frame()

    assert ctrl.radius_miles == 17
    assert seen[-1] == RadiusState(radius_miles=17, is_dragging=True)
    assert surface.emphasis_active is True
    assert surface.paint == surface.style.drag
    assert surface.circle is not None


@pytest.mark.parametrize(
    "pointer, expected",
    [(GeoPoint(-41.8781, 92.3702), 50), (CHICAGO, 1), (GeoPoint(41.8781, -86.0), 50)],
)
def test_extreme_pointer_positions_are_clamped(pointer, expected):
    ctrl, _, frames = _controller()
    published: list[int] = []
    ctrl.subscribe(lambda s: published.append(s.radius_miles))

    ctrl.pointer_down()
    ctrl.pointer_move(pointer)
    frames.run_frame()

    assert ctrl.radius_miles == expected
    assert all(1 <= r <= 50 for r in published)


def test_unchanged_radius_is_not_republished():
    ctrl, surface, frames = _controller()
    ctrl.pointer_down()
    renders = surface.circle_renders
    ctrl.pointer_move(_north_of(10.2))
    frames.run_frame()

    assert ctrl.publish_count == 0
    assert surface.circle_renders == renders


def test_hundred_moves_in_one_frame_publish_at_most_once():
    ctrl, _, frames = _controller()
    ctrl.pointer_down()
    for i in range(100):
        ctrl.pointer_move(_north_of(1 + i * 0.4))
        assert frames.pending_count == 1

    ran = frames.run_frame()

    assert ran == 1
    assert ctrl.publish_count == 1
    # Last write wins: 1 + 99 * 0.4 = 40.6 miles.
    assert ctrl.radius_miles == 41


def test_moves_across_frames_publish_once_per_frame():
    ctrl, _, frames = _controller()
    ctrl.pointer_down()
    for miles in (12, 14, 16):
        ctrl.pointer_move(_north_of(miles))
        ctrl.pointer_move(_north_of(miles + 0.1))
        frames.run_frame()
    assert ctrl.publish_count == 3
    assert ctrl.radius_miles == 16


def test_pointer_up_cancels_pending_frame_and_settles():
    ctrl, surface, frames = _controller()
    ctrl.pointer_down()
    ctrl.pointer_move(_north_of(30))
    assert ctrl.has_pending_frame

    assert ctrl.pointer_up() is True

    assert frames.pending_count == 0
    assert ctrl.radius_miles == 10
    assert ctrl.phase is DragPhase.IDLE
    assert surface.pan_enabled is True
    assert surface.cursor == "default"
    assert surface.emphasis_active is False
    assert len(surface.fit_requests) == 1
    fit = surface.fit_requests[0]
    assert fit.duration_ms == 800
    assert fit.padding_px == 40
    assert fit.max_zoom == 15
    assert fit.bounds.north - CHICAGO.latitude == pytest.approx(10 * 1609.34 / 111320 * 1.2)


def test_pointer_leave_ends_drag_like_pointer_up():
    ctrl, surface, frames = _controller()
    ctrl.pointer_down()
    ctrl.pointer_move(_north_of(5))
    frames.run_frame()
    assert ctrl.pointer_leave() is True
    assert ctrl.phase is DragPhase.IDLE
    assert surface.pan_enabled is True
    assert surface.fit_requests[-1].bounds.north - CHICAGO.latitude == pytest.approx(
        5 * 1609.34 / 111320 * 1.2
    )


def test_settle_reports_not_dragging_before_fit():
    ctrl, surface, frames = _controller()
    phases: list[tuple[bool, DragPhase]] = []
    ctrl.subscribe(lambda s: phases.append((s.is_dragging, ctrl.phase)))

    ctrl.pointer_down()
    ctrl.pointer_up()

    assert phases == [(True, DragPhase.DRAGGING), (False, DragPhase.SETTLING)]
    assert ctrl.phase is DragPhase.IDLE


def test_pointer_up_while_idle_is_a_no_op():
    ctrl, surface, _ = _controller()
    assert ctrl.pointer_up() is False
    assert ctrl.pointer_leave() is False
    assert surface.fit_requests == []


def test_moves_while_idle_are_ignored():
    ctrl, _, frames = _controller()
    ctrl.pointer_move(_north_of(30))
    assert frames.pending_count == 0
    frames.run_frame()
    assert ctrl.radius_miles == 10


def test_set_radius_only_applies_while_idle():
    ctrl, surface, _ = _controller()
    assert ctrl.set_radius(75) is True
    assert ctrl.radius_miles == 50
    assert surface.circle_renders == 1

    ctrl.pointer_down()
    assert ctrl.set_radius(3) is False
    assert ctrl.radius_miles == 50


def test_initial_radius_is_clamped():
    ctrl, _, _ = _controller(initial_radius=0)
    assert ctrl.radius_miles == 1


def test_teardown_mid_drag_releases_pan_and_cancels_frame():
    ctrl, surface, frames = _controller()
    seen: list[RadiusState] = []
    ctrl.subscribe(seen.append)
    ctrl.pointer_down()
    ctrl.pointer_move(_north_of(25))

    ctrl.teardown()

    assert surface.pan_enabled is True
    assert frames.pending_count == 0
    assert ctrl.phase is DragPhase.IDLE
    frames.run_frame()
    assert ctrl.radius_miles == 10
    assert ctrl.pointer_down() is False
    assert len(seen) == 1


def test_boundary_hover_updates_cursor():
    ctrl, surface, _ = _controller()
    ctrl.pointer_enter_boundary()
    assert surface.cursor == "ew-resize"
    ctrl.pointer_leave_boundary()
    assert surface.cursor == "default"

    ctrl.pointer_down()
    ctrl.pointer_leave_boundary()
    assert surface.cursor == "ew-resize"


def test_surface_events_drive_the_controller():
    ctrl, surface, frames = _controller()
    surface.on_pointer_event(ctrl.handle_event)

    surface.emit(PointerEvent("down", _north_of(10)))
    surface.emit(PointerEvent("move", _north_of(22)))
    frames.run_frame()
    surface.emit(PointerEvent("up"))

    assert ctrl.radius_miles == 22
    assert ctrl.phase is DragPhase.IDLE
    assert surface.pan_enabled is True


def test_missing_center_cannot_attach():
    with pytest.raises(ValueError):
        RadiusDragController(None, GeoJsonMapSurface(), ManualFrameScheduler(), settings=Settings())


def test_circle_uses_configured_resolution():
    ctrl, _, _ = _controller()
    assert len(ctrl.circle()) == 65
