"""
DealRadius CLI entrypoint.

Quick local demos and debugging without the dashboard:
- `nearby`: competitor deals near a catalog deal
- `circle`: the radius circle as GeoJSON
- `simulate-drag`: replay pointer positions through the radius drag controller
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from dealradius.catalog.loader import load_catalog
from dealradius.config.settings import get_settings
from dealradius.core.frames import ManualFrameScheduler
from dealradius.core.geo import GeoPoint, circle_polygon, polygon_to_geojson
from dealradius.core.logging import configure_logging
from dealradius.domain.models import RadiusState
from dealradius.interaction.radius_drag import clamp_radius
from dealradius.interaction.selector import ProximitySelector
from dealradius.interaction.surface import GeoJsonMapSurface, PointerEvent
from dealradius.proximity.lookup import DealNotFoundError, nearby_deals


def _parse_latlon(value: str) -> GeoPoint:
    """Parse a `LAT,LON` CLI argument."""
    if "," not in value:
        raise ValueError(f"Invalid position '{value}', expected LAT,LON")
    lat, lon = value.split(",", 1)
    return GeoPoint(latitude=float(lat), longitude=float(lon))


def _cmd_nearby(args: argparse.Namespace) -> int:
    settings = get_settings()
    catalog = load_catalog(args.catalog or settings.catalog.path)
    try:
        result = nearby_deals(args.deal_id, catalog=catalog, settings=settings, radius_miles=args.radius)
    except DealNotFoundError as e:
        print(str(e))
        return 2

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    if result.center is None:
        print("No location data available for this account")
        return 0
    print(result.summary)
    if result.nearest:
        print(f"Nearest: {result.nearest}")
    for item in result.results:
        print(
            f"{item.marker_label:>2}. {item.title}  [{item.marker_kind}]  "
            f"{item.distance_miles:.1f} mi  {item.location_name}"
        )
    return 0


def _cmd_circle(args: argparse.Namespace) -> int:
    settings = get_settings()
    radius = clamp_radius(
        args.radius, min_miles=settings.radius.min_miles, max_miles=settings.radius.max_miles
    )
    polygon = circle_polygon(
        GeoPoint(latitude=args.lat, longitude=args.lon), radius, args.points or settings.circle.points
    )
    print(json.dumps(polygon_to_geojson(polygon), indent=2))
    return 0


def _cmd_simulate_drag(args: argparse.Namespace) -> int:
    settings = get_settings()
    catalog = load_catalog(args.catalog or settings.catalog.path)
    reference = catalog.get_deal(args.deal_id)
    if reference is None:
        print(f"Unknown deal id: {args.deal_id!r}")
        return 2

    positions = [_parse_latlon(p) for p in args.to]
    surface = GeoJsonMapSurface(style=settings.style)
    frames = ManualFrameScheduler()
    selector = ProximitySelector(
        reference,
        catalog.deals,
        surface,
        frames,
        settings=settings,
        locations_for=catalog.locations_for,
        initial_radius=args.radius,
    )
    if selector.controller is None:
        print("No location data available for this account; radius drag disabled")
        return 1

    radii: list[int] = []
    last_radius = {"value": selector.controller.radius_miles}

    def _record(state: RadiusState) -> None:
        if state.radius_miles != last_radius["value"]:
            radii.append(state.radius_miles)
            last_radius["value"] = state.radius_miles

    selector.controller.subscribe(_record)

    per_frame = max(1, int(args.moves_per_frame))
    surface.emit(PointerEvent("down"))
    for i, pos in enumerate(positions, start=1):
        surface.emit(PointerEvent("move", pos))
        if i % per_frame == 0:
            frames.run_frame()
    frames.run_frame()
    surface.emit(PointerEvent("up"))

    headline, nearest = selector.summary()
    selector.close()

    if args.json:
        payload: dict[str, Any] = {
            "published_radii": radii,
            "frames": frames.frames_run,
            "summary": headline,
            "nearest": nearest,
            "surface": surface.snapshot(),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    print(f"Frames: {frames.frames_run}  moves: {len(positions)}")
    print("Published radii: " + (", ".join(str(r) for r in radii) if radii else "(none)"))
    print(headline)
    if nearest:
        print(f"Nearest: {nearest}")
    if surface.viewport is not None:
        print(f"Settle viewport: {surface.viewport.to_dict()}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the DealRadius CLI."""
    parser = argparse.ArgumentParser(prog="dealradius")
    sub = parser.add_subparsers(dest="command", required=True)

    near = sub.add_parser("nearby", help="List same-category deals near a deal's primary location.")
    near.add_argument("--deal-id", required=True)
    near.add_argument("--radius", type=float, default=None, help="Miles; clamped to the configured range.")
    near.add_argument("--catalog", type=str, default=None, help="Catalog JSON (defaults to settings).")
    near.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    near.set_defaults(func=_cmd_nearby)

    circ = sub.add_parser("circle", help="Emit the radius circle polygon as GeoJSON.")
    circ.add_argument("--lat", required=True, type=float)
    circ.add_argument("--lon", required=True, type=float)
    circ.add_argument("--radius", required=True, type=float)
    circ.add_argument("--points", type=int, default=None)
    circ.set_defaults(func=_cmd_circle)

    drag = sub.add_parser(
        "simulate-drag",
        help="Replay pointer positions through the radius drag controller on a manual frame clock.",
    )
    drag.add_argument("--deal-id", required=True)
    drag.add_argument("--to", action="append", required=True, help="Repeatable pointer position: LAT,LON")
    drag.add_argument("--moves-per-frame", type=int, default=1)
    drag.add_argument("--radius", type=float, default=None, help="Initial radius in miles.")
    drag.add_argument("--catalog", type=str, default=None)
    drag.add_argument("--json", action="store_true")
    drag.set_defaults(func=_cmd_simulate_drag)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m dealradius.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
