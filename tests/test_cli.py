import json
import math

from dealradius.cli import build_parser, main
from dealradius.core.geo import EARTH_RADIUS_MILES

CHICAGO = (41.8781, -87.6298)


def _north(miles: float) -> str:
    return f"{CHICAGO[0] + math.degrees(miles / EARTH_RADIUS_MILES)},{CHICAGO[1]}"


def _write_catalog(tmp_path) -> str:
    def loc(loc_id, account, miles):
        lat, lon = (float(x) for x in _north(miles).split(","))
        return {"id": loc_id, "name": loc_id, "account_id": account,
                "coordinates": {"latitude": lat, "longitude": lon}}

    payload = {
        "deals": [
            {"id": "ref", "title": "Ref", "category": "Food & Drink", "account_id": "acct-ref"},
            {"id": "a", "title": "A", "category": "Food & Drink", "account_id": "competitor-a"},
            {"id": "b", "title": "B", "category": "Food & Drink", "account_id": "competitor-b"},
        ],
        "locations": [loc("ref-loc", "acct-ref", 0), loc("a-loc", "competitor-a", 3), loc("b-loc", "competitor-b", 14)],
    }
    path = tmp_path / "deals.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_nearby_json(tmp_path, capsys):
    catalog = _write_catalog(tmp_path)
    assert main(["nearby", "--deal-id", "ref", "--catalog", catalog, "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert [r["deal_id"] for r in data["results"]] == ["a"]


def test_nearby_unknown_deal_exit_code(tmp_path, capsys):
    catalog = _write_catalog(tmp_path)
    assert main(["nearby", "--deal-id", "zzz", "--catalog", catalog]) == 2
    assert "Unknown deal id" in capsys.readouterr().out


def test_simulate_drag_publishes_once_per_frame(tmp_path, capsys):
    catalog = _write_catalog(tmp_path)
    argv = ["simulate-drag", "--deal-id", "ref", "--catalog", catalog, "--moves-per-frame", "3", "--json"]
    for miles in (11, 12, 15.2, 18, 19, 20):
        argv += ["--to", _north(miles)]

    assert main(argv) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["published_radii"] == [15, 20]
    assert data["summary"] == "Competitor deals in 20 miles: 2"
    assert data["surface"]["pan_enabled"] is True
    assert data["surface"]["viewport"]["duration"] == 800


def test_circle_command_emits_geojson(capsys):
    assert main(["circle", "--lat", "41.8781", "--lon", "-87.6298", "--radius", "5", "--points", "8"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert len(data["features"][0]["geometry"]["coordinates"][0]) == 9


def test_parser_requires_a_pointer_position():
    parser = build_parser()
    args = parser.parse_args(["simulate-drag", "--deal-id", "x", "--to", "1,2"])
    assert args.to == ["1,2"]
    assert args.moves_per_frame == 1
