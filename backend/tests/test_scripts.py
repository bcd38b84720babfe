from __future__ import annotations

import json
from pathlib import Path

import pytest

import scripts.export_default_graph as export_default_graph
import scripts.plan_route as plan_route


def test_plan_route_on_builtin_graph(capsys) -> None:
    code = plan_route.main(["main_gate", "library"])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["found"] is True
    assert payload["distance_display_m"] == 480
    assert payload["steps"][-1]["to"] == "Library"


def test_plan_route_reports_missing_route(tmp_path: Path, capsys) -> None:
    graph = tmp_path / "graph.json"
    graph.write_text(
        json.dumps(
            {
                "nodes": [
                    {"id": "a", "name": "A", "lat": 0.0, "lng": 0.0},
                    {"id": "b", "name": "B", "lat": 0.0, "lng": 0.1},
                ],
                "edges": [],
            }
        ),
        encoding="utf-8",
    )

    code = plan_route.main(["a", "b", "--graph", str(graph)])

    assert code == 1
    assert json.loads(capsys.readouterr().out) == {"found": False, "start_id": "a", "end_id": "b"}


def test_plan_route_missing_graph_file(tmp_path: Path) -> None:
    args = plan_route.build_parser().parse_args(["a", "b", "--graph", str(tmp_path / "nope.json")])

    with pytest.raises(ValueError, match="graph snapshot not found"):
        plan_route.run_plan_route(args)


def test_export_default_graph_refuses_overwrite_without_force(tmp_path: Path) -> None:
    output = tmp_path / "graph.json"
    parser = export_default_graph.build_parser()

    first = export_default_graph.run_export(parser.parse_args(["--output", str(output)]))
    assert first["waypoint_count"] == 16
    assert first["connection_count"] == 29
    assert json.loads(output.read_text(encoding="utf-8"))["nodes"][0]["id"] == "main_gate"

    with pytest.raises(ValueError, match="--force"):
        export_default_graph.run_export(parser.parse_args(["--output", str(output)]))

    again = export_default_graph.run_export(parser.parse_args(["--output", str(output), "--force"]))
    assert again["output"] == str(output.resolve())
