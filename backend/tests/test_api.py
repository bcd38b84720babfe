from __future__ import annotations

import json
from pathlib import Path

from fastapi.testclient import TestClient

from campus_router.main import app
from campus_router.settings import settings


def _client(tmp_path: Path, monkeypatch, *, graph_source: str | None = None) -> TestClient:
    out_dir = tmp_path / "out"
    out_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setattr(settings, "out_dir", str(out_dir))
    monkeypatch.setattr(
        settings,
        "graph_source",
        graph_source if graph_source is not None else str(tmp_path / "missing.json"),
    )
    return TestClient(app)


def test_health_reports_default_graph(tmp_path: Path, monkeypatch) -> None:
    with _client(tmp_path, monkeypatch) as client:
        resp = client.get("/health")

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["status"] == "ok"
    assert payload["origin"] == "default"
    assert payload["waypoint_count"] == 16
    assert payload["connection_count"] == 29
    assert payload["component_count"] == 1


def test_route_endpoint_returns_path_steps_and_geometry(tmp_path: Path, monkeypatch) -> None:
    with _client(tmp_path, monkeypatch) as client:
        resp = client.post("/route", json={"start_id": "main_gate", "end_id": "library"})

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["found"] is True
    assert payload["distance_m"] == 480.0
    assert payload["distance_display_m"] == 480
    assert payload["path"] == ["main_gate", "entrance_junction", "parking_area", "cafeteria", "library"]
    assert payload["steps"][0] == {
        "from": "Main Gate",
        "to": "Entrance Junction",
        "distance": 120.0,
        "description": "Head towards Entrance Junction",
    }
    assert payload["geometry"]["type"] == "LineString"
    assert payload["geometry"]["coordinates"][-1] == [77.7060, 13.1970]


def test_route_endpoint_error_mapping(tmp_path: Path, monkeypatch) -> None:
    with _client(tmp_path, monkeypatch) as client:
        same = client.post("/route", json={"start_id": "library", "end_id": "library"})
        unknown = client.post("/route", json={"start_id": "library", "end_id": "observatory"})
        blank = client.post("/route", json={"start_id": "", "end_id": "library"})

    assert same.status_code == 400
    assert same.json()["detail"]["reason_code"] == "route_endpoints_identical"
    assert unknown.status_code == 404
    assert unknown.json()["detail"]["reason_code"] == "waypoint_not_found"
    assert unknown.json()["detail"]["details"] == {"missing": ["observatory"]}
    assert blank.status_code == 422


def test_route_endpoint_reports_no_route(tmp_path: Path, monkeypatch) -> None:
    graph = {
        "nodes": [
            {"id": "a", "name": "A", "lat": 0.0, "lng": 0.0},
            {"id": "b", "name": "B", "lat": 0.0, "lng": 0.1},
        ],
        "edges": [],
    }
    with _client(tmp_path, monkeypatch) as client:
        imported = client.post("/graph/import", json=graph)
        resp = client.post("/route", json={"start_id": "a", "end_id": "b"})

    assert imported.status_code == 200
    assert imported.json()["origin"] == "import"
    assert imported.json()["component_count"] == 2
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["found"] is False
    assert payload["path"] == []
    assert payload["steps"] == []
    assert payload["distance_m"] is None


def test_waypoint_listing_and_search(tmp_path: Path, monkeypatch) -> None:
    with _client(tmp_path, monkeypatch) as client:
        everything = client.get("/waypoints").json()
        limited = client.get("/waypoints", params={"limit": 3}).json()
        junctions = client.get("/waypoints", params={"q": "junction"}).json()
        two = client.get("/waypoints", params={"q": "Junction", "limit": 2}).json()
        one = client.get("/waypoints/library")
        missing = client.get("/waypoints/observatory")

    assert everything["total"] == 16
    assert [wp["id"] for wp in limited["waypoints"]] == ["main_gate", "entrance_junction", "admin_block1"]
    assert junctions["total"] == 5
    assert junctions["query"] == "junction"
    assert [wp["id"] for wp in two["waypoints"]] == ["entrance_junction", "north_junction"]
    assert one.json() == {"id": "library", "name": "Library", "lat": 13.1970, "lng": 77.7060}
    assert missing.status_code == 404


def test_move_waypoint_position(tmp_path: Path, monkeypatch) -> None:
    with _client(tmp_path, monkeypatch) as client:
        before = client.get("/health").json()["graph_version"]
        moved = client.patch("/waypoints/library/position", json={"lat": 13.2, "lng": 77.71})
        after = client.get("/health").json()["graph_version"]
        route = client.post("/route", json={"start_id": "main_gate", "end_id": "library"}).json()
        unknown = client.patch("/waypoints/observatory/position", json={"lat": 13.2, "lng": 77.71})
        out_of_range = client.patch("/waypoints/library/position", json={"lat": 95.0, "lng": 77.71})

    assert moved.status_code == 200
    assert moved.json()["lat"] == 13.2
    assert after == before + 1
    assert route["distance_m"] == 480.0
    assert route["geometry"]["coordinates"][-1] == [77.71, 13.2]
    assert unknown.status_code == 404
    assert out_of_range.status_code == 422


def test_import_rejects_invalid_snapshots(tmp_path: Path, monkeypatch) -> None:
    with _client(tmp_path, monkeypatch) as client:
        missing = client.post("/graph/import", json={"nodes": []})
        not_object = client.post("/graph/import", json=[1, 2, 3])
        bad_ref = client.post(
            "/graph/import",
            json={
                "nodes": [{"id": "a", "name": "A", "lat": 0.0, "lng": 0.0}],
                "edges": [{"a": "a", "b": "z", "dist": 5}],
            },
        )
        health = client.get("/health").json()

    assert missing.status_code == 422
    assert missing.json()["detail"]["reason_code"] == "snapshot_missing_collection"
    assert not_object.status_code == 422
    assert not_object.json()["detail"]["reason_code"] == "snapshot_invalid"
    assert bad_ref.status_code == 422
    assert bad_ref.json()["detail"]["details"]["field"] == "edges.0.b"
    assert health["origin"] == "default"
    assert health["waypoint_count"] == 16


def test_export_save_and_reload_round_trip(tmp_path: Path, monkeypatch) -> None:
    # An empty graph source means "read the saved snapshot under OUT_DIR".
    with _client(tmp_path, monkeypatch, graph_source="") as client:
        assert client.get("/health").json()["origin"] == "default"
        client.patch("/waypoints/hostel1/position", json={"lat": 13.1999, "lng": 77.7099})

        exported = client.get("/graph/export").json()
        saved = client.post("/graph/export/save").json()
        reloaded = client.post("/graph/reload").json()
        hostel = client.get("/waypoints/hostel1").json()

    assert list(exported) == ["nodes", "edges", "metadata"]
    assert exported["metadata"]["source"] == "updated-circular-layout"
    saved_path = Path(saved["path"])
    assert saved_path == tmp_path / "out" / "snapshots" / "campus_graph.json"
    assert json.loads(saved_path.read_text(encoding="utf-8")) == exported
    assert reloaded["origin"] == "source"
    assert reloaded["source"] == str(saved_path)
    assert (hostel["lat"], hostel["lng"]) == (13.1999, 77.7099)
