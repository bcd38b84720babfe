from __future__ import annotations

import math
from itertools import permutations

import pytest

from campus_router.default_graph import DEFAULT_GRAPH, default_snapshot
from campus_router.graph_errors import InvalidRequestError, NotFoundError, ValidationError
from campus_router.graph_store import GraphStore
from campus_router.route_service import CampusRouter, NoRouteFound, RouteResult, round_half_up


def _router() -> CampusRouter:
    return CampusRouter(GraphStore.from_snapshot(default_snapshot()))


def _brute_force_min(start: str, goal: str) -> float:
    edges = [(e["a"], e["b"], float(e["dist"])) for e in DEFAULT_GRAPH["edges"]]
    best = math.inf

    def walk(node: str, seen: frozenset[str], cost: float) -> None:
        nonlocal best
        if cost >= best:
            return
        if node == goal:
            best = cost
            return
        for a, b, dist in edges:
            for u, v in ((a, b), (b, a)):
                if u == node and v not in seen:
                    walk(v, seen | {v}, cost + dist)

    walk(start, frozenset({start}), 0.0)
    return best


def test_main_gate_to_library_matches_brute_force_minimum() -> None:
    result = _router().find_route("main_gate", "library")

    assert isinstance(result, RouteResult)
    assert result.distance == _brute_force_min("main_gate", "library")
    assert result.distance == 480.0
    assert result.display_distance == 480
    assert result.path == ("main_gate", "entrance_junction", "parking_area", "cafeteria", "library")
    assert [(s.from_name, s.to_name, s.distance) for s in result.steps] == [
        ("Main Gate", "Entrance Junction", 120.0),
        ("Entrance Junction", "Parking Area", 80.0),
        ("Parking Area", "Cafeteria", 160.0),
        ("Cafeteria", "Library", 120.0),
    ]
    assert result.steps[-1].description == "Head towards Library"
    assert result.coordinates[0] == (77.7060, 13.1950)
    assert len(result.coordinates) == len(result.path)


def test_equal_cost_alternatives_keep_first_settled_predecessor() -> None:
    # Both south->west (180) and south->center->west (90+90) reach west at 450;
    # south_junction is settled first, so the direct leg wins.
    result = _router().find_route("main_gate", "west_junction")

    assert isinstance(result, RouteResult)
    assert result.distance == 450.0
    assert result.path == ("main_gate", "entrance_junction", "south_junction", "west_junction")


def test_every_default_pair_is_minimal_and_symmetric() -> None:
    router = _router()
    ids = [n["id"] for n in DEFAULT_GRAPH["nodes"]]

    for s, t in permutations(ids, 2):
        forward = router.find_route(s, t)
        backward = router.find_route(t, s)
        assert isinstance(forward, RouteResult)
        assert isinstance(backward, RouteResult)
        assert forward.path[0] == s and forward.path[-1] == t
        assert forward.distance == backward.distance
        assert sum(step.distance for step in forward.steps) == forward.distance
        assert len(forward.steps) == len(forward.path) - 1

    for s, t in [("main_gate", "sports_complex"), ("hostel1", "cafeteria"), ("admin_block1", "academic_block2")]:
        result = router.find_route(s, t)
        assert isinstance(result, RouteResult)
        assert result.distance == _brute_force_min(s, t)


def test_same_start_and_end_is_rejected() -> None:
    with pytest.raises(InvalidRequestError) as exc_info:
        _router().find_route("library", "library")

    assert exc_info.value.reason_code == "route_endpoints_identical"


def test_unknown_endpoint_is_not_found() -> None:
    router = _router()

    with pytest.raises(NotFoundError):
        router.find_route("main_gate", "observatory")
    with pytest.raises(NotFoundError) as exc_info:
        router.find_route("observatory", "main_gate")
    assert exc_info.value.details == {"missing": ["observatory"]}


def test_disconnected_pair_returns_no_route() -> None:
    snapshot = default_snapshot().model_dump()
    snapshot["nodes"].append({"id": "boathouse", "name": "Boathouse", "lat": 13.19, "lng": 77.70})
    router = CampusRouter(GraphStore.from_snapshot(snapshot))

    result = router.find_route("main_gate", "boathouse")

    assert isinstance(result, NoRouteFound)
    assert result.start_id == "main_gate"
    assert result.end_id == "boathouse"
    assert router.summary()["component_count"] == 2


def test_moving_a_waypoint_keeps_route_distances() -> None:
    router = _router()
    before = router.find_route("hostel1", "cafeteria")

    moved = router.move_waypoint("cafeteria", 13.2001, 77.7101)
    after = router.find_route("hostel1", "cafeteria")

    assert moved.lat == 13.2001
    assert isinstance(before, RouteResult)
    assert isinstance(after, RouteResult)
    assert after.path == before.path
    assert [s.distance for s in after.steps] == [s.distance for s in before.steps]
    assert after.distance == before.distance
    assert after.coordinates[-1] == (77.7101, 13.2001)
    assert before.coordinates[-1] == (77.7055, 13.1965)
    assert after.graph_version == before.graph_version + 1


def test_invalid_import_leaves_previous_graph_in_place() -> None:
    router = _router()
    version = router.store.version
    bad = {
        "nodes": [{"id": "x", "name": "X", "lat": 0.0, "lng": 0.0}],
        "edges": [{"a": "x", "b": "ghost", "dist": 10}],
        "metadata": {},
    }

    with pytest.raises(ValidationError) as exc_info:
        router.import_snapshot(bad)

    assert exc_info.value.reason_code == "snapshot_unknown_waypoint"
    assert router.store.version == version
    assert router.origin == "default"
    assert router.store.counts() == (16, 29)
    assert isinstance(router.find_route("main_gate", "library"), RouteResult)


def test_import_replaces_graph_wholesale() -> None:
    router = _router()
    version = router.import_snapshot(
        {
            "nodes": [
                {"id": "a", "name": "Alpha", "lat": 1.0, "lng": 1.0},
                {"id": "b", "name": "Beta", "lat": 1.1, "lng": 1.1},
            ],
            "edges": [{"a": "a", "b": "b", "dist": 42.4}],
            "metadata": {"source": "pytest"},
        }
    )

    assert version == router.store.version
    assert router.origin == "import"
    assert router.store.counts() == (2, 1)
    assert not router.store.has_waypoint("main_gate")
    result = router.find_route("b", "a")
    assert isinstance(result, RouteResult)
    assert result.display_distance == 42


def test_round_half_up_for_display() -> None:
    assert round_half_up(480.0) == 480
    assert round_half_up(12.5) == 13
    assert round_half_up(13.5) == 14
    assert round_half_up(12.49) == 12
