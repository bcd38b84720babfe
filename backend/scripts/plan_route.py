from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Sequence

from campus_router.default_graph import default_snapshot
from campus_router.graph_store import GraphStore
from campus_router.route_service import CampusRouter, NoRouteFound
from campus_router.snapshot_codec import decode_snapshot


def _load_router(graph: str | None) -> CampusRouter:
    if not graph:
        return CampusRouter(GraphStore.from_snapshot(default_snapshot()))
    path = Path(graph)
    if not path.exists():
        raise ValueError(f"graph snapshot not found: {path}")
    store = GraphStore.from_snapshot(decode_snapshot(path.read_bytes()), origin="source", source=str(path))
    return CampusRouter(store)


def run_plan_route(args: argparse.Namespace) -> dict[str, Any]:
    router = _load_router(args.graph)
    result = router.find_route(str(args.start).strip(), str(args.end).strip())
    if isinstance(result, NoRouteFound):
        return {"found": False, "start_id": result.start_id, "end_id": result.end_id}
    return {
        "found": True,
        "path": list(result.path),
        "distance_m": result.distance,
        "distance_display_m": result.display_distance,
        "steps": [
            {
                "from": step.from_name,
                "to": step.to_name,
                "distance": step.distance,
                "description": step.description,
            }
            for step in result.steps
        ],
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute the shortest walking route between two campus waypoints.")
    parser.add_argument("start", help="start waypoint id")
    parser.add_argument("end", help="destination waypoint id")
    parser.add_argument("--graph", default=None, help="snapshot JSON file (default: built-in campus graph)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    payload = run_plan_route(args)
    print(json.dumps(payload, indent=2))
    return 0 if payload["found"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
