from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .graph_store import Waypoint


@dataclass(frozen=True)
class RouteStep:
    from_name: str
    to_name: str
    distance: float
    description: str


def step_description(to_name: str) -> str:
    return f"Head towards {to_name}"


def build_steps(
    path: Sequence[str],
    waypoints: Mapping[str, Waypoint],
    edge_index: Mapping[tuple[str, str], float],
) -> tuple[RouteStep, ...]:
    steps: list[RouteStep] = []
    for src_id, dst_id in zip(path, path[1:]):
        src = waypoints[src_id]
        dst = waypoints[dst_id]
        steps.append(
            RouteStep(
                from_name=src.name,
                to_name=dst.name,
                distance=float(edge_index.get((src_id, dst_id), 0.0)),
                description=step_description(dst.name),
            )
        )
    return tuple(steps)


def route_polyline(path: Sequence[str], waypoints: Mapping[str, Waypoint]) -> list[tuple[float, float]]:
    # GeoJSON order: [lng, lat]
    return [(waypoints[node_id].lng, waypoints[node_id].lat) for node_id in path]
