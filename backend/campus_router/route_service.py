from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from .adjacency import build_adjacency, build_edge_index, component_index
from .graph_errors import InvalidRequestError, NotFoundError, ValidationError
from .graph_store import GraphOrigin, GraphStore, Waypoint
from .logging_utils import log_event
from .models import GraphSnapshot
from .route_steps import RouteStep, build_steps, route_polyline
from .shortest_path import shortest_path
from .snapshot_source import ResolvedSnapshot, resolve_snapshot
from .snapshot_store import save_graph_snapshot


def round_half_up(value: float) -> int:
    return int(math.floor(float(value) + 0.5))


@dataclass(frozen=True)
class RouteResult:
    path: tuple[str, ...]
    distance: float
    steps: tuple[RouteStep, ...]
    coordinates: tuple[tuple[float, float], ...]
    graph_version: int

    @property
    def display_distance(self) -> int:
        return round_half_up(self.distance)


@dataclass(frozen=True)
class NoRouteFound:
    start_id: str
    end_id: str
    graph_version: int


class CampusRouter:
    """Route queries, admin edits and import/export over one ``GraphStore``.

    Each router owns its store; nothing here is process-global.
    """

    def __init__(self, store: GraphStore) -> None:
        self.store = store

    @property
    def origin(self) -> GraphOrigin:
        return self.store.provenance()[0]

    @property
    def source(self) -> str | None:
        return self.store.provenance()[1]

    @classmethod
    def from_source(cls, source: str | None = None, *, client: httpx.Client | None = None) -> CampusRouter:
        resolved = resolve_snapshot(source, client=client)
        return cls(GraphStore.from_snapshot(resolved.snapshot, origin=resolved.origin, source=resolved.source))

    def reload(self, source: str | None = None, *, client: httpx.Client | None = None) -> ResolvedSnapshot:
        resolved = resolve_snapshot(source, client=client)
        self.store.load(resolved.snapshot, origin=resolved.origin, source=resolved.source)
        return resolved

    def find_route(self, start_id: str, end_id: str) -> RouteResult | NoRouteFound:
        if start_id == end_id:
            raise InvalidRequestError(
                message="start and end waypoints must differ",
                reason_code="route_endpoints_identical",
                details={"waypoint_id": start_id},
            )
        with self.store.reading() as view:
            missing = [wid for wid in (start_id, end_id) if wid not in view.waypoints]
            if missing:
                raise NotFoundError(
                    message=f"waypoint {missing[0]!r} not found",
                    details={"missing": missing},
                )
            adjacency = build_adjacency(view.waypoints.keys(), view.connections)
            found = shortest_path(adjacency=adjacency, start=start_id, goal=end_id)
            if found is None:
                return NoRouteFound(start_id=start_id, end_id=end_id, graph_version=view.version)
            edge_index = build_edge_index(view.connections)
            return RouteResult(
                path=found.nodes,
                distance=found.cost,
                steps=build_steps(found.nodes, view.waypoints, edge_index),
                coordinates=tuple(route_polyline(found.nodes, view.waypoints)),
                graph_version=view.version,
            )

    def move_waypoint(self, waypoint_id: str, lat: float, lng: float) -> Waypoint:
        moved = self.store.update_waypoint_position(waypoint_id, lat, lng)
        log_event("waypoint_moved", waypoint_id=moved.id, lat=moved.lat, lng=moved.lng)
        return moved

    def import_snapshot(self, raw: GraphSnapshot | Mapping[str, Any] | str | bytes) -> int:
        try:
            version = self.store.load(raw, origin="import")
        except ValidationError as e:
            log_event(
                "graph_import_rejected",
                level=logging.WARNING,
                reason_code=e.reason_code,
                error_message=e.message,
            )
            raise
        return version

    def export_snapshot(self) -> GraphSnapshot:
        return self.store.export_snapshot()

    def save_snapshot(self, path: Path | None = None) -> Path:
        return save_graph_snapshot(self.store.export_snapshot(), path=path)

    def get_waypoint(self, waypoint_id: str) -> Waypoint:
        return self.store.get_waypoint(waypoint_id)

    def list_waypoints(self) -> list[Waypoint]:
        return self.store.waypoints()

    def search(self, query: str, *, limit: int = 5) -> list[Waypoint]:
        return self.store.search_waypoints(query, limit=limit)

    def summary(self) -> dict[str, Any]:
        with self.store.reading() as view:
            adjacency = build_adjacency(view.waypoints.keys(), view.connections)
            _by_node, sizes = component_index(adjacency)
            return {
                "graph_version": view.version,
                "waypoint_count": len(view.waypoints),
                "connection_count": len(view.connections),
                "component_count": len(sizes),
                "origin": view.origin,
                "source": view.source,
            }
