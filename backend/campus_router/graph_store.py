from __future__ import annotations

import copy
import math
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Literal

from .graph_errors import NotFoundError, ValidationError
from .logging_utils import bind_log_context, log_event
from .models import ConnectionRecord, GraphSnapshot, WaypointRecord
from .snapshot_codec import decode_snapshot

GraphOrigin = Literal["source", "default", "import"]


class ReadWriteLock:
    """Many concurrent readers or a single writer; waiting writers block new readers.

    Not reentrant: never take the read side while already holding either side.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


@dataclass
class Waypoint:
    id: str
    name: str
    lat: float
    lng: float

    def to_record(self) -> WaypointRecord:
        return WaypointRecord(id=self.id, name=self.name, lat=self.lat, lng=self.lng)


@dataclass(frozen=True)
class Connection:
    a: str
    b: str
    dist: float

    def to_record(self) -> ConnectionRecord:
        return ConnectionRecord(a=self.a, b=self.b, dist=self.dist)


@dataclass(frozen=True)
class GraphView:
    """Read-only view handed out while the store's read lock is held."""

    waypoints: Mapping[str, Waypoint]
    connections: tuple[Connection, ...]
    version: int
    origin: GraphOrigin = "default"
    source: str | None = None


def _build_state(snapshot: GraphSnapshot) -> tuple[dict[str, Waypoint], tuple[Connection, ...]]:
    waypoints: dict[str, Waypoint] = {}
    for idx, node in enumerate(snapshot.nodes):
        if node.id in waypoints:
            raise ValidationError(
                message=f"duplicate waypoint id {node.id!r} at nodes.{idx}",
                reason_code="snapshot_duplicate_waypoint",
                details={"field": f"nodes.{idx}.id", "waypoint_id": node.id},
            )
        waypoints[node.id] = Waypoint(id=node.id, name=node.name, lat=float(node.lat), lng=float(node.lng))

    unknown: list[dict[str, Any]] = []
    for idx, edge in enumerate(snapshot.edges):
        for end in ("a", "b"):
            ref = getattr(edge, end)
            if ref not in waypoints:
                unknown.append({"field": f"edges.{idx}.{end}", "waypoint_id": ref})
    if unknown:
        first = unknown[0]
        raise ValidationError(
            message=f"connection {first['field']} references unknown waypoint {first['waypoint_id']!r}",
            reason_code="snapshot_unknown_waypoint",
            details={"field": first["field"], "unknown_references": unknown},
        )

    connections = tuple(Connection(a=e.a, b=e.b, dist=float(e.dist)) for e in snapshot.edges)
    return waypoints, connections


def _check_position(lat: float, lng: float) -> tuple[float, float]:
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            message="waypoint coordinates must be numbers",
            reason_code="waypoint_position_invalid",
        ) from e
    if not (math.isfinite(lat_f) and -90.0 <= lat_f <= 90.0):
        raise ValidationError(
            message=f"latitude {lat!r} outside -90..90",
            reason_code="waypoint_position_invalid",
            details={"field": "lat"},
        )
    if not (math.isfinite(lng_f) and -180.0 <= lng_f <= 180.0):
        raise ValidationError(
            message=f"longitude {lng!r} outside -180..180",
            reason_code="waypoint_position_invalid",
            details={"field": "lng"},
        )
    return lat_f, lng_f


class GraphStore:
    """Owns campus waypoints and connections.

    Loads replace everything at once and only after validation, so a rejected
    snapshot leaves the previous graph untouched. Every mutation bumps
    ``version``; adjacency and routes are derived per query, never cached here.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._waypoints: dict[str, Waypoint] = {}
        self._connections: tuple[Connection, ...] = ()
        self._metadata: Any = {}
        self._origin: GraphOrigin = "default"
        self._source: str | None = None
        self._version = 0

    @classmethod
    def from_snapshot(
        cls,
        snapshot: GraphSnapshot | Mapping[str, Any] | str | bytes,
        *,
        origin: GraphOrigin = "default",
        source: str | None = None,
    ) -> GraphStore:
        store = cls()
        store.load(snapshot, origin=origin, source=source)
        return store

    def load(
        self,
        snapshot: GraphSnapshot | Mapping[str, Any] | str | bytes,
        *,
        origin: GraphOrigin = "default",
        source: str | None = None,
    ) -> int:
        """Validate ``snapshot`` and swap it in, recording where it came from.

        Graph and provenance change under the same write lock, so readers never
        see a new graph labelled with a previous origin.
        """
        parsed = decode_snapshot(snapshot)
        waypoints, connections = _build_state(parsed)
        with self._lock.write():
            self._waypoints = waypoints
            self._connections = connections
            self._metadata = parsed.metadata
            self._origin = origin
            self._source = source
            self._version += 1
            version = self._version
        with bind_log_context(graph_version=version, origin=origin, source=source):
            log_event(
                "graph_loaded",
                waypoint_count=len(waypoints),
                connection_count=len(connections),
            )
        return version

    def update_waypoint_position(self, waypoint_id: str, lat: float, lng: float) -> Waypoint:
        with self._lock.write():
            waypoint = self._waypoints.get(waypoint_id)
            if waypoint is None:
                raise NotFoundError(
                    message=f"waypoint {waypoint_id!r} not found",
                    details={"waypoint_id": waypoint_id},
                )
            waypoint.lat, waypoint.lng = _check_position(lat, lng)
            self._version += 1
            return replace(waypoint)

    def export_snapshot(self) -> GraphSnapshot:
        with self._lock.read():
            return GraphSnapshot(
                nodes=[wp.to_record() for wp in self._waypoints.values()],
                edges=[conn.to_record() for conn in self._connections],
                metadata=copy.deepcopy(self._metadata),
            )

    @contextmanager
    def reading(self) -> Iterator[GraphView]:
        with self._lock.read():
            yield GraphView(
                waypoints=MappingProxyType(self._waypoints),
                connections=self._connections,
                version=self._version,
                origin=self._origin,
                source=self._source,
            )

    def get_waypoint(self, waypoint_id: str) -> Waypoint:
        with self._lock.read():
            waypoint = self._waypoints.get(waypoint_id)
            if waypoint is None:
                raise NotFoundError(
                    message=f"waypoint {waypoint_id!r} not found",
                    details={"waypoint_id": waypoint_id},
                )
            return replace(waypoint)

    def has_waypoint(self, waypoint_id: str) -> bool:
        with self._lock.read():
            return waypoint_id in self._waypoints

    def waypoints(self) -> list[Waypoint]:
        with self._lock.read():
            return [replace(wp) for wp in self._waypoints.values()]

    def connections(self) -> tuple[Connection, ...]:
        with self._lock.read():
            return self._connections

    def search_waypoints(self, query: str, *, limit: int = 5) -> list[Waypoint]:
        needle = str(query or "").strip().casefold()
        if not needle or limit <= 0:
            return []
        out: list[Waypoint] = []
        with self._lock.read():
            for wp in self._waypoints.values():
                if needle in wp.name.casefold():
                    out.append(replace(wp))
                    if len(out) >= limit:
                        break
        return out

    def provenance(self) -> tuple[GraphOrigin, str | None]:
        with self._lock.read():
            return self._origin, self._source

    @property
    def version(self) -> int:
        with self._lock.read():
            return self._version

    def counts(self) -> tuple[int, int]:
        with self._lock.read():
            return len(self._waypoints), len(self._connections)


def check_snapshot(snapshot: GraphSnapshot) -> None:
    """Raise ``ValidationError`` if ``snapshot`` could not be loaded into a store."""
    _build_state(snapshot)
