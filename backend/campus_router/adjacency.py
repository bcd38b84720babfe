from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from .graph_store import Connection

Adjacency = dict[str, tuple[tuple[str, float], ...]]


def build_adjacency(waypoint_ids: Iterable[str], connections: Iterable[Connection]) -> Adjacency:
    """Neighbor lists for every waypoint, both directions of each connection.

    Waypoints with no connections map to an empty tuple rather than being absent.
    Parallel connections are kept as separate entries.
    """
    adjacency_mut: dict[str, list[tuple[str, float]]] = {node_id: [] for node_id in waypoint_ids}
    for conn in connections:
        adjacency_mut.setdefault(conn.a, []).append((conn.b, float(conn.dist)))
        adjacency_mut.setdefault(conn.b, []).append((conn.a, float(conn.dist)))
    return {k: tuple(v) for k, v in adjacency_mut.items()}


def build_edge_index(connections: Iterable[Connection]) -> dict[tuple[str, str], float]:
    # Lightest weight per unordered pair, stored under both orientations.
    index: dict[tuple[str, str], float] = {}
    for conn in connections:
        dist = float(conn.dist)
        for key in ((conn.a, conn.b), (conn.b, conn.a)):
            prev = index.get(key)
            if prev is None or dist < prev:
                index[key] = dist
    return index


def component_index(adjacency: Adjacency) -> tuple[dict[str, int], dict[int, int]]:
    """Label connected components in graph order; returns (component_by_node, component_sizes)."""
    component_by_node: dict[str, int] = {}
    component_sizes: dict[int, int] = {}
    component_idx = 0
    for node_id in adjacency:
        if node_id in component_by_node:
            continue
        component_idx += 1
        q: deque[str] = deque([node_id])
        size = 0
        while q:
            current = q.popleft()
            if current in component_by_node:
                continue
            component_by_node[current] = component_idx
            size += 1
            for nxt, _dist in adjacency.get(current, ()):
                if nxt not in component_by_node:
                    q.append(nxt)
        component_sizes[component_idx] = size
    return component_by_node, component_sizes
