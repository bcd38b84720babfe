from __future__ import annotations

import heapq
from dataclasses import dataclass
from math import inf

from .adjacency import Adjacency


@dataclass(frozen=True)
class PathResult:
    nodes: tuple[str, ...]
    cost: float


@dataclass(frozen=True)
class ShortestPathTree:
    start: str
    distances: dict[str, float]
    predecessors: dict[str, str | None]
    settled_order: tuple[str, ...]

    def distance_to(self, goal: str) -> float:
        return self.distances.get(goal, inf)

    def path_to(self, goal: str) -> PathResult | None:
        cost = self.distance_to(goal)
        if cost == inf:
            return None
        nodes: list[str] = []
        current: str | None = goal
        while current is not None:
            nodes.append(current)
            current = self.predecessors.get(current)
        nodes.reverse()
        return PathResult(nodes=tuple(nodes), cost=cost)


def shortest_path_tree(*, adjacency: Adjacency, start: str) -> ShortestPathTree:
    """Label-setting single-source shortest paths over positive weights.

    Waypoints are settled in ascending ``(distance, id)`` order, so among equal
    tentative distances the lexicographically lowest id is settled first.
    Relaxation is strict: the first predecessor to reach a distance keeps it.
    Unreachable waypoints keep an infinite distance and no predecessor.
    """
    if start not in adjacency:
        raise ValueError(f"start {start!r} not in adjacency")

    distances: dict[str, float] = {node_id: inf for node_id in adjacency}
    predecessors: dict[str, str | None] = {node_id: None for node_id in adjacency}
    distances[start] = 0.0
    visited: set[str] = set()
    settled: list[str] = []
    heap: list[tuple[float, str]] = [(0.0, start)]

    while heap:
        dist, node = heapq.heappop(heap)
        if node in visited:
            continue
        visited.add(node)
        settled.append(node)
        for nxt, edge_cost in adjacency.get(node, ()):
            if nxt in visited:
                continue
            alt = dist + float(edge_cost)
            if alt < distances.get(nxt, inf):
                distances[nxt] = alt
                predecessors[nxt] = node
                heapq.heappush(heap, (alt, nxt))

    return ShortestPathTree(
        start=start,
        distances=distances,
        predecessors=predecessors,
        settled_order=tuple(settled),
    )


def shortest_path(*, adjacency: Adjacency, start: str, goal: str) -> PathResult | None:
    return shortest_path_tree(adjacency=adjacency, start=start).path_to(goal)
