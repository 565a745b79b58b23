"""
Single-pair shortest path (Dijkstra) over a built cost graph.

Costs are assumed non-negative. Tie-breaking between equal-cost routes is
implementation-defined; use :func:`equal_cost_paths` when all of them
matter.
"""

from dataclasses import dataclass
from heapq import heappop, heappush
from typing import Optional

import networkx as nx


@dataclass(frozen=True)
class ShortestPath:
    """Node sequence and total cost of a shortest path."""
    path: tuple[str, ...]
    cost: float

    @property
    def hops(self) -> int:
        return len(self.path) - 1


def shortest_path(G: nx.DiGraph, source: str, target: str) -> Optional[ShortestPath]:
    """Dijkstra from ``source`` to ``target``.

    Stops as soon as ``target`` is settled. Returns None when either
    endpoint is unknown or ``target`` is unreachable.
    """
    if source not in G or target not in G:
        return None
    if source == target:
        return ShortestPath((source,), 0)

    adj = G.adj
    dist: dict[str, float] = {source: 0}
    prev: dict[str, str] = {}
    settled: set[str] = set()
    heap: list[tuple[float, str]] = [(0, source)]

    while heap:
        d, node = heappop(heap)
        if node in settled:
            continue
        settled.add(node)
        if node == target:
            break

        for neighbor, attrs in adj[node].items():
            if neighbor in settled:
                continue
            alt = d + attrs["cost"]
            if neighbor not in dist or alt < dist[neighbor]:
                dist[neighbor] = alt
                prev[neighbor] = node
                heappush(heap, (alt, neighbor))

    if target not in settled:
        return None

    path = [target]
    while path[-1] != source:
        path.append(prev[path[-1]])
    path.reverse()
    return ShortestPath(tuple(path), dist[target])


def equal_cost_paths(
    G: nx.DiGraph, source: str, target: str, limit: Optional[int] = None
) -> list[list[str]]:
    """All minimum-cost paths between two nodes (ECMP set).

    Returns an empty list when no path exists.
    """
    if source not in G or target not in G:
        return []
    paths = []
    try:
        for path in nx.all_shortest_paths(G, source, target, weight="cost"):
            paths.append(path)
            if limit is not None and len(paths) >= limit:
                break
    except nx.NetworkXNoPath:
        return []
    return paths
