"""
Primary and alternate path discovery.

The default ``BACKUP`` strategy is a heuristic: it removes both directed
edges of every primary hop and re-runs Dijkstra. It can miss a cheaper
alternate that shares some links with the primary, and it never returns
more than two paths whatever ``k`` is. ``DISJOINT`` repeats the pruning to
collect up to ``k`` link-disjoint paths. ``YEN`` gives true k-shortest
loopless paths.
"""

from enum import Enum
from itertools import islice
from typing import Optional

import networkx as nx

from ..config import DuplicatePolicy
from ..graph.builder import build_graph, remove_link_edges
from ..log import get_logger
from ..topology.model import Topology
from .annotate import PathResult, make_path_result
from .solver import shortest_path

logger = get_logger(__name__)


class PathStrategy(str, Enum):
    BACKUP = "backup"
    DISJOINT = "disjoint"
    YEN = "yen"


def k_paths(
    topology: Topology,
    source: str,
    target: str,
    k: int = 2,
    strategy: PathStrategy = PathStrategy.BACKUP,
    G: Optional[nx.DiGraph] = None,
    duplicate_policy: Optional[DuplicatePolicy] = None,
) -> list[PathResult]:
    """Find a primary path and up to ``k - 1`` alternates.

    Args:
        topology: Topology used for graph construction and annotation.
        source, target: Endpoint node ids.
        k: Maximum number of paths wanted.
        strategy: See module docstring. ``BACKUP`` caps the result at 2.
        G: Prebuilt graph for ``topology``; built fresh when omitted. It is
            never modified.
        duplicate_policy: Passed to the graph builder when ``G`` is omitted.

    Returns:
        Annotated paths, primary first. Empty if unreachable or ``k < 1``.
    """
    strategy = PathStrategy(strategy)
    if k < 1:
        return []
    if G is None:
        G = build_graph(topology, duplicate_policy)

    primary = shortest_path(G, source, target)
    if primary is None:
        return []
    if k == 1 or source == target:
        return [make_path_result(topology, primary.path, primary.cost)]

    if strategy == PathStrategy.YEN:
        found = _yen_paths(G, source, target, k)
    else:
        limit = 2 if strategy == PathStrategy.BACKUP else k
        found = _pruned_paths(G, source, target, limit, primary.path, primary.cost)

    logger.debug(
        "k_paths %s -> %s: %d path(s) (strategy=%s, k=%d)",
        source, target, len(found), strategy.value, k,
    )
    return [make_path_result(topology, path, cost) for path, cost in found]


def _pruned_paths(G, source, target, limit, primary_path, primary_cost):
    found = [(list(primary_path), primary_cost)]
    pruned = G.copy()
    while len(found) < limit:
        remove_link_edges(pruned, found[-1][0])
        alternate = shortest_path(pruned, source, target)
        if alternate is None:
            break
        found.append((list(alternate.path), alternate.cost))
    return found


def _yen_paths(G, source, target, k):
    paths = islice(nx.shortest_simple_paths(G, source, target, weight="cost"), k)
    return [(path, nx.path_weight(G, path, weight="cost")) for path in paths]
