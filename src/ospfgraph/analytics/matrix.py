"""Source x target path matrix for tabular views."""

import math
from typing import Optional

from ..config import DuplicatePolicy
from ..graph.builder import build_graph
from ..paths.enumerate import k_paths
from ..topology.model import Topology


def path_matrix(
    topology: Topology,
    k: int = 2,
    duplicate_policy: Optional[DuplicatePolicy] = None,
) -> dict[str, dict[str, dict]]:
    """Best path summary for every ordered node pair.

    Diagonal cells cost 0; unreachable cells cost ``math.inf`` with an empty
    path. ``path_count`` is the number of paths the enumerator found.
    """
    G = build_graph(topology, duplicate_policy)
    matrix: dict[str, dict[str, dict]] = {}

    for source in topology.node_ids:
        row = matrix.setdefault(source, {})
        for target in topology.node_ids:
            if source == target:
                row[target] = _cell([source], 0, 0, 0, 1, None)
                continue

            paths = k_paths(topology, source, target, k=k, G=G)
            if not paths:
                row[target] = _cell([], math.inf, math.inf, math.inf, 0, None)
                continue

            best = paths[0]
            row[target] = _cell(
                best.path, best.cost, best.forward_cost, best.reverse_cost,
                len(paths), best.min_capacity,
            )

    return matrix


def _cell(path, cost, forward_cost, reverse_cost, path_count, min_capacity) -> dict:
    return {
        "path": list(path),
        "cost": cost,
        "forward_cost": forward_cost,
        "reverse_cost": reverse_cost,
        "hops": max(len(path) - 1, 0),
        "path_count": path_count,
        "min_capacity": min_capacity,
    }
