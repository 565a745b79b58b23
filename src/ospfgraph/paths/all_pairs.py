"""
Batch evaluation over node pairs.

Whole-topology analyses run one Dijkstra per node pair. Pairs are
independent, so a batch can be spread over worker threads without changing
single-pair results; output order always follows input order.
"""

from concurrent.futures import ThreadPoolExecutor
from itertools import combinations
from typing import Callable, Iterable, Optional, Sequence, TypeVar

import networkx as nx

from .solver import ShortestPath, shortest_path

T = TypeVar("T")

Pair = tuple[str, str]


def node_pairs(node_ids: Sequence[str]) -> list[Pair]:
    """Every unordered pair of distinct nodes, in input order."""
    return list(combinations(node_ids, 2))


def map_pairs(
    fn: Callable[[str, str], T],
    pairs: Iterable[Pair],
    parallelism: int = 1,
) -> list[T]:
    """Apply ``fn(source, target)`` to each pair.

    Args:
        fn: Pure per-pair function.
        pairs: Pairs to evaluate.
        parallelism: Number of worker threads; 1 runs sequentially.
    """
    pairs = list(pairs)
    if parallelism <= 1 or len(pairs) < 2:
        return [fn(s, t) for s, t in pairs]

    with ThreadPoolExecutor(max_workers=parallelism) as executor:
        return list(executor.map(lambda pair: fn(*pair), pairs))


def all_pairs_shortest_paths(
    G: nx.DiGraph,
    pairs: Iterable[Pair],
    parallelism: int = 1,
) -> list[tuple[str, str, Optional[ShortestPath]]]:
    """Shortest path for each pair; ``None`` where unreachable."""
    pairs = list(pairs)
    results = map_pairs(lambda s, t: shortest_path(G, s, t), pairs, parallelism)
    return [(s, t, result) for (s, t), result in zip(pairs, results)]
