"""
Directed cost graph construction.

Each link contributes two directed edges: source -> target at the forward
cost and target -> source at the reverse cost. Edges carry ``cost`` and
``link_id`` attributes.
"""

from typing import Optional

import networkx as nx

from ..config import ENGINE_CONFIG, DuplicatePolicy
from ..errors import DuplicateLinkError
from ..log import get_logger
from ..topology.model import Topology

logger = get_logger(__name__)


def build_graph(
    topology: Topology,
    duplicate_policy: Optional[DuplicatePolicy] = None,
) -> nx.DiGraph:
    """Build a fresh directed graph from a topology.

    Args:
        topology: Source topology; never modified.
        duplicate_policy: Resolution when two links define the same ordered
            pair. Defaults to ``ENGINE_CONFIG.duplicate_policy``.

    Raises:
        DuplicateLinkError: under ``DuplicatePolicy.REJECT``.
    """
    policy = DuplicatePolicy(duplicate_policy or ENGINE_CONFIG.duplicate_policy)

    G = nx.DiGraph()
    G.add_nodes_from(topology.node_ids)

    for link in topology.links:
        _add_edge(G, link.source, link.target, link.fwd, link.id, policy)
        _add_edge(G, link.target, link.source, link.rev, link.id, policy)

    logger.debug(
        "Built graph: %d nodes, %d directed edges (policy=%s)",
        G.number_of_nodes(), G.number_of_edges(), policy.value,
    )
    return G


def build_capacity_graph(
    topology: Topology,
    required_bandwidth: float = 0,
    default_capacity: Optional[float] = None,
    duplicate_policy: Optional[DuplicatePolicy] = None,
) -> nx.DiGraph:
    """Directed graph whose edges also carry capacity and utilization.

    Links without a capacity are assumed to have ``default_capacity``; links
    without a utilization are idle. Links whose available bandwidth is below
    ``required_bandwidth`` are left out entirely.
    """
    policy = DuplicatePolicy(duplicate_policy or ENGINE_CONFIG.duplicate_policy)
    if default_capacity is None:
        default_capacity = ENGINE_CONFIG.default_capacity

    G = nx.DiGraph()
    G.add_nodes_from(topology.node_ids)

    excluded = 0
    for link in topology.links:
        capacity = link.capacity or default_capacity
        utilization = link.utilization or 0
        available = capacity * (1 - utilization / 100)
        if required_bandwidth > 0 and available < required_bandwidth:
            excluded += 1
            continue

        attrs = {"capacity": capacity, "utilization": utilization, "available": available}
        _add_edge(G, link.source, link.target, link.fwd, link.id, policy, **attrs)
        _add_edge(G, link.target, link.source, link.rev, link.id, policy, **attrs)

    logger.debug(
        "Built capacity graph: %d directed edges, %d links below %s Mbps",
        G.number_of_edges(), excluded, required_bandwidth,
    )
    return G


def _add_edge(
    G: nx.DiGraph,
    u: str,
    v: str,
    cost: float,
    link_id: str,
    policy: DuplicatePolicy,
    **attrs,
):
    if G.has_edge(u, v):
        existing = G.edges[u, v]
        if policy == DuplicatePolicy.REJECT:
            raise DuplicateLinkError(u, v, existing["link_id"], link_id)
        if policy == DuplicatePolicy.MIN and existing["cost"] <= cost:
            return
    G.add_edge(u, v, cost=cost, link_id=link_id, **attrs)


def adjacency(G: nx.DiGraph) -> dict[str, dict[str, float]]:
    """Plain ``node -> {neighbor: cost}`` mapping of a built graph."""
    return {
        u: {v: data["cost"] for v, data in G.adj[u].items()}
        for u in G.nodes()
    }


def remove_link_edges(G: nx.DiGraph, path: list[str]):
    """Remove both directed edges of every hop of ``path`` (in place)."""
    for u, v in zip(path, path[1:]):
        if G.has_edge(u, v):
            G.remove_edge(u, v)
        if G.has_edge(v, u):
            G.remove_edge(v, u)
