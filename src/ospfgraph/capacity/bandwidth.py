"""
Bandwidth-aware path ranking for capacity planning.

Paths are found by a Dijkstra variant over a capacity-annotated graph in
which links lacking the required headroom are removed. Further candidates
come from excluding every link of previously accepted paths, so the set is
diverse but not guaranteed to be the k best. Candidates are ranked by a
blend of normalized OSPF cost and normalized bandwidth deficit.
"""

from dataclasses import dataclass, field
from heapq import heappop, heappush
from typing import Optional

import networkx as nx

from ..config import ENGINE_CONFIG, EngineConfig
from ..graph.builder import build_capacity_graph
from ..log import get_logger
from ..topology.model import Topology

logger = get_logger(__name__)


@dataclass
class BandwidthHop:
    from_node: str
    to_node: str
    link_id: str
    forward_cost: float
    reverse_cost: float
    capacity: float
    utilization: float
    available_bandwidth: float

    def to_dict(self) -> dict:
        return {
            "from": self.from_node,
            "to": self.to_node,
            "link_id": self.link_id,
            "forward_cost": self.forward_cost,
            "reverse_cost": self.reverse_cost,
            "capacity": self.capacity,
            "utilization": self.utilization,
            "available_bandwidth": self.available_bandwidth,
        }


@dataclass
class BandwidthAwarePath:
    """A candidate path with its bandwidth profile and ranking score."""
    path: list[str]
    ospf_cost: float
    forward_cost: float
    reverse_cost: float
    hops: int
    min_capacity: float
    available_bandwidth: float
    bottleneck_link: Optional[str]
    score: float = 0.0  # lower is better
    hop_details: list[BandwidthHop] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "ospf_cost": self.ospf_cost,
            "forward_cost": self.forward_cost,
            "reverse_cost": self.reverse_cost,
            "hops": self.hops,
            "min_capacity": self.min_capacity,
            "available_bandwidth": self.available_bandwidth,
            "bottleneck_link": self.bottleneck_link,
            "score": self.score,
            "hop_details": [h.to_dict() for h in self.hop_details],
        }


@dataclass(frozen=True)
class NormalizationBounds:
    """Scale factors for scoring, computed per ranking call."""
    max_link_cost: float
    max_capacity: float

    @classmethod
    def from_topology(cls, topology: Topology, default_capacity: float) -> "NormalizationBounds":
        if not topology.links:
            return cls(0.0, 0.0)
        return cls(
            max_link_cost=max(link.fwd for link in topology.links),
            max_capacity=max(link.capacity or default_capacity for link in topology.links),
        )


def score_path(
    cost: float,
    node_count: int,
    available_bandwidth: float,
    bounds: NormalizationBounds,
    cost_weight: float,
) -> float:
    """Weighted blend of normalized cost and bandwidth deficit.

    Cost is normalized by the worst-case cost of a path with ``node_count``
    nodes, bandwidth by the largest link capacity. A zero bound contributes
    a neutral 0 term.
    """
    max_cost = bounds.max_link_cost * node_count
    normalized_cost = cost / max_cost if max_cost > 0 else 0.0
    bandwidth_deficit = (
        1 - available_bandwidth / bounds.max_capacity if bounds.max_capacity > 0 else 0.0
    )
    return cost_weight * normalized_cost + (1 - cost_weight) * bandwidth_deficit


class BandwidthRanker:
    """Rank paths by cost and available bandwidth."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or ENGINE_CONFIG

    def rank_paths(
        self,
        topology: Topology,
        source: str,
        target: str,
        required_bandwidth: float = 0,
        cost_weight: float = 0.5,
        k: int = 5,
    ) -> list[BandwidthAwarePath]:
        """Up to ``k`` diverse paths meeting ``required_bandwidth``, best score first.

        Args:
            cost_weight: 0-1; higher favors cost over bandwidth.

        Raises:
            ValueError: ``cost_weight`` outside [0, 1].
        """
        if not 0 <= cost_weight <= 1:
            raise ValueError(f"cost_weight must be within [0, 1], got {cost_weight}")
        if k < 1 or source == target:
            return []

        G = build_capacity_graph(
            topology,
            required_bandwidth=required_bandwidth,
            default_capacity=self.config.default_capacity,
            duplicate_policy=self.config.duplicate_policy,
        )
        if source not in G or target not in G:
            return []

        bounds = NormalizationBounds.from_topology(topology, self.config.default_capacity)
        excluded: set[str] = set()
        results = []

        for _ in range(k):
            found = bandwidth_dijkstra(G, source, target, excluded)
            if found is None:
                break
            path, cost, available = found
            candidate = self._describe(topology, G, path, cost, available)
            candidate.score = score_path(cost, len(path), available, bounds, cost_weight)
            results.append(candidate)
            excluded.update(hop.link_id for hop in candidate.hop_details)

        results.sort(key=lambda p: p.score)
        logger.debug(
            "rank_paths %s -> %s: %d candidate(s) at >= %s Mbps",
            source, target, len(results), required_bandwidth,
        )
        return results

    @staticmethod
    def _describe(topology, G, path, cost, available) -> BandwidthAwarePath:
        hops = []
        bottleneck_link = None
        bottleneck_bw = None

        for u, v in zip(path, path[1:]):
            edge = G.edges[u, v]
            link = topology.link(edge["link_id"])
            hop = BandwidthHop(
                from_node=u,
                to_node=v,
                link_id=edge["link_id"],
                forward_cost=link.cost_from(u) if link else edge["cost"],
                reverse_cost=link.cost_towards(u) if link else edge["cost"],
                capacity=edge["capacity"],
                utilization=edge["utilization"],
                available_bandwidth=edge["available"],
            )
            hops.append(hop)
            if bottleneck_bw is None or hop.available_bandwidth < bottleneck_bw:
                bottleneck_bw = hop.available_bandwidth
                bottleneck_link = hop.link_id

        return BandwidthAwarePath(
            path=list(path),
            ospf_cost=cost,
            forward_cost=sum(h.forward_cost for h in hops),
            reverse_cost=sum(h.reverse_cost for h in hops),
            hops=len(path) - 1,
            min_capacity=min(h.capacity for h in hops),
            available_bandwidth=available,
            bottleneck_link=bottleneck_link,
            hop_details=hops,
        )


def bandwidth_dijkstra(
    G: nx.DiGraph,
    source: str,
    target: str,
    excluded_links: Optional[set[str]] = None,
) -> Optional[tuple[list[str], float, float]]:
    """Least-cost path that also reports its bottleneck bandwidth.

    The bandwidth tracked for each node is the minimum available bandwidth
    along its current best-cost path, so the value returned belongs to the
    chosen route.

    Returns:
        ``(path, cost, available_bandwidth)`` or None if unreachable.
    """
    excluded_links = excluded_links or set()
    adj = G.adj
    dist: dict[str, float] = {source: 0}
    min_bw: dict[str, float] = {}
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

        for neighbor, edge in adj[node].items():
            if neighbor in settled or edge["link_id"] in excluded_links:
                continue
            alt = d + edge["cost"]
            if neighbor not in dist or alt < dist[neighbor]:
                dist[neighbor] = alt
                prev[neighbor] = node
                min_bw[neighbor] = min(min_bw.get(node, edge["available"]), edge["available"])
                heappush(heap, (alt, neighbor))

    if target not in settled or target == source:
        return None

    path = [target]
    while path[-1] != source:
        path.append(prev[path[-1]])
    path.reverse()
    return path, dist[target], min_bw[target]


def rank_paths(
    topology: Topology,
    source: str,
    target: str,
    required_bandwidth: float = 0,
    cost_weight: float = 0.5,
    k: int = 5,
) -> list[BandwidthAwarePath]:
    """Convenience: bandwidth-aware ranking with the default configuration."""
    return BandwidthRanker().rank_paths(
        topology, source, target, required_bandwidth, cost_weight, k
    )
