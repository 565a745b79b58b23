"""
Whole-topology path analytics.

Aggregates all-pairs shortest paths into country-to-country best paths,
network-wide hop/cost statistics, a critical link ranking, a redundancy
score, and per-country connectivity.
"""

from collections import Counter
from dataclasses import dataclass, field
from itertools import combinations
from typing import Optional

import numpy as np

from ..config import ENGINE_CONFIG, EngineConfig
from ..graph.builder import build_graph
from ..log import get_logger
from ..paths.all_pairs import all_pairs_shortest_paths, map_pairs, node_pairs
from ..paths.enumerate import k_paths
from ..topology.model import Topology

logger = get_logger(__name__)


@dataclass
class NodePairPath:
    source_node: str
    target_node: str
    path: list[str]
    cost: float

    @property
    def hops(self) -> int:
        return len(self.path) - 1

    def to_dict(self) -> dict:
        return {
            "source_node": self.source_node,
            "target_node": self.target_node,
            "path": self.path,
            "cost": self.cost,
            "hops": self.hops,
        }


@dataclass
class CountryPathResult:
    """Paths between every node of two countries."""
    source_country: str
    target_country: str
    paths: list[NodePairPath] = field(default_factory=list)
    best_path: Optional[NodePairPath] = None
    avg_cost: float = 0.0

    @property
    def total_paths(self) -> int:
        return len(self.paths)

    def to_dict(self) -> dict:
        return {
            "source_country": self.source_country,
            "target_country": self.target_country,
            "paths": [p.to_dict() for p in self.paths],
            "best_path": self.best_path.to_dict() if self.best_path else None,
            "avg_cost": self.avg_cost,
            "total_paths": self.total_paths,
        }


@dataclass
class NetworkStats:
    total_nodes: int = 0
    total_links: int = 0
    countries: list[str] = field(default_factory=list)
    avg_path_cost: float = 0.0
    longest_path: int = 0
    shortest_path: int = 0
    critical_links: list[str] = field(default_factory=list)
    redundancy_score: float = 0.0  # percent of pairs with an alternate path

    def to_dict(self) -> dict:
        return {
            "total_nodes": self.total_nodes,
            "total_links": self.total_links,
            "countries": self.countries,
            "avg_path_cost": self.avg_path_cost,
            "longest_path": self.longest_path,
            "shortest_path": self.shortest_path,
            "critical_links": self.critical_links,
            "redundancy_score": self.redundancy_score,
        }


@dataclass
class CountryConnectivity:
    nodes: int = 0
    connections: int = 0
    avg_utilization: float = 0.0

    def to_dict(self) -> dict:
        return {
            "nodes": self.nodes,
            "connections": self.connections,
            "avg_utilization": self.avg_utilization,
        }


@dataclass
class DeepAnalysis:
    country_paths: list[CountryPathResult] = field(default_factory=list)
    network_stats: NetworkStats = field(default_factory=NetworkStats)
    country_connectivity: dict[str, CountryConnectivity] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "country_paths": [c.to_dict() for c in self.country_paths],
            "network_stats": self.network_stats.to_dict(),
            "country_connectivity": {
                country: cc.to_dict() for country, cc in self.country_connectivity.items()
            },
        }


class NetworkAnalytics:
    """
    Deep analysis engine.

    One all-pairs shortest path batch feeds the hop statistics and the
    critical link ranking; the redundancy score runs the path enumerator
    (k=2) over the same pairs.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or ENGINE_CONFIG

    def analyze(self, topology: Topology) -> DeepAnalysis:
        G = build_graph(topology, self.config.duplicate_policy)
        pairs = node_pairs(topology.node_ids)
        logger.info(
            "Deep analysis: %d nodes, %d links, %d pairs",
            len(topology.nodes), len(topology.links), len(pairs),
        )

        all_paths = [
            NodePairPath(s, t, list(sp.path), sp.cost)
            for s, t, sp in all_pairs_shortest_paths(G, pairs, self.config.parallelism)
            if sp is not None
        ]

        stats = NetworkStats(
            total_nodes=len(topology.nodes),
            total_links=len(topology.links),
            countries=topology.countries,
            critical_links=self.critical_links(topology, all_paths),
            redundancy_score=self.redundancy_score(topology, G, pairs),
        )
        if all_paths:
            hops = [p.hops for p in all_paths]
            stats.avg_path_cost = float(np.mean([p.cost for p in all_paths]))
            stats.longest_path = max(hops)
            stats.shortest_path = min(hops)

        return DeepAnalysis(
            country_paths=self.country_paths(topology, G),
            network_stats=stats,
            country_connectivity=self.country_connectivity(topology),
        )

    def country_paths(self, topology: Topology, G=None) -> list[CountryPathResult]:
        """Best and average path between each unordered pair of countries."""
        if G is None:
            G = build_graph(topology, self.config.duplicate_policy)

        results = []
        for src_country, dst_country in combinations(topology.countries, 2):
            pairs = [
                (s.id, t.id)
                for s in topology.nodes_in(src_country)
                for t in topology.nodes_in(dst_country)
            ]
            found = [
                NodePairPath(s, t, list(sp.path), sp.cost)
                for s, t, sp in all_pairs_shortest_paths(G, pairs, self.config.parallelism)
                if sp is not None
            ]

            best = None
            for p in found:
                if best is None or p.cost < best.cost:
                    best = p

            results.append(CountryPathResult(
                source_country=src_country,
                target_country=dst_country,
                paths=found,
                best_path=best,
                avg_cost=float(np.mean([p.cost for p in found])) if found else 0.0,
            ))
        return results

    def critical_links(self, topology: Topology, paths: list[NodePairPath]) -> list[str]:
        """Links used by the most pair paths, ties in first-seen order."""
        usage: Counter = Counter()
        for p in paths:
            for u, v in zip(p.path, p.path[1:]):
                link = topology.find_link(u, v)
                if link is not None:
                    usage[link.id] += 1
        return [link_id for link_id, _ in usage.most_common(self.config.critical_link_count)]

    def redundancy_score(self, topology: Topology, G, pairs) -> float:
        """Percent of node pairs for which a second path exists."""
        if not pairs:
            return 0.0
        redundant = map_pairs(
            lambda s, t: len(k_paths(topology, s, t, k=2, G=G)) > 1,
            pairs,
            self.config.parallelism,
        )
        return sum(redundant) / len(pairs) * 100

    @staticmethod
    def country_connectivity(topology: Topology) -> dict[str, CountryConnectivity]:
        """Per country: node count, touching links, mean link utilization."""
        result = {}
        for country in topology.countries:
            node_ids = {n.id for n in topology.nodes_in(country)}
            links = [
                l for l in topology.links
                if l.source in node_ids or l.target in node_ids
            ]
            utilizations = [l.utilization or 0 for l in links]
            result[country] = CountryConnectivity(
                nodes=len(node_ids),
                connections=len(links),
                avg_utilization=float(np.mean(utilizations)) if utilizations else 0.0,
            )
        return result


def deep_analysis(topology: Topology, parallelism: Optional[int] = None) -> DeepAnalysis:
    """Convenience: deep analysis with the default configuration."""
    config = ENGINE_CONFIG
    if parallelism is not None:
        config = config.copy(parallelism=parallelism)
    return NetworkAnalytics(config).analyze(topology)
