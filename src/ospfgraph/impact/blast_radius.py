"""
Impact analysis for link cost changes.

Calculates the blast radius of a single link's cost change by comparing
every node pair's shortest path before and after, simulates the removal
of a set of links, and ranks links by the impact of taking them down.
"""

from dataclasses import dataclass, field
from typing import Optional

import networkx as nx
import numpy as np

from ..config import ENGINE_CONFIG, EngineConfig
from ..graph.builder import build_graph
from ..log import get_logger
from ..paths.all_pairs import map_pairs, node_pairs
from ..paths.solver import shortest_path
from ..topology.model import Topology

logger = get_logger(__name__)


@dataclass
class AffectedPath:
    """A node pair whose best path or its cost changed."""
    source: str
    target: str
    old_cost: float
    new_cost: float
    path_changed: bool
    old_path: list[str] = field(default_factory=list)
    new_path: list[str] = field(default_factory=list)

    @property
    def cost_delta(self) -> float:
        return self.new_cost - self.old_cost

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "target": self.target,
            "old_cost": self.old_cost,
            "new_cost": self.new_cost,
            "cost_delta": self.cost_delta,
            "path_changed": self.path_changed,
            "old_path": self.old_path,
            "new_path": self.new_path,
        }


@dataclass
class BlastRadiusResult:
    """Impact of changing one link's cost."""
    link_id: str
    new_cost: float
    affected_nodes: set[str] = field(default_factory=set)
    affected_paths: list[AffectedPath] = field(default_factory=list)
    total_nodes: int = 0
    severity: str = "low"  # low, medium, high, critical

    @property
    def impact_pct(self) -> float:
        if self.total_nodes == 0:
            return 0.0
        return len(self.affected_nodes) / self.total_nodes * 100

    @property
    def path_changes(self) -> int:
        return sum(1 for p in self.affected_paths if p.path_changed)

    def to_dict(self) -> dict:
        return {
            "link_id": self.link_id,
            "new_cost": self.new_cost,
            "severity": self.severity,
            "impact_pct": self.impact_pct,
            "affected_nodes": sorted(self.affected_nodes),
            "affected_paths": [p.to_dict() for p in self.affected_paths],
            "path_changes": self.path_changes,
            "total_nodes": self.total_nodes,
        }


@dataclass
class LinkImpact:
    """Link-down impact summary for one link."""
    link_id: str
    severity: str
    affected_nodes: int
    affected_pairs: int
    rerouted_pairs: int
    broken_pairs: int = 0  # pairs disconnected when the link is removed
    is_single_point_of_failure: bool = False

    def to_dict(self) -> dict:
        return {
            "link_id": self.link_id,
            "severity": self.severity,
            "affected_nodes": self.affected_nodes,
            "affected_pairs": self.affected_pairs,
            "rerouted_pairs": self.rerouted_pairs,
            "broken_pairs": self.broken_pairs,
            "is_single_point_of_failure": self.is_single_point_of_failure,
        }


@dataclass
class FailureSimulation:
    """Outcome of removing a set of links at once."""
    failed_links: list[str] = field(default_factory=list)
    unknown_links: list[str] = field(default_factory=list)
    unreachable_pairs: list[tuple[str, str]] = field(default_factory=list)
    rerouted_pairs: list[tuple[str, str]] = field(default_factory=list)
    total_pairs: int = 0

    @property
    def affected_paths(self) -> int:
        return len(self.unreachable_pairs) + len(self.rerouted_pairs)

    @property
    def reachability_score(self) -> float:
        """Percent of node pairs not cut off by the failure."""
        if self.total_pairs == 0:
            return 100.0
        return (self.total_pairs - len(self.unreachable_pairs)) / self.total_pairs * 100

    def to_dict(self) -> dict:
        return {
            "failed_links": self.failed_links,
            "unknown_links": self.unknown_links,
            "unreachable_pairs": [
                {"source": s, "target": t} for s, t in self.unreachable_pairs
            ],
            "rerouted_pairs": [
                {"source": s, "target": t} for s, t in self.rerouted_pairs
            ],
            "affected_paths": self.affected_paths,
            "total_pairs": self.total_pairs,
            "reachability_score": self.reachability_score,
        }


@dataclass
class ImpactReport:
    """Link-down impact for every link in a topology."""
    link_impacts: list[LinkImpact] = field(default_factory=list)
    overall_resilience: float = 0.0
    summary: dict = field(default_factory=dict)


class ImpactAnalyzer:
    """
    Blast radius engine.

    Provides:
      - Blast radius of a single link cost change
      - Link-down simulation at the OSPF maximum cost
      - Simultaneous removal of several links
      - Whole-topology link failure ranking
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or ENGINE_CONFIG

    def blast_radius(
        self, topology: Topology, link_id: str, new_cost: float
    ) -> BlastRadiusResult:
        """Compare all-pairs shortest paths before/after a link cost change.

        Only the link's base ``cost`` changes; forward/reverse overrides are
        kept. Pairs unreachable in either graph are not reported. An unknown
        ``link_id`` yields an empty result.
        """
        if topology.link(link_id) is None:
            logger.warning("Blast radius requested for unknown link %s", link_id)
            return BlastRadiusResult(
                link_id=link_id, new_cost=new_cost, total_nodes=len(topology.nodes)
            )
        return self._compare(
            topology, topology.with_link_cost(link_id, new_cost), link_id, new_cost
        )

    def simulate_link_down(self, topology: Topology, link_id: str) -> BlastRadiusResult:
        """Blast radius with the link at the link-down cost in both directions."""
        down_cost = self.config.link_down_cost
        if topology.link(link_id) is None:
            logger.warning("Link-down requested for unknown link %s", link_id)
            return BlastRadiusResult(
                link_id=link_id, new_cost=down_cost, total_nodes=len(topology.nodes)
            )
        return self._compare(
            topology, topology.with_link_down(link_id, down_cost), link_id, down_cost
        )

    def _compare(
        self, topology: Topology, modified: Topology, link_id: str, new_cost: float
    ) -> BlastRadiusResult:
        result = BlastRadiusResult(
            link_id=link_id, new_cost=new_cost, total_nodes=len(topology.nodes)
        )
        policy = self.config.duplicate_policy
        original_graph = build_graph(topology, policy)
        modified_graph = build_graph(modified, policy)

        def compare(source, target) -> Optional[AffectedPath]:
            old = shortest_path(original_graph, source, target)
            new = shortest_path(modified_graph, source, target)
            if old is None or new is None:
                return None
            path_changed = old.path != new.path
            if not path_changed and old.cost == new.cost:
                return None
            return AffectedPath(
                source=source,
                target=target,
                old_cost=old.cost,
                new_cost=new.cost,
                path_changed=path_changed,
                old_path=list(old.path),
                new_path=list(new.path),
            )

        pairs = node_pairs(topology.node_ids)
        for affected in map_pairs(compare, pairs, self.config.parallelism):
            if affected is None:
                continue
            result.affected_paths.append(affected)
            result.affected_nodes.update(affected.new_path)

        result.severity = self._severity(result.impact_pct)
        logger.debug(
            "Blast radius %s -> %s: %d/%d pairs affected, %d nodes",
            link_id, new_cost, len(result.affected_paths), len(pairs),
            len(result.affected_nodes),
        )
        return result

    def simulate_failures(self, topology: Topology, link_ids) -> FailureSimulation:
        """Remove a set of links and report lost and rerouted node pairs.

        Unknown link ids are ignored and listed in ``unknown_links``.
        """
        requested = list(dict.fromkeys(link_ids))
        failed = [lid for lid in requested if topology.link(lid) is not None]
        unknown = [lid for lid in requested if topology.link(lid) is None]
        if unknown:
            logger.warning("Ignoring unknown link(s) in failure set: %s", ", ".join(unknown))

        policy = self.config.duplicate_policy
        original_graph = build_graph(topology, policy)
        failed_graph = build_graph(topology.without_links(failed), policy)

        def compare(source, target) -> Optional[str]:
            old = shortest_path(original_graph, source, target)
            if old is None:
                return None
            new = shortest_path(failed_graph, source, target)
            if new is None:
                return "unreachable"
            if new.path != old.path:
                return "rerouted"
            return None

        pairs = node_pairs(topology.node_ids)
        simulation = FailureSimulation(
            failed_links=failed, unknown_links=unknown, total_pairs=len(pairs)
        )
        outcomes = map_pairs(compare, pairs, self.config.parallelism)
        for pair, outcome in zip(pairs, outcomes):
            if outcome == "unreachable":
                simulation.unreachable_pairs.append(pair)
            elif outcome == "rerouted":
                simulation.rerouted_pairs.append(pair)

        logger.info(
            "Failure of %d link(s): %d pairs unreachable, %d rerouted",
            len(failed), len(simulation.unreachable_pairs), len(simulation.rerouted_pairs),
        )
        return simulation

    @staticmethod
    def broken_pair_counts(topology: Topology) -> dict[str, int]:
        """Node pairs disconnected by each single link removal.

        Only links that disconnect at least one pair are listed.
        """
        baseline = _connected_pair_count(topology)
        counts = {}
        for link in topology.links:
            broken = baseline - _connected_pair_count(topology.without_links([link.id]))
            if broken > 0:
                counts[link.id] = broken
        return counts

    def analyze(self, topology: Topology) -> ImpactReport:
        """Rank every link by the impact of taking it down."""
        report = ImpactReport()
        logger.info("Running link-down impact for %d links", len(topology.links))
        broken = self.broken_pair_counts(topology)

        for link in topology.links:
            br = self.simulate_link_down(topology, link.id)
            report.link_impacts.append(LinkImpact(
                link_id=link.id,
                severity=br.severity,
                affected_nodes=len(br.affected_nodes),
                affected_pairs=len(br.affected_paths),
                rerouted_pairs=br.path_changes,
                broken_pairs=broken.get(link.id, 0),
                is_single_point_of_failure=link.id in broken,
            ))

        report.link_impacts.sort(
            key=lambda li: (li.affected_pairs, li.affected_nodes), reverse=True
        )

        spof_links = [li.link_id for li in report.link_impacts if li.is_single_point_of_failure]
        report.overall_resilience = self.compute_resilience(topology, spof_links)
        report.summary = {
            "total_nodes": len(topology.nodes),
            "total_links": len(topology.links),
            "single_points_of_failure": spof_links,
            "critical_links": [
                li.link_id for li in report.link_impacts
                if li.severity in ("high", "critical")
            ],
            "overall_resilience": report.overall_resilience,
            "resilience_grade": self._grade(report.overall_resilience),
        }
        return report

    @staticmethod
    def compute_resilience(topology: Topology, spof_links: list[str]) -> float:
        """
        Overall resilience score (0.0-1.0).

        Mean of the share of links that are not single points of failure
        and the average node degree scaled so that 4+ counts as fully meshed.
        """
        if len(topology.nodes) < 2:
            return 0.0

        degree = {n: 0 for n in topology.node_ids}
        for link in topology.links:
            degree[link.source] = degree.get(link.source, 0) + 1
            degree[link.target] = degree.get(link.target, 0) + 1

        scores = [
            1.0 - len(spof_links) / max(len(topology.links), 1),
            min(np.mean(list(degree.values())) / 4.0, 1.0),
        ]
        return float(np.mean(scores))

    @staticmethod
    def _severity(impact_pct: float) -> str:
        if impact_pct > 75:
            return "critical"
        elif impact_pct > 50:
            return "high"
        elif impact_pct > 25:
            return "medium"
        return "low"

    @staticmethod
    def _grade(score: float) -> str:
        if score >= 0.9:
            return "A"
        elif score >= 0.8:
            return "B"
        elif score >= 0.6:
            return "C"
        elif score >= 0.4:
            return "D"
        return "F"


def blast_radius(
    topology: Topology,
    link_id: str,
    new_cost: float,
    parallelism: Optional[int] = None,
) -> BlastRadiusResult:
    """Convenience: blast radius with the default configuration."""
    config = ENGINE_CONFIG
    if parallelism is not None:
        config = config.copy(parallelism=parallelism)
    return ImpactAnalyzer(config).blast_radius(topology, link_id, new_cost)


def simulate_failures(
    topology: Topology,
    link_ids,
    parallelism: Optional[int] = None,
) -> FailureSimulation:
    """Convenience: multi-link failure with the default configuration."""
    config = ENGINE_CONFIG
    if parallelism is not None:
        config = config.copy(parallelism=parallelism)
    return ImpactAnalyzer(config).simulate_failures(topology, link_ids)


def _connected_pair_count(topology: Topology) -> int:
    G = nx.Graph()
    G.add_nodes_from(topology.node_ids)
    G.add_edges_from((link.source, link.target) for link in topology.links)
    return sum(len(c) * (len(c) - 1) // 2 for c in nx.connected_components(G))
