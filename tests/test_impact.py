"""Tests for blast radius and link impact analysis."""

import pytest

from ospfgraph.config import LINK_DOWN_COST, EngineConfig
from ospfgraph.impact.asymmetry import asymmetry_summary, find_asymmetric_links
from ospfgraph.impact.blast_radius import ImpactAnalyzer, blast_radius, simulate_failures
from ospfgraph.topology.model import Link, Node, Topology


def _triangle():
    return Topology(
        nodes=[Node("A"), Node("B"), Node("C")],
        links=[
            Link("ab", "A", "B", cost=10),
            Link("bc", "B", "C", cost=10),
            Link("ac", "A", "C", cost=100),
        ],
    )


def _two_halves():
    # Two triangles joined only by the "bridge" link between L2 and R1
    nodes = [Node(n) for n in ("L1", "L2", "L3", "R1", "R2", "R3")]
    links = [
        Link("l12", "L1", "L2", cost=1),
        Link("l23", "L2", "L3", cost=1),
        Link("l13", "L1", "L3", cost=1),
        Link("r12", "R1", "R2", cost=1),
        Link("r23", "R2", "R3", cost=1),
        Link("r13", "R1", "R3", cost=1),
        Link("bridge", "L2", "R1", cost=5),
    ]
    return Topology(nodes=nodes, links=links)


class TestBlastRadius:
    def test_unchanged_cost_has_no_impact(self):
        result = blast_radius(_triangle(), "ab", 10)
        assert result.affected_paths == []
        assert result.affected_nodes == set()
        assert result.severity == "low"

    def test_link_down_reroutes(self):
        result = blast_radius(_triangle(), "ab", LINK_DOWN_COST)
        by_pair = {(p.source, p.target): p for p in result.affected_paths}

        ac = by_pair[("A", "C")]
        assert ac.old_cost == 20
        assert ac.new_cost == 100
        assert ac.path_changed
        assert ac.old_path == ["A", "B", "C"]
        assert ac.new_path == ["A", "C"]

        assert ("B", "C") not in by_pair

    def test_affected_nodes_from_new_paths(self):
        result = blast_radius(_triangle(), "ab", LINK_DOWN_COST)
        # A->B now goes A->C->B
        assert result.affected_nodes == {"A", "B", "C"}

    def test_cost_only_change(self):
        result = blast_radius(_triangle(), "bc", 15)
        by_pair = {(p.source, p.target): p for p in result.affected_paths}
        assert not by_pair[("B", "C")].path_changed
        assert by_pair[("B", "C")].cost_delta == 5
        assert by_pair[("A", "C")].new_cost == 25

    def test_bridge_down_affects_every_cross_pair(self):
        topo = _two_halves()
        result = blast_radius(topo, "bridge", LINK_DOWN_COST)
        left = {"L1", "L2", "L3"}
        right = {"R1", "R2", "R3"}

        affected = {frozenset((p.source, p.target)) for p in result.affected_paths}
        cross = {frozenset((l, r)) for l in left for r in right}
        assert affected == cross
        assert {"L2", "R1"} <= result.affected_nodes
        assert all(p.new_cost >= LINK_DOWN_COST for p in result.affected_paths)

    def test_unknown_link(self):
        result = blast_radius(_triangle(), "missing", 5)
        assert result.affected_paths == []
        assert result.total_nodes == 3

    def test_topology_not_mutated(self):
        topo = _triangle()
        blast_radius(topo, "ab", LINK_DOWN_COST)
        assert topo.link("ab").cost == 10

    def test_parallel_matches_sequential(self):
        topo = _two_halves()
        seq = blast_radius(topo, "bridge", 50)
        par = blast_radius(topo, "bridge", 50, parallelism=4)
        assert [p.to_dict() for p in seq.affected_paths] == [
            p.to_dict() for p in par.affected_paths
        ]
        assert seq.affected_nodes == par.affected_nodes

    def test_severity(self):
        result = blast_radius(_triangle(), "ab", LINK_DOWN_COST)
        assert result.impact_pct == 100
        assert result.severity == "critical"

    def test_simulate_link_down(self):
        analyzer = ImpactAnalyzer(EngineConfig(link_down_cost=1000))
        result = analyzer.simulate_link_down(_triangle(), "ab")
        assert result.new_cost == 1000

    def test_to_dict(self):
        data = blast_radius(_triangle(), "ab", LINK_DOWN_COST).to_dict()
        assert data["affected_nodes"] == ["A", "B", "C"]
        assert data["path_changes"] == 2

    def test_unchanged_cost_on_asymmetric_link(self):
        # Y listed first so pairs are walked against the link's direction
        topo = Topology(
            nodes=[Node("Y"), Node("X"), Node("Z")],
            links=[
                Link("xy", "X", "Y", cost=5, forward_cost=5, reverse_cost=9),
                Link("yz", "Y", "Z", cost=1),
                Link("xz", "X", "Z", cost=7),
            ],
        )
        link = topo.link("xy")
        result = blast_radius(topo, "xy", link.cost)
        assert result.affected_paths == []
        assert result.affected_nodes == set()

    def test_link_down_covers_both_directions(self):
        topo = Topology(
            nodes=[Node("Y"), Node("X"), Node("Z")],
            links=[
                Link("xy", "X", "Y", cost=5, forward_cost=5, reverse_cost=9),
                Link("yz", "Y", "Z", cost=1),
                Link("xz", "X", "Z", cost=20),
            ],
        )
        result = ImpactAnalyzer(EngineConfig(link_down_cost=1000)).simulate_link_down(topo, "xy")
        by_pair = {(p.source, p.target): p for p in result.affected_paths}
        yx = by_pair[("Y", "X")]
        assert yx.old_path == ["Y", "X"]
        assert yx.old_cost == 9
        assert yx.new_path == ["Y", "Z", "X"]
        assert yx.new_cost == 21


class TestImpactAnalyzer:
    def test_bridge_is_spof(self):
        report = ImpactAnalyzer().analyze(_two_halves())
        spof = report.summary["single_points_of_failure"]
        assert spof == ["bridge"]

    def test_ranked_by_affected_pairs(self):
        report = ImpactAnalyzer().analyze(_two_halves())
        assert report.link_impacts[0].link_id == "bridge"
        assert report.link_impacts[0].affected_pairs == 9

    def test_resilience(self):
        report = ImpactAnalyzer().analyze(_two_halves())
        assert 0.0 <= report.overall_resilience <= 1.0
        assert report.summary["resilience_grade"] in "ABCDF"

    def test_single_node(self):
        topo = Topology(nodes=[Node("A")])
        report = ImpactAnalyzer().analyze(topo)
        assert report.overall_resilience == 0.0
        assert report.link_impacts == []

    @pytest.mark.parametrize("pct,expected", [
        (0, "low"), (25, "low"), (26, "medium"), (51, "high"), (76, "critical"),
    ])
    def test_severity_thresholds(self, pct, expected):
        assert ImpactAnalyzer._severity(pct) == expected

    def test_cheap_link_down_cost_is_not_spof(self):
        topo = Topology(
            nodes=[Node("A"), Node("B"), Node("C")],
            links=[
                Link("ab", "A", "B", cost=1),
                Link("bc", "B", "C", cost=1),
                Link("ac", "A", "C", cost=5),
            ],
        )
        report = ImpactAnalyzer(EngineConfig(link_down_cost=3)).analyze(topo)
        assert report.summary["single_points_of_failure"] == []
        assert all(li.broken_pairs == 0 for li in report.link_impacts)

    def test_broken_pairs_for_bridge(self):
        report = ImpactAnalyzer().analyze(_two_halves())
        bridge = next(li for li in report.link_impacts if li.link_id == "bridge")
        assert bridge.broken_pairs == 9
        assert bridge.to_dict()["broken_pairs"] == 9

    def test_broken_pair_counts(self):
        assert ImpactAnalyzer.broken_pair_counts(_two_halves()) == {"bridge": 9}

    def test_parallel_links_are_not_spof(self):
        topo = Topology(
            nodes=[Node("A"), Node("B")],
            links=[Link("ab1", "A", "B", cost=1), Link("ab2", "A", "B", cost=2)],
        )
        assert ImpactAnalyzer.broken_pair_counts(topo) == {}


class TestFailureSimulation:
    def test_bridge_failure_splits_network(self):
        result = simulate_failures(_two_halves(), ["bridge"])
        assert result.failed_links == ["bridge"]
        assert len(result.unreachable_pairs) == 9
        assert result.total_pairs == 15
        assert result.reachability_score == pytest.approx(40.0)

    def test_isolated_node(self):
        result = simulate_failures(_two_halves(), ["l12", "l13"])
        assert result.unreachable_pairs == [
            ("L1", "L2"), ("L1", "L3"), ("L1", "R1"), ("L1", "R2"), ("L1", "R3"),
        ]
        assert result.rerouted_pairs == []
        assert result.reachability_score == pytest.approx(200 / 3)

    def test_reroute_without_loss(self):
        result = simulate_failures(_two_halves(), ["l12"])
        assert result.unreachable_pairs == []
        assert result.rerouted_pairs == [
            ("L1", "L2"), ("L1", "R1"), ("L1", "R2"), ("L1", "R3"),
        ]
        assert result.affected_paths == 4
        assert result.reachability_score == 100.0

    def test_unknown_and_duplicate_ids(self):
        result = simulate_failures(_two_halves(), ["bridge", "nope", "bridge"])
        assert result.failed_links == ["bridge"]
        assert result.unknown_links == ["nope"]
        assert len(result.unreachable_pairs) == 9

    def test_pairs_unreachable_before_are_skipped(self):
        topo = _triangle()
        topo = Topology(nodes=topo.nodes + [Node("D")], links=topo.links)
        result = simulate_failures(topo, ["ab", "ac"])
        assert result.unreachable_pairs == [("A", "B"), ("A", "C")]
        assert result.total_pairs == 6

    def test_empty_topology(self):
        result = simulate_failures(Topology(), [])
        assert result.total_pairs == 0
        assert result.reachability_score == 100.0

    def test_parallel_matches_sequential(self):
        seq = simulate_failures(_two_halves(), ["l12"])
        par = simulate_failures(_two_halves(), ["l12"], parallelism=4)
        assert seq.to_dict() == par.to_dict()

    def test_to_dict(self):
        data = simulate_failures(_two_halves(), ["l12", "l13"]).to_dict()
        assert data["unreachable_pairs"][0] == {"source": "L1", "target": "L2"}
        assert data["affected_paths"] == 5
        assert data["total_pairs"] == 15


class TestAsymmetry:
    def test_detects_and_sorts(self):
        topo = Topology(
            nodes=[Node("A"), Node("B"), Node("C")],
            links=[
                Link("sym", "A", "B", cost=10),
                Link("mild", "B", "C", cost=10, forward_cost=10, reverse_cost=12),
                Link("wild", "A", "C", cost=10, forward_cost=10, reverse_cost=40),
            ],
        )
        found = find_asymmetric_links(topo)
        assert [a.link_id for a in found] == ["wild", "mild"]
        assert found[0].severity == "high"
        assert found[0].percent_diff == 75
        assert found[1].severity == "low"

    def test_summary(self):
        topo = Topology(
            nodes=[Node("A"), Node("B")],
            links=[Link("x", "A", "B", cost=10, forward_cost=30, reverse_cost=20)],
        )
        summary = asymmetry_summary(topo)
        assert summary["asymmetric_count"] == 1
        assert summary["symmetric_count"] == 0
        assert summary["max_difference"] == 10
        assert summary["links"][0]["severity"] == "medium"

    def test_none(self):
        summary = asymmetry_summary(Topology(nodes=[Node("A")]))
        assert summary["asymmetric_count"] == 0
        assert summary["avg_difference"] == 0.0
