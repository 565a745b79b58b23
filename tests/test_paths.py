"""Tests for path annotation and alternate path enumeration."""

import pytest

from ospfgraph.paths.all_pairs import all_pairs_shortest_paths, map_pairs, node_pairs
from ospfgraph.paths.annotate import annotate_path, find_bottleneck, make_path_result
from ospfgraph.paths.enumerate import PathStrategy, k_paths
from ospfgraph.graph.builder import build_graph
from ospfgraph.topology.model import Link, Node, Topology


def _asymmetric_pair():
    return Topology(
        nodes=[Node("X"), Node("Y")],
        links=[Link("xy", "X", "Y", cost=5, forward_cost=5, reverse_cost=9,
                    capacity=1000, source_interface="Gi0/1", target_interface="Gi0/2")],
    )


def _chain():
    return Topology(
        nodes=[Node("A"), Node("B"), Node("C"), Node("D")],
        links=[
            Link("ab", "A", "B", cost=1, capacity=10000, utilization=50),
            Link("bc", "B", "C", cost=1, capacity=1000, utilization=50),
            Link("cd", "C", "D", cost=1, capacity=2000, utilization=75),
        ],
    )


def _three_routes():
    # S -> T over three link-disjoint routes costing 2, 4 and 6
    nodes = [Node(n) for n in ("S", "A", "B", "C", "T")]
    links = [
        Link("sa", "S", "A", cost=1), Link("at", "A", "T", cost=1),
        Link("sb", "S", "B", cost=2), Link("bt", "B", "T", cost=2),
        Link("sc", "S", "C", cost=3), Link("ct", "C", "T", cost=3),
    ]
    return Topology(nodes=nodes, links=links)


class TestAnnotate:
    def test_asymmetric_forward(self):
        costs = annotate_path(_asymmetric_pair(), ["X", "Y"])
        assert costs.forward_cost == 5
        assert costs.reverse_cost == 9

    def test_asymmetric_reverse(self):
        costs = annotate_path(_asymmetric_pair(), ["Y", "X"])
        assert costs.forward_cost == 9
        assert costs.reverse_cost == 5

    def test_hop_details(self):
        costs = annotate_path(_asymmetric_pair(), ["Y", "X"])
        hop = costs.hop_details[0]
        assert (hop.from_node, hop.to_node, hop.link_id) == ("Y", "X", "xy")
        assert hop.interface == "Gi0/2"
        assert hop.capacity == 1000

    def test_min_capacity_not_summed(self):
        costs = annotate_path(_chain(), ["A", "B", "C", "D"])
        assert costs.min_capacity == 1000
        assert costs.forward_cost == 3

    def test_no_capacity(self):
        topo = Topology(nodes=[Node("A"), Node("B")], links=[Link("ab", "A", "B", 1)])
        assert annotate_path(topo, ["A", "B"]).min_capacity is None

    def test_single_node_path(self):
        costs = annotate_path(_chain(), ["A"])
        assert costs.forward_cost == 0
        assert costs.hop_details == []


class TestBottleneck:
    def test_least_headroom(self):
        # headroom: ab 5000, bc 500, cd 500
        bottleneck = find_bottleneck(_chain(), ["A", "B", "C", "D"])
        assert bottleneck.link_id == "bc"
        assert bottleneck.available == 500

    def test_tie_picks_first_hop(self):
        bottleneck = find_bottleneck(_chain(), ["D", "C", "B"])
        assert bottleneck.link_id == "cd"

    def test_needs_capacity_and_utilization(self):
        topo = Topology(
            nodes=[Node("A"), Node("B"), Node("C")],
            links=[
                Link("ab", "A", "B", 1, capacity=100),
                Link("bc", "B", "C", 1, utilization=99),
            ],
        )
        assert find_bottleneck(topo, ["A", "B", "C"]) is None

    def test_path_result(self):
        result = make_path_result(_chain(), ["A", "B", "C"], 2)
        assert result.hops == 2
        assert result.bottleneck.link_id == "bc"
        assert result.to_dict()["bottleneck"]["link_id"] == "bc"


class TestKPaths:
    def test_primary_and_backup(self):
        results = k_paths(_three_routes(), "S", "T", k=2)
        assert [r.path for r in results] == [["S", "A", "T"], ["S", "B", "T"]]
        assert [r.cost for r in results] == [2, 4]

    def test_backup_caps_at_two(self):
        assert len(k_paths(_three_routes(), "S", "T", k=5)) == 2

    def test_disjoint_up_to_k(self):
        results = k_paths(_three_routes(), "S", "T", k=5, strategy=PathStrategy.DISJOINT)
        assert [r.cost for r in results] == [2, 4, 6]

    def test_strategies_agree_for_k2(self):
        topo = _three_routes()
        backup = k_paths(topo, "S", "T", k=2)
        disjoint = k_paths(topo, "S", "T", k=2, strategy="disjoint")
        assert [r.path for r in backup] == [r.path for r in disjoint]

    def test_yen(self):
        results = k_paths(_three_routes(), "S", "T", k=3, strategy=PathStrategy.YEN)
        assert [r.cost for r in results] == [2, 4, 6]

    def test_yen_finds_overlapping_alternate(self):
        # the only alternate shares link "sa" with the primary
        topo = Topology(
            nodes=[Node(n) for n in ("S", "A", "B", "T")],
            links=[
                Link("sa", "S", "A", cost=1),
                Link("at", "A", "T", cost=1),
                Link("ab", "A", "B", cost=1),
                Link("bt", "B", "T", cost=1),
            ],
        )
        assert len(k_paths(topo, "S", "T", k=2)) == 1
        yen = k_paths(topo, "S", "T", k=2, strategy="yen")
        assert [r.path for r in yen] == [["S", "A", "T"], ["S", "A", "B", "T"]]

    def test_no_backup_in_tree(self):
        results = k_paths(_chain(), "A", "D", k=2)
        assert len(results) == 1
        assert results[0].path == ["A", "B", "C", "D"]

    def test_unreachable(self):
        topo = Topology(nodes=[Node("A"), Node("B")])
        assert k_paths(topo, "A", "B") == []

    def test_k_zero(self):
        assert k_paths(_three_routes(), "S", "T", k=0) == []

    def test_results_are_annotated(self):
        result = k_paths(_asymmetric_pair(), "Y", "X", k=1)[0]
        assert result.cost == 9
        assert result.forward_cost == 9
        assert result.reverse_cost == 5

    def test_does_not_modify_given_graph(self):
        topo = _three_routes()
        G = build_graph(topo)
        edges = G.number_of_edges()
        k_paths(topo, "S", "T", k=3, strategy="disjoint", G=G)
        assert G.number_of_edges() == edges


class TestAllPairs:
    def test_node_pairs(self):
        assert node_pairs(["a", "b", "c"]) == [("a", "b"), ("a", "c"), ("b", "c")]

    @pytest.mark.parametrize("parallelism", [1, 4])
    def test_order_preserved(self, parallelism):
        topo = _three_routes()
        G = build_graph(topo)
        pairs = node_pairs(topo.node_ids)
        results = all_pairs_shortest_paths(G, pairs, parallelism=parallelism)
        assert [(s, t) for s, t, _ in results] == pairs
        assert all(sp is not None for _, _, sp in results)

    def test_parallel_matches_sequential(self):
        topo = _three_routes()
        G = build_graph(topo)
        pairs = node_pairs(topo.node_ids)
        seq = all_pairs_shortest_paths(G, pairs, parallelism=1)
        par = all_pairs_shortest_paths(G, pairs, parallelism=3)
        assert [sp.cost for _, _, sp in seq] == [sp.cost for _, _, sp in par]

    def test_map_pairs(self):
        assert map_pairs(lambda s, t: s + t, [("a", "b"), ("c", "d")], 2) == ["ab", "cd"]
