"""Tests for the shortest-path solver."""

import random

import networkx as nx
import pytest

from ospfgraph.graph.builder import build_graph
from ospfgraph.paths.solver import equal_cost_paths, shortest_path
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


def _random_topology(seed: int, n: int = 6, p: float = 0.5):
    rng = random.Random(seed)
    nodes = [Node(f"n{i}") for i in range(n)]
    links = []
    for i in range(n):
        for j in range(i + 1, n):
            if rng.random() < p:
                links.append(Link(
                    f"l{i}-{j}", f"n{i}", f"n{j}",
                    cost=rng.randint(1, 20),
                    forward_cost=rng.randint(1, 20),
                    reverse_cost=rng.randint(1, 20),
                ))
    return Topology(nodes=nodes, links=links)


def _brute_force_cost(G, source, target):
    best = None
    for path in nx.all_simple_paths(G, source, target):
        cost = sum(G[u][v]["cost"] for u, v in zip(path, path[1:]))
        if best is None or cost < best:
            best = cost
    return best


class TestShortestPath:
    def test_triangle(self):
        G = build_graph(_triangle())
        result = shortest_path(G, "A", "C")
        assert result.path == ("A", "B", "C")
        assert result.cost == 20
        assert result.hops == 2

    def test_self_path(self):
        G = build_graph(_triangle())
        for node in ("A", "B", "C"):
            result = shortest_path(G, node, node)
            assert result.path == (node,)
            assert result.cost == 0

    def test_unreachable(self):
        topo = Topology(nodes=[Node("A"), Node("B"), Node("Z")],
                        links=[Link("ab", "A", "B", cost=1)])
        assert shortest_path(build_graph(topo), "A", "Z") is None

    def test_unknown_node(self):
        G = build_graph(_triangle())
        assert shortest_path(G, "A", "nope") is None
        assert shortest_path(G, "nope", "A") is None

    def test_asymmetric_direction(self):
        topo = Topology(
            nodes=[Node("X"), Node("Y"), Node("Z")],
            links=[
                Link("xy", "X", "Y", cost=1, forward_cost=1, reverse_cost=50),
                Link("yz", "Y", "Z", cost=1),
                Link("xz", "X", "Z", cost=10),
            ],
        )
        G = build_graph(topo)
        assert shortest_path(G, "X", "Y").cost == 1
        back = shortest_path(G, "Y", "X")
        assert back.path == ("Y", "Z", "X")
        assert back.cost == 11

    @pytest.mark.parametrize("seed", range(8))
    def test_matches_brute_force(self, seed):
        G = build_graph(_random_topology(seed))
        for source in G.nodes():
            for target in G.nodes():
                if source == target:
                    continue
                expected = _brute_force_cost(G, source, target)
                result = shortest_path(G, source, target)
                if expected is None:
                    assert result is None
                else:
                    assert result.cost == expected
                    path_cost = sum(
                        G[u][v]["cost"] for u, v in zip(result.path, result.path[1:])
                    )
                    assert path_cost == result.cost


class TestEqualCostPaths:
    def test_square(self):
        topo = Topology(
            nodes=[Node("S"), Node("A"), Node("B"), Node("T")],
            links=[
                Link("sa", "S", "A", cost=1),
                Link("at", "A", "T", cost=1),
                Link("sb", "S", "B", cost=1),
                Link("bt", "B", "T", cost=1),
            ],
        )
        paths = equal_cost_paths(build_graph(topo), "S", "T")
        assert sorted(paths) == [["S", "A", "T"], ["S", "B", "T"]]

    def test_limit(self):
        topo = Topology(
            nodes=[Node("S"), Node("A"), Node("B"), Node("T")],
            links=[
                Link("sa", "S", "A", cost=1),
                Link("at", "A", "T", cost=1),
                Link("sb", "S", "B", cost=1),
                Link("bt", "B", "T", cost=1),
            ],
        )
        assert len(equal_cost_paths(build_graph(topo), "S", "T", limit=1)) == 1

    def test_single_path(self):
        assert equal_cost_paths(build_graph(_triangle()), "A", "C") == [["A", "B", "C"]]

    def test_no_path(self):
        topo = Topology(nodes=[Node("A"), Node("B")])
        assert equal_cost_paths(build_graph(topo), "A", "B") == []
