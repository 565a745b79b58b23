"""
Per-hop cost annotation for a node path.

Given a path computed over the directed graph, looks up the underlying
links to report forward and reverse totals, the weakest-capacity hop, and
the most utilization-constrained hop.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..topology.model import Topology


@dataclass
class HopDetail:
    """One hop of a path, with both direction costs."""
    from_node: str
    to_node: str
    link_id: str
    forward_cost: float
    reverse_cost: float
    capacity: Optional[float] = None
    interface: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "from": self.from_node,
            "to": self.to_node,
            "link_id": self.link_id,
            "forward_cost": self.forward_cost,
            "reverse_cost": self.reverse_cost,
            "capacity": self.capacity,
            "interface": self.interface,
        }


@dataclass
class Bottleneck:
    """The hop with the least available headroom."""
    link_id: str
    capacity: float
    utilization: float
    available: float

    def to_dict(self) -> dict:
        return {
            "link_id": self.link_id,
            "capacity": self.capacity,
            "utilization": self.utilization,
            "available": self.available,
        }


@dataclass
class PathCosts:
    forward_cost: float = 0
    reverse_cost: float = 0
    min_capacity: Optional[float] = None
    hop_details: list[HopDetail] = field(default_factory=list)


@dataclass
class PathResult:
    """A fully annotated path."""
    path: list[str]
    cost: float
    forward_cost: float
    reverse_cost: float
    hops: int
    hop_details: list[HopDetail] = field(default_factory=list)
    min_capacity: Optional[float] = None
    bottleneck: Optional[Bottleneck] = None

    def to_dict(self) -> dict:
        return {
            "path": list(self.path),
            "cost": self.cost,
            "forward_cost": self.forward_cost,
            "reverse_cost": self.reverse_cost,
            "hops": self.hops,
            "hop_details": [h.to_dict() for h in self.hop_details],
            "min_capacity": self.min_capacity,
            "bottleneck": self.bottleneck.to_dict() if self.bottleneck else None,
        }


def annotate_path(topology: Topology, path: Sequence[str]) -> PathCosts:
    """Accumulate forward/reverse cost and minimum capacity along ``path``.

    Hops without a connecting link are skipped.
    """
    costs = PathCosts()

    for from_node, to_node in zip(path, path[1:]):
        link = topology.find_link(from_node, to_node)
        if link is None:
            continue

        hop_forward = link.cost_from(from_node)
        hop_reverse = link.cost_towards(from_node)
        costs.forward_cost += hop_forward
        costs.reverse_cost += hop_reverse

        costs.hop_details.append(HopDetail(
            from_node=from_node,
            to_node=to_node,
            link_id=link.id,
            forward_cost=hop_forward,
            reverse_cost=hop_reverse,
            capacity=link.capacity,
            interface=link.interface_from(from_node),
        ))

        # bandwidth is bounded by the weakest hop, not additive
        if link.capacity is not None:
            if costs.min_capacity is None or link.capacity < costs.min_capacity:
                costs.min_capacity = link.capacity

    return costs


def find_bottleneck(topology: Topology, path: Sequence[str]) -> Optional[Bottleneck]:
    """Hop with the least ``capacity * (1 - utilization/100)``.

    Only hops with both capacity and utilization set are considered. On a
    tie the first such hop along the path is returned.
    """
    bottleneck = None

    for from_node, to_node in zip(path, path[1:]):
        link = topology.find_link(from_node, to_node)
        if link is None:
            continue
        available = link.available_bandwidth
        if available is None:
            continue
        if bottleneck is None or available < bottleneck.available:
            bottleneck = Bottleneck(
                link_id=link.id,
                capacity=link.capacity,
                utilization=link.utilization,
                available=available,
            )

    return bottleneck


def make_path_result(topology: Topology, path: Sequence[str], cost: float) -> PathResult:
    """Annotate a solver path into a :class:`PathResult`."""
    costs = annotate_path(topology, path)
    return PathResult(
        path=list(path),
        cost=cost,
        forward_cost=costs.forward_cost,
        reverse_cost=costs.reverse_cost,
        hops=len(path) - 1,
        hop_details=costs.hop_details,
        min_capacity=costs.min_capacity,
        bottleneck=find_bottleneck(topology, path),
    )
