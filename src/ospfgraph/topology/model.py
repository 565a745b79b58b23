"""
Topology model: routers and directed-cost links.

A link is a single physical connection looked up in either endpoint order,
but carrying two independent direction costs. Instances are treated as
immutable within one analysis call; modified copies are made with
``dataclasses.replace``.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Optional

from ..errors import (
    DuplicateNodeError,
    NonPositiveCost,
    TopologyFormatError,
    UnknownNodeReference,
)


@dataclass(frozen=True)
class Node:
    """A router or endpoint."""
    id: str
    name: str = ""
    country: Optional[str] = None
    type: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name or self.id,
            "country": self.country,
            "type": self.type,
        }


@dataclass(frozen=True)
class Link:
    """A connection between two nodes with per-direction costs."""
    id: str
    source: str
    target: str
    cost: float
    forward_cost: Optional[float] = None
    reverse_cost: Optional[float] = None
    capacity: Optional[float] = None      # Mbps
    utilization: Optional[float] = None   # percent, 0-100
    type: Optional[str] = None
    source_interface: Optional[str] = None
    target_interface: Optional[str] = None

    @property
    def fwd(self) -> float:
        """Cost of traversing source -> target."""
        return self.cost if self.forward_cost is None else self.forward_cost

    @property
    def rev(self) -> float:
        """Cost of traversing target -> source."""
        return self.cost if self.reverse_cost is None else self.reverse_cost

    @property
    def is_asymmetric(self) -> bool:
        return self.fwd != self.rev

    @property
    def available_bandwidth(self) -> Optional[float]:
        """Unused capacity, or None when capacity or utilization is unknown."""
        if not self.capacity or self.utilization is None:
            return None
        return self.capacity * (1 - self.utilization / 100)

    def connects(self, a: str, b: str) -> bool:
        return (self.source == a and self.target == b) or (
            self.source == b and self.target == a
        )

    def cost_from(self, node: str) -> float:
        """Cost of leaving ``node`` across this link."""
        return self.fwd if node == self.source else self.rev

    def cost_towards(self, node: str) -> float:
        """Cost of arriving at ``node`` across this link."""
        return self.rev if node == self.source else self.fwd

    def interface_from(self, node: str) -> Optional[str]:
        return self.source_interface if node == self.source else self.target_interface

    def with_cost(self, new_cost: float) -> "Link":
        """Copy with a new base cost.

        Direction overrides are kept, so only directions that fall back to
        ``cost`` change.
        """
        return replace(self, cost=new_cost)

    def taken_down(self, down_cost: float) -> "Link":
        """Copy costing ``down_cost`` in both directions."""
        return replace(self, cost=down_cost, forward_cost=down_cost, reverse_cost=down_cost)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "cost": self.cost,
            "forward_cost": self.fwd,
            "reverse_cost": self.rev,
            "capacity": self.capacity,
            "utilization": self.utilization,
            "type": self.type,
            "source_interface": self.source_interface,
            "target_interface": self.target_interface,
            "is_asymmetric": self.is_asymmetric,
        }


@dataclass
class Topology:
    """A topology snapshot: nodes plus the links between them."""
    nodes: list[Node] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        self._nodes_by_id = {n.id: n for n in self.nodes}
        self._links_by_id: dict[str, Link] = {}
        self._links_by_pair: dict[frozenset, Link] = {}
        for link in self.links:
            self._links_by_id.setdefault(link.id, link)
            # first link in list order wins the endpoint lookup
            self._links_by_pair.setdefault(frozenset((link.source, link.target)), link)

    @property
    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    @property
    def countries(self) -> list[str]:
        """Distinct countries in first-seen order."""
        seen: dict[str, None] = {}
        for node in self.nodes:
            if node.country:
                seen.setdefault(node.country, None)
        return list(seen)

    def node(self, node_id: str) -> Optional[Node]:
        return self._nodes_by_id.get(node_id)

    def link(self, link_id: str) -> Optional[Link]:
        return self._links_by_id.get(link_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes_by_id

    def find_link(self, a: str, b: str) -> Optional[Link]:
        """Link connecting ``a`` and ``b`` in either order."""
        return self._links_by_pair.get(frozenset((a, b)))

    def nodes_in(self, country: str) -> list[Node]:
        return [n for n in self.nodes if n.country == country]

    def with_link_cost(self, link_id: str, new_cost: float) -> "Topology":
        """Independent copy with one link's base cost replaced."""
        return self._with_links([
            link.with_cost(new_cost) if link.id == link_id else link
            for link in self.links
        ])

    def with_link_down(self, link_id: str, down_cost: float) -> "Topology":
        """Independent copy with one link at ``down_cost`` in both directions."""
        return self._with_links([
            link.taken_down(down_cost) if link.id == link_id else link
            for link in self.links
        ])

    def without_links(self, link_ids) -> "Topology":
        """Independent copy with the given links removed."""
        removed = set(link_ids)
        return self._with_links([link for link in self.links if link.id not in removed])

    def _with_links(self, links: list[Link]) -> "Topology":
        return Topology(nodes=list(self.nodes), links=links, metadata=dict(self.metadata))

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [l.to_dict() for l in self.links],
            "metadata": dict(self.metadata),
        }


def validate_topology(topology: Topology) -> Topology:
    """Check the engine's input preconditions.

    Raises:
        DuplicateNodeError: two nodes share an id.
        TopologyFormatError: two links share an id.
        UnknownNodeReference: a link endpoint is not a known node.
        NonPositiveCost: a cost is zero, negative, or not finite.
    """
    node_ids: set[str] = set()
    for node in topology.nodes:
        if node.id in node_ids:
            raise DuplicateNodeError(node.id)
        node_ids.add(node.id)

    link_ids: set[str] = set()
    for link in topology.links:
        if link.id in link_ids:
            raise TopologyFormatError(f"Duplicate link id: {link.id}")
        link_ids.add(link.id)

        for endpoint in (link.source, link.target):
            if endpoint not in node_ids:
                raise UnknownNodeReference(link.id, endpoint)

        for name in ("cost", "forward_cost", "reverse_cost"):
            value = getattr(link, name)
            if value is None and name != "cost":
                continue
            if not _is_positive_number(value):
                raise NonPositiveCost(link.id, name, value)

    return topology


def _is_positive_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0
