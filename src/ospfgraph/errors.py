"""
Exception types raised at the topology boundary.

The engine itself reports expected absence (unreachable pairs, unknown
links) as ``None`` or empty results. These errors cover malformed input
that would otherwise surface as confusing downstream results.
"""


class TopologyError(ValueError):
    """Base class for invalid topology input."""


class TopologyFormatError(TopologyError):
    """Topology records are structurally malformed (missing arrays/fields)."""


class DuplicateNodeError(TopologyError):
    """Two nodes share the same id."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Duplicate node id: {node_id}")


class UnknownNodeReference(TopologyError):
    """A link references a node id that is not in the topology."""

    def __init__(self, link_id: str, node_id: str):
        self.link_id = link_id
        self.node_id = node_id
        super().__init__(f"Link {link_id} references unknown node {node_id}")


class NonPositiveCost(TopologyError):
    """A link carries a zero, negative or non-finite cost."""

    def __init__(self, link_id: str, field_name: str, value):
        self.link_id = link_id
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"Link {link_id} has non-positive {field_name}: {value!r}"
        )


class DuplicateLinkError(TopologyError):
    """Two links define the same directed edge under the REJECT policy."""

    def __init__(self, source: str, target: str, first: str, second: str):
        self.source = source
        self.target = target
        self.links = (first, second)
        super().__init__(
            f"Links {first} and {second} both define edge {source} -> {target}"
        )
