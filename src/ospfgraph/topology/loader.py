"""
Topology loader.

Reads node/link records from JSON exports and normalizes the field-name
variants seen across topology tools (``hostname`` vs ``name``,
``source_interface`` vs ``sourceInterface``, nested capacity/traffic
blocks) into :class:`Topology` instances.
"""

import json
from typing import Optional

from ..errors import TopologyFormatError
from ..log import get_logger
from .model import Link, Node, Topology, validate_topology

logger = get_logger(__name__)


def topology_from_dict(data: dict | str, validate: bool = True) -> Topology:
    """Build a topology from a ``{"nodes": [...], "links": [...]}`` mapping.

    Args:
        data: Parsed mapping or a JSON string.
        validate: Run :func:`validate_topology` on the result.

    Raises:
        TopologyFormatError: missing arrays or required record fields.
    """
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise TopologyFormatError(f"Invalid topology JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise TopologyFormatError("Topology must be a JSON object")
    if not isinstance(data.get("nodes"), list):
        raise TopologyFormatError("Invalid topology: missing or invalid nodes array")
    if not isinstance(data.get("links"), list):
        raise TopologyFormatError("Invalid topology: missing or invalid links array")

    nodes = [_parse_node(entry) for entry in data["nodes"]]

    links = []
    used_ids: set[str] = set()
    for index, entry in enumerate(data["links"]):
        link = _parse_link(entry, index, used_ids)
        used_ids.add(link.id)
        links.append(link)

    topology = Topology(nodes=nodes, links=links, metadata=dict(data.get("metadata") or {}))
    logger.debug("Loaded topology: %d nodes, %d links", len(nodes), len(links))

    if validate:
        validate_topology(topology)
    return topology


def load_topology(filepath: str, validate: bool = True) -> Topology:
    """Convenience: load and validate a topology JSON file."""
    with open(filepath) as f:
        text = f.read()
    return topology_from_dict(text, validate=validate)


def _parse_node(entry: dict) -> Node:
    if not isinstance(entry, dict) or not entry.get("id"):
        raise TopologyFormatError(f"Invalid node: missing id ({entry!r})")

    node_id = str(entry["id"])
    return Node(
        id=node_id,
        name=entry.get("name") or entry.get("hostname") or node_id,
        country=entry.get("country"),
        type=entry.get("type") or entry.get("node_type"),
    )


def _parse_link(entry: dict, index: int, used_ids: set[str]) -> Link:
    if not isinstance(entry, dict):
        raise TopologyFormatError(f"Invalid link at index {index}")
    if not entry.get("source") or not entry.get("target") or entry.get("cost") is None:
        raise TopologyFormatError(
            f"Invalid link at index {index}: missing source, target, or cost"
        )

    source = str(entry["source"])
    target = str(entry["target"])

    link_id = str(entry.get("id") or f"{source}-{target}-{index}")
    if link_id in used_ids:
        link_id = f"{link_id}-{index}"

    capacity = entry.get("capacity")
    if not capacity:
        capacity = (entry.get("source_capacity") or {}).get("total_capacity_mbps", capacity)

    utilization = entry.get("utilization")
    if utilization is None:
        utilization = (entry.get("traffic") or {}).get("forward_utilization_pct")

    return Link(
        id=link_id,
        source=source,
        target=target,
        cost=entry["cost"],
        forward_cost=entry.get("forward_cost"),
        reverse_cost=entry.get("reverse_cost"),
        capacity=capacity,
        utilization=utilization,
        type=_link_type(entry),
        source_interface=entry.get("source_interface") or entry.get("sourceInterface"),
        target_interface=entry.get("target_interface") or entry.get("targetInterface"),
    )


def _link_type(entry: dict) -> Optional[str]:
    link_type = entry.get("type") or entry.get("edge_type")
    if link_type is None:
        return None
    if link_type in ("asymmetric", "backbone"):
        return link_type
    return "standard"
