"""
Cost asymmetry detection.

Flags links whose forward and reverse costs differ, which makes the return
path of a flow diverge from its forward path.
"""

from dataclasses import dataclass

import numpy as np

from ..topology.model import Topology

_SEVERITY_ORDER = {"high": 0, "medium": 1, "low": 2}


@dataclass
class AsymmetricLink:
    link_id: str
    source: str
    target: str
    forward_cost: float
    reverse_cost: float
    difference: float
    percent_diff: float
    severity: str = "low"

    def to_dict(self) -> dict:
        return {
            "link_id": self.link_id,
            "source": self.source,
            "target": self.target,
            "forward_cost": self.forward_cost,
            "reverse_cost": self.reverse_cost,
            "difference": self.difference,
            "percent_diff": self.percent_diff,
            "severity": self.severity,
        }


def find_asymmetric_links(topology: Topology) -> list[AsymmetricLink]:
    """Asymmetric links, most severe first, then by cost difference."""
    found = []
    for link in topology.links:
        difference = abs(link.fwd - link.rev)
        if difference == 0:
            continue
        percent_diff = difference / max(link.fwd, link.rev) * 100
        found.append(AsymmetricLink(
            link_id=link.id,
            source=link.source,
            target=link.target,
            forward_cost=link.fwd,
            reverse_cost=link.rev,
            difference=difference,
            percent_diff=percent_diff,
            severity=_severity(percent_diff),
        ))

    found.sort(key=lambda a: (_SEVERITY_ORDER[a.severity], -a.difference))
    return found


def asymmetry_summary(topology: Topology) -> dict:
    links = find_asymmetric_links(topology)
    differences = [a.difference for a in links]
    return {
        "total_links": len(topology.links),
        "asymmetric_count": len(links),
        "symmetric_count": len(topology.links) - len(links),
        "high_count": sum(1 for a in links if a.severity == "high"),
        "avg_difference": float(np.mean(differences)) if differences else 0.0,
        "max_difference": max(differences) if differences else 0,
        "links": [a.to_dict() for a in links],
    }


def _severity(percent_diff: float) -> str:
    # percent_diff is relative to the larger cost, so it stays below 100
    if percent_diff > 50:
        return "high"
    elif percent_diff > 25:
        return "medium"
    return "low"
