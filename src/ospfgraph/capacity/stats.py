"""
Link capacity statistics.

Summarizes utilization across links that report both capacity and
utilization: congested and warning links, aggregate headroom, and which
links would cross the congestion threshold under uniform traffic growth.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from ..log import get_logger
from ..topology.model import Link, Topology

logger = get_logger(__name__)

CONGESTION_PCT = 80.0
WARNING_PCT = 60.0


@dataclass
class ProjectedLink:
    link_id: str
    utilization: float
    projected_utilization: float

    @property
    def at_risk(self) -> bool:
        return self.projected_utilization > CONGESTION_PCT

    def to_dict(self) -> dict:
        return {
            "link_id": self.link_id,
            "utilization": self.utilization,
            "projected_utilization": self.projected_utilization,
            "at_risk": self.at_risk,
        }


@dataclass
class GrowthProjection:
    growth_pct: float
    links: list[ProjectedLink] = field(default_factory=list)

    @property
    def at_risk_count(self) -> int:
        return sum(1 for p in self.links if p.at_risk)

    def to_dict(self) -> dict:
        return {
            "growth_pct": self.growth_pct,
            "at_risk_count": self.at_risk_count,
            "links": [p.to_dict() for p in self.links],
        }


@dataclass
class CapacityStats:
    """Utilization summary over links with capacity data."""
    links_with_capacity: list[str] = field(default_factory=list)
    avg_utilization: float = 0.0
    congested_links: list[str] = field(default_factory=list)
    warning_links: list[str] = field(default_factory=list)
    total_capacity: float = 0.0
    used_capacity: float = 0.0
    growth: Optional[GrowthProjection] = None

    @property
    def headroom_pct(self) -> float:
        if self.total_capacity <= 0:
            return 0.0
        return (self.total_capacity - self.used_capacity) / self.total_capacity * 100

    def to_dict(self) -> dict:
        return {
            "links_with_capacity": self.links_with_capacity,
            "avg_utilization": self.avg_utilization,
            "congested_links": self.congested_links,
            "warning_links": self.warning_links,
            "total_capacity": self.total_capacity,
            "used_capacity": self.used_capacity,
            "headroom_pct": self.headroom_pct,
            "growth": self.growth.to_dict() if self.growth else None,
        }


def capacity_stats(
    topology: Topology, growth_pct: Optional[float] = None
) -> Optional[CapacityStats]:
    """Capacity summary, or None when no link has capacity and utilization.

    Args:
        growth_pct: Uniform traffic growth to project, e.g. ``20`` for +20%.
            Projected utilization is capped at 100.
    """
    measured = [
        link for link in topology.links
        if link.capacity is not None and link.utilization is not None
    ]
    if not measured:
        return None

    stats = CapacityStats(
        links_with_capacity=[link.id for link in measured],
        avg_utilization=float(np.mean([link.utilization for link in measured])),
        congested_links=[link.id for link in measured if link.utilization > CONGESTION_PCT],
        warning_links=[
            link.id for link in measured
            if WARNING_PCT < link.utilization <= CONGESTION_PCT
        ],
        total_capacity=float(sum(link.capacity for link in measured)),
        used_capacity=float(sum(_used(link) for link in measured)),
    )

    if growth_pct is not None:
        stats.growth = GrowthProjection(
            growth_pct=growth_pct,
            links=[
                ProjectedLink(
                    link_id=link.id,
                    utilization=link.utilization,
                    projected_utilization=min(100.0, link.utilization * (1 + growth_pct / 100)),
                )
                for link in measured
            ],
        )

    logger.debug(
        "Capacity stats: %d measured links, %d congested, %d warning",
        len(measured), len(stats.congested_links), len(stats.warning_links),
    )
    return stats


def _used(link: Link) -> float:
    return link.capacity * link.utilization / 100
