"""Configuration for the analysis engine."""

import json
from dataclasses import dataclass, fields, replace
from enum import Enum


class DuplicatePolicy(str, Enum):
    """How the graph builder resolves two links defining the same directed edge."""

    LAST = "last"      # later link overwrites the earlier one
    MIN = "min"        # keep the cheaper edge
    REJECT = "reject"  # raise DuplicateLinkError


# OSPF maximum interface cost, used to model a failed link
LINK_DOWN_COST = 65535


@dataclass
class EngineConfig:
    """Tunable defaults shared by the engine, CLI and API."""

    duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST
    link_down_cost: int = LINK_DOWN_COST

    # Capacity assumed by the bandwidth ranker for links without one (Mbps)
    default_capacity: float = 1000.0

    critical_link_count: int = 5
    default_k: int = 2

    # Worker threads for all-pairs batches; 1 runs sequentially
    parallelism: int = 1

    @classmethod
    def from_dict(cls, data: dict) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        values = dict(data)
        if "duplicate_policy" in values:
            values["duplicate_policy"] = DuplicatePolicy(values["duplicate_policy"])
        config = cls(**values)
        if config.parallelism < 1:
            raise ValueError("parallelism must be >= 1")
        return config

    @classmethod
    def from_file(cls, filepath: str) -> "EngineConfig":
        with open(filepath) as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict:
        return {
            "duplicate_policy": self.duplicate_policy.value,
            "link_down_cost": self.link_down_cost,
            "default_capacity": self.default_capacity,
            "critical_link_count": self.critical_link_count,
            "default_k": self.default_k,
            "parallelism": self.parallelism,
        }

    def copy(self, **changes) -> "EngineConfig":
        return replace(self, **changes)


# Global default configuration
ENGINE_CONFIG = EngineConfig()
