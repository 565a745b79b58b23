"""
OSPFGraph — Path & Impact Analysis for routed network topologies.

Builds directed cost graphs from router/link records and answers path
questions over a static topology snapshot: shortest and alternate paths,
blast radius of link cost changes, country-level analytics, critical
links, and bandwidth-aware path ranking.

License: MIT
"""

__version__ = "0.1.0"
