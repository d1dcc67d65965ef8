"""Topological analysis of symbol graphs."""

from .algorithms import (
    connected_components,
    count_triangles,
    enumerate_elementary_cycles,
    find_cycles,
    strongly_connected_components,
    to_digraph,
)
from .invariants import InvariantAnalyzer, analyze
from .ranking import (
    compute_edge_persistence,
    find_symbol,
    shortest_path,
    suggest_refactor,
    weighted_pagerank,
)

__all__ = [
    # Algorithms
    "connected_components",
    "count_triangles",
    "enumerate_elementary_cycles",
    "find_cycles",
    "strongly_connected_components",
    "to_digraph",
    # Invariants
    "InvariantAnalyzer",
    "analyze",
    # Ranking
    "compute_edge_persistence",
    "find_symbol",
    "shortest_path",
    "suggest_refactor",
    "weighted_pagerank",
]
