"""Dependency graph construction and cycle detection."""

from ngmap.graph.algos import find_cycles, find_strongly_connected_components
from ngmap.graph.builder import build_dependency_graph
from ngmap.graph.cycles import detect_cycles

__all__ = [
    "build_dependency_graph",
    "detect_cycles",
    "find_cycles",
    "find_strongly_connected_components",
]
