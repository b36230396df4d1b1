"""Dependency graph and cycle models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ngmap.models.records import Role  # noqa: TC001

CycleSeverity = Literal["error", "warning"]
CycleType = Literal["module", "service", "component", "general"]


class GraphNode(BaseModel):
    """One scanned file."""

    id: str = Field(description="Path relative to the project root")
    path: str
    label: str
    role: Role = "unknown"


class GraphEdge(BaseModel):
    """A resolved local import from one scanned file to another."""

    source: str
    target: str


class DependencyGraph(BaseModel):
    """Directed file dependency graph."""

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    def adjacency(self) -> dict[str, list[str]]:
        """Return node id -> ordered target ids, with every node present."""
        adjacency: dict[str, list[str]] = {node.id: [] for node in self.nodes}
        for edge in self.edges:
            adjacency[edge.source].append(edge.target)
        return adjacency

    def roles(self) -> dict[str, Role]:
        return {node.id: node.role for node in self.nodes}


class Cycle(BaseModel):
    """A strongly connected component with more than one member.

    ``members`` holds every file of the component exactly once; the last
    member points back to the first.
    """

    members: list[str]
    severity: CycleSeverity
    type: CycleType


__all__ = [
    "Cycle",
    "CycleSeverity",
    "CycleType",
    "DependencyGraph",
    "GraphEdge",
    "GraphNode",
]
