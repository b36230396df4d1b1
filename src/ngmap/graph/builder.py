"""Dependency graph construction from extracted file records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ngmap.models.graph import DependencyGraph, GraphEdge, GraphNode

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ngmap.models.records import FileRecord


def build_dependency_graph(records: Sequence[FileRecord]) -> DependencyGraph:
    """Build the file dependency graph.

    Every record becomes a node, in record order, including records whose
    extraction failed. Each local import that resolves to another record
    becomes an edge; repeated ``(source, target)`` pairs are kept once.

    Args:
        records: Classified file records

    Returns:
        DependencyGraph keyed by relative path
    """
    path_to_id = {record.path: record.relative_path for record in records}

    nodes = [
        GraphNode(
            id=record.relative_path,
            path=record.path,
            label=record.relative_path.rsplit("/", 1)[-1],
            role=record.role,
        )
        for record in records
    ]

    edges: list[GraphEdge] = []
    seen: set[tuple[str, str]] = set()
    for record in records:
        for imp in record.local_imports:
            target = path_to_id.get(imp.resolved or "")
            if target is None:
                continue
            key = (record.relative_path, target)
            if key in seen:
                continue
            seen.add(key)
            edges.append(GraphEdge(source=key[0], target=key[1]))

    return DependencyGraph(nodes=nodes, edges=edges)


__all__ = ["build_dependency_graph"]
