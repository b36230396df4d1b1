"""Mermaid and Graphviz renderings of the dependency graph.

Nodes get short ids (``N1``, ``N2``, ...) in graph order and are labelled
with their path relative to the project root.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ngmap.models.graph import DependencyGraph


def _node_ids(graph: DependencyGraph) -> dict[str, str]:
    return {node.id: f"N{index}" for index, node in enumerate(graph.nodes, start=1)}


def _mermaid_label(text: str) -> str:
    return text.replace('"', "#quot;")


def _dot_label(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def render_mermaid(graph: DependencyGraph) -> str:
    """Render ``graph`` as a top-down Mermaid flowchart."""
    ids = _node_ids(graph)
    lines = ["graph TD"]
    lines.extend(
        f'  {ids[node.id]}["{_mermaid_label(node.id)}"]' for node in graph.nodes
    )
    lines.extend(
        f"  {ids[edge.source]} --> {ids[edge.target]}" for edge in graph.edges
    )
    return "\n".join(lines) + "\n"


def render_dot(graph: DependencyGraph) -> str:
    """Render ``graph`` as a Graphviz ``digraph``."""
    ids = _node_ids(graph)
    lines = [
        "digraph Dependencies {",
        "  rankdir=LR;",
        "  node [shape=box, style=rounded];",
        "",
    ]
    lines.extend(
        f'  {ids[node.id]} [label="{_dot_label(node.id)}"];' for node in graph.nodes
    )
    if graph.edges:
        lines.append("")
    lines.extend(f"  {ids[edge.source]} -> {ids[edge.target]};" for edge in graph.edges)
    lines.append("}")
    return "\n".join(lines) + "\n"


__all__ = ["render_dot", "render_mermaid"]
