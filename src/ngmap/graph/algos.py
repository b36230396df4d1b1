"""Graph algorithms for ngmap."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence


class _TarjanState:
    """Mutable state container for Tarjan's SCC algorithm."""

    def __init__(self) -> None:
        self.index = 0
        self.indices: dict[str, int] = {}
        self.low_link: dict[str, int] = {}
        self.on_stack: set[str] = set()
        self.stack: list[str] = []
        self.sccs: list[list[str]] = []

    def visit(self, node: str) -> None:
        self.indices[node] = self.index
        self.low_link[node] = self.index
        self.index += 1
        self.stack.append(node)
        self.on_stack.add(node)


def _extract_scc(state: _TarjanState, root: str) -> list[str]:
    """Pop a strongly connected component off the stack, in discovery order."""
    scc: list[str] = []
    while state.stack:
        w = state.stack.pop()
        state.on_stack.remove(w)
        scc.append(w)
        if w == root:
            break
    if scc[-1:] != [root]:
        msg = (
            f"Tarjan algorithm invariant violated: root node {root!r} "
            "not found in stack during SCC extraction."
        )
        raise RuntimeError(msg)
    scc.reverse()
    return scc


def _strongconnect(
    start: str, graph: Mapping[str, Sequence[str]], state: _TarjanState
) -> None:
    """Run Tarjan's depth-first search from ``start`` without recursion."""
    state.visit(start)
    work: list[tuple[str, Iterator[str]]] = [(start, iter(graph.get(start, ())))]

    while work:
        node, neighbors = work[-1]
        for neighbor in neighbors:
            if neighbor not in state.indices:
                state.visit(neighbor)
                work.append((neighbor, iter(graph.get(neighbor, ()))))
                break
            if neighbor in state.on_stack:
                state.low_link[node] = min(
                    state.low_link[node], state.indices[neighbor]
                )
        else:
            work.pop()
            if work:
                parent = work[-1][0]
                state.low_link[parent] = min(
                    state.low_link[parent], state.low_link[node]
                )
            if state.low_link[node] == state.indices[node]:
                state.sccs.append(_extract_scc(state, node))


def find_strongly_connected_components(
    graph: Mapping[str, Sequence[str]],
) -> list[list[str]]:
    """Find every strongly connected component of a directed graph.

    Nodes are started in the mapping's iteration order and neighbours are
    followed in sequence order, so the result is a pure function of the
    input ordering.

    Args:
        graph: Node -> ordered list of successor nodes

    Returns:
        Components in Tarjan completion order; members of each component in
        depth-first discovery order. Singletons are included.
    """
    state = _TarjanState()

    for node in graph:
        if node not in state.indices:
            _strongconnect(node, graph, state)

    return state.sccs


def find_cycles(graph: Mapping[str, Sequence[str]]) -> list[list[str]]:
    """Return the components with more than one member.

    Self-loops alone do not form a cycle.
    """
    return [scc for scc in find_strongly_connected_components(graph) if len(scc) > 1]


__all__ = ["find_cycles", "find_strongly_connected_components"]
