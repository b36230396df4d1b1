from __future__ import annotations

from ngmap.graph.algos import find_cycles, find_strongly_connected_components
from ngmap.graph.cycles import detect_cycles
from ngmap.models.graph import DependencyGraph, GraphEdge, GraphNode
from ngmap.rules.severity import CYCLE_SEVERITY_POLICY, classify_cycle


def _graph(
    edges: list[tuple[str, str]], roles: dict[str, str] | None = None
) -> DependencyGraph:
    roles = roles or {}
    ids: list[str] = []
    for source, target in edges:
        for node in (source, target):
            if node not in ids:
                ids.append(node)
    for node in roles:
        if node not in ids:
            ids.append(node)
    return DependencyGraph(
        nodes=[
            GraphNode(
                id=node,
                path=f"/p/{node}",
                label=node,
                role=roles.get(node, "unknown"),  # type: ignore[arg-type]
            )
            for node in ids
        ],
        edges=[GraphEdge(source=s, target=t) for s, t in edges],
    )


def test_two_file_cycle() -> None:
    cycles = detect_cycles(_graph([("a", "b"), ("b", "a")]))

    assert len(cycles) == 1
    assert cycles[0].members == ["a", "b"]


def test_three_file_cycle_in_discovery_order() -> None:
    cycles = detect_cycles(_graph([("x", "y"), ("y", "z"), ("z", "x")]))

    assert [c.members for c in cycles] == [["x", "y", "z"]]


def test_chain_has_no_cycles() -> None:
    assert detect_cycles(_graph([("a", "b"), ("b", "c")])) == []


def test_empty_graph_has_no_cycles() -> None:
    assert detect_cycles(DependencyGraph()) == []


def test_self_loop_is_not_a_cycle() -> None:
    assert detect_cycles(_graph([("a", "a")])) == []


def test_module_cycle_is_error() -> None:
    roles = {"m": "module", "c1": "component", "c2": "component"}
    cycles = detect_cycles(_graph([("m", "c1"), ("c1", "c2"), ("c2", "m")], roles))

    assert [(c.type, c.severity) for c in cycles] == [("module", "error")]


def test_component_only_cycle_is_warning() -> None:
    roles = {"c1": "component", "c2": "component"}
    cycles = detect_cycles(_graph([("c1", "c2"), ("c2", "c1")], roles))

    assert [(c.type, c.severity) for c in cycles] == [("component", "warning")]


def test_service_cycle_is_error_and_general_is_warning() -> None:
    assert classify_cycle(["service", "component"]) == ("service", "error")
    assert classify_cycle(["utility", "model"]) == ("general", "warning")
    assert [row[0] for row in CYCLE_SEVERITY_POLICY] == [
        "module",
        "service",
        "component",
    ]


def test_disjoint_cycles_in_completion_order() -> None:
    graph = {
        "a": ["b"],
        "b": ["a"],
        "c": ["d"],
        "d": ["c", "a"],
    }

    assert find_cycles(graph) == [["a", "b"], ["c", "d"]]


def test_members_follow_neighbour_insertion_order() -> None:
    graph = {"a": ["c", "b"], "b": ["a"], "c": ["a"]}

    assert find_cycles(graph) == [["a", "c", "b"]]


def test_singleton_components_are_reported_by_scc_search() -> None:
    sccs = find_strongly_connected_components({"a": ["b"], "b": []})

    assert sccs == [["b"], ["a"]]


def test_long_chain_does_not_recurse() -> None:
    size = 5000
    graph = {str(i): [str(i + 1)] for i in range(size)}
    graph[str(size)] = ["0"]

    cycles = find_cycles(graph)

    assert len(cycles) == 1
    assert len(cycles[0]) == size + 1
    assert cycles[0][0] == "0"
