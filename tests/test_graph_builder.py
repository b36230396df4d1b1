from __future__ import annotations

from ngmap.graph.builder import build_dependency_graph
from ngmap.models.records import FileRecord, ImportRef


def _record(rel: str, *targets: str, role: str = "unknown") -> FileRecord:
    imports = [
        ImportRef(
            source=f"./{target}",
            resolved=f"/app/{target}",
            kind="local",
            category="relative",
        )
        for target in targets
    ]
    return FileRecord(
        path=f"/app/{rel}",
        relative_path=rel,
        imports=imports,
        role=role,  # type: ignore[arg-type]
    )


def test_one_node_per_record_in_order() -> None:
    records = [
        _record("b.ts"),
        _record("a.ts", role="service"),
        FileRecord(path="/app/broken.ts", relative_path="broken.ts", parse_error="x"),
    ]

    graph = build_dependency_graph(records)

    assert [(n.id, n.label, n.role) for n in graph.nodes] == [
        ("b.ts", "b.ts", "unknown"),
        ("a.ts", "a.ts", "service"),
        ("broken.ts", "broken.ts", "unknown"),
    ]
    assert graph.edges == []


def test_edges_only_between_scanned_files() -> None:
    records = [
        _record("a.ts", "b.ts", "outside.ts"),
        _record("b.ts"),
    ]
    records[0].imports.append(
        ImportRef(source="rxjs", kind="external", category="third-party")
    )

    graph = build_dependency_graph(records)

    assert [(e.source, e.target) for e in graph.edges] == [("a.ts", "b.ts")]


def test_duplicate_imports_yield_one_edge() -> None:
    records = [_record("a.ts", "b.ts", "b.ts"), _record("b.ts")]

    graph = build_dependency_graph(records)

    assert len(graph.edges) == 1


def test_label_is_basename() -> None:
    graph = build_dependency_graph([_record("src/app/core/x.service.ts")])

    assert graph.nodes[0].label == "x.service.ts"
    assert graph.adjacency() == {"src/app/core/x.service.ts": []}
