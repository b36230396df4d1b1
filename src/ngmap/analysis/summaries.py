"""Summary builders for the analysis report."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from ngmap.models.report import (
    CodeMetrics,
    ComponentSummary,
    FileSize,
    Inventory,
    ModuleSummary,
    ReportSummary,
    ServiceSummary,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ngmap.models.graph import Cycle, DependencyGraph
    from ngmap.models.records import FileRecord
    from ngmap.models.report import ReportWarning


def compute_fan_stats(
    edges: list[tuple[str, str]],
) -> tuple[dict[str, int], dict[str, int]]:
    """Compute fan-in and fan-out statistics from edges."""
    fan_in: dict[str, int] = {}
    fan_out: dict[str, int] = {}

    for source, target in edges:
        fan_out[source] = fan_out.get(source, 0) + 1
        fan_in[target] = fan_in.get(target, 0) + 1

    return fan_in, fan_out


def _average(total: int, count: int) -> float:
    return round(total / count, 2) if count else 0.0


def compute_metrics(
    records: Sequence[FileRecord],
    graph: DependencyGraph,
    *,
    top_n: int = 10,
) -> CodeMetrics:
    """Derive size and coupling metrics.

    Ties in "largest files" and "most imported" are broken by path so the
    result does not depend on scan order.
    """
    total_lines = sum(record.line_count for record in records)
    total_functions = sum(len(record.functions) for record in records)

    largest = sorted(records, key=lambda r: (-r.line_count, r.relative_path))[:top_n]
    roles = Counter(record.role for record in records)

    fan_in, fan_out = compute_fan_stats(
        [(edge.source, edge.target) for edge in graph.edges]
    )
    most_imported = sorted(fan_in, key=lambda node: (-fan_in[node], node))[:top_n]

    return CodeMetrics(
        average_functions_per_file=_average(total_functions, len(records)),
        average_lines_per_file=_average(total_lines, len(records)),
        largest_files=[
            FileSize(path=record.relative_path, lines=record.line_count)
            for record in largest
        ],
        role_counts=dict(sorted(roles.items())),
        fan_in=dict(sorted(fan_in.items())),
        fan_out=dict(sorted(fan_out.items())),
        most_imported=most_imported,
    )


def build_inventory(records: Sequence[FileRecord]) -> Inventory:
    """Collect modules, components and services from decorator metadata."""
    inventory = Inventory()

    for record in records:
        for cls in record.classes:
            meta = cls.metadata
            if meta is None:
                continue
            if meta.decorator == "NgModule":
                inventory.modules.append(
                    ModuleSummary(
                        name=cls.name,
                        path=record.relative_path,
                        declarations=meta.declarations,
                        imports=meta.imports,
                        exports=meta.exports,
                        providers=meta.providers,
                    )
                )
            elif meta.decorator == "Component":
                inventory.components.append(
                    ComponentSummary(
                        name=cls.name,
                        path=record.relative_path,
                        selector=meta.selector,
                        template_url=meta.template_url,
                        style_urls=meta.style_urls,
                        standalone=bool(meta.standalone),
                    )
                )
            elif meta.decorator == "Injectable" and record.role == "service":
                inventory.services.append(
                    ServiceSummary(
                        name=cls.name,
                        path=record.relative_path,
                        provided_in=meta.provided_in,
                    )
                )

    return inventory


def build_summary(
    records: Sequence[FileRecord],
    cycles: Sequence[Cycle],
    warnings: Sequence[ReportWarning],
    *,
    cache_enabled: bool,
    cache_hits: int = 0,
    cache_misses: int = 0,
) -> ReportSummary:
    error_cycles = sum(1 for cycle in cycles if cycle.severity == "error")
    return ReportSummary(
        total_files=len(records),
        total_lines=sum(record.line_count for record in records),
        total_functions=sum(len(record.functions) for record in records),
        total_classes=sum(len(record.classes) for record in records),
        cache_enabled=cache_enabled,
        cache_hits=cache_hits,
        cache_misses=cache_misses,
        error_cycles=error_cycles,
        warning_cycles=len(cycles) - error_cycles,
        warning_count=len(warnings),
        healthy=not cycles and not warnings,
    )


__all__ = [
    "build_inventory",
    "build_summary",
    "compute_fan_stats",
    "compute_metrics",
]
