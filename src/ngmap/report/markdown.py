"""Markdown rendering of analysis reports.

Cycles and warnings are rendered as separate sections. A run with neither
is stated to be healthy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ngmap.utils import pluralize

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ngmap.models.graph import Cycle
    from ngmap.models.report import AnalysisReport, ReportWarning

HEALTHY_MESSAGE = "No dependency cycles and no warnings: the project is healthy."
NO_CYCLES_MESSAGE = "No dependency cycles found."

_SEVERITY_MARKERS = {"error": "ERROR", "warning": "WARNING"}


def _table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> list[str]:
    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join("---" for _ in headers) + "|",
    ]
    lines.extend("| " + " | ".join(str(cell) for cell in row) + " |" for row in rows)
    lines.append("")
    return lines


def _cycle_lines(cycles: Sequence[Cycle]) -> list[str]:
    if not cycles:
        return [NO_CYCLES_MESSAGE, ""]

    lines: list[str] = []
    for number, cycle in enumerate(cycles, start=1):
        marker = _SEVERITY_MARKERS[cycle.severity]
        lines.append(
            f"### Cycle {number} [{marker}] {cycle.type} "
            f"({pluralize(len(cycle.members), 'file')})"
        )
        lines.append("")
        lines.extend(
            f"{index}. `{member}`"
            for index, member in enumerate(cycle.members, start=1)
        )
        lines.append(f"   ↺ back to `{cycle.members[0]}`")
        lines.append("")
    return lines


def _warning_lines(warnings: Sequence[ReportWarning]) -> list[str]:
    lines: list[str] = []
    for warning in warnings:
        where = f" `{warning.path}`" if warning.path else ""
        lines.append(f"- [{warning.category.upper()}]{where}: {warning.message}")
    lines.append("")
    return lines


def _health_lines(report: AnalysisReport) -> list[str]:
    if report.healthy:
        return [HEALTHY_MESSAGE, ""]
    summary = report.summary
    return [
        f"- **Error cycles**: {summary.error_cycles}",
        f"- **Warning cycles**: {summary.warning_cycles}",
        f"- **Warnings**: {summary.warning_count}",
        "",
    ]


def render_markdown(report: AnalysisReport) -> str:
    summary = report.summary
    metrics = report.metrics
    inventory = report.inventory

    lines = [
        "# Project Analysis Report",
        "",
        f"**Analyzed At**: {report.analyzed_at}",
        "",
        "## Summary",
        "",
        f"- **Project Path**: {report.project_path}",
        f"- **Total Files**: {summary.total_files}",
        f"- **Total Lines**: {summary.total_lines}",
        f"- **Total Functions**: {summary.total_functions}",
        f"- **Total Classes**: {summary.total_classes}",
    ]
    if summary.cache_enabled:
        lines.append(
            f"- **Cache**: {summary.cache_hits} hits, {summary.cache_misses} misses"
        )
    else:
        lines.append("- **Cache**: disabled")
    lines.append("")

    lines.extend(["## Health", ""])
    lines.extend(_health_lines(report))

    lines.extend(["## Metrics", ""])
    lines.append(
        f"- **Average Functions/File**: {metrics.average_functions_per_file:.2f}"
    )
    lines.append(f"- **Average Lines/File**: {metrics.average_lines_per_file:.2f}")
    lines.append("")

    if metrics.role_counts:
        lines.extend(["## File Roles", ""])
        lines.extend(_table(["Role", "Count"], list(metrics.role_counts.items())))

    lines.extend([f"## Modules ({len(inventory.modules)})", ""])
    lines.extend(f"- **{m.name}** ({m.path})" for m in inventory.modules)
    lines.append("")

    lines.extend([f"## Components ({len(inventory.components)})", ""])
    for c in inventory.components:
        selector = f" `<{c.selector}>`" if c.selector else ""
        lines.append(f"- **{c.name}**{selector} ({c.path})")
    lines.append("")

    lines.extend([f"## Services ({len(inventory.services)})", ""])
    lines.extend(f"- **{s.name}** ({s.path})" for s in inventory.services)
    lines.append("")

    if metrics.largest_files:
        lines.extend(["## Largest Files", ""])
        rows = [(f.path, f.lines) for f in metrics.largest_files]
        lines.extend(_table(["File", "Lines"], rows))

    if metrics.most_imported:
        lines.extend(["## Most Imported Files", ""])
        lines.extend(
            _table(
                ["File", "Imported By"],
                [(node, metrics.fan_in[node]) for node in metrics.most_imported],
            )
        )

    lines.extend([f"## Dependency Cycles ({len(report.cycles)})", ""])
    lines.extend(_cycle_lines(report.cycles))

    if report.warnings:
        lines.extend([f"## Warnings ({len(report.warnings)})", ""])
        lines.extend(_warning_lines(report.warnings))

    return "\n".join(lines)


def render_cycles_markdown(report: AnalysisReport) -> str:
    """Render only the cycle and warning sections of a report."""
    lines = [
        "# Dependency Cycles",
        "",
        f"- **Files**: {report.summary.total_files}",
        f"- **Dependencies**: {len(report.graph.edges)}",
        f"- **Cycles**: {len(report.cycles)}",
        "",
    ]
    if report.healthy:
        lines.extend([HEALTHY_MESSAGE, ""])
    else:
        lines.extend(_cycle_lines(report.cycles))

    if report.warnings:
        lines.extend([f"## Warnings ({len(report.warnings)})", ""])
        lines.extend(_warning_lines(report.warnings))

    return "\n".join(lines)


__all__ = ["HEALTHY_MESSAGE", "render_cycles_markdown", "render_markdown"]
