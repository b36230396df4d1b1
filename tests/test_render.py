from __future__ import annotations

import json

from ngmap.models.graph import Cycle, DependencyGraph, GraphEdge, GraphNode
from ngmap.models.report import AnalysisReport, ReportSummary, ReportWarning
from ngmap.report.json_format import render_cycles_json, render_json
from ngmap.report.markdown import (
    HEALTHY_MESSAGE,
    render_cycles_markdown,
    render_markdown,
)


def _report(
    cycles: list[Cycle] | None = None, warnings: list[ReportWarning] | None = None
) -> AnalysisReport:
    cycles = cycles or []
    warnings = warnings or []
    errors = sum(1 for c in cycles if c.severity == "error")
    return AnalysisReport(
        project_path="/app",
        analyzed_at="2024-01-01T00:00:00+00:00",
        summary=ReportSummary(
            total_files=2,
            total_lines=10,
            total_functions=1,
            total_classes=2,
            cache_enabled=False,
            error_cycles=errors,
            warning_cycles=len(cycles) - errors,
            warning_count=len(warnings),
            healthy=not cycles and not warnings,
        ),
        graph=DependencyGraph(
            nodes=[
                GraphNode(id="a.ts", path="/app/a.ts", label="a.ts"),
                GraphNode(id="b.ts", path="/app/b.ts", label="b.ts"),
            ],
            edges=[
                GraphEdge(source="a.ts", target="b.ts"),
                GraphEdge(source="b.ts", target="a.ts"),
            ],
        ),
        cycles=cycles,
        warnings=warnings,
    )


_CYCLE = Cycle(members=["a.ts", "b.ts"], severity="error", type="service")
_WARNING = ReportWarning(category="extraction", message="Parse error", path="c.ts")


def test_json_is_sorted_and_complete() -> None:
    text = render_json(_report(cycles=[_CYCLE]))
    payload = json.loads(text)

    assert list(payload) == sorted(payload)
    assert payload["schema_version"] == 1
    assert payload["cycles"] == [
        {"members": ["a.ts", "b.ts"], "severity": "error", "type": "service"}
    ]
    assert payload["summary"]["error_cycles"] == 1


def test_json_rendering_is_stable() -> None:
    report = _report(cycles=[_CYCLE], warnings=[_WARNING])

    assert render_json(report) == render_json(report.model_copy(deep=True))


def test_cycles_json_keeps_warnings_separate() -> None:
    report = _report(cycles=[_CYCLE], warnings=[_WARNING])
    payload = json.loads(render_cycles_json(report))

    assert sorted(payload) == [
        "cycles",
        "healthy",
        "project_path",
        "summary",
        "warnings",
    ]
    assert payload["cycles"][0]["members"] == ["a.ts", "b.ts"]
    assert payload["warnings"] == [
        {"category": "extraction", "message": "Parse error", "path": "c.ts"}
    ]
    assert payload["healthy"] is False
    assert payload["summary"]["warning_count"] == 1


def test_cycles_json_warnings_without_cycles_is_not_healthy() -> None:
    payload = json.loads(render_cycles_json(_report(warnings=[_WARNING])))

    assert payload["cycles"] == []
    assert len(payload["warnings"]) == 1
    assert payload["healthy"] is False


def test_cycles_json_healthy() -> None:
    payload = json.loads(render_cycles_json(_report()))

    assert payload["healthy"] is True
    assert payload["cycles"] == []
    assert payload["warnings"] == []


def test_markdown_healthy_message() -> None:
    text = render_markdown(_report())

    assert HEALTHY_MESSAGE in text
    assert "## Warnings" not in text


def test_markdown_lists_cycles_and_warnings_separately() -> None:
    text = render_markdown(_report(cycles=[_CYCLE], warnings=[_WARNING]))

    assert HEALTHY_MESSAGE not in text
    cycles_at = text.index("## Dependency Cycles (1)")
    warnings_at = text.index("## Warnings (1)")
    assert cycles_at < warnings_at
    assert "1. `a.ts`" in text
    assert "2. `b.ts`" in text
    assert "↺ back to `a.ts`" in text
    assert "[ERROR] service" in text
    assert "- [EXTRACTION] `c.ts`: Parse error" in text


def test_markdown_warnings_without_cycles_is_not_healthy() -> None:
    text = render_markdown(_report(warnings=[_WARNING]))

    assert HEALTHY_MESSAGE not in text
    assert "No dependency cycles found." in text
    assert "## Warnings (1)" in text


def test_cycles_markdown() -> None:
    healthy = render_cycles_markdown(_report())
    broken = render_cycles_markdown(_report(cycles=[_CYCLE]))

    assert HEALTHY_MESSAGE in healthy
    assert "### Cycle 1 [ERROR] service (2 files)" in broken


def test_report_health_comes_from_summary() -> None:
    report = _report(warnings=[_WARNING])
    summary = report.summary.model_copy(update={"healthy": True})

    assert report.healthy is False
    assert report.model_copy(update={"summary": summary}).healthy is True
