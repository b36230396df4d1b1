"""JSON rendering of analysis reports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from pydantic import BaseModel

    from ngmap.models.report import AnalysisReport

_OPTS = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2


def _dumps(payload: Any) -> str:
    return orjson.dumps(payload, option=_OPTS).decode("utf-8")


def render_json(model: BaseModel) -> str:
    """Render a report (or any model) as indented JSON with sorted keys."""
    return _dumps(model.model_dump(mode="json"))


def render_cycles_json(report: AnalysisReport) -> str:
    """Render the cycle view of a report.

    Warnings stay in their own list next to the cycles, and ``healthy`` is
    true only when both lists are empty.
    """
    payload = {
        "project_path": report.project_path,
        "healthy": report.healthy,
        "summary": report.summary.model_dump(mode="json"),
        "cycles": [cycle.model_dump(mode="json") for cycle in report.cycles],
        "warnings": [warning.model_dump(mode="json") for warning in report.warnings],
    }
    return _dumps(payload)


__all__ = ["render_cycles_json", "render_json"]
