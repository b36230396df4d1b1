"""Determinism verification for ngmap analyses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ngmap.analysis.orchestrator import run_analysis
from ngmap.report.json_format import render_json

if TYPE_CHECKING:
    from pathlib import Path

    from ngmap.rules.config import NgMapConfig


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    mismatches: tuple[str, ...] = field(default_factory=tuple)


def verify_determinism(
    *, root: Path, config: NgMapConfig | None = None
) -> DeterminismResult:
    """Verify that two fresh analyses of ``root`` agree.

    Both runs bypass the cache. Their dependency graphs and cycle lists are
    rendered to JSON and compared byte-for-byte.

    Args:
        root: Project root to analyze.
        config: Optional configuration shared by both runs.

    Returns:
        DeterminismResult naming the parts (``graph``, ``cycles``) that
        differed.

    Raises:
        RootUnreadable: If ``root`` cannot be listed.
    """
    first = run_analysis(root, use_cache=False, config=config)
    second = run_analysis(root, use_cache=False, config=config)

    mismatches: list[str] = []
    if render_json(first.graph) != render_json(second.graph):
        mismatches.append("graph")
    if [render_json(c) for c in first.cycles] != [
        render_json(c) for c in second.cycles
    ]:
        mismatches.append("cycles")

    return DeterminismResult(ok=not mismatches, mismatches=tuple(mismatches))


__all__ = ["DeterminismResult", "verify_determinism"]
