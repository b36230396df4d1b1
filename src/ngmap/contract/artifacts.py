"""Stable output contract for ngmap.

This module pins the schema versions and file names that other tools rely
on when they read a saved report or a persisted cache.
"""

from __future__ import annotations

from dataclasses import dataclass

# Bump when the shape of AnalysisReport changes.
REPORT_SCHEMA_VERSION = 1

# Bump when FileRecord or CacheEntry changes. A cache written under another
# version is discarded wholesale.
CACHE_SCHEMA_VERSION = 1

CACHE_FILENAME = "analysis-cache.json"
DEFAULT_CACHE_DIR = ".cache"


@dataclass(frozen=True)
class ReportFormat:
    """A rendering of the in-memory report.

    ``suffix`` is appended to a ``--save`` path that has none.
    """

    name: str
    suffix: str


REPORT_FORMATS: dict[str, ReportFormat] = {
    "json": ReportFormat(name="json", suffix=".json"),
    "md": ReportFormat(name="md", suffix=".md"),
}

GRAPH_FORMATS: dict[str, ReportFormat] = {
    "mermaid": ReportFormat(name="mermaid", suffix=".mmd"),
    "dot": ReportFormat(name="dot", suffix=".dot"),
}
