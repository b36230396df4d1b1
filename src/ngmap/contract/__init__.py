"""Stable contract surface for ngmap reports and caches."""

from ngmap.contract.artifacts import (
    CACHE_FILENAME,
    CACHE_SCHEMA_VERSION,
    DEFAULT_CACHE_DIR,
    GRAPH_FORMATS,
    REPORT_FORMATS,
    REPORT_SCHEMA_VERSION,
    ReportFormat,
)

__all__ = [
    "CACHE_FILENAME",
    "CACHE_SCHEMA_VERSION",
    "DEFAULT_CACHE_DIR",
    "GRAPH_FORMATS",
    "REPORT_FORMATS",
    "REPORT_SCHEMA_VERSION",
    "ReportFormat",
]
