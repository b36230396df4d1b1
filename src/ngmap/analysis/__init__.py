"""Analysis pipeline for ngmap."""

from ngmap.analysis.orchestrator import clear_cache, run_analysis
from ngmap.analysis.summaries import (
    build_inventory,
    build_summary,
    compute_fan_stats,
    compute_metrics,
)

__all__ = [
    "build_inventory",
    "build_summary",
    "clear_cache",
    "compute_fan_stats",
    "compute_metrics",
    "run_analysis",
]
