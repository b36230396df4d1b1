"""Model namespace for ngmap records, graphs, caches and reports."""

from ngmap.models.cache import CacheDocument, CacheEntry
from ngmap.models.graph import Cycle, DependencyGraph, GraphEdge, GraphNode
from ngmap.models.records import (
    ClassInfo,
    DecoratorMetadata,
    ExportRef,
    FileRecord,
    FunctionInfo,
    ImportRef,
)
from ngmap.models.report import AnalysisReport, ReportSummary, ReportWarning

__all__ = [
    "AnalysisReport",
    "CacheDocument",
    "CacheEntry",
    "ClassInfo",
    "Cycle",
    "DecoratorMetadata",
    "DependencyGraph",
    "ExportRef",
    "FileRecord",
    "FunctionInfo",
    "GraphEdge",
    "GraphNode",
    "ImportRef",
    "ReportSummary",
    "ReportWarning",
]
