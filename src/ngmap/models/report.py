"""Analysis report models.

The report is the single in-memory result of a run. Every rendering (JSON,
Markdown) and the CLI exit code are derived from it.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ngmap.contract.artifacts import REPORT_SCHEMA_VERSION
from ngmap.models.graph import Cycle, DependencyGraph
from ngmap.models.records import FileRecord

WarningCategory = Literal["scan", "extraction", "cache"]


class ReportWarning(BaseModel):
    """A non-fatal problem recovered during the run."""

    category: WarningCategory
    message: str
    path: str | None = None


class ReportSummary(BaseModel):
    """Headline counts."""

    total_files: int
    total_lines: int
    total_functions: int
    total_classes: int
    cache_enabled: bool
    cache_hits: int = 0
    cache_misses: int = 0
    error_cycles: int = 0
    warning_cycles: int = 0
    warning_count: int = 0
    healthy: bool = True


class FileSize(BaseModel):
    path: str
    lines: int


class CodeMetrics(BaseModel):
    """Derived size and coupling metrics."""

    average_functions_per_file: float = 0.0
    average_lines_per_file: float = 0.0
    largest_files: list[FileSize] = Field(default_factory=list)
    role_counts: dict[str, int] = Field(default_factory=dict)
    fan_in: dict[str, int] = Field(default_factory=dict)
    fan_out: dict[str, int] = Field(default_factory=dict)
    most_imported: list[str] = Field(default_factory=list)


class ModuleSummary(BaseModel):
    name: str
    path: str
    declarations: list[str] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)
    exports: list[str] = Field(default_factory=list)
    providers: list[str] = Field(default_factory=list)


class ComponentSummary(BaseModel):
    name: str
    path: str
    selector: str | None = None
    template_url: str | None = None
    style_urls: list[str] = Field(default_factory=list)
    standalone: bool = False


class ServiceSummary(BaseModel):
    name: str
    path: str
    provided_in: str | None = None


class Inventory(BaseModel):
    """Framework building blocks found in the project."""

    modules: list[ModuleSummary] = Field(default_factory=list)
    components: list[ComponentSummary] = Field(default_factory=list)
    services: list[ServiceSummary] = Field(default_factory=list)


class AnalysisReport(BaseModel):
    """Complete result of one analysis run."""

    schema_version: int = Field(default=REPORT_SCHEMA_VERSION)
    project_path: str
    analyzed_at: str
    summary: ReportSummary
    metrics: CodeMetrics = Field(default_factory=CodeMetrics)
    inventory: Inventory = Field(default_factory=Inventory)
    files: list[FileRecord] = Field(default_factory=list)
    graph: DependencyGraph = Field(default_factory=DependencyGraph)
    cycles: list[Cycle] = Field(default_factory=list)
    warnings: list[ReportWarning] = Field(default_factory=list)

    @property
    def has_error_cycles(self) -> bool:
        return any(cycle.severity == "error" for cycle in self.cycles)

    @property
    def healthy(self) -> bool:
        return self.summary.healthy


__all__ = [
    "AnalysisReport",
    "CodeMetrics",
    "ComponentSummary",
    "FileSize",
    "Inventory",
    "ModuleSummary",
    "ReportSummary",
    "ReportWarning",
    "ServiceSummary",
    "WarningCategory",
]
