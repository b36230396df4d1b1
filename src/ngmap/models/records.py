"""Per-file extraction records.

This module contains the models produced by the source extractor and
consumed by the classifier, graph builder, cache and report.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

ImportKind = Literal["local", "external", "unresolved"]
ImportSpecifier = Literal["named", "default", "namespace", "side-effect"]
ImportCategory = Literal["angular", "third-party", "relative"]

ExportKind = Literal[
    "class",
    "function",
    "variable",
    "interface",
    "type",
    "enum",
    "namespace",
    "default",
    "binding",
    "reexport",
]

FunctionKind = Literal["function", "method", "constructor", "getter", "setter", "arrow"]

Role = Literal[
    "module",
    "component",
    "service",
    "pipe",
    "directive",
    "guard",
    "interceptor",
    "resolver",
    "model",
    "utility",
    "unknown",
]
Confidence = Literal["high", "medium", "low"]


class ImportRef(BaseModel):
    """A single import statement and the file it resolves to."""

    source: str
    resolved: str | None = None
    kind: ImportKind
    specifier: ImportSpecifier = "side-effect"
    names: list[str] = Field(default_factory=list)
    line: int = 0
    category: ImportCategory = "third-party"


class ExportRef(BaseModel):
    """An exported symbol name and its declaration kind."""

    name: str
    kind: ExportKind


class DecoratorMetadata(BaseModel):
    """Object-literal arguments of a role-defining decorator."""

    decorator: str
    selector: str | None = None
    template_url: str | None = None
    style_urls: list[str] = Field(default_factory=list)
    standalone: bool | None = None
    provided_in: str | None = None
    pipe_name: str | None = None
    imports: list[str] = Field(default_factory=list)
    exports: list[str] = Field(default_factory=list)
    declarations: list[str] = Field(default_factory=list)
    providers: list[str] = Field(default_factory=list)


class ClassInfo(BaseModel):
    """A declared class."""

    name: str
    implements: list[str] = Field(default_factory=list)
    extends: str | None = None
    decorators: list[str] = Field(default_factory=list)
    metadata: DecoratorMetadata | None = None
    line: int = 0


class FunctionInfo(BaseModel):
    """A declared function, method or variable-bound arrow function."""

    name: str
    kind: FunctionKind
    parameters: int = 0
    is_async: bool = False
    line: int = 0


class FileRecord(BaseModel):
    """Everything ngmap knows about one source file."""

    path: str
    relative_path: str
    line_count: int = 0
    annotations: list[str] = Field(default_factory=list)
    imports: list[ImportRef] = Field(default_factory=list)
    exports: list[ExportRef] = Field(default_factory=list)
    classes: list[ClassInfo] = Field(default_factory=list)
    functions: list[FunctionInfo] = Field(default_factory=list)
    role: Role = "unknown"
    role_label: str = "Unknown"
    confidence: Confidence = "low"
    parse_error: str | None = Field(
        default=None, description="Extraction failure message, if any"
    )

    @property
    def local_imports(self) -> list[ImportRef]:
        return [imp for imp in self.imports if imp.kind == "local"]


__all__ = [
    "ClassInfo",
    "Confidence",
    "DecoratorMetadata",
    "ExportKind",
    "ExportRef",
    "FileRecord",
    "FunctionInfo",
    "FunctionKind",
    "ImportCategory",
    "ImportKind",
    "ImportRef",
    "ImportSpecifier",
    "Role",
]
