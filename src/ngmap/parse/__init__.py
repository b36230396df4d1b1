"""Parsing utilities for ngmap."""

from ngmap.parse.resolve import (
    classify_import,
    import_category,
    refresh_imports,
    resolve_import_path,
)
from ngmap.parse.treesitter_source import extract_source

__all__ = [
    "classify_import",
    "extract_source",
    "import_category",
    "refresh_imports",
    "resolve_import_path",
]
