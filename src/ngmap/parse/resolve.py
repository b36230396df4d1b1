"""Relative import resolution.

Only sources that start with ``.`` are candidates for local files. They are
resolved against the importing file's directory by trying, in order:

1. the literal path,
2. the path with each source extension appended,
3. the path as a directory holding ``index`` plus each source extension.

The first regular file that exists wins. Path aliases (``@app/...``) and
bundler-specific resolution are not supported: such imports are reported as
external.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ngmap.models.records import FileRecord, ImportCategory, ImportKind

INDEX_STEM = "index"


def is_relative_source(source: str) -> bool:
    return source.startswith(".")


def import_category(source: str) -> ImportCategory:
    """Group an import source the way the report lists them."""
    if source.startswith("@angular/"):
        return "angular"
    if source.startswith((".", "/")):
        return "relative"
    return "third-party"


def _candidates(base: Path, extensions: Sequence[str]) -> list[Path]:
    candidates = [base]
    candidates.extend(Path(f"{base}{ext}") for ext in extensions)
    candidates.extend(base / f"{INDEX_STEM}{ext}" for ext in extensions)
    return candidates


def resolve_import_path(
    importer: Path,
    source: str,
    extensions: Sequence[str],
) -> Path | None:
    """Resolve a relative import source to an existing file.

    Args:
        importer: Absolute path of the importing file
        source: Import source as written (e.g. ``"../shared"``)
        extensions: Source extensions to try, in order

    Returns:
        Normalized absolute path of the target, or None if nothing matches.

    Examples:
        ``./user.service`` from ``/app/src/a.ts`` tries
        ``/app/src/user.service``, ``/app/src/user.service.ts`` and
        ``/app/src/user.service/index.ts``.
    """
    base = Path(os.path.normpath(importer.parent / source))
    for candidate in _candidates(base, extensions):
        if candidate.is_file():
            return candidate
    return None


def classify_import(
    importer: Path,
    source: str,
    extensions: Sequence[str],
) -> tuple[ImportKind, str | None]:
    """Return the import kind and resolved POSIX path for one source."""
    if not is_relative_source(source):
        return "external", None

    resolved = resolve_import_path(importer, source, extensions)
    if resolved is None:
        return "unresolved", None
    return "local", resolved.as_posix()


def refresh_imports(record: FileRecord, extensions: Sequence[str]) -> FileRecord:
    """Re-resolve the relative imports of a cached record against the disk.

    Cached records keep the resolution of the run that extracted them; files
    that appeared or disappeared since then would otherwise leave stale
    edges. External imports are returned unchanged.
    """
    importer = Path(record.path)
    refreshed = []
    changed = False
    for imp in record.imports:
        if imp.kind == "external":
            refreshed.append(imp)
            continue
        kind, resolved = classify_import(importer, imp.source, extensions)
        if kind != imp.kind or resolved != imp.resolved:
            changed = True
            imp = imp.model_copy(update={"kind": kind, "resolved": resolved})
        refreshed.append(imp)

    if not changed:
        return record
    return record.model_copy(update={"imports": refreshed})


__all__ = [
    "classify_import",
    "import_category",
    "is_relative_source",
    "refresh_imports",
    "resolve_import_path",
]
