"""Source file discovery for ngmap."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from fnmatch import fnmatch
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

from ngmap.errors import RootUnreadable, ScanError
from ngmap.rules.config import (
    DEFAULT_EXCLUDE_DIRS,
    DEFAULT_EXTENSIONS,
    DEFAULT_TEST_SUFFIXES,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Files found under a root, in deterministic order, plus recovered errors."""

    root: Path
    files: list[Path] = field(default_factory=list)
    errors: list[ScanError] = field(default_factory=list)


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return sorted list of .gitignore files under root (including root)."""
    gitignore_paths = [root / ".gitignore"]
    gitignore_paths.extend(root.rglob(".gitignore"))
    unique_paths = {path for path in gitignore_paths if path.is_file()}
    return sorted(unique_paths, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    gitignore_paths = _iter_gitignore_files(root)
    if not gitignore_paths:
        return None

    matchers = [parse_gitignore(path) for path in gitignore_paths]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                continue
        return False

    return matches


def is_test_file(
    name: str, extensions: Iterable[str], test_suffixes: Iterable[str]
) -> bool:
    """Return True for names such as ``app.component.spec.ts``."""
    return any(
        name.endswith(f"{suffix}{ext}")
        for ext in extensions
        for suffix in test_suffixes
    )


def _should_include_file(
    path: Path,
    root: Path,
    extensions: Sequence[str],
    test_suffixes: Sequence[str],
    gitignore_matches: Callable[[str], bool] | None,
    exclude_patterns: Sequence[str] | None,
) -> bool:
    """Check if a file should be included based on all filtering rules."""
    name = path.name
    if not any(name.endswith(ext) for ext in extensions):
        return False

    if is_test_file(name, extensions, test_suffixes):
        return False

    if path.is_symlink() or not path.is_file():
        return False

    if not _is_within_root(path, root):
        return False

    if gitignore_matches is not None and gitignore_matches(str(path)):
        return False

    rel_path_str = path.relative_to(root).as_posix()
    has_excluded_match = exclude_patterns and any(
        fnmatch(rel_path_str, pat) for pat in exclude_patterns
    )
    return not has_excluded_match


def _should_descend(path: Path, exclude_dirs: Sequence[str]) -> bool:
    name = path.name
    if name.startswith(".") or name in exclude_dirs:
        return False
    return not path.is_symlink()


def _list_directory(directory: Path) -> list[Path]:
    """List a directory sorted by entry name, raising ScanError on failure."""
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        msg = f"Cannot read directory {directory}: {exc.strerror or exc}"
        raise ScanError(msg, path=str(directory)) from exc
    return sorted(entries, key=lambda p: p.name)


def scan_source_files(
    root: Path,
    *,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    exclude_dirs: Sequence[str] = DEFAULT_EXCLUDE_DIRS,
    test_suffixes: Sequence[str] = DEFAULT_TEST_SUFFIXES,
    exclude_patterns: Sequence[str] | None = None,
    respect_gitignore: bool = False,
    nested_gitignore: bool = False,
) -> ScanResult:
    """Find all source files under ``root``.

    Args:
        root: Project root directory
        extensions: Recognized source extensions (e.g. ``[".ts"]``)
        exclude_dirs: Directory names never descended into; hidden
            directories are always skipped
        test_suffixes: Stem suffixes marking test files (``.spec``, ``.test``)
        exclude_patterns: Optional fnmatch patterns on the relative path
        respect_gitignore: Skip files matched by ``.gitignore``
        nested_gitignore: Compose nested ``.gitignore`` files as well

    Returns:
        ScanResult with absolute file paths, depth-first with entries of each
        directory visited in lexicographic name order, and one ScanError per
        subdirectory that could not be listed.

    Raises:
        RootUnreadable: If ``root`` is missing, not a directory, or cannot be
            listed.
    """
    root = root.expanduser().resolve()
    if not root.is_dir():
        msg = f"Project root is not a readable directory: {root}"
        raise RootUnreadable(msg, path=str(root))

    try:
        top_entries = _list_directory(root)
    except ScanError as exc:
        raise RootUnreadable(str(exc), path=str(root)) from exc

    gitignore_matches = None
    if respect_gitignore or nested_gitignore:
        gitignore_matches = _build_gitignore_matcher(
            root,
            nested_gitignore=nested_gitignore,
        )

    result = ScanResult(root=root)

    def walk(entries: list[Path]) -> None:
        for entry in entries:
            if entry.is_dir():
                if not _should_descend(entry, exclude_dirs):
                    continue
                try:
                    children = _list_directory(entry)
                except ScanError as exc:
                    logger.warning("%s", exc)
                    result.errors.append(exc)
                    continue
                walk(children)
            elif _should_include_file(
                entry,
                root,
                extensions,
                test_suffixes,
                gitignore_matches,
                exclude_patterns,
            ):
                result.files.append(entry)

    walk(top_entries)
    logger.debug("Scanned %s: %d source files", root, len(result.files))
    return result


__all__ = ["ScanResult", "is_test_file", "scan_source_files"]
