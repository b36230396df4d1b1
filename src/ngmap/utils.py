"""Shared utilities for ngmap."""

from __future__ import annotations

from pathlib import Path


def relative_posix(file_path: str | Path, root: str | Path) -> str:
    """Return ``file_path`` relative to ``root`` as a POSIX string.

    Paths outside ``root`` are returned unchanged (as POSIX).

    Examples:
        >>> relative_posix("/app/src/main.ts", "/app")
        'src/main.ts'
        >>> relative_posix("/elsewhere/x.ts", "/app")
        '/elsewhere/x.ts'
    """
    path = Path(file_path)
    try:
        return path.relative_to(Path(root)).as_posix()
    except ValueError:
        return path.as_posix()


def pluralize(count: int, noun: str) -> str:
    """Format a count with a naively pluralized noun.

    Examples:
        >>> pluralize(1, "file")
        '1 file'
        >>> pluralize(3, "cycle")
        '3 cycles'
    """
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
