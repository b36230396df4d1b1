"""Exception taxonomy for ngmap runs.

Only :class:`RootUnreadable` aborts a run. Every other error is recovered
where it happens and surfaced as a warning in the final report.
"""

from __future__ import annotations


class NgMapError(Exception):
    """Base class for ngmap errors.

    ``path`` names the file or directory the error is about, when there is one.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ExtractionError(NgMapError):
    """Raised when a single source file cannot be read or parsed."""


class ScanError(NgMapError):
    """Raised when a directory below the project root cannot be listed."""


class CacheVersionMismatch(NgMapError):
    """Raised when a persisted cache was written by another engine version."""


class CacheCorrupt(NgMapError):
    """Raised when a persisted cache cannot be decoded or validated."""


class RootUnreadable(NgMapError):
    """Raised when the project root itself cannot be listed."""


__all__ = [
    "CacheCorrupt",
    "CacheVersionMismatch",
    "ExtractionError",
    "NgMapError",
    "RootUnreadable",
    "ScanError",
]
