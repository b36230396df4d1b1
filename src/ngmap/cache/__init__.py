"""Incremental cache for ngmap."""

from ngmap.cache.store import (
    FileFingerprint,
    IncrementalCache,
    fingerprint_bytes,
    fingerprint_file,
)

__all__ = [
    "FileFingerprint",
    "IncrementalCache",
    "fingerprint_bytes",
    "fingerprint_file",
]
