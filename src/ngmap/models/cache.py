"""Persisted cache models.

The cache file is one ``CacheDocument``: a version tag, the project path,
timestamps, and an explicit list of entries sorted by path.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ngmap.contract.artifacts import CACHE_SCHEMA_VERSION
from ngmap.models.records import FileRecord  # noqa: TC001


class CacheEntry(BaseModel):
    """Cached extraction result for one file."""

    path: str
    digest: str
    mtime_ns: int
    record: FileRecord


class CacheDocument(BaseModel):
    """Serialized form of the whole cache."""

    version: int = Field(default=CACHE_SCHEMA_VERSION)
    project_path: str
    created_at: str
    updated_at: str
    entries: list[CacheEntry] = Field(default_factory=list)


__all__ = ["CacheDocument", "CacheEntry"]
