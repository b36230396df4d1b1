"""Incremental analysis cache.

A file's cached record is reused only when its modification time is not
newer than the cached one and its SHA-256 digest still matches. The cache is
read once per run and written once per run.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

import orjson
from pydantic import ValidationError

from ngmap.contract.artifacts import CACHE_SCHEMA_VERSION
from ngmap.errors import CacheCorrupt, CacheVersionMismatch
from ngmap.models.cache import CacheDocument, CacheEntry

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ngmap.models.records import FileRecord

logger = logging.getLogger(__name__)


class FileFingerprint(NamedTuple):
    digest: str
    mtime_ns: int


def fingerprint_bytes(data: bytes, mtime_ns: int) -> FileFingerprint:
    return FileFingerprint(digest=hashlib.sha256(data).hexdigest(), mtime_ns=mtime_ns)


def fingerprint_file(path: Path) -> FileFingerprint:
    """Hash the file bytes and read its modification time.

    Raises:
        OSError: If the file cannot be read or stat'ed.
    """
    mtime_ns = path.stat().st_mtime_ns
    return fingerprint_bytes(path.read_bytes(), mtime_ns)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _cache_key(path: Path) -> str:
    return path.as_posix()


class IncrementalCache:
    """Content-hash and timestamp keyed store of FileRecords."""

    def __init__(
        self,
        cache_file: Path,
        project_path: Path,
        *,
        version: int = CACHE_SCHEMA_VERSION,
    ) -> None:
        self.cache_file = cache_file
        self.project_path = project_path
        self.version = version
        self.entries: dict[str, CacheEntry] = {}
        self.created_at: str | None = None
        self.problem: str | None = None

    def __len__(self) -> int:
        return len(self.entries)

    def _read_document(self) -> CacheDocument:
        try:
            payload = orjson.loads(self.cache_file.read_bytes())
        except (OSError, orjson.JSONDecodeError) as exc:
            msg = f"Cannot read cache {self.cache_file}: {exc}"
            raise CacheCorrupt(msg, path=str(self.cache_file)) from exc

        if isinstance(payload, dict) and payload.get("version") != self.version:
            msg = (
                f"Cache version {payload.get('version')!r} does not match "
                f"{self.version}"
            )
            raise CacheVersionMismatch(msg, path=str(self.cache_file))

        try:
            return CacheDocument.model_validate(payload)
        except ValidationError as exc:
            msg = f"Invalid cache {self.cache_file}: {exc.error_count()} errors"
            raise CacheCorrupt(msg, path=str(self.cache_file)) from exc

    def load(self) -> bool:
        """Load the persisted cache.

        Returns:
            True when entries were loaded. A missing, stale-version or corrupt
            file leaves the cache empty; corruption is also kept in
            ``problem`` so the caller can report it.
        """
        self.entries = {}
        self.problem = None
        if not self.cache_file.is_file():
            logger.info("No cache at %s", self.cache_file)
            return False

        try:
            document = self._read_document()
        except CacheVersionMismatch as exc:
            logger.info("Discarding cache: %s", exc)
            return False
        except CacheCorrupt as exc:
            logger.warning("Discarding cache: %s", exc)
            self.problem = str(exc)
            return False

        self.entries = {entry.path: entry for entry in document.entries}
        self.created_at = document.created_at
        logger.info(
            "Loaded %d cache entries from %s", len(self.entries), self.cache_file
        )
        return True

    def is_unchanged(
        self, path: Path, fingerprint: FileFingerprint | None = None
    ) -> bool:
        entry = self.entries.get(_cache_key(path))
        if entry is None:
            return False

        if fingerprint is None:
            try:
                fingerprint = fingerprint_file(path)
            except OSError:
                return False

        if fingerprint.mtime_ns > entry.mtime_ns:
            return False
        return fingerprint.digest == entry.digest

    def get(
        self, path: Path, fingerprint: FileFingerprint | None = None
    ) -> FileRecord | None:
        """Return the cached record for ``path`` if the file is unchanged."""
        if not self.is_unchanged(path, fingerprint):
            return None
        return self.entries[_cache_key(path)].record

    def put(
        self,
        path: Path,
        record: FileRecord,
        fingerprint: FileFingerprint | None = None,
    ) -> None:
        if fingerprint is None:
            try:
                fingerprint = fingerprint_file(path)
            except OSError as exc:
                logger.warning("Not caching %s: %s", path, exc)
                return

        key = _cache_key(path)
        self.entries[key] = CacheEntry(
            path=key,
            digest=fingerprint.digest,
            mtime_ns=fingerprint.mtime_ns,
            record=record,
        )

    def prune(self, keep: Iterable[Path]) -> int:
        """Drop entries for files not in ``keep``; return how many were dropped."""
        wanted = {_cache_key(path) for path in keep}
        stale = [key for key in self.entries if key not in wanted]
        for key in stale:
            del self.entries[key]
        if stale:
            logger.debug("Pruned %d stale cache entries", len(stale))
        return len(stale)

    def to_document(self) -> CacheDocument:
        now = _now()
        return CacheDocument(
            version=self.version,
            project_path=self.project_path.as_posix(),
            created_at=self.created_at or now,
            updated_at=now,
            entries=[self.entries[key] for key in sorted(self.entries)],
        )

    def save(self) -> None:
        """Write the cache atomically.

        Raises:
            OSError: If the cache directory or file cannot be written.
        """
        document = self.to_document()
        opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
        data = orjson.dumps(document.model_dump(mode="json"), option=opts)

        self.cache_file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.cache_file.parent,
            prefix=f".{self.cache_file.name}.",
            suffix=".tmp",
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_path, self.cache_file)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

        self.created_at = document.created_at
        logger.info("Saved %d cache entries to %s", len(self.entries), self.cache_file)

    def clear(self) -> bool:
        """Delete the persisted cache file; return True if one existed."""
        self.entries = {}
        self.created_at = None
        try:
            self.cache_file.unlink()
        except FileNotFoundError:
            return False
        logger.info("Removed cache %s", self.cache_file)
        return True


__all__ = [
    "FileFingerprint",
    "IncrementalCache",
    "fingerprint_bytes",
    "fingerprint_file",
]
