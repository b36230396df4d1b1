"""Run a complete analysis of one project tree."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from ngmap.analysis.summaries import build_inventory, build_summary, compute_metrics
from ngmap.cache.store import FileFingerprint, IncrementalCache, fingerprint_bytes
from ngmap.graph.builder import build_dependency_graph
from ngmap.graph.cycles import detect_cycles
from ngmap.models.report import AnalysisReport, ReportWarning
from ngmap.parse.resolve import refresh_imports
from ngmap.parse.treesitter_source import extract_source
from ngmap.rules.config import load_config, resolve_cache_file
from ngmap.rules.roles import classify_record
from ngmap.scan.files import scan_source_files

if TYPE_CHECKING:
    from ngmap.models.records import FileRecord
    from ngmap.rules.config import NgMapConfig

logger = logging.getLogger(__name__)


def _read_with_fingerprint(path: Path) -> tuple[bytes | None, FileFingerprint | None]:
    """Read a file once for both hashing and parsing.

    Returns ``(None, None)`` when the file cannot be read; extraction then
    reports the failure.
    """
    try:
        mtime_ns = path.stat().st_mtime_ns
        data = path.read_bytes()
    except OSError as exc:
        logger.debug("Cannot fingerprint %s: %s", path, exc)
        return None, None
    return data, fingerprint_bytes(data, mtime_ns)


def _open_cache(
    root: Path, config: NgMapConfig, warnings: list[ReportWarning]
) -> IncrementalCache:
    cache = IncrementalCache(resolve_cache_file(root, config), root)
    cache.load()
    if cache.problem is not None:
        warnings.append(
            ReportWarning(
                category="cache",
                message=cache.problem,
                path=cache.cache_file.as_posix(),
            )
        )
    return cache


def _extract_all(
    files: list[Path],
    root: Path,
    config: NgMapConfig,
    cache: IncrementalCache | None,
    warnings: list[ReportWarning],
) -> tuple[list[FileRecord], int, int]:
    """Extract (or restore) one record per scanned file, in scan order."""
    records: list[FileRecord] = []
    hits = 0
    misses = 0

    for path in files:
        data, fingerprint = _read_with_fingerprint(path)

        record = None
        if cache is not None and fingerprint is not None:
            record = cache.get(path, fingerprint)

        if record is not None:
            hits += 1
            logger.debug("Cache hit: %s", path)
            record = refresh_imports(record, config.extensions)
        else:
            misses += 1
            record = extract_source(
                path, root, extensions=config.extensions, source_bytes=data
            )
            if cache is not None and fingerprint is not None:
                cache.put(path, record, fingerprint)

        if record.parse_error is not None:
            warnings.append(
                ReportWarning(
                    category="extraction",
                    message=record.parse_error,
                    path=record.relative_path,
                )
            )
        records.append(classify_record(record))

    return records, hits, misses


def _save_cache(
    cache: IncrementalCache, files: list[Path], warnings: list[ReportWarning]
) -> None:
    cache.prune(files)
    try:
        cache.save()
    except OSError as exc:
        logger.warning("Cannot write cache %s: %s", cache.cache_file, exc)
        warnings.append(
            ReportWarning(
                category="cache",
                message=f"Cannot write cache: {exc}",
                path=cache.cache_file.as_posix(),
            )
        )


def run_analysis(
    root: Path,
    *,
    use_cache: bool = True,
    config: NgMapConfig | None = None,
) -> AnalysisReport:
    """Analyze every source file under ``root``.

    Args:
        root: Project root directory
        use_cache: Reuse and update the persisted incremental cache
        config: Optional configuration; loaded from ``ngmap.toml`` if omitted

    Returns:
        The complete AnalysisReport. Per-file and per-directory failures are
        reported as warnings inside it.

    Raises:
        RootUnreadable: If ``root`` cannot be listed.
        ConfigError: If the configuration is invalid.
    """
    root = Path(root).expanduser().resolve()
    if config is None:
        config = load_config(root)

    scan = scan_source_files(
        root,
        extensions=config.extensions,
        exclude_dirs=config.exclude_dirs,
        test_suffixes=config.test_suffixes,
        exclude_patterns=config.exclude,
        respect_gitignore=config.respect_gitignore,
        nested_gitignore=config.nested_gitignore,
    )
    logger.info("Found %d source files under %s", len(scan.files), root)

    warnings = [
        ReportWarning(category="scan", message=str(err), path=err.path)
        for err in scan.errors
    ]

    cache = _open_cache(root, config, warnings) if use_cache else None
    records, hits, misses = _extract_all(scan.files, root, config, cache, warnings)

    graph = build_dependency_graph(records)
    cycles = detect_cycles(graph)

    if cache is not None:
        _save_cache(cache, scan.files, warnings)
        if records:
            logger.info(
                "Cache hit rate: %d/%d (%.1f%%)",
                hits,
                len(records),
                100.0 * hits / len(records),
            )

    logger.info(
        "Graph has %d nodes, %d edges and %d cycles",
        len(graph.nodes),
        len(graph.edges),
        len(cycles),
    )

    summary = build_summary(
        records,
        cycles,
        warnings,
        cache_enabled=cache is not None,
        cache_hits=hits,
        cache_misses=misses,
    )
    return AnalysisReport(
        project_path=root.as_posix(),
        analyzed_at=datetime.now(timezone.utc).isoformat(),
        summary=summary,
        metrics=compute_metrics(records, graph, top_n=config.top_n),
        inventory=build_inventory(records),
        files=records,
        graph=graph,
        cycles=cycles,
        warnings=warnings,
    )


def clear_cache(root: Path, *, config: NgMapConfig | None = None) -> bool:
    """Delete the persisted cache of ``root``; return True if one existed."""
    root = Path(root).expanduser().resolve()
    if config is None:
        config = load_config(root)
    cache = IncrementalCache(resolve_cache_file(root, config), root)
    return cache.clear()


__all__ = ["clear_cache", "run_analysis"]
