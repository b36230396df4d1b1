from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from ngmap.analysis.orchestrator import clear_cache, run_analysis
from ngmap.errors import RootUnreadable
from ngmap.rules.config import ConfigError, NgMapConfig

FIXTURE_ROOT = Path(__file__).parent / "fixtures" / "mini_app"


def _copy_mini_app(tmp_path: Path) -> Path:
    repo_root = tmp_path / "repo"
    shutil.copytree(FIXTURE_ROOT, repo_root)
    return repo_root


def test_report_from_fixture(tmp_path: Path) -> None:
    repo_root = _copy_mini_app(tmp_path)

    report = run_analysis(repo_root, use_cache=False)

    assert report.summary.total_files == 8
    assert len(report.graph.nodes) == report.summary.total_files
    roles = {node.id: node.role for node in report.graph.nodes}
    assert roles == {
        "src/app/app.component.ts": "component",
        "src/app/app.module.ts": "module",
        "src/app/broken.ts": "unknown",
        "src/app/core/auth.guard.ts": "guard",
        "src/app/core/auth.service.ts": "service",
        "src/app/core/user.service.ts": "service",
        "src/app/models/user.model.ts": "model",
        "src/app/shared/index.ts": "utility",
    }
    assert len(report.graph.edges) == 8
    assert report.summary.total_classes == 5
    assert report.summary.total_functions == 12


def test_fixture_cycle_and_warning_are_reported_separately(tmp_path: Path) -> None:
    repo_root = _copy_mini_app(tmp_path)

    report = run_analysis(repo_root, use_cache=False)

    assert [(c.members, c.type, c.severity) for c in report.cycles] == [
        (
            ["src/app/core/user.service.ts", "src/app/core/auth.service.ts"],
            "service",
            "error",
        )
    ]
    assert [(w.category, w.path) for w in report.warnings] == [
        ("extraction", "src/app/broken.ts")
    ]
    assert report.has_error_cycles
    assert report.summary.error_cycles == 1
    assert report.summary.warning_count == 1
    assert report.summary.healthy is False


def test_inventory_and_metrics(tmp_path: Path) -> None:
    repo_root = _copy_mini_app(tmp_path)

    report = run_analysis(repo_root, use_cache=False, config=NgMapConfig(top_n=2))

    inventory = report.inventory
    assert [m.name for m in inventory.modules] == ["AppModule"]
    assert inventory.modules[0].declarations == ["AppComponent"]
    assert [(c.name, c.selector) for c in inventory.components] == [
        ("AppComponent", "app-root")
    ]
    assert [s.name for s in inventory.services] == ["AuthService", "UserService"]

    metrics = report.metrics
    assert len(metrics.largest_files) == 2
    assert metrics.most_imported == [
        "src/app/core/user.service.ts",
        "src/app/core/auth.service.ts",
    ]
    assert metrics.fan_in["src/app/core/user.service.ts"] == 3
    assert metrics.role_counts["service"] == 2


def test_healthy_project(tmp_path: Path) -> None:
    (tmp_path / "a.ts").write_text("import { b } from './b';\n", encoding="utf-8")
    (tmp_path / "b.ts").write_text("export const b = 1;\n", encoding="utf-8")

    report = run_analysis(tmp_path, use_cache=False)

    assert report.cycles == []
    assert report.warnings == []
    assert report.healthy
    assert report.summary.healthy is True


def test_second_run_hits_cache_with_identical_records(tmp_path: Path) -> None:
    repo_root = _copy_mini_app(tmp_path)

    first = run_analysis(repo_root)
    second = run_analysis(repo_root)

    assert first.summary.cache_hits == 0
    assert first.summary.cache_misses == 8
    assert second.summary.cache_hits == 8
    assert second.summary.cache_misses == 0
    assert second.files == first.files
    assert second.graph == first.graph
    assert second.cycles == first.cycles
    assert second.warnings == first.warnings
    assert (repo_root / ".cache" / "analysis-cache.json").is_file()


def test_changed_file_is_reextracted(tmp_path: Path) -> None:
    repo_root = _copy_mini_app(tmp_path)
    run_analysis(repo_root)

    guard = repo_root / "src" / "app" / "core" / "auth.guard.ts"
    guard.write_text(
        guard.read_text(encoding="utf-8") + "\nexport const extra = 1;\n",
        encoding="utf-8",
    )

    report = run_analysis(repo_root)

    assert report.summary.cache_misses == 1
    assert report.summary.cache_hits == 7


def test_cached_records_follow_new_files(tmp_path: Path) -> None:
    (tmp_path / "a.ts").write_text("import { b } from './b';\n", encoding="utf-8")
    first = run_analysis(tmp_path)
    assert first.graph.edges == []

    (tmp_path / "b.ts").write_text("export const b = 1;\n", encoding="utf-8")
    second = run_analysis(tmp_path)

    assert second.summary.cache_hits == 1
    assert [(e.source, e.target) for e in second.graph.edges] == [("a.ts", "b.ts")]


def test_no_cache_leaves_no_cache_file(tmp_path: Path) -> None:
    repo_root = _copy_mini_app(tmp_path)

    report = run_analysis(repo_root, use_cache=False)

    assert report.summary.cache_enabled is False
    assert not (repo_root / ".cache").exists()


def test_corrupt_cache_becomes_warning(tmp_path: Path) -> None:
    (tmp_path / "a.ts").write_text("export const a = 1;\n", encoding="utf-8")
    cache_file = tmp_path / ".cache" / "analysis-cache.json"
    cache_file.parent.mkdir()
    cache_file.write_text("{oops", encoding="utf-8")

    report = run_analysis(tmp_path)

    assert [w.category for w in report.warnings] == ["cache"]
    assert report.summary.cache_misses == 1


def test_repeated_runs_are_idempotent(tmp_path: Path) -> None:
    repo_root = _copy_mini_app(tmp_path)

    runs = [run_analysis(repo_root, use_cache=False) for _ in range(2)]

    assert runs[0].graph == runs[1].graph
    assert runs[0].cycles == runs[1].cycles
    assert runs[0].files == runs[1].files


def test_clear_cache(tmp_path: Path) -> None:
    repo_root = _copy_mini_app(tmp_path)
    run_analysis(repo_root)

    assert clear_cache(repo_root) is True
    assert not (repo_root / ".cache" / "analysis-cache.json").exists()
    assert clear_cache(repo_root) is False


def test_unreadable_root_raises(tmp_path: Path) -> None:
    with pytest.raises(RootUnreadable):
        run_analysis(tmp_path / "missing")


def test_invalid_config_raises(tmp_path: Path) -> None:
    (tmp_path / "ngmap.toml").write_text('cache_dir = "../escape"\n', encoding="utf-8")
    (tmp_path / "a.ts").write_text("export const a = 1;\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        run_analysis(tmp_path)
