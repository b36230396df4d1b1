from __future__ import annotations

import os
import shutil
from pathlib import Path

import pytest

from ngmap.errors import RootUnreadable
from ngmap.scan.files import _build_gitignore_matcher, is_test_file, scan_source_files

FIXTURE_ROOT = Path(__file__).parent / "fixtures" / "mini_app"


def _relative(paths: list[Path], root: Path) -> list[str]:
    return [path.relative_to(root).as_posix() for path in paths]


def test_scan_fixture_is_ordered_and_filtered() -> None:
    result = scan_source_files(FIXTURE_ROOT)

    assert _relative(result.files, result.root) == [
        "src/app/app.component.ts",
        "src/app/app.module.ts",
        "src/app/broken.ts",
        "src/app/core/auth.guard.ts",
        "src/app/core/auth.service.ts",
        "src/app/core/user.service.ts",
        "src/app/models/user.model.ts",
        "src/app/shared/index.ts",
    ]
    assert result.errors == []


def test_scan_skips_hidden_and_excluded_dirs(tmp_path: Path) -> None:
    for rel in (
        "src/a.ts",
        ".angular/cache.ts",
        "dist/main.ts",
        "coverage/lcov.ts",
        "node_modules/x/index.ts",
        "src/b.test.ts",
        "src/c.js",
    ):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("export const x = 1;\n", encoding="utf-8")

    result = scan_source_files(tmp_path)

    assert _relative(result.files, result.root) == ["src/a.ts"]


def test_scan_honors_custom_extensions_and_exclude_patterns(tmp_path: Path) -> None:
    (tmp_path / "a.ts").write_text("", encoding="utf-8")
    (tmp_path / "b.tsx").write_text("", encoding="utf-8")
    (tmp_path / "gen").mkdir()
    (tmp_path / "gen" / "api.ts").write_text("", encoding="utf-8")

    result = scan_source_files(
        tmp_path,
        extensions=[".ts", ".tsx"],
        exclude_patterns=["gen/*"],
    )

    assert _relative(result.files, result.root) == ["a.ts", "b.tsx"]


def test_is_test_file() -> None:
    assert is_test_file("app.component.spec.ts", [".ts"], [".spec", ".test"])
    assert is_test_file("util.test.ts", [".ts"], [".spec", ".test"])
    assert not is_test_file("spec.service.ts", [".ts"], [".spec", ".test"])


def test_scan_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(RootUnreadable) as exc_info:
        scan_source_files(tmp_path / "missing")

    assert exc_info.value.path == str((tmp_path / "missing").resolve())


def test_scan_file_root_raises(tmp_path: Path) -> None:
    file_root = tmp_path / "main.ts"
    file_root.write_text("", encoding="utf-8")

    with pytest.raises(RootUnreadable):
        scan_source_files(file_root)


def test_scan_unreadable_subdirectory_becomes_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "ok").mkdir()
    (tmp_path / "ok" / "a.ts").write_text("", encoding="utf-8")
    locked = tmp_path / "locked"
    locked.mkdir()
    (locked / "b.ts").write_text("", encoding="utf-8")

    original_iterdir = Path.iterdir

    def _iterdir(self: Path):  # type: ignore[no-untyped-def]
        if self.name == "locked":
            raise PermissionError(13, "Permission denied")
        return original_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", _iterdir)

    result = scan_source_files(tmp_path)

    assert _relative(result.files, result.root) == ["ok/a.ts"]
    assert len(result.errors) == 1
    assert result.errors[0].path == str(locked.resolve())
    assert "Permission denied" in str(result.errors[0])


def test_scan_respects_gitignore_when_enabled(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    shutil.copytree(FIXTURE_ROOT, repo_root)
    (repo_root / ".gitignore").write_text("broken.ts\n", encoding="utf-8")

    default = scan_source_files(repo_root)
    filtered = scan_source_files(repo_root, respect_gitignore=True)

    assert "src/app/broken.ts" in _relative(default.files, default.root)
    assert "src/app/broken.ts" not in _relative(filtered.files, filtered.root)


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_scan_skips_symlinked_dirs(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    (repo_root / "src").mkdir()
    (repo_root / "src" / "main.ts").write_text("export {};\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "leak.ts").write_text("export {};\n", encoding="utf-8")

    (repo_root / "linked").symlink_to(external_root, target_is_directory=True)

    result = scan_source_files(repo_root)

    assert _relative(result.files, result.root) == ["src/main.ts"]


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_nested_gitignore_skips_symlinked_gitignore(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    (repo_root / "src").mkdir()
    (repo_root / "src" / "main.ts").write_text("export {};\n", encoding="utf-8")
    (repo_root / ".gitignore").write_text("*.bin\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "outside.gitignore").write_text("src/main.ts\n", encoding="utf-8")

    (repo_root / "linked.gitignore").symlink_to(external_root / "outside.gitignore")

    matcher = _build_gitignore_matcher(repo_root, nested_gitignore=True)
    assert matcher is not None
    assert matcher(str(repo_root / "src" / "main.ts")) is False
