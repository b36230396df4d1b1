from __future__ import annotations

from pathlib import Path
from typing import Any

import tomllib
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ngmap.contract.artifacts import CACHE_FILENAME, DEFAULT_CACHE_DIR

CONFIG_FILENAME = "ngmap.toml"

DEFAULT_EXTENSIONS = (".ts",)
DEFAULT_EXCLUDE_DIRS = ("node_modules", "dist", "coverage")
DEFAULT_TEST_SUFFIXES = (".spec", ".test")


class NgMapConfig(BaseModel):
    """Configuration for an ngmap analysis run."""

    model_config = ConfigDict(extra="forbid")

    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="Recognized source file extensions, in resolution order",
    )
    exclude_dirs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS),
        description="Directory names never descended into",
    )
    test_suffixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TEST_SUFFIXES),
        description="Stem suffixes marking test files (e.g. '.spec')",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns (relative paths) for files to exclude",
    )
    respect_gitignore: bool = Field(
        default=False,
        description="Skip files matched by the root .gitignore",
    )
    nested_gitignore: bool = Field(
        default=False,
        description="Also compose nested .gitignore files (implies respect_gitignore)",
    )
    cache_dir: str = Field(
        default=DEFAULT_CACHE_DIR,
        description="Cache directory, relative to the project root",
    )
    top_n: int = Field(
        default=10,
        ge=1,
        description="Number of entries in 'largest files' and 'most imported'",
    )

    @field_validator("extensions", mode="before")
    @classmethod
    def validate_extensions(cls, v: Any) -> Any:
        """Require a non-empty list of dotted extensions such as ".ts"."""
        if not isinstance(v, list) or not v:
            msg = "extensions must be a non-empty list of strings"
            raise ValueError(msg)

        for ext in v:
            if not isinstance(ext, str) or not ext.startswith(".") or len(ext) < 2:
                msg = f"Invalid extension {ext!r}: extensions must look like '.ts'"
                raise ValueError(msg)

        return v


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_cache_dir(root: Path, cache_dir: str) -> Path:
    """Resolve a config-provided cache_dir safely within the project root.

    The cache_dir must be a non-empty relative path that remains within the
    project root after resolution. Absolute paths and paths that escape the
    root are rejected.
    """
    if not cache_dir:
        msg = "cache_dir must be a non-empty relative path"
        raise ConfigError(msg)

    if cache_dir.startswith("~"):
        msg = "cache_dir must be a relative path within the project root"
        raise ConfigError(msg)

    cache_path = Path(cache_dir)
    if cache_path.is_absolute():
        msg = "cache_dir must be a relative path within the project root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_cache = (resolved_root / cache_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve cache_dir '{cache_dir}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_cache.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"cache_dir '{cache_dir}' escapes the project root"
        raise ConfigError(msg) from exc

    return resolved_cache


def resolve_cache_file(root: Path, config: NgMapConfig) -> Path:
    return resolve_cache_dir(root, config.cache_dir) / CACHE_FILENAME


def load_config(root: Path) -> NgMapConfig:
    """Load configuration from ngmap.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return NgMapConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return NgMapConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "NgMapConfig",
    "load_config",
    "resolve_cache_dir",
    "resolve_cache_file",
]
