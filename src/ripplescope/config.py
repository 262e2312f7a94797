"""Configuration loading and management for ripplescope.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.ripplescope.toml)
    3. Project config (./ripplescope.toml)
    4. Explicit config file
    5. Environment variables (RIPPLESCOPE_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(verbose=True, workers=4)
    >>> config.verbosity
    'verbose'
    >>> config.workers
    4
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import InvalidConfigError
from .scanning.languages import SKIP_DIRS, SOURCE_EXTENSIONS

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "RIPPLESCOPE_"
CONFIG_FILE_NAME = "ripplescope.toml"


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for snapshot, graph and impact analysis.

    All fields have sensible defaults. Users typically override only a few
    fields via CLI flags or config file.

    Attributes:
        Performance tuning:
            workers: Parallel workers for project scans (None = auto-detect)
            scan_budget_seconds: Wall-clock budget for one project scan
                (None = unbounded); a scan over budget returns partial results

        File filtering:
            max_file_size_mb: Files larger than this are skipped
            max_files: Maximum number of files scanned per project
            source_extensions: File suffixes treated as source
            skip_dirs: Directory names never descended into
            follow_symlinks: Follow symbolic links during scanning

        Module resolution:
            tsconfig_path: Explicit tsconfig.json (default: nearest one above the root)

        Diffing:
            enable_rename_hints: Attach low-confidence rename hints to diffs
            rename_similarity: Minimum signature similarity for a rename hint

        Reporting:
            exclude_test_files: Split test files out of the downstream list
            verbosity: Logging verbosity level
    """

    # Performance tuning
    workers: Optional[int] = None
    scan_budget_seconds: Optional[float] = None

    # File filtering
    max_file_size_mb: float = 2.0
    max_files: int = 20000
    source_extensions: list[str] = field(default_factory=lambda: list(SOURCE_EXTENSIONS))
    skip_dirs: list[str] = field(default_factory=lambda: list(SKIP_DIRS))
    follow_symlinks: bool = False

    # Module resolution
    tsconfig_path: Optional[str] = None

    # Diffing
    enable_rename_hints: bool = True
    rename_similarity: float = 0.9

    # Reporting
    exclude_test_files: bool = True
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.scan_budget_seconds is not None and self.scan_budget_seconds <= 0:
            raise ValueError("scan_budget_seconds must be positive")

        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")
        if self.max_files < 1:
            raise ValueError("max_files must be at least 1")
        if not self.source_extensions:
            raise ValueError("source_extensions must not be empty")
        for ext in self.source_extensions:
            if not ext.startswith("."):
                raise ValueError(f"source extension '{ext}' must start with '.'")

        if not 0.0 < self.rename_similarity <= 1.0:
            raise ValueError("rename_similarity must be in (0.0, 1.0]")

        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)

    @property
    def worker_count(self) -> int:
        """Resolved worker count."""
        if self.workers is not None:
            return self.workers
        return min(32, (os.cpu_count() or 1) + 4)


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); None values are ignored

    Returns:
        Validated AnalysisConfig instance

    Raises:
        InvalidConfigError: If a config file or value is invalid or missing
    """
    merged: dict[str, Any] = {}

    # 1. Global config
    global_config = Path.home() / f".{CONFIG_FILE_NAME}"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    # 2. Project config
    project_config = Path.cwd() / CONFIG_FILE_NAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    # 3. Explicit config file
    if config_file is not None:
        if not config_file.exists():
            raise InvalidConfigError("config_file", config_file, "file not found")
        merged.update(_load_toml_file(config_file))

    # 4. Environment variables
    merged.update(_load_env_vars())

    # 5. CLI overrides; verbosity flags become the verbosity field
    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"
    merged.update({k: v for k, v in overrides.items() if v is not None})

    unknown = sorted(set(merged) - set(AnalysisConfig.__dataclass_fields__))
    if unknown:
        raise InvalidConfigError(unknown[0], merged[unknown[0]], "unknown setting")

    try:
        return AnalysisConfig(**merged)
    except (TypeError, ValueError) as e:
        raise InvalidConfigError("configuration", merged, str(e))


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from RIPPLESCOPE_* environment variables.

    Every scalar field of AnalysisConfig can be set this way, e.g.
    RIPPLESCOPE_WORKERS=4 or RIPPLESCOPE_ENABLE_RENAME_HINTS=false.
    List fields are only settable from TOML.

    Returns:
        Dict of field_name -> parsed_value for any RIPPLESCOPE_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)
    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns:
        Parsed value, or None for types that cannot come from the environment

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is list or type_hint is list:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML config file.

    Raises:
        InvalidConfigError: If the file cannot be read or parsed
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise InvalidConfigError("config_file", path, str(e))
