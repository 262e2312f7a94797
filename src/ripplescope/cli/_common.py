"""Shared CLI helpers."""

from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from ..config import AnalysisConfig, load_config
from ..file_ops import safe_read_file
from ..serialization import dumps

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    workers: Optional[int] = None,
    budget: Optional[float] = None,
    include_tests: bool = False,
    verbose: bool = False,
) -> AnalysisConfig:
    """Build configuration from CLI options."""
    overrides: dict[str, Any] = {}
    if workers is not None:
        overrides["workers"] = workers
    if budget is not None:
        overrides["scan_budget_seconds"] = budget
    if include_tests:
        overrides["exclude_test_files"] = False
    if verbose:
        overrides["verbose"] = True
    return load_config(config_file=config, **overrides)


def read_source(path: Path) -> str:
    """Read a source file given on the command line."""
    return safe_read_file(path)


def print_json(obj: Any) -> None:
    """Emit ``obj`` as JSON on stdout, bypassing rich markup."""
    print(dumps(obj))
