"""Shared test fixtures for ripplescope tests."""

import textwrap

import pytest

from ripplescope.config import AnalysisConfig
from ripplescope.snapshot.builder import build_snapshot


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def dedent(source: str) -> str:
    return textwrap.dedent(source).lstrip("\n")


def snap(source: str, path: str = "/project/src/mod.ts"):
    """Snapshot of dedented ``source`` with a fixed timestamp."""
    return build_snapshot(path, dedent(source), timestamp="2025-01-01T00:00:00Z")


@pytest.fixture
def write_project(tmp_path):
    """Write {relative path: source} into tmp_path and return the root."""

    def _write(files):
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(dedent(content), encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def serial_config():
    """Single-worker configuration for deterministic scans."""
    return AnalysisConfig(workers=1)
