"""Public API for ripplescope.

``analyze_change`` runs the whole pipeline for one edited file: snapshot
both versions, diff them, and trace the impacted names through the
project's dependency graph.

Example:
    >>> from ripplescope import analyze_change
    >>> report = analyze_change("src/math.ts", old_text, new_text, "/path/to/project")
    >>> [f.rule_id.value for f in report.diff.findings()]
    ['TSAPI-FN-001']
    >>> [str(r.file_path) for r in report.downstream]
    ['/path/to/project/src/app.ts']
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Optional

from .config import AnalysisConfig
from .diff.engine import diff_snapshots
from .diff.models import SnapshotDiff
from .graph.store import GraphStore
from .impact.models import DownstreamImpact, DownstreamResult
from .impact.resolver import find_downstream
from .logging_config import get_logger
from .paths import CanonicalPath
from .scanning.languages import is_test_file
from .snapshot.builder import build_snapshot

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImpactReport:
    """Diff of one file plus the files it reaches.

    ``test_files`` holds the downstream test files that were split out
    of ``downstream`` when ``exclude_test_files`` is set.
    """

    file_path: CanonicalPath
    diff: SnapshotDiff
    impacted_names: tuple[str, ...]
    downstream: DownstreamImpact
    test_files: tuple[DownstreamResult, ...] = ()

    @property
    def has_breaking_changes(self) -> bool:
        return self.diff.has_breaking_changes

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": str(self.file_path),
            "diff": self.diff.to_dict(),
            "findings": [f.to_dict() for f in self.diff.findings()],
            "impacted_names": list(self.impacted_names),
            "downstream": self.downstream.to_dict(),
            "test_files": [r.to_dict() for r in self.test_files],
        }


def _split_tests(
    downstream: DownstreamImpact,
) -> tuple[DownstreamImpact, tuple[DownstreamResult, ...]]:
    tests = tuple(r for r in downstream.results if is_test_file(r.file_path))
    if not tests:
        return downstream, ()
    kept = tuple(r for r in downstream.results if not is_test_file(r.file_path))
    return (
        DownstreamImpact(
            changed_file=downstream.changed_file,
            results=kept,
            impacted_names=downstream.impacted_names,
            attempted=downstream.attempted,
            complete=downstream.complete,
        ),
        tests,
    )


def analyze_change(
    file_path: str,
    before: str,
    after: str,
    project_root: str,
    *,
    config: Optional[AnalysisConfig] = None,
    store: Optional[GraphStore] = None,
) -> ImpactReport:
    """Diff two versions of a file and find the files the change reaches.

    Args:
        file_path: The edited file; relative paths are taken from ``project_root``.
        before: Source text before the edit.
        after: Source text after the edit.
        project_root: Root of the project to search for downstream files.
        config: Analysis configuration (defaults when None).
        store: Graph store to reuse between calls; a private one when None.

    Returns:
        ImpactReport. Identical texts give an empty diff and a downstream
        value whose ``attempted`` is False.

    Raises:
        InvalidPathError: If ``project_root`` is not a directory.
    """
    config = config or AnalysisConfig()
    if not os.path.isabs(file_path):
        file_path = os.path.join(project_root, file_path)
    path = CanonicalPath(file_path)

    if before == after:
        logger.debug("%s unchanged; skipping analysis", path)
        empty = SnapshotDiff(file_path=path)
        return ImpactReport(
            file_path=path,
            diff=empty,
            impacted_names=(),
            downstream=DownstreamImpact.not_attempted(path),
        )

    diff = diff_snapshots(
        build_snapshot(path, before),
        build_snapshot(path, after),
        detect_renames=config.enable_rename_hints,
        rename_threshold=config.rename_similarity,
    )
    if diff.degraded:
        logger.warning("%s has syntax errors; the diff is best-effort", path)

    names = tuple(diff.impacted_names())
    if diff.is_empty:
        logger.info("No structural changes in %s", path.name)
        return ImpactReport(
            file_path=path,
            diff=diff,
            impacted_names=names,
            downstream=DownstreamImpact.not_attempted(path),
        )

    store = store or GraphStore(config)
    graph = store.get(project_root)
    downstream = find_downstream(path, names, graph, config)

    tests: tuple[DownstreamResult, ...] = ()
    if config.exclude_test_files:
        downstream, tests = _split_tests(downstream)

    logger.info(
        "%s: %d changes, %d downstream files, %d test files",
        path.name,
        len(diff.findings()),
        len(downstream),
        len(tests),
    )
    return ImpactReport(
        file_path=path,
        diff=diff,
        impacted_names=names,
        downstream=downstream,
        test_files=tests,
    )
