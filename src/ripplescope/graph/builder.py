"""Dependency graph construction for a project root.

Each source file is scanned independently: its snapshot supplies static
imports and exports, a textual pass adds ``require()`` and ``import()``
calls, and every specifier goes through the resolver tiers. Workers
return private per-file results which are merged into the graph only
after the pool is done, so no reader ever sees a partially merged graph.
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from typing import Optional

from ..config import AnalysisConfig
from ..exceptions import FileAccessError, InvalidPathError, ResolutionError
from ..file_ops import iter_source_files, safe_read_file
from ..paths import CanonicalPath
from ..scanning.fallback import RegexFallbackScanner
from ..snapshot.builder import build_snapshot
from ..snapshot.models import ExportKind, SymbolSnapshot
from .models import DependencyGraph, ExportRecord, ModuleExports
from .resolution import ModuleResolver, RelativeResolver, build_resolvers

logger = logging.getLogger(__name__)


@dataclass
class FileScan:
    """What one worker learned about one file. Owned by that worker until merged."""

    path: CanonicalPath
    edges: dict[CanonicalPath, int] = field(default_factory=dict)
    specifiers: dict[str, CanonicalPath] = field(default_factory=dict)
    exports: list[ExportRecord] = field(default_factory=list)
    unresolved: int = 0
    skipped: bool = False
    degraded: bool = False


class FileScanner:
    """Scans single files against a fixed pair of resolvers. Safe to share between threads."""

    def __init__(
        self,
        primary: ModuleResolver,
        fallback: RelativeResolver,
        max_bytes: Optional[int] = None,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self.max_bytes = max_bytes
        self._text = RegexFallbackScanner()

    def resolve(self, specifier: str, importer: str) -> Optional[CanonicalPath]:
        """Resolve through both tiers; None when neither finds a file."""
        try:
            return self.primary.resolve(specifier, importer)
        except ResolutionError as primary_error:
            try:
                return self.fallback.resolve(specifier, importer)
            except ResolutionError:
                logger.debug("%s", primary_error)
                return None

    def scan(self, path: CanonicalPath) -> FileScan:
        result = FileScan(path=path)
        try:
            content = safe_read_file(path, self.max_bytes)
        except FileAccessError as e:
            logger.debug("Skipping %s: %s", path, e.reason)
            result.skipped = True
            return result

        snapshot = build_snapshot(path, content)
        result.degraded = snapshot.degraded

        specifiers = [(imp.module, imp.line - 1) for imp in snapshot.imports]
        specifiers += [(e.source_module, e.line - 1) for e in snapshot.exports if e.is_reexport]
        specifiers += self._text.dynamic_specifiers(content)
        if snapshot.degraded:
            specifiers += self._text.module_specifiers(content)

        for specifier, line in specifiers:
            target = result.specifiers.get(specifier)
            if target is None:
                target = self.resolve(specifier, path)
                if target is None:
                    result.unresolved += 1
                    continue
                result.specifiers[specifier] = target
            if target == path:
                continue
            previous = result.edges.get(target)
            if previous is None or line < previous:
                result.edges[target] = line

        result.exports = self._export_records(snapshot, content, result.specifiers)
        return result

    def _export_records(
        self,
        snapshot: SymbolSnapshot,
        content: str,
        resolved: dict[str, CanonicalPath],
    ) -> list[ExportRecord]:
        records: list[ExportRecord] = []
        seen: set[tuple[str, Optional[CanonicalPath]]] = set()

        def _add(record: ExportRecord) -> None:
            key = (record.name, record.source)
            if key not in seen:
                seen.add(key)
                records.append(record)

        for entry in snapshot.exports:
            if not entry.is_reexport:
                _add(ExportRecord(name=entry.public_name, line=entry.line - 1))
                continue
            source = resolved.get(entry.source_module or "")
            if source is None:
                continue
            _add(
                ExportRecord(
                    name=entry.public_name,
                    line=entry.line - 1,
                    source=source,
                    source_name=entry.exported_name,
                    is_namespace=entry.export_kind is ExportKind.NAMESPACE and entry.name != "*",
                    is_type_only=entry.is_type_only,
                )
            )

        if snapshot.degraded:
            for found in self._text.reexports(content):
                source = resolved.get(found.specifier)
                if source is None:
                    continue
                _add(
                    ExportRecord(
                        name=found.name,
                        line=found.line,
                        source=source,
                        source_name=found.source_name,
                        is_namespace=found.is_namespace and found.name != "*",
                        is_type_only=found.is_type_only,
                    )
                )

        records.sort(key=lambda r: r.line)
        return records


def collect_source_files(root: str, config: AnalysisConfig) -> list[CanonicalPath]:
    files: list[CanonicalPath] = []
    for path in iter_source_files(
        root,
        skip_dirs=tuple(config.skip_dirs),
        extensions=tuple(config.source_extensions),
        follow_symlinks=config.follow_symlinks,
    ):
        if len(files) >= config.max_files:
            logger.warning("File limit of %d reached; remaining files are ignored", config.max_files)
            break
        files.append(CanonicalPath(path))
    return files


def merge_scans(
    root: CanonicalPath,
    files: list[CanonicalPath],
    scans: list[FileScan],
    complete: bool,
) -> DependencyGraph:
    """Fold per-file results into one immutable graph."""
    reverse: dict[CanonicalPath, set[CanonicalPath]] = {}
    import_lines: dict[CanonicalPath, dict[CanonicalPath, int]] = {}
    specifiers: dict[CanonicalPath, dict[str, CanonicalPath]] = {}
    exports: dict[CanonicalPath, ModuleExports] = {}
    skipped: list[CanonicalPath] = []
    unresolved = 0

    for scan in sorted(scans, key=lambda s: s.path):
        if scan.skipped:
            skipped.append(scan.path)
            continue
        unresolved += scan.unresolved
        for target, line in scan.edges.items():
            reverse.setdefault(target, set()).add(scan.path)
            lines = import_lines.setdefault(target, {})
            if scan.path not in lines or line < lines[scan.path]:
                lines[scan.path] = line
        if scan.specifiers:
            specifiers[scan.path] = dict(scan.specifiers)
        exports[scan.path] = ModuleExports(module=scan.path, records=tuple(scan.exports))

    return DependencyGraph(
        root=root,
        files=tuple(sorted(files)),
        reverse={target: frozenset(importers) for target, importers in reverse.items()},
        import_lines=import_lines,
        specifiers=specifiers,
        exports=exports,
        complete=complete,
        unresolved=unresolved,
        skipped=tuple(skipped),
    )


def build_dependency_graph(root: str, config: Optional[AnalysisConfig] = None) -> DependencyGraph:
    """Scan ``root`` and build its reverse-dependency, line-evidence and export graphs.

    Args:
        root: Project root directory.
        config: Analysis configuration (defaults when None).

    Returns:
        A new DependencyGraph. When ``config.scan_budget_seconds`` runs
        out, the graph holds the files scanned so far and ``complete`` is
        False.

    Raises:
        InvalidPathError: If ``root`` is not a directory.
    """
    config = config or AnalysisConfig()
    if not os.path.isdir(root):
        raise InvalidPathError(root, "not a directory")

    started = time.monotonic()
    root_path = CanonicalPath(root)
    files = collect_source_files(root_path, config)
    primary, fallback = build_resolvers(
        root_path, config.tsconfig_path, skip_dirs=tuple(config.skip_dirs)
    )
    scanner = FileScanner(primary, fallback, config.max_file_size_bytes)

    scans: list[FileScan] = []
    complete = True
    remaining: Optional[float] = None
    if config.scan_budget_seconds is not None:
        remaining = max(0.0, config.scan_budget_seconds - (time.monotonic() - started))

    executor = ThreadPoolExecutor(max_workers=config.worker_count)
    try:
        futures = {executor.submit(scanner.scan, path): path for path in files}
        try:
            for future in as_completed(futures, timeout=remaining):
                path = futures[future]
                try:
                    scans.append(future.result())
                except Exception as e:
                    logger.debug("Error scanning %s: %s", path, e)
                    scans.append(FileScan(path=path, skipped=True))
        except FuturesTimeoutError:
            complete = False
            logger.warning(
                "Scan budget of %.1fs exhausted after %d/%d files; returning partial graph",
                config.scan_budget_seconds,
                len(scans),
                len(files),
            )
    finally:
        executor.shutdown(wait=complete, cancel_futures=True)

    graph = merge_scans(root_path, files, scans, complete)
    degraded = sum(1 for s in scans if s.degraded)
    logger.info(
        "Scanned %d files in %.2fs: %d edges, %d unresolved, %d skipped, %d degraded",
        len(scans),
        time.monotonic() - started,
        graph.edge_count,
        graph.unresolved,
        len(graph.skipped),
        degraded,
    )
    return graph
