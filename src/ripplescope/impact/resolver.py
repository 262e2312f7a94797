"""Downstream impact resolution over a DependencyGraph.

Two passes:

  1. Carriers. Starting from the changed file, follow the export graph
     through every barrel that re-exports an impacted name (or ``*``),
     tracking the public name each barrel exposes it under.
  2. Breadth-first walk of the reverse graph, one level at a time.
     Carriers are always kept. Other importers are kept unconditionally
     when no names were given, otherwise only when they reference one
     of the carried names.

Every kept file gets the best evidence available: structural usage,
then a plain-text occurrence, then its import of a carrier, then
unknown. Files are never dropped for lack of evidence.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ..config import AnalysisConfig
from ..exceptions import FileAccessError
from ..file_ops import safe_read_file
from ..graph.models import DependencyGraph
from ..paths import CanonicalPath
from .models import DownstreamImpact, DownstreamResult, Evidence, EvidenceTier
from .usage import CarriedNames, ConsumerUsage, scan_consumer

logger = logging.getLogger(__name__)


# ── Pass 1: carriers ──────────────────────────────────────────────


def _merge(old: CarriedNames, new: CarriedNames) -> CarriedNames:
    if old is None or new is None:
        return None
    return old | new


def find_carriers(
    changed: CanonicalPath, names: CarriedNames, graph: DependencyGraph
) -> dict[CanonicalPath, CarriedNames]:
    """Map the changed file and every barrel forwarding it to the names it exposes."""
    carriers: dict[CanonicalPath, CarriedNames] = {changed: names}
    work = deque([changed])
    while work:
        source = work.popleft()
        carried = carriers[source]
        for module, record in graph.reexporters_of(source, carried):
            if module == changed:
                continue
            forwarded = record.forwards(carried)
            if module in carriers:
                merged = _merge(carriers[module], forwarded)
                if merged == carriers[module]:
                    continue
            else:
                merged = forwarded
            carriers[module] = merged
            work.append(module)
    return carriers


# ── Pass 2: traversal ─────────────────────────────────────────────


class _Resolution:
    """State of one ``find_downstream`` call."""

    def __init__(
        self,
        changed: CanonicalPath,
        names: CarriedNames,
        graph: DependencyGraph,
        config: AnalysisConfig,
    ) -> None:
        self.changed = changed
        self.names = names
        self.graph = graph
        self.config = config
        self.carriers = find_carriers(changed, names, graph)
        self.search_names = self._search_names()
        self.usages: dict[CanonicalPath, Optional[ConsumerUsage]] = {}

    def _search_names(self) -> tuple[str, ...]:
        if self.names is None:
            return ()
        found: set[str] = set(self.names)
        for carried in self.carriers.values():
            if carried is not None:
                found.update(carried)
        found.discard("*")
        found.discard("default")
        return tuple(sorted(found))

    def carried_specifiers(self, path: CanonicalPath) -> dict[str, CarriedNames]:
        specifiers = self.graph.specifiers.get(path, {})
        return {
            specifier: self.carriers[target]
            for specifier, target in specifiers.items()
            if target in self.carriers
        }

    def _scan(self, path: CanonicalPath) -> Optional[ConsumerUsage]:
        try:
            content = safe_read_file(path, self.config.max_file_size_bytes)
        except FileAccessError as e:
            logger.debug("Cannot scan %s for usage: %s", path, e.reason)
            return None
        return scan_consumer(path, content, self.carried_specifiers(path), self.search_names)

    def scan_all(self, paths: Iterable[CanonicalPath]) -> None:
        """Scan every path not scanned yet; workers return results, merged here."""
        pending = [p for p in paths if p not in self.usages]
        if not pending:
            return
        if len(pending) == 1 or self.config.worker_count == 1:
            scanned = [self._scan(p) for p in pending]
        else:
            with ThreadPoolExecutor(max_workers=self.config.worker_count) as executor:
                scanned = list(executor.map(self._scan, pending))
        self.usages.update(zip(pending, scanned))

    def keeps(self, path: CanonicalPath) -> bool:
        if path in self.carriers or self.names is None:
            return True
        usage = self.usages.get(path)
        # Unreadable files stay in; their impact cannot be ruled out.
        return usage is None or usage.references

    def traverse(self) -> dict[CanonicalPath, int]:
        depths: dict[CanonicalPath, int] = {self.changed: 0}
        rejected: set[CanonicalPath] = set()
        frontier = [self.changed]
        level = 0
        while frontier:
            level += 1
            candidates = sorted(
                {
                    importer
                    for current in frontier
                    for importer in self.graph.importers_of(current)
                    if importer not in depths and importer not in rejected
                }
            )
            if self.names is not None:
                self.scan_all(p for p in candidates if p not in self.carriers)
            frontier = []
            for candidate in candidates:
                if self.keeps(candidate):
                    depths[candidate] = level
                    frontier.append(candidate)
                else:
                    logger.debug("Dropping %s: no reference to %s", candidate, self.search_names)
                    rejected.add(candidate)
        del depths[self.changed]
        return depths

    def evidence(self, path: CanonicalPath) -> Evidence:
        usage = self.usages.get(path)
        if usage is not None:
            if usage.usage_line is not None:
                return Evidence(EvidenceTier.USAGE, usage.usage_line)
            if usage.text_line is not None:
                return Evidence(EvidenceTier.TEXT, usage.text_line)
        import_lines = [
            line
            for carrier in self.carriers
            for line in [self.graph.import_line(carrier, path)]
            if line is not None
        ]
        if import_lines:
            return Evidence(EvidenceTier.IMPORT, min(import_lines))
        return Evidence.unknown()


def find_downstream(
    changed_file: str,
    impacted_names: Optional[Iterable[str]],
    graph: DependencyGraph,
    config: Optional[AnalysisConfig] = None,
) -> DownstreamImpact:
    """Find files affected by a change to ``changed_file``.

    Args:
        changed_file: The changed module.
        impacted_names: Public names whose consumers are affected. None
            disables name filtering; every transitive importer is kept.
        graph: Dependency graph of the project containing the file.
        config: Analysis configuration (defaults when None).

    Returns:
        DownstreamImpact with results ranked by (depth, path). Running
        twice against the same graph gives identical results.
    """
    config = config or AnalysisConfig()
    changed = CanonicalPath(changed_file)
    requested = None if impacted_names is None else tuple(dict.fromkeys(impacted_names))
    names: CarriedNames = None if requested is None else frozenset(requested)

    resolution = _Resolution(changed, names, graph, config)
    depths = resolution.traverse()
    resolution.scan_all(sorted(depths))

    results = tuple(
        DownstreamResult(
            file_path=path,
            evidence=resolution.evidence(path),
            depth=depth,
            via_reexport=path in resolution.carriers,
        )
        for path, depth in sorted(depths.items(), key=lambda item: (item[1], item[0]))
    )

    unknown = sum(1 for r in results if r.evidence.tier is EvidenceTier.UNKNOWN)
    logger.info(
        "%d downstream files for %s (%d via re-export, %d without location)",
        len(results),
        changed.name,
        sum(1 for r in results if r.via_reexport),
        unknown,
    )
    return DownstreamImpact(
        changed_file=changed,
        results=results,
        impacted_names=requested,
        complete=graph.complete,
    )
