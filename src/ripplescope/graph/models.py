"""Project-level graphs: reverse dependencies, import line evidence, exports.

All keys are ``CanonicalPath`` values. A ``DependencyGraph`` is built
once and never mutated afterwards; rebuilding produces a new instance.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from ..paths import CanonicalPath
from ..serialization import to_plain

# ── Export graph ───────────────────────────────────────────────────


@dataclass(frozen=True)
class ExportRecord:
    """One export of a module, as seen by importers.

    ``name`` is the public name (``default`` for default exports, ``*``
    for ``export * from``). For re-exports ``source`` is the resolved
    module the value comes from and ``source_name`` its name there
    (``*`` for whole-namespace forms). ``line`` is 0-based.
    """

    name: str
    line: int
    source: Optional[CanonicalPath] = None
    source_name: Optional[str] = None
    is_namespace: bool = False
    is_type_only: bool = False

    @property
    def is_reexport(self) -> bool:
        return self.source is not None

    @property
    def is_star(self) -> bool:
        """``export * from``: forwards every named export of the source."""
        return self.name == "*"

    def forwards(self, names: Optional[frozenset[str]]) -> Optional[frozenset[str]]:
        """Public names under which any of ``names`` leave this module.

        ``names`` of None stands for every export of the source and is
        passed through by ``export *``. Returns an empty set when this
        record does not carry any of ``names``.
        """
        if not self.is_reexport:
            return frozenset()
        if self.is_star:
            if names is None:
                return None
            return frozenset(n for n in names if n != "default")
        if self.is_namespace:
            return frozenset({self.name})
        if names is None or self.source_name in names:
            return frozenset({self.name})
        return frozenset()

    def to_dict(self) -> dict[str, Any]:
        return to_plain(
            {
                "name": self.name,
                "line": self.line,
                "source": self.source,
                "source_name": self.source_name,
                "is_namespace": self.is_namespace,
                "is_type_only": self.is_type_only,
            }
        )


@dataclass(frozen=True)
class ModuleExports:
    """Every export of one module, in source order."""

    module: CanonicalPath
    records: tuple[ExportRecord, ...] = ()

    def get(self, name: str) -> Optional[ExportRecord]:
        for record in self.records:
            if record.name == name:
                return record
        return None

    def reexports_from(self, source: CanonicalPath) -> list[ExportRecord]:
        return [r for r in self.records if r.source == source]

    def to_dict(self) -> dict[str, Any]:
        return {"module": str(self.module), "records": [r.to_dict() for r in self.records]}


# ── Dependency graph ───────────────────────────────────────────────


@dataclass(frozen=True)
class DependencyGraph:
    """Reverse-dependency map, import line evidence and export graph of one root.

    Attributes:
        root: Project root the graph was built for.
        files: Every source file that was scanned.
        reverse: target -> importers of the target.
        import_lines: target -> importer -> earliest 0-based line naming the target.
        specifiers: importer -> raw specifier -> resolved target.
        exports: module -> its exports.
        complete: False when the scan stopped at its time budget.
        unresolved: Number of specifiers that resolved to no project file.
        skipped: Files that could not be read or were too large.
    """

    root: CanonicalPath
    files: tuple[CanonicalPath, ...] = ()
    reverse: Mapping[CanonicalPath, frozenset[CanonicalPath]] = field(default_factory=dict)
    import_lines: Mapping[CanonicalPath, Mapping[CanonicalPath, int]] = field(
        default_factory=dict
    )
    specifiers: Mapping[CanonicalPath, Mapping[str, CanonicalPath]] = field(default_factory=dict)
    exports: Mapping[CanonicalPath, ModuleExports] = field(default_factory=dict)
    complete: bool = True
    unresolved: int = 0
    skipped: tuple[CanonicalPath, ...] = ()

    @property
    def edge_count(self) -> int:
        return sum(len(importers) for importers in self.reverse.values())

    def importers_of(self, path: str) -> list[CanonicalPath]:
        """Direct importers of ``path``, sorted."""
        return sorted(self.reverse.get(CanonicalPath(path), ()))

    def import_line(self, target: str, importer: str) -> Optional[int]:
        """0-based line of ``importer``'s first statement naming ``target``."""
        return self.import_lines.get(CanonicalPath(target), {}).get(CanonicalPath(importer))

    def resolved_specifier(self, importer: str, specifier: str) -> Optional[CanonicalPath]:
        return self.specifiers.get(CanonicalPath(importer), {}).get(specifier)

    def exports_of(self, module: str) -> ModuleExports:
        canonical = CanonicalPath(module)
        return self.exports.get(canonical) or ModuleExports(module=canonical)

    def reexporters_of(
        self, source: str, names: Optional[Iterable[str]] = None
    ) -> list[tuple[CanonicalPath, ExportRecord]]:
        """Modules re-exporting from ``source`` any of ``names`` (or anything, if None).

        ``export *`` and namespace re-exports always match. Sorted by
        module path, then line.
        """
        wanted = frozenset(names) if names is not None else None
        found: list[tuple[CanonicalPath, ExportRecord]] = []
        source_key = CanonicalPath(source)
        for importer in self.importers_of(source_key):
            for record in self.exports_of(importer).reexports_from(source_key):
                if record.forwards(wanted) != frozenset():
                    found.append((importer, record))
        found.sort(key=lambda item: (item[0], item[1].line))
        return found

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": str(self.root),
            "files": [str(f) for f in self.files],
            "reverse": {
                str(t): sorted(str(i) for i in importers)
                for t, importers in sorted(self.reverse.items())
            },
            "import_lines": {
                str(t): {str(i): line for i, line in sorted(lines.items())}
                for t, lines in sorted(self.import_lines.items())
            },
            "exports": {str(m): e.to_dict() for m, e in sorted(self.exports.items())},
            "complete": self.complete,
            "unresolved": self.unresolved,
            "skipped": [str(s) for s in self.skipped],
        }
