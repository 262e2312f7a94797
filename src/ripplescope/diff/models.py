"""Data models for snapshot diffing: symbol changes, export changes, rename hints."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..serialization import dataclass_to_dict
from ..snapshot.models import ExportInfo, ExportKind, SymbolInfo, SymbolKind


class ChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    SIGNATURE_CHANGED = "signature-changed"
    TYPE_CHANGED = "type-changed"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RuleId(str, Enum):
    """Stable identifiers of the breaking-change rules."""

    FN_PARAM_REQUIRED = "TSAPI-FN-001"
    FN_PARAM_REMOVED = "TSAPI-FN-002"
    FN_PARAM_TYPE = "TSAPI-FN-003"
    FN_RETURN_TYPE = "TSAPI-FN-004"
    FN_REMOVED = "TSAPI-FN-005"
    FN_SIGNATURE = "TSAPI-FN-006"
    FN_OVERLOADS = "TSAPI-FN-007"
    FN_PARAM_COUNT = "TSAPI-FN-008"
    FN_ADDED = "TSAPI-FN-009"

    CLS_METHOD_REMOVED = "TSAPI-CLS-001"
    CLS_PROPERTY_REMOVED = "TSAPI-CLS-002"
    CLS_METHOD_RETURN = "TSAPI-CLS-003"
    CLS_REMOVED = "TSAPI-CLS-004"
    CLS_ADDED = "TSAPI-CLS-005"
    CLS_PROPERTY_REQUIRED = "TSAPI-CLS-006"
    CLS_PROPERTY_TYPE = "TSAPI-CLS-007"

    IF_PROPERTY_REMOVED = "TSAPI-IF-001"
    IF_PROPERTY_REQUIRED = "TSAPI-IF-002"
    IF_PROPERTY_TYPE = "TSAPI-IF-003"
    IF_REMOVED = "TSAPI-IF-004"
    IF_CALL_SIGNATURE = "TSAPI-IF-005"
    IF_INDEX_SIGNATURE = "TSAPI-IF-006"
    IF_ADDED = "TSAPI-IF-007"

    TYPE_REMOVED = "TSAPI-TYPE-001"
    TYPE_DEFINITION = "TSAPI-TYPE-002"
    TYPE_ADDED = "TSAPI-TYPE-003"

    ENUM_MEMBER_REMOVED = "TSAPI-ENUM-001"
    ENUM_REMOVED = "TSAPI-ENUM-002"
    ENUM_MEMBERS_CHANGED = "TSAPI-ENUM-003"
    ENUM_ADDED = "TSAPI-ENUM-004"

    EXPORT_REMOVED = "TSAPI-EXP-001"
    EXPORT_KIND_CHANGED = "TSAPI-EXP-002"
    NAMESPACE_REEXPORT_REMOVED = "TSAPI-EXP-003"
    REEXPORT_SOURCE_CHANGED = "TSAPI-EXP-004"
    EXPORT_ADDED = "TSAPI-EXP-005"


REMOVAL_RULES: dict[SymbolKind, RuleId] = {
    SymbolKind.FUNCTION: RuleId.FN_REMOVED,
    SymbolKind.CLASS: RuleId.CLS_REMOVED,
    SymbolKind.INTERFACE: RuleId.IF_REMOVED,
    SymbolKind.TYPE: RuleId.TYPE_REMOVED,
    SymbolKind.ENUM: RuleId.ENUM_REMOVED,
}

ADDITION_RULES: dict[SymbolKind, RuleId] = {
    SymbolKind.FUNCTION: RuleId.FN_ADDED,
    SymbolKind.CLASS: RuleId.CLS_ADDED,
    SymbolKind.INTERFACE: RuleId.IF_ADDED,
    SymbolKind.TYPE: RuleId.TYPE_ADDED,
    SymbolKind.ENUM: RuleId.ENUM_ADDED,
}


@dataclass(frozen=True)
class RuleMatch:
    """Outcome of the rule cascade for one modified symbol."""

    change_type: ChangeType
    rule_id: RuleId
    message: str


@dataclass(frozen=True)
class SymbolChange:
    """One classified symbol-level change.

    ``before`` is None for additions and ``after`` is None for removals.
    """

    name: str
    kind: SymbolKind
    change_type: ChangeType
    severity: Severity
    is_breaking: bool
    rule_id: RuleId
    message: str
    before: Optional[SymbolInfo] = None
    after: Optional[SymbolInfo] = None

    @property
    def line(self) -> int:
        symbol = self.after or self.before
        return symbol.line if symbol is not None else 1

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SymbolChange:
        return cls(
            name=data["name"],
            kind=SymbolKind(data["kind"]),
            change_type=ChangeType(data["change_type"]),
            severity=Severity(data["severity"]),
            is_breaking=data["is_breaking"],
            rule_id=RuleId(data["rule_id"]),
            message=data["message"],
            before=SymbolInfo.from_dict(data["before"]) if data.get("before") else None,
            after=SymbolInfo.from_dict(data["after"]) if data.get("after") else None,
        )


@dataclass(frozen=True)
class ExportChange:
    """An export entry present on both sides with different attributes."""

    before: ExportInfo
    after: ExportInfo
    rule_id: RuleId
    message: str

    @property
    def name(self) -> str:
        return self.after.name

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExportChange:
        return cls(
            before=ExportInfo.from_dict(data["before"]),
            after=ExportInfo.from_dict(data["after"]),
            rule_id=RuleId(data["rule_id"]),
            message=data["message"],
        )


@dataclass(frozen=True)
class ExportChanges:
    added: tuple[ExportInfo, ...] = ()
    removed: tuple[ExportInfo, ...] = ()
    modified: tuple[ExportChange, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.modified)

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExportChanges:
        return cls(
            added=tuple(ExportInfo.from_dict(e) for e in data.get("added", [])),
            removed=tuple(ExportInfo.from_dict(e) for e in data.get("removed", [])),
            modified=tuple(ExportChange.from_dict(c) for c in data.get("modified", [])),
        )


@dataclass(frozen=True)
class RenameHint:
    """Low-confidence guess that ``old_name`` became ``new_name``.

    Never replaces the underlying removal and addition; it is layered
    on top of them.
    """

    old_name: str
    new_name: str
    kind: SymbolKind
    similarity: float
    confidence: str = "low"

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RenameHint:
        return cls(**{**data, "kind": SymbolKind(data["kind"])})


@dataclass(frozen=True)
class Finding:
    """Aggregated, de-duplicated view of one change for reporting."""

    rule_id: RuleId
    name: str
    category: str
    severity: Severity
    is_breaking: bool
    message: str
    line: int

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


@dataclass(frozen=True)
class SnapshotDiff:
    """Complete diff between two snapshots of the same file.

    ``changed_symbols`` is the flat list; ``added``, ``removed`` and
    ``modified`` partition it. Export status is compared separately in
    ``export_changes``.
    """

    file_path: str
    changed_symbols: tuple[SymbolChange, ...] = ()
    added: tuple[SymbolChange, ...] = ()
    removed: tuple[SymbolChange, ...] = ()
    modified: tuple[SymbolChange, ...] = ()
    export_changes: ExportChanges = field(default_factory=ExportChanges)
    rename_hints: tuple[RenameHint, ...] = ()
    degraded: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.changed_symbols and self.export_changes.is_empty

    @property
    def has_breaking_changes(self) -> bool:
        return bool(self.export_changes.removed or self.export_changes.modified) or any(
            c.is_breaking for c in self.changed_symbols
        )

    def impacted_names(self) -> list[str]:
        """Public names whose consumers may be affected, first-seen order.

        Removed and modified export names come first, then the names of
        changed symbols that are exported on either side.
        """
        names: list[str] = []
        candidates: list[str] = []
        entries = [*self.export_changes.removed]
        for change in self.export_changes.modified:
            entries += [change.before, change.after]
        for entry in entries:
            candidates += [entry.name, entry.public_name]
        for change in self.changed_symbols:
            if change.change_type is ChangeType.ADDED:
                continue
            if any(s is not None and s.is_exported for s in (change.before, change.after)):
                candidates.append(change.name)
        for name in candidates:
            if name != "*" and name not in names:
                names.append(name)
        return names

    def findings(self) -> list[Finding]:
        """Symbol and export changes merged into one list.

        A symbol removal is left out when the export of the same name
        was removed too; the export removal already says it all.
        """
        results: list[Finding] = []
        removed_exports = {e.name for e in self.export_changes.removed}

        for entry in self.export_changes.removed:
            namespace = entry.export_kind is ExportKind.NAMESPACE
            if not namespace:
                message = f"Export '{entry.name}' removed"
            elif entry.name == "*":
                message = f"Namespace re-export from '{entry.source_module}' removed"
            else:
                message = f"Namespace re-export '{entry.name}' from '{entry.source_module}' removed"
            results.append(
                Finding(
                    rule_id=RuleId.NAMESPACE_REEXPORT_REMOVED if namespace else RuleId.EXPORT_REMOVED,
                    name=entry.name,
                    category="export",
                    severity=Severity.HIGH,
                    is_breaking=True,
                    message=message,
                    line=entry.line,
                )
            )
        for change in self.export_changes.modified:
            results.append(
                Finding(
                    rule_id=change.rule_id,
                    name=change.name,
                    category="export",
                    severity=Severity.HIGH
                    if change.rule_id is RuleId.EXPORT_KIND_CHANGED
                    else Severity.MEDIUM,
                    is_breaking=True,
                    message=change.message,
                    line=change.after.line,
                )
            )
        for change in self.changed_symbols:
            if change.change_type is ChangeType.REMOVED and change.name in removed_exports:
                continue
            results.append(
                Finding(
                    rule_id=change.rule_id,
                    name=change.name,
                    category=change.kind.value,
                    severity=change.severity,
                    is_breaking=change.is_breaking,
                    message=change.message,
                    line=change.line,
                )
            )
        for entry in self.export_changes.added:
            results.append(
                Finding(
                    rule_id=RuleId.EXPORT_ADDED,
                    name=entry.name,
                    category="export",
                    severity=Severity.LOW,
                    is_breaking=False,
                    message=f"Export '{entry.name}' added",
                    line=entry.line,
                )
            )
        return results

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SnapshotDiff:
        def _changes(key: str) -> tuple[SymbolChange, ...]:
            return tuple(SymbolChange.from_dict(c) for c in data.get(key, []))

        return cls(
            file_path=data["file_path"],
            changed_symbols=_changes("changed_symbols"),
            added=_changes("added"),
            removed=_changes("removed"),
            modified=_changes("modified"),
            export_changes=ExportChanges.from_dict(data.get("export_changes", {})),
            rename_hints=tuple(RenameHint.from_dict(h) for h in data.get("rename_hints", [])),
            degraded=data.get("degraded", False),
        )
