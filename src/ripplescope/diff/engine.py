"""Diff engine: classifies structural changes between two SymbolSnapshots.

The algorithm works in three passes:
  1. Symbol-level, per kind: name-keyed maps of both sides give additions
     and removals; names on both sides go through the rule cascade.
  2. Export-level: entries are matched on (name, source module) and
     compared independently of symbol shape.
  3. Optional rename hints over the removed/added symbol pairs.
"""

import logging
from typing import Dict, List, Sequence

from ..snapshot.models import ExportInfo, SymbolInfo, SymbolSnapshot
from .models import (
    ADDITION_RULES,
    REMOVAL_RULES,
    ChangeType,
    ExportChange,
    ExportChanges,
    RuleId,
    RuleMatch,
    Severity,
    SnapshotDiff,
    SymbolChange,
)
from .rename import suggest_renames
from .rules import classify_change, describe

logger = logging.getLogger(__name__)


# ── Symbol changes ────────────────────────────────────────────────────────────


def _by_name(symbols: Sequence[SymbolInfo]) -> Dict[str, SymbolInfo]:
    result: Dict[str, SymbolInfo] = {}
    for symbol in symbols:
        if symbol.name in result:
            logger.debug("Duplicate %s '%s'; keeping first", symbol.kind.value, symbol.name)
            continue
        result[symbol.name] = symbol
    return result


def _removal(symbol: SymbolInfo) -> SymbolChange:
    return SymbolChange(
        name=symbol.name,
        kind=symbol.kind,
        change_type=ChangeType.REMOVED,
        severity=Severity.HIGH if symbol.is_exported else Severity.LOW,
        is_breaking=symbol.is_exported,
        rule_id=REMOVAL_RULES[symbol.kind],
        message=f"{describe(symbol)} removed",
        before=symbol,
    )


def _addition(symbol: SymbolInfo) -> SymbolChange:
    return SymbolChange(
        name=symbol.name,
        kind=symbol.kind,
        change_type=ChangeType.ADDED,
        severity=Severity.MEDIUM if symbol.is_exported else Severity.LOW,
        is_breaking=symbol.is_exported,
        rule_id=ADDITION_RULES[symbol.kind],
        message=f"{describe(symbol)} added",
        after=symbol,
    )


def _modification(before: SymbolInfo, after: SymbolInfo, match: RuleMatch) -> SymbolChange:
    exported = before.is_exported or after.is_exported
    if not exported:
        severity = Severity.LOW
    elif match.change_type is ChangeType.SIGNATURE_CHANGED:
        severity = Severity.HIGH
    else:
        severity = Severity.MEDIUM
    return SymbolChange(
        name=after.name,
        kind=after.kind,
        change_type=match.change_type,
        severity=severity,
        is_breaking=exported,
        rule_id=match.rule_id,
        message=match.message,
        before=before,
        after=after,
    )


# ── Export changes ────────────────────────────────────────────────────────────


def _describe_export_change(before: ExportInfo, after: ExportInfo) -> ExportChange:
    if before.source_module != after.source_module:
        return ExportChange(
            before=before,
            after=after,
            rule_id=RuleId.REEXPORT_SOURCE_CHANGED,
            message=(
                f"Export '{after.name}' now comes from "
                f"{repr(after.source_module) if after.source_module else 'this module'} "
                f"instead of "
                f"{repr(before.source_module) if before.source_module else 'this module'}"
            ),
        )
    if before.exported_name != after.exported_name:
        return ExportChange(
            before=before,
            after=after,
            rule_id=RuleId.REEXPORT_SOURCE_CHANGED,
            message=(
                f"Re-export '{after.name}' now forwards '{after.exported_name}' "
                f"instead of '{before.exported_name}'"
            ),
        )
    if before.export_kind is not after.export_kind:
        message = (
            f"Export '{after.name}' changed from {before.export_kind.value} "
            f"to {after.export_kind.value} export"
        )
    elif before.declared_kind != after.declared_kind:
        message = (
            f"Export '{after.name}' changed from {before.declared_kind} "
            f"to {after.declared_kind}"
        )
    else:
        message = f"Export '{after.name}' changed"
    return ExportChange(
        before=before, after=after, rule_id=RuleId.EXPORT_KIND_CHANGED, message=message
    )


def compare_exports(before: Sequence[ExportInfo], after: Sequence[ExportInfo]) -> ExportChanges:
    """Match export entries on (name, source module) and classify the differences.

    An entry whose only difference is its source module shows up once
    in ``modified``, not as a removal plus an addition.
    """
    old = {e.key: e for e in before}
    new = {e.key: e for e in after}

    removed = [e for key, e in old.items() if key not in new]
    added = [e for key, e in new.items() if key not in old]
    modified = [
        _describe_export_change(old[key], new[key])
        for key in old
        if key in new and old[key] != new[key]
    ]

    # Same name, different source: pair removals with additions.
    still_removed: List[ExportInfo] = []
    for entry in removed:
        partner = next((a for a in added if a.name == entry.name), None)
        if partner is None:
            still_removed.append(entry)
            continue
        added.remove(partner)
        modified.append(_describe_export_change(entry, partner))

    return ExportChanges(
        added=tuple(added),
        removed=tuple(still_removed),
        modified=tuple(modified),
    )


# ── Public API ────────────────────────────────────────────────────────────────


def diff_snapshots(
    before: SymbolSnapshot,
    after: SymbolSnapshot,
    *,
    detect_renames: bool = True,
    rename_threshold: float = 0.9,
) -> SnapshotDiff:
    """Compute the structural diff between two snapshots of one file.

    Args:
        before: The older snapshot.
        after: The newer snapshot.
        detect_renames: Attach low-confidence rename hints.
        rename_threshold: Minimum signature similarity for a rename hint.

    Returns:
        A new SnapshotDiff. Identical snapshots give an empty diff.
    """
    if before.file_path != after.file_path:
        logger.debug("Diffing %s against %s", before.file_path, after.file_path)

    added: List[SymbolChange] = []
    removed: List[SymbolChange] = []
    modified: List[SymbolChange] = []

    after_kinds = after.by_kind()
    for kind, old_symbols in before.by_kind().items():
        old_map = _by_name(old_symbols)
        new_map = _by_name(after_kinds[kind])

        for name, symbol in old_map.items():
            if name not in new_map:
                removed.append(_removal(symbol))

        for name, symbol in new_map.items():
            previous = old_map.get(name)
            if previous is None:
                added.append(_addition(symbol))
                continue
            match = classify_change(previous, symbol)
            if match is not None:
                modified.append(_modification(previous, symbol, match))

    export_changes = compare_exports(before.exports, after.exports)

    hints = []
    if detect_renames and removed and added:
        hints = suggest_renames(
            [c.before for c in removed if c.before is not None],
            [c.after for c in added if c.after is not None],
            threshold=rename_threshold,
        )

    diff = SnapshotDiff(
        file_path=after.file_path,
        changed_symbols=tuple(removed + modified + added),
        added=tuple(added),
        removed=tuple(removed),
        modified=tuple(modified),
        export_changes=export_changes,
        rename_hints=tuple(hints),
        degraded=before.degraded or after.degraded,
    )
    logger.debug(
        "Diff %s: %d removed, %d modified, %d added, %d export changes",
        after.file_path,
        len(removed),
        len(modified),
        len(added),
        len(export_changes.added) + len(export_changes.removed) + len(export_changes.modified),
    )
    return diff
