"""Snapshot diffing: rule cascade, export comparison, rename hints."""

from .engine import compare_exports, diff_snapshots
from .models import (
    ChangeType,
    ExportChange,
    ExportChanges,
    Finding,
    RenameHint,
    RuleId,
    Severity,
    SnapshotDiff,
    SymbolChange,
)
from .rules import classify_change

__all__ = [
    "diff_snapshots",
    "compare_exports",
    "classify_change",
    "ChangeType",
    "ExportChange",
    "ExportChanges",
    "Finding",
    "RenameHint",
    "RuleId",
    "Severity",
    "SnapshotDiff",
    "SymbolChange",
]
