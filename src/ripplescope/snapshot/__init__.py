"""Structural snapshots of single file versions."""

from .builder import build_snapshot
from .models import (
    ExportInfo,
    ExportKind,
    ImportBinding,
    ImportForm,
    ImportInfo,
    SymbolInfo,
    SymbolKind,
    SymbolSnapshot,
)

__all__ = [
    "build_snapshot",
    "ExportInfo",
    "ExportKind",
    "ImportBinding",
    "ImportForm",
    "ImportInfo",
    "SymbolInfo",
    "SymbolKind",
    "SymbolSnapshot",
]
