"""Project graphs: reverse dependencies, import line evidence, re-exports."""

from .builder import build_dependency_graph
from .models import DependencyGraph, ExportRecord, ModuleExports
from .resolution import ModuleResolver, RelativeResolver, TsConfig, load_tsconfig
from .store import GraphStore

__all__ = [
    "build_dependency_graph",
    "DependencyGraph",
    "ExportRecord",
    "ModuleExports",
    "ModuleResolver",
    "RelativeResolver",
    "TsConfig",
    "load_tsconfig",
    "GraphStore",
]
