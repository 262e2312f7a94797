"""
RippleScope - Change Impact Analysis for TypeScript/JavaScript

Snapshots the structure of a source file, classifies what changed between
two versions of it, and walks the project's reverse-dependency graph to
find every file the change can reach, with the line that proves it.
"""

__version__ = "0.1.0"

from .api import ImpactReport, analyze_change
from .config import AnalysisConfig, load_config
from .diff.engine import diff_snapshots
from .graph.builder import build_dependency_graph
from .graph.store import GraphStore
from .impact.resolver import find_downstream
from .snapshot.builder import build_snapshot

__all__ = [
    "analyze_change",  # Main entry point
    "ImpactReport",
    "build_snapshot",
    "diff_snapshots",
    "build_dependency_graph",
    "GraphStore",
    "find_downstream",
    "AnalysisConfig",
    "load_config",
]
