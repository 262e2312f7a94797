"""Owned store of dependency graphs, one per project root.

Graphs are built outside the lock and swapped in under it, so a reader
calling ``get`` sees either the previous complete graph or the new one.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..config import AnalysisConfig
from ..paths import CanonicalPath
from .builder import build_dependency_graph
from .models import DependencyGraph

logger = logging.getLogger(__name__)

GraphBuilder = Callable[[str, AnalysisConfig], DependencyGraph]


class GraphStore:
    """Per-root graph cache with wholesale rebuilds.

    Args:
        config: Configuration passed to every build.
        builder: Graph factory, ``build_dependency_graph`` by default.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        builder: GraphBuilder = build_dependency_graph,
    ) -> None:
        self.config = config or AnalysisConfig()
        self._builder = builder
        self._graphs: dict[CanonicalPath, DependencyGraph] = {}
        self._lock = threading.Lock()

    def get(self, root: str) -> DependencyGraph:
        """Return the graph for ``root``, building it on first use."""
        key = CanonicalPath(root)
        with self._lock:
            graph = self._graphs.get(key)
        if graph is not None:
            return graph
        return self.rebuild(key)

    def peek(self, root: str) -> Optional[DependencyGraph]:
        """Return the current graph for ``root`` without building."""
        with self._lock:
            return self._graphs.get(CanonicalPath(root))

    def rebuild(self, root: str) -> DependencyGraph:
        """Build a fresh graph for ``root`` and swap it in."""
        key = CanonicalPath(root)
        logger.debug("Building dependency graph for %s", key)
        graph = self._builder(key, self.config)
        with self._lock:
            self._graphs[key] = graph
        return graph

    def invalidate(self, root: Optional[str] = None) -> None:
        """Drop the graph for ``root``, or every graph when None."""
        with self._lock:
            if root is None:
                self._graphs.clear()
            else:
                self._graphs.pop(CanonicalPath(root), None)

    def __contains__(self, root: str) -> bool:
        with self._lock:
            return CanonicalPath(root) in self._graphs

    def __len__(self) -> int:
        with self._lock:
            return len(self._graphs)
