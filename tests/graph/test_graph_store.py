"""Tests for graph/store.py - per-root cache with atomic swaps."""

import threading

from ripplescope.config import AnalysisConfig
from ripplescope.graph.models import DependencyGraph
from ripplescope.graph.store import GraphStore
from ripplescope.paths import CanonicalPath


class CountingBuilder:
    def __init__(self):
        self.calls = []

    def __call__(self, root, config):
        self.calls.append(root)
        return DependencyGraph(root=CanonicalPath(root), unresolved=len(self.calls))


class TestGraphStore:
    def test_get_builds_once(self, tmp_path):
        builder = CountingBuilder()
        store = GraphStore(builder=builder)
        first = store.get(str(tmp_path))
        second = store.get(str(tmp_path) + "/sub/..")
        assert first is second
        assert len(builder.calls) == 1
        assert str(tmp_path) in store
        assert len(store) == 1

    def test_peek_does_not_build(self, tmp_path):
        builder = CountingBuilder()
        store = GraphStore(builder=builder)
        assert store.peek(str(tmp_path)) is None
        assert builder.calls == []

    def test_rebuild_swaps_in_new_graph(self, tmp_path):
        store = GraphStore(builder=CountingBuilder())
        old = store.get(str(tmp_path))
        new = store.rebuild(str(tmp_path))
        assert new is not old
        assert store.get(str(tmp_path)) is new
        assert new.unresolved == 2

    def test_invalidate(self, tmp_path):
        builder = CountingBuilder()
        store = GraphStore(builder=builder)
        store.get(str(tmp_path / "a"))
        store.get(str(tmp_path / "b"))
        store.invalidate(str(tmp_path / "a"))
        assert str(tmp_path / "a") not in store
        assert str(tmp_path / "b") in store
        store.invalidate()
        assert len(store) == 0

    def test_config_is_passed_to_builder(self, tmp_path):
        seen = []
        config = AnalysisConfig(workers=3)

        def builder(root, cfg):
            seen.append(cfg)
            return DependencyGraph(root=CanonicalPath(root))

        GraphStore(config, builder=builder).get(str(tmp_path))
        assert seen == [config]

    def test_readers_never_see_a_partial_graph(self, tmp_path):
        started = threading.Event()
        release = threading.Event()

        def slow_builder(root, config):
            started.set()
            release.wait(timeout=5)
            return DependencyGraph(root=CanonicalPath(root), unresolved=99)

        store = GraphStore(builder=CountingBuilder())
        old = store.get(str(tmp_path))
        store._builder = slow_builder

        worker = threading.Thread(target=store.rebuild, args=(str(tmp_path),))
        worker.start()
        assert started.wait(timeout=5)
        # While the rebuild runs, readers get the previous complete graph.
        assert store.get(str(tmp_path)) is old
        release.set()
        worker.join(timeout=5)
        assert store.get(str(tmp_path)).unresolved == 99
