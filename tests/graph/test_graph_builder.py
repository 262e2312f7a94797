"""Tests for graph/builder.py - reverse dependencies, line evidence, export graph."""

import time

import pytest

from ripplescope.config import AnalysisConfig
from ripplescope.exceptions import InvalidPathError
from ripplescope.graph.builder import FileScanner, build_dependency_graph
from ripplescope.paths import CanonicalPath


@pytest.fixture
def barrel_project(write_project):
    return write_project(
        {
            "src/a.ts": """
            export function X(n: number): number {
              return n;
            }
            export const other = 1;
            """,
            "src/b.ts": """
            export { X } from './a';
            export * from './a';
            """,
            "src/c.ts": """
            import { X } from './b';

            export const result = X(2);
            """,
            "src/d.ts": """
            import React from 'react';
            const lazy = () => import('./a');
            """,
            "node_modules/pkg/index.ts": "import { X } from '../../src/a';\n",
            "dist/a.js": "require('../src/a');\n",
        }
    )


def _p(root, rel):
    return CanonicalPath(root / rel)


class TestReverseGraph:
    def test_edges(self, barrel_project, serial_config):
        graph = build_dependency_graph(str(barrel_project), serial_config)
        root = barrel_project
        assert graph.importers_of(_p(root, "src/a.ts")) == [
            _p(root, "src/b.ts"),
            _p(root, "src/d.ts"),
        ]
        assert graph.importers_of(_p(root, "src/b.ts")) == [_p(root, "src/c.ts")]
        assert graph.importers_of(_p(root, "src/c.ts")) == []
        assert graph.complete

    def test_skipped_directories_are_not_scanned(self, barrel_project, serial_config):
        graph = build_dependency_graph(str(barrel_project), serial_config)
        assert len(graph.files) == 4
        assert all("node_modules" not in f and "/dist/" not in f for f in graph.files)

    def test_unresolved_specifiers_are_dropped(self, barrel_project, serial_config):
        graph = build_dependency_graph(str(barrel_project), serial_config)
        assert graph.unresolved == 1
        assert graph.resolved_specifier(_p(barrel_project, "src/d.ts"), "react") is None
        assert graph.resolved_specifier(_p(barrel_project, "src/d.ts"), "./a") == _p(
            barrel_project, "src/a.ts"
        )

    def test_dynamic_import_line(self, barrel_project, serial_config):
        graph = build_dependency_graph(str(barrel_project), serial_config)
        assert graph.import_line(_p(barrel_project, "src/a.ts"), _p(barrel_project, "src/d.ts")) == 1

    def test_earliest_line_wins(self, write_project, serial_config):
        root = write_project(
            {
                "a.ts": "export const A = 1;\nexport const B = 2;\n",
                "user.ts": """
                // header
                export { A } from './a';

                import { B } from './a';
                const again = require('./a');
                """,
            }
        )
        graph = build_dependency_graph(str(root), serial_config)
        assert graph.import_line(_p(root, "a.ts"), _p(root, "user.ts")) == 1

    def test_keys_are_canonical(self, barrel_project, serial_config):
        graph = build_dependency_graph(str(barrel_project), serial_config)
        messy = str(barrel_project / "src" / ".." / "src" / "a.ts")
        assert graph.importers_of(messy) == graph.importers_of(_p(barrel_project, "src/a.ts"))

    def test_self_import_is_ignored(self, write_project, serial_config):
        root = write_project({"loop.ts": "import { x } from './loop';\nexport const x = 1;\n"})
        graph = build_dependency_graph(str(root), serial_config)
        assert graph.importers_of(_p(root, "loop.ts")) == []

    def test_parallel_build_matches_serial(self, barrel_project, serial_config):
        serial = build_dependency_graph(str(barrel_project), serial_config)
        parallel = build_dependency_graph(str(barrel_project), AnalysisConfig(workers=4))
        assert parallel.to_dict() == serial.to_dict()

    def test_root_must_be_a_directory(self, tmp_path):
        with pytest.raises(InvalidPathError):
            build_dependency_graph(str(tmp_path / "missing"))


class TestExportGraph:
    def test_barrel_records(self, barrel_project, serial_config):
        graph = build_dependency_graph(str(barrel_project), serial_config)
        a = _p(barrel_project, "src/a.ts")
        barrel = graph.exports_of(_p(barrel_project, "src/b.ts"))
        named = barrel.get("X")
        assert named.source == a
        assert named.source_name == "X"
        assert named.line == 0
        star = barrel.get("*")
        assert star.is_star
        assert star.line == 1

    def test_reexporters_filter_by_name(self, barrel_project, serial_config):
        graph = build_dependency_graph(str(barrel_project), serial_config)
        a = _p(barrel_project, "src/a.ts")
        b = _p(barrel_project, "src/b.ts")
        assert [(m, r.name) for m, r in graph.reexporters_of(a, ["X"])] == [(b, "X"), (b, "*")]
        # `export *` forwards every named export.
        assert [(m, r.name) for m, r in graph.reexporters_of(a, ["other"])] == [(b, "*")]

    def test_local_exports_have_no_source(self, barrel_project, serial_config):
        graph = build_dependency_graph(str(barrel_project), serial_config)
        exports = graph.exports_of(_p(barrel_project, "src/a.ts"))
        assert [r.name for r in exports.records] == ["X", "other"]
        assert not any(r.is_reexport for r in exports.records)

    def test_to_dict_is_plain(self, barrel_project, serial_config):
        data = build_dependency_graph(str(barrel_project), serial_config).to_dict()
        assert data["complete"] is True
        assert all(isinstance(k, str) for k in data["reverse"])


class TestScanLimits:
    def test_oversized_files_are_skipped(self, write_project):
        root = write_project(
            {
                "small.ts": "import './big';\n",
                "big.ts": "export const data = '" + "x" * 4096 + "';\n",
            }
        )
        config = AnalysisConfig(workers=1, max_file_size_mb=0.001)
        graph = build_dependency_graph(str(root), config)
        assert graph.skipped == (_p(root, "big.ts"),)
        assert graph.importers_of(_p(root, "big.ts")) == [_p(root, "small.ts")]

    def test_max_files(self, write_project):
        root = write_project({f"f{i}.ts": "" for i in range(5)})
        graph = build_dependency_graph(str(root), AnalysisConfig(workers=1, max_files=3))
        assert len(graph.files) == 3

    def test_budget_returns_partial_graph(self, write_project, monkeypatch):
        root = write_project({"fast.ts": "import './slow';\n", "slow.ts": "export {};\n"})
        original = FileScanner.scan

        def slow_scan(self, path):
            if path.endswith("slow.ts"):
                time.sleep(1.0)
            return original(self, path)

        monkeypatch.setattr(FileScanner, "scan", slow_scan)
        config = AnalysisConfig(workers=2, scan_budget_seconds=0.3)
        graph = build_dependency_graph(str(root), config)
        assert not graph.complete
        assert _p(root, "slow.ts") not in graph.exports
        assert graph.importers_of(_p(root, "slow.ts")) == [_p(root, "fast.ts")]
