"""Tests for paths.py, serialization.py and file_ops.py."""

import json
import ntpath
import os
from enum import Enum
from types import SimpleNamespace

import pytest

from ripplescope import paths
from ripplescope.exceptions import FileAccessError
from ripplescope.file_ops import iter_source_files, safe_read_file
from ripplescope.graph import resolution
from ripplescope.paths import CanonicalPath
from ripplescope.serialization import dumps, to_plain


class TestCanonicalPath:
    def test_normalizes_once(self):
        path = CanonicalPath("/repo/src/../src/./a.ts")
        assert path == "/repo/src/a.ts"
        assert CanonicalPath(path) is path

    def test_relative_input_becomes_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert CanonicalPath("x/y.ts") == CanonicalPath(tmp_path / "x" / "y.ts")

    def test_name_and_parent(self):
        path = CanonicalPath("/repo/src/a.ts")
        assert path.name == "a.ts"
        assert path.parent == "/repo/src"
        assert CanonicalPath("/repo").parent == "/"

    def test_relative_to(self):
        path = CanonicalPath("/repo/src/a.ts")
        assert path.relative_to("/repo") == "src/a.ts"
        assert path.relative_to("/other") == "/repo/src/a.ts"
        assert CanonicalPath("/repo").relative_to("/repo") == "."

    def test_usable_as_dict_key_with_plain_strings(self):
        index = {CanonicalPath("/repo/a.ts"): 1}
        assert index["/repo/a.ts"] == 1


class TestWindowsPaths:
    @pytest.fixture
    def windows(self, monkeypatch):
        fake_os = SimpleNamespace(path=ntpath, fspath=os.fspath)
        monkeypatch.setattr(paths, "os", fake_os)
        monkeypatch.setattr(resolution, "os", fake_os)

    def test_parent_walk_stops_at_drive_root(self, windows):
        current = CanonicalPath("C:\\proj\\src")
        walked = [current]
        while current.parent != current:
            current = current.parent
            walked.append(current)
            assert len(walked) < 10
        assert [p.lower() for p in walked] == ["c:/proj/src", "c:/proj", "c:/"]

    def test_find_tsconfig_gives_up_at_drive_root(self, windows):
        assert resolution.find_tsconfig("C:\\proj\\src") is None


class Color(Enum):
    RED = "red"


class TestSerialization:
    def test_to_plain(self):
        data = to_plain({"p": CanonicalPath("/a"), "c": Color.RED, "s": {3, 1}, "t": (1, None)})
        assert data == {"p": "/a", "c": "red", "s": [1, 3], "t": [1, None]}
        assert type(data["p"]) is str

    def test_dumps_is_json(self):
        assert json.loads(dumps({"a": (1, 2)})) == {"a": [1, 2]}

    def test_rejects_opaque_objects(self):
        with pytest.raises(TypeError):
            to_plain(object())


class TestFileOps:
    def test_safe_read_file(self, tmp_path):
        path = tmp_path / "a.ts"
        path.write_text("const a = 1;\n")
        assert safe_read_file(path) == "const a = 1;\n"

    def test_size_limit(self, tmp_path):
        path = tmp_path / "big.ts"
        path.write_text("x" * 100)
        with pytest.raises(FileAccessError) as exc:
            safe_read_file(path, max_bytes=10)
        assert "too large" in exc.value.reason

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileAccessError):
            safe_read_file(tmp_path / "missing.ts")

    def test_iter_source_files(self, write_project):
        root = write_project(
            {
                "b.ts": "",
                "a.tsx": "",
                "readme.md": "",
                "sub/c.js": "",
                "node_modules/x/index.js": "",
                ".cache/d.ts": "",
            }
        )
        found = list(iter_source_files(root, skip_dirs=("node_modules",)))
        assert found == [str(root / "a.tsx"), str(root / "b.ts"), str(root / "sub" / "c.js")]
