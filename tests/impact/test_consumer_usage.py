"""Tests for impact/usage.py and impact/models.py."""

import pytest

from ripplescope.impact.models import DownstreamImpact, DownstreamResult, Evidence, EvidenceTier
from ripplescope.impact.usage import scan_consumer
from ripplescope.paths import CanonicalPath


class TestScanConsumer:
    def test_named_usage(self):
        content = "import { X } from './a';\n\nconsole.log(X);\n"
        usage = scan_consumer("/p/c.ts", content, {"./a": frozenset({"X"})}, ["X"])
        assert usage.references
        assert usage.usage_line == 2
        assert usage.bound == ("X",)
        assert usage.import_lines == frozenset({0})

    def test_jsx_element(self):
        content = "import { Button } from './ui';\nexport const App = () => <Button />;\n"
        usage = scan_consumer("/p/App.tsx", content, {"./ui": frozenset({"Button"})}, ["Button"])
        assert usage.usage_line == 1

    def test_type_reference(self):
        content = "import type { Props } from './a';\n\nlet p: Props;\n"
        usage = scan_consumer("/p/c.ts", content, {"./a": frozenset({"Props"})}, ["Props"])
        assert usage.usage_line == 2

    def test_namespace_type_reference(self):
        content = "import * as t from './types';\nlet v: t.Shape;\n"
        usage = scan_consumer("/p/c.ts", content, {"./types": frozenset({"Shape"})}, ["Shape"])
        assert usage.references
        assert usage.usage_line == 1

    def test_unrelated_import_does_not_reference(self):
        content = "import { Other } from './a';\nOther();\n"
        usage = scan_consumer("/p/c.ts", content, {"./a": frozenset({"X"})}, ["X"])
        assert not usage.references
        assert usage.usage_line is None
        assert usage.text_line is None

    def test_every_name_when_unfiltered(self):
        content = "import { Anything } from './a';\nAnything();\n"
        usage = scan_consumer("/p/c.ts", content, {"./a": None})
        assert usage.usage_line == 1

    def test_imported_but_unused(self):
        content = "import { X } from './a';\n"
        usage = scan_consumer("/p/c.ts", content, {"./a": frozenset({"X"})}, ["X"])
        assert usage.references
        assert usage.usage_line is None
        assert usage.text_line is None

    def test_malformed_source_does_not_raise(self):
        content = "import { X } from './a';\nX(((;\n"
        usage = scan_consumer("/p/c.ts", content, {"./a": frozenset({"X"})}, ["X"])
        assert usage.references


class TestEvidence:
    def test_unknown_has_no_line(self):
        evidence = Evidence.unknown()
        assert evidence.line is None
        assert not evidence.is_known
        assert evidence.to_dict() == {"tier": "unknown", "line": None}

    def test_known_tier_requires_line(self):
        with pytest.raises(ValueError):
            Evidence(EvidenceTier.USAGE)

    def test_unknown_tier_rejects_line(self):
        with pytest.raises(ValueError):
            Evidence(EvidenceTier.UNKNOWN, 3)

    def test_line_zero_is_valid(self):
        assert Evidence(EvidenceTier.IMPORT, 0).is_known

    def test_negative_line(self):
        with pytest.raises(ValueError):
            Evidence(EvidenceTier.TEXT, -1)


class TestDownstreamImpact:
    def test_not_attempted_differs_from_empty(self):
        skipped = DownstreamImpact.not_attempted("/p/a.ts")
        empty = DownstreamImpact(changed_file=CanonicalPath("/p/a.ts"))
        assert not skipped.attempted
        assert empty.attempted
        assert skipped != empty
        assert len(skipped) == len(empty) == 0

    def test_to_dict(self):
        result = DownstreamResult(
            file_path=CanonicalPath("/p/b.ts"),
            evidence=Evidence(EvidenceTier.USAGE, 4),
            depth=1,
        )
        impact = DownstreamImpact(
            changed_file=CanonicalPath("/p/a.ts"), results=(result,), impacted_names=("X",)
        )
        assert impact.to_dict() == {
            "changed_file": "/p/a.ts",
            "attempted": True,
            "complete": True,
            "impacted_names": ["X"],
            "results": [
                {
                    "file_path": "/p/b.ts",
                    "evidence": {"tier": "usage", "line": 4},
                    "depth": 1,
                    "via_reexport": False,
                }
            ],
        }
        assert list(impact) == [result]
        assert impact.get("/p/b.ts") is result
        assert impact.get("/p/zzz.ts") is None
