"""Tests for diff/engine.py - symbol, export and rename passes."""

import pytest
from conftest import snap

from ripplescope.diff.engine import compare_exports, diff_snapshots
from ripplescope.diff.models import ChangeType, RuleId, Severity, SnapshotDiff


def _diff(before: str, after: str) -> SnapshotDiff:
    return diff_snapshots(snap(before), snap(after))


SAMPLE = """
import { helper } from './helper';

export function area(width: number, height?: number): number {
  return width * (height ?? width);
}

export const scale = (value: number, factor = 2) => value * factor;

export class Shape {
  constructor(public name: string) {}
  describe(verbose?: boolean): string {
    return this.name;
  }
}

export interface Point {
  x: number;
  y: number;
  label?: string;
}

export type Id = string | number;

export enum Kind { Circle, Square }

export { helper };
export * from './shapes';
"""


class TestSelfDiff:
    def test_identical_source_gives_empty_diff(self):
        diff = _diff(SAMPLE, SAMPLE)
        assert diff.is_empty
        assert diff.changed_symbols == ()
        assert diff.added == () and diff.removed == () and diff.modified == ()
        assert diff.export_changes.is_empty
        assert diff.findings() == []
        assert not diff.has_breaking_changes

    def test_whitespace_only_edit_gives_empty_diff(self):
        before = "export function f(a: number,b: string): void {}\n"
        after = "export function f(a : number, b : string) : void {\n}\n"
        assert _diff(before, after).is_empty


class TestExportOnlyChanges:
    def test_dropping_export_qualifier_from_interface(self):
        diff = _diff(
            "export interface Shape { x: number }\n",
            "interface Shape { x: number }\n",
        )
        assert [e.name for e in diff.export_changes.removed] == ["Shape"]
        assert diff.changed_symbols == ()
        assert diff.modified == ()
        assert diff.has_breaking_changes

    def test_named_to_default_export_is_a_kind_change(self):
        diff = _diff(
            "export function main() {}\n",
            "export default function main() {}\n",
        )
        assert diff.changed_symbols == ()
        (change,) = diff.export_changes.modified
        assert change.rule_id is RuleId.EXPORT_KIND_CHANGED

    def test_reexport_source_change_is_one_modification(self):
        diff = _diff(
            "export { a } from './x';\n",
            "export { a } from './y';\n",
        )
        assert diff.export_changes.added == ()
        assert diff.export_changes.removed == ()
        (change,) = diff.export_changes.modified
        assert change.rule_id is RuleId.REEXPORT_SOURCE_CHANGED

    def test_same_local_name_from_two_sources_are_distinct(self):
        before = "export { a } from './x';\nexport { a } from './y';\n"
        after = "export { a } from './x';\n"
        diff = _diff(before, after)
        (removed,) = diff.export_changes.removed
        assert removed.source_module == "./y"
        assert diff.export_changes.modified == ()

    def test_namespace_reexport_removed(self):
        diff = _diff("export * from './all';\n", "")
        findings = diff.findings()
        assert [f.rule_id for f in findings] == [RuleId.NAMESPACE_REEXPORT_REMOVED]

    def test_named_namespace_reexport_removed(self):
        diff = _diff("export * as ns from './all';\nexport const keep = 1;\n", "export const keep = 1;\n")
        (finding,) = diff.findings()
        assert finding.rule_id is RuleId.NAMESPACE_REEXPORT_REMOVED
        assert finding.name == "ns"
        assert finding.message == "Namespace re-export 'ns' from './all' removed"

    def test_import_then_export_namespace_removed(self):
        before = "import * as util from './util';\nexport { util };\n"
        after = "import * as util from './util';\n"
        (finding,) = _diff(before, after).findings()
        assert finding.rule_id is RuleId.NAMESPACE_REEXPORT_REMOVED
        assert finding.name == "util"


class TestParameterPrecedence:
    def test_optional_to_required_is_signature_change_only(self):
        diff = _diff(
            "export function f(a?: string): void {}\n",
            "export function f(a: string): void {}\n",
        )
        (change,) = diff.changed_symbols
        assert change.change_type is ChangeType.SIGNATURE_CHANGED
        assert change.rule_id is RuleId.FN_PARAM_REQUIRED
        assert change.is_breaking
        assert change.severity is Severity.HIGH

    def test_type_only_change_is_type_change_only(self):
        diff = _diff(
            "export function f(a?: string): void {}\n",
            "export function f(a?: number): void {}\n",
        )
        (change,) = diff.changed_symbols
        assert change.change_type is ChangeType.TYPE_CHANGED
        assert change.rule_id is RuleId.FN_PARAM_TYPE
        assert change.severity is Severity.MEDIUM

    def test_return_type_only(self):
        diff = _diff(
            "export function f(a: number): string { return ''; }\n",
            "export function f(a: number): number { return 0; }\n",
        )
        (change,) = diff.modified
        assert change.change_type is ChangeType.TYPE_CHANGED
        assert change.rule_id is RuleId.FN_RETURN_TYPE
        assert not any(c.change_type is ChangeType.SIGNATURE_CHANGED for c in diff.changed_symbols)

    def test_added_parameter_outranks_return_change(self):
        diff = _diff(
            "export function f(a: number): string { return ''; }\n",
            "export function f(a: number, b: number): number { return 0; }\n",
        )
        (change,) = diff.modified
        assert change.rule_id is RuleId.FN_PARAM_COUNT


class TestAddRemove:
    def test_removed_exported_function(self):
        diff = _diff(
            "export function gone() {}\nexport function kept() {}\n",
            "export function kept() {}\n",
        )
        (change,) = diff.removed
        assert change.name == "gone"
        assert change.rule_id is RuleId.FN_REMOVED
        assert change.is_breaking
        assert change.severity is Severity.HIGH
        # The export removal subsumes the symbol removal in the findings.
        assert [f.rule_id for f in diff.findings()] == [RuleId.EXPORT_REMOVED]

    def test_private_symbols_are_not_breaking(self):
        diff = _diff("function internal() {}\n", "function other() {}\n")
        assert {c.change_type for c in diff.changed_symbols} == {
            ChangeType.REMOVED,
            ChangeType.ADDED,
        }
        assert not diff.has_breaking_changes
        assert all(c.severity is Severity.LOW for c in diff.changed_symbols)

    def test_exported_addition(self):
        diff = _diff("", "export class Fresh {}\n")
        (change,) = diff.added
        assert change.rule_id is RuleId.CLS_ADDED
        assert change.severity is Severity.MEDIUM
        assert [e.name for e in diff.export_changes.added] == ["Fresh"]

    def test_kinds_are_diffed_independently(self):
        diff = _diff(
            "export interface Thing { a: number }\n",
            "export type Thing = { a: number };\n",
        )
        assert [c.rule_id for c in diff.removed] == [RuleId.IF_REMOVED]
        assert [c.rule_id for c in diff.added] == [RuleId.TYPE_ADDED]


class TestRenameHints:
    def test_rename_is_removal_plus_addition_with_hint(self):
        diff = _diff(
            "export function fetchUser(id: string): Promise<string> { return load(id); }\n",
            "export function loadUser(id: string): Promise<string> { return load(id); }\n",
        )
        assert [c.name for c in diff.removed] == ["fetchUser"]
        assert [c.name for c in diff.added] == ["loadUser"]
        (hint,) = diff.rename_hints
        assert (hint.old_name, hint.new_name) == ("fetchUser", "loadUser")
        assert hint.confidence == "low"

    def test_hints_can_be_disabled(self):
        diff = diff_snapshots(
            snap("export function a(x: number) {}\n"),
            snap("export function b(x: number) {}\n"),
            detect_renames=False,
        )
        assert diff.rename_hints == ()
        assert len(diff.changed_symbols) == 2


class TestImpactedNames:
    def test_names_from_exports_and_modified_symbols(self):
        diff = _diff(
            "export function f(a: string) {}\nexport function g() {}\nfunction h(x: number) {}\n",
            "export function f(a: number) {}\nfunction h(x: string) {}\n",
        )
        assert diff.impacted_names() == ["g", "f"]

    def test_default_export_contributes_both_names(self):
        diff = _diff("export default function main() {}\n", "")
        assert diff.impacted_names() == ["main", "default"]

    def test_additions_do_not_impact_consumers(self):
        diff = _diff("", "export function fresh() {}\n")
        assert diff.impacted_names() == []


class TestSerialization:
    def test_diff_round_trips_through_plain_dict(self):
        diff = _diff(
            "export function f(a?: string) {}\nexport enum E { A, B }\n",
            "export function f(a: string) {}\nexport enum E { A }\nexport { x } from './x';\n",
        )
        assert SnapshotDiff.from_dict(diff.to_dict()) == diff


class TestCompareExports:
    def test_empty_sides(self):
        changes = compare_exports((), ())
        assert changes.is_empty

    @pytest.mark.parametrize("source", ["export const a = 1;\n", "export { a } from './a';\n"])
    def test_unchanged_entries_are_ignored(self, source):
        entries = snap(source).exports
        assert compare_exports(entries, entries).is_empty
