"""Tests for diff/rules.py - priority order of the breaking-change cascade."""

from conftest import snap

from ripplescope.diff.models import ChangeType, RuleId
from ripplescope.diff.rules import classify_change


def _pair(before: str, after: str, kind: str = "functions"):
    return getattr(snap(before), kind)[0], getattr(snap(after), kind)[0]


class TestFunctionRules:
    def test_identical_symbols_have_no_match(self):
        old, new = _pair("function f(a: number) {}\n", "function f(a: number) {}\n")
        assert classify_change(old, new) is None

    def test_overload_count_outranks_parameter_type(self):
        old, new = _pair(
            """
            function parse(x: string): number;
            function parse(x: number): number;
            function parse(x: any): number { return 0; }
            """,
            """
            function parse(x: string): number;
            function parse(x: number): number;
            function parse(x: boolean): number;
            function parse(x: unknown): number { return 0; }
            """,
        )
        match = classify_change(old, new)
        assert match.rule_id is RuleId.FN_OVERLOADS
        assert "count" in match.message

    def test_overload_signature_change(self):
        old, new = _pair(
            "function p(x: string): void;\nfunction p(x: number): void;\nfunction p(x: any) {}\n",
            "function p(x: string): void;\nfunction p(x: bigint): void;\nfunction p(x: any) {}\n",
        )
        assert classify_change(old, new).rule_id is RuleId.FN_OVERLOADS

    def test_rest_parameter_change_counts_as_count_change(self):
        old, new = _pair("function f(a: number[]) {}\n", "function f(...a: number[]) {}\n")
        assert classify_change(old, new).rule_id is RuleId.FN_PARAM_COUNT

    def test_renamed_parameter_is_removal(self):
        old, new = _pair("function f(a: number) {}\n", "function f(b: number) {}\n")
        match = classify_change(old, new)
        assert match.rule_id is RuleId.FN_PARAM_REMOVED
        assert match.change_type is ChangeType.SIGNATURE_CHANGED

    def test_required_to_optional_falls_back_to_signature(self):
        old, new = _pair("function f(a: number) {}\n", "function f(a?: number) {}\n")
        assert classify_change(old, new).rule_id is RuleId.FN_SIGNATURE

    def test_async_change_falls_back_to_signature(self):
        old, new = _pair("function f() {}\n", "async function f() {}\n")
        match = classify_change(old, new)
        assert match.rule_id is RuleId.FN_SIGNATURE


class TestShapeRules:
    def test_call_signature_return_change(self):
        old, new = _pair(
            "interface F { (x: number): string }\n",
            "interface F { (x: number): number }\n",
            "interfaces",
        )
        match = classify_change(old, new)
        assert match.rule_id is RuleId.IF_CALL_SIGNATURE
        assert match.change_type is ChangeType.TYPE_CHANGED

    def test_call_signature_parameter_change_reuses_parameter_order(self):
        old, new = _pair(
            "interface F { (x?: number): string }\n",
            "interface F { (x: number): string }\n",
            "interfaces",
        )
        match = classify_change(old, new)
        assert match.rule_id is RuleId.IF_CALL_SIGNATURE
        assert match.change_type is ChangeType.SIGNATURE_CHANGED
        assert "required" in match.message

    def test_index_signature_removed(self):
        old, new = _pair(
            "interface M { [key: string]: number; size: number }\n",
            "interface M { size: number }\n",
            "interfaces",
        )
        match = classify_change(old, new)
        assert match.rule_id is RuleId.IF_INDEX_SIGNATURE
        assert match.change_type is ChangeType.SIGNATURE_CHANGED

    def test_index_signature_changed(self):
        old, new = _pair(
            "interface M { [key: string]: number }\n",
            "interface M { [key: string]: string }\n",
            "interfaces",
        )
        match = classify_change(old, new)
        assert match.rule_id is RuleId.IF_INDEX_SIGNATURE
        assert match.change_type is ChangeType.TYPE_CHANGED

    def test_property_removed_outranks_type_change(self):
        old, new = _pair(
            "interface P { a: number; b: string }\n",
            "interface P { a: string }\n",
            "interfaces",
        )
        assert classify_change(old, new).rule_id is RuleId.IF_PROPERTY_REMOVED

    def test_property_required_outranks_type_change(self):
        old, new = _pair(
            "interface P { a?: number; b: string }\n",
            "interface P { a: number; b: number }\n",
            "interfaces",
        )
        assert classify_change(old, new).rule_id is RuleId.IF_PROPERTY_REQUIRED

    def test_property_type_change(self):
        old, new = _pair(
            "export type P = { a: number };\n",
            "export type P = { a: string };\n",
            "type_aliases",
        )
        match = classify_change(old, new)
        assert match.rule_id is RuleId.IF_PROPERTY_TYPE
        assert match.change_type is ChangeType.TYPE_CHANGED

    def test_nested_method_parameter_change(self):
        old, new = _pair(
            "interface Svc { run(a: number): void }\n",
            "interface Svc { run(a: number, b: number): void }\n",
            "interfaces",
        )
        assert classify_change(old, new).rule_id is RuleId.FN_PARAM_COUNT

    def test_non_object_alias_definition(self):
        old, new = _pair("type Id = string;\n", "type Id = string | number;\n", "type_aliases")
        match = classify_change(old, new)
        assert match.rule_id is RuleId.TYPE_DEFINITION
        assert match.change_type is ChangeType.TYPE_CHANGED


class TestClassRules:
    def test_method_removed(self):
        old, new = _pair(
            "class Repo { find(id: string): string { return id; } save(): void {} }\n",
            "class Repo { find(id: string): string { return id; } }\n",
            "classes",
        )
        assert classify_change(old, new).rule_id is RuleId.CLS_METHOD_REMOVED

    def test_method_parameter_change(self):
        old, new = _pair(
            "class Repo { find(id: string): string { return id; } }\n",
            "class Repo { find(id: number): string { return ''; } }\n",
            "classes",
        )
        match = classify_change(old, new)
        assert match.rule_id is RuleId.FN_PARAM_TYPE
        assert "Repo.find" in match.message

    def test_method_return_change(self):
        old, new = _pair(
            "class Repo { find(id: string): string { return id; } }\n",
            "class Repo { find(id: string): number { return 0; } }\n",
            "classes",
        )
        match = classify_change(old, new)
        assert match.rule_id is RuleId.CLS_METHOD_RETURN
        assert match.change_type is ChangeType.TYPE_CHANGED

    def test_parameter_change_in_one_method_outranks_return_in_another(self):
        old, new = _pair(
            "class C { a(): string { return ''; } b(x: number) {} }\n",
            "class C { a(): number { return 0; } b(x: string) {} }\n",
            "classes",
        )
        assert classify_change(old, new).rule_id is RuleId.FN_PARAM_TYPE

    def test_property_removed(self):
        old, new = _pair(
            "export class C { x: string = ''; y = 1 }\n",
            "export class C { y = 1 }\n",
            "classes",
        )
        match = classify_change(old, new)
        assert match.rule_id is RuleId.CLS_PROPERTY_REMOVED
        assert match.change_type is ChangeType.SIGNATURE_CHANGED
        assert match.message == "Class 'C': property 'x' removed"

    def test_property_now_required(self):
        old, new = _pair(
            "export class C { x?: string }\n",
            "export class C { x: string }\n",
            "classes",
        )
        match = classify_change(old, new)
        assert match.rule_id is RuleId.CLS_PROPERTY_REQUIRED
        assert match.change_type is ChangeType.SIGNATURE_CHANGED

    def test_property_required_outranks_type_change(self):
        old, new = _pair(
            "class C { a: number; b?: string }\n",
            "class C { a: string; b: string }\n",
            "classes",
        )
        assert classify_change(old, new).rule_id is RuleId.CLS_PROPERTY_REQUIRED

    def test_class_property_type_change(self):
        old, new = _pair(
            "class C { a: number }\n",
            "class C { a: string }\n",
            "classes",
        )
        match = classify_change(old, new)
        assert match.rule_id is RuleId.CLS_PROPERTY_TYPE
        assert match.change_type is ChangeType.TYPE_CHANGED

    def test_method_removed_outranks_property_removed(self):
        old, new = _pair(
            "class C { x = 1; run(): void {} }\n",
            "class C { }\n",
            "classes",
        )
        assert classify_change(old, new).rule_id is RuleId.CLS_METHOD_REMOVED

    def test_private_property_is_ignored(self):
        old, new = _pair(
            "class C { private x = 1; run(): void {} }\n",
            "class C { run(): void {} }\n",
            "classes",
        )
        assert classify_change(old, new) is None


class TestEnumRules:
    def test_member_removed(self):
        old, new = _pair("enum E { A, B }\n", "enum E { A }\n", "enums")
        assert classify_change(old, new).rule_id is RuleId.ENUM_MEMBER_REMOVED

    def test_member_value_changed(self):
        old, new = _pair("enum E { A = 1 }\n", "enum E { A = 2 }\n", "enums")
        match = classify_change(old, new)
        assert match.rule_id is RuleId.ENUM_MEMBERS_CHANGED
        assert match.change_type is ChangeType.TYPE_CHANGED
