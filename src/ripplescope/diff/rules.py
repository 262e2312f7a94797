"""Breaking-change rule cascade.

``classify_change`` runs a fixed, priority-ordered sequence of checks
over a symbol present in both snapshots and returns the first match:

  1. overload set changed
  2. parameters (count/rest, removed, optional -> required, type) then return type
  3. interface / object type members (call signature, index signature,
     property removed, property required, property type, nested methods)
  4. class members (method removed, property removed, property required,
     property type, method parameters, method return type)
  5. fallback on signature text, then return type

Enums and non-object type aliases have their own rules, evaluated in
the kind-specific slot (they never overlap with rules 1-4). A single
edit is therefore reported once, as its most specific classification.
"""

from __future__ import annotations

from typing import Optional

from ..snapshot.models import (
    ClassDetails,
    EnumDetails,
    FunctionDetails,
    ParameterInfo,
    PropertyInfo,
    ShapeDetails,
    SymbolInfo,
    SymbolKind,
)
from .models import ChangeType, RuleId, RuleMatch

_SUBJECTS = {
    SymbolKind.FUNCTION: "Function",
    SymbolKind.METHOD: "Method",
    SymbolKind.CLASS: "Class",
    SymbolKind.INTERFACE: "Interface",
    SymbolKind.TYPE: "Type",
    SymbolKind.ENUM: "Enum",
}


def describe(symbol: SymbolInfo) -> str:
    return f"{_SUBJECTS[symbol.kind]} '{symbol.qualified_name}'"


def classify_change(before: SymbolInfo, after: SymbolInfo) -> Optional[RuleMatch]:
    """Classify the difference between two versions of one symbol.

    Returns None when the two versions have the same shape.
    """
    if before == after:
        return None

    subject = describe(after)
    if before.is_function_like and after.is_function_like:
        match = overload_rule(subject, before, after) or callable_rules(subject, before, after)
    else:
        match = _kind_rules(subject, before, after)
    return match or fallback_rule(subject, before, after)


# ── Rule 1: overloads ─────────────────────────────────────────────


def overload_rule(subject: str, before: SymbolInfo, after: SymbolInfo) -> Optional[RuleMatch]:
    if not (before.overloads or after.overloads):
        return None
    if len(before.overloads) != len(after.overloads):
        return RuleMatch(
            ChangeType.SIGNATURE_CHANGED,
            RuleId.FN_OVERLOADS,
            f"{subject}: overload count changed from {len(before.overloads)} "
            f"to {len(after.overloads)}",
        )
    if set(before.overloads) != set(after.overloads):
        return RuleMatch(
            ChangeType.SIGNATURE_CHANGED,
            RuleId.FN_OVERLOADS,
            f"{subject}: overload signatures changed",
        )
    return None


# ── Rule 2: parameters and return type ───────────────────────────


def parameter_rules(
    subject: str, before: tuple[ParameterInfo, ...], after: tuple[ParameterInfo, ...]
) -> Optional[RuleMatch]:
    """Parameter-level checks in priority order; return type is not looked at."""
    if len(before) != len(after) or [p.rest for p in before] != [p.rest for p in after]:
        after_names = {p.name for p in after}
        dropped = [p.name for p in before if p.name not in after_names]
        detail = f" ('{dropped[0]}' removed)" if dropped else ""
        return RuleMatch(
            ChangeType.SIGNATURE_CHANGED,
            RuleId.FN_PARAM_COUNT,
            f"{subject}: parameter count changed from {len(before)} to {len(after)}{detail}",
        )

    after_by_name = {p.name: p for p in after}
    for old in before:
        if old.name not in after_by_name:
            return RuleMatch(
                ChangeType.SIGNATURE_CHANGED,
                RuleId.FN_PARAM_REMOVED,
                f"{subject}: parameter '{old.name}' removed",
            )

    for old in before:
        new = after_by_name[old.name]
        if old.optional and not new.optional:
            return RuleMatch(
                ChangeType.SIGNATURE_CHANGED,
                RuleId.FN_PARAM_REQUIRED,
                f"{subject}: parameter '{old.name}' is now required",
            )

    for old in before:
        new = after_by_name[old.name]
        if old.type != new.type:
            return RuleMatch(
                ChangeType.TYPE_CHANGED,
                RuleId.FN_PARAM_TYPE,
                f"{subject}: parameter '{old.name}' type changed from "
                f"{old.type or 'untyped'} to {new.type or 'untyped'}",
            )
    return None


def callable_rules(
    subject: str,
    before: SymbolInfo,
    after: SymbolInfo,
) -> Optional[RuleMatch]:
    match = parameter_rules(subject, before.parameters, after.parameters)
    if match is not None:
        return match
    if before.return_type != after.return_type:
        return RuleMatch(
            ChangeType.TYPE_CHANGED,
            RuleId.FN_RETURN_TYPE,
            f"{subject}: return type changed from {before.return_type or 'untyped'} "
            f"to {after.return_type or 'untyped'}",
        )
    return None


# ── Rules 3-4 and kind-specific rules ────────────────────────────


def _kind_rules(subject: str, before: SymbolInfo, after: SymbolInfo) -> Optional[RuleMatch]:
    old, new = before.details, after.details
    if isinstance(old, ShapeDetails) and isinstance(new, ShapeDetails):
        if old.is_object_shape and new.is_object_shape:
            return shape_rules(subject, old, new)
        if old.type_text != new.type_text:
            return RuleMatch(
                ChangeType.TYPE_CHANGED,
                RuleId.TYPE_DEFINITION,
                f"{subject}: definition changed from '{old.type_text}' to '{new.type_text}'",
            )
        return None
    if isinstance(old, ClassDetails) and isinstance(new, ClassDetails):
        return class_rules(subject, old, new)
    if isinstance(old, EnumDetails) and isinstance(new, EnumDetails):
        return enum_rules(subject, old, new)
    if isinstance(old, FunctionDetails) and isinstance(new, FunctionDetails):
        return None
    # Same name, different variant: leave it to the signature fallback.
    return None


def shape_rules(subject: str, old: ShapeDetails, new: ShapeDetails) -> Optional[RuleMatch]:
    if old.call_signature != new.call_signature:
        if old.call_signature is None or new.call_signature is None:
            state = "removed" if new.call_signature is None else "added"
            return RuleMatch(
                ChangeType.SIGNATURE_CHANGED,
                RuleId.IF_CALL_SIGNATURE,
                f"{subject}: call signature {state}",
            )
        match = parameter_rules(
            f"{subject} call signature",
            old.call_signature.parameters,
            new.call_signature.parameters,
        )
        if match is not None:
            return RuleMatch(match.change_type, RuleId.IF_CALL_SIGNATURE, match.message)
        if old.call_signature.return_type != new.call_signature.return_type:
            return RuleMatch(
                ChangeType.TYPE_CHANGED,
                RuleId.IF_CALL_SIGNATURE,
                f"{subject}: call signature return type changed",
            )
        return RuleMatch(
            ChangeType.SIGNATURE_CHANGED,
            RuleId.IF_CALL_SIGNATURE,
            f"{subject}: call signature changed",
        )

    if old.index_signature != new.index_signature:
        if new.index_signature is None:
            return RuleMatch(
                ChangeType.SIGNATURE_CHANGED,
                RuleId.IF_INDEX_SIGNATURE,
                f"{subject}: index signature removed",
            )
        return RuleMatch(
            ChangeType.TYPE_CHANGED,
            RuleId.IF_INDEX_SIGNATURE,
            f"{subject}: index signature changed",
        )

    new_members = set(new.member_names())
    for name in old.member_names():
        if name not in new_members:
            return RuleMatch(
                ChangeType.SIGNATURE_CHANGED,
                RuleId.IF_PROPERTY_REMOVED,
                f"{subject}: property '{name}' removed",
            )

    match = _property_rules(
        subject, old.properties, new.properties, RuleId.IF_PROPERTY_REQUIRED, RuleId.IF_PROPERTY_TYPE
    )
    if match is not None:
        return match
    return _member_method_rules(old.methods, new.methods, RuleId.FN_RETURN_TYPE)


def class_rules(subject: str, old: ClassDetails, new: ClassDetails) -> Optional[RuleMatch]:
    for method in old.methods:
        if new.method(method.name) is None:
            return RuleMatch(
                ChangeType.SIGNATURE_CHANGED,
                RuleId.CLS_METHOD_REMOVED,
                f"{subject}: method '{method.name}' removed",
            )

    new_props = {p.name for p in new.properties}
    for prop in old.properties:
        if prop.name not in new_props:
            return RuleMatch(
                ChangeType.SIGNATURE_CHANGED,
                RuleId.CLS_PROPERTY_REMOVED,
                f"{subject}: property '{prop.name}' removed",
            )

    match = _property_rules(
        subject, old.properties, new.properties, RuleId.CLS_PROPERTY_REQUIRED, RuleId.CLS_PROPERTY_TYPE
    )
    if match is not None:
        return match
    return _member_method_rules(old.methods, new.methods, RuleId.CLS_METHOD_RETURN)


def _property_rules(
    subject: str,
    old_props: tuple[PropertyInfo, ...],
    new_props: tuple[PropertyInfo, ...],
    required_rule: RuleId,
    type_rule: RuleId,
) -> Optional[RuleMatch]:
    """Optional-to-required before type changes, over properties on both sides."""
    by_name = {p.name: p for p in new_props}
    shared = [(p, by_name[p.name]) for p in old_props if p.name in by_name]
    for was, now in shared:
        if was.optional and not now.optional:
            return RuleMatch(
                ChangeType.SIGNATURE_CHANGED,
                required_rule,
                f"{subject}: property '{was.name}' is now required",
            )
    for was, now in shared:
        if was.type != now.type:
            return RuleMatch(
                ChangeType.TYPE_CHANGED,
                type_rule,
                f"{subject}: property '{was.name}' type changed from "
                f"{was.type or 'untyped'} to {now.type or 'untyped'}",
            )
    return None


def _member_method_rules(
    old_methods: tuple[SymbolInfo, ...],
    new_methods: tuple[SymbolInfo, ...],
    return_rule: RuleId,
) -> Optional[RuleMatch]:
    """Reapply rules 1-2 to methods present on both sides.

    All parameter checks run before any return-type check, so a
    parameter change in one method outranks a return change in another.
    """
    by_name = {m.name: m for m in new_methods}
    pairs = [(m, by_name[m.name]) for m in old_methods if m.name in by_name]

    for was, now in pairs:
        subject = describe(now)
        match = overload_rule(subject, was, now) or parameter_rules(
            subject, was.parameters, now.parameters
        )
        if match is not None:
            return match
    for was, now in pairs:
        if was.return_type != now.return_type:
            return RuleMatch(
                ChangeType.TYPE_CHANGED,
                return_rule,
                f"{describe(now)}: return type changed from {was.return_type or 'untyped'} "
                f"to {now.return_type or 'untyped'}",
            )
    return None


def enum_rules(subject: str, old: EnumDetails, new: EnumDetails) -> Optional[RuleMatch]:
    new_names = set(new.member_names())
    for name in old.member_names():
        if name not in new_names:
            return RuleMatch(
                ChangeType.SIGNATURE_CHANGED,
                RuleId.ENUM_MEMBER_REMOVED,
                f"{subject}: member '{name}' removed",
            )
    if old.members != new.members:
        return RuleMatch(
            ChangeType.TYPE_CHANGED,
            RuleId.ENUM_MEMBERS_CHANGED,
            f"{subject}: members changed",
        )
    return None


# ── Rule 5: fallback ──────────────────────────────────────────────


def fallback_rule(subject: str, before: SymbolInfo, after: SymbolInfo) -> Optional[RuleMatch]:
    if before.signature != after.signature:
        return RuleMatch(
            ChangeType.SIGNATURE_CHANGED,
            RuleId.FN_SIGNATURE,
            f"{subject}: signature changed",
        )
    if before.return_type != after.return_type:
        return RuleMatch(
            ChangeType.TYPE_CHANGED,
            RuleId.FN_RETURN_TYPE,
            f"{subject}: return type changed",
        )
    return None
