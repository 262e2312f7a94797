"""Snapshot builder: one file version in, one SymbolSnapshot out.

Walks the top level of a tree-sitter parse tree and extracts functions
(including ``const f = () => ...``), classes, interfaces, type aliases,
enums, exports and imports. Syntax errors never abort the build: the
tree-sitter parser recovers around them and the snapshot is flagged
``degraded``. Any other failure during extraction yields an empty,
degraded snapshot.
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from ..exceptions import ParsingError
from ..scanning.languages import language_for_path
from ..scanning.treesitter_parser import Node, TreeSitterParser, line1, node_text, string_value
from .models import (
    CallSignature,
    ClassDetails,
    EnumDetails,
    EnumMember,
    ExportInfo,
    ExportKind,
    FunctionDetails,
    ImportBinding,
    ImportForm,
    ImportInfo,
    IndexSignature,
    ParameterInfo,
    PropertyInfo,
    ShapeDetails,
    SymbolInfo,
    SymbolKind,
    SymbolSnapshot,
)

logger = logging.getLogger(__name__)

_parser = TreeSitterParser()

_FUNCTION_VALUES = (
    "arrow_function",
    "function_expression",
    "function",
    "generator_function",
)
_CLASS_DECLS = ("class_declaration", "abstract_class_declaration")
_CLASS_VALUES = ("class",)

_PUNCT_SPACE = re.compile(r"\s*([()\[\]{}<>,;:?|&=])\s*")
_TRAILING_SEP = re.compile(r"[;,]\}")

# (name, declared kind, 1-based line)
Declared = tuple[str, str, int]


def build_snapshot(file_path: str, source: str, timestamp: Optional[str] = None) -> SymbolSnapshot:
    """Build the structural snapshot of ``source``.

    Never raises. Check ``snapshot.degraded`` to find out whether the
    source parsed cleanly.
    """
    content_hash = hashlib.sha256(source.encode("utf-8", errors="replace")).hexdigest()
    stamp = timestamp or datetime.now(timezone.utc).isoformat()
    lang = language_for_path(file_path)

    try:
        return _SnapshotExtractor(file_path, lang.grammar).extract(
            source, content_hash=content_hash, timestamp=stamp, language=lang.name
        )
    except ParsingError as exc:
        logger.warning("%s", exc)
    except Exception as exc:  # extraction must never take the caller down
        logger.warning("Snapshot extraction failed for %s: %s", file_path, exc, exc_info=True)

    return SymbolSnapshot(
        file_path=file_path,
        content_hash=content_hash,
        timestamp=stamp,
        language=lang.name,
        degraded=True,
    )


# ── Text helpers ──────────────────────────────────────────────────


def normalize_type(text: str) -> str:
    """Whitespace- and separator-insensitive form of type text."""
    if not text:
        return ""
    compact = _PUNCT_SPACE.sub(r"\1", " ".join(text.split()))
    compact = compact.replace(";", ",")
    compact = _TRAILING_SEP.sub("}", compact.replace(";}", "}"))
    return compact.strip(",; ")


def _has_token(node: Node, token: str) -> bool:
    return any(not child.is_named and child.type == token for child in node.children)


def _child_of_type(node: Node, *types: str) -> Optional[Node]:
    for child in node.named_children:
        if child.type in types:
            return child
    return None


def _annotation_type(node: Optional[Node]) -> Optional[str]:
    """Type text of a ``type_annotation`` (or similar) node."""
    if node is None:
        return None
    named = node.named_children
    text = node_text(named[-1]) if named else node_text(node).lstrip(":")
    return normalize_type(text) or None


def _type_parameters(node: Node) -> Optional[str]:
    return normalize_type(node_text(node.child_by_field_name("type_parameters"))) or None


def _accessibility(node: Node) -> Optional[str]:
    modifier = _child_of_type(node, "accessibility_modifier")
    return node_text(modifier) if modifier is not None else None


def _is_private(node: Node) -> bool:
    if _accessibility(node) == "private":
        return True
    name = node.child_by_field_name("name")
    return name is not None and name.type == "private_property_identifier"


def render_parameter(param: ParameterInfo) -> str:
    text = ("..." if param.rest else "") + param.name
    if param.optional and param.default_value is None and not param.rest:
        text += "?"
    if param.type:
        text += f": {param.type}"
    if param.default_value is not None:
        text += f" = {param.default_value}"
    return text


def render_callable(
    prefix: str,
    name: str,
    type_params: Optional[str],
    params: tuple[ParameterInfo, ...],
    return_type: Optional[str],
) -> str:
    rendered = f"{prefix}{name}{type_params or ''}({', '.join(render_parameter(p) for p in params)})"
    if return_type:
        rendered += f": {return_type}"
    return rendered


def _render_property(prop: PropertyInfo) -> str:
    text = ("readonly " if prop.readonly else "") + prop.name + ("?" if prop.optional else "")
    if prop.type:
        text += f": {prop.type}"
    return text


def render_shape(
    properties: tuple[PropertyInfo, ...],
    methods: tuple[SymbolInfo, ...],
    call: Optional[CallSignature],
    index: Optional[IndexSignature],
) -> str:
    parts: list[str] = []
    if call is not None:
        parts.append(render_callable("", "", None, call.parameters, call.return_type))
    if index is not None:
        readonly = "readonly " if index.readonly else ""
        parts.append(f"{readonly}[{index.key_name}: {index.key_type}]: {index.value_type}")
    parts.extend(_render_property(p) for p in properties)
    for method in methods:
        parts.extend(method.overloads or (method.signature,))
    return "{ " + "; ".join(parts) + " }" if parts else "{}"


# ── Extraction ────────────────────────────────────────────────────


class _SnapshotExtractor:
    """Single-use walker over one parse tree."""

    def __init__(self, file_path: str, grammar: str) -> None:
        self.file_path = file_path
        self.grammar = grammar
        self.functions: list[SymbolInfo] = []
        self.classes: list[SymbolInfo] = []
        self.interfaces: list[SymbolInfo] = []
        self.type_aliases: list[SymbolInfo] = []
        self.enums: list[SymbolInfo] = []
        self.exports: list[ExportInfo] = []
        self.imports: list[ImportInfo] = []
        # name -> [(signature symbol, exported)] for function overload declarations
        self._overloads: dict[str, list[tuple[SymbolInfo, bool]]] = {}
        self._local_kinds: dict[str, str] = {}
        self._import_bindings: dict[str, tuple[ImportInfo, ImportBinding]] = {}
        # (index into self.exports, local name) for `export { a }` / `export default a`
        self._local_exports: list[tuple[int, str]] = []
        self._exported_locals: set[str] = set()

    def extract(
        self, source: str, *, content_hash: str, timestamp: str, language: str
    ) -> SymbolSnapshot:
        tree = _parser.parse(source.encode("utf-8", errors="replace"), self.grammar)
        if tree is None:
            raise ParsingError(self.file_path, self.grammar, "no grammar available")

        root = tree.root_node
        for statement in root.named_children:
            self._statement(statement)
        self._flush_overloads()
        self._resolve_local_exports()

        def _ordered(symbols: list[SymbolInfo]) -> tuple[SymbolInfo, ...]:
            marked = [
                replace(s, is_exported=True) if s.name in self._exported_locals else s
                for s in symbols
            ]
            return tuple(sorted(marked, key=lambda s: s.line))

        if root.has_error:
            logger.debug("Syntax errors in %s; snapshot is best-effort", self.file_path)

        return SymbolSnapshot(
            file_path=self.file_path,
            content_hash=content_hash,
            timestamp=timestamp,
            language=language,
            functions=_ordered(self.functions),
            classes=_ordered(self.classes),
            interfaces=_ordered(self.interfaces),
            type_aliases=_ordered(self.type_aliases),
            enums=_ordered(self.enums),
            exports=tuple(self.exports),
            imports=tuple(self.imports),
            degraded=root.has_error,
        )

    # ── Statements ───────────────────────────────────────────────

    def _statement(self, node: Node, exported: bool = False) -> list[Declared]:
        kind = node.type
        if kind == "import_statement":
            self._import(node)
            return []
        if kind == "export_statement":
            self._export(node)
            return []
        if kind in ("function_declaration", "generator_function_declaration"):
            return [self._function_declaration(node, exported)]
        if kind == "function_signature":
            return [self._function_signature(node, exported)]
        if kind in _CLASS_DECLS:
            symbol = self._class(node, exported)
            return [(symbol.name, "class", symbol.line)]
        if kind == "interface_declaration":
            symbol = self._interface(node, exported)
            return [(symbol.name, "interface", symbol.line)]
        if kind == "type_alias_declaration":
            symbol = self._type_alias(node, exported)
            return [(symbol.name, "type", symbol.line)]
        if kind == "enum_declaration":
            symbol = self._enum(node, exported)
            return [(symbol.name, "enum", symbol.line)]
        if kind in ("lexical_declaration", "variable_declaration"):
            return self._variables(node, exported)
        if kind == "ambient_declaration":
            declared: list[Declared] = []
            for child in node.named_children:
                declared.extend(self._statement(child, exported))
            return declared
        if kind in ("internal_module", "module"):
            name = node.child_by_field_name("name")
            if name is not None:
                self._local_kinds[node_text(name)] = "namespace"
                return [(node_text(name), "namespace", line1(node))]
            return []
        if kind == "expression_statement":
            inner = node.named_children[0] if node.named_children else None
            if inner is not None and inner.type in ("internal_module", "module"):
                return self._statement(inner, exported)
            return []
        if kind == "ERROR":
            # Salvage whole statements the parser wrapped in an error node.
            for child in node.named_children:
                self._statement(child, exported)
        return []

    # ── Functions ────────────────────────────────────────────────

    def _parameters(
        self, params: Optional[Node], single: Optional[Node] = None
    ) -> tuple[ParameterInfo, ...]:
        if params is None:
            if single is not None:
                return (ParameterInfo(name=node_text(single)),)
            return ()

        result: list[ParameterInfo] = []
        for child in params.named_children:
            if child.type in ("required_parameter", "optional_parameter"):
                pattern = child.child_by_field_name("pattern")
                if pattern is None or pattern.type == "this":
                    continue
                value = child.child_by_field_name("value")
                rest = pattern.type == "rest_pattern"
                name_node = pattern.named_children[0] if rest and pattern.named_children else pattern
                result.append(
                    ParameterInfo(
                        name=normalize_type(node_text(name_node)),
                        type=_annotation_type(child.child_by_field_name("type")),
                        optional=child.type == "optional_parameter" or value is not None,
                        default_value=" ".join(node_text(value).split()) if value is not None else None,
                        rest=rest,
                    )
                )
            elif child.type == "identifier":
                result.append(ParameterInfo(name=node_text(child)))
            elif child.type == "assignment_pattern":
                left = child.child_by_field_name("left")
                right = child.child_by_field_name("right")
                result.append(
                    ParameterInfo(
                        name=node_text(left),
                        optional=True,
                        default_value=" ".join(node_text(right).split()),
                    )
                )
            elif child.type == "rest_pattern":
                inner = child.named_children[0] if child.named_children else child
                result.append(ParameterInfo(name=node_text(inner), rest=True))
        return tuple(result)

    def _function_symbol(self, name: str, node: Node, line: int, exported: bool) -> SymbolInfo:
        params = self._parameters(
            node.child_by_field_name("parameters"), node.child_by_field_name("parameter")
        )
        return_type = _annotation_type(node.child_by_field_name("return_type"))
        type_params = _type_parameters(node)
        is_async = _has_token(node, "async")
        is_generator = node.type.startswith("generator") or _has_token(node, "*")
        prefix = ("async " if is_async else "") + ("function* " if is_generator else "function ")
        return SymbolInfo(
            name=name,
            qualified_name=name,
            kind=SymbolKind.FUNCTION,
            signature=render_callable(prefix, name, type_params, params, return_type),
            details=FunctionDetails(
                is_async=is_async, is_generator=is_generator, type_parameters=type_params
            ),
            return_type=return_type,
            parameters=params,
            line=line,
            is_exported=exported,
        )

    def _function_declaration(self, node: Node, exported: bool) -> Declared:
        name = node_text(node.child_by_field_name("name")) or "default"
        symbol = self._function_symbol(name, node, line1(node), exported)
        pending = self._overloads.pop(name, [])
        if pending:
            symbol = replace(
                symbol,
                overloads=tuple(sig.signature for sig, _ in pending),
                line=pending[0][0].line,
                is_exported=exported or any(flag for _, flag in pending),
            )
        self.functions.append(symbol)
        self._local_kinds[name] = "function"
        return (name, "function", symbol.line)

    def _function_signature(self, node: Node, exported: bool) -> Declared:
        name = node_text(node.child_by_field_name("name"))
        symbol = self._function_symbol(name, node, line1(node), exported)
        self._overloads.setdefault(name, []).append((symbol, exported))
        self._local_kinds[name] = "function"
        return (name, "function", symbol.line)

    def _flush_overloads(self) -> None:
        """Turn signature-only declarations (``declare function``, .d.ts) into symbols."""
        for name, pending in self._overloads.items():
            first, _ = pending[0]
            symbol = replace(
                first,
                is_exported=any(flag for _, flag in pending),
                overloads=tuple(sig.signature for sig, _ in pending) if len(pending) > 1 else (),
            )
            self.functions.append(symbol)
        self._overloads.clear()

    def _variables(self, node: Node, exported: bool) -> list[Declared]:
        declared: list[Declared] = []
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            name = node_text(name_node)
            value = declarator.child_by_field_name("value")
            while value is not None and value.type == "parenthesized_expression" and value.named_children:
                value = value.named_children[0]
            kind = "variable"
            if value is not None and value.type in _FUNCTION_VALUES:
                self.functions.append(self._function_symbol(name, value, line1(declarator), exported))
                kind = "function"
            self._local_kinds[name] = kind
            declared.append((name, kind, line1(declarator)))
        return declared

    # ── Classes ──────────────────────────────────────────────────

    def _method(self, node: Node, owner: str) -> SymbolInfo:
        name = node_text(node.child_by_field_name("name"))
        params = self._parameters(node.child_by_field_name("parameters"))
        return_type = _annotation_type(node.child_by_field_name("return_type"))
        type_params = _type_parameters(node)
        is_static = _has_token(node, "static")
        is_async = _has_token(node, "async")
        optional = _has_token(node, "?")
        prefix = ("static " if is_static else "") + ("async " if is_async else "")
        return SymbolInfo(
            name=name,
            qualified_name=f"{owner}.{name}",
            kind=SymbolKind.METHOD,
            signature=render_callable(
                prefix, name + ("?" if optional else ""), type_params, params, return_type
            ),
            details=FunctionDetails(
                is_async=is_async, is_static=is_static, type_parameters=type_params
            ),
            return_type=return_type,
            parameters=params,
            line=line1(node),
        )

    def _field_as_method(self, node: Node, value: Node, owner: str) -> SymbolInfo:
        name = node_text(node.child_by_field_name("name"))
        function = self._function_symbol(name, value, line1(node), False)
        is_static = _has_token(node, "static")
        return replace(
            function,
            qualified_name=f"{owner}.{name}",
            kind=SymbolKind.METHOD,
            signature=render_callable(
                "static " if is_static else "",
                name,
                function.details.type_parameters,  # type: ignore[union-attr]
                function.parameters,
                function.return_type,
            ),
            details=replace(function.details, is_static=is_static),
        )

    def _class(self, node: Node, exported: bool, name: Optional[str] = None) -> SymbolInfo:
        name = name or node_text(node.child_by_field_name("name")) or "default"
        type_params = _type_parameters(node)
        is_abstract = node.type == "abstract_class_declaration"

        extends: Optional[str] = None
        implements: list[str] = []
        heritage = _child_of_type(node, "class_heritage")
        if heritage is not None:
            for clause in heritage.named_children:
                if clause.type == "extends_clause":
                    extends = normalize_type(node_text(clause)[len("extends"):]) or None
                elif clause.type == "implements_clause":
                    implements.extend(normalize_type(node_text(t)) for t in clause.named_children)

        methods: list[SymbolInfo] = []
        properties: list[PropertyInfo] = []
        accessors: dict[str, dict[str, object]] = {}
        pending: dict[str, list[SymbolInfo]] = {}

        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else ():
            kind = member.type
            if kind not in (
                "method_definition",
                "method_signature",
                "abstract_method_signature",
                "public_field_definition",
            ) or _is_private(member):
                continue

            if kind == "method_signature":
                method = self._method(member, name)
                pending.setdefault(method.name, []).append(method)
            elif kind == "public_field_definition":
                value = member.child_by_field_name("value")
                field_type = member.child_by_field_name("type")
                if value is not None and value.type in _FUNCTION_VALUES and field_type is None:
                    methods.append(self._field_as_method(member, value, name))
                    continue
                properties.append(
                    PropertyInfo(
                        name=node_text(member.child_by_field_name("name")),
                        type=_annotation_type(field_type),
                        optional=_has_token(member, "?"),
                        readonly=_has_token(member, "readonly"),
                    )
                )
            elif _has_token(member, "get") or _has_token(member, "set"):
                method = self._method(member, name)
                entry = accessors.setdefault(method.name, {"type": None, "setter": False})
                if _has_token(member, "get"):
                    entry["type"] = method.return_type or entry["type"]
                else:
                    entry["setter"] = True
                    if method.parameters and entry["type"] is None:
                        entry["type"] = method.parameters[0].type
            else:
                method = self._method(member, name)
                overloads = pending.pop(method.name, [])
                if overloads:
                    method = replace(method, overloads=tuple(m.signature for m in overloads))
                methods.append(method)

        for sigs in pending.values():
            first = sigs[0]
            if len(sigs) > 1:
                first = replace(first, overloads=tuple(m.signature for m in sigs))
            methods.append(first)
        for accessor_name, entry in accessors.items():
            properties.append(
                PropertyInfo(
                    name=accessor_name,
                    type=entry["type"],  # type: ignore[arg-type]
                    readonly=not entry["setter"],
                )
            )

        header = ("abstract " if is_abstract else "") + f"class {name}{type_params or ''}"
        if extends:
            header += f" extends {extends}"
        if implements:
            header += f" implements {', '.join(implements)}"
        member_text = render_shape(tuple(properties), tuple(methods), None, None)

        symbol = SymbolInfo(
            name=name,
            qualified_name=name,
            kind=SymbolKind.CLASS,
            signature=f"{header} {member_text}",
            details=ClassDetails(
                extends=extends,
                implements=tuple(implements),
                methods=tuple(methods),
                properties=tuple(properties),
                is_abstract=is_abstract,
            ),
            line=line1(node),
            is_exported=exported,
        )
        self.classes.append(symbol)
        self._local_kinds[name] = "class"
        return symbol

    # ── Interfaces and type aliases ──────────────────────────────

    def _shape_members(
        self, body: Optional[Node], owner: str
    ) -> tuple[
        tuple[PropertyInfo, ...],
        tuple[SymbolInfo, ...],
        Optional[CallSignature],
        Optional[IndexSignature],
    ]:
        properties: list[PropertyInfo] = []
        methods: dict[str, list[SymbolInfo]] = {}
        call: Optional[CallSignature] = None
        index: Optional[IndexSignature] = None

        for member in body.named_children if body is not None else ():
            kind = member.type
            if kind == "property_signature":
                properties.append(
                    PropertyInfo(
                        name=node_text(member.child_by_field_name("name")),
                        type=_annotation_type(member.child_by_field_name("type")),
                        optional=_has_token(member, "?"),
                        readonly=_has_token(member, "readonly"),
                    )
                )
            elif kind == "method_signature":
                method = self._method(member, owner)
                methods.setdefault(method.name, []).append(method)
            elif kind == "call_signature" and call is None:
                call = CallSignature(
                    parameters=self._parameters(member.child_by_field_name("parameters")),
                    return_type=_annotation_type(member.child_by_field_name("return_type")),
                )
            elif kind == "index_signature" and index is None:
                index = IndexSignature(
                    key_name=node_text(member.child_by_field_name("name")),
                    key_type=normalize_type(node_text(member.child_by_field_name("index_type")))
                    or None,
                    value_type=_annotation_type(member.child_by_field_name("type")),
                    readonly=_has_token(member, "readonly"),
                )

        merged: list[SymbolInfo] = []
        for sigs in methods.values():
            first = sigs[0]
            if len(sigs) > 1:
                first = replace(first, overloads=tuple(m.signature for m in sigs))
            merged.append(first)
        return tuple(properties), tuple(merged), call, index

    def _interface(self, node: Node, exported: bool) -> SymbolInfo:
        name = node_text(node.child_by_field_name("name"))
        type_params = _type_parameters(node)
        extends: tuple[str, ...] = ()
        clause = _child_of_type(node, "extends_type_clause", "extends_clause")
        if clause is not None:
            extends = tuple(normalize_type(node_text(t)) for t in clause.named_children)

        properties, methods, call, index = self._shape_members(
            node.child_by_field_name("body"), name
        )
        shape = render_shape(properties, methods, call, index)
        header = f"interface {name}{type_params or ''}"
        if extends:
            header += f" extends {', '.join(extends)}"

        symbol = SymbolInfo(
            name=name,
            qualified_name=name,
            kind=SymbolKind.INTERFACE,
            signature=f"{header} {shape}",
            details=ShapeDetails(
                type_text=shape,
                is_object_shape=True,
                extends=extends,
                properties=properties,
                methods=methods,
                call_signature=call,
                index_signature=index,
            ),
            line=line1(node),
            is_exported=exported,
        )
        self.interfaces.append(symbol)
        self._local_kinds[name] = "interface"
        return symbol

    def _type_alias(self, node: Node, exported: bool) -> SymbolInfo:
        name = node_text(node.child_by_field_name("name"))
        type_params = _type_parameters(node)
        value = node.child_by_field_name("value")

        if value is not None and value.type == "object_type":
            properties, methods, call, index = self._shape_members(value, name)
            type_text = render_shape(properties, methods, call, index)
            details = ShapeDetails(
                type_text=type_text,
                is_object_shape=True,
                properties=properties,
                methods=methods,
                call_signature=call,
                index_signature=index,
            )
        else:
            type_text = normalize_type(node_text(value))
            details = ShapeDetails(type_text=type_text, is_object_shape=False)

        symbol = SymbolInfo(
            name=name,
            qualified_name=name,
            kind=SymbolKind.TYPE,
            signature=f"type {name}{type_params or ''} = {type_text}",
            details=details,
            line=line1(node),
            is_exported=exported,
        )
        self.type_aliases.append(symbol)
        self._local_kinds[name] = "type"
        return symbol

    # ── Enums ────────────────────────────────────────────────────

    def _enum(self, node: Node, exported: bool) -> SymbolInfo:
        name = node_text(node.child_by_field_name("name"))
        is_const = _has_token(node, "const")
        members: list[EnumMember] = []
        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else ():
            if member.type == "enum_assignment":
                value = member.child_by_field_name("value")
                members.append(
                    EnumMember(
                        name=string_value(member.child_by_field_name("name")),
                        value=" ".join(node_text(value).split()) if value is not None else None,
                    )
                )
            elif member.type in ("property_identifier", "string", "identifier"):
                members.append(EnumMember(name=string_value(member)))

        rendered = ", ".join(m.name if m.value is None else f"{m.name} = {m.value}" for m in members)
        symbol = SymbolInfo(
            name=name,
            qualified_name=name,
            kind=SymbolKind.ENUM,
            signature=("const " if is_const else "") + f"enum {name} {{ {rendered} }}",
            details=EnumDetails(members=tuple(members), is_const=is_const),
            line=line1(node),
            is_exported=exported,
        )
        self.enums.append(symbol)
        self._local_kinds[name] = "enum"
        return symbol

    # ── Imports ──────────────────────────────────────────────────

    def _import(self, node: Node) -> None:
        source = node.child_by_field_name("source")
        bindings: list[ImportBinding] = []

        require_clause = _child_of_type(node, "import_require_clause")
        if require_clause is not None:
            source = require_clause.child_by_field_name("source") or source
            local = _child_of_type(require_clause, "identifier")
            if local is not None:
                bindings.append(ImportBinding("*", node_text(local), ImportForm.NAMESPACE))

        clause = _child_of_type(node, "import_clause")
        for part in clause.named_children if clause is not None else ():
            if part.type == "identifier":
                bindings.append(ImportBinding("default", node_text(part), ImportForm.DEFAULT))
            elif part.type == "namespace_import":
                local = _child_of_type(part, "identifier")
                if local is not None:
                    bindings.append(ImportBinding("*", node_text(local), ImportForm.NAMESPACE))
            elif part.type == "named_imports":
                for spec in part.named_children:
                    if spec.type != "import_specifier":
                        continue
                    imported = string_value(spec.child_by_field_name("name"))
                    alias = spec.child_by_field_name("alias")
                    bindings.append(
                        ImportBinding(
                            imported,
                            node_text(alias) if alias is not None else imported,
                            ImportForm.DEFAULT if imported == "default" else ImportForm.NAMED,
                        )
                    )

        if source is None:
            return
        info = ImportInfo(
            module=string_value(source),
            bindings=tuple(bindings),
            is_type_only=_has_token(node, "type"),
            line=line1(node),
        )
        self.imports.append(info)
        for binding in info.bindings:
            self._import_bindings[binding.local] = (info, binding)

    # ── Exports ──────────────────────────────────────────────────

    def _export(self, node: Node) -> None:
        line = line1(node)
        is_default = _has_token(node, "default")
        is_type_only = _has_token(node, "type")
        source = node.child_by_field_name("source")
        declaration = node.child_by_field_name("declaration")
        value = node.child_by_field_name("value")
        clause = _child_of_type(node, "export_clause")

        if source is not None:
            self._reexport(node, string_value(source), clause, line, is_type_only)
            return

        if declaration is not None:
            for name, declared_kind, decl_line in self._statement(declaration, exported=True):
                public = name
                # Overload signatures each carry their own `export` keyword.
                if any(e.name == public and not e.is_reexport for e in self.exports):
                    continue
                self.exports.append(
                    ExportInfo(
                        name=public,
                        export_kind=ExportKind.DEFAULT if is_default else ExportKind.NAMED,
                        declared_kind=declared_kind,
                        line=decl_line,
                        is_type_only=declared_kind in ("interface", "type"),
                    )
                )
                if is_default:
                    self._exported_locals.add(name)
            return

        if is_default and value is not None:
            self._default_value(value, line)
            return

        if clause is not None:
            for spec in clause.named_children:
                if spec.type != "export_specifier":
                    continue
                local = string_value(spec.child_by_field_name("name"))
                alias = spec.child_by_field_name("alias")
                public = string_value(alias) if alias is not None else local
                self._local_exports.append((len(self.exports), local))
                self._exported_locals.add(local)
                self.exports.append(
                    ExportInfo(
                        name=local if public == "default" else public,
                        export_kind=ExportKind.DEFAULT if public == "default" else ExportKind.NAMED,
                        declared_kind="unknown",
                        line=line,
                        is_type_only=is_type_only or _has_token(spec, "type"),
                    )
                )

    def _reexport(
        self, node: Node, specifier: str, clause: Optional[Node], line: int, is_type_only: bool
    ) -> None:
        namespace = _child_of_type(node, "namespace_export")
        if namespace is not None:
            alias = _child_of_type(namespace, "identifier", "string")
            public = string_value(alias)
            self.exports.append(
                ExportInfo(
                    name=public,
                    export_kind=ExportKind.NAMESPACE,
                    declared_kind="namespace",
                    line=line,
                    source_module=specifier,
                    exported_name="*",
                    local_name=public,
                    is_type_only=is_type_only,
                )
            )
            return

        if clause is not None:
            for spec in clause.named_children:
                if spec.type != "export_specifier":
                    continue
                original = string_value(spec.child_by_field_name("name"))
                alias = spec.child_by_field_name("alias")
                public = string_value(alias) if alias is not None else original
                self.exports.append(
                    ExportInfo(
                        name=original if public == "default" else public,
                        export_kind=ExportKind.DEFAULT if public == "default" else ExportKind.NAMED,
                        declared_kind="re-export",
                        line=line,
                        source_module=specifier,
                        exported_name=original,
                        local_name=public,
                        is_type_only=is_type_only or _has_token(spec, "type"),
                    )
                )
            return

        self.exports.append(
            ExportInfo(
                name="*",
                export_kind=ExportKind.NAMESPACE,
                declared_kind="namespace",
                line=line,
                source_module=specifier,
                exported_name="*",
                is_type_only=is_type_only,
            )
        )

    def _default_value(self, value: Node, line: int) -> None:
        declared_kind = "expression"
        name = "default"
        if value.type == "identifier":
            name = node_text(value)
            self._local_exports.append((len(self.exports), name))
            self._exported_locals.add(name)
            declared_kind = "unknown"
        elif value.type in _FUNCTION_VALUES:
            name = node_text(value.child_by_field_name("name")) or "default"
            self.functions.append(self._function_symbol(name, value, line, True))
            declared_kind = "function"
        elif value.type in _CLASS_VALUES:
            name = node_text(value.child_by_field_name("name")) or "default"
            self._class(value, True, name=name)
            declared_kind = "class"
        self.exports.append(
            ExportInfo(
                name=name,
                export_kind=ExportKind.DEFAULT,
                declared_kind=declared_kind,
                line=line,
            )
        )

    def _resolve_local_exports(self) -> None:
        """Fill in declared kinds of ``export { a }``; imported bindings become re-exports."""
        for index, local in self._local_exports:
            entry = self.exports[index]
            imported = self._import_bindings.get(local)
            if imported is not None:
                info, binding = imported
                namespace = binding.form is ImportForm.NAMESPACE
                self.exports[index] = replace(
                    entry,
                    export_kind=ExportKind.NAMESPACE if namespace else entry.export_kind,
                    declared_kind="namespace" if namespace else "re-export",
                    source_module=info.module,
                    exported_name=binding.imported,
                    local_name=entry.public_name,
                    is_type_only=entry.is_type_only or info.is_type_only,
                )
                self._exported_locals.discard(local)
            else:
                declared = self._local_kinds.get(local, "unknown")
                self.exports[index] = replace(
                    entry,
                    declared_kind=declared,
                    is_type_only=entry.is_type_only or declared in ("interface", "type"),
                )
