"""Data models for symbol snapshots: immutable structural summaries of one file version.

Every value here is a frozen dataclass whose collections are tuples, so a
snapshot can be shared by reference between pipeline stages and never
changes after the builder returns it. Declaration lines are 1-based.

``line`` and ``is_exported`` are excluded from equality: two symbols with
the same shape compare equal wherever they sit in the file and whatever
their export status, which is what the differ needs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from ..serialization import dataclass_to_dict


class SymbolKind(str, Enum):
    FUNCTION = "function"
    METHOD = "method"
    CLASS = "class"
    INTERFACE = "interface"
    TYPE = "type"
    ENUM = "enum"


class ExportKind(str, Enum):
    NAMED = "named"
    DEFAULT = "default"
    NAMESPACE = "namespace"


class ImportForm(str, Enum):
    NAMED = "named"
    DEFAULT = "default"
    NAMESPACE = "namespace"


# ── Parameters and members ────────────────────────────────────────


@dataclass(frozen=True)
class ParameterInfo:
    name: str
    type: Optional[str] = None
    optional: bool = False
    default_value: Optional[str] = None
    rest: bool = False

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ParameterInfo:
        return cls(**data)


@dataclass(frozen=True)
class PropertyInfo:
    """A property of a class, interface or object type."""

    name: str
    type: Optional[str] = None
    optional: bool = False
    readonly: bool = False

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PropertyInfo:
        return cls(**data)


@dataclass(frozen=True)
class CallSignature:
    """Bare ``(args): R`` member of an interface or object type."""

    parameters: tuple[ParameterInfo, ...] = ()
    return_type: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CallSignature:
        return cls(
            parameters=tuple(ParameterInfo.from_dict(p) for p in data.get("parameters", [])),
            return_type=data.get("return_type"),
        )


@dataclass(frozen=True)
class IndexSignature:
    """``[key: K]: V`` member of an interface or object type."""

    key_name: str
    key_type: Optional[str]
    value_type: Optional[str]
    readonly: bool = False

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IndexSignature:
        return cls(**data)


# ── Kind-specific details (tagged union) ──────────────────────────


@dataclass(frozen=True)
class FunctionDetails:
    """Details for functions and methods."""

    is_async: bool = False
    is_generator: bool = False
    is_static: bool = False
    type_parameters: Optional[str] = None

    variant = "function"

    def to_dict(self) -> dict[str, Any]:
        return {"variant": self.variant, **dataclass_to_dict(self)}


@dataclass(frozen=True)
class ClassDetails:
    extends: Optional[str] = None
    implements: tuple[str, ...] = ()
    methods: tuple[SymbolInfo, ...] = ()
    properties: tuple[PropertyInfo, ...] = ()
    is_abstract: bool = False

    variant = "class"

    def method(self, name: str) -> Optional[SymbolInfo]:
        for m in self.methods:
            if m.name == name:
                return m
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"variant": self.variant, **dataclass_to_dict(self)}


@dataclass(frozen=True)
class ShapeDetails:
    """Details for interfaces and type aliases.

    ``is_object_shape`` is False for aliases of non-object types
    (unions, primitives, function types); such aliases carry only
    ``type_text``.
    """

    type_text: str = ""
    is_object_shape: bool = True
    extends: tuple[str, ...] = ()
    properties: tuple[PropertyInfo, ...] = ()
    methods: tuple[SymbolInfo, ...] = ()
    call_signature: Optional[CallSignature] = None
    index_signature: Optional[IndexSignature] = None

    variant = "shape"

    def member_names(self) -> list[str]:
        return [p.name for p in self.properties] + [m.name for m in self.methods]

    def to_dict(self) -> dict[str, Any]:
        return {"variant": self.variant, **dataclass_to_dict(self)}


@dataclass(frozen=True)
class EnumMember:
    name: str
    value: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


@dataclass(frozen=True)
class EnumDetails:
    members: tuple[EnumMember, ...] = ()
    is_const: bool = False

    variant = "enum"

    def member_names(self) -> list[str]:
        return [m.name for m in self.members]

    def to_dict(self) -> dict[str, Any]:
        return {"variant": self.variant, **dataclass_to_dict(self)}


SymbolDetails = Union[FunctionDetails, ClassDetails, ShapeDetails, EnumDetails]


def details_from_dict(data: dict[str, Any]) -> SymbolDetails:
    payload = {k: v for k, v in data.items() if k != "variant"}
    variant = data.get("variant")
    if variant == FunctionDetails.variant:
        return FunctionDetails(**payload)
    if variant == ClassDetails.variant:
        return ClassDetails(
            extends=payload.get("extends"),
            implements=tuple(payload.get("implements", [])),
            methods=tuple(SymbolInfo.from_dict(m) for m in payload.get("methods", [])),
            properties=tuple(PropertyInfo.from_dict(p) for p in payload.get("properties", [])),
            is_abstract=payload.get("is_abstract", False),
        )
    if variant == ShapeDetails.variant:
        call = payload.get("call_signature")
        index = payload.get("index_signature")
        return ShapeDetails(
            type_text=payload.get("type_text", ""),
            is_object_shape=payload.get("is_object_shape", True),
            extends=tuple(payload.get("extends", [])),
            properties=tuple(PropertyInfo.from_dict(p) for p in payload.get("properties", [])),
            methods=tuple(SymbolInfo.from_dict(m) for m in payload.get("methods", [])),
            call_signature=CallSignature.from_dict(call) if call else None,
            index_signature=IndexSignature.from_dict(index) if index else None,
        )
    if variant == EnumDetails.variant:
        return EnumDetails(
            members=tuple(EnumMember(**m) for m in payload.get("members", [])),
            is_const=payload.get("is_const", False),
        )
    raise ValueError(f"Unknown symbol details variant: {variant!r}")


# ── Symbols ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class SymbolInfo:
    """One declared symbol.

    ``qualified_name`` is dotted for class and interface members
    (``Widget.render``). ``overloads`` holds the signature text of each
    overload declaration, in source order, and is empty for symbols
    declared once.
    """

    name: str
    qualified_name: str
    kind: SymbolKind
    signature: str
    details: SymbolDetails
    return_type: Optional[str] = None
    parameters: tuple[ParameterInfo, ...] = ()
    overloads: tuple[str, ...] = ()
    line: int = field(default=1, compare=False)
    is_exported: bool = field(default=False, compare=False)

    @property
    def is_function_like(self) -> bool:
        return self.kind in (SymbolKind.FUNCTION, SymbolKind.METHOD)

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SymbolInfo:
        return cls(
            name=data["name"],
            qualified_name=data["qualified_name"],
            kind=SymbolKind(data["kind"]),
            signature=data["signature"],
            details=details_from_dict(data["details"]),
            return_type=data.get("return_type"),
            parameters=tuple(ParameterInfo.from_dict(p) for p in data.get("parameters", [])),
            overloads=tuple(data.get("overloads", [])),
            line=data.get("line", 1),
            is_exported=data.get("is_exported", False),
        )


# ── Exports and imports ───────────────────────────────────────────


@dataclass(frozen=True)
class ExportInfo:
    """One export entry.

    ``name`` is the public name, except for default exports, where it is
    the declared name when there is one (``default`` otherwise) so that
    turning a named export into a default export is a change to the same
    entry. ``*`` stands for ``export * from``.

    ``source_module``, ``exported_name`` and ``local_name`` are set only
    for re-exports: the raw module specifier, the name inside that
    module, and the public alias.
    """

    name: str
    export_kind: ExportKind
    declared_kind: str
    line: int = field(compare=False)
    source_module: Optional[str] = None
    exported_name: Optional[str] = None
    local_name: Optional[str] = None
    is_type_only: bool = False

    @property
    def is_reexport(self) -> bool:
        return self.source_module is not None

    @property
    def public_name(self) -> str:
        """The name importers use."""
        return "default" if self.export_kind is ExportKind.DEFAULT else self.name

    @property
    def key(self) -> tuple[str, Optional[str]]:
        return (self.name, self.source_module)

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExportInfo:
        return cls(**{**data, "export_kind": ExportKind(data["export_kind"])})


@dataclass(frozen=True)
class ImportBinding:
    """A single name bound by an import: ``imported`` as seen in the source module."""

    imported: str
    local: str
    form: ImportForm

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


@dataclass(frozen=True)
class ImportInfo:
    module: str
    bindings: tuple[ImportBinding, ...] = ()
    is_type_only: bool = False
    line: int = field(default=1, compare=False)

    @property
    def symbols(self) -> list[str]:
        return [b.imported for b in self.bindings if b.form is ImportForm.NAMED]

    @property
    def is_default(self) -> bool:
        return any(b.form is ImportForm.DEFAULT for b in self.bindings)

    @property
    def is_namespace(self) -> bool:
        return any(b.form is ImportForm.NAMESPACE for b in self.bindings)

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImportInfo:
        return cls(
            module=data["module"],
            bindings=tuple(
                ImportBinding(b["imported"], b["local"], ImportForm(b["form"]))
                for b in data.get("bindings", [])
            ),
            is_type_only=data.get("is_type_only", False),
            line=data.get("line", 1),
        )


# ── Snapshot ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class SymbolSnapshot:
    """Structural summary of one file version.

    ``degraded`` is set when the source did not parse cleanly; the
    collections then hold whatever could be recovered.
    """

    file_path: str
    content_hash: str
    timestamp: str = field(default="", compare=False)
    language: str = "typescript"
    functions: tuple[SymbolInfo, ...] = ()
    classes: tuple[SymbolInfo, ...] = ()
    interfaces: tuple[SymbolInfo, ...] = ()
    type_aliases: tuple[SymbolInfo, ...] = ()
    enums: tuple[SymbolInfo, ...] = ()
    exports: tuple[ExportInfo, ...] = ()
    imports: tuple[ImportInfo, ...] = ()
    degraded: bool = False

    def symbols(self) -> list[SymbolInfo]:
        """All top-level symbols, functions first, in source order per kind."""
        return [
            *self.functions,
            *self.classes,
            *self.interfaces,
            *self.type_aliases,
            *self.enums,
        ]

    def by_kind(self) -> dict[SymbolKind, tuple[SymbolInfo, ...]]:
        return {
            SymbolKind.FUNCTION: self.functions,
            SymbolKind.CLASS: self.classes,
            SymbolKind.INTERFACE: self.interfaces,
            SymbolKind.TYPE: self.type_aliases,
            SymbolKind.ENUM: self.enums,
        }

    def exported_names(self) -> set[str]:
        return {e.name for e in self.exports}

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SymbolSnapshot:
        def _symbols(key: str) -> tuple[SymbolInfo, ...]:
            return tuple(SymbolInfo.from_dict(s) for s in data.get(key, []))

        return cls(
            file_path=data["file_path"],
            content_hash=data["content_hash"],
            timestamp=data.get("timestamp", ""),
            language=data.get("language", "typescript"),
            functions=_symbols("functions"),
            classes=_symbols("classes"),
            interfaces=_symbols("interfaces"),
            type_aliases=_symbols("type_aliases"),
            enums=_symbols("enums"),
            exports=tuple(ExportInfo.from_dict(e) for e in data.get("exports", [])),
            imports=tuple(ImportInfo.from_dict(i) for i in data.get("imports", [])),
            degraded=data.get("degraded", False),
        )
