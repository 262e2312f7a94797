"""Usage scanning of one consumer file.

The structural tier binds the consumer's imports from carrier modules
(the changed file and the barrels forwarding it) to local names, then
walks the tree for the first identifier, JSX tag, ``ns.member`` access
or ``ns.Type`` reference that uses one of them. The textual tier looks
for the first plain occurrence of a name outside import statements.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Optional

from ..scanning.fallback import RegexFallbackScanner
from ..scanning.languages import language_for_path
from ..scanning.treesitter_parser import Node, TreeSitterParser, line0, node_text
from ..snapshot.builder import build_snapshot
from ..snapshot.models import ImportForm

logger = logging.getLogger(__name__)

_parser = TreeSitterParser()
_text = RegexFallbackScanner()

_IDENTIFIER_NODES = frozenset(
    {
        "identifier",
        "type_identifier",
        "shorthand_property_identifier",
    }
)

# Names carried by a module; None stands for every export.
CarriedNames = Optional[frozenset[str]]


@dataclass(frozen=True)
class ConsumerUsage:
    """What a consumer file does with the carried names.

    Lines are 0-based. ``references`` is True when the file binds a
    carried name by import, accesses one through a namespace import,
    or (failing both) mentions one in text.
    """

    references: bool
    usage_line: Optional[int] = None
    text_line: Optional[int] = None
    bound: tuple[str, ...] = ()
    import_lines: frozenset[int] = field(default_factory=frozenset)


@dataclass
class _Bindings:
    locals: dict[str, str] = field(default_factory=dict)
    namespaces: dict[str, CarriedNames] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.locals or self.namespaces)


def _bind(
    file_path: str, content: str, carried: Mapping[str, CarriedNames]
) -> _Bindings:
    bindings = _Bindings()
    if not carried:
        return bindings
    snapshot = build_snapshot(file_path, content, timestamp="")
    for info in snapshot.imports:
        if info.module not in carried:
            continue
        names = carried[info.module]
        for binding in info.bindings:
            if binding.form is ImportForm.NAMESPACE:
                bindings.namespaces[binding.local] = names
            elif names is None or binding.imported in names:
                bindings.locals[binding.local] = binding.imported
    return bindings


def _import_line_ranges(root: Node) -> frozenset[int]:
    lines: set[int] = set()
    for statement in root.named_children:
        if _is_import_like(statement):
            lines.update(range(statement.start_point[0], statement.end_point[0] + 1))
    return frozenset(lines)


def _is_import_like(node: Node) -> bool:
    return node.type == "import_statement" or (
        node.type == "export_statement" and node.child_by_field_name("source") is not None
    )


def _first_usage(root: Node, bindings: _Bindings) -> Optional[int]:
    """0-based line of the first node, in document order, using a bound name."""
    stack = list(reversed(root.named_children))
    while stack:
        node = stack.pop()
        if _is_import_like(node):
            continue

        kind = node.type
        if kind in ("member_expression", "nested_type_identifier"):
            children = node.named_children
            if len(children) >= 2 and children[0].type == "identifier":
                namespace = node_text(children[0])
                if namespace in bindings.namespaces:
                    members = bindings.namespaces[namespace]
                    if members is None or node_text(children[-1]) in members:
                        return line0(node)
        elif kind in _IDENTIFIER_NODES:
            text = node_text(node)
            if text in bindings.locals:
                return line0(node)
            if text in bindings.namespaces and bindings.namespaces[text] is None:
                return line0(node)

        stack.extend(reversed(node.named_children))
    return None


def scan_consumer(
    file_path: str,
    content: str,
    carried: Mapping[str, CarriedNames],
    search_names: Iterable[str] = (),
) -> ConsumerUsage:
    """Scan one consumer for uses of the carried names.

    Args:
        file_path: Path of the consumer (selects the grammar).
        content: Consumer source text.
        carried: Raw import specifiers of this file that resolve to a
            carrier module, mapped to the names that carrier exposes.
        search_names: Extra names for the textual tier and the textual
            reference check.

    Returns:
        A ConsumerUsage; never raises on malformed source.
    """
    search_names = tuple(search_names)
    bindings = _bind(file_path, content, carried)

    grammar = language_for_path(file_path).grammar
    tree = _parser.parse(content.encode("utf-8", errors="replace"), grammar)
    root = tree.root_node if tree is not None else None

    usage_line = _first_usage(root, bindings) if root is not None and bindings else None
    import_lines = _import_line_ranges(root) if root is not None else frozenset()

    names: list[str] = []
    for candidate in [*bindings.locals, *search_names]:
        if candidate not in names and candidate not in ("*", "default"):
            names.append(candidate)
    for namespace, members in bindings.namespaces.items():
        if members is None and namespace not in names:
            names.append(namespace)
    text_line = _text.first_line_of(content, names, skip_lines=import_lines) if names else None

    references = bool(bindings.locals) or (
        bool(bindings.namespaces) and usage_line is not None
    )
    if not references and search_names:
        references = _text.references(content, search_names) is not None

    if root is not None and root.has_error:
        logger.debug("Scanning %s with syntax errors", file_path)

    return ConsumerUsage(
        references=references,
        usage_line=usage_line,
        text_line=text_line,
        bound=tuple(bindings.locals),
        import_lines=import_lines,
    )
