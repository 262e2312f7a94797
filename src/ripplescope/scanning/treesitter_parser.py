"""Tree-sitter parser wrapper for the TypeScript and TSX grammars.

Grammar objects are loaded once per process; ``Parser`` instances are kept
per thread because a tree-sitter parser must not be shared between
threads that parse concurrently.

Usage:
    parser = TreeSitterParser()
    tree = parser.parse(code_bytes, "typescript")
    captures = parser.query(tree, query_str, "typescript")
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import tree_sitter
import tree_sitter_typescript

from .languages import TSX, TYPESCRIPT

logger = logging.getLogger(__name__)

Node = tree_sitter.Node
Tree = tree_sitter.Tree
Capture = tuple[Node, str]

_GRAMMARS: dict[str, Any] = {
    TYPESCRIPT: tree_sitter_typescript.language_typescript,
    TSX: tree_sitter_typescript.language_tsx,
}

_languages: dict[str, tree_sitter.Language] = {}
_languages_lock = threading.Lock()


def _language(name: str) -> tree_sitter.Language:
    with _languages_lock:
        lang = _languages.get(name)
        if lang is None:
            # tree-sitter >= 0.23 grammar packages return a capsule; wrap it.
            lang = tree_sitter.Language(_GRAMMARS[name]())
            _languages[name] = lang
        return lang


def get_supported_languages() -> list[str]:
    return list(_GRAMMARS)


class TreeSitterParser:
    """Parses source bytes with the grammar registered under a language name."""

    def __init__(self) -> None:
        self._local = threading.local()
        self._queries: dict[tuple[str, str], tree_sitter.Query] = {}
        self._queries_lock = threading.Lock()

    def _parser(self, language: str) -> tree_sitter.Parser:
        parsers: dict[str, tree_sitter.Parser] | None = getattr(self._local, "parsers", None)
        if parsers is None:
            parsers = {}
            self._local.parsers = parsers
        parser = parsers.get(language)
        if parser is None:
            parser = tree_sitter.Parser(_language(language))
            parsers[language] = parser
        return parser

    def parse(self, code: bytes, language: str) -> Tree | None:
        """Parse code and return its syntax tree.

        Returns None for an unknown language. Syntax errors do not fail
        the parse; they surface as ``ERROR`` nodes and
        ``tree.root_node.has_error``.
        """
        if language not in _GRAMMARS:
            return None
        return self._parser(language).parse(code)

    def _compiled(self, query_str: str, language: str) -> tree_sitter.Query:
        key = (language, query_str)
        with self._queries_lock:
            query = self._queries.get(key)
            if query is None:
                query = tree_sitter.Query(_language(language), query_str)
                self._queries[key] = query
            return query

    def query(self, tree: Tree | None, query_str: str, language: str) -> list[Capture]:
        """Run a query on a syntax tree.

        Returns:
            List of (node, capture_name) tuples in match order.
        """
        if tree is None or language not in _GRAMMARS:
            return []

        query = self._compiled(query_str, language)
        # tree-sitter 0.25+: queries execute through a QueryCursor
        cursor = tree_sitter.QueryCursor(query)
        result: list[Capture] = []
        for _pattern_id, captures_dict in cursor.matches(tree.root_node):
            for capture_name, nodes in captures_dict.items():
                for node in nodes:
                    result.append((node, capture_name))
        return result

    def is_language_supported(self, language: str) -> bool:
        return language in _GRAMMARS


def node_text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def string_value(node: Node | None) -> str:
    """Unquote a ``string`` node's text."""
    text = node_text(node)
    if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def line0(node: Node) -> int:
    """0-based start line of ``node``."""
    return node.start_point[0]


def line1(node: Node) -> int:
    """1-based start line of ``node``."""
    return node.start_point[0] + 1
