"""Regex-based textual scanner.

The second tier behind the tree-sitter structural extraction. Used when a
file does not parse cleanly, and by impact resolution when structural
traversal finds no usage. Results are approximate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Container, Iterable, Optional

_STATIC_SPECIFIER = re.compile(
    r"""^[ \t]*(?:import|export)\s+(?:type\s+)?(?:[\w*${}\s,]+?\s+from\s+)?['"]([^'"\n]+)['"]""",
    re.MULTILINE,
)
_REQUIRE_SPECIFIER = re.compile(r"""\brequire\s*\(\s*['"]([^'"\n]+)['"]\s*\)""")
_DYNAMIC_SPECIFIER = re.compile(r"""\bimport\s*\(\s*['"]([^'"\n]+)['"]\s*\)""")

_STAR_REEXPORT = re.compile(r"""^[ \t]*export\s*\*\s*from\s*['"]([^'"\n]+)['"]""", re.MULTILINE)
_NAMESPACE_REEXPORT = re.compile(
    r"""^[ \t]*export\s*\*\s*as\s+([\w$]+)\s+from\s*['"]([^'"\n]+)['"]""", re.MULTILINE
)
_NAMED_REEXPORT = re.compile(
    r"""^[ \t]*export\s+(type\s+)?\{([^}]*)\}\s*from\s*['"]([^'"\n]+)['"]""", re.MULTILINE
)


@dataclass(frozen=True)
class TextualReExport:
    """A re-export found by text: ``name`` is public, ``source_name`` is upstream."""

    name: str
    source_name: str
    specifier: str
    line: int
    is_namespace: bool = False
    is_type_only: bool = False


def _line_of(content: str, offset: int) -> int:
    return content.count("\n", 0, offset)


def _word(name: str) -> str:
    return rf"(?<![\w$]){re.escape(name)}(?![\w$])"


@dataclass
class RegexFallbackScanner:
    """Textual scanner over raw source.

    All line numbers returned are 0-based.
    """

    def module_specifiers(self, content: str) -> list[tuple[str, int]]:
        """Module specifiers named by import/export-from/require/import() with their lines."""
        found: list[tuple[str, int]] = []
        for pattern in (_STATIC_SPECIFIER, _REQUIRE_SPECIFIER, _DYNAMIC_SPECIFIER):
            for match in pattern.finditer(content):
                found.append((match.group(1), _line_of(content, match.start(1))))
        found.sort(key=lambda item: item[1])
        return found

    def dynamic_specifiers(self, content: str) -> list[tuple[str, int]]:
        """Specifiers of ``require('x')`` and ``import('x')`` calls only."""
        found: list[tuple[str, int]] = []
        for pattern in (_REQUIRE_SPECIFIER, _DYNAMIC_SPECIFIER):
            for match in pattern.finditer(content):
                found.append((match.group(1), _line_of(content, match.start(1))))
        found.sort(key=lambda item: item[1])
        return found

    def reexports(self, content: str) -> list[TextualReExport]:
        results: list[TextualReExport] = []
        for match in _STAR_REEXPORT.finditer(content):
            results.append(
                TextualReExport(
                    name="*",
                    source_name="*",
                    specifier=match.group(1),
                    line=_line_of(content, match.start()),
                    is_namespace=True,
                )
            )
        for match in _NAMESPACE_REEXPORT.finditer(content):
            results.append(
                TextualReExport(
                    name=match.group(1),
                    source_name="*",
                    specifier=match.group(2),
                    line=_line_of(content, match.start()),
                    is_namespace=True,
                )
            )
        for match in _NAMED_REEXPORT.finditer(content):
            type_only = bool(match.group(1))
            line = _line_of(content, match.start())
            for spec in match.group(2).split(","):
                spec = spec.strip()
                if not spec:
                    continue
                spec_type_only = type_only
                if spec.startswith("type "):
                    spec_type_only = True
                    spec = spec[5:].strip()
                source_name, _, alias = spec.partition(" as ")
                source_name = source_name.strip()
                results.append(
                    TextualReExport(
                        name=alias.strip() or source_name,
                        source_name=source_name,
                        specifier=match.group(3),
                        line=line,
                        is_type_only=spec_type_only,
                    )
                )
        results.sort(key=lambda r: r.line)
        return results

    def references(self, content: str, names: Iterable[str]) -> Optional[str]:
        """First of ``names`` the text appears to reference, or None.

        A reference is a named or default import of the name, a member
        access ``ns.name``, or a call/member/index/generic use ``name(``.
        """
        for name in names:
            if name in ("*", "default"):
                continue
            word = _word(name)
            patterns = (
                rf"import\s+(?:type\s+)?\{{[^}}]*{word}[^}}]*\}}\s*from",
                rf"import\s+{word}\s*(?:,|from)",
                rf"[\w$]\.{word}",
                rf"{word}\s*[(.\[<]",
                rf"[:<|&,]\s*{word}",
                rf"new\s+{word}",
                rf"extends\s+{word}",
                rf"implements\s+{word}",
            )
            if any(re.search(p, content) for p in patterns):
                return name
        return None

    def first_line_of(
        self, content: str, names: Iterable[str], skip_lines: Container[int] = ()
    ) -> Optional[int]:
        """0-based line of the first plain-text occurrence of any name.

        Lines in ``skip_lines`` (typically import statements) are ignored.
        """
        words = [_word(n) for n in names if n not in ("*", "default")]
        if not words:
            return None
        pattern = re.compile("|".join(words))
        for index, line in enumerate(content.splitlines()):
            if index in skip_lines:
                continue
            if pattern.search(line):
                return index
        return None
