"""Canonical path keys.

Every path that becomes a key in a graph map passes through
``CanonicalPath`` exactly once, at ingestion. The result is absolute,
forward-slash separated, free of ``.``/``..`` segments and case-folded on
case-insensitive platforms, so two spellings of the same file always hash
to the same key.
"""

from __future__ import annotations

import os
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]

_CASE_INSENSITIVE = os.path.normcase("A") == "a"


class CanonicalPath(str):
    """A ``str`` that is canonical by construction.

    Constructing a ``CanonicalPath`` from an existing ``CanonicalPath`` is
    a no-op, so call sites never need to re-normalize.
    """

    __slots__ = ()

    def __new__(cls, path: PathLike) -> CanonicalPath:
        if isinstance(path, CanonicalPath):
            return path
        return super().__new__(cls, _normalize(os.fspath(path)))

    @property
    def name(self) -> str:
        return self.rsplit("/", 1)[-1]

    @property
    def parent(self) -> CanonicalPath:
        """Containing directory; the root (or a drive root) is its own parent."""
        return CanonicalPath(os.path.dirname(self))

    def relative_to(self, root: PathLike) -> str:
        """Return this path relative to ``root`` with forward slashes."""
        base = CanonicalPath(root)
        if self == base:
            return "."
        prefix = base if base.endswith("/") else base + "/"
        if self.startswith(prefix):
            return self[len(prefix):]
        return str(self)

    def __repr__(self) -> str:
        return f"CanonicalPath({str.__repr__(self)})"


def _normalize(raw: str) -> str:
    absolute = os.path.normpath(os.path.abspath(raw))
    if _CASE_INSENSITIVE:
        absolute = os.path.normcase(absolute)
    return absolute.replace("\\", "/")
