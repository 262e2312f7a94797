"""Conversion of result values to plain, order-preserving structures.

Everything a caller may want to cache (snapshots, diffs, graphs, impact
lists) goes through ``to_plain`` so the output is made of dicts, lists,
strings, numbers, booleans and ``None`` only.
"""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any


def to_plain(obj: Any) -> Any:
    """Convert ``obj`` to a JSON-compatible form, keeping field order."""
    if obj is None:
        return None
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (str, int, float, bool)):
        return str(obj) if isinstance(obj, str) else obj
    if isinstance(obj, (list, tuple)):
        return [to_plain(x) for x in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted(to_plain(x) for x in obj)
    if isinstance(obj, dict):
        return {str(k): to_plain(v) for k, v in obj.items()}
    if isinstance(obj, Path):
        return str(obj)
    if is_dataclass(obj) and not isinstance(obj, type):
        to_dict = getattr(obj, "to_dict", None)
        if to_dict is not None:
            return to_dict()
        return {f.name: to_plain(getattr(obj, f.name)) for f in fields(obj)}
    raise TypeError(f"Cannot convert {type(obj).__name__} to a plain value")


def dataclass_to_dict(obj: Any) -> dict[str, Any]:
    """Field-by-field plain dict of a dataclass instance."""
    return {f.name: to_plain(getattr(obj, f.name)) for f in fields(obj)}


def dumps(obj: Any, indent: int | None = 2) -> str:
    return json.dumps(to_plain(obj), indent=indent)
