"""Possible-rename hints between removed and added symbols.

A rename is never inferred as such: the diff always reports one removal
and one addition. This module only annotates pairs whose signatures are
nearly identical once the symbol's own name is masked out, scored with
``difflib.SequenceMatcher``.
"""

import logging
import re
from difflib import SequenceMatcher
from typing import List, Sequence, Tuple

from ..snapshot.models import SymbolInfo
from .models import RenameHint

logger = logging.getLogger(__name__)

_MASK = "<name>"


def _masked_signature(symbol: SymbolInfo) -> str:
    pattern = rf"(?<![\w$]){re.escape(symbol.name)}(?![\w$])"
    return re.sub(pattern, _MASK, symbol.signature, count=1)


def signature_similarity(old: SymbolInfo, new: SymbolInfo) -> float:
    """Similarity in [0, 1] of two signatures with their own names masked."""
    return SequenceMatcher(None, _masked_signature(old), _masked_signature(new)).ratio()


def suggest_renames(
    removed: Sequence[SymbolInfo],
    added: Sequence[SymbolInfo],
    threshold: float = 0.9,
) -> List[RenameHint]:
    """Pair removed and added symbols of the same kind with near-identical signatures.

    Pairing is greedy and one-to-one, best score first; ties break on
    names so the result is stable.

    Args:
        removed: Symbols present only in the before snapshot.
        added: Symbols present only in the after snapshot.
        threshold: Minimum similarity for a pair to be reported.

    Returns:
        Hints ordered by descending similarity.
    """
    scored: List[Tuple[float, SymbolInfo, SymbolInfo]] = []
    for old in removed:
        for new in added:
            if old.kind is not new.kind:
                continue
            score = signature_similarity(old, new)
            if score >= threshold:
                scored.append((score, old, new))

    scored.sort(key=lambda item: (-item[0], item[1].name, item[2].name))

    hints: List[RenameHint] = []
    taken_old: set = set()
    taken_new: set = set()
    for score, old, new in scored:
        if old.name in taken_old or new.name in taken_new:
            continue
        taken_old.add(old.name)
        taken_new.add(new.name)
        hints.append(
            RenameHint(
                old_name=old.name,
                new_name=new.name,
                kind=old.kind,
                similarity=round(score, 3),
            )
        )

    if hints:
        logger.debug("Possible renames: %s", ", ".join(f"{h.old_name}->{h.new_name}" for h in hints))
    return hints
