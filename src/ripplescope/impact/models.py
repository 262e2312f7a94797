"""Downstream impact results and their evidence."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..paths import CanonicalPath


class EvidenceTier(str, Enum):
    """Which strategy located the evidence line, best first."""

    USAGE = "usage"
    TEXT = "text"
    IMPORT = "import"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Evidence:
    """Where a downstream file depends on the change.

    ``line`` is 0-based and is None exactly when the tier is UNKNOWN.
    """

    tier: EvidenceTier
    line: Optional[int] = None

    def __post_init__(self) -> None:
        if (self.line is None) != (self.tier is EvidenceTier.UNKNOWN):
            raise ValueError(f"evidence tier {self.tier.value} with line {self.line}")
        if self.line is not None and self.line < 0:
            raise ValueError("evidence line must be non-negative")

    @classmethod
    def unknown(cls) -> Evidence:
        return cls(EvidenceTier.UNKNOWN)

    @property
    def is_known(self) -> bool:
        return self.line is not None

    def to_dict(self) -> dict[str, Any]:
        return {"tier": self.tier.value, "line": self.line}


@dataclass(frozen=True)
class DownstreamResult:
    """One affected file.

    ``depth`` is the import distance from the changed file (1 for direct
    importers). ``via_reexport`` marks modules that forward the changed
    names to their own importers.
    """

    file_path: CanonicalPath
    evidence: Evidence
    depth: int
    via_reexport: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": str(self.file_path),
            "evidence": self.evidence.to_dict(),
            "depth": self.depth,
            "via_reexport": self.via_reexport,
        }


@dataclass(frozen=True)
class DownstreamImpact:
    """Outcome of one downstream resolution.

    ``attempted`` is False only for the ``not_attempted()`` value, which
    stands for "resolution was never run" and differs from an attempted
    resolution that found nothing.
    """

    changed_file: Optional[CanonicalPath] = None
    results: tuple[DownstreamResult, ...] = ()
    impacted_names: Optional[tuple[str, ...]] = None
    attempted: bool = True
    complete: bool = True

    @classmethod
    def not_attempted(cls, changed_file: Optional[str] = None) -> DownstreamImpact:
        return cls(
            changed_file=CanonicalPath(changed_file) if changed_file else None,
            attempted=False,
        )

    @property
    def files(self) -> list[CanonicalPath]:
        return [r.file_path for r in self.results]

    def get(self, path: str) -> Optional[DownstreamResult]:
        key = CanonicalPath(path)
        for result in self.results:
            if result.file_path == key:
                return result
        return None

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "changed_file": str(self.changed_file) if self.changed_file else None,
            "attempted": self.attempted,
            "complete": self.complete,
            "impacted_names": list(self.impacted_names) if self.impacted_names is not None else None,
            "results": [r.to_dict() for r in self.results],
        }
