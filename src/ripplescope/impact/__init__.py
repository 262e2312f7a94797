"""Downstream impact: which files a change reaches, and where."""

from .models import DownstreamImpact, DownstreamResult, Evidence, EvidenceTier
from .resolver import find_carriers, find_downstream
from .usage import ConsumerUsage, scan_consumer

__all__ = [
    "find_downstream",
    "find_carriers",
    "scan_consumer",
    "ConsumerUsage",
    "DownstreamImpact",
    "DownstreamResult",
    "Evidence",
    "EvidenceTier",
]
