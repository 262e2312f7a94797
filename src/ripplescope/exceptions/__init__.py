"""Exception hierarchy for ripplescope."""

from .analysis import (
    AnalysisError,
    FileAccessError,
    ParsingError,
    ResolutionError,
)
from .base import RippleScopeError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)

__all__ = [
    "RippleScopeError",
    "AnalysisError",
    "FileAccessError",
    "ParsingError",
    "ResolutionError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidPathError",
]
