"""Analysis-related exceptions: file access, parsing, module resolution.

None of these escape a scan. The snapshot builder turns ``ParsingError``
into a degraded snapshot, the graph builder drops edges that raise
``ResolutionError`` and skips files that raise ``FileAccessError``.
"""

from pathlib import Path
from typing import Union

from .base import RippleScopeError


class AnalysisError(RippleScopeError):
    """Base class for analysis-related errors."""

    pass


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed or read."""

    def __init__(self, filepath: Union[str, Path], reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ParsingError(AnalysisError):
    """Raised when file content cannot be parsed."""

    def __init__(self, filepath: Union[str, Path], language: str, reason: str):
        super().__init__(
            f"Failed to parse {language} file: {filepath}",
            details={"filepath": str(filepath), "language": language, "reason": reason},
        )
        self.filepath = filepath
        self.language = language
        self.reason = reason


class ResolutionError(AnalysisError):
    """Raised when an import specifier does not resolve to a file on disk."""

    def __init__(self, specifier: str, importer: Union[str, Path], reason: str):
        super().__init__(
            f"Cannot resolve '{specifier}'",
            details={"importer": str(importer), "reason": reason},
        )
        self.specifier = specifier
        self.importer = importer
        self.reason = reason
