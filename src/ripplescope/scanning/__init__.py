"""Source parsing: tree-sitter structural tier and regex textual tier."""

from .fallback import RegexFallbackScanner, TextualReExport
from .languages import (
    LANGUAGES,
    SKIP_DIRS,
    SOURCE_EXTENSIONS,
    LanguageConfig,
    is_source_file,
    is_test_file,
    language_for_path,
)
from .treesitter_parser import TreeSitterParser, get_supported_languages

__all__ = [
    "RegexFallbackScanner",
    "TextualReExport",
    "LANGUAGES",
    "SKIP_DIRS",
    "SOURCE_EXTENSIONS",
    "LanguageConfig",
    "is_source_file",
    "is_test_file",
    "language_for_path",
    "TreeSitterParser",
    "get_supported_languages",
]
