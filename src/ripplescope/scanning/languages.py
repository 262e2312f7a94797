"""Language configuration: which files are scanned and which grammar parses them."""

from __future__ import annotations

from dataclasses import dataclass

TYPESCRIPT = "typescript"
TSX = "tsx"


@dataclass(frozen=True)
class LanguageConfig:
    """Everything the scanner needs to know about a source dialect."""

    name: str
    grammar: str
    extensions: tuple[str, ...]


LANGUAGES: tuple[LanguageConfig, ...] = (
    LanguageConfig(name="typescript", grammar=TYPESCRIPT, extensions=(".ts", ".mts", ".cts")),
    LanguageConfig(name="tsx", grammar=TSX, extensions=(".tsx",)),
    LanguageConfig(name="javascript", grammar=TSX, extensions=(".js", ".jsx", ".mjs", ".cjs")),
)

SOURCE_EXTENSIONS: tuple[str, ...] = tuple(ext for lang in LANGUAGES for ext in lang.extensions)

# Extension probing order used by module resolution.
RESOLUTION_EXTENSIONS: tuple[str, ...] = (
    ".ts",
    ".tsx",
    ".d.ts",
    ".mts",
    ".cts",
    ".js",
    ".jsx",
    ".mjs",
    ".cjs",
)

# Output extensions written in specifiers that map back to a TS source.
JS_TO_TS_EXTENSIONS: dict[str, tuple[str, ...]] = {
    ".js": (".ts", ".tsx", ".d.ts"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}

SKIP_DIRS: tuple[str, ...] = (
    "node_modules",
    ".git",
    ".vscode",
    "dist",
    "build",
    "coverage",
    ".nyc_output",
    "target",
    "bin",
    "obj",
    ".next",
    ".nuxt",
    "vendor",
    "__pycache__",
)

TEST_FILE_MARKERS: tuple[str, ...] = (".test.", ".spec.")
TEST_DIR_NAMES: tuple[str, ...] = ("__tests__",)


def language_for_path(path: str) -> LanguageConfig:
    """Pick the dialect for ``path``; unknown extensions parse as TSX."""
    lower = path.lower()
    for lang in LANGUAGES:
        if lower.endswith(lang.extensions):
            return lang
    return LANGUAGES[1]


def is_source_file(path: str, extensions: tuple[str, ...] = SOURCE_EXTENSIONS) -> bool:
    return path.lower().endswith(extensions)


def is_test_file(path: str) -> bool:
    normalized = path.replace("\\", "/")
    name = normalized.rsplit("/", 1)[-1]
    if any(marker in name for marker in TEST_FILE_MARKERS):
        return True
    return any(f"/{d}/" in normalized for d in TEST_DIR_NAMES)
