"""Module specifier resolution.

Two tiers, tried in order by the graph builder:

  ModuleResolver    tsconfig-aware: ``paths`` aliases, ``baseUrl``,
                    workspace packages, directory index and extension
                    probing (including ``./x.js`` written for ``x.ts``).
  RelativeResolver  relative specifiers with extension and index
                    probing only.

Both raise ``ResolutionError`` when a specifier does not land on a file.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import ResolutionError
from ..paths import CanonicalPath
from ..scanning.languages import JS_TO_TS_EXTENSIONS, RESOLUTION_EXTENSIONS, SKIP_DIRS

logger = logging.getLogger(__name__)

TSCONFIG_NAME = "tsconfig.json"
PACKAGE_ENTRY_FIELDS = ("types", "typings", "module", "main", "source")

_JSONC_TOKENS = re.compile(
    r'"(?:\\.|[^"\\])*"'  # string literal, kept as is
    r"|//[^\n]*"  # line comment
    r"|/\*.*?\*/",  # block comment
    re.DOTALL,
)
_TRAILING_COMMA = re.compile(r'("(?:\\.|[^"\\])*")|,(\s*[}\]])')


def parse_jsonc(text: str) -> Any:
    """Parse JSON with comments and trailing commas, as tsconfig allows."""

    def _strip_comment(match: re.Match) -> str:
        token = match.group(0)
        return token if token.startswith('"') else ""

    def _strip_comma(match: re.Match) -> str:
        return match.group(1) if match.group(1) is not None else match.group(2)

    without_comments = _JSONC_TOKENS.sub(_strip_comment, text)
    return json.loads(_TRAILING_COMMA.sub(_strip_comma, without_comments))


# ── tsconfig ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class TsConfig:
    """The parts of a tsconfig that affect module resolution.

    ``paths`` maps each pattern to its substitutions, already made
    absolute against ``baseUrl`` (or the declaring config's directory).
    """

    path: Optional[CanonicalPath] = None
    base_url: Optional[CanonicalPath] = None
    paths: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.base_url is None and not self.paths


def find_tsconfig(start: str) -> Optional[CanonicalPath]:
    """Walk up from ``start`` to the nearest directory holding a tsconfig.json."""
    current = CanonicalPath(start)
    while True:
        candidate = os.path.join(current, TSCONFIG_NAME)
        if os.path.isfile(candidate):
            return CanonicalPath(candidate)
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _read_compiler_options(
    path: str, seen: set[str]
) -> tuple[Optional[str], dict[str, tuple[str, ...]]]:
    """Return (baseUrl, paths) for ``path`` after applying its ``extends`` chain."""
    if path in seen:
        logger.debug("Circular tsconfig extends at %s", path)
        return None, {}
    seen.add(path)

    with open(path, encoding="utf-8") as f:
        data = parse_jsonc(f.read())
    if not isinstance(data, dict):
        return None, {}

    config_dir = os.path.dirname(path)
    base_url: Optional[str] = None
    paths: dict[str, tuple[str, ...]] = {}

    extends = data.get("extends")
    parents = extends if isinstance(extends, list) else [extends] if extends else []
    for parent in parents:
        if not isinstance(parent, str) or not parent.startswith("."):
            logger.debug("Ignoring non-relative tsconfig extends %r in %s", parent, path)
            continue
        parent_path = os.path.normpath(os.path.join(config_dir, parent))
        if not parent_path.endswith(".json"):
            parent_path += ".json"
        if not os.path.isfile(parent_path):
            logger.debug("tsconfig extends target missing: %s", parent_path)
            continue
        parent_base, parent_paths = _read_compiler_options(parent_path, seen)
        base_url = parent_base or base_url
        if parent_paths:
            paths = parent_paths

    options = data.get("compilerOptions") or {}
    if isinstance(options.get("baseUrl"), str):
        base_url = os.path.normpath(os.path.join(config_dir, options["baseUrl"]))
    if isinstance(options.get("paths"), dict):
        anchor = base_url or config_dir
        paths = {
            pattern: tuple(
                os.path.normpath(os.path.join(anchor, target))
                for target in targets
                if isinstance(target, str)
            )
            for pattern, targets in options["paths"].items()
            if isinstance(targets, list)
        }
    return base_url, paths


def load_tsconfig(path: Optional[str]) -> TsConfig:
    """Load the resolution settings of a tsconfig; an unreadable one counts as absent."""
    if path is None:
        return TsConfig()
    try:
        base_url, paths = _read_compiler_options(os.path.abspath(path), set())
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable tsconfig %s: %s", path, e)
        return TsConfig()
    return TsConfig(
        path=CanonicalPath(path),
        base_url=CanonicalPath(base_url) if base_url else None,
        paths=paths,
    )


# ── Workspace packages ────────────────────────────────────────────


def discover_workspace_packages(
    root: str, skip_dirs: tuple[str, ...] = SKIP_DIRS
) -> dict[str, CanonicalPath]:
    """Map ``package.json`` names found under ``root`` to their directories."""
    packages: dict[str, CanonicalPath] = {}
    skipped = set(skip_dirs)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in skipped and not d.startswith("."))
        if "package.json" not in filenames:
            continue
        manifest = os.path.join(dirpath, "package.json")
        try:
            with open(manifest, encoding="utf-8") as f:
                name = json.load(f).get("name")
        except (OSError, ValueError, AttributeError) as e:
            logger.debug("Skipping unreadable %s: %s", manifest, e)
            continue
        if isinstance(name, str) and name and name not in packages:
            packages[name] = CanonicalPath(dirpath)
    return packages


# ── Probing ───────────────────────────────────────────────────────


class _Prober:
    """Extension and index probing with a per-instance file-existence cache."""

    def __init__(self) -> None:
        self._isfile: dict[str, bool] = {}
        self._isdir: dict[str, bool] = {}

    def isfile(self, path: str) -> bool:
        cached = self._isfile.get(path)
        if cached is None:
            cached = os.path.isfile(path)
            self._isfile[path] = cached
        return cached

    def isdir(self, path: str) -> bool:
        cached = self._isdir.get(path)
        if cached is None:
            cached = os.path.isdir(path)
            self._isdir[path] = cached
        return cached

    def probe(self, candidate: str) -> Optional[CanonicalPath]:
        """Resolve ``candidate`` the way TypeScript's bundler resolution would."""
        lower = candidate.lower()
        if lower.endswith(RESOLUTION_EXTENSIONS) and self.isfile(candidate):
            return CanonicalPath(candidate)

        stem, ext = os.path.splitext(candidate)
        for ts_ext in JS_TO_TS_EXTENSIONS.get(ext.lower(), ()):
            if self.isfile(stem + ts_ext):
                return CanonicalPath(stem + ts_ext)

        for ext in RESOLUTION_EXTENSIONS:
            if self.isfile(candidate + ext):
                return CanonicalPath(candidate + ext)

        if self.isdir(candidate):
            return self.probe_directory(candidate)
        return None

    def probe_directory(self, directory: str) -> Optional[CanonicalPath]:
        manifest = os.path.join(directory, "package.json")
        if self.isfile(manifest):
            entry = self._package_entry(directory, manifest)
            if entry is not None:
                return entry
        for ext in RESOLUTION_EXTENSIONS:
            index = os.path.join(directory, "index" + ext)
            if self.isfile(index):
                return CanonicalPath(index)
        return None

    def _package_entry(self, directory: str, manifest: str) -> Optional[CanonicalPath]:
        try:
            with open(manifest, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.debug("Unreadable %s: %s", manifest, e)
            return None
        if not isinstance(data, dict):
            return None
        for key in PACKAGE_ENTRY_FIELDS:
            value = data.get(key)
            if not isinstance(value, str) or not value:
                continue
            target = os.path.normpath(os.path.join(directory, value))
            if target == os.path.normpath(directory):
                continue
            resolved = self.probe(target)
            if resolved is not None:
                return resolved
        return None


def _is_relative(specifier: str) -> bool:
    return specifier.startswith(("./", "../")) or specifier in (".", "..")


def _importer_dir(importer: str) -> str:
    return os.path.dirname(importer)


# ── Resolvers ─────────────────────────────────────────────────────


class RelativeResolver:
    """Fallback resolver: relative specifiers only."""

    def __init__(self) -> None:
        self._prober = _Prober()

    def resolve(self, specifier: str, importer: str) -> CanonicalPath:
        if not _is_relative(specifier) and not os.path.isabs(specifier):
            raise ResolutionError(specifier, importer, "not a relative specifier")
        candidate = os.path.normpath(os.path.join(_importer_dir(importer), specifier))
        resolved = self._prober.probe(candidate)
        if resolved is None:
            raise ResolutionError(specifier, importer, "no matching file")
        return resolved


class ModuleResolver:
    """Primary resolver following the project's tsconfig and workspace layout.

    Args:
        tsconfig: Resolution settings (``TsConfig()`` for none).
        packages: Workspace package name to directory.
    """

    def __init__(
        self,
        tsconfig: Optional[TsConfig] = None,
        packages: Optional[dict[str, CanonicalPath]] = None,
    ) -> None:
        self.tsconfig = tsconfig or TsConfig()
        self.packages = packages or {}
        self._prober = _Prober()
        # Longest prefix first, the way tsc picks among matching patterns.
        self._patterns = sorted(
            self.tsconfig.paths.items(),
            key=lambda item: len(item[0].split("*", 1)[0]),
            reverse=True,
        )

    def resolve(self, specifier: str, importer: str) -> CanonicalPath:
        if not specifier:
            raise ResolutionError(specifier, importer, "empty specifier")

        if _is_relative(specifier) or os.path.isabs(specifier):
            candidate = os.path.normpath(os.path.join(_importer_dir(importer), specifier))
            resolved = self._prober.probe(candidate)
            if resolved is None:
                raise ResolutionError(specifier, importer, "no matching file")
            return resolved

        for candidate in self._path_alias_candidates(specifier):
            resolved = self._prober.probe(candidate)
            if resolved is not None:
                return resolved

        if self.tsconfig.base_url is not None:
            resolved = self._prober.probe(os.path.join(self.tsconfig.base_url, specifier))
            if resolved is not None:
                return resolved

        resolved = self._workspace_package(specifier)
        if resolved is not None:
            return resolved

        raise ResolutionError(specifier, importer, "bare specifier outside the project")

    def _path_alias_candidates(self, specifier: str) -> list[str]:
        for pattern, targets in self._patterns:
            if "*" in pattern:
                prefix, _, suffix = pattern.partition("*")
                if not (
                    specifier.startswith(prefix)
                    and specifier.endswith(suffix)
                    and len(specifier) >= len(prefix) + len(suffix)
                ):
                    continue
                matched = specifier[len(prefix) : len(specifier) - len(suffix)]
                return [t.replace("*", matched, 1) for t in targets]
            if pattern == specifier:
                return list(targets)
        return []

    def _workspace_package(self, specifier: str) -> Optional[CanonicalPath]:
        parts = specifier.split("/")
        name_len = 2 if specifier.startswith("@") and len(parts) > 1 else 1
        name = "/".join(parts[:name_len])
        directory = self.packages.get(name)
        if directory is None:
            return None
        subpath = "/".join(parts[name_len:])
        if subpath:
            return self._prober.probe(os.path.join(directory, subpath))
        return self._prober.probe_directory(directory)


def build_resolvers(
    root: str, tsconfig_path: Optional[str] = None, skip_dirs: tuple[str, ...] = SKIP_DIRS
) -> tuple[ModuleResolver, RelativeResolver]:
    """Create the primary and fallback resolvers for a project root."""
    config_path = tsconfig_path or find_tsconfig(root)
    tsconfig = load_tsconfig(config_path)
    packages = discover_workspace_packages(root, skip_dirs)
    if tsconfig.path is not None:
        logger.debug(
            "Using %s (baseUrl=%s, %d path patterns)",
            tsconfig.path,
            tsconfig.base_url,
            len(tsconfig.paths),
        )
    if packages:
        logger.debug("Workspace packages: %s", ", ".join(sorted(packages)))
    return ModuleResolver(tsconfig, packages), RelativeResolver()
