"""
Safe file operations for ripplescope.

Provides size-limited reads and the project walk used by graph construction.
"""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Optional, Union

from .exceptions import FileAccessError
from .scanning.languages import SOURCE_EXTENSIONS, is_source_file


def safe_read_file(
    filepath: Union[str, Path],
    max_bytes: Optional[int] = None,
    encoding: str = "utf-8",
    errors: str = "replace",
) -> str:
    """
    Read a file as text, refusing files larger than ``max_bytes``.

    Args:
        filepath: File to read
        max_bytes: Size limit (None disables the check)
        encoding: Text encoding
        errors: How to handle encoding errors

    Returns:
        File contents as string

    Raises:
        FileAccessError: If the file cannot be read or is too large
    """
    try:
        if max_bytes is not None:
            size = os.path.getsize(filepath)
            if size > max_bytes:
                raise FileAccessError(filepath, f"File too large ({size} > {max_bytes} bytes)")
        with open(filepath, encoding=encoding, errors=errors) as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise FileAccessError(filepath, f"Encoding error: {e}")
    except OSError as e:
        raise FileAccessError(filepath, f"OS error: {e}")


def iter_source_files(
    root_dir: Union[str, Path],
    skip_dirs: tuple[str, ...] = (),
    extensions: tuple[str, ...] = SOURCE_EXTENSIONS,
    follow_symlinks: bool = False,
) -> Generator[str, None, None]:
    """
    Walk ``root_dir`` yielding source file paths in a stable order.

    Directories named in ``skip_dirs`` and hidden directories are pruned.

    Args:
        root_dir: Directory to scan
        skip_dirs: Directory names never descended into
        extensions: File suffixes that count as source
        follow_symlinks: Whether to follow symbolic links

    Yields:
        Absolute file paths
    """
    skipped = set(skip_dirs)
    for dirpath, dirnames, filenames in os.walk(root_dir, followlinks=follow_symlinks):
        dirnames[:] = sorted(d for d in dirnames if d not in skipped and not d.startswith("."))
        for filename in sorted(filenames):
            if not is_source_file(filename, extensions):
                continue
            path = os.path.join(dirpath, filename)
            if not follow_symlinks and os.path.islink(path):
                continue
            yield os.path.abspath(path)
