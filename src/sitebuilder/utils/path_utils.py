"""
Path utilities for the build pipeline.

All functions use pathlib.Path. Text helpers read UTF-8 with surrogate
escapes for invalid bytes and newline translation disabled, so files the
build leaves untouched come out byte for byte identical to their source.

Examples:
    >>> from sitebuilder.utils.path_utils import normalize_path, get_file_extension
    >>> normalize_path("~/site")
    PosixPath('/home/user/site')
    >>> get_file_extension(Path("Index.HTML"))
    '.html'
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Union

# Type alias for path-like objects
PathLike = Union[str, Path]


def normalize_path(path: PathLike) -> Path:
    """
    Convert a string or Path object to a normalized absolute Path.

    Args:
        path: A file system path as string or Path object.

    Returns:
        Normalized absolute Path object.

    Raises:
        ValueError: If path is empty or None.
    """
    if path is None or (isinstance(path, str) and not path.strip()):
        raise ValueError("Path cannot be None or empty")

    return Path(path).expanduser().resolve()


def ensure_directory(path: Path) -> Path:
    """
    Create directory (and parents) if it doesn't exist, return Path.

    Raises:
        OSError: If directory creation fails.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def recreate_directory(path: Path) -> Path:
    """
    Delete *path* recursively if it exists, then create it empty.

    Raises:
        OSError: If removal or creation fails.
    """
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def get_relative_path(path: Path, base: Path) -> Path:
    """
    Get relative path from base directory.

    Examples:
        >>> get_relative_path(Path("/site/js/app.js"), Path("/site"))
        PosixPath('js/app.js')
    """
    return Path(os.path.relpath(path, base))


def is_inside(path: Path, base: Path) -> bool:
    """
    Return True if *path* resolves to *base* or somewhere below it.

    Examples:
        >>> is_inside(Path("/site/dist"), Path("/site"))
        True
        >>> is_inside(Path("/tmp/dist"), Path("/site"))
        False
    """
    try:
        path.resolve().relative_to(base.resolve())
        return True
    except (ValueError, OSError):
        return False


def get_file_extension(path: PathLike) -> str:
    """
    Extract the lower-cased file extension including the dot.

    Returns:
        File extension (e.g., ".js"). Empty string if no extension.
    """
    return Path(path).suffix.lower()


def read_text(path: Path) -> str:
    """Read a UTF-8 text file without newline translation.

    Bytes that are not valid UTF-8 decode to surrogate escapes, so writing
    the text back with ``errors="surrogateescape"`` restores them.
    """
    with open(path, "r", encoding="utf-8", newline="", errors="surrogateescape") as handle:
        return handle.read()
