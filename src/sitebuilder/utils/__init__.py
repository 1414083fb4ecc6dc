"""
Utility modules for path handling and logging.

This package provides:
- Path utilities for file system operations and byte-faithful text reads
- Logging setup for build progress output

Examples:
    >>> from sitebuilder.utils import normalize_path, setup_logger
    >>> source = normalize_path("~/site")
    >>> logger = setup_logger("sitebuilder")
"""

from .path_utils import (
    # Type alias
    PathLike,
    # Path normalization and resolution
    normalize_path,
    get_relative_path,
    is_inside,
    # Directory operations
    ensure_directory,
    recreate_directory,
    # File operations
    get_file_extension,
    read_text,
)

from .logger import (
    setup_logger,
    get_logger,
    VALID_LOG_LEVELS,
)

__all__ = [
    # Type alias
    "PathLike",
    # Path utilities
    "normalize_path",
    "get_relative_path",
    "is_inside",
    "ensure_directory",
    "recreate_directory",
    "get_file_extension",
    "read_text",
    # Logger
    "setup_logger",
    "get_logger",
    "VALID_LOG_LEVELS",
]
