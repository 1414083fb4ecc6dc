"""Exclusion rules for the source tree walk."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from sitebuilder.utils.logger import get_logger
from sitebuilder.utils.path_utils import PathLike

logger = get_logger("sitebuilder.core.exclusion")


class ExclusionFilter:
    """Decides whether a file or directory under the source root is skipped.

    A path is excluded when, relative to the source root, it equals an entry,
    lies below an entry (``entry + os.sep`` prefix), or its basename equals
    an entry. Matching is literal and case-sensitive.

    Example:
        >>> rules = ExclusionFilter(Path("/site"), ["node_modules", "README.md"])
        >>> rules.is_excluded(Path("/site/node_modules/lib/index.js"))
        True
        >>> rules.is_excluded(Path("/site/docs/README.md"))
        True
    """

    def __init__(self, source_root: PathLike, entries: Iterable[str]) -> None:
        self.source_root = Path(source_root)
        # Entries may be written with "/" in configuration files
        self.entries: list[str] = [
            os.path.normpath(entry.replace("/", os.sep)) for entry in entries
        ]

    def add(self, entry: str) -> None:
        """Add an entry after construction (e.g. the output root)."""
        normalized = os.path.normpath(entry.replace("/", os.sep))
        if normalized not in self.entries:
            self.entries.append(normalized)
            logger.debug(f"Exclusion entry added: {normalized}")

    def is_excluded(self, path: PathLike) -> bool:
        relative = os.path.relpath(path, self.source_root)
        basename = os.path.basename(path)
        return any(
            relative == entry
            or relative.startswith(entry + os.sep)
            or basename == entry
            for entry in self.entries
        )
