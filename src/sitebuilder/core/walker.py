"""Recursive source tree walk."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

from sitebuilder.core.exclusion import ExclusionFilter
from sitebuilder.utils.logger import get_logger
from sitebuilder.utils.path_utils import PathLike

logger = get_logger("sitebuilder.core.walker")

# Called with (absolute source path, path relative to the walk root)
FileVisitor = Callable[[Path, Path], object]


class DirectoryWalker:
    """Visits every non-excluded file below a root directory.

    Entries are visited in ``os.listdir`` order, which is not sorted and
    depends on the filesystem. Excluded directories are not entered.

    Example:
        >>> walker = DirectoryWalker(Path("site"), rules, transformer.transform)
        >>> walker.walk()
        12
    """

    def __init__(
        self,
        root: PathLike,
        exclusion_filter: ExclusionFilter,
        visitor: FileVisitor,
    ) -> None:
        self.root = Path(root)
        self.exclusion_filter = exclusion_filter
        self.visitor = visitor

    def walk(self) -> int:
        """Walk the tree and return the number of files visited.

        Raises:
            OSError: If a directory cannot be listed or an entry cannot be
                inspected.
        """
        return self._walk_directory(self.root)

    def _walk_directory(self, directory: Path) -> int:
        visited = 0
        for name in os.listdir(directory):
            full_path = directory / name

            if self.exclusion_filter.is_excluded(full_path):
                logger.debug(f"Excluded {full_path}")
                continue

            if full_path.is_dir():
                visited += self._walk_directory(full_path)
            else:
                relative_path = Path(os.path.relpath(full_path, self.root))
                self.visitor(full_path, relative_path)
                visited += 1
        return visited
